import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

DEFAULT_MANIFEST_URL = "https://launchermeta.mojang.com/mc/game/version_manifest.json"
DEFAULT_RESOURCES_URL = "https://resources.download.minecraft.net"


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    """Runtime configuration shared by the resolver, loaders and downloader."""

    model_config = ConfigDict(frozen=True)

    manifest_url: str = DEFAULT_MANIFEST_URL
    resources_url: str = DEFAULT_RESOURCES_URL
    http_timeout: float = 30.0
    download_dir: str = "source/versions"
    log_level: str = "INFO"
    verify_downloads: bool = False

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "Settings":
        """
        Builds settings from environment variables (and a .env file if present).

        Args:
            env_file: Optional explicit path to a .env file
        """
        load_dotenv(env_file)

        return cls(
            manifest_url=os.getenv("PISTON_MANIFEST_URL", DEFAULT_MANIFEST_URL),
            resources_url=os.getenv("PISTON_RESOURCES_URL", DEFAULT_RESOURCES_URL).rstrip("/"),
            http_timeout=float(os.getenv("PISTON_HTTP_TIMEOUT", "30")),
            download_dir=os.getenv("PISTON_DOWNLOAD_DIR", "source/versions"),
            log_level=os.getenv("PISTON_LOG_LEVEL", "INFO").upper(),
            verify_downloads=_env_bool("PISTON_VERIFY_DOWNLOADS"),
        )
