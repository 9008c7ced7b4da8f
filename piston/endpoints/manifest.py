import logging
from typing import List, Optional

import httpx

from piston.config import DEFAULT_MANIFEST_URL, Settings
from piston.core.http import DEFAULT_TIMEOUT, fetch_document, open_client
from piston.errors import NotFound
from piston.schemas import VersionManifest, VersionSummary

logger = logging.getLogger(__name__)

RELEASE_ALIASES = ("latest", "latest-release", "release")
SNAPSHOT_ALIASES = ("latest-snapshot", "snapshot")


class ManifestResolver:
    """Fetches the version manifest and resolves ids or aliases to version summaries."""

    def __init__(
        self,
        manifest_url: str = DEFAULT_MANIFEST_URL,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.manifest_url = manifest_url
        self.client = client
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings, client: Optional[httpx.AsyncClient] = None) -> "ManifestResolver":
        return cls(settings.manifest_url, client=client, timeout=settings.http_timeout)

    # ==========================================
    # FETCH
    # ==========================================

    async def fetch_manifest(self, url: Optional[str] = None) -> VersionManifest:
        """Fetches the manifest from `url` (or the configured manifest URL)."""
        async with open_client(self.client, self.timeout) as client:
            manifest = await fetch_document(client, url or self.manifest_url, VersionManifest, stage="manifest")
        logger.info(
            f"Manifest lists {len(manifest.versions)} versions "
            f"(release={manifest.latest.release}, snapshot={manifest.latest.snapshot})"
        )
        return manifest

    # ==========================================
    # RESOLVE
    # ==========================================

    @staticmethod
    def resolve(manifest: VersionManifest, version_id: str) -> VersionSummary:
        for entry in manifest.versions:
            if entry.id == version_id:
                return entry
        raise NotFound(f"Version '{version_id}' does not exist in the manifest", stage="manifest")

    @classmethod
    def resolve_latest_release(cls, manifest: VersionManifest) -> VersionSummary:
        # A miss here means the manifest's alias points at a missing id.
        return cls.resolve(manifest, manifest.latest.release)

    @classmethod
    def resolve_latest_snapshot(cls, manifest: VersionManifest) -> VersionSummary:
        return cls.resolve(manifest, manifest.latest.snapshot)

    @classmethod
    def resolve_alias(cls, manifest: VersionManifest, name: str) -> VersionSummary:
        """Resolves a concrete id or one of the 'latest' aliases."""
        key = name.strip().lower()
        if key in RELEASE_ALIASES:
            return cls.resolve_latest_release(manifest)
        if key in SNAPSHOT_ALIASES:
            return cls.resolve_latest_snapshot(manifest)
        return cls.resolve(manifest, name.strip())

    @classmethod
    def version_url(cls, manifest: VersionManifest, version_id: str) -> str:
        return cls.resolve(manifest, version_id).url

    @staticmethod
    def list_versions(manifest: VersionManifest, version_type: Optional[str] = None) -> List[VersionSummary]:
        if version_type is None:
            return list(manifest.versions)
        return [v for v in manifest.versions if v.type == version_type]
