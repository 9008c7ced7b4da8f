import asyncio
import logging
import os
import zipfile
from typing import List, Union

from piston.errors import ArchiveFormatError, FileSystemError

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


class ArchiveExtractor:
    """Expands zip-format containers (jars included) into a directory tree."""

    def extract_sync(self, archive_path: PathLike, destination: PathLike) -> List[str]:
        """Extracts every entry of `archive_path` under `destination`; returns the entry names."""
        archive_path = os.fspath(archive_path)
        destination = os.fspath(destination)

        try:
            zip_ref = zipfile.ZipFile(archive_path, "r")
        except zipfile.BadZipFile as e:
            raise ArchiveFormatError(
                f"{archive_path} is not a valid archive: {e}", stage="extract"
            ) from e
        except OSError as e:
            raise FileSystemError(f"Cannot read {archive_path}: {e}", stage="extract") from e

        with zip_ref:
            names = zip_ref.namelist()
            try:
                os.makedirs(destination, exist_ok=True)
                # Entry paths are used as-is; no containment check.
                zip_ref.extractall(destination)
            except (zipfile.BadZipFile, NotImplementedError) as e:
                raise ArchiveFormatError(
                    f"Corrupt entry in {archive_path}: {e}", stage="extract"
                ) from e
            except OSError as e:
                raise FileSystemError(
                    f"Error extracting {archive_path} to {destination}: {e}", stage="extract"
                ) from e

        logger.info(f"Extracted {len(names)} entries from {archive_path} to {destination}")
        return names

    async def extract(self, archive_path: PathLike, destination: PathLike) -> None:
        """Async wrapper running the extraction off the event loop."""
        await asyncio.to_thread(self.extract_sync, archive_path, destination)
