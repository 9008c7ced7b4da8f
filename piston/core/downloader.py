import hashlib
import logging
import os
from typing import Optional, Union

import aiofiles
import aiofiles.os
import httpx

from piston.core.http import DEFAULT_TIMEOUT, open_client
from piston.errors import FileSystemError, IntegrityError, NetworkError, NotFound
from piston.schemas import DownloadDescriptor, VersionDescriptor

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


class ArtifactDownloader:
    """Writes the bytes behind a download descriptor to a local path."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_TIMEOUT,
        verify: bool = False,
    ):
        """
        Args:
            client: Shared HTTP client; a short-lived one is opened per call if omitted
            timeout: Timeout for short-lived clients
            verify: Check written size and SHA-1 against the descriptor
        """
        self.client = client
        self.timeout = timeout
        self.verify = verify

    async def download(self, descriptor: DownloadDescriptor, destination: PathLike) -> int:
        """
        Streams `descriptor.url` into `destination`, creating or overwriting it.

        The parent directory must already exist.

        Returns:
            Number of bytes written
        """
        url = descriptor.url
        destination = os.fspath(destination)
        digest = hashlib.sha1()
        written = 0
        opened = False

        logger.info(f"Downloading {url} -> {destination}")
        try:
            async with open_client(self.client, self.timeout) as client:
                async with client.stream("GET", url) as resp:
                    resp.raise_for_status()
                    # Buffered writes can fail on close, so close is inside the guard too.
                    try:
                        async with aiofiles.open(destination, "wb") as f:
                            opened = True
                            async for chunk in resp.aiter_bytes():
                                await f.write(chunk)
                                digest.update(chunk)
                                written += len(chunk)
                    except OSError as e:
                        logger.error(f"Writing {destination} failed: {e}")
                        if opened:
                            await self._discard(destination)
                        raise FileSystemError(
                            f"Error writing {destination}: {e}", stage="download", url=url
                        ) from e
        except httpx.HTTPStatusError as e:
            logger.error(f"Download of {url} failed with HTTP {e.response.status_code}")
            raise NetworkError(
                f"HTTP {e.response.status_code} downloading {url}", stage="download", url=url
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Download of {url} failed: {e}")
            if opened:
                await self._discard(destination)
            raise NetworkError(f"Error downloading {url}: {e}", stage="download", url=url) from e

        if self.verify:
            self._check_integrity(descriptor, written, digest.hexdigest(), destination)

        logger.info(f"Wrote {written} bytes to {destination}")
        return written

    async def download_kind(
        self, version: VersionDescriptor, kind: str, destination: PathLike
    ) -> int:
        """Downloads one of the version's primary artifacts (client, server, *_mappings)."""
        descriptor = version.downloads.get(kind)
        if descriptor is None:
            available = ", ".join(sorted(version.downloads)) or "none"
            raise NotFound(
                f"Version {version.id} has no '{kind}' download (available: {available})",
                stage="download",
            )
        return await self.download(descriptor, destination)

    async def _discard(self, destination: str):
        # Only regular files; never unlink a device node such as /dev/null.
        try:
            if await aiofiles.os.path.isfile(destination):
                await aiofiles.os.remove(destination)
        except OSError as e:
            logger.warning(f"Could not remove partial file {destination}: {e}")

    def _check_integrity(self, descriptor: DownloadDescriptor, written: int, sha1: str, destination: str):
        if written != descriptor.size:
            raise IntegrityError(
                f"{destination}: expected {descriptor.size} bytes, wrote {written}",
                stage="download",
                url=descriptor.url,
            )
        if sha1 != descriptor.sha1.lower():
            raise IntegrityError(
                f"{destination}: expected sha1 {descriptor.sha1}, got {sha1}",
                stage="download",
                url=descriptor.url,
            )
