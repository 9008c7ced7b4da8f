import logging
from typing import Optional

import httpx

from piston.config import DEFAULT_RESOURCES_URL
from piston.core.http import DEFAULT_TIMEOUT, fetch_document, open_client
from piston.schemas import Asset, AssetIndex, DownloadDescriptor, VersionDescriptor

logger = logging.getLogger(__name__)


class AssetIndexLoader:
    """
    Loads the asset index referenced by a version descriptor.

    Indexes can hold tens of thousands of objects; the body is streamed into
    one buffer and validated from bytes, without an intermediate dict.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_TIMEOUT,
        resources_url: str = DEFAULT_RESOURCES_URL,
    ):
        self.client = client
        self.timeout = timeout
        self.resources_url = resources_url.rstrip("/")

    async def load(self, descriptor: VersionDescriptor) -> AssetIndex:
        ref = descriptor.assetIndex
        async with open_client(self.client, self.timeout) as client:
            index = await fetch_document(client, ref.url, AssetIndex, stage="assets")
        logger.info(f"Asset index {ref.id} for {descriptor.id}: {len(index.objects)} objects")
        return index

    def asset_url(self, asset: Asset) -> str:
        return f"{self.resources_url}/{asset.object_path}"

    def asset_download(self, asset: Asset) -> DownloadDescriptor:
        """Download descriptor for an asset object (its hash is its SHA-1)."""
        return DownloadDescriptor(sha1=asset.hash, size=asset.size, url=self.asset_url(asset))
