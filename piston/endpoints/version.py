import logging
from typing import Optional

import httpx

from piston.core.http import DEFAULT_TIMEOUT, fetch_document, open_client
from piston.schemas import VersionDescriptor, VersionSummary

logger = logging.getLogger(__name__)


class VersionDescriptorLoader:
    """Loads the full descriptor a manifest entry points at."""

    def __init__(self, client: Optional[httpx.AsyncClient] = None, timeout: float = DEFAULT_TIMEOUT):
        self.client = client
        self.timeout = timeout

    async def load(self, url: str) -> VersionDescriptor:
        async with open_client(self.client, self.timeout) as client:
            descriptor = await fetch_document(client, url, VersionDescriptor, stage="version")
        logger.info(
            f"Loaded version {descriptor.id}: {len(descriptor.libraries)} libraries, "
            f"downloads={sorted(descriptor.downloads)}"
        )
        return descriptor

    async def load_summary(self, summary: VersionSummary) -> VersionDescriptor:
        return await self.load(summary.url)
