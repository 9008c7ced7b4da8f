import asyncio
import logging
import os
import posixpath
from typing import Dict, List, Optional
from urllib.parse import urlparse

import aiofiles
import httpx
from pydantic import BaseModel

from piston.config import Settings
from piston.core.downloader import ArtifactDownloader
from piston.core.files import ArchiveExtractor
from piston.core.http import open_client
from piston.endpoints.assets import AssetIndexLoader
from piston.endpoints.manifest import ManifestResolver
from piston.endpoints.version import VersionDescriptorLoader
from piston.errors import AcquisitionError, FileSystemError, NotFound, PistonError
from piston.schemas import AssetIndex, DownloadDescriptor, VersionDescriptor
from piston.services.rules import rules_allow

logger = logging.getLogger(__name__)

PRIMARY_FILENAMES = {
    "client_mappings": "client.txt",
    "server": "server.jar",
    "server_mappings": "server.txt",
}


class PlannedDownload(BaseModel):
    name: str
    descriptor: DownloadDescriptor
    destination: str


class AcquisitionResult(BaseModel):
    version_id: str
    version_type: str
    descriptor_path: str
    asset_index_path: Optional[str] = None
    asset_count: int = 0
    downloaded: Dict[str, int] = {}
    bytes_total: int = 0
    extracted_dir: Optional[str] = None


class AcquisitionService:
    """
    Runs a whole version acquisition: manifest -> descriptor -> asset index ->
    artifact downloads -> optional client jar extraction.

    Layout under the target directory:
        versions/<id>/<id>.json, <id>.jar, server.jar, client.txt, server.txt
        libraries/<maven path>
        assets/indexes/<assets id>.json
        assets/objects/<hh>/<hash>
        assets/log_configs/<logging file id>
    """

    def __init__(self, settings: Optional[Settings] = None, client: Optional[httpx.AsyncClient] = None):
        self.settings = settings or Settings()
        self.client = client
        self.extractor = ArchiveExtractor()

    # ==========================================
    # PLANNING
    # ==========================================

    @staticmethod
    def primary_filename(version_id: str, kind: str, descriptor: DownloadDescriptor) -> str:
        if kind == "client":
            return f"{version_id}.jar"
        if kind in PRIMARY_FILENAMES:
            return PRIMARY_FILENAMES[kind]
        ext = posixpath.splitext(urlparse(descriptor.url).path)[1]
        return f"{kind}{ext}"

    def plan_downloads(
        self,
        descriptor: VersionDescriptor,
        index: Optional[AssetIndex],
        target_dir: str,
        include_server: bool = True,
        include_libraries: bool = True,
    ) -> List[PlannedDownload]:
        """Lists every artifact of the version with its destination; one entry per destination."""
        version_dir = os.path.join(target_dir, "versions", descriptor.id)
        planned: Dict[str, PlannedDownload] = {}

        def add(name: str, item: DownloadDescriptor, destination: str):
            # Two artifacts never share a destination; the first one wins.
            if destination not in planned:
                planned[destination] = PlannedDownload(name=name, descriptor=item, destination=destination)

        # 1. Primary binaries and mappings
        for kind, item in descriptor.downloads.items():
            if not include_server and kind.startswith("server"):
                continue
            add(kind, item, os.path.join(version_dir, self.primary_filename(descriptor.id, kind, item)))

        # 2. Libraries allowed on this platform
        if include_libraries:
            libraries_dir = os.path.join(target_dir, "libraries")
            for library in descriptor.libraries:
                if not rules_allow(library.rules):
                    logger.debug(f"Skipping {library.name}: excluded by rules")
                    continue
                artifact = library.artifact
                if artifact is None:
                    continue
                add(library.name, artifact, os.path.join(libraries_dir, *artifact.path.split("/")))

        # 3. Logging configuration
        if descriptor.logging is not None and descriptor.logging.client is not None:
            log_file = descriptor.logging.client.file
            add(log_file.id, log_file, os.path.join(target_dir, "assets", "log_configs", log_file.id))

        # 4. Asset objects
        if index is not None:
            loader = AssetIndexLoader(resources_url=self.settings.resources_url)
            objects_dir = os.path.join(target_dir, "assets", "objects")
            for name, asset in index.objects.items():
                add(name, loader.asset_download(asset), os.path.join(objects_dir, asset.hash[:2], asset.hash))

        return list(planned.values())

    # ==========================================
    # EXECUTION
    # ==========================================

    async def download_all(self, plan: List[PlannedDownload], downloader: ArtifactDownloader) -> Dict[str, int]:
        """
        Downloads every planned artifact concurrently.

        A failed artifact does not cancel its siblings; once all are settled,
        any failure is raised as a single AcquisitionError.
        """
        for directory in {os.path.dirname(p.destination) for p in plan}:
            try:
                os.makedirs(directory, exist_ok=True)
            except OSError as e:
                raise FileSystemError(f"Cannot create {directory}: {e}", stage="download") from e

        outcomes = await asyncio.gather(
            *(downloader.download(p.descriptor, p.destination) for p in plan),
            return_exceptions=True,
        )

        written: Dict[str, int] = {}
        failures = []
        for item, outcome in zip(plan, outcomes):
            if isinstance(outcome, PistonError):
                failures.append((item.name, outcome))
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                written[item.destination] = outcome

        if failures:
            for name, error in failures:
                logger.error(f"Failed to download {name}: {error}")
            raise AcquisitionError(failures)
        return written

    async def _write_document(self, path: str, content: str):
        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            async with aiofiles.open(path, "w", encoding="utf-8") as f:
                await f.write(content)
        except OSError as e:
            raise FileSystemError(f"Cannot write {path}: {e}", stage="download") from e

    async def acquire(
        self,
        version_id: str = "latest",
        target_dir: Optional[str] = None,
        include_server: bool = True,
        include_libraries: bool = True,
        include_assets: bool = True,
        extract: bool = False,
    ) -> AcquisitionResult:
        """
        Acquires everything a version declares into `target_dir`.

        Args:
            version_id: Concrete id or alias ('latest', 'snapshot')
            target_dir: Root directory, defaults to the configured download dir
            include_server: Also fetch server jar and server mappings
            include_libraries: Fetch library artifacts allowed on this platform
            include_assets: Load the asset index and fetch every asset object
            extract: Expand the client jar into versions/<id>/client/
        """
        target_dir = target_dir or self.settings.download_dir

        async with open_client(self.client, self.settings.http_timeout) as client:
            resolver = ManifestResolver.from_settings(self.settings, client=client)
            versions = VersionDescriptorLoader(client=client)
            assets = AssetIndexLoader(client=client, resources_url=self.settings.resources_url)
            downloader = ArtifactDownloader(client=client, verify=self.settings.verify_downloads)

            # 1. Resolve the version in the manifest
            manifest = await resolver.fetch_manifest()
            summary = resolver.resolve_alias(manifest, version_id)

            # 2. Descriptor and asset index
            descriptor = await versions.load(summary.url)
            index = await assets.load(descriptor) if include_assets else None

            # 3. Persist the metadata documents next to the binaries
            version_dir = os.path.join(target_dir, "versions", descriptor.id)
            descriptor_path = os.path.join(version_dir, f"{descriptor.id}.json")
            await self._write_document(descriptor_path, descriptor.to_json())

            index_path = None
            if index is not None:
                index_path = os.path.join(target_dir, "assets", "indexes", f"{descriptor.assets_id}.json")
                await self._write_document(index_path, index.to_json())

            # 4. Download
            plan = self.plan_downloads(descriptor, index, target_dir, include_server, include_libraries)
            logger.info(f"Acquiring {descriptor.id}: {len(plan)} artifacts into {target_dir}")
            written = await self.download_all(plan, downloader)

        # 5. Extract
        extracted_dir = None
        if extract:
            client_desc = descriptor.downloads.get("client")
            if client_desc is None:
                raise NotFound(f"Version {descriptor.id} has no client jar to extract", stage="extract")
            jar_path = os.path.join(version_dir, self.primary_filename(descriptor.id, "client", client_desc))
            extracted_dir = os.path.join(version_dir, "client")
            await self.extractor.extract(jar_path, extracted_dir)

        return AcquisitionResult(
            version_id=descriptor.id,
            version_type=descriptor.type,
            descriptor_path=descriptor_path,
            asset_index_path=index_path,
            asset_count=len(index.objects) if index is not None else 0,
            downloaded=written,
            bytes_total=sum(written.values()),
            extracted_dir=extracted_dir,
        )
