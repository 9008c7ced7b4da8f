import os
from typing import Optional

import typer

from piston.core.downloader import ArtifactDownloader
from piston.core.files import ArchiveExtractor
from piston.dev.utils import (
    console,
    format_bytes,
    load_settings,
    make_client,
    print_header,
    print_success,
    print_warning,
    run,
)
from piston.endpoints.manifest import ManifestResolver
from piston.endpoints.version import VersionDescriptorLoader
from piston.services.acquisition_service import AcquisitionService

app = typer.Typer(help="Download artifacts and expand archives")


@app.command("artifact")
def download_artifact(
    version: str = typer.Argument(..., help="Version id, 'latest' or 'snapshot'"),
    kind: str = typer.Argument(..., help="client, server, client_mappings or server_mappings"),
    destination: str = typer.Argument(..., help="File to write"),
    manifest_url: Optional[str] = typer.Option(None, help="Override the manifest URL"),
):
    """Download one primary artifact of a version."""
    settings = load_settings(manifest_url)

    async def _download():
        async with make_client(settings) as client:
            resolver = ManifestResolver.from_settings(settings, client=client)
            manifest = await resolver.fetch_manifest()
            summary = resolver.resolve_alias(manifest, version)
            descriptor = await VersionDescriptorLoader(client=client).load_summary(summary)
            downloader = ArtifactDownloader(client=client, verify=settings.verify_downloads)
            return await downloader.download_kind(descriptor, kind, destination)

    written = run(_download())
    print_success(f"Wrote {format_bytes(written)} to {destination}")


@app.command("acquire")
def acquire_version(
    version: str = typer.Argument("latest", help="Version id, 'latest' or 'snapshot'"),
    directory: Optional[str] = typer.Option(None, "--dir", help="Target directory (default: PISTON_DOWNLOAD_DIR)"),
    extract: bool = typer.Option(False, "--extract/--no-extract", help="Expand the client jar"),
    assets: bool = typer.Option(True, "--assets/--no-assets", help="Fetch asset objects"),
    libraries: bool = typer.Option(True, "--libraries/--no-libraries", help="Fetch libraries"),
    server: bool = typer.Option(True, "--server/--no-server", help="Fetch server jar and mappings"),
    manifest_url: Optional[str] = typer.Option(None, help="Override the manifest URL"),
):
    """Acquire everything a version declares into a directory."""
    settings = load_settings(manifest_url)
    print_header(f"Acquiring {version}")
    skipped = [
        label
        for label, wanted in (("server artifacts", server), ("libraries", libraries), ("asset objects", assets))
        if not wanted
    ]
    if skipped:
        print_warning(f"Skipping {', '.join(skipped)}")

    async def _acquire():
        async with make_client(settings) as client:
            service = AcquisitionService(settings, client=client)
            return await service.acquire(
                version,
                target_dir=directory,
                include_server=server,
                include_libraries=libraries,
                include_assets=assets,
                extract=extract,
            )

    result = run(_acquire())
    console.print(f"Descriptor: {result.descriptor_path}")
    if result.asset_index_path:
        console.print(f"Asset index: {result.asset_index_path} ({result.asset_count} objects)")
    if result.extracted_dir:
        console.print(f"Extracted client: {result.extracted_dir}")
    print_success(
        f"{result.version_id}: {len(result.downloaded)} files, {format_bytes(result.bytes_total)}"
    )


@app.command("extract")
def extract_archive(
    archive: str = typer.Argument(..., help="Archive (.jar/.zip) to expand"),
    destination: str = typer.Argument(..., help="Output directory"),
):
    """Expand an archive into a directory tree."""
    run(ArchiveExtractor().extract(archive, destination))
    count = sum(len(files) for _, _, files in os.walk(destination))
    print_success(f"Extracted {archive} to {destination} ({count} files)")
