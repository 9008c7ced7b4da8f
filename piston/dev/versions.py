from typing import Optional

import typer
from rich.table import Table

from piston.dev.utils import console, format_bytes, load_settings, make_client, print_header, print_info, run
from piston.endpoints.manifest import ManifestResolver
from piston.endpoints.version import VersionDescriptorLoader

app = typer.Typer(help="Inspect the version manifest and version descriptors")


@app.command("list")
def list_versions(
    version_type: Optional[str] = typer.Option(None, "--type", help="release, snapshot, old_beta or old_alpha"),
    limit: int = typer.Option(20, help="Maximum number of rows (0 for all)"),
    manifest_url: Optional[str] = typer.Option(None, help="Override the manifest URL"),
):
    """List versions published in the manifest, newest first."""
    settings = load_settings(manifest_url)

    async def _list():
        async with make_client(settings) as client:
            resolver = ManifestResolver.from_settings(settings, client=client)
            return await resolver.fetch_manifest()

    manifest = run(_list())
    entries = ManifestResolver.list_versions(manifest, version_type)
    if limit:
        entries = entries[:limit]

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Id", style="cyan")
    table.add_column("Type")
    table.add_column("Released", style="dim")
    for entry in entries:
        table.add_row(entry.id, entry.type, entry.releaseTime)
    console.print(table)
    print_info(f"Latest release: {manifest.latest.release} | latest snapshot: {manifest.latest.snapshot}")


@app.command("resolve")
def resolve_version(
    version: str = typer.Argument("latest", help="Version id, 'latest' or 'snapshot'"),
    manifest_url: Optional[str] = typer.Option(None, help="Override the manifest URL"),
):
    """Resolve a version id or alias to its manifest entry."""
    settings = load_settings(manifest_url)

    async def _resolve():
        async with make_client(settings) as client:
            resolver = ManifestResolver.from_settings(settings, client=client)
            manifest = await resolver.fetch_manifest()
            return resolver.resolve_alias(manifest, version)

    summary = run(_resolve())
    console.print(f"[bold]{summary.id}[/bold] ({summary.type})")
    console.print(f"Released: {summary.releaseTime}")
    console.print(f"Descriptor: {summary.url}")


@app.command("info")
def version_info(
    version: str = typer.Argument(..., help="Version id, 'latest' or 'snapshot'"),
    manifest_url: Optional[str] = typer.Option(None, help="Override the manifest URL"),
):
    """Show the descriptor of a version: java runtime, downloads, libraries."""
    settings = load_settings(manifest_url)

    async def _info():
        async with make_client(settings) as client:
            resolver = ManifestResolver.from_settings(settings, client=client)
            manifest = await resolver.fetch_manifest()
            summary = resolver.resolve_alias(manifest, version)
            return await VersionDescriptorLoader(client=client).load_summary(summary)

    descriptor = run(_info())
    print_header(f"Version {descriptor.id}")
    java = descriptor.javaVersion
    console.print(f"Type: {descriptor.type}")
    console.print(f"Main class: {descriptor.mainClass}")
    console.print(f"Java: {java.component} ({java.majorVersion})" if java else "Java: unspecified")
    console.print(f"Asset index: {descriptor.assetIndex.id} ({format_bytes(descriptor.assetIndex.totalSize)} total)")
    console.print(f"Libraries: {len(descriptor.libraries)}")

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Download")
    table.add_column("Size", justify="right")
    table.add_column("SHA-1", style="dim")
    for kind, item in descriptor.downloads.items():
        table.add_row(kind, format_bytes(item.size), item.sha1)
    console.print(table)
