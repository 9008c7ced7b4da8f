import asyncio
import logging
from typing import Optional

import httpx
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.theme import Theme

from piston.config import Settings
from piston.errors import PistonError

# Custom theme for the CLI
custom_theme = Theme({
    "info": "dim cyan",
    "warning": "magenta",
    "error": "bold red",
    "success": "bold green",
    "header": "bold white on blue",
})

console = Console(theme=custom_theme)


def print_header(text: str):
    """Prints a styled header panel."""
    console.print(Panel(f"[bold white]{text}[/bold white]", style="blue", expand=False))


def print_success(text: str):
    console.print(f"[success]✔ {text}[/success]")


def print_error(text: str):
    console.print(f"[error]✖ {text}[/error]")


def print_info(text: str):
    console.print(f"[info]ℹ {text}[/info]")


def print_warning(text: str):
    console.print(f"[warning]⚠ {text}[/warning]")


def format_bytes(value: Optional[int]) -> str:
    if value is None:
        return "?"
    units = ["B", "KB", "MB", "GB", "TB"]
    amount = float(value)
    idx = 0
    while amount >= 1024.0 and idx < len(units) - 1:
        amount /= 1024.0
        idx += 1
    return f"{amount:.1f}{units[idx]}"


def setup_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def load_settings(manifest_url: Optional[str] = None) -> Settings:
    settings = Settings.from_env()
    if manifest_url:
        settings = settings.model_copy(update={"manifest_url": manifest_url})
    return settings


def make_client(settings: Settings) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout, pool=None),
        follow_redirects=True,
    )


def run(coro):
    """Runs a pipeline coroutine, turning piston errors into a red line and exit code 1."""
    try:
        return asyncio.run(coro)
    except PistonError as e:
        stage = e.stage or "error"
        print_error(f"{stage}: {e.message}")
        raise typer.Exit(code=1)
