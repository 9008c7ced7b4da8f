from typing import Optional

import typer

from piston.config import Settings
from piston.dev import download, versions
from piston.dev.utils import setup_logging

app = typer.Typer(help="Resolve versions from the piston manifest and acquire their artifacts")

app.add_typer(versions.app, name="versions")
app.add_typer(download.app, name="download")


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Overrides PISTON_LOG_LEVEL"),
):
    """
    Main entry point. Configures logging for every subcommand.
    """
    setup_logging(log_level or Settings.from_env().log_level)


if __name__ == "__main__":
    app()
