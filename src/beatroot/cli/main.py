from __future__ import annotations

from dataclasses import asdict

import typer

from ..tracking import DEFAULT_CONFIG
from .base import configure_logging
from .commands.beats import app as beats_app

configure_logging()
app = typer.Typer(
    help="Multi-agent beat tracker",
    context_settings={"help_option_names": ["-h", "--help"]},
)

app.add_typer(beats_app, name="beats")


@app.command("config")
def show_config() -> None:
    """Print the default tracking parameters."""
    for key, value in asdict(DEFAULT_CONFIG).items():
        typer.echo(f"{key}: {value}")


def main() -> None:
    """Main entry point for package CLI.

    Invokes the Typer application, which handles command parsing and
    execution.
    """
    app()


if __name__ == "__main__":
    main()
