"""Root typer application of `cli-tool`."""

from __future__ import annotations

import typer

from my_package import __version__
from my_package.cli import ci, doctor
from my_package.core.logging_config import setup_logging

app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help="Project template tooling: configuration checks and CI/CD helpers.",
)
app.add_typer(doctor.app, name="doctor")
app.add_typer(ci.app, name="ci")


@app.callback()
def main(
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        envvar="LOG_LEVEL",
        help="Logging level (DEBUG, INFO, WARNING, ERROR).",
    ),
) -> None:
    try:
        setup_logging(log_level)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--log-level") from exc


@app.command()
def version() -> None:
    """Print the package version."""

    typer.echo(__version__)


def run() -> None:
    app()
