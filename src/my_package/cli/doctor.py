"""Doctor command: repository configuration diagnostics."""

from __future__ import annotations

from pathlib import Path

import typer

from my_package.cli.ui_components import (
    build_checks_table,
    build_settings_table,
    get_console,
    load_settings_or_exit,
)
from my_package.core.config import RepositoryLayout
from my_package.core.services.repo_checks import has_failures, run_repository_checks

app = typer.Typer(no_args_is_help=True, help="Repository configuration checks.")


@app.command()
def run(
    root: Path = typer.Option(
        Path("."),
        "--root",
        exists=True,
        file_okay=False,
        dir_okay=True,
        help="Repository root holding pyproject.toml and .github/.",
    ),
    strict: bool = typer.Option(False, "--strict", help="Treat warnings as failures."),
) -> None:
    """Validate pyproject.toml, the CI workflow, the setup action and pre-commit hooks."""

    results = run_repository_checks(RepositoryLayout.at(root))

    console = get_console()
    console.print(build_checks_table(results))

    if has_failures(results, strict=strict):
        console.print("\n[red]Repository configuration has problems.[/red]")
        raise typer.Exit(code=1)
    console.print("\n[green]Repository configuration looks good.[/green]")


@app.command()
def settings() -> None:
    """Show the pipeline settings resolved from the environment."""

    get_console().print(build_settings_table(load_settings_or_exit()))
