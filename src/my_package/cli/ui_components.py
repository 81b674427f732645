"""Rich components for the CLI.

Consoles are created per call so they pick up the terminal width (and the
`COLUMNS` variable) of the current invocation.
"""

from __future__ import annotations

from typing import Iterable, List, Sequence

from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table
import typer

from my_package.core.config import PipelineSettings
from my_package.core.domain.models import CheckResult, CheckStatus, CoverageResult, MatrixCombination

_STATUS_STYLES = {
    CheckStatus.OK: "bold green",
    CheckStatus.WARN: "bold yellow",
    CheckStatus.FAIL: "bold red",
}


def get_console(*, stderr: bool = False) -> Console:
    """Create a console bound to the current stdout (or stderr)."""

    return Console(stderr=stderr)


def print_error(message: str) -> None:
    """Print a red error line on stderr; `message` is not parsed as markup."""

    get_console(stderr=True).print(f"[bold red]Error:[/bold red] {escape(message)}")


def build_checks_table(results: Iterable[CheckResult]) -> Table:
    """Build the `doctor run` table: one row per check with a coloured status."""

    table = Table(title="Repository configuration")
    table.add_column("Check", style="cyan", no_wrap=True)
    table.add_column("Status", no_wrap=True)
    table.add_column("Details", style="dim")
    for result in results:
        style = _STATUS_STYLES[result.status]
        table.add_row(result.name, f"[{style}]{result.status.label()}[/{style}]", escape(result.details))
    return table


def build_settings_table(settings: PipelineSettings) -> Table:
    """Build a table of the pipeline variables as resolved from the environment."""

    table = Table(title="Pipeline settings")
    table.add_column("Variable", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")
    table.add_row("PYTHON_VERSIONS", ", ".join(settings.python_versions))
    table.add_row("DEFAULT_PYTHON_VERSION", settings.default_python_version)
    table.add_row("COVERAGE_REPORT_DIR", str(settings.coverage_report_dir))
    table.add_row("COVERAGE_THRESHOLD", f"{settings.coverage_threshold:g}")
    table.add_row("PACKAGE_NAME", settings.package_name)
    table.add_row("GITHUB_STEP_SUMMARY", str(settings.github_step_summary or "(unset)"))
    table.add_row("GITHUB_ENV", str(settings.github_env or "(unset)"))
    return table


def build_matrix_table(combinations: Sequence[MatrixCombination], *, title: str) -> Table:
    """Build a table with one row per matrix job.

    Columns are the union of the combinations' keys in first-seen order; a job
    lacking a key (e.g. `experimental`) shows an empty cell.
    """

    keys: List[str] = []
    for combination in combinations:
        for key in combination.values:
            if key not in keys:
                keys.append(key)

    table = Table(title=title)
    table.add_column("#", justify="right", style="dim")
    for key in keys:
        table.add_column(str(key))
    for index, combination in enumerate(combinations, start=1):
        table.add_row(str(index), *(escape(str(combination.get(key, ""))) for key in keys))
    return table


def format_coverage_line(result: CoverageResult) -> str:
    """One-line rich markup summary of the coverage gate."""

    if not result.found:
        return f"[yellow]No coverage report found at {escape(str(result.report_path))}[/yellow]"
    verdict = "[green]threshold met[/green]" if result.passed else "[red]below threshold[/red]"
    return f"Coverage: {result.percent:.1f}% (threshold: {result.threshold:g}%) - {verdict}"


def load_settings_or_exit() -> PipelineSettings:
    """Build `PipelineSettings` from the environment; exit with code 2 when invalid."""

    try:
        return PipelineSettings()
    except ValidationError as exc:
        print_error(f"invalid pipeline settings:\n{exc}")
        raise typer.Exit(code=2) from exc
