"""CI helper commands, called from the workflow steps.

They replace the inline shell/python snippets of the workflow: reading the
coverage report, writing the step summaries and listing the test matrix.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional

import typer

from my_package.adapters.github_env import append_step_summary, export_env_var
from my_package.adapters.project_files import load_yaml_mapping
from my_package.cli.ui_components import (
    build_matrix_table,
    format_coverage_line,
    get_console,
    load_settings_or_exit,
    print_error,
)
from my_package.core.config import WORKFLOW_FILE
from my_package.core.errors import TemplateToolError
from my_package.core.services.coverage_gate import evaluate_coverage, render_coverage_summary
from my_package.core.services.matrix import expand_matrix, job_matrix
from my_package.core.services.pipeline_report import (
    parse_job_results,
    pipeline_failed,
    render_pipeline_summary,
)

app = typer.Typer(no_args_is_help=True, help="Helpers for the CI/CD workflow steps.")

logger = logging.getLogger(__name__)


@app.command()
def coverage(
    report: Optional[Path] = typer.Option(
        None,
        "--report",
        help="coverage.xml or coverage.json. [default: $COVERAGE_REPORT_DIR/coverage.xml]",
    ),
    threshold: Optional[float] = typer.Option(
        None,
        "--threshold",
        min=0,
        max=100,
        help="Minimum coverage in percent. [default: $COVERAGE_THRESHOLD]",
    ),
    summary_file: Optional[Path] = typer.Option(
        None,
        "--summary-file",
        help="Markdown summary to append to. [default: $GITHUB_STEP_SUMMARY]",
    ),
    env_file: Optional[Path] = typer.Option(
        None,
        "--env-file",
        help="File receiving COVERAGE_PERCENT=<value>. [default: $GITHUB_ENV]",
    ),
    enforce: bool = typer.Option(
        False,
        "--enforce/--no-enforce",
        help="Exit with code 1 when coverage is below the threshold.",
    ),
) -> None:
    """Extract the coverage percentage and publish it to the step summary."""

    settings = load_settings_or_exit()
    report_path = report or settings.coverage_xml
    limit = settings.coverage_threshold if threshold is None else threshold

    try:
        result = evaluate_coverage(report_path, limit)
    except TemplateToolError as exc:
        print_error(str(exc))
        raise typer.Exit(code=2) from exc

    get_console().print(format_coverage_line(result))

    summary_path = summary_file or settings.github_step_summary
    if summary_path is not None:
        append_step_summary(
            markdown=render_coverage_summary(result, report_path.parent),
            summary_path=summary_path,
        )

    env_path = env_file or settings.github_env
    if env_path is not None:
        export_env_var(name="COVERAGE_PERCENT", value=f"{result.percent:.1f}", env_path=env_path)

    if enforce and not result.passed:
        raise typer.Exit(code=1)


@app.command()
def summary(
    job: List[str] = typer.Option(
        ...,
        "--job",
        "-j",
        help="JOB=STATUS pair (success, failure, cancelled, skipped). Repeatable.",
    ),
    threshold: Optional[float] = typer.Option(
        None,
        "--threshold",
        min=0,
        max=100,
        help="Coverage threshold shown in the metrics. [default: $COVERAGE_THRESHOLD]",
    ),
    summary_file: Optional[Path] = typer.Option(
        None,
        "--summary-file",
        help="Markdown summary to append to. [default: $GITHUB_STEP_SUMMARY]",
    ),
    fail_on_failure: bool = typer.Option(
        False,
        "--fail-on-failure",
        help="Exit with code 1 when any job failed.",
    ),
) -> None:
    """Render the pipeline summary from the final status of each job."""

    try:
        results = parse_job_results(job)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--job") from exc

    settings = load_settings_or_exit()
    markdown = render_pipeline_summary(
        results,
        threshold=settings.coverage_threshold if threshold is None else threshold,
        python_versions=settings.python_versions,
    )
    typer.echo(markdown)

    summary_path = summary_file or settings.github_step_summary
    if summary_path is not None:
        append_step_summary(markdown=markdown, summary_path=summary_path)

    if fail_on_failure and pipeline_failed(results):
        raise typer.Exit(code=1)


@app.command()
def matrix(
    workflow: Path = typer.Option(Path(WORKFLOW_FILE), "--workflow", help="Workflow file to read."),
    job: str = typer.Option("test", "--job", help="Job whose strategy.matrix is expanded."),
    as_json: bool = typer.Option(False, "--json", help="Print the combinations as a JSON list."),
) -> None:
    """List the jobs a workflow's strategy matrix expands to."""

    try:
        combinations = expand_matrix(job_matrix(load_yaml_mapping(workflow), job))
    except TemplateToolError as exc:
        print_error(str(exc))
        raise typer.Exit(code=2) from exc

    logger.info("Job %r expands to %d combination(s)", job, len(combinations))
    if as_json:
        typer.echo(json.dumps([c.values for c in combinations]))
        return
    get_console().print(build_matrix_table(combinations, title=f"{job}: {len(combinations)} job(s)"))
