"""Repository configuration checks.

Each check validates one property of the template's declarative files and
returns a `CheckResult`. Checks raise `ConfigFileError` when their file is
missing or unparsable; `run_repository_checks` turns that into a FAIL row so
one broken file never hides the others.
"""

from __future__ import annotations

import importlib
import importlib.util
import logging
from pathlib import Path
import re
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from my_package.adapters.project_files import load_toml, load_yaml_mapping
from my_package.core.config import REQUIRED_WORKFLOW_ENV, RepositoryLayout, parse_python_versions
from my_package.core.domain.models import CheckResult, CheckStatus
from my_package.core.errors import ConfigFileError, MatrixError
from my_package.core.services.matrix import expand_matrix, job_matrix, python_versions_in_matrix

logger = logging.getLogger(__name__)

CheckFn = Callable[[RepositoryLayout], CheckResult]

RUNTIME_DEPENDENCY = "typer"
MATRIX_JOB = "test"

_COV_FAIL_UNDER = re.compile(r"--cov-fail-under(?:=|\s+)(\$\{\{[^}]*\}\}|[^\s\\]+)")
_ENV_EXPRESSION = re.compile(r"^\$\{\{\s*env\.([A-Za-z_][A-Za-z0-9_]*)\s*\}\}$")
_REQUIREMENT_NAME = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)")
_BRANCH_REVS = {"main", "master", "develop", "trunk", "head"}
_ACTION_INPUT_KEYS = {"description", "required", "default", "deprecationMessage"}
_ACTION_INPUTS = ("python-version", "build-package")


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _mapping(value: Any, where: str, *, path: Optional[Path] = None) -> Dict[str, Any]:
    """`value` as a mapping; a missing value reads as empty, any other shape is a file error."""

    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigFileError(f"{where} must be a mapping, got {type(value).__name__}", path=path)
    return value


def _normalize_name(requirement: str) -> Optional[str]:
    match = _REQUIREMENT_NAME.match(requirement)
    if not match:
        return None
    return re.sub(r"[-_.]+", "-", match.group(1)).lower()


# ---------------------------------------------------------------------------
# pyproject.toml
# ---------------------------------------------------------------------------


def _backend_importable(backend: str) -> bool:
    module = backend.split(":", 1)[0]
    try:
        return importlib.util.find_spec(module) is not None
    except (ImportError, ValueError):
        return False


def check_pyproject(layout: RepositoryLayout) -> CheckResult:
    """`pyproject.toml` is valid TOML with a build backend and project metadata."""

    name = "pyproject"
    data = load_toml(layout.pyproject)

    build = data.get("build-system")
    if not isinstance(build, dict):
        return CheckResult.fail(name, "missing [build-system] table")
    backend = build.get("build-backend")
    requires = build.get("requires")
    if not isinstance(backend, str) or not backend.strip():
        return CheckResult.fail(name, "build-system.build-backend is not set")
    if not isinstance(requires, list) or not requires:
        return CheckResult.fail(name, "build-system.requires is empty")

    project = data.get("project")
    if not isinstance(project, dict):
        return CheckResult.fail(name, "missing [project] table")
    dynamic = _as_list(project.get("dynamic"))
    missing = [key for key in ("name", "version") if key not in project and key not in dynamic]
    if missing:
        return CheckResult.fail(name, f"project is missing: {', '.join(missing)}")

    dependencies = {_normalize_name(dep) for dep in _as_list(project.get("dependencies")) if isinstance(dep, str)}
    if RUNTIME_DEPENDENCY not in dependencies:
        return CheckResult.fail(name, f"runtime dependency {RUNTIME_DEPENDENCY!r} is not declared")

    summary = f"{project.get('name', '?')} {project.get('version', '(dynamic)')}, backend {backend}"
    if not _backend_importable(backend):
        return CheckResult.warn(name, f"{summary} is not importable here (pip installs it from build-system.requires)")
    return CheckResult.ok(name, summary)


def _resolve_entry_point(target: str) -> Any:
    module_name, sep, attr_path = target.partition(":")
    if not sep or not module_name.strip() or not attr_path.strip():
        raise ValueError(f"{target!r} is not of the form 'module:attr'")
    obj: Any = importlib.import_module(module_name.strip())
    for attr in attr_path.strip().split("."):
        obj = getattr(obj, attr)
    return obj


def check_entry_points(layout: RepositoryLayout) -> CheckResult:
    """Every `[project.scripts]` target imports and is callable."""

    name = "entry-points"
    data = load_toml(layout.pyproject)
    project = _mapping(data.get("project"), "project", path=layout.pyproject)
    scripts = _mapping(project.get("scripts"), "project.scripts", path=layout.pyproject)
    if not scripts:
        return CheckResult.warn(name, "no [project.scripts] declared")

    problems: List[str] = []
    resolved: List[str] = []
    for script, target in scripts.items():
        try:
            obj = _resolve_entry_point(str(target))
        except (ImportError, AttributeError, ValueError) as exc:
            problems.append(f"{script}: {exc}")
            continue
        if not callable(obj):
            problems.append(f"{script}: {target} is not callable")
            continue
        resolved.append(f"{script} -> {target}")

    if problems:
        return CheckResult.fail(name, "; ".join(problems))
    return CheckResult.ok(name, ", ".join(resolved))


# ---------------------------------------------------------------------------
# Workflow
# ---------------------------------------------------------------------------


def job_order(jobs: Mapping[str, Any]) -> List[str]:
    """Order jobs so that each comes after the jobs it `needs`.

    Raises ValueError for an unknown `needs` target or a dependency cycle.
    Jobs without dependencies between them keep their file order.
    """

    needs: Dict[str, List[str]] = {}
    for job_id, job in jobs.items():
        if job is not None and not isinstance(job, dict):
            raise ValueError(f"job {job_id!r} must be a mapping, got {type(job).__name__}")
        deps = [str(d) for d in _as_list((job or {}).get("needs"))]
        unknown = [d for d in deps if d not in jobs]
        if unknown:
            raise ValueError(f"job {job_id!r} needs unknown job(s): {', '.join(unknown)}")
        needs[job_id] = deps

    order: List[str] = []
    pending = list(jobs)
    while pending:
        ready = [job_id for job_id in pending if all(d in order for d in needs[job_id])]
        if not ready:
            raise ValueError(f"dependency cycle between jobs: {', '.join(pending)}")
        order.extend(ready)
        pending = [job_id for job_id in pending if job_id not in ready]
    return order


def check_workflow(layout: RepositoryLayout) -> CheckResult:
    """The CI workflow parses, has triggers, a valid job graph and the global env."""

    name = "workflow"
    data = load_yaml_mapping(layout.workflow)

    if not data.get("on"):
        return CheckResult.fail(name, "no trigger ('on:') declared")
    jobs = data.get("jobs")
    if not isinstance(jobs, dict) or not jobs:
        return CheckResult.fail(name, "no jobs declared")

    try:
        order = job_order(jobs)
    except ValueError as exc:
        return CheckResult.fail(name, str(exc))

    env = _mapping(data.get("env"), "env", path=layout.workflow)
    missing = [key for key in REQUIRED_WORKFLOW_ENV if key not in env]
    if missing:
        return CheckResult.fail(name, f"env is missing: {', '.join(missing)}")

    return CheckResult.ok(name, " -> ".join(order))


def _steps(job: Mapping[str, Any]) -> List[Mapping[str, Any]]:
    return [step for step in _as_list(job.get("steps")) if isinstance(step, dict)]


def _resolve_threshold(raw: str, env: Mapping[str, Any]) -> Optional[float]:
    match = _ENV_EXPRESSION.match(raw.strip())
    if match:
        if match.group(1) not in env:
            return None
        raw = str(env[match.group(1)])
    try:
        return float(raw)
    except ValueError:
        return None


def find_cov_fail_under(workflow: Mapping[str, Any]) -> List[Tuple[str, str, Optional[float]]]:
    """Return `(job_id, raw_value, resolved_value)` for each `--cov-fail-under` in the workflow.

    Raises ConfigFileError when a job or an `env` block is not a mapping.
    """

    global_env = _mapping(workflow.get("env"), "env")
    found: List[Tuple[str, str, Optional[float]]] = []
    for job_id, job in _mapping(workflow.get("jobs"), "jobs").items():
        job = _mapping(job, f"jobs.{job_id}")
        job_env = {**global_env, **_mapping(job.get("env"), f"jobs.{job_id}.env")}
        for step in _steps(job):
            step_env = {**job_env, **_mapping(step.get("env"), f"jobs.{job_id}.steps[].env")}
            for match in _COV_FAIL_UNDER.finditer(str(step.get("run") or "")):
                raw = match.group(1)
                found.append((str(job_id), raw, _resolve_threshold(raw, step_env)))
    return found


def _coverage_report_table(pyproject: Path) -> Dict[str, Any]:
    table: Dict[str, Any] = load_toml(pyproject)
    where: List[str] = []
    for key in ("tool", "coverage", "report"):
        where.append(key)
        table = _mapping(table.get(key), ".".join(where), path=pyproject)
    return table


def check_coverage_threshold(layout: RepositoryLayout) -> CheckResult:
    """`COVERAGE_THRESHOLD` equals the value pytest enforces with `--cov-fail-under`."""

    name = "coverage-threshold"
    workflow = load_yaml_mapping(layout.workflow)
    env = _mapping(workflow.get("env"), "env", path=layout.workflow)
    if "COVERAGE_THRESHOLD" not in env:
        return CheckResult.fail(name, "COVERAGE_THRESHOLD is not declared in the workflow env")
    try:
        declared = float(env["COVERAGE_THRESHOLD"])
    except (TypeError, ValueError):
        return CheckResult.fail(name, f"COVERAGE_THRESHOLD is not a number: {env['COVERAGE_THRESHOLD']!r}")

    invocations = find_cov_fail_under(workflow)
    if not invocations:
        return CheckResult.warn(name, "no pytest --cov-fail-under in the workflow; the threshold is not enforced")

    for job_id, raw, value in invocations:
        if value is None:
            return CheckResult.warn(name, f"cannot resolve --cov-fail-under={raw} in job {job_id!r}")
        if value != declared:
            return CheckResult.fail(name, f"job {job_id!r} enforces {value:g}% but COVERAGE_THRESHOLD is {declared:g}%")

    if layout.pyproject.is_file():
        report = _coverage_report_table(layout.pyproject)
        if "fail_under" in report:
            try:
                fail_under = float(report["fail_under"])
            except (TypeError, ValueError):
                return CheckResult.fail(
                    name, f"tool.coverage.report.fail_under is not a number: {report['fail_under']!r}"
                )
            if fail_under != declared:
                return CheckResult.fail(
                    name,
                    f"tool.coverage.report.fail_under is {fail_under:g}% but COVERAGE_THRESHOLD is {declared:g}%",
                )

    return CheckResult.ok(name, f"{declared:g}% enforced by {len(invocations)} pytest invocation(s)")


def check_python_versions(layout: RepositoryLayout) -> CheckResult:
    """The default interpreter is tested and the matrix covers `PYTHON_VERSIONS`."""

    name = "python-versions"
    workflow = load_yaml_mapping(layout.workflow)
    env = _mapping(workflow.get("env"), "env", path=layout.workflow)

    try:
        versions = parse_python_versions(env.get("PYTHON_VERSIONS"))
    except ValueError as exc:
        return CheckResult.fail(name, f"PYTHON_VERSIONS: {exc}")
    if not versions:
        return CheckResult.fail(name, "PYTHON_VERSIONS is empty")

    default = str(env.get("DEFAULT_PYTHON_VERSION", "")).strip()
    if default not in versions:
        return CheckResult.fail(name, f"DEFAULT_PYTHON_VERSION {default!r} is not in PYTHON_VERSIONS")

    try:
        tested = python_versions_in_matrix(expand_matrix(job_matrix(workflow, MATRIX_JOB)))
    except MatrixError as exc:
        return CheckResult.warn(name, f"cannot expand the {MATRIX_JOB!r} matrix: {exc}")

    untested = [v for v in versions if v not in tested]
    if untested:
        return CheckResult.warn(name, f"not in the {MATRIX_JOB!r} matrix: {', '.join(untested)}")

    extra = [v for v in tested if v not in versions]
    details = f"default {default}; matrix covers {', '.join(versions)}"
    if extra:
        details += f" (+{', '.join(extra)})"
    return CheckResult.ok(name, details)


# ---------------------------------------------------------------------------
# Pre-commit and composite action
# ---------------------------------------------------------------------------


def check_pre_commit(layout: RepositoryLayout) -> CheckResult:
    """The pre-commit config parses and every remote hook repository is pinned."""

    name = "pre-commit"
    data = load_yaml_mapping(layout.pre_commit)

    repos = data.get("repos")
    if not isinstance(repos, list) or not repos:
        return CheckResult.fail(name, "no repos declared")

    unpinned: List[str] = []
    floating: List[str] = []
    hook_ids: List[str] = []
    for index, repo in enumerate(repos):
        if not isinstance(repo, dict) or "repo" not in repo:
            return CheckResult.fail(name, f"repos[{index}] has no 'repo' key")
        url = str(repo["repo"])
        if url not in ("local", "meta"):
            rev = repo.get("rev")
            if not rev:
                unpinned.append(url)
            elif str(rev).lower() in _BRANCH_REVS:
                floating.append(f"{url}@{rev}")
        for hook in _as_list(repo.get("hooks")):
            if not isinstance(hook, dict) or not hook.get("id"):
                return CheckResult.fail(name, f"a hook of {url} has no 'id'")
            hook_ids.append(str(hook["id"]))

    if unpinned:
        return CheckResult.fail(name, f"no 'rev' for: {', '.join(unpinned)}")
    if floating:
        return CheckResult.warn(name, f"pinned to a branch: {', '.join(floating)}")
    return CheckResult.ok(name, f"{len(repos)} repos, {len(hook_ids)} hooks")


def check_composite_action(layout: RepositoryLayout) -> CheckResult:
    """The setup action is a composite action with shells and its two inputs."""

    name = "setup-action"
    data = load_yaml_mapping(layout.setup_action)

    runs = _mapping(data.get("runs"), "runs", path=layout.setup_action)
    if runs.get("using") != "composite":
        return CheckResult.fail(name, f"runs.using is {runs.get('using')!r}, expected 'composite'")

    no_shell = [
        str(step.get("name") or f"step {index}")
        for index, step in enumerate(_steps(runs))
        if "run" in step and not step.get("shell")
    ]
    if no_shell:
        return CheckResult.fail(name, f"run steps without 'shell': {', '.join(no_shell)}")

    inputs = _mapping(data.get("inputs"), "inputs", path=layout.setup_action)
    missing = [key for key in _ACTION_INPUTS if key not in inputs]
    if missing:
        return CheckResult.fail(name, f"missing inputs: {', '.join(missing)}")

    warnings: List[str] = []
    for key, spec in inputs.items():
        spec = _mapping(spec, f"inputs.{key}", path=layout.setup_action)
        unknown = sorted(set(spec) - _ACTION_INPUT_KEYS)
        if unknown:
            warnings.append(f"input {key!r} has unknown key(s): {', '.join(unknown)}")
        if key in _ACTION_INPUTS and "default" not in spec:
            warnings.append(f"input {key!r} has no default")
    if warnings:
        return CheckResult.warn(name, "; ".join(warnings))
    return CheckResult.ok(name, f"inputs: {', '.join(inputs)}")


CHECKS: Sequence[Tuple[str, CheckFn]] = (
    ("pyproject", check_pyproject),
    ("entry-points", check_entry_points),
    ("workflow", check_workflow),
    ("coverage-threshold", check_coverage_threshold),
    ("python-versions", check_python_versions),
    ("pre-commit", check_pre_commit),
    ("setup-action", check_composite_action),
)


def run_repository_checks(
    layout: RepositoryLayout,
    checks: Sequence[Tuple[str, CheckFn]] = CHECKS,
) -> List[CheckResult]:
    """Run every check in order; file errors become FAIL results."""

    results: List[CheckResult] = []
    for name, check in checks:
        try:
            result = check(layout)
        except ConfigFileError as exc:
            result = CheckResult.fail(name, str(exc))
        logger.info("check %s: %s %s", name, result.status.value, result.details)
        results.append(result)
    return results


def has_failures(results: Sequence[CheckResult], *, strict: bool = False) -> bool:
    blocking = {CheckStatus.FAIL, CheckStatus.WARN} if strict else {CheckStatus.FAIL}
    return any(r.status in blocking for r in results)
