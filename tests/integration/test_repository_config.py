"""The template's own configuration files, checked as a user of the template would."""

from __future__ import annotations

from pathlib import Path

from my_package import __version__
from my_package.adapters.project_files import load_toml, load_yaml_mapping
from my_package.core.config import REQUIRED_WORKFLOW_ENV, RepositoryLayout, parse_python_versions
from my_package.core.domain.models import CheckStatus
from my_package.core.services.matrix import expand_matrix, job_matrix, python_versions_in_matrix
from my_package.core.services.repo_checks import find_cov_fail_under, job_order, run_repository_checks


def test_pyproject_declares_package_and_cli(repo_root: Path) -> None:
    project = load_toml(repo_root / "pyproject.toml")["project"]

    assert project["name"] == "pyproject-boilerplate"
    assert project["version"] == __version__
    assert any(dep.startswith("typer") for dep in project["dependencies"])
    assert project["scripts"] == {"cli-tool": "my_package.cli:run"}


def test_workflow_pipeline_shape(repo_root: Path) -> None:
    workflow = load_yaml_mapping(RepositoryLayout.at(repo_root).workflow)

    assert set(workflow["on"]) == {"push", "pull_request"}
    assert all(key in workflow["env"] for key in REQUIRED_WORKFLOW_ENV)
    assert job_order(workflow["jobs"]) == ["code-quality", "test", "build", "deploy", "report"]
    assert workflow["jobs"]["report"]["if"] == "always()"
    assert workflow["jobs"]["test"]["strategy"]["fail-fast"] is False


def test_coverage_gate_uses_the_declared_threshold(repo_root: Path) -> None:
    workflow = load_yaml_mapping(RepositoryLayout.at(repo_root).workflow)

    assert float(workflow["env"]["COVERAGE_THRESHOLD"]) == 80
    assert [value for _, _, value in find_cov_fail_under(workflow)] == [80.0]


def test_test_matrix_covers_every_declared_version(repo_root: Path) -> None:
    workflow = load_yaml_mapping(RepositoryLayout.at(repo_root).workflow)

    combinations = expand_matrix(job_matrix(workflow, "test"))
    declared = parse_python_versions(workflow["env"]["PYTHON_VERSIONS"])

    assert len(combinations) == 10
    assert declared == ["3.9", "3.10", "3.11"]
    assert python_versions_in_matrix(combinations) == ["3.9", "3.10", "3.11", "3.12"]
    assert workflow["env"]["DEFAULT_PYTHON_VERSION"] in declared


def test_pre_commit_runs_the_project_hooks(repo_root: Path) -> None:
    config = load_yaml_mapping(repo_root / ".pre-commit-config.yaml")

    hook_ids = {hook["id"] for repo in config["repos"] for hook in repo["hooks"]}

    assert {"ruff-check", "mypy", "docformatter", "pytest", "check-todos", "validate-repo-config"} <= hook_ids


def test_repository_passes_its_own_checks(repo_root: Path) -> None:
    results = run_repository_checks(RepositoryLayout.at(repo_root))

    failing = [f"{r.name}: {r.details}" for r in results if r.status is CheckStatus.FAIL]
    assert failing == []
