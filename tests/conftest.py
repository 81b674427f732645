from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict

import pytest

from my_package.core.config import RepositoryLayout

REPO_ROOT = Path(__file__).resolve().parents[1]

# Set by the CI workflow (and by the runner itself); tests must not inherit them.
_PIPELINE_ENV = (
    "PYTHON_VERSIONS",
    "DEFAULT_PYTHON_VERSION",
    "COVERAGE_REPORT_DIR",
    "COVERAGE_THRESHOLD",
    "PACKAGE_NAME",
    "GITHUB_STEP_SUMMARY",
    "GITHUB_ENV",
    "LOG_LEVEL",
)

PYPROJECT = """
[build-system]
requires = ["setuptools>=61.0"]
build-backend = "setuptools.build_meta"

[project]
name = "demo"
version = "1.0.0"
dependencies = ["typer>=0.12"]

[project.scripts]
cli-tool = "my_package.cli:run"
"""

WORKFLOW = """
name: CI
on:
  push:
    branches: [main]
env:
  PYTHON_VERSIONS: "['3.10', '3.11']"
  DEFAULT_PYTHON_VERSION: "3.10"
  COVERAGE_REPORT_DIR: "./coverages"
  COVERAGE_THRESHOLD: 80
  PACKAGE_NAME: demo
jobs:
  lint:
    runs-on: ubuntu-latest
    steps:
      - run: ruff check .
  test:
    needs: lint
    strategy:
      matrix:
        python-version: ["3.10", "3.11"]
    runs-on: ubuntu-latest
    steps:
      - uses: actions/checkout@v4
      - run: |
          pytest \\
            --cov=src \\
            --cov-fail-under=${{ env.COVERAGE_THRESHOLD }} \\
            tests/
"""

PRE_COMMIT = """
repos:
  - repo: https://github.com/astral-sh/ruff-pre-commit
    rev: v0.12.3
    hooks:
      - id: ruff-check
  - repo: local
    hooks:
      - id: pytest
        name: pytest
        entry: pytest
        language: system
"""

SETUP_ACTION = """
name: setup
inputs:
  python-version:
    description: version
    required: false
    default: "3.9"
  build-package:
    description: flag
    required: false
    default: "false"
runs:
  using: composite
  steps:
    - uses: actions/setup-python@v5
    - run: pip install build
      shell: bash
"""


@pytest.fixture(autouse=True)
def _clean_pipeline_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _PIPELINE_ENV:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def repo_root() -> Path:
    return REPO_ROOT


@pytest.fixture
def make_repo(tmp_path: Path) -> Callable[..., RepositoryLayout]:
    """Write a minimal, valid template repository; keyword arguments replace a file."""

    def _make(
        *,
        pyproject: str = PYPROJECT,
        workflow: str = WORKFLOW,
        pre_commit: str = PRE_COMMIT,
        setup_action: str = SETUP_ACTION,
    ) -> RepositoryLayout:
        layout = RepositoryLayout.at(tmp_path)
        for path, text in (
            (layout.pyproject, pyproject),
            (layout.workflow, workflow),
            (layout.pre_commit, pre_commit),
            (layout.setup_action, setup_action),
        ):
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text.lstrip(), encoding="utf-8")
        return layout

    return _make


@pytest.fixture
def repo_files() -> Dict[str, str]:
    """Default contents written by `make_repo`, keyed like its keyword arguments."""

    return {
        "pyproject": PYPROJECT,
        "workflow": WORKFLOW,
        "pre_commit": PRE_COMMIT,
        "setup_action": SETUP_ACTION,
    }
