"""Configuration of the CLI.

`PipelineSettings` reads the same environment variables that the CI workflow
declares in its global `env:` block, so a command run inside a job sees the
pipeline's values without extra flags. Outside CI the defaults mirror the
workflow file.
"""

from __future__ import annotations

from dataclasses import dataclass
import json
from pathlib import Path
from typing import Annotated, Any, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

PYPROJECT_FILE = "pyproject.toml"
WORKFLOW_FILE = ".github/workflows/github-ci.yml"
PRE_COMMIT_FILE = ".pre-commit-config.yaml"
SETUP_ACTION_FILE = ".github/actions/setup-python-env/action.yml"

# Variables the workflow must declare in its top-level `env:` block.
REQUIRED_WORKFLOW_ENV = (
    "PYTHON_VERSIONS",
    "DEFAULT_PYTHON_VERSION",
    "COVERAGE_REPORT_DIR",
    "COVERAGE_THRESHOLD",
    "PACKAGE_NAME",
)


def parse_python_versions(value: Any) -> List[str]:
    """Normalize a list of Python versions, keeping every entry a string.

    Accepts a list, JSON (`["3.9", "3.10"]`), the workflow's single-quoted
    form (`"['3.9', '3.10']"`) or a comma separated list (`3.9,3.10`).
    Numbers are rejected inside lists because `3.10` would read as `3.1`.
    """

    if value is None:
        return []
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return []
        try:
            decoded = json.loads(text)
        except json.JSONDecodeError:
            decoded = None
        if isinstance(decoded, list):
            value = decoded
        else:
            text = text.strip("[]")
            return [part.strip().strip("'\"") for part in text.split(",") if part.strip().strip("'\"")]
    if isinstance(value, (list, tuple)):
        versions: List[str] = []
        for item in value:
            if not isinstance(item, str):
                raise ValueError(f"python version {item!r} must be quoted as a string")
            if item.strip():
                versions.append(item.strip())
        return versions
    raise ValueError(f"unsupported python versions value: {value!r}")


class PipelineSettings(BaseSettings):
    """Settings shared by the CI helper commands.

    Names carry no prefix: they are the workflow's own `env:` keys plus the
    files GitHub Actions exposes to every step.
    """

    model_config = SettingsConfigDict(
        extra="ignore",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    python_versions: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: ["3.9", "3.10", "3.11"],
        description="Python versions tested by the matrix (PYTHON_VERSIONS).",
    )
    default_python_version: str = Field(
        default="3.9",
        min_length=1,
        description="Interpreter used by single-runner jobs (DEFAULT_PYTHON_VERSION).",
    )
    coverage_report_dir: Path = Field(
        default=Path("./coverages"),
        description="Directory where pytest-cov writes its reports (COVERAGE_REPORT_DIR).",
    )
    coverage_threshold: float = Field(
        default=80.0,
        ge=0,
        le=100,
        description="Minimum coverage percentage (COVERAGE_THRESHOLD).",
    )
    package_name: str = Field(
        default="pyproject-boilerplate",
        min_length=1,
        description="Distribution name on PyPI (PACKAGE_NAME).",
    )
    github_step_summary: Optional[Path] = Field(
        default=None,
        description="Markdown file rendered on the workflow run page (GITHUB_STEP_SUMMARY).",
    )
    github_env: Optional[Path] = Field(
        default=None,
        description="File whose KEY=value lines become env vars of later steps (GITHUB_ENV).",
    )

    @field_validator("python_versions", mode="before")
    @classmethod
    def _split_python_versions(cls, value: Any) -> List[str]:
        return parse_python_versions(value)

    @field_validator("github_step_summary", "github_env", mode="before")
    @classmethod
    def _empty_path_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def coverage_xml(self) -> Path:
        return self.coverage_report_dir / "coverage.xml"


@dataclass(frozen=True)
class RepositoryLayout:
    """Locations of the template's configuration files under a root directory."""

    root: Path

    @classmethod
    def at(cls, root: Optional[Path] = None) -> "RepositoryLayout":
        return cls(root=(root or Path.cwd()).resolve())

    @property
    def pyproject(self) -> Path:
        return self.root / PYPROJECT_FILE

    @property
    def workflow(self) -> Path:
        return self.root / WORKFLOW_FILE

    @property
    def pre_commit(self) -> Path:
        return self.root / PRE_COMMIT_FILE

    @property
    def setup_action(self) -> Path:
        return self.root / SETUP_ACTION_FILE
