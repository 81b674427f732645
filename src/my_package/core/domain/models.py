"""Domain models (Pydantic v2).

These describe what the CLI reports about a repository and a pipeline run:
check outcomes, coverage gate results, job results and matrix combinations.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class CheckStatus(str, Enum):
    """Outcome of a single repository check."""

    OK = "ok"
    WARN = "warn"
    FAIL = "fail"

    def label(self) -> str:
        return self.value.upper()


class CheckResult(BaseModel):
    """Result of validating one configuration property."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(
        ...,
        min_length=1,
        description="Short name of the check (e.g. 'workflow', 'pre-commit').",
    )
    status: CheckStatus = Field(
        ...,
        description="OK, WARN or FAIL.",
    )
    details: str = Field(
        default="",
        description="Human readable explanation, empty when nothing to add.",
    )

    @classmethod
    def ok(cls, name: str, details: str = "") -> "CheckResult":
        return cls(name=name, status=CheckStatus.OK, details=details)

    @classmethod
    def warn(cls, name: str, details: str) -> "CheckResult":
        return cls(name=name, status=CheckStatus.WARN, details=details)

    @classmethod
    def fail(cls, name: str, details: str) -> "CheckResult":
        return cls(name=name, status=CheckStatus.FAIL, details=details)


class CoverageResult(BaseModel):
    """Coverage percentage read from a pytest-cov report, compared to the threshold."""

    percent: float = Field(
        default=0.0,
        ge=0.0,
        le=100.0,
        description="Line coverage in percent, rounded to one decimal.",
    )
    threshold: float = Field(
        ...,
        ge=0.0,
        le=100.0,
        description="Minimum coverage percentage required by the pipeline.",
    )
    report_path: Optional[Path] = Field(
        default=None,
        description="Report the percentage was read from.",
    )
    found: bool = Field(
        default=True,
        description="False when no report existed (percent is then 0.0).",
    )

    @property
    def passed(self) -> bool:
        return self.percent >= self.threshold


class JobStatus(str, Enum):
    """Values of `needs.<job>.result` in GitHub Actions."""

    SUCCESS = "success"
    FAILURE = "failure"
    CANCELLED = "cancelled"
    SKIPPED = "skipped"


# Display labels and failure hints for the jobs of the shipped workflow.
JOB_LABELS: Dict[str, str] = {
    "code-quality": "Code Quality",
    "test": "Tests",
    "build": "Build",
    "deploy": "Deploy",
}

JOB_FAILURE_HINTS: Dict[str, Tuple[str, str]] = {
    "code-quality": ("Code Quality Issues", "Check linting, formatting, or type errors"),
    "test": ("Test Failures", "Check test results or coverage below threshold"),
    "build": ("Build Failures", "Check packaging metadata or the twine check output"),
}


class JobResult(BaseModel):
    """Final status of one pipeline job."""

    model_config = ConfigDict(frozen=True)

    job_id: str = Field(..., min_length=1, description="Job id as written under `jobs:`.")
    status: JobStatus

    @property
    def label(self) -> str:
        return JOB_LABELS.get(self.job_id, self.job_id)

    @property
    def failure_hint(self) -> Optional[Tuple[str, str]]:
        if self.status is not JobStatus.FAILURE:
            return None
        return JOB_FAILURE_HINTS.get(self.job_id, (f"{self.label} Failures", "Check the job logs"))


class MatrixCombination(BaseModel):
    """One job spawned by a strategy matrix."""

    values: Dict[str, Any] = Field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)
