from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class TemplateToolError(Exception):
    """Base exception for this project."""


class ConfigFileError(TemplateToolError):
    """Raised when a configuration file is missing or cannot be parsed."""

    def __init__(self, message: str, *, path: Optional[Union[str, Path]] = None):
        super().__init__(f"{path}: {message}" if path else message)
        self.path = str(path) if path is not None else None


class CoverageReportError(TemplateToolError):
    """Raised when a coverage report exists but is malformed."""


class MatrixError(TemplateToolError):
    """Raised when a workflow strategy matrix cannot be expanded statically."""
