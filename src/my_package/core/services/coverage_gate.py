"""Coverage gate: read the pytest-cov report and compare it to the threshold.

Reports understood:
- `coverage.xml` (Cobertura): root attribute `line-rate` in 0..1.
- `coverage.json`: `totals.percent_covered` in 0..100.

The workflow writes placeholder reports when the repository has no tests
(`<coverage></coverage>` and `{"coverage": 0, ...}`); both read as 0.0.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional, Union
import xml.etree.ElementTree as ET

from my_package.adapters.markdown_renderer import render_markdown
from my_package.core.domain.models import CoverageResult
from my_package.core.errors import CoverageReportError

logger = logging.getLogger(__name__)


def _percent(value: Union[str, float, int], *, path: Path, scale: float) -> float:
    try:
        percent = float(value) * scale
    except (TypeError, ValueError) as exc:
        raise CoverageReportError(f"{path}: not a number: {value!r}") from exc
    if not 0.0 <= percent <= 100.0:
        raise CoverageReportError(f"{path}: coverage {percent:.1f}% is out of range")
    return round(percent, 1)


def _read_xml(path: Path) -> float:
    try:
        root = ET.parse(path).getroot()
    except ET.ParseError as exc:
        raise CoverageReportError(f"{path}: invalid XML: {exc}") from exc
    except OSError as exc:
        raise CoverageReportError(f"{path}: cannot read report: {exc}") from exc
    return _percent(root.get("line-rate", 0), path=path, scale=100.0)


def _read_json(path: Path) -> float:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except UnicodeDecodeError as exc:
        raise CoverageReportError(f"{path}: not valid UTF-8: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise CoverageReportError(f"{path}: invalid JSON: {exc}") from exc
    except OSError as exc:
        raise CoverageReportError(f"{path}: cannot read report: {exc}") from exc
    if not isinstance(data, dict):
        raise CoverageReportError(f"{path}: top level must be an object")

    totals = data.get("totals")
    if isinstance(totals, dict) and "percent_covered" in totals:
        return _percent(totals["percent_covered"], path=path, scale=1.0)
    return _percent(data.get("coverage", 0), path=path, scale=1.0)


def read_coverage_percent(path: Path) -> Optional[float]:
    """Return the line coverage of a report, or None when the file is missing."""

    if not path.is_file():
        logger.warning("No coverage report at %s", path)
        return None
    if path.suffix.lower() == ".json":
        percent = _read_json(path)
    else:
        percent = _read_xml(path)
    logger.info("Coverage read from %s: %.1f%%", path, percent)
    return percent


def evaluate_coverage(path: Path, threshold: float) -> CoverageResult:
    """Read `path` and compare it to `threshold` (a missing report counts as 0%)."""

    percent = read_coverage_percent(path)
    if percent is None:
        return CoverageResult(percent=0.0, threshold=threshold, report_path=path, found=False)
    return CoverageResult(percent=percent, threshold=threshold, report_path=path, found=True)


def render_coverage_summary(result: CoverageResult, report_dir: Path) -> str:
    """Markdown block for `$GITHUB_STEP_SUMMARY`."""

    display_dir = report_dir.as_posix().rstrip("/")
    while display_dir.startswith("./"):
        display_dir = display_dir[2:]
    # Links relative to the repository root need a leading "./" in GitHub markdown.
    link_dir = display_dir if report_dir.is_absolute() else f"./{display_dir}"
    return render_markdown(
        "coverage_summary.md.j2",
        result=result,
        report_dir=display_dir,
        link_dir=link_dir,
    )
