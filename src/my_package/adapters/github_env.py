"""Writers for the files GitHub Actions exposes to each step.

- `$GITHUB_STEP_SUMMARY`: markdown shown on the workflow run page.
- `$GITHUB_ENV`: `KEY=value` lines exported to the following steps.

Both files are appended to, never truncated: other steps of the same job
write to them too.
"""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def append_step_summary(*, markdown: str, summary_path: Path) -> Path:
    """Append a markdown block to the step summary file."""

    summary_path.parent.mkdir(parents=True, exist_ok=True)
    text = markdown if markdown.endswith("\n") else markdown + "\n"
    with summary_path.open("a", encoding="utf-8") as fh:
        fh.write(text)
    logger.info("Appended %d characters to step summary %s", len(text), summary_path)
    return summary_path


def export_env_var(*, name: str, value: str, env_path: Path) -> Path:
    """Append `name=value` to the env file so later steps see it."""

    if not name or "=" in name or "\n" in name:
        raise ValueError(f"invalid environment variable name: {name!r}")
    if "\n" in value:
        raise ValueError(f"multi-line values are not supported for {name}")

    env_path.parent.mkdir(parents=True, exist_ok=True)
    with env_path.open("a", encoding="utf-8") as fh:
        fh.write(f"{name}={value}\n")
    logger.info("Exported %s=%s to %s", name, value, env_path)
    return env_path
