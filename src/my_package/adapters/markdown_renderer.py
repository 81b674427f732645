"""Markdown rendering for CI step summaries (Jinja2).

Templates live in `my_package/templates` and are shipped as package data.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined

_TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates"


def _get_env() -> Environment:
    # Markdown output: no HTML autoescaping.
    return Environment(
        loader=FileSystemLoader(str(_TEMPLATES_DIR)),
        autoescape=False,
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def render_markdown(template_name: str, **context: Any) -> str:
    """Render one of the bundled markdown templates."""

    template = _get_env().get_template(template_name)
    return template.render(**context)
