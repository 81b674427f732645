"""Loaders for the repository's declarative files (TOML and YAML).

Every parse failure is re-raised as `ConfigFileError` carrying the path, so
callers only deal with the project's own exception types.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any, Dict

import yaml

from my_package.core.errors import ConfigFileError

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

logger = logging.getLogger(__name__)


def _read_text(path: Path) -> str:
    if not path.is_file():
        raise ConfigFileError("file does not exist", path=path)
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise ConfigFileError(f"not valid UTF-8: {exc}", path=path) from exc
    except OSError as exc:
        raise ConfigFileError(f"cannot read file: {exc}", path=path) from exc


def load_toml(path: Path) -> Dict[str, Any]:
    """Parse a TOML file (e.g. `pyproject.toml`) into a dict."""

    text = _read_text(path)
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigFileError(f"invalid TOML: {exc}", path=path) from exc
    logger.debug("Loaded TOML %s (%d top-level tables)", path, len(data))
    return data


def load_yaml_mapping(path: Path) -> Dict[str, Any]:
    """Parse a YAML file whose top level must be a mapping.

    PyYAML follows YAML 1.1, where the bare key `on` (workflow triggers) reads
    as the boolean `True`. Boolean keys are turned back into `"on"`/`"off"`
    so workflow files can be inspected by their written key names.
    """

    text = _read_text(path)
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigFileError(f"invalid YAML: {exc}", path=path) from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigFileError("top level must be a YAML mapping", path=path)

    normalized: Dict[str, Any] = {}
    for key, value in data.items():
        if key is True:
            key = "on"
        elif key is False:
            key = "off"
        normalized[str(key)] = value
    logger.debug("Loaded YAML %s (keys: %s)", path, ", ".join(normalized))
    return normalized
