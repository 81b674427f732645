"""Static expansion of a GitHub Actions `strategy.matrix`.

Follows the runner's rules:

- every key except `include`/`exclude` is a dimension; the base jobs are the
  cartesian product of the dimensions, in key order;
- an `exclude` entry drops each base job that matches all of its keys;
- an `include` entry is merged into each job whose original dimension values
  it does not overwrite (values added by an earlier include may be
  overwritten); an entry that fits no job becomes a job of its own.
"""

from __future__ import annotations

import itertools
import logging
from typing import Any, Dict, Iterable, List, Mapping

from my_package.core.domain.models import MatrixCombination
from my_package.core.errors import MatrixError

logger = logging.getLogger(__name__)

_RESERVED_KEYS = ("include", "exclude")


def _entries(matrix: Mapping[str, Any], key: str) -> List[Dict[str, Any]]:
    raw = matrix.get(key) or []
    if not isinstance(raw, list) or not all(isinstance(item, dict) for item in raw):
        raise MatrixError(f"matrix.{key} must be a list of mappings")
    return [dict(item) for item in raw]


def _matches(combination: Mapping[str, Any], entry: Mapping[str, Any]) -> bool:
    return all(key in combination and combination[key] == value for key, value in entry.items())


def expand_matrix(matrix: Mapping[str, Any]) -> List[MatrixCombination]:
    """Return the jobs spawned by `matrix`, in the order the runner lists them."""

    if not isinstance(matrix, Mapping):
        raise MatrixError("strategy.matrix must be a mapping")

    dimensions: Dict[str, List[Any]] = {}
    for key, values in matrix.items():
        if key in _RESERVED_KEYS:
            continue
        if not isinstance(values, list):
            raise MatrixError(f"matrix dimension {key!r} is not a literal list: {values!r}")
        dimensions[key] = values

    excludes = _entries(matrix, "exclude")
    includes = _entries(matrix, "include")

    base: List[Dict[str, Any]] = []
    if dimensions:
        keys = list(dimensions)
        for values in itertools.product(*(dimensions[k] for k in keys)):
            combination = dict(zip(keys, values))
            if any(_matches(combination, entry) for entry in excludes):
                continue
            base.append(combination)

    originals = [dict(c) for c in base]
    extra: List[Dict[str, Any]] = []
    for entry in includes:
        merged = False
        for original, combination in zip(originals, base):
            if all(original[k] == v for k, v in entry.items() if k in original):
                combination.update(entry)
                merged = True
        if not merged:
            extra.append(dict(entry))

    result = [MatrixCombination(values=c) for c in base + extra]
    logger.debug(
        "Expanded matrix: %d base job(s), %d standalone include(s)",
        len(base),
        len(extra),
    )
    return result


def python_versions_in_matrix(combinations: Iterable[MatrixCombination]) -> List[str]:
    """Distinct `python-version` values, in first-seen order."""

    seen: List[str] = []
    for combination in combinations:
        version = combination.get("python-version")
        if version is None:
            continue
        version = str(version)
        if version not in seen:
            seen.append(version)
    return seen


def job_matrix(workflow: Mapping[str, Any], job_id: str) -> Dict[str, Any]:
    """Return `jobs.<job_id>.strategy.matrix` of a parsed workflow."""

    jobs = workflow.get("jobs") or {}
    if not isinstance(jobs, dict):
        raise MatrixError("workflow jobs must be a mapping")
    if job_id not in jobs:
        raise MatrixError(f"workflow has no job {job_id!r}")
    job = jobs[job_id] or {}
    if not isinstance(job, dict):
        raise MatrixError(f"job {job_id!r} is not a mapping")
    strategy = job.get("strategy") or {}
    if not isinstance(strategy, dict):
        raise MatrixError(f"strategy of job {job_id!r} is not a mapping")
    matrix = strategy.get("matrix")
    if matrix is None:
        raise MatrixError(f"job {job_id!r} has no strategy.matrix")
    if not isinstance(matrix, dict):
        raise MatrixError(f"strategy.matrix of job {job_id!r} is not a literal mapping")
    return matrix
