"""Pipeline summary rendered by the workflow's final `report` job."""

from __future__ import annotations

from typing import Iterable, List, Sequence, Set

from my_package.adapters.markdown_renderer import render_markdown
from my_package.core.domain.models import JobResult, JobStatus


def parse_job_results(items: Iterable[str]) -> List[JobResult]:
    """Parse `job-id=status` pairs, e.g. `code-quality=success`.

    Raises ValueError on a malformed pair, an unknown status or a repeated job.
    """

    results: List[JobResult] = []
    seen: Set[str] = set()
    for item in items:
        job_id, sep, status = item.partition("=")
        job_id, status = job_id.strip(), status.strip().lower()
        if not sep or not job_id:
            raise ValueError(f"expected JOB=STATUS, got {item!r}")
        try:
            job_status = JobStatus(status)
        except ValueError:
            allowed = ", ".join(s.value for s in JobStatus)
            raise ValueError(f"unknown status {status!r} for job {job_id!r} (expected one of: {allowed})") from None
        if job_id in seen:
            raise ValueError(f"job {job_id!r} given more than once")
        seen.add(job_id)
        results.append(JobResult(job_id=job_id, status=job_status))
    return results


def render_pipeline_summary(
    results: Sequence[JobResult],
    *,
    threshold: float,
    python_versions: Sequence[str],
) -> str:
    return render_markdown(
        "pipeline_summary.md.j2",
        results=list(results),
        threshold=threshold,
        python_versions=list(python_versions),
    )


def pipeline_failed(results: Iterable[JobResult]) -> bool:
    return any(r.status is JobStatus.FAILURE for r in results)
