"""JSON payload shaping for API responses."""

from __future__ import annotations

from typing import Any

from procgate.domain import AsyncJob


def api_serialize_async_job(job: AsyncJob) -> dict[str, Any]:
    """Render one job as its JSON payload, omitting absent fields.

    Args:
        job: Job snapshot.

    Returns:
        dict[str, Any]: JSON-serializable job payload with ISO-8601 times.
    """

    payload: dict[str, Any] = {
        "id": job.job_id,
        "status": job.status.value,
        "procedure_name": job.procedure_name,
    }
    if job.params is not None:
        payload["params"] = job.params
    payload["start_time"] = job.start_time.isoformat()
    if job.end_time is not None:
        payload["end_time"] = job.end_time.isoformat()
    if job.duration:
        payload["duration"] = job.duration
    if job.result is not None:
        payload["result"] = job.result
    if job.error:
        payload["error"] = job.error
    payload["progress"] = job.progress
    return payload
