"""Job status router for background invocation lookup and cleanup."""

from __future__ import annotations

from fastapi import APIRouter, Query, status
from fastapi.responses import JSONResponse

from procgate.jobs import JobRegistryPort

from ..serialization import api_serialize_async_job


def api_create_jobs_router(job_registry: JobRegistryPort) -> APIRouter:
    """Create router exposing job list, detail and delete endpoints.

    Args:
        job_registry: Registry owning job state.

    Returns:
        APIRouter: Router exposing `/jobs` endpoints.

    Raises:
        ValueError: Raised when job_registry is invalid.
    """

    if job_registry is None:
        raise ValueError("job_registry must not be None")

    router = APIRouter(prefix="/jobs", tags=["jobs"])

    @router.get("")
    def api_jobs_list() -> JSONResponse:
        jobs = job_registry.job_registry_list()
        payload = {"total": len(jobs), "jobs": [api_serialize_async_job(job) for job in jobs]}
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    @router.delete("")
    def api_jobs_delete_matching(
        status_filter: str | None = Query(default=None, alias="status"),
        older_than: str | None = Query(default=None),
    ) -> JSONResponse:
        """Delete jobs by status list or by age in days.

        Args:
            status_filter: Comma-separated status names; when present they alone decide.
            older_than: Age threshold in days on job start time.

        Returns:
            JSONResponse: Deleted count, or 400 when no usable filter is given.
        """

        statuses = [value.strip() for value in (status_filter or "").split(",") if value.strip()]
        older_than_days = _api_parse_positive_days(older_than)
        if not statuses and older_than_days is None:
            payload = {
                "error": "Specify at least one filter: ?status=completed,failed or ?older_than=7 (days)",
            }
            return JSONResponse(content=payload, status_code=status.HTTP_400_BAD_REQUEST)

        deleted_count = job_registry.job_registry_delete_matching(
            statuses=statuses,
            older_than_days=None if statuses else older_than_days,
        )
        return JSONResponse(
            content={"message": "Jobs deleted", "deleted": deleted_count},
            status_code=status.HTTP_200_OK,
        )

    @router.get("/{job_id}")
    def api_jobs_detail(job_id: str) -> JSONResponse:
        job = job_registry.job_registry_get(job_id)
        if job is None:
            return JSONResponse(content={"error": "Job not found"}, status_code=status.HTTP_404_NOT_FOUND)
        return JSONResponse(content=api_serialize_async_job(job), status_code=status.HTTP_200_OK)

    @router.delete("/{job_id}")
    def api_jobs_delete(job_id: str) -> JSONResponse:
        if not job_registry.job_registry_delete(job_id):
            return JSONResponse(content={"error": "Job not found"}, status_code=status.HTTP_404_NOT_FOUND)
        return JSONResponse(content={"message": "Job deleted", "job_id": job_id}, status_code=status.HTTP_200_OK)

    return router


def _api_parse_positive_days(raw_value: str | None) -> int | None:
    if raw_value is None:
        return None
    try:
        days = int(raw_value.strip())
    except ValueError:
        return None
    return days if days > 0 else None
