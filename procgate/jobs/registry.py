"""In-memory job registry mirrored best-effort to the persistent store."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Any, Final
from uuid import uuid4

from procgate.db.background_writer import BackgroundWriter
from procgate.db.interfaces import JobStorePort
from procgate.domain import AsyncJob, JobStatus

from .interfaces import JobRegistryPort, JobTransitionError, JobUpdate

logger = logging.getLogger("procgate.jobs.registry")

JOB_ALLOWED_TRANSITIONS: Final[dict[JobStatus, frozenset[JobStatus]]] = {
    JobStatus.PENDING: frozenset({JobStatus.PENDING, JobStatus.RUNNING, JobStatus.FAILED}),
    JobStatus.RUNNING: frozenset({JobStatus.RUNNING, JobStatus.COMPLETED, JobStatus.FAILED}),
}


def _job_utc_now() -> datetime:
    return datetime.now(timezone.utc)


class JobRegistry(JobRegistryPort):
    """Authoritative owner of async job state.

    All mutations happen under one lock and publish a replaced immutable
    snapshot. Each mutation then submits a mirror write to the background
    writer; mirror writes may land out of order and their failures never roll
    back memory.
    """

    def __init__(
        self,
        store: JobStorePort | None = None,
        background_writer: BackgroundWriter | None = None,
        retention: timedelta = timedelta(hours=24),
        rehydrate_window: timedelta = timedelta(hours=24),
        clock: Callable[[], datetime] = _job_utc_now,
    ):
        """Initialize job registry.

        Args:
            store: Optional persistent mirror.
            background_writer: Writer running mirror writes; required with a store.
            retention: Age after `end_time` at which terminal jobs are evicted.
            rehydrate_window: Start-time window of jobs reloaded from the store.
            clock: UTC time source.

        Raises:
            ValueError: Raised when a store is given without a background writer.
        """

        if store is not None and background_writer is None:
            raise ValueError("background_writer is required when a job store is configured")
        self._store = store
        self._background_writer = background_writer
        self._retention = retention
        self._rehydrate_window = rehydrate_window
        self._clock = clock
        self._jobs: dict[str, AsyncJob] = {}
        self._lock = threading.Lock()

    def job_registry_create(self, procedure_name: str, params: dict[str, Any] | None) -> AsyncJob:
        """Register one pending job.

        Args:
            procedure_name: Routine name as submitted.
            params: Request snapshot stored for audit and replay.

        Returns:
            AsyncJob: New pending job with progress 0.
        """

        job = AsyncJob(
            job_id=uuid4().hex,
            status=JobStatus.PENDING,
            procedure_name=procedure_name,
            params=params,
            start_time=self._clock(),
            progress=0,
        )
        with self._lock:
            self._jobs[job.job_id] = job
            self._job_registry_mirror(f"insert job {job.job_id}", lambda store: store.db_job_insert(job))
        logger.info("job created job_id=%s procedure=%s", job.job_id, procedure_name)
        return job

    def job_registry_get(self, job_id: str) -> AsyncJob | None:
        with self._lock:
            return self._jobs.get(job_id)

    def job_registry_list(self) -> list[AsyncJob]:
        with self._lock:
            jobs = list(self._jobs.values())
        return sorted(jobs, key=lambda job: job.start_time, reverse=True)

    def job_registry_update(self, job_id: str, update: JobUpdate) -> AsyncJob | None:
        """Apply one update to a job.

        Updates of terminal jobs are ignored. Progress is clamped so it never
        decreases, and a terminal transition stamps `end_time`, `duration`
        and progress 100.

        Args:
            job_id: Job identifier.
            update: Requested change.

        Returns:
            AsyncJob | None: Published snapshot, or None when the job is unknown.

        Raises:
            JobTransitionError: Raised when the update moves the job backward.
        """

        with self._lock:
            current_job = self._jobs.get(job_id)
            if current_job is None:
                return None
            if current_job.status.job_status_is_terminal():
                logger.warning(
                    "ignoring update of terminal job job_id=%s status=%s",
                    job_id,
                    current_job.status.value,
                )
                return current_job
            updated_job = self._job_registry_apply(current_job, update)
            self._jobs[job_id] = updated_job
            self._job_registry_mirror(f"update job {job_id}", lambda store: store.db_job_update(updated_job))

        if updated_job.status.job_status_is_terminal():
            logger.info(
                "job finished job_id=%s status=%s duration=%s",
                job_id,
                updated_job.status.value,
                updated_job.duration,
            )
        return updated_job

    def job_registry_delete(self, job_id: str) -> bool:
        with self._lock:
            removed_job = self._jobs.pop(job_id, None)
            if removed_job is None:
                return False
            self._job_registry_mirror(f"delete job {job_id}", lambda store: store.db_job_delete_many((job_id,)))
        logger.info("job deleted job_id=%s", job_id)
        return True

    def job_registry_delete_matching(
        self,
        statuses: Iterable[str] | None = None,
        older_than_days: int | None = None,
    ) -> int:
        """Delete jobs matching a status set or an age threshold.

        Status names are matched case-insensitively. When statuses are given
        they alone decide; otherwise jobs started more than `older_than_days`
        days ago are deleted regardless of status.

        Args:
            statuses: Status names.
            older_than_days: Minimum age in days of the job start time.

        Returns:
            int: Number of deleted jobs.

        Raises:
            ValueError: Raised when neither filter is provided or the age is not positive.
        """

        normalized_statuses = {status.strip().lower() for status in statuses or () if status.strip()}
        if older_than_days is not None and older_than_days < 1:
            raise ValueError("older_than_days must be a positive number of days")
        if not normalized_statuses and older_than_days is None:
            raise ValueError("at least one filter is required: statuses or older_than_days")

        with self._lock:
            if normalized_statuses:
                matching_ids = [
                    job_id for job_id, job in self._jobs.items() if job.status.value in normalized_statuses
                ]
            else:
                cutoff = self._clock() - timedelta(days=older_than_days)
                matching_ids = [job_id for job_id, job in self._jobs.items() if job.start_time < cutoff]
            for job_id in matching_ids:
                del self._jobs[job_id]
            if matching_ids:
                deleted_ids = tuple(matching_ids)
                self._job_registry_mirror(
                    f"delete {len(deleted_ids)} jobs",
                    lambda store: store.db_job_delete_many(deleted_ids),
                )

        logger.info("bulk job delete removed=%d", len(matching_ids))
        return len(matching_ids)

    def job_registry_evict_expired(self, now: datetime | None = None) -> int:
        """Drop terminal jobs whose `end_time` is older than the retention window.

        Eviction is memory-only; mirrored rows stay in the store.

        Args:
            now: Reference instant, defaults to the registry clock.

        Returns:
            int: Number of evicted jobs.
        """

        cutoff = (now or self._clock()) - self._retention
        with self._lock:
            expired_ids = [
                job_id
                for job_id, job in self._jobs.items()
                if job.end_time is not None and job.end_time < cutoff
            ]
            for job_id in expired_ids:
                del self._jobs[job_id]
        return len(expired_ids)

    def job_registry_rehydrate(self) -> int:
        """Load recent jobs from the store into memory.

        Jobs already in memory are kept as they are. Store failures are logged
        and leave the registry empty-handed.

        Returns:
            int: Number of jobs loaded.
        """

        if self._store is None:
            return 0
        started_after = self._clock() - self._rehydrate_window
        try:
            stored_jobs = self._store.db_job_list_started_since(started_after)
        except RuntimeError as error:
            logger.error("job rehydration failed: %s", error)
            return 0

        loaded_count = 0
        with self._lock:
            for job in stored_jobs:
                if job.job_id not in self._jobs:
                    self._jobs[job.job_id] = job
                    loaded_count += 1
        logger.info("rehydrated %d jobs started after %s", loaded_count, started_after.isoformat())
        return loaded_count

    def _job_registry_apply(self, current_job: AsyncJob, update: JobUpdate) -> AsyncJob:
        target_status = update.status or current_job.status
        if target_status not in JOB_ALLOWED_TRANSITIONS[current_job.status]:
            raise JobTransitionError(
                f"job {current_job.job_id} cannot move from {current_job.status.value} to {target_status.value}"
            )

        progress = current_job.progress
        if update.progress is not None:
            progress = max(progress, min(100, update.progress))

        if not target_status.job_status_is_terminal():
            return replace(current_job, status=target_status, progress=progress)

        end_time = self._clock()
        return replace(
            current_job,
            status=target_status,
            progress=100,
            end_time=end_time,
            duration=str(end_time - current_job.start_time),
            result=(update.result or {}) if target_status is JobStatus.COMPLETED else None,
            error=(update.error or "job failed") if target_status is JobStatus.FAILED else None,
        )

    def _job_registry_mirror(self, description: str, operation: Callable[[JobStorePort], Any]) -> None:
        if self._store is None or self._background_writer is None:
            return
        self._background_writer.writer_submit(description, operation, self._store)
