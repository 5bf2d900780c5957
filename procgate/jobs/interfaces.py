"""Typed interfaces for job-layer lifecycle responsibilities."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Protocol

from procgate.domain import AsyncJob, JobStatus, ProcedureCall


class JobTransitionError(ValueError):
    """Raised when an update would move a job backward in its lifecycle."""


@dataclass(frozen=True)
class JobUpdate:
    """Requested change to one job.

    Attributes:
        status: Target status, None to keep the current one.
        progress: Reported progress, clamped to never decrease.
        result: OUT values, kept only on completion.
        error: Failure message, kept only on failure.
    """

    status: JobStatus | None = None
    progress: int | None = None
    result: dict[str, Any] | None = None
    error: str | None = None


class JobRegistryPort(Protocol):
    """Port definition for reading and deleting registered jobs."""

    def job_registry_get(self, job_id: str) -> AsyncJob | None:
        """Return one job snapshot.

        Args:
            job_id: Job identifier.

        Returns:
            AsyncJob | None: Snapshot, or None when unknown.
        """

    def job_registry_list(self) -> list[AsyncJob]:
        """Return all job snapshots, newest first.

        Returns:
            list[AsyncJob]: Job snapshots.
        """

    def job_registry_delete(self, job_id: str) -> bool:
        """Delete one job.

        Args:
            job_id: Job identifier.

        Returns:
            bool: True when the job existed.
        """

    def job_registry_delete_matching(
        self,
        statuses: Iterable[str] | None = None,
        older_than_days: int | None = None,
    ) -> int:
        """Delete jobs matching a status set or an age threshold.

        Args:
            statuses: Status names; when non-empty they alone decide.
            older_than_days: Minimum age in days of the job start time.

        Returns:
            int: Number of deleted jobs.

        Raises:
            ValueError: Raised when no filter is provided.
        """


class JobRunnerPort(Protocol):
    """Port definition for dispatching background invocations."""

    def job_dispatch(self, call: ProcedureCall, params_snapshot: dict[str, Any] | None = None) -> AsyncJob:
        """Register one pending job and schedule its execution.

        Args:
            call: Validated procedure call.
            params_snapshot: Request snapshot stored on the job.

        Returns:
            AsyncJob: Newly created pending job.
        """
