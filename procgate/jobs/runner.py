"""Background execution of async invocation jobs."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Any, Final

from procgate.db.interfaces import InvocationBackendError, InvocationCheckpoint
from procgate.domain import AsyncJob, JobStatus, ProcedureCall
from procgate.invocation import ProcedureInvocationService

from .interfaces import JobRunnerPort, JobUpdate
from .registry import JobRegistry

logger = logging.getLogger("procgate.jobs.runner")

JOB_DISPATCH_PROGRESS: Final[int] = 10
JOB_CHECKPOINT_PROGRESS: Final[dict[InvocationCheckpoint, int | None]] = {
    InvocationCheckpoint.PARAMETERS_BOUND: 30,
    InvocationCheckpoint.STATEMENT_PREPARED: None,
    InvocationCheckpoint.EXECUTION_STARTED: 50,
    InvocationCheckpoint.RESULTS_HARVESTED: 80,
}


class JobRunner(JobRunnerPort):
    """Thread-pool runner driving each job from pending to a terminal status.

    In-flight jobs are never cancelled. Every task body runs inside a fault
    boundary, so a job always ends completed or failed.
    """

    def __init__(
        self,
        registry: JobRegistry,
        invocation_service: ProcedureInvocationService,
        max_workers: int = 16,
    ):
        """Initialize job runner.

        Args:
            registry: Registry owning job state.
            invocation_service: Shared invocation service.
            max_workers: Concurrent background invocations.

        Raises:
            ValueError: Raised when collaborators are missing or max_workers is below one.
        """

        if registry is None:
            raise ValueError("registry must not be None")
        if invocation_service is None:
            raise ValueError("invocation_service must not be None")
        if max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        self._registry = registry
        self._invocation_service = invocation_service
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="procgate-job")

    def job_dispatch(self, call: ProcedureCall, params_snapshot: dict[str, Any] | None = None) -> AsyncJob:
        """Register one pending job and schedule its execution.

        Args:
            call: Validated procedure call.
            params_snapshot: Request snapshot stored on the job, defaults to the call snapshot.

        Returns:
            AsyncJob: Newly created pending job.
        """

        snapshot = params_snapshot if params_snapshot is not None else call.procedure_call_snapshot()
        job = self._registry.job_registry_create(call.name, snapshot)
        try:
            self._executor.submit(self._job_run, job.job_id, call)
        except RuntimeError:
            logger.warning("job runner is shut down, failing job_id=%s", job.job_id)
            self._registry.job_registry_update(
                job.job_id,
                JobUpdate(status=JobStatus.FAILED, error="Job runner is shutting down"),
            )
        return job

    def job_runner_shutdown(self, wait: bool = False) -> None:
        """Stop accepting jobs. In-flight jobs keep running unless `wait` is set."""

        self._executor.shutdown(wait=wait, cancel_futures=not wait)

    def _job_run(self, job_id: str, call: ProcedureCall) -> None:
        try:
            self._registry.job_registry_update(
                job_id,
                JobUpdate(status=JobStatus.RUNNING, progress=JOB_DISPATCH_PROGRESS),
            )
            outputs = self._invocation_service.invocation_execute(
                call,
                checkpoint=partial(self._job_checkpoint, job_id),
            )
            self._registry.job_registry_update(job_id, JobUpdate(status=JobStatus.COMPLETED, result=outputs))
        except InvocationBackendError as error:
            self._registry.job_registry_update(job_id, JobUpdate(status=JobStatus.FAILED, error=str(error)))
        except Exception as error:  # pylint: disable=broad-exception-caught
            logger.exception("unexpected failure in job job_id=%s", job_id)
            self._registry.job_registry_update(
                job_id,
                JobUpdate(status=JobStatus.FAILED, error=f"Unexpected failure while running job: {error}"),
            )

    def _job_checkpoint(self, job_id: str, checkpoint: InvocationCheckpoint) -> None:
        progress = JOB_CHECKPOINT_PROGRESS.get(checkpoint)
        if progress is not None:
            self._registry.job_registry_update(job_id, JobUpdate(progress=progress))
