"""Typed interfaces for database-layer services.

All SQL and DBAPI access must remain in the db package and its submodules.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Protocol

from procgate.domain import AsyncJob, HealthStatus, OutBinding


class DatabaseHealthPort(Protocol):
    """Port definition for database connectivity verification."""

    def db_connection_label(self) -> str:
        """Return a stable label for the active database connection target.

        Returns:
            str: Database target label for diagnostics.

        Raises:
            RuntimeError: Raised when connection metadata is unavailable.
        """

    def db_check_health(self) -> HealthStatus:
        """Check database connectivity and return deterministic health payload.

        Returns:
            HealthStatus: Database health status payload.

        Raises:
            ConnectionError: Raised when database cannot be reached.
        """


class InvocationStage(str, Enum):
    """Backend round-trip stage where an invocation failure surfaced."""

    PREPARE = "prepare"
    EXECUTE = "execute"


class InvocationCheckpoint(str, Enum):
    """Progress checkpoints reported while one invocation runs."""

    PARAMETERS_BOUND = "parameters_bound"
    STATEMENT_PREPARED = "statement_prepared"
    EXECUTION_STARTED = "execution_started"
    RESULTS_HARVESTED = "results_harvested"


CheckpointCallback = Callable[[InvocationCheckpoint], None]


class InvocationBackendError(RuntimeError):
    """Backend failure raised while preparing or executing one call.

    Attributes:
        stage: Round-trip stage where the failure surfaced.
        error_code: Recognized backend error signature, if any.
        raw_message: Untranslated driver message.
    """

    def __init__(
        self,
        message: str,
        stage: InvocationStage,
        error_code: str | None = None,
        raw_message: str | None = None,
    ):
        super().__init__(message)
        self.stage = stage
        self.error_code = error_code
        self.raw_message = raw_message if raw_message is not None else message


@dataclass(frozen=True)
class PreparedCall:
    """Call text and positional arguments ready for one backend round trip.

    Attributes:
        routine_name: Routine name as submitted, used in translated errors.
        is_function: Whether the call assigns a return slot.
        qualified_name: Formatted callable reference.
        call_text: Anonymous block text with positional placeholders.
        arguments: Literal values and OutBinding destinations, in placeholder order.
        out_bindings: OUT slots to harvest after execution.
    """

    routine_name: str
    is_function: bool
    qualified_name: str
    call_text: str
    arguments: tuple[Any, ...]
    out_bindings: tuple[OutBinding, ...]


class ProcedureExecutorPort(Protocol):
    """Port definition for executing prepared calls against the backend."""

    def db_procedure_execute(
        self,
        prepared_call: PreparedCall,
        checkpoint: CheckpointCallback | None = None,
    ) -> dict[str, Any]:
        """Prepare and execute one call, then harvest OUT values.

        Args:
            prepared_call: Call text and positional arguments.
            checkpoint: Optional callback receiving progress checkpoints.

        Returns:
            dict[str, Any]: OUT values by parameter name.

        Raises:
            InvocationBackendError: Raised on prepare or execute failure.
        """


class JobStorePort(Protocol):
    """Port definition for the persistent mirror of async jobs."""

    def db_job_insert(self, job: AsyncJob) -> None:
        """Insert one newly created job row.

        Args:
            job: Job snapshot to persist.

        Raises:
            RuntimeError: Raised when persistence fails.
        """

    def db_job_update(self, job: AsyncJob) -> None:
        """Overwrite the mutable columns of one job row.

        Args:
            job: Job snapshot to persist.

        Raises:
            RuntimeError: Raised when persistence fails.
        """

    def db_job_delete_many(self, job_ids: Iterable[str]) -> int:
        """Delete job rows by identifier.

        Args:
            job_ids: Identifiers to delete.

        Returns:
            int: Number of deleted rows.

        Raises:
            RuntimeError: Raised when persistence fails.
        """

    def db_job_list_started_since(self, started_after: datetime) -> list[AsyncJob]:
        """List jobs whose start time is at or after the given instant.

        Args:
            started_after: Inclusive lower bound on start time.

        Returns:
            list[AsyncJob]: Matching jobs, newest first.

        Raises:
            RuntimeError: Raised when database read fails.
        """


@dataclass(frozen=True)
class QueryLogRecord:
    """Audit record of one synchronous invocation attempt.

    Attributes:
        log_id: Unique record identifier.
        query_type: Invocation category (`PROCEDURE`).
        query_text: Routine name as submitted.
        params: Request parameters serialized as JSON text.
        execution_time: Attempt start timestamp in UTC.
        duration: Elapsed time text.
        rows_affected: Number of OUT values returned.
        success: Whether the attempt succeeded.
        error_msg: Translated failure message.
        user_ip: Client address, when known.
    """

    log_id: str
    query_type: str
    query_text: str
    params: str | None
    execution_time: datetime
    duration: str
    rows_affected: int
    success: bool
    error_msg: str | None
    user_ip: str | None


class QueryLogRepositoryPort(Protocol):
    """Port definition for invocation audit persistence."""

    def db_query_log_insert(self, record: QueryLogRecord) -> None:
        """Persist one audit record.

        Args:
            record: Audit record to insert.

        Raises:
            RuntimeError: Raised when persistence fails.
        """
