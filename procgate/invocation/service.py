"""Invocation service shared by the synchronous endpoint and the job runner."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from procgate.db.background_writer import BackgroundWriter
from procgate.db.interfaces import (
    CheckpointCallback,
    InvocationBackendError,
    InvocationCheckpoint,
    PreparedCall,
    ProcedureExecutorPort,
    QueryLogRecord,
    QueryLogRepositoryPort,
)
from procgate.domain import ProcedureCall

from .call_builder import invocation_prepare_call

logger = logging.getLogger("procgate.invocation")

QUERY_LOG_TYPE_PROCEDURE = "PROCEDURE"


class ProcedureInvocationService:
    """Single entry point turning a procedure call into one backend round trip.

    Sync requests use `invocation_execute_audited`, which also records one
    audit row per attempt. Background jobs use `invocation_execute` with a
    checkpoint callback for progress.
    """

    def __init__(
        self,
        executor: ProcedureExecutorPort,
        query_log_repository: QueryLogRepositoryPort | None = None,
        background_writer: BackgroundWriter | None = None,
    ):
        """Initialize invocation service.

        Args:
            executor: Backend executor for prepared calls.
            query_log_repository: Optional audit persistence.
            background_writer: Writer scheduling audit inserts off the request path.

        Raises:
            ValueError: Raised when executor is None.
        """

        if executor is None:
            raise ValueError("executor must not be None")
        self._executor = executor
        self._query_log_repository = query_log_repository
        self._background_writer = background_writer

    def invocation_prepare(self, call: ProcedureCall) -> PreparedCall:
        """Build the call text and bound arguments for one call.

        Args:
            call: Validated procedure call.

        Returns:
            PreparedCall: Prepared call ready for execution.
        """

        prepared_call = invocation_prepare_call(call)
        logger.debug("prepared call for %s: %s", call.name, prepared_call.call_text)
        return prepared_call

    def invocation_execute(
        self,
        call: ProcedureCall,
        checkpoint: CheckpointCallback | None = None,
    ) -> dict[str, Any]:
        """Execute one call and return its OUT values.

        Args:
            call: Validated procedure call.
            checkpoint: Optional callback receiving progress checkpoints.

        Returns:
            dict[str, Any]: OUT values by parameter name.

        Raises:
            InvocationBackendError: Raised with a translated message on backend failure.
        """

        prepared_call = self.invocation_prepare(call)
        if checkpoint is not None:
            checkpoint(InvocationCheckpoint.PARAMETERS_BOUND)
        return self._executor.db_procedure_execute(prepared_call, checkpoint)

    def invocation_execute_audited(self, call: ProcedureCall, client_address: str | None = None) -> dict[str, Any]:
        """Execute one call and record the attempt in the audit log.

        The audit write is scheduled in the background and never delays or
        fails the response.

        Args:
            call: Validated procedure call.
            client_address: Requesting client address, when known.

        Returns:
            dict[str, Any]: OUT values by parameter name.

        Raises:
            InvocationBackendError: Raised with a translated message on backend failure.
        """

        started_at = datetime.now(timezone.utc)
        try:
            outputs = self.invocation_execute(call)
        except InvocationBackendError as error:
            self._invocation_record_attempt(call, started_at, client_address, rows_affected=0, error_message=str(error))
            raise
        self._invocation_record_attempt(call, started_at, client_address, rows_affected=len(outputs), error_message=None)
        return outputs

    def _invocation_record_attempt(
        self,
        call: ProcedureCall,
        started_at: datetime,
        client_address: str | None,
        rows_affected: int,
        error_message: str | None,
    ) -> None:
        if self._query_log_repository is None or self._background_writer is None:
            return
        record = QueryLogRecord(
            log_id=uuid4().hex,
            query_type=QUERY_LOG_TYPE_PROCEDURE,
            query_text=call.name,
            params=json.dumps(call.procedure_call_snapshot()["params"], default=str),
            execution_time=started_at,
            duration=str(datetime.now(timezone.utc) - started_at),
            rows_affected=rows_affected,
            success=error_message is None,
            error_msg=error_message,
            user_ip=client_address,
        )
        self._background_writer.writer_submit(
            f"query log {record.log_id}",
            self._query_log_repository.db_query_log_insert,
            record,
        )
