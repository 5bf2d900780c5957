"""Database service executing prepared anonymous PL/SQL blocks on the engine DBAPI driver.

The driver is python-oracledb (`oracle+oracledb` URLs). OUT destinations are
allocated as driver cursor variables: numeric slots as nullable floats,
textual slots as fixed-capacity string buffers.
"""

from __future__ import annotations

import logging
from typing import Any, Final

from sqlalchemy import Engine
from sqlalchemy.exc import SQLAlchemyError

from procgate.domain import OutBinding, OutBindingKind

from .error_codes import invocation_error_detect_code, invocation_error_translate
from .interfaces import (
    CheckpointCallback,
    InvocationBackendError,
    InvocationCheckpoint,
    InvocationStage,
    PreparedCall,
    ProcedureExecutorPort,
)

logger = logging.getLogger("procgate.db.procedure_executor")

TEXTUAL_OUT_BUFFER_SIZE: Final[int] = 4000


class SQLAlchemyProcedureExecutor(ProcedureExecutorPort):
    """Executor running each prepared call on one pooled DBAPI connection.

    Every call is its own transaction and is committed on success.
    """

    def __init__(self, engine: Engine):
        """Initialize procedure executor.

        Args:
            engine: SQLAlchemy engine whose pool provides DBAPI connections.

        Raises:
            ValueError: Raised when engine is None.
        """

        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine
        self._driver_error: type[Exception] = engine.dialect.loaded_dbapi.Error

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
            dict[str, Any]: OUT values by parameter name. Numeric slots hold a
                float or None, textual slots hold the driver string verbatim.

        Raises:
            InvocationBackendError: Raised on connection, prepare or execute failure.
        """

        try:
            connection = self._engine.raw_connection()
        except SQLAlchemyError as error:
            raise InvocationBackendError(
                f"failed to acquire database connection: {error}",
                stage=InvocationStage.PREPARE,
            ) from error

        try:
            cursor = connection.cursor()
            try:
                try:
                    cursor.prepare(prepared_call.call_text)
                except self._driver_error as error:
                    raise self._db_backend_error(prepared_call, InvocationStage.PREPARE, error) from error
                _db_notify(checkpoint, InvocationCheckpoint.STATEMENT_PREPARED)

                out_variables: dict[int, Any] = {}
                bind_values: list[Any] = []
                for argument in prepared_call.arguments:
                    if isinstance(argument, OutBinding):
                        variable = self._db_allocate_out_variable(cursor, argument)
                        out_variables[argument.slot_index] = variable
                        bind_values.append(variable)
                    else:
                        bind_values.append(argument)

                _db_notify(checkpoint, InvocationCheckpoint.EXECUTION_STARTED)
                logger.debug("executing %s with %d bind values", prepared_call.qualified_name, len(bind_values))
                try:
                    cursor.execute(None, bind_values)
                    connection.commit()
                except self._driver_error as error:
                    raise self._db_backend_error(prepared_call, InvocationStage.EXECUTE, error) from error

                outputs = {
                    binding.name: self._db_harvest_out_value(binding, out_variables[binding.slot_index])
                    for binding in prepared_call.out_bindings
                }
                _db_notify(checkpoint, InvocationCheckpoint.RESULTS_HARVESTED)
                return outputs
            finally:
                cursor.close()
        finally:
            connection.close()

    @staticmethod
    def _db_allocate_out_variable(cursor: Any, binding: OutBinding) -> Any:
        if binding.kind is OutBindingKind.NUMERIC:
            return cursor.var(float)
        variable = cursor.var(str, TEXTUAL_OUT_BUFFER_SIZE)
        variable.setvalue(0, " " * TEXTUAL_OUT_BUFFER_SIZE)
        return variable

    @staticmethod
    def _db_harvest_out_value(binding: OutBinding, variable: Any) -> Any:
        value = variable.getvalue()
        if binding.kind is OutBindingKind.NUMERIC:
            return None if value is None else float(value)
        return value

    @staticmethod
    def _db_backend_error(
        prepared_call: PreparedCall,
        stage: InvocationStage,
        error: Exception,
    ) -> InvocationBackendError:
        raw_message = str(error)
        error_code = invocation_error_detect_code(raw_message)
        logger.warning(
            "backend %s failure for %s: %s",
            stage.value,
            prepared_call.qualified_name,
            raw_message,
        )
        return InvocationBackendError(
            invocation_error_translate(raw_message, prepared_call.routine_name, prepared_call.is_function),
            stage=stage,
            error_code=error_code.value if error_code is not None else None,
            raw_message=raw_message,
        )


def _db_notify(checkpoint: CheckpointCallback | None, reached: InvocationCheckpoint) -> None:
    if checkpoint is not None:
        checkpoint(reached)
