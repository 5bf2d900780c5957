"""Database service for synchronous invocation audit records."""

from __future__ import annotations

from datetime import timezone

from sqlalchemy import Engine, insert
from sqlalchemy.exc import SQLAlchemyError

from .interfaces import QueryLogRecord, QueryLogRepositoryPort
from .schema import query_log_table


class SQLAlchemyQueryLogService(QueryLogRepositoryPort):
    """SQLAlchemy-backed writer for the `query_log` audit table."""

    def __init__(self, engine: Engine):
        """Initialize audit log service.

        Args:
            engine: SQLAlchemy engine used for all persistence operations.

        Raises:
            ValueError: Raised when engine is None.
        """

        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine

    def db_query_log_insert(self, record: QueryLogRecord) -> None:
        """Persist one audit record.

        Args:
            record: Audit record to insert.

        Raises:
            RuntimeError: Raised when persistence fails.
        """

        execution_time = record.execution_time
        if execution_time.tzinfo is None:
            execution_time = execution_time.replace(tzinfo=timezone.utc)

        try:
            with self._engine.begin() as connection:
                connection.execute(
                    insert(query_log_table).values(
                        log_id=record.log_id,
                        query_type=record.query_type,
                        query_text=record.query_text,
                        params=record.params,
                        execution_time=execution_time.astimezone(timezone.utc),
                        duration=record.duration,
                        rows_affected=record.rows_affected,
                        success=record.success,
                        error_msg=record.error_msg,
                        user_ip=record.user_ip,
                    )
                )
        except SQLAlchemyError as error:
            raise RuntimeError(f"failed to insert query log record log_id={record.log_id}") from error
