"""Connectivity probe against the gateway's backing database."""

import logging
import time
from typing import Final

from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError

from procgate.domain import HealthStatus

from .interfaces import DatabaseHealthPort

logger = logging.getLogger("procgate.db.health")

# Oracle rejects a bare SELECT without a FROM clause.
DIALECT_PROBE_STATEMENTS: Final[dict[str, str]] = {"oracle": "SELECT 1 FROM DUAL"}
DEFAULT_PROBE_STATEMENT: Final[str] = "SELECT 1"


class SQLAlchemyDatabaseHealthService(DatabaseHealthPort):
    """Round-trips one trivial statement through the engine pool."""

    def __init__(self, engine: Engine):
        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine
        self._probe_sql = DIALECT_PROBE_STATEMENTS.get(engine.dialect.name, DEFAULT_PROBE_STATEMENT)

    def db_connection_label(self) -> str:
        """Return the engine URL with the password masked."""

        return self._engine.url.render_as_string(hide_password=True)

    def db_check_health(self) -> HealthStatus:
        """Run the dialect probe and report how long the round trip took.

        Returns:
            HealthStatus: `ok` status with dialect and latency in the detail.

        Raises:
            ConnectionError: Raised when the probe cannot reach the database.
        """

        started = time.perf_counter()
        try:
            with self._engine.connect() as connection:
                connection.execute(text(self._probe_sql)).scalar()
        except SQLAlchemyError as error:
            logger.warning("database probe failed on %s: %s", self._engine.dialect.name, error)
            raise ConnectionError("database connectivity check failed") from error
        elapsed_ms = (time.perf_counter() - started) * 1000
        return HealthStatus(
            status="ok",
            detail=f"{self._engine.dialect.name} answered in {elapsed_ms:.1f} ms",
        )
