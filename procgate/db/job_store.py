"""Database service mirroring async jobs into the `async_jobs` table."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Engine, delete, insert, select, update
from sqlalchemy.exc import SQLAlchemyError

from procgate.domain import AsyncJob, JobStatus

from .interfaces import JobStorePort
from .schema import async_jobs_table

logger = logging.getLogger("procgate.db.job_store")


class SQLAlchemyJobStore(JobStorePort):
    """SQLAlchemy-backed persistent mirror of the in-memory job registry.

    Rows hold the same snapshot the registry publishes. JSON payloads are
    stored as text, timestamps are written in UTC.
    """

    def __init__(self, engine: Engine):
        """Initialize job store.

        Args:
            engine: SQLAlchemy engine used for all persistence operations.

        Raises:
            ValueError: Raised when engine is None.
        """

        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine

    def db_job_insert(self, job: AsyncJob) -> None:
        """Insert one newly created job row.

        Args:
            job: Job snapshot to persist.

        Raises:
            RuntimeError: Raised when persistence fails.
        """

        try:
            with self._engine.begin() as connection:
                connection.execute(insert(async_jobs_table).values(**self._db_job_to_row(job)))
        except SQLAlchemyError as error:
            raise RuntimeError(f"failed to insert job job_id={job.job_id}") from error

    def db_job_update(self, job: AsyncJob) -> None:
        """Overwrite the mutable columns of one job row.

        Rows that no longer exist are left absent, so a late update never
        resurrects a deleted job.

        Args:
            job: Job snapshot to persist.

        Raises:
            RuntimeError: Raised when persistence fails.
        """

        row = self._db_job_to_row(job)
        mutable_columns = {
            column_name: row[column_name]
            for column_name in ("status", "end_time", "duration", "result", "error_msg", "progress")
        }
        try:
            with self._engine.begin() as connection:
                connection.execute(
                    update(async_jobs_table)
                    .where(async_jobs_table.c.job_id == job.job_id)
                    .values(**mutable_columns)
                )
        except SQLAlchemyError as error:
            raise RuntimeError(f"failed to update job job_id={job.job_id}") from error

    def db_job_delete_many(self, job_ids: Iterable[str]) -> int:
        """Delete job rows by identifier.

        Args:
            job_ids: Identifiers to delete.

        Returns:
            int: Number of deleted rows.

        Raises:
            RuntimeError: Raised when persistence fails.
        """

        normalized_job_ids = [job_id for job_id in job_ids if job_id]
        if not normalized_job_ids:
            return 0
        try:
            with self._engine.begin() as connection:
                result = connection.execute(
                    delete(async_jobs_table).where(async_jobs_table.c.job_id.in_(normalized_job_ids))
                )
                return int(result.rowcount or 0)
        except SQLAlchemyError as error:
            raise RuntimeError("failed to delete jobs") from error

    def db_job_list_started_since(self, started_after: datetime) -> list[AsyncJob]:
        """List jobs whose start time is at or after the given instant.

        Args:
            started_after: Inclusive lower bound on start time.

        Returns:
            list[AsyncJob]: Matching jobs, newest first. Rows that cannot be
                decoded are logged and skipped.

        Raises:
            RuntimeError: Raised when database read fails.
        """

        statement = (
            select(async_jobs_table)
            .where(async_jobs_table.c.start_time >= _db_to_utc(started_after))
            .order_by(async_jobs_table.c.start_time.desc())
        )
        try:
            with self._engine.connect() as connection:
                rows = connection.execute(statement).mappings().all()
        except SQLAlchemyError as error:
            raise RuntimeError("failed to list recent jobs") from error
        jobs: list[AsyncJob] = []
        for row in rows:
            try:
                jobs.append(self._db_row_to_job(row))
            except (TypeError, ValueError) as error:
                logger.warning("skipping unreadable job row job_id=%s: %s", row["job_id"], error)
        return jobs

    @staticmethod
    def _db_job_to_row(job: AsyncJob) -> dict[str, Any]:
        return {
            "job_id": job.job_id,
            "status": job.status.value,
            "procedure_name": job.procedure_name,
            "params": _db_dump_json(job.params),
            "start_time": _db_to_utc(job.start_time),
            "end_time": _db_to_utc(job.end_time) if job.end_time is not None else None,
            "duration": job.duration,
            "result": _db_dump_json(job.result),
            "error_msg": job.error,
            "progress": job.progress,
        }

    @staticmethod
    def _db_row_to_job(row: Any) -> AsyncJob:
        end_time = row["end_time"]
        return AsyncJob(
            job_id=str(row["job_id"]),
            status=JobStatus(str(row["status"]).lower()),
            procedure_name=str(row["procedure_name"]),
            params=_db_load_json(row["params"]),
            start_time=_db_to_utc(row["start_time"]),
            end_time=_db_to_utc(end_time) if end_time is not None else None,
            duration=row["duration"],
            result=_db_load_json(row["result"]),
            error=row["error_msg"],
            progress=int(row["progress"] or 0),
        )


def _db_to_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime, treating naive values as UTC."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _db_dump_json(payload: dict[str, Any] | None) -> str | None:
    if payload is None:
        return None
    return json.dumps(payload, default=str)


def _db_load_json(raw_payload: str | None) -> dict[str, Any] | None:
    if raw_payload is None or raw_payload == "":
        return None
    loaded_payload = json.loads(raw_payload)
    return loaded_payload if isinstance(loaded_payload, dict) else None
