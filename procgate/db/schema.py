"""Table definitions for the async job mirror and the invocation audit log."""

from __future__ import annotations

import sqlalchemy as sa
from sqlalchemy import Engine
from sqlalchemy.exc import SQLAlchemyError

db_metadata = sa.MetaData()

async_jobs_table = sa.Table(
    "async_jobs",
    db_metadata,
    sa.Column("job_id", sa.String(32), primary_key=True),
    sa.Column("status", sa.String(20), nullable=False),
    sa.Column("procedure_name", sa.String(200), nullable=False),
    sa.Column("params", sa.Text(), nullable=True),
    sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
    sa.Column("end_time", sa.DateTime(timezone=True), nullable=True),
    sa.Column("duration", sa.String(50), nullable=True),
    sa.Column("result", sa.Text(), nullable=True),
    sa.Column("error_msg", sa.Text(), nullable=True),
    sa.Column("progress", sa.Integer(), nullable=False, server_default=sa.text("0")),
    sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.current_timestamp()),
    sa.Index("idx_async_jobs_status", "status"),
    sa.Index("idx_async_jobs_start_time", "start_time"),
    sa.Index("idx_async_jobs_created_at", "created_at"),
)

query_log_table = sa.Table(
    "query_log",
    db_metadata,
    sa.Column("log_id", sa.String(32), primary_key=True),
    sa.Column("query_type", sa.String(20), nullable=False),
    sa.Column("query_text", sa.Text(), nullable=False),
    sa.Column("params", sa.Text(), nullable=True),
    sa.Column("execution_time", sa.DateTime(timezone=True), nullable=False),
    sa.Column("duration", sa.String(50), nullable=True),
    sa.Column("rows_affected", sa.Integer(), nullable=True),
    sa.Column("success", sa.Boolean(), nullable=False, server_default=sa.text("1")),
    sa.Column("error_msg", sa.Text(), nullable=True),
    sa.Column("user_ip", sa.String(50), nullable=True),
    sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.current_timestamp()),
    sa.Index("idx_query_log_type", "query_type"),
    sa.Index("idx_query_log_time", "execution_time"),
    sa.Index("idx_query_log_success", "success"),
    sa.Index("idx_query_log_created", "created_at"),
)


def db_ensure_schema(engine: Engine) -> None:
    """Create the job mirror and audit tables when they do not exist yet.

    Args:
        engine: SQLAlchemy engine of the target database.

    Returns:
        None: Tables are created as a side effect.

    Raises:
        RuntimeError: Raised when table creation fails.
    """

    try:
        db_metadata.create_all(engine, checkfirst=True)
    except SQLAlchemyError as error:
        raise RuntimeError("failed to create gateway tables") from error
