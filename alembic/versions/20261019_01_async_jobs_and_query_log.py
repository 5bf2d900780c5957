"""Async job mirror and invocation audit tables

Revision ID: 20261019_01
Revises: None
Create Date: 2026-10-19
"""
# pylint: disable=no-member,invalid-name,wrong-import-order

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20261019_01"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""

    op.create_table(
        "async_jobs",
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
    )
    op.create_index("idx_async_jobs_status", "async_jobs", ["status"])
    op.create_index("idx_async_jobs_start_time", "async_jobs", ["start_time"])
    op.create_index("idx_async_jobs_created_at", "async_jobs", ["created_at"])

    op.create_table(
        "query_log",
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
    )
    op.create_index("idx_query_log_type", "query_log", ["query_type"])
    op.create_index("idx_query_log_time", "query_log", ["execution_time"])
    op.create_index("idx_query_log_success", "query_log", ["success"])
    op.create_index("idx_query_log_created", "query_log", ["created_at"])


def downgrade() -> None:
    """Downgrade schema."""

    op.drop_index("idx_query_log_created", table_name="query_log")
    op.drop_index("idx_query_log_success", table_name="query_log")
    op.drop_index("idx_query_log_time", table_name="query_log")
    op.drop_index("idx_query_log_type", table_name="query_log")
    op.drop_table("query_log")

    op.drop_index("idx_async_jobs_created_at", table_name="async_jobs")
    op.drop_index("idx_async_jobs_start_time", table_name="async_jobs")
    op.drop_index("idx_async_jobs_status", table_name="async_jobs")
    op.drop_table("async_jobs")
