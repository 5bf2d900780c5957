"""Database layer package for all SQL and persistence boundaries."""

from .background_writer import BackgroundWriter
from .error_codes import InvocationErrorCode, invocation_error_detect_code, invocation_error_translate
from .health import SQLAlchemyDatabaseHealthService
from .interfaces import (
	CheckpointCallback,
	DatabaseHealthPort,
	InvocationBackendError,
	InvocationCheckpoint,
	InvocationStage,
	JobStorePort,
	PreparedCall,
	ProcedureExecutorPort,
	QueryLogRecord,
	QueryLogRepositoryPort,
)
from .job_store import SQLAlchemyJobStore
from .procedure_executor import SQLAlchemyProcedureExecutor
from .query_log import SQLAlchemyQueryLogService
from .schema import async_jobs_table, db_ensure_schema, db_metadata, query_log_table
from .session import db_create_engine

__all__ = [
	"BackgroundWriter",
	"CheckpointCallback",
	"DatabaseHealthPort",
	"InvocationBackendError",
	"InvocationCheckpoint",
	"InvocationErrorCode",
	"InvocationStage",
	"JobStorePort",
	"PreparedCall",
	"ProcedureExecutorPort",
	"QueryLogRecord",
	"QueryLogRepositoryPort",
	"SQLAlchemyDatabaseHealthService",
	"SQLAlchemyJobStore",
	"SQLAlchemyProcedureExecutor",
	"SQLAlchemyQueryLogService",
	"async_jobs_table",
	"db_create_engine",
	"db_ensure_schema",
	"db_metadata",
	"invocation_error_detect_code",
	"invocation_error_translate",
	"query_log_table",
]
