"""Application bootstrap wiring for startup validation and dependency assembly."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI
from sqlalchemy import Engine

from procgate.api import create_api_application
from procgate.config import AppSettings, config_load_settings
from procgate.db import (
    BackgroundWriter,
    SQLAlchemyDatabaseHealthService,
    SQLAlchemyJobStore,
    SQLAlchemyProcedureExecutor,
    SQLAlchemyQueryLogService,
    db_create_engine,
    db_ensure_schema,
)
from procgate.invocation import ProcedureInvocationService
from procgate.jobs import JobRegistry, JobRunner, RetentionSweeper

logger = logging.getLogger("procgate.bootstrap")


def bootstrap_create_engine(settings: AppSettings) -> Engine:
    """Build the pooled engine from validated settings.

    Args:
        settings: Validated runtime settings.

    Returns:
        Engine: Pooled SQLAlchemy engine.
    """

    return db_create_engine(
        database_url=settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        pool_recycle_seconds=settings.database_pool_recycle_seconds,
    )


def bootstrap_create_application(settings: AppSettings | None = None) -> FastAPI:
    """Assemble the runtime application after validating startup configuration.

    Args:
        settings: Optional preloaded settings; loaded from the environment when omitted.

    Returns:
        FastAPI: Fully initialized FastAPI application instance.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    resolved_settings = settings or config_load_settings()
    engine = bootstrap_create_engine(resolved_settings)
    background_writer = BackgroundWriter(max_workers=resolved_settings.background_writer_workers)
    job_registry = JobRegistry(
        store=SQLAlchemyJobStore(engine=engine),
        background_writer=background_writer,
        retention=timedelta(hours=resolved_settings.job_retention_hours),
        rehydrate_window=timedelta(hours=resolved_settings.job_rehydrate_window_hours),
    )
    invocation_service = ProcedureInvocationService(
        executor=SQLAlchemyProcedureExecutor(engine=engine),
        query_log_repository=SQLAlchemyQueryLogService(engine=engine),
        background_writer=background_writer,
    )
    job_runner = JobRunner(
        registry=job_registry,
        invocation_service=invocation_service,
        max_workers=resolved_settings.job_max_workers,
    )
    sweeper = RetentionSweeper(registry=job_registry, interval_seconds=resolved_settings.job_sweep_interval_seconds)

    return create_api_application(
        settings=resolved_settings,
        db_health_service=SQLAlchemyDatabaseHealthService(engine=engine),
        invocation_service=invocation_service,
        job_runner=job_runner,
        job_registry=job_registry,
        lifespan=bootstrap_build_lifespan(
            settings=resolved_settings,
            engine=engine,
            job_registry=job_registry,
            job_runner=job_runner,
            sweeper=sweeper,
            background_writer=background_writer,
        ),
    )


def bootstrap_build_lifespan(
    settings: AppSettings,
    engine: Engine,
    job_registry: JobRegistry,
    job_runner: JobRunner,
    sweeper: RetentionSweeper,
    background_writer: BackgroundWriter,
) -> Callable[[FastAPI], AbstractAsyncContextManager[None]]:
    """Build the startup and shutdown hook of the runtime.

    Startup creates missing tables when enabled, rehydrates recent jobs and
    starts the retention sweeper. Shutdown stops the sweeper, stops accepting
    jobs without awaiting in-flight ones, drains pending writes and disposes
    the pool.

    Returns:
        Callable[[FastAPI], AbstractAsyncContextManager[None]]: FastAPI lifespan hook.
    """

    @asynccontextmanager
    async def bootstrap_lifespan(_application: FastAPI) -> AsyncIterator[None]:
        if settings.database_auto_create_schema:
            try:
                db_ensure_schema(engine)
            except RuntimeError as error:
                logger.error("table auto-creation failed, continuing without it: %s", error)
        job_registry.job_registry_rehydrate()
        sweeper.sweeper_start()
        logger.info("procgate started environment=%s", settings.environment_name)
        try:
            yield
        finally:
            sweeper.sweeper_stop()
            job_runner.job_runner_shutdown(wait=False)
            background_writer.writer_shutdown(wait=True)
            engine.dispose()
            logger.info("procgate stopped")

    return bootstrap_lifespan
