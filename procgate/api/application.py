"""FastAPI application factory for the procedure gateway.

This module defines API application composition used by the runtime.
"""

from __future__ import annotations

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from procgate.config import AppSettings
from procgate.db import DatabaseHealthPort
from procgate.invocation import ProcedureInvocationService
from procgate.jobs import JobRegistryPort, JobRunnerPort

from .routers import api_create_health_router, api_create_jobs_router, api_create_procedure_router


def create_api_application(
    settings: AppSettings,
    db_health_service: DatabaseHealthPort,
    invocation_service: ProcedureInvocationService,
    job_runner: JobRunnerPort,
    job_registry: JobRegistryPort,
    lifespan: Callable[[FastAPI], AbstractAsyncContextManager[None]] | None = None,
) -> FastAPI:
    """Create the FastAPI application instance for the service.

    Args:
        settings: Validated application settings; the environment label is reported by `/health`.
        db_health_service: Database health service used by health endpoints.
        invocation_service: Shared invocation service for synchronous calls.
        job_runner: Runner dispatching background calls.
        job_registry: Registry owning job state.
        lifespan: Optional startup/shutdown hook.

    Returns:
        FastAPI: Framework application instance with all routers mounted.

    Raises:
        ValueError: Raised when router dependencies are invalid.
    """
    application = FastAPI(title="Procgate", lifespan=lifespan)

    @application.exception_handler(RequestValidationError)
    async def api_request_validation_handler(_request: Request, error: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            content={"error": api_format_validation_error(error)},
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    application.include_router(
        api_create_health_router(db_health_service=db_health_service, environment_name=settings.environment_name)
    )
    application.include_router(
        api_create_procedure_router(invocation_service=invocation_service, job_runner=job_runner)
    )
    application.include_router(api_create_jobs_router(job_registry=job_registry))

    return application


def api_format_validation_error(error: RequestValidationError) -> str:
    """Flatten FastAPI validation details into one readable message.

    Args:
        error: Validation error raised while parsing the request.

    Returns:
        str: Message such as `invalid request: body.name: Field required`.
    """

    details = []
    for detail in error.errors():
        location = ".".join(str(part) for part in detail.get("loc", ()))
        details.append(f"{location}: {detail.get('msg', 'invalid value')}")
    return "invalid request: " + "; ".join(details) if details else "invalid request"
