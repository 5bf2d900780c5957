"""Procedure invocation router for synchronous and background calls."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from procgate.db import InvocationBackendError
from procgate.domain import ProcedureCallValidationError
from procgate.invocation import ProcedureInvocationService
from procgate.jobs import JobRunnerPort

from ..schemas import ProcedureRequestBody, api_build_procedure_call

logger = logging.getLogger("procgate.api.procedure")


def api_create_procedure_router(
    invocation_service: ProcedureInvocationService,
    job_runner: JobRunnerPort,
) -> APIRouter:
    """Create router exposing procedure and function invocation endpoints.

    Args:
        invocation_service: Shared invocation service for synchronous calls.
        job_runner: Runner dispatching background calls.

    Returns:
        APIRouter: Router exposing `/procedure` and `/procedure/async`.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if invocation_service is None:
        raise ValueError("invocation_service must not be None")
    if job_runner is None:
        raise ValueError("job_runner must not be None")

    router = APIRouter(prefix="/procedure", tags=["procedure"])

    @router.post("")
    def api_procedure_invoke(body: ProcedureRequestBody, request: Request) -> JSONResponse:
        """Invoke one routine and wait for its OUT values.

        Args:
            body: Procedure request body.
            request: Incoming request, used for the client address.

        Returns:
            JSONResponse: 200 with OUT values, 400 on invalid calls, 500 on backend failures.
        """

        try:
            call = api_build_procedure_call(body)
        except ProcedureCallValidationError as error:
            return JSONResponse(content={"error": str(error)}, status_code=status.HTTP_400_BAD_REQUEST)

        client_address = request.client.host if request.client is not None else None
        try:
            outputs = invocation_service.invocation_execute_audited(call, client_address=client_address)
        except InvocationBackendError as error:
            logger.warning("procedure %s failed at %s: %s", call.name, error.stage.value, error)
            return JSONResponse(content={"error": str(error)}, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
        return JSONResponse(content={"status": "ok", "out": outputs}, status_code=status.HTTP_200_OK)

    @router.post("/async")
    def api_procedure_invoke_async(body: ProcedureRequestBody) -> JSONResponse:
        """Register a background invocation and return its job handle.

        Args:
            body: Procedure request body.

        Returns:
            JSONResponse: 202 with the job id, 400 on invalid calls.
        """

        try:
            call = api_build_procedure_call(body)
        except ProcedureCallValidationError as error:
            return JSONResponse(content={"error": str(error)}, status_code=status.HTTP_400_BAD_REQUEST)

        job = job_runner.job_dispatch(call, params_snapshot=body.model_dump(by_alias=True, exclude_none=True))
        payload = {
            "status": "accepted",
            "job_id": job.job_id,
            "message": "Procedure running in background",
            "check_status_url": f"/jobs/{job.job_id}",
        }
        return JSONResponse(content=payload, status_code=status.HTTP_202_ACCEPTED)

    return router
