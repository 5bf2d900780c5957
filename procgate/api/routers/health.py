"""Health endpoint router composition for app and database checks."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from procgate.db import DatabaseHealthPort


def api_create_health_router(db_health_service: DatabaseHealthPort, environment_name: str = "development") -> APIRouter:
    """Create health-check router with app and database connectivity status.

    Args:
        db_health_service: DB-layer health service interface.
        environment_name: Deployment label echoed in `/health` payloads.

    Returns:
        APIRouter: Router exposing `/health` and `/ping` endpoints.

    Raises:
        ValueError: Raised when db_health_service is invalid.
    """

    if db_health_service is None:
        raise ValueError("db_health_service must not be None")

    router = APIRouter(tags=["health"])

    @router.get("/health")
    def api_health_status() -> JSONResponse:
        """Return application and database health state.

        Returns:
            JSONResponse: 200 when the database answers, 503 otherwise.
        """

        target = db_health_service.db_connection_label()
        try:
            db_health = db_health_service.db_check_health()
        except ConnectionError as error:
            payload = {
                "status": "degraded",
                "app": "up",
                "database": "down",
                "detail": str(error),
                "target": target,
                "environment": environment_name,
            }
            return JSONResponse(content=payload, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
        payload = {
            "status": "ok",
            "app": "up",
            "database": db_health.status,
            "detail": db_health.detail,
            "target": target,
            "environment": environment_name,
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    @router.get("/ping")
    def api_ping() -> JSONResponse:
        """Return a bare database liveness probe result."""

        try:
            db_health_service.db_check_health()
        except ConnectionError as error:
            return JSONResponse(
                content={"status": "error", "message": str(error)},
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        return JSONResponse(content={"status": "ok"}, status_code=status.HTTP_200_OK)

    return router
