"""Tests for API health endpoint behavior.

These tests validate deterministic response behavior for healthy and
database-unavailable states.
"""

from fastapi.testclient import TestClient

from procgate.api.application import create_api_application
from procgate.config import AppSettings
from procgate.domain import HealthStatus
from procgate.invocation import ProcedureInvocationService
from procgate.jobs import JobRegistry


class _HealthyDatabaseService:
    """Test double that simulates a healthy database target."""

    def db_connection_label(self) -> str:
        """Return deterministic target label.

        Returns:
            str: Health target label.
        """

        return "oracle+oracledb://test"

    def db_check_health(self) -> HealthStatus:
        """Return healthy database result.

        Returns:
            HealthStatus: Healthy DB response.
        """

        return HealthStatus(status="ok", detail="database connectivity verified")


class _FailingDatabaseService:
    """Test double that simulates a database connectivity failure."""

    def db_connection_label(self) -> str:
        return "oracle+oracledb://test"

    def db_check_health(self) -> HealthStatus:
        """Raise deterministic connection error.

        Raises:
            ConnectionError: Always raised by this test double.
        """

        raise ConnectionError("database connectivity check failed")


class _UnusedExecutor:
    """Executor stub for factory wiring; health tests never invoke it."""

    def db_procedure_execute(self, prepared_call, checkpoint=None):
        raise AssertionError("executor must not be called by health tests")


class _UnusedJobRunner:
    """Runner stub for factory wiring; health tests never dispatch jobs."""

    def job_dispatch(self, call, params_snapshot=None):
        raise AssertionError("runner must not be called by health tests")


def _build_settings() -> AppSettings:
    """Build deterministic settings for API tests.

    Returns:
        AppSettings: Test settings object.
    """

    return AppSettings(environment_name="test", database_url="sqlite://")


def _build_client(db_health_service) -> TestClient:
    application = create_api_application(
        _build_settings(),
        db_health_service,
        ProcedureInvocationService(_UnusedExecutor()),
        _UnusedJobRunner(),
        JobRegistry(),
    )
    return TestClient(application)


def test_api_health_returns_success_when_database_is_available() -> None:
    """Return HTTP 200 and healthy payload when DB service reports success.

    Returns:
        None: Assertions validate response behavior.

    Raises:
        AssertionError: Raised when response does not match expected payload.
    """

    response = _build_client(_HealthyDatabaseService()).get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["app"] == "up"
    assert response.json()["database"] == "ok"


def test_api_health_returns_service_unavailable_when_database_is_down() -> None:
    """Return HTTP 503 and degraded payload when DB service reports failure.

    Returns:
        None: Assertions validate response behavior.

    Raises:
        AssertionError: Raised when response does not match expected payload.
    """

    response = _build_client(_FailingDatabaseService()).get("/health")

    assert response.status_code == 503
    assert response.json()["status"] == "degraded"
    assert response.json()["database"] == "down"


def test_api_ping_reports_database_liveness() -> None:
    healthy_response = _build_client(_HealthyDatabaseService()).get("/ping")
    failing_response = _build_client(_FailingDatabaseService()).get("/ping")

    assert healthy_response.status_code == 200
    assert healthy_response.json() == {"status": "ok"}
    assert failing_response.status_code == 500
    assert failing_response.json()["status"] == "error"
    assert "connectivity" in failing_response.json()["message"]


def test_api_health_reports_environment_and_root_is_not_served() -> None:
    client = _build_client(_HealthyDatabaseService())

    assert client.get("/health").json()["environment"] == "test"
    assert client.get("/").status_code == 404
