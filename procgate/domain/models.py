"""Typed domain models shared across runtime layers.

This module defines the call descriptors accepted by the gateway and the
bind-slot contracts exchanged between the invocation and db layers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class ProcedureCallValidationError(ValueError):
    """Raised when a procedure call descriptor cannot be constructed."""


class ParameterDirection(str, Enum):
    """Direction of one call argument relative to the backend routine."""

    IN = "IN"
    OUT = "OUT"

    @classmethod
    def parse(cls, value: str | None) -> ParameterDirection:
        """Parse a wire direction value case-insensitively.

        Args:
            value: Raw direction text, blank or None meaning IN.

        Returns:
            ParameterDirection: Parsed direction.

        Raises:
            ProcedureCallValidationError: Raised when the value is not IN or OUT.
        """

        normalized_value = (value or "").strip().upper()
        if not normalized_value:
            return cls.IN
        try:
            return cls(normalized_value)
        except ValueError as error:
            raise ProcedureCallValidationError(
                f"unsupported parameter direction={value!r}, expected IN or OUT"
            ) from error


class OutBindingKind(str, Enum):
    """Destination kind allocated for one OUT parameter."""

    NUMERIC = "numeric"
    TEXTUAL = "textual"


@dataclass(frozen=True)
class HealthStatus:
    """Health response contract used by health-check surfaces.

    Attributes:
        status: Overall status text for service health.
        detail: Additional message suitable for operational diagnostics.
    """

    status: str
    detail: str


@dataclass(frozen=True)
class ParameterDescriptor:
    """One declarative call argument submitted by a client.

    Attributes:
        name: Parameter name, echoed back in OUT results.
        value: Opaque scalar value (string, number, bool or None).
        direction: IN for caller-supplied values, OUT for backend-produced values.
        type_hint: Optional declared type (`number`, `string`, `date`).
    """

    name: str
    value: Any = None
    direction: ParameterDirection = ParameterDirection.IN
    type_hint: str | None = None

    def parameter_is_out(self) -> bool:
        """Return whether this parameter is produced by the backend.

        Returns:
            bool: True for OUT parameters.
        """

        return self.direction is ParameterDirection.OUT

    def parameter_snapshot(self) -> dict[str, Any]:
        """Serialize the descriptor to its wire shape for audit snapshots.

        Returns:
            dict[str, Any]: JSON-serializable descriptor payload.
        """

        payload: dict[str, Any] = {"name": self.name, "direction": self.direction.value}
        if self.value is not None:
            payload["value"] = self.value
        if self.type_hint:
            payload["type"] = self.type_hint
        return payload


@dataclass(frozen=True)
class ProcedureCall:
    """Descriptor of one stored procedure or function invocation.

    Attributes:
        name: Routine name, optionally dotted (`PACKAGE.ROUTINE`).
        schema: Optional owning schema.
        is_function: Whether the routine returns a value into the return slot.
        params: Ordered parameter descriptors.

    Raises:
        ProcedureCallValidationError: Raised on blank name, or when a function
            call does not carry exactly one OUT parameter.
    """

    name: str
    schema: str | None = None
    is_function: bool = False
    params: tuple[ParameterDescriptor, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ProcedureCallValidationError("field 'name' must not be blank")
        for parameter in self.params:
            if not parameter.name or not parameter.name.strip():
                raise ProcedureCallValidationError("every parameter requires a non-blank 'name'")
        if self.is_function:
            out_count = sum(1 for parameter in self.params if parameter.parameter_is_out())
            if out_count != 1:
                raise ProcedureCallValidationError(
                    "function calls require exactly one OUT parameter for the return value, "
                    f"got {out_count}"
                )

    def procedure_call_return_slot_index(self) -> int | None:
        """Return the position of the function return slot in `params`.

        Returns:
            int | None: Index of the OUT parameter for functions, None for procedures.
        """

        if not self.is_function:
            return None
        for index, parameter in enumerate(self.params):
            if parameter.parameter_is_out():
                return index
        return None

    def procedure_call_snapshot(self) -> dict[str, Any]:
        """Serialize the call to the request shape stored on async jobs.

        Returns:
            dict[str, Any]: JSON-serializable snapshot for audit and replay.
        """

        snapshot: dict[str, Any] = {
            "name": self.name,
            "isFunction": self.is_function,
            "params": [parameter.parameter_snapshot() for parameter in self.params],
        }
        if self.schema:
            snapshot["schema"] = self.schema
        return snapshot


@dataclass(frozen=True)
class OutBinding:
    """Backend-produced value slot allocated by the parameter binder.

    Attributes:
        slot_index: 0-based position in the positional argument list.
        name: Parameter name echoed back in results.
        kind: Numeric (nullable float) or textual (fixed-capacity buffer) destination.
    """

    slot_index: int
    name: str
    kind: OutBindingKind


class JobStatus(str, Enum):
    """Lifecycle status of one asynchronous invocation job."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    def job_status_is_terminal(self) -> bool:
        """Return whether the status is absorbing.

        Returns:
            bool: True for completed and failed.
        """

        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


@dataclass(frozen=True)
class AsyncJob:
    """Snapshot of one asynchronous invocation job.

    Instances are immutable; the job registry publishes a replaced copy on
    every transition.

    Attributes:
        job_id: Opaque random token, unique within the process.
        status: Current lifecycle status.
        procedure_name: Routine name as submitted.
        params: Snapshot of the originating request for audit and replay.
        start_time: Creation timestamp in UTC.
        end_time: Terminal transition timestamp in UTC.
        duration: Elapsed time text computed at terminal transition.
        result: OUT values by name, present only when completed.
        error: Failure message, present only when failed.
        progress: Completion percentage between 0 and 100.
    """

    job_id: str
    status: JobStatus
    procedure_name: str
    params: dict[str, Any] | None
    start_time: datetime
    end_time: datetime | None = None
    duration: str | None = None
    result: dict[str, Any] | None = None
    error: str | None = None
    progress: int = 0
