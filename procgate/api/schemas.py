"""Request body models and their conversion into domain call descriptors."""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from procgate.domain import ParameterDescriptor, ParameterDirection, ProcedureCall


class ProcedureParameterBody(BaseModel):
    """One parameter entry of a procedure request body."""

    model_config = ConfigDict(extra="ignore")

    name: str
    value: Any = None
    direction: str | None = None
    type: str | None = None

    @field_validator("value")
    @classmethod
    def _validate_scalar_value(cls, value: Any) -> Any:
        if isinstance(value, (dict, list)):
            raise ValueError("parameter value must be a scalar")
        if isinstance(value, float) and not math.isfinite(value):
            raise ValueError("parameter value must be a finite number")
        return value


class ProcedureRequestBody(BaseModel):
    """Body of `POST /procedure` and `POST /procedure/async`."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str
    schema_name: str | None = Field(default=None, alias="schema")
    is_function: bool = Field(default=False, alias="isFunction")
    params: list[ProcedureParameterBody] = Field(default_factory=list)


def api_build_procedure_call(body: ProcedureRequestBody) -> ProcedureCall:
    """Convert a request body into a validated procedure call.

    Args:
        body: Parsed request body.

    Returns:
        ProcedureCall: Validated call descriptor.

    Raises:
        ProcedureCallValidationError: Raised on blank names, unknown directions,
            or a function call without exactly one OUT parameter.
    """

    parameters = tuple(
        ParameterDescriptor(
            name=parameter.name,
            value=parameter.value,
            direction=ParameterDirection.parse(parameter.direction),
            type_hint=parameter.type,
        )
        for parameter in body.params
    )
    return ProcedureCall(
        name=body.name,
        schema=body.schema_name or None,
        is_function=body.is_function,
        params=parameters,
    )
