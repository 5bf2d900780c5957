"""Invocation layer building and executing dynamic procedure calls."""

from .binding import (
    NUMERIC_OUT_NAME_KEYWORDS,
    invocation_bind_parameters,
    invocation_classify_out_kind,
    invocation_coerce_in_value,
    invocation_order_parameters,
)
from .call_builder import invocation_build_call_text, invocation_prepare_call
from .service import ProcedureInvocationService

__all__ = [
    "NUMERIC_OUT_NAME_KEYWORDS",
    "ProcedureInvocationService",
    "invocation_bind_parameters",
    "invocation_build_call_text",
    "invocation_classify_out_kind",
    "invocation_coerce_in_value",
    "invocation_order_parameters",
    "invocation_prepare_call",
]
