"""Canonical Oracle error signatures translated into user-facing messages."""

from __future__ import annotations

from enum import Enum
from typing import Final


class InvocationErrorCode(str, Enum):
    """Known backend error signatures recognized during invocation."""

    OBJECT_NOT_FOUND = "PLS-00201"
    WRONG_ARGUMENTS = "PLS-00306"
    VALUE_ERROR = "ORA-06502"
    NO_DATA_FOUND = "ORA-01403"


# Lookup order matters: ORA-06550 wraps PLS errors, and the PLS code is the informative one.
INVOCATION_ERROR_LOOKUP_ORDER: Final[tuple[InvocationErrorCode, ...]] = (
    InvocationErrorCode.OBJECT_NOT_FOUND,
    InvocationErrorCode.WRONG_ARGUMENTS,
    InvocationErrorCode.VALUE_ERROR,
    InvocationErrorCode.NO_DATA_FOUND,
)


def invocation_error_detect_code(raw_message: str) -> InvocationErrorCode | None:
    """Return the first known error signature contained in a driver message.

    Args:
        raw_message: Untranslated driver error text.

    Returns:
        InvocationErrorCode | None: Recognized signature or None.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    for error_code in INVOCATION_ERROR_LOOKUP_ORDER:
        if error_code.value in raw_message:
            return error_code
    return None


def invocation_error_translate(raw_message: str, routine_name: str, is_function: bool) -> str:
    """Translate a backend error message into friendlier text.

    Unrecognized messages pass through unchanged.

    Args:
        raw_message: Untranslated driver error text.
        routine_name: Routine name as submitted by the client.
        is_function: Whether the routine was invoked as a function.

    Returns:
        str: Translated or original message.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    error_code = invocation_error_detect_code(raw_message)
    routine_label = "Function" if is_function else "Procedure"
    if error_code is InvocationErrorCode.OBJECT_NOT_FOUND:
        return f"{routine_label} '{routine_name}' not found. Verify that it exists in the database."
    if error_code is InvocationErrorCode.WRONG_ARGUMENTS:
        return f"Invalid parameters for '{routine_name}'. Verify parameter types and count."
    if error_code is InvocationErrorCode.VALUE_ERROR:
        return "Type conversion error. Verify that the parameter data types are correct."
    if error_code is InvocationErrorCode.NO_DATA_FOUND:
        return f"No data found. The {routine_label.lower()} returned no results."
    return raw_message
