"""Regression tests for backend error signature translation."""

from __future__ import annotations

from procgate.db.error_codes import (
    INVOCATION_ERROR_LOOKUP_ORDER,
    InvocationErrorCode,
    invocation_error_detect_code,
    invocation_error_translate,
)


def test_db_error_codes_not_found_mentions_routine_kind_and_name() -> None:
    """Translate PLS-00201 wrapped in ORA-06550 for functions and procedures.

    Returns:
        None: Assertions validate translated text.

    Raises:
        AssertionError: Raised when translation differs.
    """

    raw_message = "ORA-06550: line 1, column 13:\nPLS-00201: identifier 'CALC_TOTAL' must be declared"

    assert invocation_error_translate(raw_message, "calc_total", is_function=True) == (
        "Function 'calc_total' not found. Verify that it exists in the database."
    )
    assert invocation_error_translate(raw_message, "calc_total", is_function=False) == (
        "Procedure 'calc_total' not found. Verify that it exists in the database."
    )


def test_db_error_codes_known_signatures() -> None:
    assert invocation_error_translate("PLS-00306: wrong number or types", "p", False) == (
        "Invalid parameters for 'p'. Verify parameter types and count."
    )
    assert invocation_error_translate("ORA-06502: PL/SQL: numeric or value error", "p", False) == (
        "Type conversion error. Verify that the parameter data types are correct."
    )
    assert invocation_error_translate("ORA-01403: no data found", "f", True) == (
        "No data found. The function returned no results."
    )


def test_db_error_codes_unknown_message_passes_through() -> None:
    raw_message = "ORA-12541: TNS:no listener"

    assert invocation_error_detect_code(raw_message) is None
    assert invocation_error_translate(raw_message, "p", False) == raw_message


def test_db_error_codes_lookup_prefers_pls_signatures() -> None:
    assert INVOCATION_ERROR_LOOKUP_ORDER[0] is InvocationErrorCode.OBJECT_NOT_FOUND
    assert (
        invocation_error_detect_code("ORA-06502: value\nPLS-00306: wrong number")
        is InvocationErrorCode.WRONG_ARGUMENTS
    )
