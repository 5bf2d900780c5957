"""Tests for anonymous block construction."""

from __future__ import annotations

from procgate.domain import OutBindingKind, ParameterDescriptor, ParameterDirection, ProcedureCall
from procgate.invocation import invocation_build_call_text, invocation_prepare_call


def test_invocation_build_call_text_for_procedure_and_function() -> None:
    assert invocation_build_call_text("PKG.PROC", 3, is_function=False) == "BEGIN PKG.PROC(:1, :2, :3); END;"
    assert invocation_build_call_text("FN", 3, is_function=True) == "BEGIN :1 := FN(:2, :3); END;"
    assert invocation_build_call_text("FN", 1, is_function=True) == "BEGIN :1 := FN(); END;"
    assert invocation_build_call_text("PROC", 0, is_function=False) == "BEGIN PROC(); END;"


def test_invocation_prepare_call_function_with_schema() -> None:
    """Prepare a schema-qualified function call with its return slot first.

    Returns:
        None: Assertions validate prepared call fields.

    Raises:
        AssertionError: Raised when preparation differs.
    """

    call = ProcedureCall(
        name="calc_total",
        schema="ventas",
        is_function=True,
        params=(
            ParameterDescriptor(name="p_cliente", value=42),
            ParameterDescriptor(name="resultado", direction=ParameterDirection.OUT, type_hint="number"),
        ),
    )

    prepared_call = invocation_prepare_call(call)

    assert prepared_call.qualified_name == "VENTAS.CALC_TOTAL"
    assert prepared_call.call_text == "BEGIN :1 := VENTAS.CALC_TOTAL(:2); END;"
    assert prepared_call.arguments[1] == 42
    assert prepared_call.out_bindings[0].kind is OutBindingKind.NUMERIC
    assert prepared_call.routine_name == "calc_total"
    assert prepared_call.is_function is True


def test_invocation_prepare_call_dotted_procedure() -> None:
    call = ProcedureCall(
        name="pkg_ventas.registrar",
        params=(
            ParameterDescriptor(name="p_monto", value=10.5),
            ParameterDescriptor(name="mensaje", direction=ParameterDirection.OUT),
        ),
    )

    prepared_call = invocation_prepare_call(call)

    assert prepared_call.call_text == 'BEGIN "PKG_VENTAS"."REGISTRAR"(:1, :2); END;'
    assert prepared_call.out_bindings[0].slot_index == 1
    assert prepared_call.out_bindings[0].kind is OutBindingKind.TEXTUAL
