"""Parameter binding rules turning descriptors into positional arguments.

OUT parameters become typed destinations, IN parameters become literal values.
Binding never rejects a value; unparseable dates are bound unchanged.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Final

from procgate.domain import OutBinding, OutBindingKind, ParameterDescriptor, ProcedureCall

NUMERIC_OUT_NAME_KEYWORDS: Final[tuple[str, ...]] = (
    "resultado",
    "result",
    "total",
    "count",
    "suma",
    "num",
    "int",
    "id",
)
DATE_IN_NAME_KEYWORDS: Final[tuple[str, ...]] = ("fecha", "periodo")
DATE_IN_FORMATS: Final[tuple[str, ...]] = ("%Y-%m-%d", "%d/%m/%Y")


def invocation_classify_out_kind(name: str, type_hint: str | None) -> OutBindingKind:
    """Classify the destination kind of one OUT parameter.

    An explicit `number` hint wins; any other hint still falls through to
    matching the lower-cased name against the numeric keyword table.

    Args:
        name: Parameter name.
        type_hint: Optional declared type.

    Returns:
        OutBindingKind: NUMERIC or TEXTUAL.
    """

    if (type_hint or "").strip().lower() == "number":
        return OutBindingKind.NUMERIC
    # Other hints (`string`, `date`, `integer`) do not opt out of keyword matching.
    lowered_name = name.lower()
    if any(keyword in lowered_name for keyword in NUMERIC_OUT_NAME_KEYWORDS):
        return OutBindingKind.NUMERIC
    return OutBindingKind.TEXTUAL


def invocation_coerce_in_value(name: str, value: Any) -> Any:
    """Return the literal bound for one IN parameter.

    String values of date-like parameters (`fecha`, `periodo`) are parsed as
    `YYYY-MM-DD` then `DD/MM/YYYY`. When neither matches, the raw string is
    bound and the backend decides.

    Args:
        name: Parameter name.
        value: Raw request value.

    Returns:
        Any: Parsed datetime for recognized dates, otherwise the raw value.
    """

    if not isinstance(value, str):
        return value
    lowered_name = name.lower()
    if not any(keyword in lowered_name for keyword in DATE_IN_NAME_KEYWORDS):
        return value
    for date_format in DATE_IN_FORMATS:
        try:
            return datetime.strptime(value, date_format)
        except ValueError:
            continue
    return value


def invocation_order_parameters(call: ProcedureCall) -> list[ParameterDescriptor]:
    """Return parameters in placeholder order, moving a function's return slot first."""

    ordered_parameters = list(call.params)
    return_slot_index = call.procedure_call_return_slot_index()
    if return_slot_index is not None:
        ordered_parameters.insert(0, ordered_parameters.pop(return_slot_index))
    return ordered_parameters


def invocation_bind_parameters(call: ProcedureCall) -> tuple[tuple[Any, ...], tuple[OutBinding, ...]]:
    """Bind every parameter of one call.

    Args:
        call: Validated procedure call.

    Returns:
        tuple[tuple[Any, ...], tuple[OutBinding, ...]]: Positional arguments in
            placeholder order, and the OUT bindings among them.
    """

    arguments: list[Any] = []
    out_bindings: list[OutBinding] = []
    for slot_index, parameter in enumerate(invocation_order_parameters(call)):
        if parameter.parameter_is_out():
            binding = OutBinding(
                slot_index=slot_index,
                name=parameter.name,
                kind=invocation_classify_out_kind(parameter.name, parameter.type_hint),
            )
            arguments.append(binding)
            out_bindings.append(binding)
        else:
            arguments.append(invocation_coerce_in_value(parameter.name, parameter.value))
    return tuple(arguments), tuple(out_bindings)
