"""Anonymous block construction for procedure and function calls."""

from __future__ import annotations

from procgate.db.interfaces import PreparedCall
from procgate.domain import ProcedureCall, domain_format_qualified_name

from .binding import invocation_bind_parameters


def invocation_build_call_text(qualified_name: str, argument_count: int, is_function: bool) -> str:
    """Render the anonymous block for one call with positional placeholders.

    Args:
        qualified_name: Formatted routine reference.
        argument_count: Total placeholders, including a function's return slot.
        is_function: Whether placeholder `:1` receives the return value.

    Returns:
        str: Call text such as `BEGIN :1 := PKG.FN(:2); END;`.
    """

    placeholders = [f":{position}" for position in range(1, argument_count + 1)]
    if is_function:
        return f"BEGIN {placeholders[0]} := {qualified_name}({', '.join(placeholders[1:])}); END;"
    return f"BEGIN {qualified_name}({', '.join(placeholders)}); END;"


def invocation_prepare_call(call: ProcedureCall) -> PreparedCall:
    """Bind parameters and build the call text for one validated call.

    Args:
        call: Validated procedure call.

    Returns:
        PreparedCall: Call text and positional arguments in placeholder order.
    """

    qualified_name = domain_format_qualified_name(call.schema, call.name)
    arguments, out_bindings = invocation_bind_parameters(call)
    return PreparedCall(
        routine_name=call.name,
        is_function=call.is_function,
        qualified_name=qualified_name,
        call_text=invocation_build_call_text(qualified_name, len(arguments), call.is_function),
        arguments=arguments,
        out_bindings=out_bindings,
    )
