"""Qualified object name formatting for backend routine references."""

from __future__ import annotations


def domain_format_qualified_name(schema: str | None, name: str) -> str:
    """Normalize a schema and routine name into one callable reference.

    Rules, in priority order:
    1. Explicit schema: `SCHEMA.NAME`, upper-cased and unquoted.
    2. Dotted name without quotes: each segment upper-cased and double-quoted.
    3. Otherwise: the upper-cased name.

    Args:
        schema: Optional owning schema, blank meaning none.
        name: Routine name, possibly dotted.

    Returns:
        str: Reference usable inside an anonymous block.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if schema:
        return f"{schema.upper()}.{name.upper()}"
    if "." in name and '"' not in name:
        return ".".join(f'"{segment.upper()}"' for segment in name.split("."))
    return name.upper()
