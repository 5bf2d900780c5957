"""Tests for qualified routine name formatting rules."""

from __future__ import annotations

import pytest

from procgate.domain import domain_format_qualified_name


@pytest.mark.parametrize(
    ("schema", "name", "expected"),
    [
        ("", "foo", "FOO"),
        (None, "calc_total", "CALC_TOTAL"),
        ("bar", "foo", "BAR.FOO"),
        ("hr", "pkg.proc", "HR.PKG.PROC"),
        ("", "a.b", '"A"."B"'),
        (None, "pkg_ventas.calcular", '"PKG_VENTAS"."CALCULAR"'),
        ("", '"Mixed".proc', '"MIXED".PROC'),
    ],
)
def test_domain_format_qualified_name_rules(schema: str | None, name: str, expected: str) -> None:
    """Apply schema, dotted and plain formatting rules in priority order.

    Args:
        schema: Optional owning schema.
        name: Routine name.
        expected: Formatted reference.

    Returns:
        None: Assertions validate formatting.

    Raises:
        AssertionError: Raised when formatting differs.
    """

    assert domain_format_qualified_name(schema, name) == expected


def test_domain_format_qualified_name_plain_rule_is_idempotent() -> None:
    once = domain_format_qualified_name(None, "foo")
    assert domain_format_qualified_name(None, once) == once
