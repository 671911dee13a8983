"""Decimal helpers for currency and hour arithmetic."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

ZERO = Decimal("0")
CENT = Decimal("0.01")
HUNDRED = Decimal("100")


def to_decimal(value: object | None) -> Decimal:
    """Coerce a stored or submitted number to :class:`Decimal`, treating null as zero.

    Floats go through ``str`` so ``0.1`` becomes ``Decimal("0.1")`` rather
    than its binary expansion.
    """

    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    try:
        return Decimal(value)  # type: ignore[arg-type]
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise ValueError(f"Not a decimal value: {value!r}") from exc


def optional_decimal(value: object | None) -> Decimal | None:
    """Like :func:`to_decimal` but keeps ``None``."""

    if value is None:
        return None
    return to_decimal(value)


def quantize_money(value: Decimal) -> Decimal:
    """Round to whole cents, half away from zero."""

    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def serialize_decimal(value: Decimal | None) -> float | None:
    """Convert a stored decimal to a JSON number at the API boundary."""

    if value is None:
        return None
    return float(value)


__all__ = [
    "CENT",
    "HUNDRED",
    "ZERO",
    "optional_decimal",
    "quantize_money",
    "serialize_decimal",
    "to_decimal",
]
