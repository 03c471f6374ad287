# accounting/services/money.py

"""
MONEY / RATE HELPERS

Shared numeric normalizers for settlement + costing math.

Rules:
- Never go through float.
- Computation stays exact (Decimal); rounding happens only where a value
  is persisted at a fixed scale or posted to the ledger (cents).
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

TWOPLACES = Decimal("0.01")
FOURPLACES = Decimal("0.0001")
SIXPLACES = Decimal("0.000001")
ZERO = Decimal("0.00")


def to_decimal(value, *, field: str = "value") -> Decimal:
    """
    Strict Decimal coercion. Raises ValueError on garbage (bool included).
    """
    if isinstance(value, bool):
        raise ValueError(f"{field} must be a number")
    if value is None or value == "":
        raise ValueError(f"{field} is required")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError, TypeError) as exc:
            raise ValueError(f"{field} must be a valid decimal") from exc
    if not result.is_finite():
        raise ValueError(f"{field} must be a finite number")
    return result


def money(value) -> Decimal:
    """Round to cents (ledger precision)."""
    if value is None or value == "":
        return ZERO
    return to_decimal(value).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def amount4(value) -> Decimal:
    """Round to 4 places (stored settlement precision)."""
    return to_decimal(value).quantize(FOURPLACES, rounding=ROUND_HALF_UP)


def rate6(value) -> Decimal:
    return to_decimal(value).quantize(SIXPLACES, rounding=ROUND_HALF_UP)


def within_tolerance(a, b, tolerance) -> bool:
    return abs(to_decimal(a) - to_decimal(b)) <= to_decimal(tolerance)
