from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

ZERO = Decimal("0")


def to_decimal(value: object) -> Decimal:
    """Coerce DB/JSON numbers (int, float, str, Decimal, None) into Decimal."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def optional_decimal(value: object) -> Optional[Decimal]:
    return None if value is None else to_decimal(value)


def round_currency(value: Decimal) -> Decimal:
    """Round to the nearest integer currency unit (half-up)."""
    return value.quantize(Decimal("1"), rounding=ROUND_HALF_UP)


def clamp_non_negative(value: Decimal) -> Decimal:
    return value if value > ZERO else ZERO
