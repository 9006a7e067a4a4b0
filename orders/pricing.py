"""
Purpose: Currency and distance arithmetic.
What it does:
Converts backend numbers to Decimal and rounds half-up. Currency values
are whole units or two-decimal values; nothing here uses binary floats.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional


def to_decimal(value: Any) -> Optional[Decimal]:
    """None, '', unparsable and non-finite values become None; everything else a Decimal."""
    if value is None or value == "":
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    try:
        # str() first so 0.1 stays 0.1 rather than its float expansion
        value = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    # NaN and Infinity are not amounts.
    return value if value.is_finite() else None


def round_half_up(value: Decimal, places: int = 0) -> Decimal:
    quantum = Decimal(1).scaleb(-places)
    return Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP)
