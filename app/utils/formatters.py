"""
Formatting helpers for JSON responses.

Money goes out as strings so clients never see binary float artifacts.
"""
from decimal import Decimal
from datetime import date, datetime
from typing import Union, Optional


def money_str(value: Union[int, float, Decimal, str, None]) -> Optional[str]:
    """
    Format an amount with exactly two decimals.

    Examples:
        money_str(Decimal('59.97')) -> "59.97"
        money_str(5) -> "5.00"
        money_str(None) -> None
    """
    if value is None:
        return None
    return str(Decimal(str(value)).quantize(Decimal('0.01')))


def coordinate(value: Union[float, Decimal, None]) -> float:
    """Shop coordinates are optional; missing ones are reported as 0.0."""
    if value is None:
        return 0.0
    return float(value)


def iso(value: Union[date, datetime, None]) -> Optional[str]:
    """ISO-8601 for dates and datetimes, None passes through."""
    if value is None:
        return None
    return value.isoformat()
