"""Number parsing utilities for request payloads."""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

MONEY_QUANT = Decimal('0.01')


def parse_money(value, field_name: str = 'amount') -> Decimal:
    """
    Parse a monetary value from JSON or a query string into a Decimal.

    Accepts Decimal, int, float or numeric strings ("12.5", "12.50").
    Floats go through str() so 19.99 stays 19.99 instead of its binary
    expansion. The result is quantized to cents; negatives are rejected.

    Raises:
        ValueError: if the value is empty, not numeric or negative.
    """
    if value is None or isinstance(value, bool):
        raise ValueError(f'{field_name} is required')

    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValueError(f'{field_name} must be a number')

    if not amount.is_finite():
        raise ValueError(f'{field_name} must be a number')
    if amount < 0:
        raise ValueError(f'{field_name} must not be negative')

    return amount.quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)


def parse_int(value, field_name: str = 'value', minimum=None) -> int:
    """
    Parse a whole number. Strings are accepted, fractional numbers are not.

    Raises:
        ValueError: if the value is missing, not integral or below minimum.
    """
    if value is None or isinstance(value, bool):
        raise ValueError(f'{field_name} is required')

    if isinstance(value, int):
        number = value
    elif isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f'{field_name} must be an integer')
        number = int(value)
    else:
        try:
            number = int(str(value).strip())
        except ValueError:
            raise ValueError(f'{field_name} must be an integer')

    if minimum is not None and number < minimum:
        raise ValueError(f'{field_name} must be >= {minimum}')
    return number
