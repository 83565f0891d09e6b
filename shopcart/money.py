"""
Money Utilities - Decimal handling for line item prices.

Prices arrive from the inventory API as JSON numbers; they are converted via
str to avoid float artifacts and kept as Decimal inside the cart.
"""
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Union

# Default precision for money operations (2 decimal places)
MONEY_PRECISION = Decimal("0.01")

Number = Union[str, int, float, Decimal, None]


def to_decimal(value: Number) -> Decimal:
    """
    Convert any value to Decimal safely.

    Returns:
        Decimal representation of the value, or Decimal("0") if None/invalid
    """
    if value is None:
        return Decimal("0")

    if isinstance(value, Decimal):
        return value

    try:
        if isinstance(value, float):
            return Decimal(str(value))
        return Decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        return Decimal("0")


def parse_decimal(value: Number) -> Decimal:
    """
    Strict Decimal conversion for prices read from outside.

    Raises:
        ValueError: value is None, bool, unparseable or not finite
    """
    if value is None or isinstance(value, bool) or not isinstance(value, (str, int, float, Decimal)):
        raise ValueError(f"invalid price: {value!r}")

    try:
        decimal_value = Decimal(str(value).strip()) if isinstance(value, (str, float)) else Decimal(value)
    except InvalidOperation as e:
        raise ValueError(f"invalid price: {value!r}") from e

    if not decimal_value.is_finite():
        raise ValueError(f"invalid price: {value!r}")
    return decimal_value


def round_money(value: Number) -> Decimal:
    """Round monetary value to cents."""
    return to_decimal(value).quantize(MONEY_PRECISION, rounding=ROUND_HALF_UP)


def multiply(price: Number, quantity: int) -> Decimal:
    return round_money(to_decimal(price) * quantity)


def to_float(value: Number) -> float:
    """Convert to float for JSON serialization."""
    return float(round_money(value))


def to_json_number(value: Number) -> Union[int, float]:
    """Emit whole prices as ints, like the inventory API sends them."""
    decimal_value = to_decimal(value)
    if decimal_value == decimal_value.to_integral_value():
        return int(decimal_value)
    return float(decimal_value)
