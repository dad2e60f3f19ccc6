# src/libs/recovery-calculator-engine/src/recovery_calculator_engine/precision.py
"""
Rounding policy for recovery calculations.

Money is rounded half-up to cents, share counts are rounded up to whole shares
and percentages are rounded half-up to one decimal place for display.
"""
from decimal import Decimal, InvalidOperation, ROUND_CEILING, ROUND_HALF_UP
from typing import Union

from .constants import MONEY_QUANTUM, PERCENT_QUANTUM, QUANTITY_RESOLUTION
from .exceptions import InvalidInputDataError

ROUNDING_POLICY_VERSION = "1.0.0"

NumberLike = Union[Decimal, int, float, str]


def to_decimal(value: NumberLike, field_name: str = "value") -> Decimal:
    """
    Converts a numeric input to a finite Decimal.

    Floats go through their shortest string representation so that 8.1 becomes
    Decimal("8.1") rather than its binary expansion.

    Raises:
        InvalidInputDataError: If the value is missing, non-numeric or not finite.
    """
    if value is None or isinstance(value, bool):
        raise InvalidInputDataError(f"'{field_name}' must be a number, got {value!r}.")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise InvalidInputDataError(f"'{field_name}' must be a number, got {value!r}.")
    if not result.is_finite():
        raise InvalidInputDataError(f"'{field_name}' must be finite, got {value!r}.")
    return result


def to_quantity(value: NumberLike, field_name: str = "current_quantity") -> int:
    """Converts a share count to a non-negative int, rejecting fractional shares."""
    quantity = to_decimal(value, field_name)
    if quantity != quantity.to_integral_value():
        raise InvalidInputDataError(f"'{field_name}' must be a whole number of shares, got {value!r}.")
    if quantity < 0:
        raise InvalidInputDataError(f"'{field_name}' must not be negative, got {value!r}.")
    return int(quantity)


def quantize_money(value: Decimal) -> Decimal:
    return value.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def quantize_percentage(value: Decimal) -> Decimal:
    return value.quantize(PERCENT_QUANTUM, rounding=ROUND_HALF_UP)


def ceil_quantity(value: Decimal) -> int:
    """
    Rounds a solved share count up to the next whole share.

    The value is first resolved to QUANTITY_RESOLUTION so representation noise
    from repeating percentages does not push an exact solution up by one share.
    The result can fall one share short of a solution just above a whole
    number, so callers confirm it against the goal.
    """
    resolved = value.quantize(QUANTITY_RESOLUTION, rounding=ROUND_HALF_UP)
    return int(resolved.to_integral_value(rounding=ROUND_CEILING))
