# src/libs/recovery-calculator-engine/src/recovery_calculator_engine/helpers.py
from contextlib import contextmanager
from decimal import Decimal, localcontext
from typing import List, Optional, Tuple

from .constants import (
    BREAK_EVEN_PROFIT_PCT,
    DECIMAL_PRECISION,
    DEFAULT_RISE_MARGIN_PCT,
    DEFAULT_TARGET_PROFIT_PCT,
    HUNDRED,
    PLAN_LABEL_BREAK_EVEN,
    PLAN_LABEL_TARGET_PROFIT,
    ZERO,
)
from .exceptions import InvalidInputDataError
from .models import PositionDiagnosis, PositionState, RecoveryGoal
from .precision import NumberLike, quantize_money, quantize_percentage, to_decimal, to_quantity


@contextmanager
def _precision_guard():
    """Runs at the engine's precision and reports overflowing values as invalid input."""
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        try:
            yield
        except ArithmeticError as e:
            raise InvalidInputDataError(
                f"Position values exceed the supported decimal precision: {e!r}."
            ) from e


def _positive_average_price(average_price: NumberLike) -> Decimal:
    value = to_decimal(average_price, "average_price")
    if value <= ZERO:
        raise InvalidInputDataError(f"'average_price' must be positive, got {average_price!r}.")
    return value


def calculate_current_drop(average_price: NumberLike, current_price: NumberLike) -> Decimal:
    """
    Returns how far the current price sits below the average cost, as a
    percentage of the average cost. Positive when the position is underwater,
    negative when it is in profit.
    """
    average = _positive_average_price(average_price)
    current = to_decimal(current_price, "current_price")
    return (average - current) / average * HUNDRED


def calculate_unrealized_loss(
    current_quantity: NumberLike, average_price: NumberLike, current_price: NumberLike
) -> Decimal:
    """Returns the money lost on the position at today's price, rounded to cents. Negative means a gain."""
    quantity = to_quantity(current_quantity)
    average = to_decimal(average_price, "average_price")
    current = to_decimal(current_price, "current_price")
    return quantize_money(Decimal(quantity) * (average - current))


def calculate_break_even_rise(average_price: NumberLike, current_price: NumberLike) -> Optional[Decimal]:
    """
    Returns the percentage rise from the current price needed to reach the
    average cost, or None when the current price is zero and no rise can.

    The value is left unrounded so it can be fed straight back into a goal.
    """
    average = _positive_average_price(average_price)
    current = to_decimal(current_price, "current_price")
    if current <= ZERO:
        return None
    return (average - current) / current * HUNDRED


def suggest_target_rise(average_price: NumberLike, current_price: NumberLike) -> Decimal:
    """Suggested rise to pre-fill a form with: the current drop to one decimal, or zero when not underwater."""
    drop = calculate_current_drop(average_price, current_price)
    if drop <= ZERO:
        return Decimal("0.0")
    return quantize_percentage(drop)


def diagnose_position(position: PositionState) -> PositionDiagnosis:
    """
    Summarises where a position stands before any recovery purchase.

    Raises:
        InvalidInputDataError: If a value is invalid or too large to round to cents.
    """
    with _precision_guard():
        drop = calculate_current_drop(position.average_price, position.current_price)
        break_even_rise = calculate_break_even_rise(position.average_price, position.current_price)
        return PositionDiagnosis(
            current_drop_pct=quantize_percentage(drop),
            unrealized_loss=calculate_unrealized_loss(
                position.current_quantity, position.average_price, position.current_price
            ),
            break_even_rise_pct=quantize_percentage(break_even_rise) if break_even_rise is not None else None,
            suggested_target_rise_pct=suggest_target_rise(position.average_price, position.current_price),
            is_underwater=drop > ZERO,
        )


def break_even_goal(position: PositionState) -> RecoveryGoal:
    """
    Builds the goal of getting back to zero profit once the price has risen
    back to the current average cost.

    Raises:
        InvalidInputDataError: If the current price is zero, since no rise can recover from it.
    """
    rise = calculate_break_even_rise(position.average_price, position.current_price)
    if rise is None:
        raise InvalidInputDataError("A break-even rise cannot be derived from a zero current price.")
    return RecoveryGoal(target_rise=rise, target_profit=BREAK_EVEN_PROFIT_PCT)


def target_profit_goal(
    position: PositionState,
    target_profit: NumberLike = DEFAULT_TARGET_PROFIT_PCT,
    rise_margin: NumberLike = DEFAULT_RISE_MARGIN_PCT,
) -> RecoveryGoal:
    """
    Builds the goal of leaving with target_profit percent once the price has
    risen rise_margin percentage points beyond the break-even rise.
    """
    break_even = break_even_goal(position)
    return RecoveryGoal(
        target_rise=break_even.target_rise + to_decimal(rise_margin, "rise_margin"),
        target_profit=to_decimal(target_profit, "target_profit"),
    )


def standard_goals(
    position: PositionState,
    target_profit: NumberLike = DEFAULT_TARGET_PROFIT_PCT,
    rise_margin: NumberLike = DEFAULT_RISE_MARGIN_PCT,
) -> List[Tuple[str, RecoveryGoal]]:
    """The break-even and target-profit goals a caller usually wants side by side."""
    with _precision_guard():
        return [
            (PLAN_LABEL_BREAK_EVEN, break_even_goal(position)),
            (PLAN_LABEL_TARGET_PROFIT, target_profit_goal(position, target_profit, rise_margin)),
        ]
