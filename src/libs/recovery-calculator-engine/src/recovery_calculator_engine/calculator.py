# src/libs/recovery-calculator-engine/src/recovery_calculator_engine/calculator.py
import logging
from decimal import Decimal, localcontext

from .constants import DECIMAL_PRECISION, GOAL_TOLERANCE, HUNDRED, ONE, SOLVER_EPSILON, ZERO
from .exceptions import InvalidInputDataError
from .models import FailureReason, PositionState, RecoveryGoal, RecoveryResult
from .precision import ceil_quantity, quantize_money, to_decimal, to_quantity

logger = logging.getLogger(__name__)


class RecoveryCalculator:
    """
    Calculates how many shares to add to a position, at today's price, so that
    after the price rises by the goal's target_rise the whole position earns
    the goal's target_profit over its cost basis.

    With n shares held at average cost a, x shares bought at the current price p
    and a projected price f = p * (1 + rise), the goal holds when

        (n + x) * f = (n * a + x * p) * (1 + profit)

    which is linear in x:

        x = n * (a * (1 + profit) - f) / (f - p * (1 + profit))

    The calculator is stateless; one instance can serve any number of callers.
    """

    def compute(self, position: PositionState, goal: RecoveryGoal) -> RecoveryResult:
        """
        Returns the purchase plan for a position and goal.

        Never raises for numeric input: every infeasible or invalid combination
        comes back as a failed RecoveryResult carrying a FailureReason. A position
        that already meets the goal is a success with qty_to_buy == 0.
        """
        try:
            quantity, average_price, current_price, target_rise, target_profit = self._validate(
                position, goal
            )
        except InvalidInputDataError as e:
            logger.debug("Recovery input rejected: %s", e.message)
            return RecoveryResult.failure(FailureReason.INVALID_INPUT)

        if quantity == 0:
            return RecoveryResult.failure(FailureReason.NO_EXISTING_POSITION)
        if target_rise <= ZERO:
            return RecoveryResult.failure(FailureReason.NON_POSITIVE_RISE)

        with localcontext() as ctx:
            ctx.prec = DECIMAL_PRECISION
            try:
                return self._solve(quantity, average_price, current_price, target_rise, target_profit)
            except ArithmeticError:
                logger.warning(
                    "Recovery calculation overflowed decimal precision for quantity=%s average_price=%s current_price=%s",
                    quantity, average_price, current_price,
                )
                return RecoveryResult.failure(FailureReason.INVALID_INPUT)

    def _validate(self, position: PositionState, goal: RecoveryGoal):
        quantity = to_quantity(position.current_quantity, "current_quantity")
        average_price = to_decimal(position.average_price, "average_price")
        current_price = to_decimal(position.current_price, "current_price")
        target_rise = to_decimal(goal.target_rise, "target_rise")
        target_profit = to_decimal(goal.target_profit, "target_profit")

        if average_price <= ZERO:
            raise InvalidInputDataError(f"'average_price' must be positive, got {average_price}.")
        if current_price < ZERO:
            raise InvalidInputDataError(f"'current_price' must not be negative, got {current_price}.")
        if target_profit < ZERO:
            raise InvalidInputDataError(f"'target_profit' must not be negative, got {target_profit}.")

        return quantity, average_price, current_price, target_rise, target_profit

    def _solve(
        self,
        quantity: int,
        average_price: Decimal,
        current_price: Decimal,
        target_rise: Decimal,
        target_profit: Decimal,
    ) -> RecoveryResult:
        profit_factor = ONE + target_profit / HUNDRED
        projected_price = current_price * (ONE + target_rise / HUNDRED)

        # Gap per existing share, and what each new share contributes towards closing it.
        numerator = average_price * profit_factor - projected_price
        denominator = projected_price - current_price * profit_factor

        if abs(denominator) <= SOLVER_EPSILON:
            return RecoveryResult.failure(FailureReason.UNSOLVABLE)

        if numerator <= ZERO:
            qty_to_buy = 0
        elif denominator < ZERO:
            # New shares earn less than the target profit, so buying only widens the gap.
            return RecoveryResult.failure(FailureReason.UNSOLVABLE)
        else:
            qty_to_buy = ceil_quantity(Decimal(quantity) * numerator / denominator)
            # The resolved ceiling can land just below an exact solution such as 4000.0000002.
            if not self._meets_goal(
                quantity, average_price, current_price, projected_price, profit_factor, qty_to_buy
            ):
                qty_to_buy += 1

        return self._build_result(quantity, average_price, current_price, projected_price, qty_to_buy)

    def _meets_goal(
        self,
        quantity: int,
        average_price: Decimal,
        current_price: Decimal,
        projected_price: Decimal,
        profit_factor: Decimal,
        qty_to_buy: int,
    ) -> bool:
        """Checks (n + x) * f >= (n * a + x * p) * (1 + profit) for a whole share count x."""
        value = (quantity + qty_to_buy) * projected_price
        required = (average_price * quantity + current_price * qty_to_buy) * profit_factor
        return value >= required - required * GOAL_TOLERANCE

    def _build_result(
        self,
        quantity: int,
        average_price: Decimal,
        current_price: Decimal,
        projected_price: Decimal,
        qty_to_buy: int,
    ) -> RecoveryResult:
        total_quantity = Decimal(quantity + qty_to_buy)
        purchase_cost = current_price * qty_to_buy
        total_cost = average_price * quantity + purchase_cost

        return RecoveryResult(
            success=True,
            qty_to_buy=qty_to_buy,
            investment_required=quantize_money(purchase_cost),
            new_average_price=quantize_money(total_cost / total_quantity),
            projected_price=quantize_money(projected_price),
            projected_profit=quantize_money(projected_price * total_quantity - total_cost),
            already_above_target=qty_to_buy == 0,
        )


_calculator = RecoveryCalculator()


def compute(position: PositionState, goal: RecoveryGoal) -> RecoveryResult:
    """Module-level entry point backed by a shared stateless calculator."""
    return _calculator.compute(position, goal)
