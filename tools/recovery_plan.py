"""Command line recovery planner.

Prints how many shares to buy at the current price so that a position breaks
even, or reaches a target profit, after an assumed price rise. Without an
explicit --target-rise the standard break-even and target-profit plans are
printed.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from decimal import Decimal
from typing import Any

from recovery_calculator_engine.calculator import RecoveryCalculator
from recovery_calculator_engine.exceptions import InvalidInputDataError
from recovery_calculator_engine.helpers import diagnose_position, standard_goals
from recovery_calculator_engine.models import (
    FailureReason,
    PositionState,
    RecoveryGoal,
    RecoveryResult,
)
from recovery_common.config import (
    RECOVERY_DEFAULT_RISE_MARGIN_PCT,
    RECOVERY_DEFAULT_TARGET_PROFIT_PCT,
)

LOGGER = logging.getLogger("recovery_plan")

EXIT_OK = 0
EXIT_FAILED_PLAN = 2


def _decimal_arg(value: str) -> Decimal:
    try:
        return Decimal(value.replace(",", "."))
    except ArithmeticError:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}")


def _result_payload(result: RecoveryResult) -> dict[str, Any]:
    if not result.success:
        return {"success": False, "failureReason": result.failure_reason.value}
    return {
        "success": True,
        "qtyToBuy": result.qty_to_buy,
        "investmentRequired": str(result.investment_required),
        "newAveragePrice": str(result.new_average_price),
        "projectedPrice": str(result.projected_price),
        "projectedProfit": str(result.projected_profit),
        "alreadyAboveTarget": result.already_above_target,
    }


def _render_text(label: str, goal: RecoveryGoal, result: RecoveryResult) -> str:
    header = f"[{label}] rise {goal.target_rise:.1f}% / profit {goal.target_profit}%"
    if not result.success:
        return f"{header}: not possible ({result.failure_reason.value})"
    if result.already_above_target:
        return f"{header}: no purchase needed, projected price {result.projected_price}"
    return (
        f"{header}: buy {result.qty_to_buy} shares for {result.investment_required}, "
        f"new average {result.new_average_price}, projected profit {result.projected_profit}"
    )


def build_plans(
    position: PositionState,
    target_rise: Decimal | None,
    target_profit: Decimal,
    rise_margin: Decimal,
) -> list[tuple[str, RecoveryGoal, RecoveryResult]]:
    calculator = RecoveryCalculator()
    if target_rise is not None:
        goal = RecoveryGoal(target_rise=target_rise, target_profit=target_profit)
        return [("CUSTOM", goal, calculator.compute(position, goal))]
    try:
        goals = standard_goals(position, target_profit, rise_margin)
    except InvalidInputDataError as exc:
        LOGGER.warning("Standard plans unavailable: %s", exc.message)
        goal = RecoveryGoal(target_rise=Decimal("0"), target_profit=target_profit)
        return [("STANDARD", goal, RecoveryResult.failure(FailureReason.INVALID_INPUT))]
    return [(label, goal, calculator.compute(position, goal)) for label, goal in goals]


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Plan shares to buy to recover a losing position")
    parser.add_argument("--quantity", type=int, required=True, help="Shares currently held")
    parser.add_argument("--average-price", type=_decimal_arg, required=True)
    parser.add_argument("--current-price", type=_decimal_arg, required=True)
    parser.add_argument(
        "--target-rise",
        type=_decimal_arg,
        default=None,
        help="Assumed rise from the current price, in percent. Omit for the standard plans.",
    )
    parser.add_argument(
        "--target-profit",
        type=_decimal_arg,
        default=None,
        help="Profit to reach, in percent. Defaults to 0 with --target-rise, else the configured default.",
    )
    parser.add_argument(
        "--rise-margin",
        type=_decimal_arg,
        default=Decimal(RECOVERY_DEFAULT_RISE_MARGIN_PCT),
        help="Extra rise over break-even used by the target-profit plan, in percentage points.",
    )
    parser.add_argument("--json", action="store_true", help="Emit JSON instead of text")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(message)s")

    target_profit = args.target_profit
    if target_profit is None:
        target_profit = (
            Decimal("0") if args.target_rise is not None else Decimal(RECOVERY_DEFAULT_TARGET_PROFIT_PCT)
        )

    position = PositionState(
        current_quantity=args.quantity,
        average_price=args.average_price,
        current_price=args.current_price,
    )
    plans = build_plans(position, args.target_rise, target_profit, args.rise_margin)

    if args.json:
        payload = [
            {
                "label": label,
                "targetRise": str(goal.target_rise),
                "targetProfit": str(goal.target_profit),
                "result": _result_payload(result),
            }
            for label, goal, result in plans
        ]
        print(json.dumps(payload, indent=2))
    else:
        try:
            diagnosis = diagnose_position(position)
            print(
                f"Drop {diagnosis.current_drop_pct}% | unrealized loss {diagnosis.unrealized_loss}"
            )
        except InvalidInputDataError as exc:
            LOGGER.warning("Diagnosis unavailable: %s", exc.message)
        for label, goal, result in plans:
            print(_render_text(label, goal, result))

    return EXIT_OK if all(result.success for _, _, result in plans) else EXIT_FAILED_PLAN


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
