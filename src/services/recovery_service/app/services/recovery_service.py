# src/services/recovery_service/app/services/recovery_service.py
import logging
from decimal import Decimal
from typing import Dict, List, Optional

from recovery_common.config import (
    RECOVERY_DEFAULT_RISE_MARGIN_PCT,
    RECOVERY_DEFAULT_TARGET_PROFIT_PCT,
)
from recovery_common.monitoring import observe_recovery_outcome, recovery_calculation_timer
from recovery_calculator_engine.calculator import RecoveryCalculator
from recovery_calculator_engine.exceptions import InvalidInputDataError
from recovery_calculator_engine.helpers import diagnose_position, standard_goals
from recovery_calculator_engine.models import (
    FailureReason,
    PositionState,
    RecoveryGoal,
    RecoveryResult,
)
from recovery_calculator_engine.precision import ROUNDING_POLICY_VERSION

from ..dtos.recovery_dto import (
    GoalInput,
    PositionDiagnosisResponse,
    PositionInput,
    RecoveryCalculationRequest,
    RecoveryPlan,
    RecoveryPlansRequest,
    RecoveryPlansResponse,
    RecoveryResultResponse,
)

logger = logging.getLogger(__name__)

OUTCOME_SUCCESS = "SUCCESS"

FAILURE_MESSAGES: Dict[FailureReason, str] = {
    FailureReason.NON_POSITIVE_RISE: "Enter a positive expected rise to plan a recovery.",
    FailureReason.UNSOLVABLE: (
        "No number of shares reaches this profit with this rise. "
        "Increase the expected rise or lower the target profit."
    ),
    FailureReason.ALREADY_ABOVE_TARGET: (
        "The current position already reaches this goal at the projected price. No purchase is needed."
    ),
    FailureReason.NO_EXISTING_POSITION: (
        "There is no existing position to recover. Enter the number of shares you hold."
    ),
    FailureReason.INVALID_INPUT: (
        "Check the values entered. Quantities must be whole non-negative numbers, "
        "the average price must be positive and the target profit cannot be negative."
    ),
}


def to_result_response(result: RecoveryResult) -> RecoveryResultResponse:
    """Maps an engine result onto the wire shape, attaching the user-facing message."""
    if not result.success:
        return RecoveryResultResponse(
            success=False,
            failure_reason=result.failure_reason,
            message=FAILURE_MESSAGES[result.failure_reason],
        )
    return RecoveryResultResponse(
        success=True,
        qty_to_buy=result.qty_to_buy,
        investment_required=result.investment_required,
        new_average_price=result.new_average_price,
        projected_price=result.projected_price,
        projected_profit=result.projected_profit,
        already_above_target=result.already_above_target,
        message=FAILURE_MESSAGES[FailureReason.ALREADY_ABOVE_TARGET] if result.already_above_target else None,
    )


class RecoveryService:
    """
    Hosts the recovery calculator for the HTTP API: builds goals, runs the
    calculation and records its outcome.
    """
    def __init__(
        self,
        calculator: RecoveryCalculator,
        default_target_profit: Decimal = Decimal(RECOVERY_DEFAULT_TARGET_PROFIT_PCT),
        default_rise_margin: Decimal = Decimal(RECOVERY_DEFAULT_RISE_MARGIN_PCT),
    ):
        self.calculator = calculator
        self.default_target_profit = default_target_profit
        self.default_rise_margin = default_rise_margin

    def _run(self, position: PositionState, goal: RecoveryGoal) -> RecoveryResult:
        with recovery_calculation_timer():
            result = self.calculator.compute(position, goal)

        outcome = OUTCOME_SUCCESS if result.success else result.failure_reason.value
        observe_recovery_outcome(outcome)
        logger.info(
            "Recovery calculation completed",
            extra={
                "outcome": outcome,
                "current_quantity": str(position.current_quantity),
                "target_rise": str(goal.target_rise),
                "target_profit": str(goal.target_profit),
                "qty_to_buy": result.qty_to_buy,
                "rounding_policy_version": ROUNDING_POLICY_VERSION,
            },
        )
        return result

    @staticmethod
    def _position_from(dto: PositionInput) -> PositionState:
        return PositionState(
            current_quantity=dto.current_quantity,
            average_price=dto.average_price,
            current_price=dto.current_price,
        )

    async def calculate(self, request: RecoveryCalculationRequest) -> RecoveryResultResponse:
        position = self._position_from(request)
        goal = RecoveryGoal(target_rise=request.target_rise, target_profit=request.target_profit)
        return to_result_response(self._run(position, goal))

    def _diagnose(self, position: PositionState) -> Optional[PositionDiagnosisResponse]:
        try:
            diagnosis = diagnose_position(position)
        except InvalidInputDataError as e:
            logger.info("Skipping diagnosis for invalid position: %s", e.message)
            return None
        return PositionDiagnosisResponse(
            current_drop_pct=diagnosis.current_drop_pct,
            unrealized_loss=diagnosis.unrealized_loss,
            break_even_rise_pct=diagnosis.break_even_rise_pct,
            suggested_target_rise_pct=diagnosis.suggested_target_rise_pct,
            is_underwater=diagnosis.is_underwater,
        )

    async def build_plans(self, request: RecoveryPlansRequest) -> RecoveryPlansResponse:
        """
        Evaluates each goal independently for the same position. Without explicit
        goals, the break-even and target-profit plans are derived from the position.
        """
        position = self._position_from(request.position)
        plans: List[RecoveryPlan] = []

        if request.goals:
            for index, goal_dto in enumerate(request.goals, start=1):
                goal = RecoveryGoal(target_rise=goal_dto.target_rise, target_profit=goal_dto.target_profit)
                label = goal_dto.label or f"GOAL_{index}"
                plans.append(
                    RecoveryPlan(
                        label=label,
                        goal=goal_dto.model_copy(update={"label": label}),
                        result=to_result_response(self._run(position, goal)),
                    )
                )
        else:
            try:
                goals = standard_goals(position, self.default_target_profit, self.default_rise_margin)
            except InvalidInputDataError as e:
                logger.info("Standard recovery goals unavailable: %s", e.message)
                observe_recovery_outcome(FailureReason.INVALID_INPUT.value)
                return RecoveryPlansResponse(
                    diagnosis=self._diagnose(position),
                    plans=[],
                    message=FAILURE_MESSAGES[FailureReason.INVALID_INPUT],
                )
            for label, goal in goals:
                plans.append(
                    RecoveryPlan(
                        label=label,
                        goal=GoalInput(label=label, target_rise=goal.target_rise, target_profit=goal.target_profit),
                        result=to_result_response(self._run(position, goal)),
                    )
                )

        return RecoveryPlansResponse(diagnosis=self._diagnose(position), plans=plans)


def get_recovery_service() -> RecoveryService:
    """Dependency injector for the RecoveryService."""
    return RecoveryService(RecoveryCalculator())
