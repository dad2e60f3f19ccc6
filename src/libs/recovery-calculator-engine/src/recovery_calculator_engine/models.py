# src/libs/recovery-calculator-engine/src/recovery_calculator_engine/models.py
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional


class FailureReason(str, Enum):
    """Outcome tags for a recovery calculation. ALREADY_ABOVE_TARGET is reported on a success."""
    NON_POSITIVE_RISE = "NonPositiveRise"
    UNSOLVABLE = "Unsolvable"
    ALREADY_ABOVE_TARGET = "AlreadyAboveTarget"
    NO_EXISTING_POSITION = "NoExistingPosition"
    INVALID_INPUT = "InvalidInput"


@dataclass(frozen=True)
class PositionState:
    """
    A single long holding as it stands today.

    Values are accepted as given and validated by the calculator, so an
    invalid position is reported as an INVALID_INPUT result instead of raising.
    """
    current_quantity: int
    average_price: Decimal
    current_price: Decimal


@dataclass(frozen=True)
class RecoveryGoal:
    """
    A forward move and the profit that must be reached once it happens.

    Both values are percentages: target_rise is relative to the current price,
    target_profit is relative to the total cost basis after the purchase.
    """
    target_rise: Decimal
    target_profit: Decimal = Decimal("0")


@dataclass(frozen=True)
class RecoveryResult:
    success: bool
    qty_to_buy: Optional[int] = None
    investment_required: Optional[Decimal] = None
    new_average_price: Optional[Decimal] = None
    projected_price: Optional[Decimal] = None
    projected_profit: Optional[Decimal] = None
    already_above_target: bool = False
    failure_reason: Optional[FailureReason] = None

    @classmethod
    def failure(cls, reason: FailureReason) -> "RecoveryResult":
        return cls(success=False, failure_reason=reason)


@dataclass(frozen=True)
class PositionDiagnosis:
    """How far a position sits below its average cost."""
    current_drop_pct: Decimal
    unrealized_loss: Decimal
    break_even_rise_pct: Optional[Decimal]
    suggested_target_rise_pct: Decimal
    is_underwater: bool
