"""Position recovery (averaging-down) calculator."""

from .calculator import RecoveryCalculator, compute
from .exceptions import InvalidInputDataError, RecoveryCalculatorError
from .models import (
    FailureReason,
    PositionDiagnosis,
    PositionState,
    RecoveryGoal,
    RecoveryResult,
)

__all__ = [
    "RecoveryCalculator",
    "compute",
    "InvalidInputDataError",
    "RecoveryCalculatorError",
    "FailureReason",
    "PositionDiagnosis",
    "PositionState",
    "RecoveryGoal",
    "RecoveryResult",
]
