# src/libs/recovery-calculator-engine/src/recovery_calculator_engine/constants.py
from decimal import Decimal

# --- Percentages ---
HUNDRED = Decimal("100")
ONE = Decimal("1")
ZERO = Decimal("0")

# --- Precision ---
MONEY_QUANTUM = Decimal("0.01")
PERCENT_QUANTUM = Decimal("0.1")
# Share counts are resolved at this resolution before rounding up, so that
# percentage inputs such as 33.333... do not turn an exact solution into one extra share.
QUANTITY_RESOLUTION = Decimal("0.000001")
DECIMAL_PRECISION = 28

# Denominators at or below this magnitude are treated as zero.
SOLVER_EPSILON = Decimal("1e-12")
# Relative shortfall below which a goal counts as met; only working-precision residue is this small.
GOAL_TOLERANCE = Decimal("1e-20")

# --- Standard call shapes ---
BREAK_EVEN_PROFIT_PCT = Decimal("0")
DEFAULT_TARGET_PROFIT_PCT = Decimal("5")
DEFAULT_RISE_MARGIN_PCT = Decimal("10")

PLAN_LABEL_BREAK_EVEN = "BREAK_EVEN"
PLAN_LABEL_TARGET_PROFIT = "TARGET_PROFIT"
