# src/services/recovery_service/app/dtos/recovery_dto.py
from decimal import Decimal
from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer

from recovery_calculator_engine.models import FailureReason

# Decimals travel as JSON numbers on the wire; arithmetic stays in Decimal.
WireDecimal = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]  # monetary-float-allow

# --- Request DTOs ---

class PositionInput(BaseModel):
    """The holding to recover. Domain checks are left to the calculator so they surface as InvalidInput."""
    current_quantity: int = Field(
        ..., alias="currentQuantity", description="Shares currently held.", examples=[100]
    )
    average_price: Decimal = Field(
        ..., alias="averagePrice", description="Weighted-average cost per share.", examples=[10.00]
    )
    current_price: Decimal = Field(
        ..., alias="currentPrice", description="Latest market price per share.", examples=[8.00]
    )

    model_config = ConfigDict(populate_by_name=True)

class GoalInput(BaseModel):
    label: Optional[str] = Field(
        None, description="Caller-chosen name echoed back on the plan.", examples=["Exit with 5%"]
    )
    target_rise: WireDecimal = Field(
        ...,
        alias="targetRise",
        description="Assumed percentage rise from the current price (12.5 means +12.5%).",
        examples=[25],
    )
    target_profit: WireDecimal = Field(
        Decimal("0"),
        alias="targetProfit",
        description="Profit percentage over total cost basis to reach at the projected price. 0 means break-even.",
        examples=[0],
    )

    model_config = ConfigDict(populate_by_name=True)

class RecoveryCalculationRequest(PositionInput):
    """Flat request for a single position and goal."""
    target_rise: Decimal = Field(
        ...,
        alias="targetRise",
        description="Assumed percentage rise from the current price (12.5 means +12.5%).",
        examples=[25],
    )
    target_profit: Decimal = Field(
        Decimal("0"),
        alias="targetProfit",
        description="Profit percentage over total cost basis to reach at the projected price.",
        examples=[0],
    )

class RecoveryPlansRequest(BaseModel):
    position: PositionInput
    goals: Optional[List[GoalInput]] = Field(
        None,
        description="Goals to evaluate independently. When omitted the break-even and target-profit plans are built.",
    )


# --- Response DTOs ---

class RecoveryResultResponse(BaseModel):
    """Outcome of one recovery calculation. Numeric fields are present only on success."""
    success: bool
    qty_to_buy: Optional[int] = Field(None, alias="qtyToBuy", examples=[50])
    investment_required: Optional[WireDecimal] = Field(
        None, alias="investmentRequired", description="Cost of the purchase, rounded to cents.", examples=[400.00]
    )
    new_average_price: Optional[WireDecimal] = Field(
        None, alias="newAveragePrice", description="Average cost after the purchase, rounded to cents.", examples=[9.33]
    )
    projected_price: Optional[WireDecimal] = Field(
        None, alias="projectedPrice", description="Price after the assumed rise, rounded to cents.", examples=[10.00]
    )
    projected_profit: Optional[WireDecimal] = Field(
        None, alias="projectedProfit", description="Gain on the whole position at the projected price.", examples=[100.00]
    )
    already_above_target: Optional[bool] = Field(None, alias="alreadyAboveTarget")
    failure_reason: Optional[FailureReason] = Field(None, alias="failureReason")
    message: Optional[str] = Field(None, description="Short explanation suitable for end users.")

    model_config = ConfigDict(populate_by_name=True)

class PositionDiagnosisResponse(BaseModel):
    current_drop_pct: WireDecimal = Field(..., alias="currentDropPct", examples=[20.0])
    unrealized_loss: WireDecimal = Field(..., alias="unrealizedLoss", examples=[200.00])
    break_even_rise_pct: Optional[WireDecimal] = Field(None, alias="breakEvenRisePct", examples=[25.0])
    suggested_target_rise_pct: WireDecimal = Field(..., alias="suggestedTargetRisePct", examples=[20.0])
    is_underwater: bool = Field(..., alias="isUnderwater")

    model_config = ConfigDict(populate_by_name=True)

class RecoveryPlan(BaseModel):
    label: str
    goal: GoalInput
    result: RecoveryResultResponse

class RecoveryPlansResponse(BaseModel):
    diagnosis: Optional[PositionDiagnosisResponse] = None
    plans: List[RecoveryPlan]
    message: Optional[str] = Field(
        None, description="Set when no standard plan could be derived from the position."
    )
