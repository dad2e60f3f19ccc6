# src/services/recovery_service/app/routers/recovery.py
import logging
from fastapi import APIRouter, Depends, HTTPException, status

from ..dtos.recovery_dto import (
    RecoveryCalculationRequest,
    RecoveryPlansRequest,
    RecoveryPlansResponse,
    RecoveryResultResponse,
)
from ..services.recovery_service import RecoveryService, get_recovery_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/recovery", tags=["Recovery Calculator"])


@router.post(
    "/calculate",
    response_model=RecoveryResultResponse,
    response_model_exclude_none=True,
    summary="Calculate Shares to Buy to Recover a Position",
)
async def calculate_recovery(
    request: RecoveryCalculationRequest,
    service: RecoveryService = Depends(get_recovery_service),
):
    """
    Calculates how many shares to buy at the current price so that, after the
    given rise, the position breaks even or earns the target profit.

    Infeasible inputs are not errors: they return `success: false` with a
    `failureReason` and a short `message`.
    """
    try:
        return await service.calculate(request)
    except Exception:
        logger.exception("An unexpected error occurred during recovery calculation.")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected server error occurred during recovery calculation.",
        )


@router.post(
    "/plans",
    response_model=RecoveryPlansResponse,
    response_model_exclude_none=True,
    summary="Calculate Several Recovery Plans for One Position",
)
async def calculate_recovery_plans(
    request: RecoveryPlansRequest,
    service: RecoveryService = Depends(get_recovery_service),
):
    """
    Diagnoses a position and evaluates each requested goal independently.
    Without goals, returns the standard break-even and target-profit plans.
    """
    try:
        return await service.build_plans(request)
    except Exception:
        logger.exception("An unexpected error occurred while building recovery plans.")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected server error occurred while building recovery plans.",
        )
