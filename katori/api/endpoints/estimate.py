import logging

from fastapi import APIRouter, Depends, HTTPException

from katori.api.dependencies import get_estimation_service
from katori.core.exceptions import EstimationError
from katori.core.schemas.nutrition import EstimateRequest, EstimationResult
from katori.services.estimation_service import EstimationService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=EstimationResult)
async def estimate_nutrition(
    request: EstimateRequest,
    service: EstimationService = Depends(get_estimation_service)
):
    """Calculate nutrition information for an Indian home-cooked dish."""
    dish_name = (request.dish_name or "").strip()
    if not dish_name:
        raise HTTPException(status_code=400, detail="Dish name is required")

    try:
        return await service.estimate(dish_name)
    except EstimationError as e:
        logger.error(f"Error estimating nutrition: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to estimate nutrition")
