"""
Fruit Spinner API router.

Endpoints:
- POST /api/fruit-spinner - Add spinner winnings to the player's balance
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from fruit_spinner.core.domain.points_rules import (
    AwardRetriesExhausted,
    InvalidAwardRequest,
    UserNotFound,
)
from fruit_spinner.core.use_cases.award_points import AwardPointsUseCase
from fruit_spinner.interfaces.api.dependencies import get_award_use_case
from fruit_spinner.interfaces.api.schemas import (
    AwardPointsRequest,
    AwardPointsResponse,
)

router = APIRouter(prefix="/api", tags=["fruit-spinner"])
logger = logging.getLogger(__name__)


@router.post("/fruit-spinner", response_model=AwardPointsResponse)
async def award_spinner_points(
    payload: AwardPointsRequest,
    use_case: AwardPointsUseCase = Depends(get_award_use_case),
) -> AwardPointsResponse:
    """
    Add spinner points.

    Increments points and pointsBalance by the same amount under an
    optimistic lock, retrying conflicting writes with backoff.
    """
    try:
        result = await use_case.execute(payload.telegram_id, payload.points)
    except InvalidAwardRequest:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid request data",
        )
    except UserNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    except AwardRetriesExhausted:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to add points after multiple attempts",
        )
    except Exception as e:
        logger.exception(f"Error processing fruit spinner points: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        )

    return AwardPointsResponse(
        updated_points=result.updated_points,
        updated_points_balance=result.updated_points_balance,
        points_added=result.points_added,
    )
