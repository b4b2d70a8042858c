"""
User API router.

Endpoints:
- GET /api/users/{telegram_id}/points - Current points and balance
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from fruit_spinner.core.use_cases.award_points import PointsGateway
from fruit_spinner.interfaces.api.dependencies import get_points_gateway
from fruit_spinner.interfaces.api.schemas import UserPointsResponse

router = APIRouter(prefix="/api", tags=["user"])
logger = logging.getLogger(__name__)


@router.get("/users/{telegram_id}/points", response_model=UserPointsResponse)
async def get_user_points(
    telegram_id: str,
    gateway: PointsGateway = Depends(get_points_gateway),
) -> UserPointsResponse:
    try:
        user = await gateway.get_user(telegram_id)
    except Exception as e:
        logger.exception(f"Error loading points for user {telegram_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        )

    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )

    return UserPointsResponse.model_validate(user)
