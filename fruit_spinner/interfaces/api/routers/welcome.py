"""
Welcome API router.

Endpoints:
- POST /api/send-welcome - Send the welcome message to the player's chat
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from fruit_spinner.interfaces.api.dependencies import get_welcome_sender
from fruit_spinner.interfaces.api.schemas import WelcomeRequest, WelcomeResponse
from fruit_spinner.services.notifications import (
    NotificationNotConfigured,
    WelcomeSender,
)

router = APIRouter(prefix="/api", tags=["welcome"])
logger = logging.getLogger(__name__)


@router.post("/send-welcome", response_model=WelcomeResponse)
async def send_welcome(
    payload: WelcomeRequest,
    sender: WelcomeSender = Depends(get_welcome_sender),
) -> WelcomeResponse:
    """Send a single welcome message; no retry."""
    if not payload.telegram_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing telegramId",
        )

    try:
        sent = await sender.send_welcome(payload.telegram_id, payload.telegram_name)
    except NotificationNotConfigured:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="BOT_TOKEN not configured",
        )
    except Exception as e:
        logger.exception(f"Error sending welcome message: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        )

    if not sent:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to send message",
        )

    return WelcomeResponse()
