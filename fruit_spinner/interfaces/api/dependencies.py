"""
FastAPI dependencies.

The storage gateway and the welcome sender are built once by the app
lifespan and kept on app.state; routers receive them through Depends.
"""

from fastapi import Depends, Request

from fruit_spinner.config import config
from fruit_spinner.core.use_cases.award_points import AwardPointsUseCase, PointsGateway
from fruit_spinner.services.notifications import WelcomeSender


def get_points_gateway(request: Request) -> PointsGateway:
    return request.app.state.points_gateway


def get_award_use_case(
    gateway: PointsGateway = Depends(get_points_gateway),
) -> AwardPointsUseCase:
    return AwardPointsUseCase(
        gateway,
        max_attempts=config.AWARD_MAX_ATTEMPTS,
        base_delay=config.award_base_delay,
    )


def get_welcome_sender(request: Request) -> WelcomeSender:
    return request.app.state.welcome_sender
