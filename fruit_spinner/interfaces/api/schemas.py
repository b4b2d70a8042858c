"""
Pydantic schemas for the Mini App API.

The frontend speaks camelCase; fields are snake_case with camelCase aliases.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, StrictInt, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _telegram_id_to_str(v: Any) -> Any:
    # Telegram WebApp hands out numeric ids; the frontend may forward them as numbers
    if isinstance(v, int) and not isinstance(v, bool):
        return str(v)
    return v


# ============ Fruit Spinner Schemas ============


class AwardPointsRequest(CamelModel):
    """Request to add spinner winnings."""

    telegram_id: str | None = None
    points: StrictInt | None = None

    coerce_telegram_id = field_validator("telegram_id", mode="before")(
        _telegram_id_to_str
    )


class AwardPointsResponse(CamelModel):
    """Totals after a successful award."""

    success: bool = True
    message: str = "Fruit spinner points added successfully"
    updated_points: int
    updated_points_balance: int
    points_added: int


# ============ Welcome Schemas ============


class WelcomeRequest(CamelModel):
    """Request to send the welcome message."""

    telegram_id: str | None = None
    telegram_name: str | None = None

    coerce_telegram_id = field_validator("telegram_id", mode="before")(
        _telegram_id_to_str
    )


class WelcomeResponse(BaseModel):
    success: bool = True


# ============ User Schemas ============


class UserPointsResponse(CamelModel):
    """Current points of a player."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    telegram_id: str
    points: int
    points_balance: int
    last_points_update_timestamp: datetime | None = None
