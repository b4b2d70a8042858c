"""
Award Points Use Case - adds spinner winnings to a player's balance.

AICODE-NOTE: Read-modify-write with an optimistic lock on points_version.
A conflicting writer makes the conditional update touch zero rows; the whole
transaction is then rolled back and retried with exponential backoff.
The backoff sleep always happens outside the transaction.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional, Protocol

from fruit_spinner.core.domain.points_rules import (
    AwardRetriesExhausted,
    ConcurrencyConflict,
    UserNotFound,
    retry_delay,
    validate_award_request,
)
from fruit_spinner.database.models import User

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3
BASE_DELAY = 0.1  # seconds


class PointsGateway(Protocol):
    """Storage operations the use case needs (see storage/user_repo.py)."""

    def transaction(self) -> AbstractAsyncContextManager[Any]: ...

    async def get_user(
        self, telegram_id: str, connection: Any = None
    ) -> Optional[User]: ...

    async def update_points_if_unchanged(
        self,
        telegram_id: str,
        expected_version: int,
        delta: int,
        stamped_at: datetime,
        connection: Any = None,
    ) -> Optional[User]: ...


@dataclass
class PointsAwardResult:
    """Totals after a committed award."""

    updated_points: int
    updated_points_balance: int
    points_added: int


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AwardPointsUseCase:
    """Use-case for awarding spinner points."""

    def __init__(
        self,
        gateway: PointsGateway,
        max_attempts: int = MAX_ATTEMPTS,
        base_delay: float = BASE_DELAY,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.gateway = gateway
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self._sleep = sleep
        self._clock = clock

    async def execute(self, telegram_id: str, points: int) -> PointsAwardResult:
        """
        Add points to the user's lifetime total and spendable balance.

        Args:
            telegram_id: Player identifier
            points: Amount to add, zero or more

        Returns:
            PointsAwardResult with the committed totals

        Raises:
            InvalidAwardRequest: bad input, storage untouched
            UserNotFound: no such player, not retried
            AwardRetriesExhausted: every attempt conflicted
        """
        validate_award_request(telegram_id, points)

        attempt = 0
        while True:
            try:
                result = await self._attempt(telegram_id, points)
            except ConcurrencyConflict as conflict:
                logger.warning(
                    f"Points conflict for user {telegram_id} on attempt "
                    f"{attempt + 1}/{self.max_attempts}: {conflict}"
                )
                if attempt >= self.max_attempts - 1:
                    logger.error(
                        f"Max retries reached for awarding {points} points "
                        f"to user {telegram_id}: {conflict}"
                    )
                    raise AwardRetriesExhausted(
                        telegram_id, self.max_attempts
                    ) from conflict

                attempt += 1
                delay = retry_delay(attempt, self.base_delay)
                logger.debug(f"Retrying award for user {telegram_id} in {delay:.3f}s")
                await self._sleep(delay)
                continue

            logger.info(
                f"Awarded {points} points to user {telegram_id}: "
                f"points={result.updated_points}, "
                f"balance={result.updated_points_balance}"
            )
            return result

    async def _attempt(self, telegram_id: str, points: int) -> PointsAwardResult:
        """One transaction: read, capture version, conditional update."""
        async with self.gateway.transaction() as connection:
            user = await self.gateway.get_user(telegram_id, connection=connection)
            if user is None:
                raise UserNotFound(telegram_id)

            expected_version = user.points_version
            updated = await self.gateway.update_points_if_unchanged(
                telegram_id,
                expected_version,
                points,
                self._clock(),
                connection=connection,
            )
            if updated is None:
                # Raising inside the scope rolls the transaction back
                raise ConcurrencyConflict(telegram_id, expected_version)

            return PointsAwardResult(
                updated_points=updated.points,
                updated_points_balance=updated.points_balance,
                points_added=points,
            )
