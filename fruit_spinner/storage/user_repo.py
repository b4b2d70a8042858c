"""
User Repository - plain data access for the User model.

AICODE-NOTE: The repository only touches storage, NO business logic.
Retry policy and validation live in core/use_cases/award_points.py.
"""

from contextlib import AbstractAsyncContextManager
from datetime import datetime
from typing import Any, Optional

from tortoise.backends.base.client import BaseDBAsyncClient
from tortoise.expressions import F
from tortoise.transactions import in_transaction

from fruit_spinner.database.models import User


class UserRepository:
    """Gateway to the users table consumed by the award use case."""

    def __init__(self, connection_name: str | None = None) -> None:
        self.connection_name = connection_name

    def transaction(self) -> AbstractAsyncContextManager[Any]:
        """Open one atomic scope; an exception inside rolls it back."""
        return in_transaction(self.connection_name)

    async def get_user(
        self, telegram_id: str, connection: Optional[BaseDBAsyncClient] = None
    ) -> Optional[User]:
        """Get a user by telegram_id."""
        return await User.get_or_none(telegram_id=telegram_id, using_db=connection)

    async def update_points_if_unchanged(
        self,
        telegram_id: str,
        expected_version: int,
        delta: int,
        stamped_at: datetime,
        connection: Optional[BaseDBAsyncClient] = None,
    ) -> Optional[User]:
        """
        Add delta to points and points_balance if the version still matches.

        Both counters, the version and the timestamp change in one UPDATE.

        Returns:
            The updated row, or None if another writer bumped the version first
        """
        query = User.filter(telegram_id=telegram_id, points_version=expected_version)
        if connection is not None:
            query = query.using_db(connection)

        updated = await query.update(
            points=F("points") + delta,
            points_balance=F("points_balance") + delta,
            points_version=F("points_version") + 1,
            last_points_update_timestamp=stamped_at,
        )
        if updated != 1:
            return None
        return await User.get(telegram_id=telegram_id, using_db=connection)

    async def create_user(
        self, telegram_id: str, telegram_name: str | None = None, **fields: Any
    ) -> User:
        """Create a user row (registration happens outside the award path)."""
        return await User.create(
            telegram_id=telegram_id, telegram_name=telegram_name, **fields
        )
