"""
Inspect a player's points in the database.

Usage:
    python -m fruit_spinner.scripts.check_user <telegram_id>
"""

import asyncio
import sys

from tortoise import Tortoise

from fruit_spinner.database.config import TORTOISE_ORM
from fruit_spinner.storage import UserRepository


async def check_user(telegram_id: str) -> None:
    await Tortoise.init(config=TORTOISE_ORM)

    try:
        user = await UserRepository().get_user(telegram_id)

        if not user:
            print(f"❌ User {telegram_id} not found.")
            return

        print(f"👤 User: {user.telegram_name or '-'} ({user.telegram_id})")
        print(f"   Points: {user.points}, Balance: {user.points_balance}")
        print(
            f"   Version: {user.points_version}, "
            f"last update: {user.last_points_update_timestamp or 'never'}"
        )
    finally:
        await Tortoise.close_connections()


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python -m fruit_spinner.scripts.check_user <telegram_id>")
        sys.exit(1)
    asyncio.run(check_user(sys.argv[1]))
