"""
Welcome Sender — one Telegram message to a freshly opened Mini App.

One outbound call, no retry, no persistence. The caller decides what a
failure means (the API turns it into a 500).
"""

import logging
from collections.abc import Callable
from typing import Any

from aiogram import Bot
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode
from aiogram.exceptions import TelegramAPIError

logger = logging.getLogger(__name__)


class NotificationNotConfigured(RuntimeError):
    """BOT_TOKEN is not set."""


def build_welcome_message(telegram_name: str | None) -> str:
    """Fruit spinner themed greeting (Markdown)."""
    name = telegram_name or "Player"
    return (
        f"🍒 *Welcome {name}!* 🎰\n\n"
        "Spin the Fruit Spinner and win points!\n\n"
        "• 🎯 Land on fruits to earn points (1–50)\n"
        "• 💎 Diamond = 50 (jackpot), 🍍 Pineapple = 20\n"
        '• 💀 "You Lost" slot — risk adds excitement\n'
        "• 🏆 USDT add to your balance automatically\n\n"
        "⚡ *Tap Play and good luck!* ⚡"
    )


class WelcomeSender:
    """Sends the welcome message through the Telegram Bot API."""

    def __init__(
        self,
        bot_token: str | None,
        bot_factory: Callable[..., Any] = Bot,
    ) -> None:
        self._bot_token = bot_token
        self._bot_factory = bot_factory

    @property
    def configured(self) -> bool:
        return bool(self._bot_token)

    async def send_welcome(
        self, telegram_id: str, telegram_name: str | None = None
    ) -> bool:
        """
        Send the welcome message.

        Returns:
            True if Telegram accepted the message, False otherwise

        Raises:
            NotificationNotConfigured: no bot token
        """
        if not self._bot_token:
            raise NotificationNotConfigured("BOT_TOKEN not configured")

        bot = self._bot_factory(
            token=self._bot_token,
            default=DefaultBotProperties(parse_mode=ParseMode.MARKDOWN),
        )
        try:
            await bot.send_message(
                chat_id=telegram_id, text=build_welcome_message(telegram_name)
            )
        except TelegramAPIError as e:
            logger.error(f"Telegram API error for {telegram_id}: {e}")
            return False
        finally:
            await bot.session.close()

        logger.info(f"Welcome message sent to {telegram_id}")
        return True
