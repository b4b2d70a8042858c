"""Fruit Spinner - backend for the Telegram Mini App spinner game."""
