"""Storage layer - plain CRUD repositories without business logic."""

from .user_repo import UserRepository

__all__ = ["UserRepository"]
