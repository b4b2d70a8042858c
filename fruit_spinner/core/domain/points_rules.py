"""
Points Domain Rules - pure functions for award validation and retry timing.

AICODE-NOTE: Pure functions WITHOUT DB access, WITHOUT side-effects.
Called from the award use-case.
"""

from typing import Any


class PointsAwardError(Exception):
    """Base error of the points award flow."""


class InvalidAwardRequest(PointsAwardError):
    """Missing telegram_id or a points value that is absent or negative."""


class UserNotFound(PointsAwardError):
    """No user row for the given telegram_id. Never retried."""

    def __init__(self, telegram_id: str) -> None:
        super().__init__(f"User {telegram_id} not found")
        self.telegram_id = telegram_id


class ConcurrencyConflict(PointsAwardError):
    """The row version changed between read and conditional update."""

    def __init__(self, telegram_id: str, expected_version: int) -> None:
        super().__init__(
            f"Version {expected_version} of user {telegram_id} is stale"
        )
        self.telegram_id = telegram_id
        self.expected_version = expected_version


class AwardRetriesExhausted(PointsAwardError):
    """Every attempt hit a conflict; the delta was not applied."""

    def __init__(self, telegram_id: str, attempts: int) -> None:
        super().__init__(
            f"Failed to add points to user {telegram_id} after {attempts} attempts"
        )
        self.telegram_id = telegram_id
        self.attempts = attempts


def validate_award_request(telegram_id: Any, points: Any) -> None:
    """
    Check award input before any storage access.

    Zero points is a valid award. Booleans are not accepted as points.

    Raises:
        InvalidAwardRequest
    """
    if not isinstance(telegram_id, str) or not telegram_id.strip():
        raise InvalidAwardRequest("telegram_id is required")

    if points is None or isinstance(points, bool) or not isinstance(points, int):
        raise InvalidAwardRequest("points must be an integer")

    if points < 0:
        raise InvalidAwardRequest("points must not be negative")


def retry_delay(attempt: int, base_delay: float) -> float:
    """
    Backoff before the given retry attempt.

    Formula: base_delay * 2^attempt
    With base 0.1s:
    - attempt 1 = 0.2s
    - attempt 2 = 0.4s
    """
    return base_delay * (2**attempt)
