"""
Database models for the Fruit Spinner backend.

Structure:
- User: player with lifetime points and spendable balance
"""

from tortoise import fields, models


class User(models.Model):
    """Player registered through the Mini App."""

    id = fields.IntField(primary_key=True)
    telegram_id = fields.CharField(max_length=64, unique=True, db_index=True)
    telegram_name = fields.CharField(max_length=255, null=True)

    # Lifetime points (total earned), never decremented by awards
    points = fields.BigIntField(default=0)
    # Spendable balance, incremented together with points
    points_balance = fields.BigIntField(default=0)

    # Optimistic lock: every award bumps the version and restamps the time
    points_version = fields.IntField(default=0)
    last_points_update_timestamp = fields.DatetimeField(null=True)

    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "users"

    def __str__(self) -> str:
        return f"User({self.telegram_id})"
