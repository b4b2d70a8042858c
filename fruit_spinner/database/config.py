"""
Database configuration (Tortoise ORM).
Supports SQLite (dev) and PostgreSQL (production).
"""

import logging

from fruit_spinner.config import config

logger = logging.getLogger(__name__)

MODELS_MODULES = ["fruit_spinner.database.models"]


def get_tortoise_db_url() -> str:
    """
    Get database URL with proper scheme for Tortoise ORM.

    Tortoise ORM requires 'postgres://' scheme, but Railway/Render
    provide 'postgresql://' URLs.
    """
    url = config.database_url

    if url.startswith("postgresql://"):
        url = "postgres://" + url[len("postgresql://"):]
        logger.info("Converted postgresql:// to postgres:// for Tortoise ORM")

    logger.info(
        f"Database URL scheme: {url.split('://')[0] if '://' in url else 'unknown'}"
    )

    return url


def build_tortoise_config(db_url: str | None = None) -> dict:
    return {
        "connections": {"default": db_url or get_tortoise_db_url()},
        "apps": {
            "models": {
                "models": MODELS_MODULES,
                "default_connection": "default",
            },
        },
    }


TORTOISE_ORM = build_tortoise_config()
