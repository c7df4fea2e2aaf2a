"""
Redis connection helpers.

Redis only backs the deposit confirmation lock; the client is built from
whichever Settings the application runs with.
"""

import redis.asyncio as redis

from app.config.settings import Settings, settings as default_settings


def get_redis_client(app_settings: Settings | None = None) -> redis.Redis:
    """
    Create a Redis client.

    Args:
        app_settings: Settings override

    Returns:
        redis.Redis with decode_responses=True
    """
    cfg = app_settings or default_settings
    return redis.Redis(
        host=cfg.redis_host,
        port=cfg.redis_port,
        password=cfg.redis_password,
        db=cfg.redis_db,
        decode_responses=True,
    )


def get_redis_url_masked(app_settings: Settings | None = None) -> str:
    """Connection URL for logs, password masked."""
    cfg = app_settings or default_settings
    auth = ":****@" if cfg.redis_password else ""
    return f"redis://{auth}{cfg.redis_host}:{cfg.redis_port}/{cfg.redis_db}"
