"""
Request middlewares.

Order matters: errors wrap identity, identity wraps the database session.
"""

from web.middlewares.database import database_middleware
from web.middlewares.error_handler import error_middleware
from web.middlewares.identity import (
    identity_middleware,
    require_admin,
    require_user_id,
)


__all__ = [
    "database_middleware",
    "error_middleware",
    "identity_middleware",
    "require_admin",
    "require_user_id",
]
