"""
Identity middleware.

Authentication happens in front of this service; the gateway forwards
the caller as ``X-User-Id`` and ``X-User-Role`` (``user`` | ``admin``).
"""

from collections.abc import Awaitable, Callable

from aiohttp import web
from loguru import logger

from web.serialization import dumps


USER_ID_HEADER = "X-User-Id"
USER_ROLE_HEADER = "X-User-Role"
ADMIN_ROLE = "admin"

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


def _parse_user_id(raw: str | None) -> int | None:
    if raw is None:
        return None
    raw = raw.strip()
    if not raw.isdigit():
        return None
    user_id = int(raw)
    return user_id if user_id > 0 else None


@web.middleware
async def identity_middleware(
    request: web.Request, handler: Handler
) -> web.StreamResponse:
    """Attach ``user_id`` and ``role`` to the request."""
    raw_id = request.headers.get(USER_ID_HEADER)
    request["user_id"] = _parse_user_id(raw_id)
    request["role"] = (
        request.headers.get(USER_ROLE_HEADER, "user").strip().lower() or "user"
    )
    if raw_id is not None and request["user_id"] is None:
        logger.warning(f"Ignoring malformed {USER_ID_HEADER} header on {request.path}")
    return await handler(request)


def require_user_id(request: web.Request) -> int:
    """
    Authenticated caller's id.

    Raises:
        web.HTTPUnauthorized: No identity forwarded
    """
    user_id = request.get("user_id")
    if user_id is None:
        raise web.HTTPUnauthorized(
            text=dumps({"error": "Authentication required"}),
            content_type="application/json",
        )
    return user_id


def require_admin(request: web.Request) -> int:
    """
    Authenticated admin's id.

    Raises:
        web.HTTPUnauthorized: No identity forwarded
        web.HTTPForbidden: Caller is not an admin
    """
    user_id = require_user_id(request)
    if request.get("role") != ADMIN_ROLE:
        logger.warning(f"Non-admin {user_id} denied access to {request.path}")
        raise web.HTTPForbidden(
            text=dumps({"error": "Admin access required"}),
            content_type="application/json",
        )
    return user_id
