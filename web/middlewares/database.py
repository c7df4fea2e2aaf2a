"""
Database middleware.

Opens one AsyncSession per API request. Services own their commits;
whatever is left uncommitted when the handler returns is rolled back.
"""

from collections.abc import Awaitable, Callable

from aiohttp import web
from loguru import logger
from sqlalchemy.exc import DatabaseError, InterfaceError, OperationalError

from web.app_keys import SESSION_MAKER
from web.serialization import error_response


Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]

API_PREFIX = "/api/"


@web.middleware
async def database_middleware(
    request: web.Request, handler: Handler
) -> web.StreamResponse:
    """Provide ``request["session"]`` to API handlers."""
    if not request.path.startswith(API_PREFIX):
        return await handler(request)

    session_maker = request.app[SESSION_MAKER]
    try:
        async with session_maker() as session:
            request["session"] = session
            return await handler(request)
    except (OperationalError, InterfaceError) as e:
        logger.critical(
            "Database connection failure",
            extra={"error_type": type(e).__name__, "error": str(e), "path": request.path},
        )
        return error_response("Database unavailable", status=503)
    except DatabaseError as e:
        logger.error(
            "Database error in handler",
            extra={"error_type": type(e).__name__, "error": str(e), "path": request.path},
        )
        return error_response("Internal server error", status=500)
