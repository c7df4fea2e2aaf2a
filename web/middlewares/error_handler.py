"""
Global error handler middleware.

Maps domain exceptions to HTTP statuses. Unexpected errors are logged
with their traceback; the caller only sees a generic message.
"""

from collections.abc import Awaitable, Callable

from aiohttp import web
from loguru import logger

from app.utils.exceptions import CooldownError, PlatformError
from web.serialization import error_response


Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


@web.middleware
async def error_middleware(
    request: web.Request, handler: Handler
) -> web.StreamResponse:
    """Execute middleware."""
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except CooldownError as e:
        return error_response(
            str(e), status=e.status_code, remainingHours=e.remaining_hours
        )
    except PlatformError as e:
        if e.status_code >= 500:
            logger.error(f"{type(e).__name__} on {request.path}: {e}")
            return error_response("Internal server error", status=e.status_code)
        return error_response(str(e), status=e.status_code)
    except Exception as e:
        logger.exception(
            f"Unhandled exception on {request.method} {request.path}: {e}"
        )
        return error_response("Internal server error", status=500)
