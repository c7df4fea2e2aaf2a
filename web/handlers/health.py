"""
Health check endpoint.

Liveness only; it never touches the database or the chain.
"""

from aiohttp import web

from web.serialization import json_response


async def health_handler(request: web.Request) -> web.Response:
    """
    Liveness check endpoint.

    Returns:
        JSON response indicating if the process is alive
    """
    return json_response({"status": "alive", "alive": True})


def setup_routes(app: web.Application) -> None:
    app.router.add_get("/health", health_handler)
