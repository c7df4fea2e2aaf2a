"""
JSON responses.

Money is serialized as strings so no precision is lost in transit.
"""

import json
from datetime import datetime
from decimal import Decimal
from enum import Enum
from functools import partial
from typing import Any

from aiohttp import web


def _default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return format(value, "f")
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


dumps = partial(json.dumps, default=_default)


def json_response(data: Any, status: int = 200) -> web.Response:
    """JSON response that understands Decimal, datetime and enums."""
    return web.json_response(data, status=status, dumps=dumps)


def error_response(message: str, status: int, **extra: Any) -> web.Response:
    """Error body: ``{"error": message, ...extra}``."""
    return json_response({"error": message, **extra}, status=status)


async def read_json(request: web.Request) -> dict[str, Any]:
    """
    Parse a JSON object body.

    An empty body reads as ``{}``; anything that is not an object is a
    client error.
    """
    if not request.can_read_body:
        return {}
    try:
        data = await request.json()
    except ValueError:
        raise web.HTTPBadRequest(
            text=dumps({"error": "Malformed JSON body"}),
            content_type="application/json",
        ) from None
    if not isinstance(data, dict):
        raise web.HTTPBadRequest(
            text=dumps({"error": "JSON body must be an object"}),
            content_type="application/json",
        )
    return data
