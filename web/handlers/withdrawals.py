"""
User withdrawal endpoints.
"""

from aiohttp import web

from app.services.withdrawal_service import WithdrawalService
from web.app_keys import SETTINGS
from web.handlers.presenters import withdrawal_payload
from web.middlewares import require_user_id
from web.serialization import json_response, read_json


async def available_handler(request: web.Request) -> web.Response:
    """GET /api/withdrawals/available"""
    user_id = require_user_id(request)
    service = WithdrawalService(request["session"], app_settings=request.app[SETTINGS])
    available = await service.get_available(user_id)
    return json_response({"available": available})


async def request_withdrawal_handler(request: web.Request) -> web.Response:
    """POST /api/withdrawals - body ``{"address": ..., "amount": ...}``."""
    user_id = require_user_id(request)
    data = await read_json(request)
    service = WithdrawalService(request["session"], app_settings=request.app[SETTINGS])
    withdrawal = await service.request_withdrawal(
        user_id, data.get("address"), data.get("amount")
    )
    return json_response(withdrawal_payload(withdrawal), status=201)


def setup_routes(app: web.Application) -> None:
    app.router.add_get("/api/withdrawals/available", available_handler)
    app.router.add_post("/api/withdrawals", request_withdrawal_handler)
