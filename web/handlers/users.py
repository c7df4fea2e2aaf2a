"""
User endpoints: registration, daily profit, level/rank.
"""

from aiohttp import web

from app.services.user import UserService
from web.app_keys import SETTINGS
from web.handlers.presenters import rank_payload, user_payload
from web.middlewares import require_user_id
from web.serialization import json_response, read_json


async def register_handler(request: web.Request) -> web.Response:
    """POST /api/users - create a user, optionally under a referral code."""
    data = await read_json(request)
    service = UserService(request["session"], request.app[SETTINGS])
    user = await service.register_user(
        username=data.get("username"),
        email=data.get("email"),
        referral_code=data.get("referralCode"),
    )
    return json_response(user_payload(user), status=201)


async def claim_daily_profit_handler(request: web.Request) -> web.Response:
    """POST /api/daily-profit/claim"""
    user_id = require_user_id(request)
    service = UserService(request["session"], request.app[SETTINGS])
    result = await service.claim_daily_profit(user_id)
    return json_response(
        {
            "amount": result.amount,
            "dailyProfit": result.daily_profit,
            "lastDailyBonusAt": result.last_daily_bonus_at,
        }
    )


async def level_handler(request: web.Request) -> web.Response:
    """GET /api/me/level - recomputes before answering."""
    user_id = require_user_id(request)
    service = UserService(request["session"], request.app[SETTINGS])
    result = await service.get_level_and_rank(user_id)
    return json_response(rank_payload(result))


def setup_routes(app: web.Application) -> None:
    app.router.add_post("/api/users", register_handler)
    app.router.add_post("/api/daily-profit/claim", claim_daily_profit_handler)
    app.router.add_get("/api/me/level", level_handler)
