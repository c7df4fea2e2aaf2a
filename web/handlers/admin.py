"""
Admin endpoints: withdrawal approval, statistics, payout balance.
"""

from aiohttp import web

from app.services.admin_stats_service import AdminStatsService
from app.services.payout import PayoutError
from app.services.withdrawal_service import WithdrawalService
from web.app_keys import PAYOUT_CLIENT, SETTINGS
from web.handlers.presenters import withdrawal_payload
from web.middlewares import require_admin
from web.serialization import error_response, json_response, read_json


def _withdrawal_id(request: web.Request) -> int:
    raw = request.match_info["withdrawal_id"]
    if not raw.isdigit():
        raise web.HTTPNotFound(
            text='{"error": "Withdrawal not found"}',
            content_type="application/json",
        )
    return int(raw)


def _service(request: web.Request) -> WithdrawalService:
    return WithdrawalService(
        request["session"],
        payout_client=request.app[PAYOUT_CLIENT],
        app_settings=request.app[SETTINGS],
    )


async def approve_withdrawal_handler(request: web.Request) -> web.Response:
    """
    POST /api/admin/withdrawals/{id}/approve

    A refused payout is not an HTTP error: the withdrawal comes back
    with status ``failed`` and the exchange message in ``note``.
    """
    admin_id = require_admin(request)
    withdrawal = await _service(request).approve_withdrawal(
        _withdrawal_id(request), admin_id=admin_id
    )
    return json_response(withdrawal_payload(withdrawal))


async def reject_withdrawal_handler(request: web.Request) -> web.Response:
    """POST /api/admin/withdrawals/{id}/reject - optional ``{"reason": ...}``."""
    admin_id = require_admin(request)
    data = await read_json(request)
    withdrawal = await _service(request).reject_withdrawal(
        _withdrawal_id(request), reason=data.get("reason"), admin_id=admin_id
    )
    return json_response(withdrawal_payload(withdrawal))


async def stats_handler(request: web.Request) -> web.Response:
    """GET /api/admin/stats"""
    require_admin(request)
    stats = await AdminStatsService(request["session"]).get_admin_stats()
    return json_response(stats.to_dict())


async def payout_balance_handler(request: web.Request) -> web.Response:
    """GET /api/admin/payout-balance"""
    require_admin(request)
    client = request.app[PAYOUT_CLIENT]
    if not client.is_configured:
        return error_response("Payout API is not configured", status=503)
    try:
        balance = await client.get_usdt_balance()
    except PayoutError as e:
        return error_response(e.message, status=502)
    return json_response(balance.to_dict())


def setup_routes(app: web.Application) -> None:
    app.router.add_post(
        r"/api/admin/withdrawals/{withdrawal_id}/approve",
        approve_withdrawal_handler,
    )
    app.router.add_post(
        r"/api/admin/withdrawals/{withdrawal_id}/reject",
        reject_withdrawal_handler,
    )
    app.router.add_get("/api/admin/stats", stats_handler)
    app.router.add_get("/api/admin/payout-balance", payout_balance_handler)
