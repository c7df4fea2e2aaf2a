"""
Deposit confirmation endpoint.
"""

from aiohttp import web

from app.services.deposit import ConfirmationStatus, DepositConfirmationService
from web.app_keys import DEPOSIT_LOCK, SETTINGS, TRANSFER_SCANNER
from web.handlers.presenters import commission_payload
from web.middlewares import require_user_id
from web.serialization import json_response, read_json


NOT_FOUND_MESSAGE = (
    "Transfer not found yet. It may still be confirming; try again in a few minutes."
)


async def confirm_deposit_handler(request: web.Request) -> web.Response:
    """
    POST /api/deposits/confirm

    Body: ``{"amount": "<claimed amount>"}``. Answers 202 while the
    transfer is not visible on chain yet.
    """
    user_id = require_user_id(request)
    data = await read_json(request)

    service = DepositConfirmationService(
        request["session"],
        scanner=request.app[TRANSFER_SCANNER],
        lock=request.app[DEPOSIT_LOCK],
        app_settings=request.app[SETTINGS],
    )
    result = await service.confirm_deposit(user_id, data.get("amount"))

    if result.status == ConfirmationStatus.NOT_FOUND_YET:
        return json_response(
            {
                "status": result.status,
                "message": NOT_FOUND_MESSAGE,
                "balance": result.balance,
            },
            status=202,
        )

    return json_response(
        {
            "status": result.status,
            "balance": result.balance,
            "txHash": result.tx_hash,
            "fromAddress": result.from_address,
            "amount": result.amount,
            "commission": commission_payload(result.commission),
        }
    )


def setup_routes(app: web.Application) -> None:
    app.router.add_post("/api/deposits/confirm", confirm_deposit_handler)
