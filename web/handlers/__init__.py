"""
Route registration.

Each module exposes ``setup_routes(app)``.
"""

from aiohttp import web

from web.handlers import admin, deposits, health, users, withdrawals


def register_all_routes(app: web.Application) -> None:
    """Register every route on the application."""
    health.setup_routes(app)
    users.setup_routes(app)
    deposits.setup_routes(app)
    withdrawals.setup_routes(app)
    admin.setup_routes(app)
