"""HTTP-level tests for the aiohttp application."""

from decimal import Decimal

import pytest
import pytest_asyncio
from aiohttp import test_utils
from sqlalchemy import select

from app.models import User, Withdrawal
from app.services.blockchain import TransferMatch
from app.services.payout import PayoutError, UsdtBalance
from app.utils.distributed_lock import DistributedLock
from web.main import create_app


TX_HASH = "0x" + "c3" * 32
ADDRESS = "0x742d35Cc6634C0532925a3b844Bc9e7595f0bEb0"


class FakeScanner:
    def __init__(self):
        self.match = None

    async def scan(self, recipient, min_amount, lookback_blocks):
        return self.match


class FakePayoutClient:
    def __init__(self):
        self.error = None
        self.is_configured = True
        self.closed = False

    async def withdraw(self, coin, address, amount, chain=None, order_id=None):
        if self.error is not None:
            raise self.error
        return "PAYOUT42"

    async def get_usdt_balance(self):
        if self.error is not None:
            raise self.error
        return UsdtBalance(
            spot_free=Decimal("120.5"),
            spot_locked=Decimal("0"),
            funding_free=Decimal("30"),
        )

    async def close(self):
        self.closed = True


@pytest.fixture
def scanner():
    return FakeScanner()


@pytest.fixture
def payout_client():
    return FakePayoutClient()


@pytest_asyncio.fixture
async def client(session_maker, test_settings, scanner, payout_client):
    app = create_app(
        session_maker=session_maker,
        app_settings=test_settings,
        scanner=scanner,
        payout_client=payout_client,
        lock=DistributedLock(),
    )
    async with test_utils.TestClient(test_utils.TestServer(app)) as test_client:
        yield test_client


def as_user(user_id):
    return {"X-User-Id": str(user_id)}


def as_admin(user_id=1):
    return {"X-User-Id": str(user_id), "X-User-Role": "admin"}


class TestHealth:

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status == 200
        assert await response.json() == {"status": "alive", "alive": True}


class TestUsersApi:

    @pytest.mark.asyncio
    async def test_register(self, client):
        response = await client.post(
            "/api/users", json={"username": "alice", "email": "alice@example.com"}
        )

        assert response.status == 201
        body = await response.json()
        assert body["email"] == "alice@example.com"
        assert body["rank"] == "Starter"
        assert Decimal(body["balance"]) == 0

    @pytest.mark.asyncio
    async def test_register_validation_error(self, client):
        response = await client.post(
            "/api/users", json={"username": "alice", "email": "nope"}
        )

        assert response.status == 400
        assert "error" in await response.json()

    @pytest.mark.asyncio
    async def test_malformed_body(self, client):
        response = await client.post(
            "/api/users",
            data="{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status == 400
        assert (await response.json())["error"] == "Malformed JSON body"

    @pytest.mark.asyncio
    async def test_claim_requires_identity(self, client):
        response = await client.post("/api/daily-profit/claim")

        assert response.status == 401

    @pytest.mark.asyncio
    async def test_claim_cooldown_reports_hours(self, client, make_user):
        from app.utils.datetime_utils import utc_now

        user = await make_user(
            "claimer",
            balance="100",
            daily_profit_eligible=True,
            last_daily_bonus_at=utc_now(),
        )

        response = await client.post("/api/daily-profit/claim", headers=as_user(user.id))

        assert response.status == 400
        body = await response.json()
        assert body["remainingHours"] == 24

    @pytest.mark.asyncio
    async def test_claim_not_eligible(self, client, make_user):
        user = await make_user("poor")

        response = await client.post("/api/daily-profit/claim", headers=as_user(user.id))

        assert response.status == 400

    @pytest.mark.asyncio
    async def test_level(self, client, make_user):
        user = await make_user("a", balance="100")
        for i in range(3):
            await make_user(f"r{i}", parent=user, balance="50")

        response = await client.get("/api/me/level", headers=as_user(user.id))

        assert response.status == 200
        assert await response.json() == {"level": 1, "rank": "Bronze"}

    @pytest.mark.asyncio
    async def test_unknown_user_is_404(self, client):
        response = await client.get("/api/me/level", headers=as_user(9999))

        assert response.status == 404


class TestDepositsApi:

    @pytest.mark.asyncio
    async def test_not_found_yet_is_202(self, client, make_user):
        user = await make_user("alice")

        response = await client.post(
            "/api/deposits/confirm", json={"amount": "50"}, headers=as_user(user.id)
        )

        assert response.status == 202
        body = await response.json()
        assert body["status"] == "not_found_yet"
        assert Decimal(body["balance"]) == 0

    @pytest.mark.asyncio
    async def test_credited(self, client, make_user, scanner):
        parent = await make_user("parent", balance="100")
        user = await make_user("alice", parent=parent)
        scanner.match = TransferMatch(
            tx_hash=TX_HASH,
            from_address="0x2222222222222222222222222222222222222222",
            to_address=ADDRESS.lower(),
            value=60 * 10**18,
            amount=Decimal("60"),
            block_number=10,
            log_index=1,
        )

        response = await client.post(
            "/api/deposits/confirm", json={"amount": 50}, headers=as_user(user.id)
        )

        assert response.status == 200
        body = await response.json()
        assert body["status"] == "credited"
        assert body["txHash"] == TX_HASH
        assert Decimal(body["balance"]) == Decimal("60")
        assert Decimal(body["commission"]["totalPaid"]) == Decimal("10")

        again = await client.post(
            "/api/deposits/confirm", json={"amount": 50}, headers=as_user(user.id)
        )
        assert (await again.json())["status"] == "already_credited"

    @pytest.mark.asyncio
    async def test_amount_below_minimum(self, client, make_user):
        user = await make_user("alice")

        response = await client.post(
            "/api/deposits/confirm", json={"amount": "10"}, headers=as_user(user.id)
        )

        assert response.status == 400


class TestWithdrawalsApi:

    async def _earner(self, make_user):
        return await make_user(
            "earner",
            balance="100",
            bonus_earned=Decimal("50"),
            daily_profit=Decimal("40"),
        )

    @pytest.mark.asyncio
    async def test_request_holds_amount(self, client, make_user):
        user = await self._earner(make_user)

        created = await client.post(
            "/api/withdrawals",
            json={"address": ADDRESS, "amount": "80"},
            headers=as_user(user.id),
        )
        available = await client.get("/api/withdrawals/available", headers=as_user(user.id))

        assert created.status == 201
        assert (await created.json())["status"] == "pending"
        assert Decimal((await available.json())["available"]) == Decimal("10")

    @pytest.mark.asyncio
    async def test_withdrawals_are_not_listable(self, client, make_user):
        user = await self._earner(make_user)

        response = await client.get("/api/withdrawals", headers=as_user(user.id))

        assert response.status == 405

    @pytest.mark.asyncio
    async def test_request_over_available(self, client, make_user):
        user = await self._earner(make_user)

        response = await client.post(
            "/api/withdrawals",
            json={"address": ADDRESS, "amount": "100"},
            headers=as_user(user.id),
        )

        assert response.status == 400

    @pytest.mark.asyncio
    async def test_admin_routes_need_admin_role(self, client, make_user):
        user = await make_user("alice")

        response = await client.post(
            "/api/admin/withdrawals/1/approve", headers=as_user(user.id)
        )

        assert response.status == 403

    @pytest.mark.asyncio
    async def test_approve_then_approve_again(self, client, make_user, db_session):
        user = await self._earner(make_user)
        created = await client.post(
            "/api/withdrawals",
            json={"address": ADDRESS, "amount": "80"},
            headers=as_user(user.id),
        )
        withdrawal_id = (await created.json())["id"]

        approved = await client.post(
            f"/api/admin/withdrawals/{withdrawal_id}/approve", headers=as_admin()
        )
        repeated = await client.post(
            f"/api/admin/withdrawals/{withdrawal_id}/approve", headers=as_admin()
        )

        assert approved.status == 200
        body = await approved.json()
        assert body["status"] == "paid"
        assert body["txId"] == "PAYOUT42"
        assert repeated.status == 400
        fresh = (
            await db_session.execute(
                select(User).where(User.id == user.id).execution_options(populate_existing=True)
            )
        ).scalar_one()
        assert fresh.withdrawn_total == Decimal("80")

    @pytest.mark.asyncio
    async def test_refused_payout_is_failed_not_http_error(
        self, client, make_user, payout_client
    ):
        user = await self._earner(make_user)
        created = await client.post(
            "/api/withdrawals",
            json={"address": ADDRESS, "amount": "20"},
            headers=as_user(user.id),
        )
        withdrawal_id = (await created.json())["id"]
        payout_client.error = PayoutError("Insufficient balance")

        response = await client.post(
            f"/api/admin/withdrawals/{withdrawal_id}/approve", headers=as_admin()
        )

        assert response.status == 200
        body = await response.json()
        assert body["status"] == "failed"
        assert body["note"] == "Insufficient balance"

    @pytest.mark.asyncio
    async def test_reject(self, client, make_user, db_session):
        user = await self._earner(make_user)
        created = await client.post(
            "/api/withdrawals",
            json={"address": ADDRESS, "amount": "20"},
            headers=as_user(user.id),
        )
        withdrawal_id = (await created.json())["id"]

        response = await client.post(
            f"/api/admin/withdrawals/{withdrawal_id}/reject", headers=as_admin(7)
        )

        assert response.status == 200
        body = await response.json()
        assert body["status"] == "rejected"
        assert body["note"] == "Rejected by admin"
        assert body["approvedBy"] == 7
        stored = (
            await db_session.execute(
                select(Withdrawal)
                .where(Withdrawal.id == withdrawal_id)
                .execution_options(populate_existing=True)
            )
        ).scalar_one()
        assert stored.status == "rejected"

    @pytest.mark.asyncio
    async def test_unknown_withdrawal(self, client):
        response = await client.post(
            "/api/admin/withdrawals/555/reject", headers=as_admin()
        )

        assert response.status == 404


class TestAdminApi:

    @pytest.mark.asyncio
    async def test_stats(self, client, make_user):
        await make_user("a", daily_profit=Decimal("2"), bonus_earned=Decimal("3"))

        response = await client.get("/api/admin/stats", headers=as_admin())

        assert response.status == 200
        body = await response.json()
        assert body["totalUsers"] == 1
        assert Decimal(body["sumDailyProfit"]) == Decimal("2")
        assert Decimal(body["totalWithdraw"]) == 0

    @pytest.mark.asyncio
    async def test_stats_requires_identity(self, client):
        response = await client.get("/api/admin/stats")

        assert response.status == 401

    @pytest.mark.asyncio
    async def test_payout_balance(self, client):
        response = await client.get("/api/admin/payout-balance", headers=as_admin())

        assert response.status == 200
        body = await response.json()
        assert Decimal(body["total"]) == Decimal("150.5")

    @pytest.mark.asyncio
    async def test_payout_balance_unconfigured(self, client, payout_client):
        payout_client.is_configured = False

        response = await client.get("/api/admin/payout-balance", headers=as_admin())

        assert response.status == 503

    @pytest.mark.asyncio
    async def test_payout_balance_exchange_error(self, client, payout_client):
        payout_client.error = PayoutError("Invalid API-key")

        response = await client.get("/api/admin/payout-balance", headers=as_admin())

        assert response.status == 502
        assert (await response.json())["error"] == "Invalid API-key"
