"""Router tests through httpx ASGITransport with services wired to the in-memory fakes."""

from collections.abc import Iterator

import pytest
from httpx import AsyncClient

from src.main import app
from src.wg_admin.api.router import get_admin_service
from src.wg_admin.application.service import AdminService
from src.wg_common.database import get_db_session
from src.wg_ledger.api.router import get_wallet_service
from src.wg_ledger.application.service import LedgerService, WalletApplicationService
from src.wg_match.application.service import MatchService
from src.wg_pricing.api.router import get_price_service
from src.wg_pricing.application.service import PriceService
from src.wg_realtime.infrastructure.memory_bus import InMemoryEventBus
from src.wg_settlement.application.service import SettlementService
from src.wg_wagering.api.router import get_wagering_service
from src.wg_wagering.application.service import WageringService
from tests.unit.fakes import STARTING_BALANCE, FakeSession, FakeStore, make_token, seed_match

USER = {"Authorization": f"Bearer {make_token('acct-1')}"}
ADMIN = {"Authorization": f"Bearer {make_token('ops', role='admin')}"}


@pytest.fixture
def wired(
    db: FakeSession,
    bus: InMemoryEventBus,
    ledger: LedgerService,
    prices: PriceService,
    wagering: WageringService,
    settlement: SettlementService,
    match_service: MatchService,
) -> Iterator[None]:
    async def fake_session():  # type: ignore[no-untyped-def]
        yield db

    app.state.event_bus = bus
    app.dependency_overrides[get_db_session] = fake_session
    app.dependency_overrides[get_wallet_service] = lambda: WalletApplicationService(ledger)
    app.dependency_overrides[get_price_service] = lambda: prices
    app.dependency_overrides[get_wagering_service] = lambda: wagering
    app.dependency_overrides[get_admin_service] = lambda: AdminService(
        bus, ledger=ledger, matches=match_service, settlement=settlement, prices=prices
    )
    yield
    app.dependency_overrides.clear()


@pytest.mark.usefixtures("wired")
class TestWalletRoutes:
    async def test_balance_creates_account(self, client: AsyncClient) -> None:
        resp = await client.get("/api/v1/wallet/balance", headers=USER)
        assert resp.status_code == 200
        body = resp.json()
        assert body["code"] == 0
        assert body["data"]["balance"] == STARTING_BALANCE
        assert resp.headers["X-Request-ID"] == body["request_id"]

    async def test_requires_token(self, client: AsyncClient) -> None:
        resp = await client.get("/api/v1/wallet/balance")
        assert resp.status_code == 401


@pytest.mark.usefixtures("wired")
class TestPriceRoutes:
    async def test_current_price_is_public(self, client: AsyncClient, store: FakeStore) -> None:
        seed_match(store)
        resp = await client.get("/api/v1/matches/m1/price")
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert (data["price_a"], data["price_b"]) == (-111, -111)

    async def test_unknown_match_is_404_envelope(self, client: AsyncClient) -> None:
        resp = await client.get("/api/v1/matches/nope/price")
        assert resp.status_code == 404
        assert resp.json()["code"] == 3001
        assert resp.json()["data"] is None


@pytest.mark.usefixtures("wired")
class TestWagerRoutes:
    async def test_place_list_cancel(self, client: AsyncClient, store: FakeStore) -> None:
        seed_match(store)
        placed = await client.post(
            "/api/v1/wagers", json={"match_id": "m1", "side": "A", "stake": 100}, headers=USER
        )
        assert placed.status_code == 201
        wager = placed.json()["data"]
        assert (wager["price"], wager["potential_payout"]) == (-111, 190)

        listed = await client.get("/api/v1/wagers", headers=USER)
        assert [w["id"] for w in listed.json()["data"]["items"]] == [wager["id"]]

        cancelled = await client.delete(f"/api/v1/wagers/{wager['id']}", headers=USER)
        assert cancelled.json()["data"]["status"] == "CANCELLED"

        stats = await client.get("/api/v1/wagers/stats", headers=USER)
        assert stats.json()["data"]["cancelled"] == 1

    async def test_insufficient_funds_is_422(self, client: AsyncClient, store: FakeStore) -> None:
        seed_match(store)
        resp = await client.post(
            "/api/v1/wagers",
            json={"match_id": "m1", "side": "B", "stake": STARTING_BALANCE + 1},
            headers=USER,
        )
        assert resp.status_code == 422
        assert resp.json()["code"] == 2001

    async def test_negative_stake_is_4005(self, client: AsyncClient, store: FakeStore) -> None:
        seed_match(store)
        resp = await client.post(
            "/api/v1/wagers", json={"match_id": "m1", "side": "A", "stake": -5}, headers=USER
        )
        assert resp.status_code == 422
        assert resp.json()["code"] == 4005


@pytest.mark.usefixtures("wired")
class TestAdminRoutes:
    async def test_non_admin_forbidden(self, client: AsyncClient, store: FakeStore) -> None:
        seed_match(store)
        resp = await client.get("/api/v1/admin/matches/m1/position", headers=USER)
        assert resp.status_code == 403
        assert resp.json()["code"] == 1004

    async def test_complete_and_settle(self, client: AsyncClient, store: FakeStore) -> None:
        seed_match(store)
        await client.post(
            "/api/v1/wagers", json={"match_id": "m1", "side": "A", "stake": 100}, headers=USER
        )

        done = await client.post(
            "/api/v1/admin/matches/m1/status",
            json={"status": "COMPLETED", "winner_id": "m1-a"},
            headers=ADMIN,
        )
        assert done.json()["data"]["status"] == "COMPLETED"

        settled = await client.post("/api/v1/admin/matches/m1/settle", headers=ADMIN)
        assert settled.status_code == 200
        assert settled.json()["data"]["won_count"] == 1

        position = await client.get("/api/v1/admin/matches/m1/position", headers=ADMIN)
        assert position.json()["data"]["net"] == 100 - 190

        reconcile = await client.get("/api/v1/admin/accounts/acct-1/reconcile", headers=ADMIN)
        assert reconcile.json()["data"]["ok"] is True

    async def test_cancel_refunds(self, client: AsyncClient, store: FakeStore) -> None:
        seed_match(store)
        await client.post(
            "/api/v1/wagers", json={"match_id": "m1", "side": "B", "stake": 250}, headers=USER
        )
        resp = await client.post("/api/v1/admin/matches/m1/cancel", headers=ADMIN)
        assert resp.json()["data"]["cancelled_count"] == 1
        assert store.state.accounts["acct-1"].balance == STARTING_BALANCE

    async def test_unknown_status_value(self, client: AsyncClient, store: FakeStore) -> None:
        seed_match(store)
        resp = await client.post(
            "/api/v1/admin/matches/m1/status", json={"status": "PAUSED"}, headers=ADMIN
        )
        assert resp.status_code == 422
        assert resp.json()["code"] == 3007

    async def test_adjust_balance(self, client: AsyncClient, store: FakeStore) -> None:
        resp = await client.post(
            "/api/v1/admin/accounts/acct-9/adjust",
            json={"amount": 100, "note": "Daily bonus: 100 chips"},
            headers=ADMIN,
        )
        assert resp.status_code == 200
        entry = resp.json()["data"]
        assert entry["category"] == "ADJUSTMENT"
        assert entry["balance_after"] == STARTING_BALANCE + 100
        assert store.state.accounts["acct-9"].balance == STARTING_BALANCE + 100

        reconcile = await client.get("/api/v1/admin/accounts/acct-9/reconcile", headers=ADMIN)
        assert reconcile.json()["data"]["ok"] is True

    async def test_adjust_overdraft_rolls_back(self, client: AsyncClient, store: FakeStore) -> None:
        resp = await client.post(
            "/api/v1/admin/accounts/acct-9/adjust",
            json={"amount": -(STARTING_BALANCE + 1)},
            headers=ADMIN,
        )
        assert resp.status_code == 422
        assert resp.json()["code"] == 2001
        assert "acct-9" not in store.state.accounts
