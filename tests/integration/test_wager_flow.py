"""End-to-end wager lifecycle against a real PostgreSQL (requires migrated DB).

Pre-condition: alembic upgrade head

Uses the session-scoped client fixture from tests/integration/conftest.py.
All tests share one event loop — avoids asyncpg pool cross-loop error.
"""

import uuid
from datetime import UTC, datetime, timedelta

import pytest
from httpx import AsyncClient
from jose import jwt

from config.settings import settings

pytestmark = [pytest.mark.integration, pytest.mark.asyncio(loop_scope="session")]


def bearer(sub: str, **claims: object) -> dict[str, str]:
    payload = {"sub": sub, "exp": datetime.now(UTC) + timedelta(minutes=10), **claims}
    token = jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    return {"Authorization": f"Bearer {token}"}


ADMIN = bearer("ops-admin", role="admin")


def _account() -> tuple[str, dict[str, str]]:
    account_id = f"acct-{uuid.uuid4().hex[:8]}"
    return account_id, bearer(account_id)


class TestWagerLifecycle:
    async def test_place_settle_and_reconcile(self, client: AsyncClient, new_match) -> None:
        match_id, comp_a, _ = await new_match()
        winner_acct, winner_headers = _account()
        _, loser_headers = _account()

        resp = await client.post(
            "/api/v1/wagers",
            json={"match_id": match_id, "side": "A", "stake": 100},
            headers=winner_headers,
        )
        assert resp.status_code == 201
        wager = resp.json()["data"]
        assert wager["price"] == -111
        assert wager["potential_payout"] == 190

        resp = await client.post(
            "/api/v1/wagers",
            json={"match_id": match_id, "side": "B", "stake": 100},
            headers=loser_headers,
        )
        assert resp.status_code == 201

        balance = (await client.get("/api/v1/wallet/balance", headers=winner_headers)).json()
        assert balance["data"]["balance"] == settings.STARTING_BALANCE - 100

        for status in ("LIVE", "COMPLETED"):
            body: dict[str, object] = {"status": status}
            if status == "COMPLETED":
                body["winner_id"] = comp_a
            resp = await client.post(
                f"/api/v1/admin/matches/{match_id}/status", json=body, headers=ADMIN
            )
            assert resp.status_code == 200

        resp = await client.post(f"/api/v1/admin/matches/{match_id}/settle", headers=ADMIN)
        assert resp.status_code == 200
        summary = resp.json()["data"]
        assert summary["won_count"] == 1
        assert summary["lost_count"] == 1

        balance = (await client.get("/api/v1/wallet/balance", headers=winner_headers)).json()
        assert balance["data"]["balance"] == settings.STARTING_BALANCE - 100 + 190

        # a second run finds nothing pending and pays nobody twice
        resp = await client.post(f"/api/v1/admin/matches/{match_id}/settle", headers=ADMIN)
        assert resp.json()["data"]["won_count"] == 1
        balance = (await client.get("/api/v1/wallet/balance", headers=winner_headers)).json()
        assert balance["data"]["balance"] == settings.STARTING_BALANCE + 90

        resp = await client.get(f"/api/v1/admin/accounts/{winner_acct}/reconcile", headers=ADMIN)
        assert resp.json()["data"]["ok"] is True

        position = (
            await client.get(f"/api/v1/admin/matches/{match_id}/position", headers=ADMIN)
        ).json()["data"]
        assert position["net"] == 10

    async def test_insufficient_balance_rejected(self, client: AsyncClient, new_match) -> None:
        match_id, _, _ = await new_match()
        _, headers = _account()
        resp = await client.post(
            "/api/v1/wagers",
            json={"match_id": match_id, "side": "A", "stake": settings.STARTING_BALANCE + 1},
            headers=headers,
        )
        assert resp.status_code == 422
        balance = (await client.get("/api/v1/wallet/balance", headers=headers)).json()
        assert balance["data"]["balance"] == settings.STARTING_BALANCE


class TestCancellation:
    async def test_user_cancel_refunds_stake(self, client: AsyncClient, new_match) -> None:
        match_id, _, _ = await new_match()
        _, headers = _account()
        wager = (
            await client.post(
                "/api/v1/wagers",
                json={"match_id": match_id, "side": "B", "stake": 250},
                headers=headers,
            )
        ).json()["data"]

        resp = await client.delete(f"/api/v1/wagers/{wager['id']}", headers=headers)
        assert resp.status_code == 200
        assert resp.json()["data"]["status"] == "CANCELLED"

        balance = (await client.get("/api/v1/wallet/balance", headers=headers)).json()
        assert balance["data"]["balance"] == settings.STARTING_BALANCE

    async def test_admin_cancel_match_refunds_everyone(
        self, client: AsyncClient, new_match
    ) -> None:
        match_id, _, _ = await new_match()
        _, headers = _account()
        await client.post(
            "/api/v1/wagers",
            json={"match_id": match_id, "side": "A", "stake": 300},
            headers=headers,
        )

        resp = await client.post(f"/api/v1/admin/matches/{match_id}/cancel", headers=ADMIN)
        assert resp.status_code == 200
        assert resp.json()["data"]["cancelled_count"] == 1

        balance = (await client.get("/api/v1/wallet/balance", headers=headers)).json()
        assert balance["data"]["balance"] == settings.STARTING_BALANCE
