# tests/unit/test_persistence.py
"""Unit tests for the raw-SQL repositories using MagicMock AsyncSession."""
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.wg_common.errors import InternalError
from src.wg_ledger.infrastructure.db_models import AccountORM, LedgerEntryORM
from src.wg_ledger.infrastructure.persistence import LedgerRepository
from src.wg_match.infrastructure.db_models import MatchORM
from src.wg_pricing.infrastructure.db_models import PriceSnapshotORM
from src.wg_wagering.infrastructure.db_models import WagerORM
from src.wg_wagering.infrastructure.persistence import WagerRepository


def _result(one=None, many=None, scalar=None):
    result = MagicMock()
    result.fetchone.return_value = one
    result.fetchall.return_value = many or []
    result.scalar_one.return_value = scalar
    return result


def _make_wager_row(**kwargs):
    row = MagicMock()
    row.id = kwargs.get("id", "1001")
    row.account_id = kwargs.get("account_id", "acct-1")
    row.match_id = kwargs.get("match_id", "m1")
    row.market_type = "MONEYLINE"
    row.side = kwargs.get("side", "A")
    row.stake = kwargs.get("stake", 100)
    row.price = kwargs.get("price", -111)
    row.potential_payout = kwargs.get("potential_payout", 190)
    row.status = kwargs.get("status", "PENDING")
    row.placed_at = datetime.now(UTC)
    row.settled_at = None
    row.actual_payout = None
    return row


def _make_entry_row(amount: int = -100, balance_after: int = 9900):
    row = MagicMock()
    row.id = 1
    row.account_id = "acct-1"
    row.category = "WAGER_PLACED"
    row.amount = amount
    row.balance_before = balance_after - amount
    row.balance_after = balance_after
    row.wager_id = "1001"
    row.description = "stake"
    row.created_at = datetime.now(UTC)
    return row


@pytest.fixture
def db():
    return MagicMock()


class TestLedgerRepositoryApplyDelta:
    async def test_returns_none_when_guard_rejects(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(one=None))
        entry = await LedgerRepository().apply_delta(db, "acct-1", -500, "WAGER_PLACED", "x", None)
        assert entry is None
        # the ledger row is never written when the balance update matched nothing
        assert db.execute.await_count == 1

    async def test_writes_entry_with_before_and_after(self, db) -> None:
        balance_row = MagicMock()
        balance_row.balance = 9900
        db.execute = AsyncMock(
            side_effect=[_result(one=balance_row), _result(one=_make_entry_row())]
        )
        entry = await LedgerRepository().apply_delta(
            db, "acct-1", -100, "WAGER_PLACED", "stake", "1001"
        )
        assert entry is not None
        assert entry.balance_after == 9900
        params = db.execute.await_args_list[1].args[1]
        assert params["balance_before"] == 10_000
        assert params["balance_after"] == 9900
        assert params["amount"] == -100

    async def test_create_account_missing_after_insert(self, db) -> None:
        db.execute = AsyncMock(side_effect=[_result(), _result(one=None)])
        with pytest.raises(InternalError):
            await LedgerRepository().create_account_if_absent(db, "acct-1", 10_000)

    async def test_entry_totals(self, db) -> None:
        row = MagicMock()
        row.delta_sum = -250
        row.last_balance_after = 9750
        db.execute = AsyncMock(return_value=_result(one=row))
        assert await LedgerRepository().entry_totals(db, "acct-1") == (-250, 9750)


class TestWagerRepository:
    async def test_transition_lost_race_returns_none(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(one=None))
        result = await WagerRepository().transition_from_pending(
            db, "1001", "WON", 190, datetime.now(UTC)
        )
        assert result is None

    async def test_transition_returns_updated_wager(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(one=_make_wager_row(status="WON")))
        result = await WagerRepository().transition_from_pending(
            db, "1001", "WON", 190, datetime.now(UTC)
        )
        assert result is not None
        assert result.status == "WON"

    async def test_list_for_account_passes_numeric_cursor(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(many=[_make_wager_row(id="999")]))
        wagers = await WagerRepository().list_for_account(db, "acct-1", None, "1000", 20)
        assert [w.id for w in wagers] == ["999"]
        params = db.execute.await_args.args[1]
        assert params["cursor_id"] == 1000
        assert params["status"] is None

    async def test_insert_without_returning_row(self, db) -> None:
        from src.wg_wagering.domain.models import Wager

        db.execute = AsyncMock(return_value=_result(one=None))
        wager = Wager("1", "acct-1", "m1", "MONEYLINE", "A", 100, -111, 190)
        with pytest.raises(InternalError):
            await WagerRepository().insert(db, wager)

    async def test_match_book_combines_counts_and_ledger(self, db) -> None:
        counts = MagicMock(pending=1, won=2, lost=3, cancelled=0)
        placed = MagicMock(category="WAGER_PLACED", total=-600)
        won = MagicMock(category="WAGER_WON", total=400)
        db.execute = AsyncMock(side_effect=[_result(one=counts), _result(many=[placed, won])])

        book = await WagerRepository().match_book(db, "m1")

        assert book.total == 6
        assert (book.staked, book.paid_out, book.refunded) == (600, 400, 0)

    async def test_pending_liability(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(scalar=1234))
        assert await WagerRepository().pending_liability(db, "m1", "MONEYLINE", "A") == 1234


class TestOrmModels:
    @pytest.mark.parametrize(
        "model,columns",
        [
            (AccountORM, {"id", "balance", "version", "created_at", "updated_at"}),
            (
                LedgerEntryORM,
                {"id", "account_id", "category", "amount", "balance_before", "balance_after",
                 "wager_id", "description", "created_at"},
            ),
            (
                PriceSnapshotORM,
                {"id", "match_id", "market_type", "price_a", "price_b", "volume_a", "volume_b",
                 "created_at"},
            ),
            (
                WagerORM,
                {"id", "account_id", "match_id", "market_type", "side", "stake", "price",
                 "potential_payout", "status", "placed_at", "settled_at", "actual_payout"},
            ),
        ],
    )
    def test_columns_mirror_migrations(self, model: type, columns: set[str]) -> None:
        assert set(model.__table__.columns.keys()) == columns  # type: ignore[attr-defined]

    def test_match_has_ratings_flag(self) -> None:
        assert "ratings_applied" in MatchORM.__table__.columns  # type: ignore[attr-defined]
