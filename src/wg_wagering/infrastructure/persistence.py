"""WagerRepository — raw SQL over the wagers table.

The only way a wager leaves PENDING is transition_from_pending, an
UPDATE ... WHERE status = 'PENDING' RETURNING. Two settlement runs racing on
the same wager cannot both get a row back, so at most one of them credits.
"""

from datetime import datetime

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.wg_common.enums import LedgerCategory
from src.wg_common.errors import InternalError
from src.wg_wagering.domain.models import MatchBook, Wager, WagerStats

_COLUMNS = """
    id, account_id, match_id, market_type, side, stake, price, potential_payout,
    status, placed_at, settled_at, actual_payout
"""

_INSERT_SQL = text(f"""
    INSERT INTO wagers
        (id, account_id, match_id, market_type, side, stake, price,
         potential_payout, status)
    VALUES
        (:id, :account_id, :match_id, :market_type, :side, :stake, :price,
         :potential_payout, 'PENDING')
    RETURNING {_COLUMNS}
""")

_GET_SQL = text(f"SELECT {_COLUMNS} FROM wagers WHERE id = :wager_id")
_GET_FOR_UPDATE_SQL = text(f"SELECT {_COLUMNS} FROM wagers WHERE id = :wager_id FOR UPDATE")

_LIST_PENDING_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM wagers
    WHERE match_id = :match_id AND status = 'PENDING'
    ORDER BY placed_at ASC, id ASC
""")

_TRANSITION_SQL = text(f"""
    UPDATE wagers
    SET status = :status,
        actual_payout = :actual_payout,
        settled_at = :settled_at
    WHERE id = :wager_id AND status = 'PENDING'
    RETURNING {_COLUMNS}
""")

_LIST_FOR_ACCOUNT_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM wagers
    WHERE account_id = :account_id
      AND (CAST(:status AS VARCHAR) IS NULL OR status = :status)
      AND (CAST(:cursor_id AS BIGINT) IS NULL OR CAST(id AS BIGINT) < :cursor_id)
    ORDER BY CAST(id AS BIGINT) DESC
    LIMIT :limit
""")

_ACCOUNT_STATS_SQL = text("""
    SELECT
        COUNT(*) AS total,
        COUNT(*) FILTER (WHERE status = 'PENDING') AS pending,
        COUNT(*) FILTER (WHERE status = 'WON') AS won,
        COUNT(*) FILTER (WHERE status = 'LOST') AS lost,
        COUNT(*) FILTER (WHERE status = 'CANCELLED') AS cancelled,
        COALESCE(SUM(stake) FILTER (WHERE status <> 'CANCELLED'), 0) AS total_wagered,
        COALESCE(SUM(stake) FILTER (WHERE status IN ('WON', 'LOST')), 0) AS settled_wagered,
        COALESCE(SUM(actual_payout) FILTER (WHERE status = 'WON'), 0) AS total_returned
    FROM wagers
    WHERE account_id = :account_id
""")

_MATCH_COUNTS_SQL = text("""
    SELECT
        COUNT(*) FILTER (WHERE status = 'PENDING') AS pending,
        COUNT(*) FILTER (WHERE status = 'WON') AS won,
        COUNT(*) FILTER (WHERE status = 'LOST') AS lost,
        COUNT(*) FILTER (WHERE status = 'CANCELLED') AS cancelled
    FROM wagers
    WHERE match_id = :match_id
""")

# Money side of the book comes from the ledger, not from the wager rows, so the
# house position is reconstructed from the audit trail itself.
_MATCH_LEDGER_SQL = text("""
    SELECT le.category, COALESCE(SUM(le.amount), 0) AS total
    FROM ledger_entries le
    JOIN wagers w ON w.id = le.wager_id
    WHERE w.match_id = :match_id
    GROUP BY le.category
""")

_PENDING_LIABILITY_SQL = text("""
    SELECT COALESCE(SUM(potential_payout), 0)
    FROM wagers
    WHERE match_id = :match_id
      AND market_type = :market_type
      AND side = :side
      AND status = 'PENDING'
""")


def _row_to_wager(row: object) -> Wager:
    return Wager(
        id=row.id,  # type: ignore[attr-defined]
        account_id=row.account_id,  # type: ignore[attr-defined]
        match_id=row.match_id,  # type: ignore[attr-defined]
        market_type=row.market_type,  # type: ignore[attr-defined]
        side=row.side,  # type: ignore[attr-defined]
        stake=row.stake,  # type: ignore[attr-defined]
        price=row.price,  # type: ignore[attr-defined]
        potential_payout=row.potential_payout,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        placed_at=row.placed_at,  # type: ignore[attr-defined]
        settled_at=row.settled_at,  # type: ignore[attr-defined]
        actual_payout=row.actual_payout,  # type: ignore[attr-defined]
    )


class WagerRepository:
    async def insert(self, db: AsyncSession, wager: Wager) -> Wager:
        row = (
            await db.execute(
                _INSERT_SQL,
                {
                    "id": wager.id,
                    "account_id": wager.account_id,
                    "match_id": wager.match_id,
                    "market_type": wager.market_type,
                    "side": wager.side,
                    "stake": wager.stake,
                    "price": wager.price,
                    "potential_payout": wager.potential_payout,
                },
            )
        ).fetchone()
        if row is None:
            raise InternalError("Wager insert returned no rows")
        return _row_to_wager(row)

    async def get(
        self, db: AsyncSession, wager_id: str, for_update: bool = False
    ) -> Wager | None:
        sql = _GET_FOR_UPDATE_SQL if for_update else _GET_SQL
        row = (await db.execute(sql, {"wager_id": wager_id})).fetchone()
        return _row_to_wager(row) if row else None

    async def list_pending_for_match(
        self, db: AsyncSession, match_id: str
    ) -> list[Wager]:
        result = await db.execute(_LIST_PENDING_SQL, {"match_id": match_id})
        return [_row_to_wager(row) for row in result.fetchall()]

    async def transition_from_pending(
        self,
        db: AsyncSession,
        wager_id: str,
        status: str,
        actual_payout: int | None,
        settled_at: datetime,
    ) -> Wager | None:
        row = (
            await db.execute(
                _TRANSITION_SQL,
                {
                    "wager_id": wager_id,
                    "status": status,
                    "actual_payout": actual_payout,
                    "settled_at": settled_at,
                },
            )
        ).fetchone()
        return _row_to_wager(row) if row else None

    async def list_for_account(
        self,
        db: AsyncSession,
        account_id: str,
        status: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Wager]:
        result = await db.execute(
            _LIST_FOR_ACCOUNT_SQL,
            {
                "account_id": account_id,
                "status": status,
                "cursor_id": int(cursor_id) if cursor_id else None,
                "limit": limit,
            },
        )
        return [_row_to_wager(row) for row in result.fetchall()]

    async def account_stats(self, db: AsyncSession, account_id: str) -> WagerStats:
        row = (await db.execute(_ACCOUNT_STATS_SQL, {"account_id": account_id})).fetchone()
        if row is None:
            raise InternalError("Aggregate query returned no rows")
        return WagerStats(
            total=row.total,
            pending=row.pending,
            won=row.won,
            lost=row.lost,
            cancelled=row.cancelled,
            total_wagered=int(row.total_wagered),
            settled_wagered=int(row.settled_wagered),
            total_returned=int(row.total_returned),
        )

    async def match_book(self, db: AsyncSession, match_id: str) -> MatchBook:
        counts = (await db.execute(_MATCH_COUNTS_SQL, {"match_id": match_id})).fetchone()
        if counts is None:
            raise InternalError("Aggregate query returned no rows")
        totals = {
            row.category: int(row.total)
            for row in (await db.execute(_MATCH_LEDGER_SQL, {"match_id": match_id})).fetchall()
        }
        return MatchBook(
            match_id=match_id,
            pending=counts.pending,
            won=counts.won,
            lost=counts.lost,
            cancelled=counts.cancelled,
            staked=-totals.get(LedgerCategory.WAGER_PLACED.value, 0),
            paid_out=totals.get(LedgerCategory.WAGER_WON.value, 0),
            refunded=totals.get(LedgerCategory.WAGER_REFUNDED.value, 0),
        )

    async def pending_liability(
        self, db: AsyncSession, match_id: str, market_type: str, side: str
    ) -> int:
        result = await db.execute(
            _PENDING_LIABILITY_SQL,
            {
                "match_id": match_id,
                "market_type": market_type,
                "side": side,
            },
        )
        return int(result.scalar_one())
