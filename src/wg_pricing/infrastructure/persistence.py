"""PriceRepository — append-only access to price_snapshots.

"Latest" is ordered by the BIGSERIAL id rather than created_at: NOW() is the
transaction start time, so two snapshots written by overlapping transactions
can carry timestamps in the opposite order to their commits.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.wg_common.errors import InternalError
from src.wg_pricing.domain.models import PriceSnapshot

_COLUMNS = "id, match_id, market_type, price_a, price_b, volume_a, volume_b, created_at"

_LATEST_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM price_snapshots
    WHERE match_id = :match_id AND market_type = :market_type
    ORDER BY id DESC
    LIMIT 1
""")

_INSERT_SQL = text(f"""
    INSERT INTO price_snapshots
        (match_id, market_type, price_a, price_b, volume_a, volume_b)
    VALUES
        (:match_id, :market_type, :price_a, :price_b, :volume_a, :volume_b)
    RETURNING {_COLUMNS}
""")

_HISTORY_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM (
        SELECT {_COLUMNS}
        FROM price_snapshots
        WHERE match_id = :match_id AND market_type = :market_type
        ORDER BY id DESC
        LIMIT :limit
    ) recent
    ORDER BY id ASC
""")


def _row_to_snapshot(row: object) -> PriceSnapshot:
    return PriceSnapshot(
        id=row.id,  # type: ignore[attr-defined]
        match_id=row.match_id,  # type: ignore[attr-defined]
        market_type=row.market_type,  # type: ignore[attr-defined]
        price_a=row.price_a,  # type: ignore[attr-defined]
        price_b=row.price_b,  # type: ignore[attr-defined]
        volume_a=row.volume_a,  # type: ignore[attr-defined]
        volume_b=row.volume_b,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class PriceRepository:
    async def latest_snapshot(
        self, db: AsyncSession, match_id: str, market_type: str
    ) -> PriceSnapshot | None:
        row = (
            await db.execute(_LATEST_SQL, {"match_id": match_id, "market_type": market_type})
        ).fetchone()
        return _row_to_snapshot(row) if row else None

    async def insert_snapshot(
        self,
        db: AsyncSession,
        match_id: str,
        market_type: str,
        price_a: int,
        price_b: int,
        volume_a: int,
        volume_b: int,
    ) -> PriceSnapshot:
        row = (
            await db.execute(
                _INSERT_SQL,
                {
                    "match_id": match_id,
                    "market_type": market_type,
                    "price_a": price_a,
                    "price_b": price_b,
                    "volume_a": volume_a,
                    "volume_b": volume_b,
                },
            )
        ).fetchone()
        if row is None:
            raise InternalError("Price snapshot insert returned no rows")
        return _row_to_snapshot(row)

    async def list_snapshots(
        self, db: AsyncSession, match_id: str, market_type: str, limit: int
    ) -> list[PriceSnapshot]:
        result = await db.execute(
            _HISTORY_SQL,
            {"match_id": match_id, "market_type": market_type, "limit": limit},
        )
        return [_row_to_snapshot(row) for row in result.fetchall()]
