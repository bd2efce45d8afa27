"""MatchRepository — raw SQL over matches / competitors.

get_match(for_update=True) takes the match row lock. Wager placement holds it
for the whole placement transaction, which serialises the match's price lane
and makes a concurrent "close wagering" wait for (or be seen by) placement.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.wg_common.errors import CompetitorNotFoundError, MatchNotFoundError
from src.wg_match.domain.models import Competitor, Match

_MATCH_COLUMNS = """
    id, competitor_a_id, competitor_b_id, status, wagering_open, winner_id,
    score_a, score_b, ratings_applied, scheduled_at, created_at, updated_at
"""

_GET_MATCH_SQL = text(f"SELECT {_MATCH_COLUMNS} FROM matches WHERE id = :match_id")
_GET_MATCH_FOR_UPDATE_SQL = text(
    f"SELECT {_MATCH_COLUMNS} FROM matches WHERE id = :match_id FOR UPDATE"
)

_SAVE_MATCH_SQL = text(f"""
    UPDATE matches
    SET status = :status,
        wagering_open = :wagering_open,
        winner_id = :winner_id,
        score_a = :score_a,
        score_b = :score_b,
        updated_at = NOW()
    WHERE id = :id
    RETURNING {_MATCH_COLUMNS}
""")

_CLAIM_RATINGS_SQL = text("""
    UPDATE matches
    SET ratings_applied = TRUE, updated_at = NOW()
    WHERE id = :match_id AND ratings_applied = FALSE
    RETURNING id
""")

_COMPETITOR_COLUMNS = "id, name, rating, wins, losses, total_matches"

_GET_COMPETITOR_SQL = text(
    f"SELECT {_COMPETITOR_COLUMNS} FROM competitors WHERE id = :competitor_id"
)
_GET_COMPETITOR_FOR_UPDATE_SQL = text(
    f"SELECT {_COMPETITOR_COLUMNS} FROM competitors WHERE id = :competitor_id FOR UPDATE"
)

_SAVE_COMPETITOR_SQL = text(f"""
    UPDATE competitors
    SET rating = :rating,
        wins = wins + :win,
        losses = losses + :loss,
        total_matches = total_matches + 1,
        updated_at = NOW()
    WHERE id = :competitor_id
    RETURNING {_COMPETITOR_COLUMNS}
""")


def _row_to_match(row: object) -> Match:
    return Match(
        id=row.id,  # type: ignore[attr-defined]
        competitor_a_id=row.competitor_a_id,  # type: ignore[attr-defined]
        competitor_b_id=row.competitor_b_id,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        wagering_open=row.wagering_open,  # type: ignore[attr-defined]
        winner_id=row.winner_id,  # type: ignore[attr-defined]
        score_a=row.score_a,  # type: ignore[attr-defined]
        score_b=row.score_b,  # type: ignore[attr-defined]
        ratings_applied=row.ratings_applied,  # type: ignore[attr-defined]
        scheduled_at=row.scheduled_at,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _row_to_competitor(row: object) -> Competitor:
    return Competitor(
        id=row.id,  # type: ignore[attr-defined]
        name=row.name,  # type: ignore[attr-defined]
        rating=row.rating,  # type: ignore[attr-defined]
        wins=row.wins,  # type: ignore[attr-defined]
        losses=row.losses,  # type: ignore[attr-defined]
        total_matches=row.total_matches,  # type: ignore[attr-defined]
    )


class MatchRepository:
    async def get_match(
        self, db: AsyncSession, match_id: str, for_update: bool = False
    ) -> Match | None:
        sql = _GET_MATCH_FOR_UPDATE_SQL if for_update else _GET_MATCH_SQL
        row = (await db.execute(sql, {"match_id": match_id})).fetchone()
        return _row_to_match(row) if row else None

    async def get_competitor(
        self, db: AsyncSession, competitor_id: str, for_update: bool = False
    ) -> Competitor | None:
        sql = _GET_COMPETITOR_FOR_UPDATE_SQL if for_update else _GET_COMPETITOR_SQL
        row = (await db.execute(sql, {"competitor_id": competitor_id})).fetchone()
        return _row_to_competitor(row) if row else None

    async def save_match_state(self, db: AsyncSession, match: Match) -> Match:
        row = (
            await db.execute(
                _SAVE_MATCH_SQL,
                {
                    "id": match.id,
                    "status": match.status,
                    "wagering_open": match.wagering_open,
                    "winner_id": match.winner_id,
                    "score_a": match.score_a,
                    "score_b": match.score_b,
                },
            )
        ).fetchone()
        if row is None:
            raise MatchNotFoundError(match.id)
        return _row_to_match(row)

    async def claim_rating_update(self, db: AsyncSession, match_id: str) -> bool:
        row = (await db.execute(_CLAIM_RATINGS_SQL, {"match_id": match_id})).fetchone()
        return row is not None

    async def save_competitor_result(
        self, db: AsyncSession, competitor_id: str, rating: int, won: bool
    ) -> Competitor:
        row = (
            await db.execute(
                _SAVE_COMPETITOR_SQL,
                {
                    "competitor_id": competitor_id,
                    "rating": rating,
                    "win": 1 if won else 0,
                    "loss": 0 if won else 1,
                },
            )
        ).fetchone()
        if row is None:
            raise CompetitorNotFoundError(competitor_id)
        return _row_to_competitor(row)
