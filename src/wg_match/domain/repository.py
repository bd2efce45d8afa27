"""Repository Protocol — dependency inversion for testability."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.wg_match.domain.models import Competitor, Match


class MatchRepositoryProtocol(Protocol):
    async def get_match(
        self, db: AsyncSession, match_id: str, for_update: bool = False
    ) -> Match | None: ...

    async def get_competitor(
        self, db: AsyncSession, competitor_id: str, for_update: bool = False
    ) -> Competitor | None: ...

    async def save_match_state(self, db: AsyncSession, match: Match) -> Match:
        """Persist status, wagering_open, winner_id and scores."""
        ...

    async def claim_rating_update(self, db: AsyncSession, match_id: str) -> bool:
        """Compare-and-set ratings_applied FALSE -> TRUE. True if this caller won."""
        ...

    async def save_competitor_result(
        self, db: AsyncSession, competitor_id: str, rating: int, won: bool
    ) -> Competitor: ...
