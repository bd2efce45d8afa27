"""Repository Protocol — dependency inversion for testability."""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.wg_wagering.domain.models import MatchBook, Wager, WagerStats


class WagerRepositoryProtocol(Protocol):
    async def insert(self, db: AsyncSession, wager: Wager) -> Wager: ...

    async def get(
        self, db: AsyncSession, wager_id: str, for_update: bool = False
    ) -> Wager | None: ...

    async def list_pending_for_match(
        self, db: AsyncSession, match_id: str
    ) -> list[Wager]: ...

    async def transition_from_pending(
        self,
        db: AsyncSession,
        wager_id: str,
        status: str,
        actual_payout: int | None,
        settled_at: datetime,
    ) -> Wager | None:
        """Compare-and-set PENDING -> status. None if the wager already left PENDING."""
        ...

    async def list_for_account(
        self,
        db: AsyncSession,
        account_id: str,
        status: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Wager]: ...

    async def account_stats(self, db: AsyncSession, account_id: str) -> WagerStats: ...

    async def match_book(self, db: AsyncSession, match_id: str) -> MatchBook: ...

    async def pending_liability(
        self, db: AsyncSession, match_id: str, market_type: str, side: str
    ) -> int:
        """Sum of potential payouts still owed on one side of a market."""
        ...
