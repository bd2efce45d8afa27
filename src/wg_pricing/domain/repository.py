"""Repository Protocol for the append-only price_snapshots lane."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.wg_pricing.domain.models import PriceSnapshot


class PriceRepositoryProtocol(Protocol):
    async def latest_snapshot(
        self, db: AsyncSession, match_id: str, market_type: str
    ) -> PriceSnapshot | None: ...

    async def insert_snapshot(
        self,
        db: AsyncSession,
        match_id: str,
        market_type: str,
        price_a: int,
        price_b: int,
        volume_a: int,
        volume_b: int,
    ) -> PriceSnapshot: ...

    async def list_snapshots(
        self, db: AsyncSession, match_id: str, market_type: str, limit: int
    ) -> list[PriceSnapshot]: ...
