"""PriceService — owner of the per-(match, market) price lane.

The lane is append-only: every state is a new price_snapshots row and the
current price is simply the newest one. record_after_wager is the only writer
after initialisation and must be called inside the placement transaction,
after the ledger debit, while the match row lock is held.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.wg_common.enums import MarketType, Side
from src.wg_common.errors import (
    CompetitorNotFoundError,
    MatchNotFoundError,
    UnsupportedMarketError,
)
from src.wg_match.domain.repository import MatchRepositoryProtocol
from src.wg_match.infrastructure.persistence import MatchRepository
from src.wg_pricing.domain import price_model
from src.wg_pricing.domain.models import PriceHealth, PriceSnapshot
from src.wg_pricing.domain.price_model import DEFAULT_PRICING, PricingConfig
from src.wg_pricing.domain.repository import PriceRepositoryProtocol
from src.wg_pricing.infrastructure.persistence import PriceRepository

logger = logging.getLogger(__name__)

_LOPSIDED_SHARE = 0.8
_EXTREME_PRICE = 1000


def normalize_market(market_type: str) -> str:
    try:
        return MarketType(market_type).value
    except ValueError:
        raise UnsupportedMarketError(str(market_type)) from None


class PriceService:
    def __init__(
        self,
        repo: PriceRepositoryProtocol | None = None,
        matches: MatchRepositoryProtocol | None = None,
        config: PricingConfig = DEFAULT_PRICING,
    ) -> None:
        self._repo: PriceRepositoryProtocol = repo or PriceRepository()
        self._matches: MatchRepositoryProtocol = matches or MatchRepository()
        self._config = config

    async def current_price(
        self, db: AsyncSession, match_id: str, market_type: str = MarketType.MONEYLINE
    ) -> PriceSnapshot:
        """Latest snapshot, seeding the lane from competitor ratings on first use."""
        market_type = normalize_market(market_type)
        snapshot = await self._repo.latest_snapshot(db, match_id, market_type)
        if snapshot is not None:
            return snapshot

        match = await self._matches.get_match(db, match_id)
        if match is None:
            raise MatchNotFoundError(match_id)
        competitor_a = await self._matches.get_competitor(db, match.competitor_a_id)
        if competitor_a is None:
            raise CompetitorNotFoundError(match.competitor_a_id)
        competitor_b = await self._matches.get_competitor(db, match.competitor_b_id)
        if competitor_b is None:
            raise CompetitorNotFoundError(match.competitor_b_id)

        price_a, price_b = price_model.initial_prices(
            competitor_a.rating, competitor_b.rating, self._config
        )
        snapshot = await self._repo.insert_snapshot(
            db, match_id, market_type, price_a, price_b, 0, 0
        )
        logger.info(
            "Seeded %s prices for match %s: A=%d B=%d (ratings %d/%d)",
            market_type, match_id, price_a, price_b,
            competitor_a.rating, competitor_b.rating,
        )
        return snapshot

    async def quote(
        self, db: AsyncSession, match_id: str, market_type: str = MarketType.MONEYLINE
    ) -> PriceSnapshot:
        """Read-side current_price: commits the seed snapshot if one was created."""
        try:
            snapshot = await self.current_price(db, match_id, market_type)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return snapshot

    async def record_after_wager(
        self,
        db: AsyncSession,
        match_id: str,
        market_type: str,
        side: Side,
        stake: int,
    ) -> PriceSnapshot:
        """Add stake to one side's volume and re-skew both quotes against the new total."""
        market_type = normalize_market(market_type)
        current = await self.current_price(db, match_id, market_type)
        volume_a = current.volume_a + (stake if side is Side.A else 0)
        volume_b = current.volume_b + (stake if side is Side.B else 0)
        total = volume_a + volume_b

        price_a = price_model.adjust_for_volume(current.price_a, total, volume_a, self._config)
        price_b = price_model.adjust_for_volume(current.price_b, total, volume_b, self._config)

        snapshot = await self._repo.insert_snapshot(
            db, match_id, market_type, price_a, price_b, volume_a, volume_b
        )
        logger.debug(
            "Match %s %s: A %d->%d B %d->%d volume %d/%d",
            match_id, market_type, current.price_a, price_a,
            current.price_b, price_b, volume_a, volume_b,
        )
        return snapshot

    async def history(
        self,
        db: AsyncSession,
        match_id: str,
        market_type: str = MarketType.MONEYLINE,
        limit: int = 500,
    ) -> list[PriceSnapshot]:
        """Most recent `limit` snapshots, oldest first."""
        market_type = normalize_market(market_type)
        return await self._repo.list_snapshots(db, match_id, market_type, limit)

    async def check_health(
        self, db: AsyncSession, match_id: str, market_type: str = MarketType.MONEYLINE
    ) -> PriceHealth:
        """Flag lanes that deserve a manual look: lopsided money or extreme quotes."""
        current = await self.current_price(db, match_id, market_type)
        health = PriceHealth(match_id=match_id)

        if current.total_volume > 0:
            share_a = current.volume_a / current.total_volume
            if share_a > _LOPSIDED_SHARE:
                health.issues.append("Over 80% of volume on side A")
            elif share_a < 1 - _LOPSIDED_SHARE:
                health.issues.append("Over 80% of volume on side B")

        if abs(current.price_a) > _EXTREME_PRICE or abs(current.price_b) > _EXTREME_PRICE:
            health.issues.append("Extreme price detected, manual review recommended")
        return health
