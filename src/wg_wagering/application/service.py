"""WageringService: place and cancel wagers.

place_wager runs as one transaction on the caller's session:

    lock match row -> check open/SCHEDULED -> lock account, check balance
    -> read current price -> compute payout -> debit ledger -> insert wager
    -> record new price snapshot -> COMMIT -> publish events

Any failure before COMMIT rolls back the debit, the wager row and the
snapshot together. Events are published only after COMMIT.
"""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.wg_common.chips import validate_stake
from src.wg_common.datetime_utils import utc_now
from src.wg_common.enums import LedgerCategory, MatchStatus, Side, WagerStatus
from src.wg_common.errors import (
    ExposureLimitError,
    InsufficientFundsError,
    InvalidMatchStateError,
    InvalidSideError,
    InvalidStakeError,
    MatchNotFoundError,
    WageringClosedError,
    WagerNotFoundError,
    WagerNotPendingError,
)
from src.wg_common.id_generator import generate_id
from src.wg_ledger.application.service import LedgerService
from src.wg_match.domain.repository import MatchRepositoryProtocol
from src.wg_match.infrastructure.persistence import MatchRepository
from src.wg_pricing.application.service import PriceService, normalize_market
from src.wg_pricing.domain import price_model
from src.wg_pricing.domain.models import PriceSnapshot
from src.wg_realtime.domain.events import (
    PRICE_UPDATE,
    WAGER_PLACED,
    EventPublisher,
    match_topic,
    user_topic,
)
from src.wg_wagering.domain.models import Wager, WagerStats
from src.wg_wagering.domain.repository import WagerRepositoryProtocol
from src.wg_wagering.infrastructure.persistence import WagerRepository

logger = logging.getLogger(__name__)


def _parse_side(side: str) -> Side:
    try:
        return Side(side)
    except ValueError:
        raise InvalidSideError(str(side)) from None


def price_payload(snapshot: PriceSnapshot) -> dict[str, Any]:
    return {
        "matchId": snapshot.match_id,
        "priceA": snapshot.price_a,
        "priceB": snapshot.price_b,
        "volumeA": snapshot.volume_a,
        "volumeB": snapshot.volume_b,
    }


class WageringService:
    def __init__(
        self,
        publisher: EventPublisher,
        ledger: LedgerService | None = None,
        prices: PriceService | None = None,
        wagers: WagerRepositoryProtocol | None = None,
        matches: MatchRepositoryProtocol | None = None,
        max_side_liability: int = 0,
    ) -> None:
        self._publisher = publisher
        self._matches: MatchRepositoryProtocol = matches or MatchRepository()
        self._ledger = ledger or LedgerService()
        self._prices = prices or PriceService(matches=self._matches)
        self._wagers: WagerRepositoryProtocol = wagers or WagerRepository()
        # Exposure cap hook: 0 disables it.
        self._max_side_liability = max_side_liability

    async def place_wager(
        self,
        db: AsyncSession,
        account_id: str,
        match_id: str,
        market_type: str,
        side: str,
        stake: int,
    ) -> Wager:
        # Request validation happens before any row is touched.
        try:
            stake = validate_stake(stake)
        except ValueError:
            raise InvalidStakeError(stake) from None
        market = normalize_market(market_type)
        selected = _parse_side(side)

        try:
            match = await self._matches.get_match(db, match_id, for_update=True)
            if match is None:
                raise MatchNotFoundError(match_id)
            if not match.accepts_wagers:
                if not match.wagering_open:
                    raise WageringClosedError(match_id)
                raise InvalidMatchStateError(match_id, match.status, MatchStatus.SCHEDULED.value)

            await self._ledger.ensure_account(db, account_id)
            available = await self._ledger.balance(db, account_id, for_update=True)
            if available < stake:
                raise InsufficientFundsError(stake, available)

            current = await self._prices.current_price(db, match_id, market)
            price = current.price_for(selected)
            potential_payout = price_model.payout(stake, price)

            if self._max_side_liability > 0:
                owed = await self._wagers.pending_liability(
                    db, match_id, market, selected.value
                )
                if owed + potential_payout > self._max_side_liability:
                    raise ExposureLimitError(match_id, selected.value, self._max_side_liability)

            wager_id = generate_id()
            await self._ledger.debit(
                db,
                account_id,
                stake,
                LedgerCategory.WAGER_PLACED.value,
                f"Wager {wager_id} on side {selected.value} of match {match_id}",
                wager_id,
            )
            wager = await self._wagers.insert(
                db,
                Wager(
                    id=wager_id,
                    account_id=account_id,
                    match_id=match_id,
                    market_type=market,
                    side=selected.value,
                    stake=stake,
                    price=price,
                    potential_payout=potential_payout,
                ),
            )
            snapshot = await self._prices.record_after_wager(
                db, match_id, market, selected, stake
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Wager %s placed: account=%s match=%s side=%s stake=%d price=%d payout=%d",
            wager.id, account_id, match_id, selected.value, stake, price, potential_payout,
        )
        await self._publisher.publish(
            user_topic(account_id),
            WAGER_PLACED,
            {
                "accountId": account_id,
                "wagerId": wager.id,
                "stake": wager.stake,
                "price": wager.price,
                "potentialPayout": wager.potential_payout,
            },
        )
        await self._publisher.publish(match_topic(match_id), PRICE_UPDATE, price_payload(snapshot))
        return wager

    async def cancel_wager(self, db: AsyncSession, wager_id: str, account_id: str) -> Wager:
        """Refund a PENDING wager while its match is still SCHEDULED.

        The market is not moved back: the snapshot lane is append-only and the
        volume that was bet remains part of the price history.
        """
        try:
            wager = await self._wagers.get(db, wager_id, for_update=True)
            # Someone else's wager is reported as missing, not as forbidden.
            if wager is None or wager.account_id != account_id:
                raise WagerNotFoundError(wager_id)
            if not wager.is_pending:
                raise WagerNotPendingError(wager_id, wager.status)
            # serialised against status transitions
            match = await self._matches.get_match(db, wager.match_id, for_update=True)
            if match is None:
                raise MatchNotFoundError(wager.match_id)
            if match.status != MatchStatus.SCHEDULED:
                raise InvalidMatchStateError(
                    match.id, match.status, MatchStatus.SCHEDULED.value
                )

            cancelled = await self._wagers.transition_from_pending(
                db, wager_id, WagerStatus.CANCELLED.value, None, utc_now()
            )
            if cancelled is None:
                raise WagerNotPendingError(wager_id, wager.status)
            await self._ledger.credit(
                db,
                account_id,
                wager.stake,
                LedgerCategory.WAGER_REFUNDED.value,
                f"Wager {wager_id} cancelled",
                wager_id,
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Wager %s cancelled by %s, refunded %d", wager_id, account_id, wager.stake)
        return cancelled

    async def get_wager(self, db: AsyncSession, wager_id: str, account_id: str) -> Wager:
        wager = await self._wagers.get(db, wager_id)
        if wager is None or wager.account_id != account_id:
            raise WagerNotFoundError(wager_id)
        return wager

    async def list_wagers(
        self,
        db: AsyncSession,
        account_id: str,
        status: str | None = None,
        cursor_id: str | None = None,
        limit: int = 50,
    ) -> list[Wager]:
        return await self._wagers.list_for_account(db, account_id, status, cursor_id, limit)

    async def account_stats(self, db: AsyncSession, account_id: str) -> WagerStats:
        return await self._wagers.account_stats(db, account_id)
