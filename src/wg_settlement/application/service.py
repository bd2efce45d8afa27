"""SettlementService: resolve every PENDING wager on a match exactly once.

Each wager is settled in its own transaction. A failure on one wager is
logged, rolled back and skipped; it stays PENDING and the next settle_match
call picks it up. The PENDING -> WON/LOST compare-and-set in the wager
repository is what makes re-runs and concurrent runs safe: only the caller
whose UPDATE returned the row credits the ledger.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.wg_common.datetime_utils import utc_now
from src.wg_common.enums import LedgerCategory, MatchStatus, Side, WagerStatus
from src.wg_common.errors import (
    CompetitorNotFoundError,
    InvalidMatchStateError,
    InvalidWinnerError,
    MatchNotFoundError,
)
from src.wg_ledger.application.service import LedgerService
from src.wg_match.domain.models import Match
from src.wg_match.domain.repository import MatchRepositoryProtocol
from src.wg_match.infrastructure.persistence import MatchRepository
from src.wg_realtime.domain.events import (
    GLOBAL_TOPIC,
    SETTLEMENT_DONE,
    EventPublisher,
    match_topic,
)
from src.wg_settlement.domain import elo
from src.wg_settlement.domain.models import (
    CancellationSummary,
    HousePosition,
    SettlementSummary,
)
from src.wg_wagering.domain.models import Wager
from src.wg_wagering.domain.repository import WagerRepositoryProtocol
from src.wg_wagering.infrastructure.persistence import WagerRepository

logger = logging.getLogger(__name__)


class SettlementService:
    def __init__(
        self,
        publisher: EventPublisher,
        ledger: LedgerService | None = None,
        wagers: WagerRepositoryProtocol | None = None,
        matches: MatchRepositoryProtocol | None = None,
    ) -> None:
        self._publisher = publisher
        self._ledger = ledger or LedgerService()
        self._wagers: WagerRepositoryProtocol = wagers or WagerRepository()
        self._matches: MatchRepositoryProtocol = matches or MatchRepository()

    async def _load_match(self, db: AsyncSession, match_id: str, expected: MatchStatus) -> Match:
        match = await self._matches.get_match(db, match_id)
        if match is None:
            raise MatchNotFoundError(match_id)
        if match.status != expected:
            raise InvalidMatchStateError(match_id, match.status, expected.value)
        return match

    async def settle_match(
        self, db: AsyncSession, match_id: str, winner_id: str
    ) -> SettlementSummary:
        match = await self._load_match(db, match_id, MatchStatus.COMPLETED)
        winning_side = match.side_of(winner_id)
        if winning_side is None:
            raise InvalidWinnerError(match_id, winner_id)
        if match.winner_id is not None and match.winner_id != winner_id:
            raise InvalidWinnerError(match_id, winner_id)

        pending = await self._wagers.list_pending_for_match(db, match_id)
        await db.rollback()  # end the read transaction before per-wager work
        logger.info("Settling %d pending wagers on match %s", len(pending), match_id)

        failed = 0
        for wager in pending:
            try:
                await self._settle_one(db, wager, wager.side == winning_side)
                await db.commit()
            except Exception:
                await db.rollback()
                failed += 1
                logger.exception("Failed to settle wager %s on match %s", wager.id, match_id)

        await self._apply_ratings(db, match, winning_side)

        book = await self._wagers.match_book(db, match_id)
        summary = SettlementSummary(
            match_id=match_id,
            total_wagers=book.total,
            won_count=book.won,
            lost_count=book.lost,
            pending_count=book.pending,
            failed_count=failed,
        )
        logger.info(
            "Match %s settled: %d wagers, %d won, %d lost, %d still pending",
            match_id, summary.total_wagers, summary.won_count,
            summary.lost_count, summary.pending_count,
        )
        payload = summary.to_event()
        await self._publisher.publish(match_topic(match_id), SETTLEMENT_DONE, payload)
        await self._publisher.publish(GLOBAL_TOPIC, SETTLEMENT_DONE, payload)
        return summary

    async def _settle_one(self, db: AsyncSession, wager: Wager, won: bool) -> None:
        status = WagerStatus.WON if won else WagerStatus.LOST
        settled = await self._wagers.transition_from_pending(
            db, wager.id, status.value, wager.potential_payout if won else 0, utc_now()
        )
        if settled is None:
            # Another run got there first.
            return
        if won:
            await self._ledger.credit(
                db,
                wager.account_id,
                wager.potential_payout,
                LedgerCategory.WAGER_WON.value,
                f"Won wager {wager.id} on match {wager.match_id}",
                wager.id,
            )

    async def _apply_ratings(self, db: AsyncSession, match: Match, winning_side: Side) -> None:
        winner_id = match.competitor_id_for(winning_side)
        loser_id = match.competitor_id_for(winning_side.other)
        try:
            if not await self._matches.claim_rating_update(db, match.id):
                await db.rollback()
                return
            winner = await self._matches.get_competitor(db, winner_id, for_update=True)
            if winner is None:
                raise CompetitorNotFoundError(winner_id)
            loser = await self._matches.get_competitor(db, loser_id, for_update=True)
            if loser is None:
                raise CompetitorNotFoundError(loser_id)

            new_winner, new_loser = elo.updated_ratings(winner.rating, loser.rating)
            await self._matches.save_competitor_result(db, winner_id, new_winner, won=True)
            await self._matches.save_competitor_result(db, loser_id, new_loser, won=False)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info(
            "Ratings after match %s: %s %d -> %d, %s %d -> %d",
            match.id, winner.name, winner.rating, new_winner,
            loser.name, loser.rating, new_loser,
        )

    async def cancel_match_wagers(self, db: AsyncSession, match_id: str) -> CancellationSummary:
        """Refund the stake of every PENDING wager on a CANCELLED match."""
        await self._load_match(db, match_id, MatchStatus.CANCELLED)
        pending = await self._wagers.list_pending_for_match(db, match_id)
        await db.rollback()

        failed = 0
        for wager in pending:
            try:
                refunded = await self._wagers.transition_from_pending(
                    db, wager.id, WagerStatus.CANCELLED.value, None, utc_now()
                )
                if refunded is not None:
                    await self._ledger.credit(
                        db,
                        wager.account_id,
                        wager.stake,
                        LedgerCategory.WAGER_REFUNDED.value,
                        f"Match cancelled: {match_id}",
                        wager.id,
                    )
                await db.commit()
            except Exception:
                await db.rollback()
                failed += 1
                logger.exception("Failed to refund wager %s on match %s", wager.id, match_id)

        book = await self._wagers.match_book(db, match_id)
        logger.info(
            "Match %s cancelled: %d of %d wagers refunded", match_id, book.cancelled, book.total
        )
        return CancellationSummary(
            match_id=match_id,
            total_wagers=book.total,
            cancelled_count=book.cancelled,
            failed_count=failed,
        )

    async def house_position(self, db: AsyncSession, match_id: str) -> HousePosition:
        match = await self._matches.get_match(db, match_id)
        if match is None:
            raise MatchNotFoundError(match_id)
        book = await self._wagers.match_book(db, match_id)
        return HousePosition(
            match_id=match_id,
            total_wagers=book.total,
            staked=book.staked,
            paid_out=book.paid_out,
            refunded=book.refunded,
        )
