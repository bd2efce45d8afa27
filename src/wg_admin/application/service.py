# src/wg_admin/application/service.py
"""Admin application service: the match lifecycle as seen by operators."""
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.wg_common.enums import MatchStatus
from src.wg_common.errors import InvalidMatchStateError, UnknownMatchStatusError
from src.wg_ledger.application.schemas import LedgerEntryItem, ReconciliationResponse
from src.wg_ledger.application.service import LedgerService
from src.wg_match.application.service import MatchService
from src.wg_match.domain.models import Match
from src.wg_pricing.application.schemas import PriceHealthResponse
from src.wg_pricing.application.service import PriceService
from src.wg_realtime.domain.events import EventPublisher
from src.wg_settlement.application.service import SettlementService


def _match_dict(match: Match) -> dict[str, Any]:
    return {
        "match_id": match.id,
        "status": match.status,
        "wagering_open": match.wagering_open,
        "winner_id": match.winner_id,
        "score_a": match.score_a,
        "score_b": match.score_b,
    }


class AdminService:
    def __init__(
        self,
        publisher: EventPublisher,
        ledger: LedgerService | None = None,
        matches: MatchService | None = None,
        settlement: SettlementService | None = None,
        prices: PriceService | None = None,
    ) -> None:
        self._ledger = ledger or LedgerService()
        self._matches = matches or MatchService()
        self._settlement = settlement or SettlementService(publisher, ledger=self._ledger)
        self._prices = prices or PriceService()

    async def change_status(
        self,
        db: AsyncSession,
        match_id: str,
        status: str,
        winner_id: str | None = None,
        score_a: int | None = None,
        score_b: int | None = None,
    ) -> dict[str, Any]:
        try:
            target = MatchStatus(status)
        except ValueError:
            raise UnknownMatchStatusError(status) from None
        match = await self._matches.transition(db, match_id, target, winner_id, score_a, score_b)
        return _match_dict(match)

    async def set_wagering(
        self, db: AsyncSession, match_id: str, wagering_open: bool
    ) -> dict[str, Any]:
        match = await self._matches.set_wagering_open(db, match_id, wagering_open)
        return _match_dict(match)

    async def settle(
        self, db: AsyncSession, match_id: str, winner_id: str | None = None
    ) -> dict[str, Any]:
        """Settle with the given winner, or with the one recorded on the match."""
        if winner_id is None:
            match = await self._matches.get_match(db, match_id)
            if match.winner_id is None:
                raise InvalidMatchStateError(match_id, match.status, "a recorded winner")
            winner_id = match.winner_id
        summary = await self._settlement.settle_match(db, match_id, winner_id)
        return {
            "match_id": summary.match_id,
            "total_wagers": summary.total_wagers,
            "settled_count": summary.settled_count,
            "won_count": summary.won_count,
            "lost_count": summary.lost_count,
            "pending_count": summary.pending_count,
            "failed_count": summary.failed_count,
        }

    async def cancel(self, db: AsyncSession, match_id: str) -> dict[str, Any]:
        """Move the match to CANCELLED if it is not already, then refund its wagers."""
        match = await self._matches.get_match(db, match_id)
        if match.status != MatchStatus.CANCELLED:
            await self._matches.transition(db, match_id, MatchStatus.CANCELLED)
        summary = await self._settlement.cancel_match_wagers(db, match_id)
        return {
            "match_id": summary.match_id,
            "total_wagers": summary.total_wagers,
            "cancelled_count": summary.cancelled_count,
            "failed_count": summary.failed_count,
        }

    async def house_position(self, db: AsyncSession, match_id: str) -> dict[str, Any]:
        position = await self._settlement.house_position(db, match_id)
        return {
            "match_id": position.match_id,
            "total_wagers": position.total_wagers,
            "staked": position.staked,
            "paid_out": position.paid_out,
            "refunded": position.refunded,
            "net": position.net,
        }

    async def price_health(self, db: AsyncSession, match_id: str) -> dict[str, Any]:
        health = await self._prices.check_health(db, match_id)
        return PriceHealthResponse.from_domain(health).model_dump()

    async def adjust_balance(
        self, db: AsyncSession, account_id: str, amount: int, note: str
    ) -> dict[str, Any]:
        try:
            entry = await self._ledger.adjust(db, account_id, amount, note)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return LedgerEntryItem.from_domain(entry).model_dump()

    async def reconcile(self, db: AsyncSession, account_id: str) -> dict[str, Any]:
        result = await self._ledger.reconcile(db, account_id)
        return ReconciliationResponse.from_domain(result).model_dump()
