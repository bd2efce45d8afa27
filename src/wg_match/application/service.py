"""MatchService — the admin-flow side of the match lifecycle.

Status only moves forward (SCHEDULED -> LIVE -> COMPLETED, or to CANCELLED from
either open state). Leaving SCHEDULED always closes wagering, and COMPLETED
needs a winner taken from the match's own two competitors. Each call is its
own transaction.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.wg_common.enums import MatchStatus
from src.wg_common.errors import (
    InvalidMatchStateError,
    InvalidStatusTransitionError,
    InvalidWinnerError,
    MatchNotFoundError,
)
from src.wg_match.domain.models import Match, can_transition
from src.wg_match.domain.repository import MatchRepositoryProtocol
from src.wg_match.infrastructure.persistence import MatchRepository

logger = logging.getLogger(__name__)


class MatchService:
    def __init__(self, repo: MatchRepositoryProtocol | None = None) -> None:
        self._repo: MatchRepositoryProtocol = repo or MatchRepository()

    async def get_match(self, db: AsyncSession, match_id: str) -> Match:
        match = await self._repo.get_match(db, match_id)
        if match is None:
            raise MatchNotFoundError(match_id)
        return match

    async def transition(
        self,
        db: AsyncSession,
        match_id: str,
        target: MatchStatus,
        winner_id: str | None = None,
        score_a: int | None = None,
        score_b: int | None = None,
    ) -> Match:
        try:
            match = await self._repo.get_match(db, match_id, for_update=True)
            if match is None:
                raise MatchNotFoundError(match_id)
            current = MatchStatus(match.status)
            if not can_transition(current, target):
                raise InvalidStatusTransitionError(match_id, current.value, target.value)

            if target == MatchStatus.COMPLETED:
                if winner_id is None or match.side_of(winner_id) is None:
                    raise InvalidWinnerError(match_id, str(winner_id))
                match.winner_id = winner_id
            if score_a is not None:
                match.score_a = score_a
            if score_b is not None:
                match.score_b = score_b

            match.status = target.value
            match.wagering_open = False
            saved = await self._repo.save_match_state(db, match)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Match %s: %s -> %s", match_id, current.value, target.value)
        return saved

    async def set_wagering_open(
        self, db: AsyncSession, match_id: str, wagering_open: bool
    ) -> Match:
        """Open or close the book. Re-opening is only allowed while SCHEDULED."""
        try:
            match = await self._repo.get_match(db, match_id, for_update=True)
            if match is None:
                raise MatchNotFoundError(match_id)
            if wagering_open and match.status != MatchStatus.SCHEDULED:
                raise InvalidMatchStateError(
                    match_id, match.status, MatchStatus.SCHEDULED.value
                )
            match.wagering_open = wagering_open
            saved = await self._repo.save_match_state(db, match)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return saved
