# src/wg_wagering/application/schemas.py
from datetime import datetime

from pydantic import BaseModel, Field

from src.wg_common.chips import chips_to_display
from src.wg_common.enums import MarketType
from src.wg_wagering.domain.models import Wager, WagerStats


class PlaceWagerRequest(BaseModel):
    match_id: str
    side: str = Field(description="A or B")
    stake: int = Field(description="Chips to risk, positive integer")
    market_type: str = MarketType.MONEYLINE.value


class WagerResponse(BaseModel):
    id: str
    match_id: str
    market_type: str
    side: str
    stake: int
    price: int
    potential_payout: int
    potential_payout_display: str
    status: str
    actual_payout: int | None = None
    placed_at: datetime | None = None
    settled_at: datetime | None = None

    @classmethod
    def from_domain(cls, w: Wager) -> "WagerResponse":
        return cls(
            id=w.id,
            match_id=w.match_id,
            market_type=w.market_type,
            side=w.side,
            stake=w.stake,
            price=w.price,
            potential_payout=w.potential_payout,
            potential_payout_display=chips_to_display(w.potential_payout),
            status=w.status,
            actual_payout=w.actual_payout,
            placed_at=w.placed_at,
            settled_at=w.settled_at,
        )


class WagerListResponse(BaseModel):
    items: list[WagerResponse]
    next_cursor: str | None
    has_more: bool


class WagerStatsResponse(BaseModel):
    total: int
    pending: int
    won: int
    lost: int
    cancelled: int
    total_wagered: int
    total_returned: int
    net_profit: int
    win_rate: float

    @classmethod
    def from_domain(cls, s: WagerStats) -> "WagerStatsResponse":
        return cls(
            total=s.total,
            pending=s.pending,
            won=s.won,
            lost=s.lost,
            cancelled=s.cancelled,
            total_wagered=s.total_wagered,
            total_returned=s.total_returned,
            net_profit=s.net_profit,
            win_rate=s.win_rate,
        )
