"""Domain models for wg_pricing — pure dataclasses, no business logic."""

from dataclasses import dataclass, field
from datetime import datetime

from src.wg_common.enums import Side


@dataclass(frozen=True)
class PriceSnapshot:
    """One immutable point on a match/market price lane. Newest row = current price."""

    id: int
    match_id: str
    market_type: str
    price_a: int
    price_b: int
    volume_a: int
    volume_b: int
    created_at: datetime | None = None

    def price_for(self, side: Side) -> int:
        return self.price_a if side is Side.A else self.price_b

    def volume_for(self, side: Side) -> int:
        return self.volume_a if side is Side.A else self.volume_b

    @property
    def total_volume(self) -> int:
        return self.volume_a + self.volume_b


@dataclass
class PriceHealth:
    match_id: str
    issues: list[str] = field(default_factory=list)

    @property
    def healthy(self) -> bool:
        return not self.issues
