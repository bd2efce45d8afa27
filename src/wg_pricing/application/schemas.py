"""Pydantic response schemas for the price API."""

from pydantic import BaseModel

from src.wg_pricing.domain.models import PriceHealth, PriceSnapshot


class PriceResponse(BaseModel):
    match_id: str
    market_type: str
    price_a: int
    price_b: int
    volume_a: int
    volume_b: int
    as_of: str | None

    @classmethod
    def from_snapshot(cls, s: PriceSnapshot) -> "PriceResponse":
        return cls(
            match_id=s.match_id,
            market_type=s.market_type,
            price_a=s.price_a,
            price_b=s.price_b,
            volume_a=s.volume_a,
            volume_b=s.volume_b,
            as_of=s.created_at.isoformat() if s.created_at else None,
        )


class PriceHistoryResponse(BaseModel):
    match_id: str
    market_type: str
    snapshots: list[PriceResponse]


class PriceHealthResponse(BaseModel):
    match_id: str
    healthy: bool
    issues: list[str]

    @classmethod
    def from_domain(cls, h: PriceHealth) -> "PriceHealthResponse":
        return cls(match_id=h.match_id, healthy=h.healthy, issues=list(h.issues))
