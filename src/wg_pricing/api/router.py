"""wg_pricing REST API: public quotes, no authentication."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.wg_common.database import get_db_session
from src.wg_common.enums import MarketType
from src.wg_common.response import ApiResponse, respond
from src.wg_pricing.application.schemas import PriceHistoryResponse, PriceResponse
from src.wg_pricing.application.service import PriceService, normalize_market

router = APIRouter(prefix="/matches", tags=["prices"])


def get_price_service() -> PriceService:
    return PriceService()


@router.get("/{match_id}/price")
async def get_price(
    match_id: str,
    service: Annotated[PriceService, Depends(get_price_service)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    market_type: str = Query(MarketType.MONEYLINE.value, description="Market type"),
) -> ApiResponse:
    snapshot = await service.quote(db, match_id, market_type)
    return respond(request, PriceResponse.from_snapshot(snapshot).model_dump())


@router.get("/{match_id}/price/history")
async def get_price_history(
    match_id: str,
    service: Annotated[PriceService, Depends(get_price_service)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    market_type: str = Query(MarketType.MONEYLINE.value, description="Market type"),
    limit: int = Query(500, ge=1, le=5000, description="Most recent N snapshots"),
) -> ApiResponse:
    market = normalize_market(market_type)
    snapshots = await service.history(db, match_id, market, limit)
    data = PriceHistoryResponse(
        match_id=match_id,
        market_type=market,
        snapshots=[PriceResponse.from_snapshot(s) for s in snapshots],
    )
    return respond(request, data.model_dump())
