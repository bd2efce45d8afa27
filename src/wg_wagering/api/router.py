"""wg_wagering REST API. All endpoints act on the caller's own wagers."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.wg_common.database import get_db_session
from src.wg_common.response import ApiResponse, respond
from src.wg_gateway.auth.dependencies import get_current_account_id, get_event_bus
from src.wg_ledger.application.schemas import cursor_decode, cursor_encode
from src.wg_ledger.application.service import LedgerService
from src.wg_realtime.domain.events import EventPublisher
from src.wg_wagering.application.schemas import (
    PlaceWagerRequest,
    WagerListResponse,
    WagerResponse,
    WagerStatsResponse,
)
from src.wg_wagering.application.service import WageringService

router = APIRouter(prefix="/wagers", tags=["wagers"])


def get_wagering_service(
    publisher: Annotated[EventPublisher, Depends(get_event_bus)],
) -> WageringService:
    return WageringService(
        publisher,
        ledger=LedgerService(starting_balance=settings.STARTING_BALANCE),
        max_side_liability=settings.MAX_SIDE_LIABILITY,
    )


@router.post("", status_code=201)
async def place_wager(
    body: PlaceWagerRequest,
    account_id: Annotated[str, Depends(get_current_account_id)],
    service: Annotated[WageringService, Depends(get_wagering_service)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    wager = await service.place_wager(
        db, account_id, body.match_id, body.market_type, body.side, body.stake
    )
    return respond(request, WagerResponse.from_domain(wager).model_dump(mode="json"))


@router.get("")
async def list_wagers(
    account_id: Annotated[str, Depends(get_current_account_id)],
    service: Annotated[WageringService, Depends(get_wagering_service)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    status: str | None = Query(None, description="Filter by wager status"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
) -> ApiResponse:
    last_id = cursor_decode(cursor)
    wagers = await service.list_wagers(
        db, account_id, status, str(last_id) if last_id is not None else None, limit + 1
    )
    has_more = len(wagers) > limit
    page = wagers[:limit]
    data = WagerListResponse(
        items=[WagerResponse.from_domain(w) for w in page],
        next_cursor=cursor_encode(int(page[-1].id)) if has_more and page else None,
        has_more=has_more,
    )
    return respond(request, data.model_dump(mode="json"))


@router.get("/stats")
async def wager_stats(
    account_id: Annotated[str, Depends(get_current_account_id)],
    service: Annotated[WageringService, Depends(get_wagering_service)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    stats = await service.account_stats(db, account_id)
    return respond(request, WagerStatsResponse.from_domain(stats).model_dump())


@router.get("/{wager_id}")
async def get_wager(
    wager_id: str,
    account_id: Annotated[str, Depends(get_current_account_id)],
    service: Annotated[WageringService, Depends(get_wagering_service)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    wager = await service.get_wager(db, wager_id, account_id)
    return respond(request, WagerResponse.from_domain(wager).model_dump(mode="json"))


@router.delete("/{wager_id}")
async def cancel_wager(
    wager_id: str,
    account_id: Annotated[str, Depends(get_current_account_id)],
    service: Annotated[WageringService, Depends(get_wagering_service)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    wager = await service.cancel_wager(db, wager_id, account_id)
    return respond(request, WagerResponse.from_domain(wager).model_dump(mode="json"))
