# src/wg_admin/api/router.py
"""Admin REST API. Every endpoint requires a token with role=admin."""
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.wg_admin.application.service import AdminService
from src.wg_common.database import get_db_session
from src.wg_common.response import ApiResponse, respond
from src.wg_gateway.auth.dependencies import get_event_bus, require_admin
from src.wg_ledger.application.service import LedgerService
from src.wg_realtime.domain.events import EventPublisher

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


class StatusRequest(BaseModel):
    status: str
    winner_id: str | None = None
    score_a: int | None = None
    score_b: int | None = None


class WageringRequest(BaseModel):
    open: bool


class SettleRequest(BaseModel):
    winner_id: str | None = None


class AdjustRequest(BaseModel):
    amount: int = Field(description="Signed chips; negative debits the account")
    note: str = Field(default="Manual adjustment", max_length=500)


def get_admin_service(
    publisher: Annotated[EventPublisher, Depends(get_event_bus)],
) -> AdminService:
    return AdminService(publisher, ledger=LedgerService(starting_balance=settings.STARTING_BALANCE))


@router.post("/matches/{match_id}/status")
async def change_status(
    match_id: str,
    body: StatusRequest,
    service: Annotated[AdminService, Depends(get_admin_service)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    result = await service.change_status(
        db, match_id, body.status, body.winner_id, body.score_a, body.score_b
    )
    return respond(request, result)


@router.post("/matches/{match_id}/wagering")
async def set_wagering(
    match_id: str,
    body: WageringRequest,
    service: Annotated[AdminService, Depends(get_admin_service)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    return respond(request, await service.set_wagering(db, match_id, body.open))


@router.post("/matches/{match_id}/settle")
async def settle_match(
    match_id: str,
    service: Annotated[AdminService, Depends(get_admin_service)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    body: SettleRequest | None = None,
) -> ApiResponse:
    winner_id = body.winner_id if body is not None else None
    return respond(request, await service.settle(db, match_id, winner_id))


@router.post("/matches/{match_id}/cancel")
async def cancel_match(
    match_id: str,
    service: Annotated[AdminService, Depends(get_admin_service)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    return respond(request, await service.cancel(db, match_id))


@router.get("/matches/{match_id}/position")
async def house_position(
    match_id: str,
    service: Annotated[AdminService, Depends(get_admin_service)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    return respond(request, await service.house_position(db, match_id))


@router.get("/matches/{match_id}/price-health")
async def price_health(
    match_id: str,
    service: Annotated[AdminService, Depends(get_admin_service)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    return respond(request, await service.price_health(db, match_id))


@router.get("/accounts/{account_id}/reconcile")
async def reconcile_account(
    account_id: str,
    service: Annotated[AdminService, Depends(get_admin_service)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    return respond(request, await service.reconcile(db, account_id))


@router.post("/accounts/{account_id}/adjust")
async def adjust_balance(
    account_id: str,
    body: AdjustRequest,
    service: Annotated[AdminService, Depends(get_admin_service)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    return respond(request, await service.adjust_balance(db, account_id, body.amount, body.note))
