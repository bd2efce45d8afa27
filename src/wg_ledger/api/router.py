"""wg_ledger wallet API: the caller's balance and ledger history."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.wg_common.database import get_db_session
from src.wg_common.response import ApiResponse, respond
from src.wg_gateway.auth.dependencies import get_current_account_id
from src.wg_ledger.application.service import LedgerService, WalletApplicationService

router = APIRouter(prefix="/wallet", tags=["wallet"])


def get_wallet_service() -> WalletApplicationService:
    return WalletApplicationService(LedgerService(starting_balance=settings.STARTING_BALANCE))


@router.get("/balance")
async def get_balance(
    account_id: Annotated[str, Depends(get_current_account_id)],
    service: Annotated[WalletApplicationService, Depends(get_wallet_service)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await service.get_balance(db, account_id)
    return respond(request, data.model_dump())


@router.get("/ledger")
async def list_ledger(
    account_id: Annotated[str, Depends(get_current_account_id)],
    service: Annotated[WalletApplicationService, Depends(get_wallet_service)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    category: str | None = Query(None, description="Filter by LedgerCategory"),
) -> ApiResponse:
    data = await service.list_ledger(db, account_id, cursor, limit, category)
    return respond(request, data.model_dump())
