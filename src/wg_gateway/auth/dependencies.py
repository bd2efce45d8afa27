"""FastAPI dependencies for the identity boundary.

Usage in any protected router:
    from src.wg_gateway.auth.dependencies import get_current_account_id

    @router.get("/protected")
    async def protected(account_id: Annotated[str, Depends(get_current_account_id)]):
        ...
"""

from typing import Any

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from src.wg_common.errors import AdminRequiredError, InvalidCredentialsError
from src.wg_gateway.auth.jwt_handler import decode_token
from src.wg_realtime.domain.events import EventPublisher

# Tokens come from the identity provider, tokenUrl only feeds Swagger UI
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token")

_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_token_claims(token: str = Depends(oauth2_scheme)) -> dict[str, Any]:
    try:
        return decode_token(token)
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None


async def get_current_account_id(
    claims: dict[str, Any] = Depends(get_token_claims),
) -> str:
    """The caller's account id. The account row itself is created lazily by the ledger."""
    return str(claims["sub"])


async def require_admin(
    claims: dict[str, Any] = Depends(get_token_claims),
) -> str:
    """Verify the caller carries role=admin. Returns the caller's id for audit logs."""
    if claims.get("role") != "admin":
        raise AdminRequiredError()
    return str(claims["sub"])


def get_event_bus(request: Request) -> EventPublisher:
    """The bus built in the app lifespan."""
    return request.app.state.event_bus  # type: ignore[no-any-return]
