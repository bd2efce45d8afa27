"""Bearer token verification.

Tokens are minted by the external identity provider; this service only
verifies them. HS256 with a shared JWT_SECRET. The `sub` claim is the
account id, an optional `role` claim of "admin" unlocks the admin router.
"""

from typing import Any

from jose import JWTError, jwt

from config.settings import settings
from src.wg_common.errors import InvalidCredentialsError


def decode_token(token: str) -> dict[str, Any]:
    """Decode and validate a JWT.

    Raises:
        InvalidCredentialsError: bad signature, expired, or no `sub` claim.
    """
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],  # Explicit list prevents algorithm confusion
        )
    except JWTError:
        raise InvalidCredentialsError() from None

    if not payload.get("sub"):
        raise InvalidCredentialsError()
    return payload
