import logging
from typing import Optional
from fastapi import Header, Depends
from app.core.config import Settings, get_settings
from app.core.exceptions import AuthError, InvalidTokenError
from app.utils.auth import verify_token

logger = logging.getLogger(__name__)


def get_current_claims(
    authorization: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
) -> dict:
    """
    Verifies the bearer token and returns its claims.
    401 when no token is sent, 403 when the token is invalid or expired.
    """
    token = None
    if authorization:
        parts = authorization.split(" ", 1)
        if len(parts) == 2 and parts[0].lower() == "bearer":
            token = parts[1].strip()

    if not token:
        raise AuthError("Missing token")

    if not settings.jwt_secret:
        raise RuntimeError("JWT_SECRET is not configured")

    payload = verify_token(token, settings.jwt_secret)
    if not payload or not payload.get("sub"):
        logger.info("[AUTH] Rejected invalid or expired token")
        raise InvalidTokenError("Invalid token")

    return payload


def get_current_user_id(claims: dict = Depends(get_current_claims)) -> int:
    """Extract the account id from verified claims."""
    try:
        return int(claims["sub"])
    except (TypeError, ValueError):
        raise InvalidTokenError("Invalid token")
