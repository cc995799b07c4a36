"""Caller identity for the insights function."""

import logging
from typing import Optional

from jose import JWTError, jwt

from services.config import settings
from services.exceptions import AuthError

logger = logging.getLogger(__name__)


def profile_id_from_token(token: str, secret: Optional[str] = None) -> Optional[str]:
    """Verified `sub` claim of a session JWT, or None when it cannot be verified."""
    secret = secret or settings.AUTH_JWT_SECRET
    if not secret:
        logger.warning("AUTH_JWT_SECRET is not set; bearer tokens cannot be verified")
        return None
    try:
        # Session tokens carry an audience we do not pin.
        payload = jwt.decode(
            token,
            secret,
            algorithms=[settings.AUTH_JWT_ALGORITHM],
            options={"verify_aud": False},
        )
    except JWTError as e:
        logger.warning("Error processing auth token: %s", e)
        return None
    return payload.get("sub")


def resolve_caller_id(
    authorization: Optional[str],
    fallback_profile_id: Optional[str] = None,
    *,
    secret: Optional[str] = None,
) -> str:
    """Prefer the authenticated session identity, else an explicit profile id.

    The explicit id allows service-to-service and test invocations.
    """
    profile_id = None
    if authorization:
        token = authorization.removeprefix("Bearer ").strip()
        profile_id = profile_id_from_token(token, secret)
    if not profile_id:
        profile_id = fallback_profile_id
    if not profile_id:
        raise AuthError("Unable to determine user ID. Please ensure you're logged in.")
    return profile_id
