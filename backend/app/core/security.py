"""
Caller identity resolution.

The bearer token is checked against the identity service's user endpoint using
the low-privilege anon key. The resolved identity is passed explicitly into
every service call.
"""
import logging
from typing import Optional

import requests
from fastapi import Header
from pydantic import BaseModel

from app.core.config import settings
from app.core.exceptions import ConfigurationError, UnauthorizedError

logger = logging.getLogger(__name__)


class CurrentUser(BaseModel):
    id: str
    email: Optional[str] = None


def extract_bearer_token(authorization: Optional[str]) -> str:
    """Return the token part of an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        raise UnauthorizedError()
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise UnauthorizedError("Authorization header must be a bearer token")
    return token.strip()


def resolve_user(authorization: Optional[str]) -> CurrentUser:
    """
    Resolve the caller from the Authorization header.

    Raises:
        ConfigurationError: identity service URL or anon key missing
        UnauthorizedError: no credential, or the identity service rejected it
    """
    if not settings.AUTH_URL:
        raise ConfigurationError("AUTH_URL")
    if not settings.AUTH_ANON_KEY:
        raise ConfigurationError("AUTH_ANON_KEY")

    token = extract_bearer_token(authorization)
    url = f"{settings.AUTH_URL.rstrip('/')}/auth/v1/user"
    try:
        response = requests.get(
            url,
            headers={
                "apikey": settings.AUTH_ANON_KEY,
                "Authorization": f"Bearer {token}",
            },
            timeout=settings.AUTH_TIMEOUT_SECONDS,
        )
    except requests.RequestException as e:
        logger.error(f"Identity service unreachable: {e}")
        raise UnauthorizedError(f"Could not verify session: {e}")

    if response.status_code != 200:
        logger.warning(f"Identity service rejected token (status {response.status_code})")
        raise UnauthorizedError("Invalid or expired session")

    try:
        payload = response.json() or {}
    except ValueError:
        logger.warning("Identity service returned a non-JSON body")
        raise UnauthorizedError("Invalid or expired session")
    user_id = payload.get("id") if isinstance(payload, dict) else None
    if not user_id:
        raise UnauthorizedError()
    return CurrentUser(id=str(user_id), email=payload.get("email"))


def get_current_user(authorization: Optional[str] = Header(None)) -> CurrentUser:
    """Dependency resolving the authenticated caller"""
    return resolve_user(authorization)
