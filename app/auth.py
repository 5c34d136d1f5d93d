"""
Requester resolution.

Tokens are issued by the external user service as HS256 JWTs carrying
``id`` and ``isAdmin`` claims.  They arrive either as a bearer token or in
the ``access_token`` cookie.  ``get_requester`` resolves them into an
explicit ``Requester`` value that routes pass down to the services; a
request without any token resolves to ``None`` and each service decides
whether that is acceptable.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.config import settings
from app.errors import Unauthorized

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Requester:
    id: str
    is_admin: bool = False


def create_access_token(
    user_id: str,
    is_admin: bool = False,
    expires_delta: timedelta | None = None,
) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    payload = {"id": str(user_id), "isAdmin": bool(is_admin), "exp": expire}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Requester:
    """Return the requester encoded in *token*, or raise ``Unauthorized``."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except jwt.PyJWTError as exc:
        logger.warning("Rejected access token: %s", exc)
        raise Unauthorized() from exc

    user_id = payload.get("id")
    if not user_id:
        raise Unauthorized()
    return Requester(id=str(user_id), is_admin=bool(payload.get("isAdmin", False)))


async def get_requester(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> Requester | None:
    token = credentials.credentials if credentials else request.cookies.get(settings.AUTH_COOKIE_NAME)
    if not token:
        return None
    return decode_access_token(token)
