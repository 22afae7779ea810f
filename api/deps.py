"""
Admin principal resolution.

The principal is resolved once per request from the Authorization header and
handed to the review routes explicitly; the role check is a pure function.
"""
from __future__ import annotations

import hmac
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, HTTPException, status

from config import settings

ROLE_ADMIN = "admin"
ROLE_ANONYMOUS = "anonymous"


@dataclass(frozen=True)
class Principal:
    subject: str
    role: str


ANONYMOUS = Principal(subject="anonymous", role=ROLE_ANONYMOUS)


def is_admin(principal: Optional[Principal]) -> bool:
    return principal is not None and principal.role == ROLE_ADMIN


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_principal(authorization: Optional[str] = Header(None)) -> Principal:
    token = _bearer_token(authorization)
    if token is None:
        return ANONYMOUS
    if settings.admin_api_token and hmac.compare_digest(token.encode(), settings.admin_api_token.encode()):
        return Principal(subject="admin", role=ROLE_ADMIN)
    return Principal(subject="token", role=ROLE_ANONYMOUS)


def require_admin(principal: Principal = Depends(get_principal)) -> Principal:
    if principal == ANONYMOUS:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not is_admin(principal):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin role required")
    return principal
