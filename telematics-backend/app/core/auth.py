"""
Bearer-token auth and permission checks for the telematics API.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

from fastapi import Header, HTTPException, Depends
from .security import decode_access_token


@dataclass
class UserContext:
    role: str
    user_id: Optional[int] = None
    username: Optional[str] = None
    customer_id: Optional[int] = None
    permissions: frozenset[str] = field(default_factory=frozenset)
    superuser: bool = False

    def has_permission(self, permission: str) -> bool:
        return self.superuser or permission in self.permissions


def _auth_disabled() -> bool:
    return os.getenv("TELEMATICS_AUTH_DISABLED", "true").lower() in {"1", "true", "yes"}


def _extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    if not authorization.lower().startswith("bearer "):
        return None
    token = authorization.split(" ", 1)[1].strip()
    return token or None


def _optional_int(value) -> Optional[int]:
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def get_current_user(
    authorization: Optional[str] = Header(None),
    x_user_name: Optional[str] = Header(None, alias="X-User-Name"),
) -> UserContext:
    if _auth_disabled():
        return UserContext(role="ADMIN", username=x_user_name, superuser=True)
    token = _extract_bearer_token(authorization)
    if not token:
        raise HTTPException(status_code=401, detail="Missing bearer token")
    try:
        claims = decode_access_token(token)
    except Exception:
        raise HTTPException(status_code=401, detail="Invalid token")
    role = str(claims.get("role") or "").strip().upper()
    username = str(claims.get("sub") or "").strip() or None
    user_id = _optional_int(claims.get("user_id"))
    if not role or not username or user_id is None:
        raise HTTPException(status_code=401, detail="Invalid token claims")
    permissions = claims.get("permissions") or []
    if not isinstance(permissions, list):
        permissions = []
    return UserContext(
        role=role,
        user_id=user_id,
        username=username,
        customer_id=_optional_int(claims.get("customer_id")),
        permissions=frozenset(str(p) for p in permissions),
    )


def require_permission(permission: str):
    def _dep(user: UserContext = Depends(get_current_user)):
        if not user.has_permission(permission):
            raise HTTPException(status_code=403, detail="Forbidden")
        return user

    return _dep
