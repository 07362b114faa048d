"""
HMAC-SHA256 bearer tokens carrying user, customer and permission claims.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import os
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Optional


def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64url_decode(value: str) -> bytes:
    padding = "=" * (-len(value) % 4)
    return base64.urlsafe_b64decode(value + padding)


def _jwt_secret() -> str:
    secret = (os.getenv("TELEMATICS_JWT_SECRET") or "").strip()
    if secret:
        return secret
    env = (os.getenv("TELEMATICS_ENV") or os.getenv("APP_ENV") or "dev").strip().lower()
    if env == "prod":
        return ""
    return "dev-jwt-secret-change-me"


def _jwt_exp_minutes() -> int:
    try:
        return max(1, int(os.getenv("TELEMATICS_JWT_EXP_MIN", "720")))
    except Exception:
        return 720


def _sign(secret: str, signing_input: str) -> bytes:
    return hmac.new(secret.encode("utf-8"), signing_input.encode("ascii"), hashlib.sha256).digest()


def create_access_token(
    *,
    sub: str,
    user_id: int,
    customer_id: Optional[int],
    role: str = "USER",
    permissions: Iterable[str] = (),
) -> str:
    secret = _jwt_secret()
    if not secret:
        raise RuntimeError("TELEMATICS_JWT_SECRET is required when auth is enabled")
    now = datetime.now(timezone.utc)
    payload = {
        "sub": sub,
        "role": role,
        "user_id": user_id,
        "customer_id": customer_id,
        "permissions": sorted(set(permissions)),
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=_jwt_exp_minutes())).timestamp()),
    }
    header = {"alg": "HS256", "typ": "JWT"}
    signing_input = (
        f"{_b64url_encode(json.dumps(header, separators=(',', ':')).encode('utf-8'))}."
        f"{_b64url_encode(json.dumps(payload, separators=(',', ':')).encode('utf-8'))}"
    )
    return f"{signing_input}.{_b64url_encode(_sign(secret, signing_input))}"


def decode_access_token(token: str) -> dict[str, Any]:
    secret = _jwt_secret()
    if not secret:
        raise ValueError("JWT secret not configured")
    parts = token.split(".")
    if len(parts) != 3:
        raise ValueError("Malformed token")
    header_b64, payload_b64, signature_b64 = parts
    signing_input = f"{header_b64}.{payload_b64}"
    provided_sig = _b64url_decode(signature_b64)
    if not secrets.compare_digest(_sign(secret, signing_input), provided_sig):
        raise ValueError("Invalid signature")
    payload = json.loads(_b64url_decode(payload_b64).decode("utf-8"))
    if not isinstance(payload, dict):
        raise ValueError("Invalid payload")
    exp = int(payload.get("exp") or 0)
    if exp <= 0:
        raise ValueError("Missing exp")
    now_ts = int(datetime.now(timezone.utc).timestamp())
    if now_ts >= exp:
        raise ValueError("Token expired")
    return payload
