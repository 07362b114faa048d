"""
Health endpoints for the telematics alert backend.
"""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text
from sqlalchemy.orm import Session

from ...core.config import get_app_env
from ...core.db import get_db


router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("")
def health() -> dict:
    return {
        "status": "ok",
        "env": get_app_env(),
        "timestamp_utc": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    }


@router.get("/db")
def database_health(db: Session = Depends(get_db)) -> dict:
    try:
        db.execute(text("SELECT 1"))
    except Exception:
        raise HTTPException(status_code=503, detail="Database unavailable")
    return {"status": "ok"}
