"""
API package for the telematics alert backend.

This package aggregates all API routers to be included in the FastAPI
application. The API is versioned under ``/api/v1``.
"""

from fastapi import APIRouter, Depends
from .v1.alert_lookups import categories_router, types_router, delivery_router
from .v1.health import router as health_router
from .v1.telematics_alerts import router as telematics_alerts_router
from ..core.auth import get_current_user

api_router = APIRouter()
protected = [Depends(get_current_user)]
api_router.include_router(health_router)
api_router.include_router(telematics_alerts_router, dependencies=protected)
api_router.include_router(categories_router, dependencies=protected)
api_router.include_router(types_router, dependencies=protected)
api_router.include_router(delivery_router, dependencies=protected)
