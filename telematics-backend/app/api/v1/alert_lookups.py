"""
API endpoints for alert categories, alert types and delivery methods.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ...core.db import get_db
from ...core.errors import DuplicateRecordError
from ...schemas.lookups import (
    AlertCategoryCreate,
    AlertCategoryOut,
    AlertTypeCreate,
    AlertTypeOut,
    DeliveryMethodOut,
)
from ...services.alert_lookups import (
    create_alert_category,
    create_alert_type,
    get_alert_category,
    list_alert_categories,
    list_alert_types,
    list_delivery_methods,
)


categories_router = APIRouter(prefix="/api/v1/alert-categories", tags=["alert-lookups"])
types_router = APIRouter(prefix="/api/v1/alert-types", tags=["alert-lookups"])
delivery_router = APIRouter(prefix="/api/v1/delivery-methods", tags=["alert-lookups"])


@categories_router.post("", response_model=AlertCategoryOut)
def create_category(payload: AlertCategoryCreate, db: Session = Depends(get_db)) -> AlertCategoryOut:
    try:
        category = create_alert_category(db, payload)
    except DuplicateRecordError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message)
    return AlertCategoryOut.model_validate(category)


@categories_router.get("", response_model=List[AlertCategoryOut])
def list_categories(db: Session = Depends(get_db)) -> List[AlertCategoryOut]:
    return [AlertCategoryOut.model_validate(row) for row in list_alert_categories(db)]


@categories_router.get("/{category_id}", response_model=AlertCategoryOut)
def get_category(category_id: int, db: Session = Depends(get_db)) -> AlertCategoryOut:
    category = get_alert_category(db, category_id)
    if not category:
        raise HTTPException(status_code=404, detail="Alert category not found")
    return AlertCategoryOut.model_validate(category)


@types_router.post("", response_model=AlertTypeOut)
def create_type(payload: AlertTypeCreate, db: Session = Depends(get_db)) -> AlertTypeOut:
    try:
        alert_type = create_alert_type(db, payload)
    except DuplicateRecordError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message)
    return AlertTypeOut.model_validate(alert_type)


@types_router.get("", response_model=List[AlertTypeOut])
def list_types(
    category_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
) -> List[AlertTypeOut]:
    return [AlertTypeOut.model_validate(row) for row in list_alert_types(db, category_id)]


@types_router.get("/category/{category_id}", response_model=List[AlertTypeOut])
def list_types_by_category(category_id: int, db: Session = Depends(get_db)) -> List[AlertTypeOut]:
    return [AlertTypeOut.model_validate(row) for row in list_alert_types(db, category_id)]


@delivery_router.get("", response_model=List[DeliveryMethodOut])
def list_methods(db: Session = Depends(get_db)) -> List[DeliveryMethodOut]:
    return [DeliveryMethodOut.model_validate(row) for row in list_delivery_methods(db)]
