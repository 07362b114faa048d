"""
API endpoints for telematics alert rules.

Covers rule create/update/read/toggle, the activity feed listing and its
spreadsheet download, and the recipient/equipment pickers used by the
rule builder.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Request, Response
from pydantic import ValidationError
from sqlalchemy.orm import Session

from ...core.auth import UserContext, require_permission
from ...core.db import get_db
from ...core.errors import NoAlertsFound, TelematicsError, log_exception
from ...core.pagination import clamp_page_size, get_pagination, set_pagination_headers
from ...schemas.telematics_alert import (
    AccountEventScopeIn,
    AccountScopeIn,
    DownloadRequestIn,
    ToggleStatusOut,
)
from ...services.alert_export import (
    XLSX_MIME,
    ColumnSpec,
    DownloadFilter,
    ExportRequest,
    export_telematics_alerts,
)
from ...services.alert_filters import TelematicsAlertFilter
from ...services.equipment_resolver import (
    EquipmentFilter,
    EquipmentScope,
    fetch_equipment_by_accounts,
    fetch_equipment_by_accounts_or_customer_and_events,
)
from ...services.recipient_users import fetch_users_by_accounts
from ...services.telematics_alerts import (
    create_telematics_alert,
    get_telematics_alert,
    list_telematics_alerts,
    toggle_telematics_alert_status,
    update_telematics_alert,
)


router = APIRouter(prefix="/api/v1/telematics-alerts", tags=["telematics-alerts"])
logger = logging.getLogger("telematics_alerts_api")

PAGINATION_KEYS = {"page", "perPage", "per_page", "userId"}


def _http_error(exc: TelematicsError) -> HTTPException:
    if isinstance(exc, NoAlertsFound):
        return HTTPException(status_code=exc.status_code, detail={"code": exc.code, "message": exc.message})
    return HTTPException(status_code=exc.status_code, detail=exc.message)


def _internal_error(operation: str, exc: Exception, **ids: Any) -> HTTPException:
    log_exception(logger, f"{operation} failed", extra={"operation": operation, **ids}, exc=exc)
    return HTTPException(status_code=500, detail="Internal server error")


def _query_dict(request: Request) -> Dict[str, Any]:
    return {key: value for key, value in request.query_params.items() if key not in PAGINATION_KEYS}


def _page_args(request: Request) -> tuple[int, int]:
    params = request.query_params
    _skip, _take, page, per_page = get_pagination(
        params.get("page"),
        params.get("perPage") or params.get("per_page"),
    )
    return page, clamp_page_size(per_page)


def _resolve_user_id(request: Request, user_id: Optional[int]) -> Optional[int]:
    if user_id is not None:
        return user_id
    raw = request.query_params.get("userId")
    try:
        return int(raw) if raw else None
    except ValueError:
        return None


def _with_actor(payload: Dict[str, Any], user: UserContext, *keys: str) -> Dict[str, Any]:
    data = dict(payload or {})
    if user.user_id is not None:
        for key in keys:
            if data.get(key) is None:
                data[key] = user.user_id
    return data


@router.post("", response_model=dict)
@router.post("/", response_model=dict, include_in_schema=False)
def create_alert(
    payload: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    user: UserContext = Depends(require_permission("write:telematics-alerts")),
) -> dict:
    try:
        return create_telematics_alert(db, _with_actor(payload, user, "created_by", "updated_by"))
    except TelematicsError as exc:
        raise _http_error(exc)
    except Exception as exc:
        raise _internal_error("create_telematics_alert", exc, customer_id=(payload or {}).get("customer_id"))


@router.patch("/toggle-status/{alert_id}", response_model=ToggleStatusOut)
def toggle_status(
    alert_id: int,
    db: Session = Depends(get_db),
    user: UserContext = Depends(require_permission("patch:telematics-alerts")),
) -> ToggleStatusOut:
    try:
        status = toggle_telematics_alert_status(db, alert_id)
    except TelematicsError as exc:
        raise _http_error(exc)
    except Exception as exc:
        raise _internal_error("toggle_telematics_alert_status", exc, alert_id=alert_id)
    return ToggleStatusOut(telematic_alert_id=alert_id, status=status)


@router.patch("/{alert_id}", response_model=dict)
def update_alert(
    alert_id: int,
    payload: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    user: UserContext = Depends(require_permission("patch:telematics-alerts")),
) -> dict:
    try:
        return update_telematics_alert(db, alert_id, _with_actor(payload, user, "updated_by"))
    except TelematicsError as exc:
        raise _http_error(exc)
    except Exception as exc:
        raise _internal_error("update_telematics_alert", exc, alert_id=alert_id)


def _list_alerts(request: Request, response: Response, db: Session, customer_id: int, user_id: Optional[int]) -> dict:
    page, per_page = _page_args(request)
    filters = TelematicsAlertFilter.from_query(_query_dict(request))
    try:
        alerts, meta = list_telematics_alerts(db, customer_id, page, per_page, filters, user_id)
    except TelematicsError as exc:
        raise _http_error(exc)
    except Exception as exc:
        raise _internal_error("list_telematics_alerts", exc, customer_id=customer_id, user_id=user_id)
    set_pagination_headers(response, total=meta["total"], page=page, page_size=per_page)
    return {"alerts": alerts, "meta": meta}


@router.get("/customer/{customer_id}", response_model=dict)
def list_alerts(
    customer_id: int,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    user: UserContext = Depends(require_permission("read:telematics-activity-feed")),
) -> dict:
    return _list_alerts(request, response, db, customer_id, _resolve_user_id(request, None))


@router.get("/customer/{customer_id}/user/{user_id}", response_model=dict)
def list_alerts_for_user(
    customer_id: int,
    user_id: int,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    user: UserContext = Depends(require_permission("read:telematics-activity-feed")),
) -> dict:
    return _list_alerts(request, response, db, customer_id, user_id)


def _download(request: Request, db: Session, customer_id: int, user_id: Optional[int], body: DownloadRequestIn) -> Response:
    extra_query = {
        key: value for key, value in (body.query.model_extra or {}).items() if key not in PAGINATION_KEYS
    }
    export_request = ExportRequest(
        columns=[ColumnSpec(label=col.label, field=col.field, width=col.width) for col in body.columns],
        download=DownloadFilter(download_all=body.query.downloadAll, download_ids=body.query.download_ids),
        query=extra_query,
    )
    try:
        data, filename = export_telematics_alerts(db, customer_id, _query_dict(request), export_request, user_id)
    except TelematicsError as exc:
        raise _http_error(exc)
    except Exception as exc:
        raise _internal_error("export_telematics_alerts", exc, customer_id=customer_id, user_id=user_id)
    return Response(
        content=data,
        media_type=XLSX_MIME,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.post("/download/customer/{customer_id}")
def download_alerts(
    customer_id: int,
    request: Request,
    body: DownloadRequestIn = Body(...),
    db: Session = Depends(get_db),
    user: UserContext = Depends(require_permission("download:telematics-activity-feed")),
) -> Response:
    return _download(request, db, customer_id, _resolve_user_id(request, None), body)


@router.post("/download/customer/{customer_id}/user/{user_id}")
def download_alerts_for_user(
    customer_id: int,
    user_id: int,
    request: Request,
    body: DownloadRequestIn = Body(...),
    db: Session = Depends(get_db),
    user: UserContext = Depends(require_permission("download:telematics-activity-feed")),
) -> Response:
    return _download(request, db, customer_id, user_id, body)


@router.post("/getUsersByAccountIds", response_model=dict)
def users_by_accounts(
    request: Request,
    response: Response,
    body: AccountScopeIn = Body(...),
    db: Session = Depends(get_db),
    user: UserContext = Depends(require_permission("read:user-management")),
) -> dict:
    page, per_page = _page_args(request)
    try:
        users, meta = fetch_users_by_accounts(
            db, body.account_ids, body.customer_id, page, per_page, _query_dict(request)
        )
    except Exception as exc:
        raise _internal_error("fetch_users_by_accounts", exc, customer_id=body.customer_id)
    set_pagination_headers(response, total=meta["total"], page=page, page_size=per_page)
    return {"users": users, "meta": meta}


@router.post("/getEquipmentsByAccountIds", response_model=dict)
def equipment_by_accounts(
    request: Request,
    response: Response,
    body: AccountScopeIn = Body(...),
    db: Session = Depends(get_db),
    user: UserContext = Depends(require_permission("read:fleet-list-view")),
) -> dict:
    page, per_page = _page_args(request)
    scope = EquipmentScope(customer_id=body.customer_id, account_ids=body.account_ids)
    try:
        equipment, meta = fetch_equipment_by_accounts(db, scope, page, per_page, _query_dict(request))
    except Exception as exc:
        raise _internal_error("fetch_equipment_by_accounts", exc, customer_id=body.customer_id)
    set_pagination_headers(response, total=meta["total"], page=page, page_size=per_page)
    return {"equipment": equipment, "meta": meta}


@router.post("/fetchEquipmentByAccountsOrCustIdAndEvents", response_model=dict)
def equipment_by_accounts_and_events(
    request: Request,
    response: Response,
    body: AccountEventScopeIn = Body(...),
    db: Session = Depends(get_db),
    user: UserContext = Depends(require_permission("read:fleet-list-view")),
) -> dict:
    page, per_page = _page_args(request)
    try:
        filters = EquipmentFilter.model_validate(_query_dict(request))
    except ValidationError:
        raise HTTPException(status_code=400, detail="Invalid equipment filters")
    scope = EquipmentScope(
        customer_id=body.customer_id,
        account_ids=body.account_ids,
        event_category_id=body.event_cat_id,
    )
    try:
        equipment, meta = fetch_equipment_by_accounts_or_customer_and_events(db, scope, page, per_page, filters)
    except Exception as exc:
        raise _internal_error("fetch_equipment_by_accounts_or_customer_and_events", exc, customer_id=body.customer_id)
    set_pagination_headers(response, total=meta["total"], page=page, page_size=per_page)
    return {"equipment": equipment, "meta": meta}


@router.get("/{alert_id}", response_model=dict)
def get_alert(
    alert_id: int,
    db: Session = Depends(get_db),
    user: UserContext = Depends(require_permission("read:telematics-activity-feed-details")),
) -> dict:
    try:
        alert = get_telematics_alert(db, alert_id)
    except Exception as exc:
        raise _internal_error("get_telematics_alert", exc, alert_id=alert_id)
    if not alert:
        raise HTTPException(status_code=404, detail="Alert not found")
    return alert
