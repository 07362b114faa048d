"""
Spreadsheet export of alert rule listings.

The client sends the columns it is showing (label + field) together with
its listing filters. Every matching rule becomes one worksheet row; a
serial number column is always prepended.
"""

from __future__ import annotations

import io
import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

import xlsxwriter
from sqlalchemy.orm import Session

from ..core.config import is_local_environment, settings
from ..core.dates import coerce_datetime
from ..core.errors import NoAlertsFound, log_exception
from .alert_filters import TelematicsAlertFilter
from .telematics_alerts import list_telematics_alerts


logger = logging.getLogger("alert_export")

XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
WORKSHEET_NAME = "Telematics Alerts"
SERIAL_LABEL = "S.No"
NOT_AVAILABLE = "N/A"
MIN_COLUMN_WIDTH = 10
COLUMN_PADDING = 2
EXPORT_MAX_ROWS = 1_000_000

NAME_FIELDS = {"alert_name", "geofence_alert_name"}
EVENT_FIELDS = {"events", "event_name"}
DELIVERY_FIELDS = {"deliveryMethods", "delivery_method"}
CREATED_BY_FIELDS = {"created_by"}
UPDATED_BY_FIELDS = {"updated_by", "last_modified_by"}
CREATED_AT_FIELDS = {"created_at"}
UPDATED_AT_FIELDS = {"updated_at", "last_modified_at", "last_modified_date"}


@dataclass
class ColumnSpec:
    label: str
    field: str
    formatter: Optional[Callable[[Any, Mapping[str, Any]], Any]] = None
    width: Optional[int] = None


@dataclass
class DownloadFilter:
    download_all: bool = False
    download_ids: Optional[list[int]] = None


@dataclass
class ExportRequest:
    columns: list[ColumnSpec] = field(default_factory=list)
    download: DownloadFilter = field(default_factory=DownloadFilter)
    query: dict[str, Any] = field(default_factory=dict)


def filter_alerts_for_download(alerts: Sequence[Mapping[str, Any]], download: DownloadFilter) -> list:
    """
    Apply the row selection of a download request.

    Without ``download_ids`` every row is kept. With them, ``download_all``
    means "everything except these" and otherwise "only these".
    """
    if download.download_ids is None:
        return list(alerts)
    ids = set(download.download_ids)
    if download.download_all:
        return [alert for alert in alerts if alert.get("telematic_alert_id") not in ids]
    return [alert for alert in alerts if alert.get("telematic_alert_id") in ids]


def format_datetime_en_gb(value: Any) -> str:
    """``15/01/2024, 2:30:45 pm`` in UTC, or "N/A"."""
    parsed = coerce_datetime(value)
    if parsed is None:
        return NOT_AVAILABLE
    parsed = parsed.astimezone(timezone.utc)
    hour = parsed.hour % 12 or 12
    meridiem = "am" if parsed.hour < 12 else "pm"
    return f"{parsed.day:02d}/{parsed.month:02d}/{parsed.year}, {hour}:{parsed.minute:02d}:{parsed.second:02d} {meridiem}"


def _user_name(user: Any) -> str:
    if not user:
        return NOT_AVAILABLE
    return f"{user.get('first_name') or ''} {user.get('last_name') or ''}".strip()


def _joined_names(items: Any, key: str) -> str:
    if not isinstance(items, list):
        return NOT_AVAILABLE
    names = [str(item.get(key)) for item in items if isinstance(item, Mapping) and item.get(key)]
    return ", ".join(names) if names else NOT_AVAILABLE


def _recipients(alert: Mapping[str, Any]) -> str:
    emails = alert.get("recipients_email") or []
    mobiles = alert.get("recipients_mobile") or []
    text = ", ".join(str(email) for email in emails)
    if mobiles:
        text += " | " + ", ".join(str(mobile) for mobile in mobiles)
    return text


def _or_na(value: Any) -> Any:
    return NOT_AVAILABLE if value is None else value


def format_cell(alert: Mapping[str, Any], column: ColumnSpec) -> Any:
    field = column.field
    if field in NAME_FIELDS:
        return _or_na(alert.get("alert_name"))
    if field == "status":
        return _or_na(alert.get("status"))
    if field == "alert_category":
        return _or_na((alert.get("alert_category") or {}).get("category_name"))
    if field in EVENT_FIELDS:
        return _joined_names(alert.get("alert_type_events"), "event_name")
    if field in DELIVERY_FIELDS:
        return _joined_names(alert.get("deliveryMethods"), "method_type")
    if field == "recipients":
        return _recipients(alert)
    if field in CREATED_BY_FIELDS:
        return _user_name(alert.get("created_by_user"))
    if field in UPDATED_BY_FIELDS:
        return _user_name(alert.get("updated_by_user"))
    if field in CREATED_AT_FIELDS:
        return format_datetime_en_gb(alert.get("created_at"))
    if field in UPDATED_AT_FIELDS:
        return format_datetime_en_gb(alert.get("updated_at"))
    if column.formatter is not None:
        return column.formatter(alert.get(field), alert)
    return _or_na(alert.get(field))


def _cell_text(value: Any) -> Any:
    """Reduce a formatted value to something a worksheet cell can hold."""
    if value is None:
        return ""
    if isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, datetime):
        return format_datetime_en_gb(value)
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value)
    return json.dumps(value, default=str)


def format_alert_row(alert: Mapping[str, Any], index: int, columns: Sequence[ColumnSpec]) -> list[Any]:
    return [index + 1] + [_cell_text(format_cell(alert, column)) for column in columns]


def build_workbook(
    header: Sequence[str],
    rows: Iterable[Sequence[Any]],
    min_widths: Optional[Sequence[Optional[int]]] = None,
) -> bytes:
    """
    Write a single bold-header worksheet and auto-size every column.

    ``min_widths`` lines up with ``header``; a set entry is the narrowest
    width that column may be sized to.
    """
    buffer = io.BytesIO()
    workbook = xlsxwriter.Workbook(buffer, {"in_memory": True})
    worksheet = workbook.add_worksheet(WORKSHEET_NAME)
    bold = workbook.add_format({"bold": True})

    floors = list(min_widths or [])
    floors += [None] * (len(header) - len(floors))
    widths = [max(MIN_COLUMN_WIDTH, len(str(label)), floor or 0) for label, floor in zip(header, floors)]
    worksheet.write_row(0, 0, list(header), bold)
    for row_idx, row in enumerate(rows, start=1):
        worksheet.write_row(row_idx, 0, list(row))
        for col_idx, value in enumerate(row):
            widths[col_idx] = max(widths[col_idx], len(str(value)))
    for col_idx, width in enumerate(widths):
        worksheet.set_column(col_idx, col_idx, width + COLUMN_PADDING)

    workbook.close()
    return buffer.getvalue()


def _write_atomic(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=path.name, suffix=".tmp", dir=str(path.parent))
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except Exception:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def export_filename(customer_id: int, now: Optional[datetime] = None) -> str:
    now = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return f"customer_{customer_id}_telematics_alerts_{now.strftime('%Y-%m-%dT%H-%M-%S')}.xlsx"


def save_debug_copy(filename: str, data: bytes) -> Optional[Path]:
    if not is_local_environment():
        return None
    path = Path(settings.export_debug_dir) / filename
    try:
        _write_atomic(path, data)
    except OSError as exc:
        log_exception(logger, "Export debug copy failed", extra={"path": str(path)}, exc=exc)
        return None
    logger.info("Saved export debug copy path=%s", path)
    return path


def export_telematics_alerts(
    db: Session,
    customer_id: int,
    query: Optional[Mapping[str, Any]],
    request: ExportRequest,
    user_id: Optional[int] = None,
) -> tuple[bytes, str]:
    """
    Build the spreadsheet for every rule matching the listing filters.

    Query-string filters are merged with the filters in the request body
    (body wins). Raises ``NoAlertsFound`` when nothing matches so callers
    can show an empty state instead of an empty file.
    """
    filters = TelematicsAlertFilter.from_query(query, request.query)
    alerts, _meta = list_telematics_alerts(db, customer_id, 1, EXPORT_MAX_ROWS, filters, user_id)
    if not alerts:
        raise NoAlertsFound(customer_id)

    selected = filter_alerts_for_download(alerts, request.download)
    header = [SERIAL_LABEL] + [column.label for column in request.columns]
    rows = [format_alert_row(alert, index, request.columns) for index, alert in enumerate(selected)]
    min_widths = [None] + [column.width for column in request.columns]
    data = build_workbook(header, rows, min_widths=min_widths)

    filename = export_filename(customer_id)
    save_debug_copy(filename, data)
    logger.info("Generated telematics alerts export file=%s rows=%s", filename, len(rows))
    return data, filename
