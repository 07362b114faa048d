import io
import re
import zipfile
from datetime import datetime, timezone

import pytest
from conftest import alert_payload

from app.core.errors import NoAlertsFound
from app.services import alert_export
from app.services.alert_export import (
    ColumnSpec,
    DownloadFilter,
    ExportRequest,
    build_workbook,
    export_filename,
    export_telematics_alerts,
    filter_alerts_for_download,
    format_alert_row,
    format_cell,
    format_datetime_en_gb,
)
from app.services.telematics_alerts import create_telematics_alert


def test_name_column_uses_na_for_missing_values():
    column = ColumnSpec(label="Name", field="alert_name")
    assert format_cell({"alert_name": None}, column) == "N/A"
    assert format_cell({"alert_name": "Geo1"}, column) == "Geo1"


def test_download_ids_include_or_exclude():
    alerts = [{"telematic_alert_id": 1}, {"telematic_alert_id": 2}, {"telematic_alert_id": 3}]
    excluded = filter_alerts_for_download(alerts, DownloadFilter(download_all=True, download_ids=[1, 2]))
    included = filter_alerts_for_download(alerts, DownloadFilter(download_all=False, download_ids=[1, 2]))
    everything = filter_alerts_for_download(alerts, DownloadFilter(download_all=False, download_ids=None))
    assert [a["telematic_alert_id"] for a in excluded] == [3]
    assert [a["telematic_alert_id"] for a in included] == [1, 2]
    assert len(everything) == 3


def test_en_gb_timestamps():
    assert format_datetime_en_gb(datetime(2024, 1, 15, 14, 30, 45, tzinfo=timezone.utc)) == "15/01/2024, 2:30:45 pm"
    assert format_datetime_en_gb("2024-01-05T00:05:09Z") == "05/01/2024, 12:05:09 am"
    assert format_datetime_en_gb(None) == "N/A"


def test_row_formatting_for_joined_fields():
    alert = {
        "alert_name": "Reefer",
        "alert_category": {"category_name": "Temperature"},
        "alert_type_events": [{"event_name": "Temperature Breach"}, {"event_name": "Door Open"}],
        "deliveryMethods": [],
        "recipients_email": ["a@example.com", "b@example.com"],
        "recipients_mobile": ["+15550001"],
        "created_by_user": {"first_name": "Alice", "last_name": None},
        "updated_by_user": None,
        "event_low": None,
        "specific_days": ["MON", "TUE"],
    }
    columns = [
        ColumnSpec("Category", "alert_category"),
        ColumnSpec("Events", "events"),
        ColumnSpec("Delivery", "deliveryMethods"),
        ColumnSpec("Recipients", "recipients"),
        ColumnSpec("Created By", "created_by"),
        ColumnSpec("Last Modified By", "last_modified_by"),
        ColumnSpec("Low", "event_low"),
        ColumnSpec("Days", "specific_days"),
        ColumnSpec("Low (custom)", "event_low", formatter=lambda value, row: value or "-"),
    ]
    assert format_alert_row(alert, 0, columns) == [
        1,
        "Temperature",
        "Temperature Breach, Door Open",
        "N/A",
        "a@example.com, b@example.com | +15550001",
        "Alice",
        "N/A",
        "N/A",
        "MON, TUE",
        "-",
    ]


def test_workbook_is_valid_xlsx():
    data = build_workbook(["S.No", "Name"], [[1, "Geo1"], [2, "N/A"]])
    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        names = archive.namelist()
        assert "xl/workbook.xml" in names
        assert "Telematics Alerts" in archive.read("xl/workbook.xml").decode("utf-8")


def _column_widths(data):
    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        sheet = archive.read("xl/worksheets/sheet1.xml").decode("utf-8")
    return [float(width) for width in re.findall(r'<col [^>]*width="([\d.]+)"', sheet)]


def test_requested_width_is_a_floor():
    data = build_workbook(["S.No", "Name", "Status"], [[1, "Geo1", "ACTIVE"]], min_widths=[None, 40, 5])
    serial, name, status = _column_widths(data)
    assert name >= 40
    assert status < 20
    assert serial < 20


def test_export_filename():
    now = datetime(2024, 1, 15, 10, 0, 5, tzinfo=timezone.utc)
    assert export_filename(5, now) == "customer_5_telematics_alerts_2024-01-15T10-00-05.xlsx"


def test_export_raises_when_nothing_matches(fleet_db):
    with pytest.raises(NoAlertsFound):
        export_telematics_alerts(fleet_db, 5, {}, ExportRequest(columns=[ColumnSpec("Name", "alert_name")]))


def test_export_builds_rows_for_selected_alerts(fleet_db, monkeypatch):
    first = create_telematics_alert(fleet_db, alert_payload(geofence_alert_name="Geo1"))
    create_telematics_alert(fleet_db, alert_payload(geofence_alert_name="Geo2"))
    create_telematics_alert(fleet_db, alert_payload(geofence_alert_name="Other", status="INACTIVE"))

    written = []
    monkeypatch.setattr(
        alert_export,
        "build_workbook",
        lambda header, rows, min_widths=None: written.append((header, rows, min_widths)) or b"xlsx",
    )

    request = ExportRequest(
        columns=[ColumnSpec("Name", "alert_name", width=30), ColumnSpec("Status", "status")],
        download=DownloadFilter(download_all=True, download_ids=[first["telematic_alert_id"]]),
        query={"sort": "alert_name:asc"},
    )
    data, filename = export_telematics_alerts(fleet_db, 5, {"status": "ACTIVE"}, request)

    assert data == b"xlsx"
    assert filename.startswith("customer_5_telematics_alerts_")
    header, rows, min_widths = written[0]
    assert header == ["S.No", "Name", "Status"]
    assert rows == [[1, "Geo2", "ACTIVE"]]
    assert min_widths == [None, 30, None]


def test_debug_copy_only_in_local_environment(tmp_path, monkeypatch):
    monkeypatch.setattr(alert_export.settings, "export_debug_dir", str(tmp_path))
    monkeypatch.setenv("ENVIRONMENT", "test")
    assert alert_export.save_debug_copy("a.xlsx", b"data") is None

    monkeypatch.setenv("ENVIRONMENT", "LOCAL")
    path = alert_export.save_debug_copy("a.xlsx", b"data")
    assert path == tmp_path / "a.xlsx"
    assert path.read_bytes() == b"data"
