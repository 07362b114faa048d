from conftest import FEB_01, JAN_15

from app.core.sorting import parse_sort
from app.models import TelematicAlert
from app.services.alert_filters import build_order_by


def test_parse_sort_skips_unknown_fields():
    allowed = {"alert_name", "created_at"}
    assert parse_sort("alert_name:DESC,bogus:asc,created_at", allowed) == [
        ("alert_name", "desc"),
        ("created_at", "asc"),
    ]
    assert parse_sort(None, allowed) == []
    assert parse_sort("", allowed) == []


def test_invalid_sort_falls_back_to_created_at_desc():
    for sort in (None, "", "bogus", "bogus:asc"):
        order = build_order_by(sort)
        assert len(order) == 1
        assert str(order[0]) == "telematic_alert.created_at DESC"


def _seed(db):
    db.add_all(
        [
            TelematicAlert(telematic_alert_id=1, customer_id=5, alert_name="Bravo", alert_category_id=2, created_at=JAN_15),
            TelematicAlert(telematic_alert_id=2, customer_id=5, alert_name="Alpha", alert_category_id=1, created_at=FEB_01),
            TelematicAlert(telematic_alert_id=3, customer_id=5, alert_name="Charlie", alert_category_id=1, created_at=JAN_15.replace(day=20)),
        ]
    )
    db.commit()


def _ordered_ids(db, sort):
    rows = db.query(TelematicAlert.telematic_alert_id).order_by(*build_order_by(sort)).all()
    return [row[0] for row in rows]


def test_sort_directions_against_database(fleet_db):
    _seed(fleet_db)
    assert _ordered_ids(fleet_db, "alert_name:asc") == [2, 1, 3]
    assert _ordered_ids(fleet_db, "alert_name:desc") == [3, 1, 2]
    assert _ordered_ids(fleet_db, "nonsense") == [2, 3, 1]


def test_sort_by_related_category_name(fleet_db):
    _seed(fleet_db)
    # Geofence (2) sorts after Temperature (1) descending; ties keep name order.
    assert _ordered_ids(fleet_db, "category:desc,alert_name:asc") == [2, 3, 1]
