"""
Service layer for the telematics alert backend.

This package contains alert rule persistence, equipment scoping, listing
filters, webhook delivery and spreadsheet export.
"""

from .telematics_alerts import (
    create_telematics_alert,
    get_telematics_alert,
    list_telematics_alerts,
    toggle_telematics_alert_status,
    update_telematics_alert,
)
from .alert_export import export_telematics_alerts

__all__ = [
    "create_telematics_alert",
    "update_telematics_alert",
    "get_telematics_alert",
    "list_telematics_alerts",
    "toggle_telematics_alert_status",
    "export_telematics_alerts",
]
