"""
Domain exceptions and logging helpers shared by services and routers.
"""

from __future__ import annotations

import logging
from typing import Any, Optional


class TelematicsError(Exception):
    """Base class for errors the API layer maps to explicit responses."""

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.code)
        self.message = message or self.code


class AlertValidationError(TelematicsError):
    status_code = 400
    code = "VALIDATION_ERROR"


class TelematicsAlertNotFound(TelematicsError):
    status_code = 404
    code = "ALERT_NOT_FOUND"

    def __init__(self, alert_id: Optional[int] = None) -> None:
        super().__init__("Alert not found")
        self.alert_id = alert_id


class DuplicateRecordError(TelematicsError):
    status_code = 409
    code = "DUPLICATE_RECORD"


class NoAlertsFound(TelematicsError):
    status_code = 404
    code = "NO_ALERTS_FOUND"

    def __init__(self, customer_id: Optional[int] = None) -> None:
        super().__init__("No alerts found for the selected filters")
        self.customer_id = customer_id


def log_exception(
    logger: logging.Logger,
    message: str,
    *,
    extra: Optional[dict[str, Any]] = None,
    exc: Optional[BaseException] = None,
) -> None:
    """
    Log an error with its context and traceback.

    Context keys are rendered into the message so they survive plain-text
    handlers; ``exc`` defaults to the exception currently being handled.
    """
    context = ""
    if extra:
        context = " " + " ".join(f"{key}={value}" for key, value in sorted(extra.items()))
    if exc is not None:
        logger.error("%s%s err=%s", message, context, exc, exc_info=(type(exc), exc, exc.__traceback__))
    else:
        logger.exception("%s%s", message, context)
