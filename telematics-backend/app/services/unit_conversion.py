"""
Temperature normalization for alert thresholds.

Thresholds are stored as entered; rules on the temperature alert type also
carry a Fahrenheit copy so evaluation can compare against a single unit.
"""

from __future__ import annotations

import math
import re
from typing import Any, Iterable, Optional

TEMPERATURE_ALERT_TYPE_ID = 6

# localization_lookup ids
FAHRENHEIT_UNIT_IDS = {1}
CELSIUS_UNIT_IDS = {2, 3}


# Leading decimal prefix; trailing text such as a unit suffix is ignored.
_NUMBER_PREFIX = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def _parse_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _NUMBER_PREFIX.match(str(value).lstrip())
        if not match:
            return None
        number = float(match.group(0))
    return number if math.isfinite(number) else None


def to_fahrenheit(value: Any, unit_id: Optional[int]) -> float:
    """Convert ``value`` in ``unit_id`` to Fahrenheit; unparseable or non-finite input yields 0."""
    number = _parse_number(value)
    if number is None:
        return 0
    if unit_id in CELSIUS_UNIT_IDS:
        return number * 9 / 5 + 32
    return number


def _has_temperature_type(alert_type_ids: Optional[Iterable[Any]]) -> bool:
    for raw in alert_type_ids or []:
        try:
            if int(raw) == TEMPERATURE_ALERT_TYPE_ID:
                return True
        except (TypeError, ValueError):
            continue
    return False


def converted_type_for(alert_type_ids: Optional[Iterable[Any]]) -> Optional[str]:
    return "F" if _has_temperature_type(alert_type_ids) else None


def build_converted_values(
    alert_type_ids: Optional[Iterable[Any]],
    temperature_unit_id: Optional[int],
    event_low: Any,
    event_high: Any,
) -> list[float]:
    """
    Return ``[low, high]`` in Fahrenheit for temperature rules.

    Absent thresholds are omitted, so a rule with only a high bound yields
    a single-element list. Non-temperature rules and rules without a unit
    yield an empty list.
    """
    if not temperature_unit_id or not _has_temperature_type(alert_type_ids):
        return []
    values: list[float] = []
    for raw in (event_low, event_high):
        if raw is None or raw == "":
            continue
        values.append(to_fahrenheit(raw, temperature_unit_id))
    return values
