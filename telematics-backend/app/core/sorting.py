"""Sort token parsing against per-resource allow-lists."""

from __future__ import annotations

from typing import Iterable, Optional


def parse_sort(sort: Optional[str], allowed: Iterable[str]) -> list[tuple[str, str]]:
    """
    Parse ``"field[:asc|desc],field2..."`` into ``[(field, direction)]``.

    Fields missing from ``allowed`` are skipped. Direction defaults to
    ``asc``; only an explicit ``desc`` (any case) sorts descending.
    """
    if not sort or not isinstance(sort, str):
        return []
    allowed_set = set(allowed)
    parsed: list[tuple[str, str]] = []
    for part in sort.split(","):
        field, _, direction_raw = part.partition(":")
        field = field.strip()
        if not field or field not in allowed_set:
            continue
        direction = "desc" if direction_raw.strip().lower() == "desc" else "asc"
        parsed.append((field, direction))
    return parsed
