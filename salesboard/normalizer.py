"""Normalizer for loosely-typed task records (JSON feeds, CLI input, patches)."""

from __future__ import annotations

import logging
import math
import uuid
from collections.abc import Callable, Mapping, Sequence
from datetime import datetime, timedelta, timezone
from typing import Any

from .models import (
    DEFAULT_TITLE,
    FIELD_ALIASES,
    PRIORITY_HIGH,
    PRIORITY_LOW,
    PRIORITY_MEDIUM,
    STATUS_DONE,
    STATUS_IN_PROGRESS,
    STATUS_TODO,
    Task,
)

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)

_STATUS_MAPPING = {
    "todo": STATUS_TODO,
    "to do": STATUS_TODO,
    "to-do": STATUS_TODO,
    "in progress": STATUS_IN_PROGRESS,
    "in-progress": STATUS_IN_PROGRESS,
    "inprogress": STATUS_IN_PROGRESS,
    "done": STATUS_DONE,
    "completed": STATUS_DONE,
    "closed": STATUS_DONE,
}

_PRIORITY_MAPPING = {
    "low": PRIORITY_LOW,
    "medium": PRIORITY_MEDIUM,
    "med": PRIORITY_MEDIUM,
    "high": PRIORITY_HIGH,
}


def new_id() -> str:
    return uuid.uuid4().hex


def canonical_fields(record: Mapping[str, Any]) -> dict[str, Any]:
    """Map camelCase/snake_case keys onto Task attribute names.

    Unknown keys are dropped. When both spellings are present the last one
    wins, following the mapping's iteration order.
    """
    out: dict[str, Any] = {}
    for key, value in record.items():
        name = FIELD_ALIASES.get(key)
        if name is not None:
            out[name] = value
    return out


def coerce_number(value: Any) -> float | None:
    """Return ``value`` as a finite float, or None if it is not one."""
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return None
        try:
            number = float(stripped)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def coerce_title(value: Any) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return DEFAULT_TITLE


def coerce_revenue(value: Any) -> float:
    number = coerce_number(value)
    return 0.0 if number is None else number


def coerce_time_taken(value: Any) -> float:
    """Time taken in hours; anything missing or non-positive becomes 1."""
    number = coerce_number(value)
    if number is None or number <= 0:
        return 1.0
    return number


def coerce_status(value: Any) -> str:
    """Canonicalize known status spellings; unknown strings pass through."""
    if not isinstance(value, str) or not value.strip():
        return STATUS_TODO
    return _STATUS_MAPPING.get(value.strip().lower(), value.strip())


def coerce_priority(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        return PRIORITY_LOW
    return _PRIORITY_MAPPING.get(value.strip().lower(), value.strip())


def coerce_notes(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def coerce_id(value: Any) -> str | None:
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip()
    return text or None


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 string, datetime, or epoch-milliseconds value.

    Naive values are assumed to be UTC. Returns None for anything else.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            if not math.isfinite(value):
                return None
            parsed = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def normalize_record(
    record: Any,
    idx: int,
    now: datetime,
    id_factory: Callable[[], str] = new_id,
) -> Task:
    """Coerce one loose record at position ``idx`` of a batch into a Task."""
    raw = canonical_fields(record) if isinstance(record, Mapping) else {}

    created_at = parse_timestamp(raw.get("created_at"))
    if created_at is None:
        created_at = now - (idx + 1) * ONE_DAY

    status = coerce_status(raw.get("status"))
    completed_at = parse_timestamp(raw.get("completed_at"))
    if completed_at is None and status == STATUS_DONE:
        completed_at = created_at + ONE_DAY

    return Task(
        id=coerce_id(raw.get("id")) or id_factory(),
        title=coerce_title(raw.get("title")),
        revenue=coerce_revenue(raw.get("revenue")),
        time_taken=coerce_time_taken(raw.get("time_taken")),
        priority=coerce_priority(raw.get("priority")),
        status=status,
        notes=coerce_notes(raw.get("notes")),
        created_at=created_at,
        completed_at=completed_at,
    )


def normalize_tasks(
    records: Any,
    now: datetime | None = None,
    id_factory: Callable[[], str] | None = None,
) -> list[Task]:
    """Turn a batch of loose records into well-formed, uniquely-identified tasks.

    Malformed fields are defaulted rather than rejected. Records that still
    have no title or a non-finite revenue after coercion are dropped, and
    only the first record for each id is kept.
    """
    if isinstance(records, (str, bytes)) or not isinstance(records, Sequence):
        return []
    if now is None:
        now = datetime.now(timezone.utc)
    if id_factory is None:
        id_factory = new_id

    mapped = [normalize_record(r, idx, now, id_factory) for idx, r in enumerate(records)]
    filtered = [t for t in mapped if t.title and math.isfinite(t.revenue)]

    seen: set[str] = set()
    unique: list[Task] = []
    for task in filtered:
        if task.id in seen:
            logger.debug("Dropping duplicate task id %s ('%s')", task.id, task.title)
            continue
        seen.add(task.id)
        unique.append(task)

    dropped = len(mapped) - len(unique)
    if dropped:
        logger.info("Normalized %d task(s), dropped %d", len(unique), dropped)
    return unique
