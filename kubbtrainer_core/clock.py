from __future__ import annotations

from datetime import date, datetime
from typing import Any

from .errors import MalformedInputError


def now() -> datetime:
    return datetime.now()


def is_today(value: datetime | date, today: date | None = None) -> bool:
    ref = today or date.today()
    day = value.date() if isinstance(value, datetime) else value
    return day == ref


def to_iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def from_iso(raw: Any, field_name: str = "timestamp") -> datetime:
    try:
        return datetime.fromisoformat(str(raw))
    except (TypeError, ValueError) as exc:
        raise MalformedInputError(f"Invalid {field_name}: {raw!r}") from exc


def optional_from_iso(raw: Any, field_name: str = "timestamp") -> datetime | None:
    if raw is None or raw == "":
        return None
    return from_iso(raw, field_name)
