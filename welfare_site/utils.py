"""
Small helpers shared by the services.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601 with milliseconds and a `Z` suffix."""
    return to_iso(datetime.now(timezone.utc))


def to_iso(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def normalize_timestamp(value) -> str:
    """
    Coerce a client or legacy timestamp into the canonical ISO form.

    Raises ValueError for values that cannot be parsed.
    """
    if isinstance(value, datetime):
        return to_iso(value)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Invalid timestamp: {value!r}")
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return to_iso(datetime.fromisoformat(text))


def today_iso() -> str:
    return date.today().isoformat()


def get_unique_id() -> str:
    return uuid.uuid4().hex


def slugify_name(name: str) -> str:
    """Member slugs are the lowercased name with whitespace runs as `-`."""
    return "-".join((name or "").lower().split())
