"""Utility helpers shared across modules."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from http import HTTPStatus
from urllib.parse import quote


def parse_timestamp(value: str | None) -> datetime | None:
    """Convert API ISO strings (trailing Z or an offset) into aware datetimes.

    The offset is kept as sent so the value formats back to the same text.
    """
    if not value:
        return None
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed


def format_timestamp(dt: datetime | None) -> str | None:
    """RFC 3339 text as the API emits it.

    Fractional seconds lose trailing zeros and a zero offset is written ``Z``.
    Naive datetimes are taken as UTC.
    """
    if dt is None:
        return None
    text = dt.strftime("%Y-%m-%dT%H:%M:%S")
    if dt.microsecond:
        text += f".{dt.microsecond:06d}".rstrip("0")
    offset = dt.utcoffset()
    if not offset:
        return text + "Z"
    sign = "-" if offset < timedelta(0) else "+"
    minutes = abs(offset) // timedelta(minutes=1)
    return f"{text}{sign}{minutes // 60:02d}:{minutes % 60:02d}"


def path_segment(value: str) -> str:
    """Escape a value so it stays a single URL path segment."""
    return quote(value, safe="$&+:=@")


def status_text(status_code: int) -> str:
    """Standard reason phrase for a status code, empty when unknown."""
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return ""
