"""Helpers for building PocketBase filter strings."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any


def quote(value: Any) -> str:
    """Render a value as a double-quoted PocketBase filter literal."""
    text = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{text}"'


def build_filter(criteria: dict[str, Any], exclude: dict[str, Any] | None = None) -> str:
    """Join equality criteria (and optional exclusions) with `&&`.

    Example:
        build_filter({"vacancy_id": "v1"}, exclude={"id": "r1"})
        -> 'vacancy_id = "v1" && id != "r1"'
    """
    parts = [f"{field} = {quote(value)}" for field, value in criteria.items()]
    if exclude:
        parts.extend(f"{field} != {quote(value)}" for field, value in exclude.items())
    return " && ".join(parts)


def parse_datetime(value: Any) -> datetime | None:
    """Parse a PocketBase date value ("2025-01-02 10:00:00.000Z") into aware UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)

    text = str(value).strip().replace(" ", "T", 1)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def format_datetime(value: datetime) -> str:
    """Render a datetime the way PocketBase stores date fields."""
    return value.astimezone(UTC).strftime("%Y-%m-%d %H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"
