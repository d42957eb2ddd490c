"""Datetime helpers."""

from __future__ import annotations

from datetime import UTC, datetime


def utcnow() -> datetime:
    """Return current UTC time as an aware datetime.

    Pod creation timestamps from the API server are timezone-aware, so
    comparisons against them need an aware "now".
    """
    return datetime.now(UTC)
