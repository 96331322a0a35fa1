"""Shared service-layer helper functions."""

from __future__ import annotations

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Current time as an aware UTC datetime (audit timestamps)."""
    return datetime.now(UTC)


def not_before(now: datetime, previous: datetime) -> datetime:
    """Return *now*, or *previous* if the clock went backwards.

    Keeps ``updated_at`` monotonically non-decreasing per record.
    """
    return previous if now < previous else now


def now_compact() -> str:
    """Current UTC time as compact ISO (YYYYMMDDTHHmmss, for backup filenames)."""
    return utc_now().strftime("%Y%m%dT%H%M%S")
