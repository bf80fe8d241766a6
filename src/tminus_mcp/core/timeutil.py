from __future__ import annotations

import time
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)

MINUTE_MS = 60 * 1000
HOUR_MS = 60 * MINUTE_MS
DAY_MS = 24 * HOUR_MS


def parse_iso(value: Any) -> Optional[datetime]:
    """Parse an ISO 8601 string into an aware datetime, or ``None``.

    Naive values are interpreted as UTC and a trailing ``Z`` is accepted.
    """

    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_iso_ms(value: Any) -> Optional[int]:
    parsed = parse_iso(value)
    if parsed is None:
        return None
    return (parsed - EPOCH) // _ONE_MS


def to_iso_ms(epoch_ms: int) -> str:
    """Format epoch milliseconds as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""

    moment = EPOCH + timedelta(milliseconds=epoch_ms)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def current_time_ms() -> int:
    return time.time_ns() // 1_000_000


__all__ = [
    "DAY_MS",
    "EPOCH",
    "HOUR_MS",
    "MINUTE_MS",
    "current_time_ms",
    "parse_iso",
    "parse_iso_ms",
    "to_iso_ms",
]
