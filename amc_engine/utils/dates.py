"""
Date utilities for contract arithmetic.

Every instant is normalized to a timezone-aware UTC datetime before any
subtraction, so day counts do not depend on the host's local clock:
  • datetime.date        → midnight UTC of that day
  • naive datetime       → interpreted as UTC
  • aware datetime       → converted to UTC
  • ISO-8601 string      → parsed, then normalized as above
"""

from __future__ import annotations

import math
from datetime import date, datetime, timedelta, timezone

from dateutil.relativedelta import relativedelta

ONE_DAY = timedelta(days=1)


def to_utc(value: datetime | date | str) -> datetime:
    """Normalize a date, datetime or ISO string to an aware UTC datetime."""
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        value = datetime.fromisoformat(text)

    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)

    raise ValueError(f"Expected date, datetime or ISO string, got {type(value).__name__}")


def ceil_days(delta: timedelta) -> int:
    """Whole days in a delta, rounded up (negative deltas round toward zero)."""
    return math.ceil(delta / ONE_DAY)


def add_months(start: datetime, months: int) -> datetime:
    """Calendar-month addition; Jan 31 + 1 month lands on the last day of Feb."""
    return start + relativedelta(months=months)
