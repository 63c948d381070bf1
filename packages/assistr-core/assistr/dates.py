"""
Date helpers for Assistr.

All timestamps inside Assistr are naive local-time datetimes. Values coming
from AI output or persisted text may carry a timezone; they are converted to
local time and stripped here so every comparison stays well-defined.
"""

import re
from datetime import date, datetime, timedelta
from typing import Optional


def to_local_naive(value: datetime) -> Optional[datetime]:
    """
    Convert an aware datetime to naive local time. Naive values pass through.

    Returns None when the shifted value falls outside the datetime range.
    """
    if value.tzinfo is None:
        return value
    try:
        return value.astimezone().replace(tzinfo=None)
    except (OverflowError, ValueError):
        return None


def parse_timestamp(value) -> Optional[datetime]:
    """
    Parse a serialized timestamp.

    Accepts datetimes, dates and ISO-8601 strings (including a trailing "Z").
    Returns None for anything that cannot be parsed.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_local_naive(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    return to_local_naive(parsed)


def parse_due_date(value) -> Optional[datetime]:
    """
    Parse a due date supplied by a user or the model.

    Invalid values yield None so the caller can omit the field instead of
    storing something unusable.
    """
    return parse_timestamp(value)


def start_of_day(now: Optional[datetime] = None) -> datetime:
    """Local midnight of the day containing `now`."""
    now = now or datetime.now()
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def parse_natural_date(text: str, now: Optional[datetime] = None) -> Optional[datetime]:
    """
    Parse a loose natural-language date.

    Understands "today", "tomorrow", "next week" and numeric MM/DD/YYYY
    (or MM-DD-YY) dates.
    """
    now = now or datetime.now()
    lower = (text or "").lower()

    if "today" in lower:
        return now
    if "tomorrow" in lower:
        return now + timedelta(days=1)
    if "next week" in lower:
        return now + timedelta(days=7)

    m = re.search(r"(\d{1,2})[/\-](\d{1,2})[/\-](\d{2,4})", lower)
    if m:
        month, day, year = int(m.group(1)), int(m.group(2)), m.group(3)
        full_year = 2000 + int(year) if len(year) == 2 else int(year)
        try:
            return datetime(full_year, month, day)
        except ValueError:
            return None

    return None


def format_due_date(due: Optional[datetime], now: Optional[datetime] = None) -> str:
    """Human-friendly description of a due date relative to now."""
    if due is None:
        return "No due date"

    now = now or datetime.now()
    delta = due - now
    # Round partial days up, the way a calendar reader counts them
    diff_days = delta.days + (1 if delta.seconds or delta.microseconds else 0)

    if diff_days < 0:
        return f"Overdue by {abs(diff_days)} day(s)"
    if diff_days == 0:
        return "Due today"
    if diff_days == 1:
        return "Due tomorrow"
    if diff_days <= 7:
        return f"Due in {diff_days} day(s)"
    return due.strftime("%Y-%m-%d")
