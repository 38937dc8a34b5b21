"""Calendar helpers.

Expiry dates are plain calendar dates. "Today" is evaluated in the configured
timezone so that the day boundary matches the users' wall clock.
"""

import re
from datetime import date, datetime
from zoneinfo import ZoneInfo

from stockpile.core.config import settings


# Strict YYYY-MM-DD grammar (ASCII digits only)
DATE_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


def now() -> datetime:
    """Return the current timezone-aware time in the configured timezone."""
    return datetime.now(ZoneInfo(settings.timezone))


def today() -> date:
    """Return the current calendar date in the configured timezone."""
    return now().date()


def parse_iso_date(text: str) -> date | None:
    """Parse a canonical YYYY-MM-DD string.

    Returns None unless the text matches the grammar, names a real calendar
    date, and serializes back to exactly the same string.
    """
    if not DATE_PATTERN.fullmatch(text):
        return None

    year, month, day = (int(part) for part in text.split("-"))
    try:
        parsed = date(year, month, day)
    except ValueError:
        return None

    if parsed.isoformat() != text:
        return None
    return parsed


def days_until_expiry(expiry_date: date, *, reference: date | None = None) -> int:
    """Signed whole-day count from reference (default: today) to expiry_date."""
    return (expiry_date - (reference or today())).days


def format_days_remaining(days_remaining: int) -> str:
    """Format remaining days for display (e.g. "あと30日", "本日", "期限切れ")."""
    if days_remaining < 0:
        return "期限切れ"
    if days_remaining == 0:
        return "本日"
    return f"あと{days_remaining}日"


def format_date_japanese(value: date) -> str:
    """Format a date as e.g. "2026年1月5日"."""
    return f"{value.year}年{value.month}月{value.day}日"
