"""Date normalization and formatting helpers."""
from datetime import datetime, date, timezone
import pytz

from .constants import DEFAULT_TIMEZONE


def to_local_date(value, tz_name: str | None = None) -> date:
    """
    Strip time-of-day from a date-like value and return the calendar day.
    Supports:
      - date / datetime objects
      - 'YYYY-MM-DD'
      - 'YYYY-MM-DDTHH:MM:SS' or 'YYYY-MM-DD HH:MM:SS'
      - Above with 'Z' or timezone offsets like '+00:00'
    Aware datetimes are converted to `tz_name` (default UTC) before the day is taken;
    naive values are taken as already local. Raises ValueError on anything else.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        return value
    elif isinstance(value, str):
        s = value.strip()
        if not s:
            raise ValueError("Empty date string")
        # Normalize: handle 'T' and trailing 'Z'
        s_norm = s.replace("T", " ")
        if s_norm.endswith("Z"):
            s_norm = s_norm[:-1] + "+00:00"
        if len(s_norm) == 10:
            return date.fromisoformat(s_norm)
        dt = datetime.fromisoformat(s_norm)
    else:
        raise ValueError(f"Unsupported date: {value!r}")

    if dt.tzinfo is None:
        return dt.date()
    tz = pytz.timezone(tz_name or DEFAULT_TIMEZONE)
    return dt.astimezone(tz).date()


def today_in(tz_name: str | None = None) -> date:
    """Current calendar day in the given timezone."""
    tz = pytz.timezone(tz_name or DEFAULT_TIMEZONE)
    return datetime.now(timezone.utc).astimezone(tz).date()


def fmt_day(value) -> str:
    """Short display form such as 'Jun 5'. On parse error, returns the original value."""
    if value is None:
        return ""
    try:
        d = to_local_date(value.to_date() if hasattr(value, "to_date") else value)
    except ValueError:
        return str(value)
    return f"{d.strftime('%b')} {d.day}"


def fmt_month(year: int, month: int) -> str:
    """Month heading such as 'June 2025'."""
    return date(year, month, 1).strftime("%B %Y")
