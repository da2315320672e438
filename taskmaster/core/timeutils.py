"""
Time normalization helpers.

Everything is stored in UTC (absolute timestamps) or as plain calendar
values (``YYYY-MM-DD`` dates, 24-hour ``HH:MM`` times). Localization only
happens at the display boundary via ``format_for_display``.

None of the parse/format helpers raise: unparseable input yields ``None``
(parsers) or the raw input (formatter).
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from dateutil import parser as date_parser

DISPLAY_TIMEZONE = "Asia/Kolkata"

_HHMM_RE = re.compile(r"^(\d{1,2}):(\d{2})$")
_TIME_ANCHOR = datetime(2000, 1, 1)
# Second default with a different clock time: if parsing against both gives
# different hours, the input never named a time.
_TIME_CHECK_ANCHOR = datetime(2000, 1, 1, 13, 37)


# ---------------------------------------------------------------------------
# Current instant
# ---------------------------------------------------------------------------


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def current_timestamp() -> str:
    """Current instant as ISO-8601 UTC, e.g. ``2025-07-29T15:55:42.576Z``."""
    return utcnow().isoformat(timespec="milliseconds").replace("+00:00", "Z")


def current_date() -> str:
    """Current UTC calendar date as ``YYYY-MM-DD``."""
    return current_timestamp().split("T")[0]


def ensure_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes (SQLite drops offsets) and convert aware ones."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse_to_date(value: str | date | datetime | None) -> str | None:
    """Normalize a date-ish value to ``YYYY-MM-DD``, or None if unparseable."""
    if value is None or value == "":
        return None
    try:
        if isinstance(value, datetime):
            parsed = value
        elif isinstance(value, date):
            return value.isoformat()
        else:
            parsed = date_parser.parse(str(value).strip())
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc)
        return parsed.date().isoformat()
    except (ValueError, OverflowError, TypeError):
        return None


def parse_to_time(value: str | None) -> str | None:
    """
    Normalize a time-of-day to 24-hour ``HH:MM``.

    Handles "18:00", "6pm", "6 PM", "6:30 PM". Anything else goes through
    dateutil anchored at an arbitrary day.
    """
    if not value:
        return None
    text = str(value).strip().lower()

    match = _HHMM_RE.match(text)
    if match:
        hours, minutes = int(match.group(1)), int(match.group(2))
        if 0 <= hours <= 23 and 0 <= minutes <= 59:
            return f"{hours:02d}:{minutes:02d}"

    try:
        parsed = date_parser.parse(text, default=_TIME_ANCHOR)
        check = date_parser.parse(text, default=_TIME_CHECK_ANCHOR)
    except (ValueError, OverflowError, TypeError):
        return None
    if parsed.hour != check.hour:
        return None
    return f"{parsed.hour:02d}:{parsed.minute:02d}"


def _time_on_anchor(value: str) -> datetime:
    if len(value.split(":")) == 2:
        value = f"{value}:00"
    parsed = datetime.strptime(value, "%H:%M:%S").time()
    return datetime.combine(_TIME_ANCHOR.date(), parsed)


def validate_time_range(start: str | None, end: str | None) -> bool:
    """True if either bound is missing, else True iff end is strictly after start."""
    if not start or not end:
        return True
    try:
        return _time_on_anchor(end) > _time_on_anchor(start)
    except (ValueError, TypeError):
        return False


# ---------------------------------------------------------------------------
# Durations
# ---------------------------------------------------------------------------


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes elapsed (truncated), never negative."""
    seconds = (ensure_utc(end) - ensure_utc(start)).total_seconds()
    return max(int(seconds // 60), 0)


def format_duration(delta: timedelta | int) -> str:
    """Render elapsed time as ``"1h 30m"`` (>= 60 min) or ``"45m"``."""
    if isinstance(delta, timedelta):
        minutes = max(int(delta.total_seconds() // 60), 0)
    else:
        minutes = delta
    hours, remaining = divmod(minutes, 60)
    if hours > 0:
        return f"{hours}h {remaining}m"
    return f"{minutes}m"


# ---------------------------------------------------------------------------
# Display
# ---------------------------------------------------------------------------


def set_display_timezone(name: str) -> None:
    """Set the default zone used by ``format_for_display`` (called once at startup)."""
    global DISPLAY_TIMEZONE
    ZoneInfo(name)
    DISPLAY_TIMEZONE = name


def _coerce_timestamp(timestamp: str | datetime) -> datetime:
    if isinstance(timestamp, datetime):
        return ensure_utc(timestamp)
    raw = timestamp.strip()
    if "T" not in raw:
        # Store format without offset: "2025-07-29 15:55:42"
        return datetime.fromisoformat(raw).replace(tzinfo=timezone.utc)
    return ensure_utc(datetime.fromisoformat(raw))


def format_for_display(
    timestamp: str | datetime | None,
    *,
    include_date: bool = True,
    include_time: bool = True,
    include_seconds: bool = False,
    tz: str | None = None,
    hour12: bool = True,
) -> str:
    """Render a stored UTC timestamp in the display zone, e.g. ``29 Jul 2025, 09:25 PM``."""
    if not timestamp:
        return ""
    try:
        local = _coerce_timestamp(timestamp).astimezone(ZoneInfo(tz or DISPLAY_TIMEZONE))
    except (ValueError, TypeError, KeyError, OverflowError):
        return str(timestamp)

    parts = []
    if include_date:
        parts.append(f"{local.day} {local.strftime('%b %Y')}")
    if include_time:
        if hour12:
            fmt = "%I:%M:%S %p" if include_seconds else "%I:%M %p"
        else:
            fmt = "%H:%M:%S" if include_seconds else "%H:%M"
        parts.append(local.strftime(fmt))
    return ", ".join(parts)
