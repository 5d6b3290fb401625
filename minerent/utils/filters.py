"""Display helpers for timestamps, durations and coin amounts."""
from datetime import datetime, timedelta, timezone

import pytz


def fmt_local(value, tz_name: str = "UTC", use_12h: bool = False) -> str:
    """
    Render a datetime (or ISO string) in the display timezone.
    Naive values are taken as UTC. On parse error, returns the original value.
    """
    if value is None:
        return ""

    dt = value
    if not isinstance(dt, datetime):
        s = str(value).strip()
        if not s:
            return ""
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(s.replace("T", " "))
        except ValueError:
            return str(value)

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)

    try:
        tz = pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        tz = pytz.utc
    local = dt.astimezone(tz)

    if use_12h:
        # Avoid %-I (not portable on Windows). Strip any leading zero manually.
        hh = local.strftime("%I").lstrip("0") or "0"
        return f"{local.strftime('%d %b %Y')}, {hh}:{local.strftime('%M %p')}"
    return local.strftime("%d/%m/%Y %H:%M")


def fmt_time_remaining(remaining: timedelta) -> str:
    """'2d 5h' when more than a day is left, otherwise '5h 12m'."""
    secs = max(0, int(remaining.total_seconds()))
    hours = secs // 3600
    minutes = (secs % 3600) // 60
    if hours > 24:
        return f"{hours // 24}d {hours % 24}h"
    return f"{hours}h {minutes}m"


def fmt_amount(value) -> str:
    return f"{float(value or 0):,.2f}"
