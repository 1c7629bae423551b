"""Virtual calendar: wall-clock instants to logical day keys."""

from __future__ import annotations

from datetime import date, datetime, timedelta


def _local_now(now: datetime | None = None) -> datetime:
    if now is None:
        return datetime.now().astimezone()
    return now


def day_key(now: datetime | None = None, reset_hour: int = 0) -> str:
    """Return the YYYY-MM-DD key of the logical day containing ``now``.

    Instants before ``reset_hour`` belong to the previous calendar date.
    """
    now_dt = _local_now(now)
    day = now_dt.date()
    if now_dt.hour < reset_hour:
        day -= timedelta(days=1)
    return day.isoformat()


def previous_day_key(key: str) -> str:
    return (date.fromisoformat(key) - timedelta(days=1)).isoformat()


def next_reset(now: datetime | None = None, reset_hour: int = 0) -> datetime:
    """Next strictly-future instant at ``reset_hour:00:00``."""
    now_dt = _local_now(now)
    today_reset = now_dt.replace(hour=reset_hour, minute=0, second=0, microsecond=0)
    if now_dt >= today_reset:
        return today_reset + timedelta(days=1)
    return today_reset


def time_until_reset(now: datetime | None = None, reset_hour: int = 0) -> timedelta:
    now_dt = _local_now(now)
    return max(timedelta(0), next_reset(now_dt, reset_hour) - now_dt)


def format_countdown(delta: timedelta) -> str:
    """Human-facing countdown label, e.g. ``"5h 03m"``."""
    total_minutes = max(0, int(delta.total_seconds()) // 60)
    hours, minutes = divmod(total_minutes, 60)
    return f"{hours}h {minutes:02d}m"
