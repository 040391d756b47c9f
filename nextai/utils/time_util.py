# nextai/utils/time_util.py
from datetime import datetime, timedelta, timezone


def utcnow() -> datetime:
    # Naive UTC, matching the DateTime columns
    return datetime.now(timezone.utc).replace(tzinfo=None)


def minutes_from_now(minutes: int) -> datetime:
    return utcnow() + timedelta(minutes=minutes)


def start_of_day(d: datetime) -> datetime:
    return d.replace(hour=0, minute=0, second=0, microsecond=0)


def isoformat_or_none(d: datetime | None) -> str | None:
    return d.isoformat() if d else None
