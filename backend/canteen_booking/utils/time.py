from datetime import date, datetime, timedelta, timezone
from typing import Iterator
from zoneinfo import ZoneInfo

MINUTES_PER_DAY = 24 * 60


def to_minutes(hhmm: str) -> int:
    hours, minutes = hhmm.split(":")
    return int(hours) * 60 + int(minutes)


def format_minutes(total: int) -> str:
    return f"{total // 60:02d}:{total % 60:02d}"


def add_minutes(hhmm: str, minutes: int) -> str:
    return format_minutes(to_minutes(hhmm) + minutes)


def align_up(total: int, stride: int) -> int:
    """Round `total` minutes up to the next multiple of `stride`."""
    return -(-total // stride) * stride


def iter_dates(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def local_now(tz_name: str) -> datetime:
    """Current wall-clock time in `tz_name`, as a naive datetime."""
    return datetime.now(ZoneInfo(tz_name)).replace(tzinfo=None)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
