"""
Slot calendar derivation.

Maps a canteen's working-hour periods onto the bookable slots of a date/time
range. Pure: no I/O, no clock.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterator, Sequence

from ..models import TICK_MINUTES, Meal, Slot, WorkingPeriod
from ..utils.time import MINUTES_PER_DAY, align_up, format_minutes, iter_dates, to_minutes

DAY_START = "00:00"
DAY_END = "23:59"


def meal_for_time(periods: Sequence[WorkingPeriod], minutes: int) -> Meal | None:
    """Return the meal whose [start, end) contains `minutes`, first match in period order."""
    for period in periods:
        if to_minutes(period.start) <= minutes < to_minutes(period.end):
            return period.meal
    return None


def slot_meal(periods: Sequence[WorkingPeriod], minutes: int, duration: int) -> Meal | None:
    """
    Meal a slot starting at `minutes` belongs to, or None if it is not bookable.

    A 60-minute slot must start on the hour and both of its halves must
    resolve to the same meal.
    """
    meal = meal_for_time(periods, minutes)
    if meal is None:
        return None
    if duration == 60:
        if minutes % 60 != 0:
            return None
        if meal_for_time(periods, minutes + TICK_MINUTES) != meal:
            return None
    return meal


def is_bookable(periods: Sequence[WorkingPeriod], time: str, duration: int) -> bool:
    return slot_meal(periods, to_minutes(time), duration) is not None


def slots_for_day(
    periods: Sequence[WorkingPeriod],
    day: str,
    start_time: str,
    end_time: str,
    duration: int,
) -> Iterator[Slot]:
    stride = 60 if duration == 60 else TICK_MINUTES
    current = align_up(to_minutes(start_time), stride)
    end = to_minutes(end_time)
    while current + duration <= end and current < MINUTES_PER_DAY:
        meal = slot_meal(periods, current, duration)
        if meal is not None:
            yield Slot(date=day, start_time=format_minutes(current), meal=meal, duration=duration)
        current += stride


@dataclass(frozen=True)
class SlotCalendar:
    """
    Ordered, restartable sequence of bookable slots in a range.

    The date range is inclusive. Interior days span 00:00-23:59; the first and
    last day are clipped to `start_time` and `end_time`.
    """

    periods: tuple[WorkingPeriod, ...]
    start_date: str
    start_time: str
    end_date: str
    end_time: str
    duration: int

    def __iter__(self) -> Iterator[Slot]:
        first = date.fromisoformat(self.start_date)
        last = date.fromisoformat(self.end_date)
        for current in iter_dates(first, last):
            day = current.isoformat()
            day_start = self.start_time if day == self.start_date else DAY_START
            day_end = self.end_time if day == self.end_date else DAY_END
            yield from slots_for_day(self.periods, day, day_start, day_end, self.duration)
