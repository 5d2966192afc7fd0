from dataclasses import dataclass
from typing import Any

from ..domain import keys
from ..domain.calendar import SlotCalendar
from ..domain.repositories import CanteenRepository, SlotStore
from ..domain.services import remaining_capacity
from ..domain.validation import parse_date, parse_duration, parse_positive_int, parse_time
from ..models import Canteen, CanteenStatus, SlotStatus


@dataclass(frozen=True)
class StatusWindow:
    start_date: str
    start_time: str
    end_date: str
    end_time: str
    duration: int


def parse_window(*, start_date: Any, start_time: Any, end_date: Any, end_time: Any, duration: Any) -> StatusWindow:
    return StatusWindow(
        start_date=parse_date(start_date, "startDate"),
        start_time=parse_time(start_time, "startTime"),
        end_date=parse_date(end_date, "endDate"),
        end_time=parse_time(end_time, "endTime"),
        duration=parse_duration(duration),
    )


async def _slot_statuses(store: SlotStore, canteen: Canteen, window: StatusWindow) -> list[SlotStatus]:
    calendar = SlotCalendar(
        periods=canteen.working_hours,
        start_date=window.start_date,
        start_time=window.start_time,
        end_date=window.end_date,
        end_time=window.end_time,
        duration=window.duration,
    )
    slots = list(calendar)
    slot_ticks = [keys.slot_keys(canteen.id, slot.date, slot.start_time, slot.duration) for slot in slots]
    flat_keys = [key for ticks in slot_ticks for key in ticks]
    values = await store.get_many(flat_keys)
    counts = {key: int(value or 0) for key, value in zip(flat_keys, values)}

    return [
        SlotStatus(
            date=slot.date,
            meal=slot.meal,
            start_time=slot.start_time,
            remaining_capacity=remaining_capacity(canteen.capacity, *(counts[key] for key in ticks)),
        )
        for slot, ticks in zip(slots, slot_ticks)
    ]


async def get_canteen_status(
    canteen_repo: CanteenRepository,
    store: SlotStore,
    *,
    canteen_id: Any,
    start_date: Any,
    start_time: Any,
    end_date: Any,
    end_time: Any,
    duration: Any,
) -> list[SlotStatus] | None:
    """Remaining capacity per slot in the window, or None if the canteen does not exist."""
    window = parse_window(
        start_date=start_date,
        start_time=start_time,
        end_date=end_date,
        end_time=end_time,
        duration=duration,
    )
    canteen = await canteen_repo.get(parse_positive_int(canteen_id, "canteenId"))
    if canteen is None:
        return None
    return await _slot_statuses(store, canteen, window)


async def get_all_canteens_status(
    canteen_repo: CanteenRepository,
    store: SlotStore,
    *,
    start_date: Any,
    start_time: Any,
    end_date: Any,
    end_time: Any,
    duration: Any,
) -> list[CanteenStatus]:
    window = parse_window(
        start_date=start_date,
        start_time=start_time,
        end_date=end_date,
        end_time=end_time,
        duration=duration,
    )
    results: list[CanteenStatus] = []
    for canteen in await canteen_repo.list_all():
        slots = await _slot_statuses(store, canteen, window)
        results.append(CanteenStatus(canteen_id=canteen.id, name=canteen.name, slots=slots))
    return results
