from dataclasses import dataclass

from .errors import AlreadyBookedError, SlotFullyBookedError


@dataclass(frozen=True)
class OccupancySnapshot:
    capacity: int
    counts: dict[str, int]
    student_ticks_taken: dict[str, bool]


def validate_booking(snapshot: OccupancySnapshot) -> None:
    """
    Pure validation: every affected tick must have a free seat and the student
    must not already hold any affected tick, at any canteen.
    Capacity is checked first. Raises domain errors otherwise.
    """
    for slot_key, count in snapshot.counts.items():
        if count >= snapshot.capacity:
            raise SlotFullyBookedError(slot_key)
    if any(snapshot.student_ticks_taken.values()):
        raise AlreadyBookedError("Student already has a reservation for this time slot")


def remaining_capacity(capacity: int, *counts: int) -> int:
    """Seats left for a slot covering the given ticks; the busiest tick decides. Never negative."""
    occupied = max(counts) if counts else 0
    return max(capacity - occupied, 0)
