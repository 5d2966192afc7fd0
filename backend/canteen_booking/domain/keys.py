"""Redis key layout. Every tick key uses 30-minute granularity."""

from ..models import TICK_MINUTES
from ..utils.time import add_minutes

CANTEEN_COUNTER_KEY = "canteen:id:counter"
STUDENT_COUNTER_KEY = "student:id:counter"
STUDENT_EMAIL_INDEX = "student:email:index"
RESERVATION_COUNTER_KEY = "reservation:id:counter"


def canteen_key(canteen_id: int) -> str:
    return f"canteen:{canteen_id}"


def student_key(student_id: int) -> str:
    return f"student:{student_id}"


def reservation_key(reservation_id: int) -> str:
    return f"reservation:{reservation_id}"


def student_reservations_key(student_id: int) -> str:
    return f"studentReservations:{student_id}"


def ticks(time: str, duration: int) -> list[str]:
    """30-minute ticks covered by a booking: one for 30 minutes, two for 60."""
    covered = [time]
    if duration == 60:
        covered.append(add_minutes(time, TICK_MINUTES))
    return covered


def slot_keys(canteen_id: int, date: str, time: str, duration: int) -> list[str]:
    return [f"slot:{canteen_id}:{date}:{tick}" for tick in ticks(time, duration)]


def student_slot_keys(date: str, time: str, duration: int) -> list[str]:
    return [f"studentSlot:{date}:{tick}" for tick in ticks(time, duration)]
