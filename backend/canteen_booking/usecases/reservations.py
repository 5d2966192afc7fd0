import logging
from datetime import datetime
from typing import Any

from ..config import get_settings
from ..domain import keys
from ..domain.calendar import is_bookable
from ..domain.errors import InvalidTimeError, NotFoundError, ValidationError
from ..domain.repositories import CanteenRepository, SlotStore, SlotTransaction, StudentRepository
from ..domain.services import OccupancySnapshot, validate_booking
from ..domain.validation import parse_date, parse_duration, parse_positive_int, parse_time
from ..infrastructure.serializers import decode_reservation, encode_reservation
from ..models import Reservation, ReservationStatus
from ..utils.time import local_now, utc_now

logger = logging.getLogger(__name__)


async def create_reservation(
    canteen_repo: CanteenRepository,
    student_repo: StudentRepository,
    store: SlotStore,
    *,
    student_id: Any,
    canteen_id: Any,
    date: Any,
    time: Any,
    duration: Any,
    now: datetime | None = None,
) -> Reservation:
    student_id = parse_positive_int(student_id, "studentId")
    canteen_id = parse_positive_int(canteen_id, "canteenId")
    date = parse_date(date)
    time = parse_time(time)
    duration = parse_duration(duration)
    if duration == 60 and not time.endswith(":00"):
        raise InvalidTimeError(
            "60-minute reservations must start on the hour (e.g., 08:00, 09:00)",
            field="time",
        )

    canteen = await canteen_repo.get(canteen_id)
    if canteen is None:
        raise NotFoundError("Canteen not found")
    if not await student_repo.exists(student_id):
        raise NotFoundError("Student not found")

    current = now or local_now(get_settings().timezone)
    if datetime.fromisoformat(f"{date}T{time}") < current:
        raise ValidationError("Reservation date and time cannot be in the past", field="date")

    if not is_bookable(canteen.working_hours, time, duration):
        raise InvalidTimeError("Invalid reservation time or duration", field="time")

    counter_keys = keys.slot_keys(canteen_id, date, time, duration)
    member_keys = keys.student_slot_keys(date, time, duration)
    member = str(student_id)

    async def book(tx: SlotTransaction) -> Reservation:
        snapshot = OccupancySnapshot(
            capacity=canteen.capacity,
            counts={key: int(await tx.get(key) or 0) for key in counter_keys},
            student_ticks_taken={key: await tx.is_member(key, member) for key in member_keys},
        )
        validate_booking(snapshot)

        reservation_id = await tx.incr(keys.RESERVATION_COUNTER_KEY)
        reservation = Reservation(
            id=reservation_id,
            student_id=student_id,
            canteen_id=canteen_id,
            date=date,
            time=time,
            duration=duration,
            status=ReservationStatus.ACTIVE,
            created_at=utc_now(),
        )
        tx.hset(keys.reservation_key(reservation_id), encode_reservation(reservation))
        tx.set_add(keys.student_reservations_key(student_id), str(reservation_id))
        for key in counter_keys:
            tx.increment(key)
        for key in member_keys:
            tx.set_add(key, member)
        return reservation

    return await store.transact([*counter_keys, *member_keys], book)


async def list_student_reservations(
    store: SlotStore,
    *,
    student_id: Any,
    start_date: Any,
    end_date: Any,
) -> list[Reservation]:
    """All reservations of a student, any status, with start_date <= date <= end_date, by (date, time)."""
    student_id = parse_positive_int(student_id, "studentId")
    if start_date in (None, "") or end_date in (None, ""):
        raise ValidationError("startDate and endDate are required")
    start_date = parse_date(start_date, "startDate")
    end_date = parse_date(end_date, "endDate")

    reservation_ids = await store.smembers(keys.student_reservations_key(student_id))
    reservations: list[Reservation] = []
    for reservation_id in sorted(reservation_ids, key=int):
        raw = await store.hgetall(keys.reservation_key(int(reservation_id)))
        if not raw:
            continue
        reservation = decode_reservation(raw)
        if start_date <= reservation.date <= end_date:
            reservations.append(reservation)
    reservations.sort(key=lambda r: (r.date, r.time))
    return reservations


async def get_reservation(store: SlotStore, *, reservation_id: Any, student_id: Any) -> Reservation | None:
    """The reservation if it exists and belongs to `student_id`, any status."""
    reservation_id = parse_positive_int(reservation_id, "reservationId")
    student_id = parse_positive_int(student_id, "studentId")
    raw = await store.hgetall(keys.reservation_key(reservation_id))
    if not raw:
        return None
    reservation = decode_reservation(raw)
    return reservation if reservation.student_id == student_id else None


async def cancel_reservation(
    store: SlotStore,
    *,
    reservation_id: Any,
    student_id: Any,
) -> Reservation | None:
    """
    Soft-cancel a reservation and release its seats and ticks.

    Returns None when the reservation does not exist, belongs to another
    student or is already cancelled.
    """
    reservation_id = parse_positive_int(reservation_id, "reservationId")
    student_id = parse_positive_int(student_id, "studentId")
    reservation_key = keys.reservation_key(reservation_id)

    async def cancel(tx: SlotTransaction) -> Reservation | None:
        raw = await tx.hgetall(reservation_key)
        if not raw:
            return None
        reservation = decode_reservation(raw)
        if reservation.student_id != student_id or not reservation.is_active:
            return None

        counter_keys = keys.slot_keys(reservation.canteen_id, reservation.date, reservation.time, reservation.duration)
        member_keys = keys.student_slot_keys(reservation.date, reservation.time, reservation.duration)
        for key in counter_keys:
            count = int(await tx.get(key) or 0)
            if count <= 0:
                logger.warning(
                    "occupancy counter %s is %d before cancelling reservation %d",
                    key,
                    count,
                    reservation_id,
                )

        cancelled = reservation.cancelled()
        tx.hset(reservation_key, {"status": cancelled.status.value})
        for key in counter_keys:
            tx.decrement(key)
        for key in member_keys:
            tx.set_remove(key, str(student_id))
        return cancelled

    return await store.transact([reservation_key], cancel)
