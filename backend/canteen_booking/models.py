from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import StrEnum


class Meal(StrEnum):
    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"


class ReservationStatus(StrEnum):
    ACTIVE = "Active"
    CANCELLED = "Cancelled"


ALLOWED_DURATIONS = (30, 60)
TICK_MINUTES = 30


@dataclass(frozen=True)
class WorkingPeriod:
    meal: Meal
    start: str
    end: str


@dataclass(frozen=True)
class Student:
    id: int
    name: str
    email: str
    is_admin: bool = False


@dataclass(frozen=True)
class Canteen:
    id: int
    name: str
    location: str
    capacity: int
    working_hours: tuple[WorkingPeriod, ...]
    created_by: int | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class Slot:
    date: str
    start_time: str
    meal: Meal
    duration: int


@dataclass(frozen=True)
class SlotStatus:
    date: str
    meal: Meal
    start_time: str
    remaining_capacity: int


@dataclass(frozen=True)
class CanteenStatus:
    canteen_id: int
    name: str
    slots: list[SlotStatus] = field(default_factory=list)


@dataclass(frozen=True)
class Reservation:
    id: int
    student_id: int
    canteen_id: int
    date: str
    time: str
    duration: int
    status: ReservationStatus
    created_at: datetime

    @property
    def is_active(self) -> bool:
        return self.status == ReservationStatus.ACTIVE

    def cancelled(self) -> Reservation:
        return replace(self, status=ReservationStatus.CANCELLED)
