from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel

from .models import Canteen, CanteenStatus, Meal, Reservation, ReservationStatus, SlotStatus, Student, WorkingPeriod


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class WorkingPeriodSchema(CamelModel):
    meal: Optional[str] = None
    start: Optional[str] = Field(default=None, alias="from")
    end: Optional[str] = Field(default=None, alias="to")

    @classmethod
    def from_domain(cls, period: WorkingPeriod) -> "WorkingPeriodSchema":
        return cls(meal=period.meal.value, start=period.start, end=period.end)


class StudentCreate(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    is_admin: bool = False


class StudentRead(CamelModel):
    id: int
    name: str
    email: str
    is_admin: bool

    @classmethod
    def from_domain(cls, student: Student) -> "StudentRead":
        return cls(id=student.id, name=student.name, email=student.email, is_admin=student.is_admin)


class CanteenCreate(CamelModel):
    name: Optional[str] = None
    location: Optional[str] = None
    capacity: Optional[int] = None
    working_hours: Optional[list[WorkingPeriodSchema]] = None

    def raw_working_hours(self) -> Optional[list[dict[str, Any]]]:
        if self.working_hours is None:
            return None
        return [period.model_dump(by_alias=True) for period in self.working_hours]


class CanteenUpdate(CanteenCreate):
    pass


class CanteenRead(CamelModel):
    id: int
    name: str
    location: str
    capacity: int
    working_hours: list[WorkingPeriodSchema]

    @classmethod
    def from_domain(cls, canteen: Canteen) -> "CanteenRead":
        return cls(
            id=canteen.id,
            name=canteen.name,
            location=canteen.location,
            capacity=canteen.capacity,
            working_hours=[WorkingPeriodSchema.from_domain(p) for p in canteen.working_hours],
        )


class SlotStatusRead(CamelModel):
    date: str
    meal: Meal
    start_time: str
    remaining_capacity: int

    @classmethod
    def from_domain(cls, status: SlotStatus) -> "SlotStatusRead":
        return cls(
            date=status.date,
            meal=status.meal,
            start_time=status.start_time,
            remaining_capacity=status.remaining_capacity,
        )


class CanteenStatusRead(CamelModel):
    canteen_id: int
    slots: list[SlotStatusRead]


class CanteenStatusSummary(CamelModel):
    canteen_id: int
    name: str
    slots: list[SlotStatusRead]

    @classmethod
    def from_domain(cls, status: CanteenStatus) -> "CanteenStatusSummary":
        return cls(
            canteen_id=status.canteen_id,
            name=status.name,
            slots=[SlotStatusRead.from_domain(s) for s in status.slots],
        )


class ReservationCreate(CamelModel):
    student_id: Optional[int] = None
    canteen_id: Optional[int] = None
    date: Optional[str] = None
    time: Optional[str] = None
    duration: Optional[int] = None


class ReservationRead(CamelModel):
    id: int
    student_id: int
    canteen_id: int
    date: str
    time: str
    duration: int
    status: ReservationStatus
    created_at: datetime

    @field_serializer("created_at")
    def _ser_datetime(self, dt: datetime) -> str:
        return dt.isoformat()

    @classmethod
    def from_domain(cls, reservation: Reservation) -> "ReservationRead":
        return cls(
            id=reservation.id,
            student_id=reservation.student_id,
            canteen_id=reservation.canteen_id,
            date=reservation.date,
            time=reservation.time,
            duration=reservation.duration,
            status=reservation.status,
            created_at=reservation.created_at,
        )
