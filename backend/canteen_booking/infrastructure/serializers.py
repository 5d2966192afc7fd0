"""
Encode/decode entities to and from the flat string hashes Redis stores.

Nothing outside this module should know that stored values are text.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Mapping

from ..models import Canteen, Meal, Reservation, ReservationStatus, Student, WorkingPeriod


def encode_working_hours(periods: tuple[WorkingPeriod, ...]) -> str:
    return json.dumps([{"meal": p.meal.value, "from": p.start, "to": p.end} for p in periods])


def decode_working_hours(raw: str) -> tuple[WorkingPeriod, ...]:
    return tuple(
        WorkingPeriod(meal=Meal(item["meal"].lower()), start=item["from"], end=item["to"])
        for item in json.loads(raw)
    )


def encode_canteen(canteen: Canteen) -> dict[str, str]:
    data = {
        "id": str(canteen.id),
        "name": canteen.name,
        "location": canteen.location,
        "capacity": str(canteen.capacity),
        "workingHours": encode_working_hours(canteen.working_hours),
    }
    if canteen.created_by is not None:
        data["createdBy"] = str(canteen.created_by)
    if canteen.created_at is not None:
        data["createdAt"] = canteen.created_at.isoformat()
    return data


def decode_canteen(raw: Mapping[str, str]) -> Canteen:
    created_by = raw.get("createdBy")
    created_at = raw.get("createdAt")
    return Canteen(
        id=int(raw["id"]),
        name=raw["name"],
        location=raw.get("location", ""),
        capacity=int(raw["capacity"]),
        working_hours=decode_working_hours(raw["workingHours"]),
        created_by=int(created_by) if created_by else None,
        created_at=datetime.fromisoformat(created_at) if created_at else None,
    )


def encode_student(student: Student) -> dict[str, str]:
    return {
        "id": str(student.id),
        "name": student.name,
        "email": student.email,
        "isAdmin": "true" if student.is_admin else "false",
    }


def decode_student(raw: Mapping[str, str]) -> Student:
    return Student(
        id=int(raw["id"]),
        name=raw["name"],
        email=raw["email"],
        is_admin=raw.get("isAdmin") == "true",
    )


def encode_reservation(reservation: Reservation) -> dict[str, str]:
    return {
        "id": str(reservation.id),
        "studentId": str(reservation.student_id),
        "canteenId": str(reservation.canteen_id),
        "date": reservation.date,
        "time": reservation.time,
        "duration": str(reservation.duration),
        "status": reservation.status.value,
        "createdAt": reservation.created_at.isoformat(),
    }


def decode_reservation(raw: Mapping[str, str]) -> Reservation:
    return Reservation(
        id=int(raw["id"]),
        student_id=int(raw["studentId"]),
        canteen_id=int(raw["canteenId"]),
        date=raw["date"],
        time=raw["time"],
        duration=int(raw["duration"]),
        status=ReservationStatus(raw["status"]),
        created_at=datetime.fromisoformat(raw["createdAt"]),
    )
