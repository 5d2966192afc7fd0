from dataclasses import replace
from typing import Any, Mapping, Sequence

from ..domain.errors import PermissionDeniedError, ValidationError
from ..domain.repositories import CanteenRepository, StudentRepository
from ..domain.validation import TIME_RE, parse_positive_int
from ..models import Canteen, Meal, WorkingPeriod
from ..utils.time import to_minutes

MAX_NAME_LENGTH = 100
MAX_LOCATION_LENGTH = 200
MAX_CAPACITY = 10000
MIN_PERIOD_MINUTES = 30


def _clean_text(value: Any, field: str, label: str, max_length: int) -> str:
    if value is None or not isinstance(value, str):
        raise ValidationError(f"{label} is required", field=field)
    trimmed = value.strip()
    if not trimmed:
        raise ValidationError(f"{label} cannot be empty", field=field)
    if len(trimmed) > max_length:
        raise ValidationError(f"{label} cannot exceed {max_length} characters", field=field)
    return trimmed


def _parse_capacity(value: Any) -> int:
    if value is None:
        raise ValidationError("Capacity is required", field="capacity")
    try:
        capacity = parse_positive_int(value, "capacity")
    except ValidationError as exc:
        raise ValidationError("Capacity must be a positive integer", field="capacity") from exc
    if capacity > MAX_CAPACITY:
        raise ValidationError(f"Capacity cannot exceed {MAX_CAPACITY}", field="capacity")
    return capacity


def _parse_period(item: Any) -> WorkingPeriod:
    if not isinstance(item, Mapping):
        raise ValidationError("Each working hours period must be an object", field="workingHours")
    meal = item.get("meal")
    if not meal or not isinstance(meal, str):
        raise ValidationError("Each working hours period must have a meal name", field="workingHours")
    if meal.lower() not in {m.value for m in Meal}:
        raise ValidationError(
            f"Invalid meal type: {meal}. Must be breakfast, lunch, or dinner",
            field="workingHours",
        )
    bounds: dict[str, str] = {}
    for name in ("from", "to"):
        value = item.get(name)
        if not value or not isinstance(value, str):
            raise ValidationError(f"Each working hours period must have a {name} time", field="workingHours")
        if not TIME_RE.match(value):
            raise ValidationError(f"Invalid {name} time format: {value}. Must be HH:mm", field="workingHours")
        bounds[name] = value
    start, end = bounds["from"], bounds["to"]
    if start >= end:
        raise ValidationError(f"Working hours 'from' ({start}) must be before 'to' ({end})", field="workingHours")
    if to_minutes(end) - to_minutes(start) < MIN_PERIOD_MINUTES:
        raise ValidationError(
            f"Each working hours period must be at least {MIN_PERIOD_MINUTES} minutes",
            field="workingHours",
        )
    return WorkingPeriod(meal=Meal(meal.lower()), start=start, end=end)


def parse_working_hours(value: Any) -> tuple[WorkingPeriod, ...]:
    """Validate raw `{meal, from, to}` periods and return them sorted by start time."""
    if value is None or isinstance(value, (str, Mapping)) or not isinstance(value, Sequence):
        raise ValidationError("Working hours are required and must be an array", field="workingHours")
    if not value:
        raise ValidationError("At least one working hours period is required", field="workingHours")
    periods = sorted((_parse_period(item) for item in value), key=lambda p: p.start)
    for current, following in zip(periods, periods[1:]):
        if current.end > following.start:
            raise ValidationError("Working hours periods cannot overlap", field="workingHours")
    return tuple(periods)


async def _require_admin(student_repo: StudentRepository, student_id: Any) -> int:
    admin_id = parse_positive_int(student_id, "studentId")
    student = await student_repo.get(admin_id)
    if student is None or not student.is_admin:
        raise PermissionDeniedError("Only admin students can manage canteens")
    return admin_id


async def create_canteen(
    canteen_repo: CanteenRepository,
    student_repo: StudentRepository,
    *,
    name: Any,
    location: Any,
    capacity: Any,
    working_hours: Any,
    created_by: Any,
) -> Canteen:
    clean_name = _clean_text(name, "name", "Name", MAX_NAME_LENGTH)
    clean_location = _clean_text(location, "location", "Location", MAX_LOCATION_LENGTH)
    clean_capacity = _parse_capacity(capacity)
    periods = parse_working_hours(working_hours)
    admin_id = await _require_admin(student_repo, created_by)
    return await canteen_repo.create(
        name=clean_name,
        location=clean_location,
        capacity=clean_capacity,
        working_hours=periods,
        created_by=admin_id,
    )


async def get_canteen(canteen_repo: CanteenRepository, *, canteen_id: Any) -> Canteen | None:
    return await canteen_repo.get(parse_positive_int(canteen_id, "canteenId"))


async def list_canteens(canteen_repo: CanteenRepository) -> list[Canteen]:
    return await canteen_repo.list_all()


async def update_canteen(
    canteen_repo: CanteenRepository,
    student_repo: StudentRepository,
    *,
    canteen_id: Any,
    updated_by: Any,
    name: Any = None,
    location: Any = None,
    capacity: Any = None,
    working_hours: Any = None,
) -> Canteen | None:
    """Apply a partial update. Returns None if the canteen does not exist."""
    await _require_admin(student_repo, updated_by)
    existing = await canteen_repo.get(parse_positive_int(canteen_id, "canteenId"))
    if existing is None:
        return None

    changes: dict[str, Any] = {}
    if name is not None:
        changes["name"] = _clean_text(name, "name", "Name", MAX_NAME_LENGTH)
    if location is not None:
        changes["location"] = _clean_text(location, "location", "Location", MAX_LOCATION_LENGTH)
    if capacity is not None:
        changes["capacity"] = _parse_capacity(capacity)
    if working_hours is not None:
        changes["working_hours"] = parse_working_hours(working_hours)
    if not changes:
        raise ValidationError("At least one field to update is required")

    return await canteen_repo.save(replace(existing, **changes))


async def delete_canteen(
    canteen_repo: CanteenRepository,
    student_repo: StudentRepository,
    *,
    canteen_id: Any,
    deleted_by: Any,
) -> bool:
    await _require_admin(student_repo, deleted_by)
    return await canteen_repo.delete(parse_positive_int(canteen_id, "canteenId"))
