import re
from typing import Any

from ..domain.errors import ValidationError
from ..domain.repositories import StudentRepository
from ..domain.validation import parse_positive_int
from ..models import Student

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MAX_NAME_LENGTH = 100


async def create_student(
    student_repo: StudentRepository,
    *,
    name: Any,
    email: Any,
    is_admin: bool = False,
) -> Student:
    if not name or not isinstance(name, str):
        raise ValidationError("Name is required", field="name")
    if not email or not isinstance(email, str):
        raise ValidationError("Email is required", field="email")
    trimmed = name.strip()
    if not trimmed:
        raise ValidationError("Name cannot be empty", field="name")
    if len(trimmed) > MAX_NAME_LENGTH:
        raise ValidationError(f"Name cannot exceed {MAX_NAME_LENGTH} characters", field="name")
    if not EMAIL_RE.match(email):
        raise ValidationError("Invalid email format", field="email")
    return await student_repo.create(name=trimmed, email=email, is_admin=bool(is_admin))


async def get_student(student_repo: StudentRepository, *, student_id: Any) -> Student | None:
    return await student_repo.get(parse_positive_int(student_id, "studentId"))
