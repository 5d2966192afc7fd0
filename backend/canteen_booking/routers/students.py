from fastapi import APIRouter, Depends, HTTPException, Path, status

from ..deps import get_student_repo
from ..domain.errors import DomainError
from ..domain.repositories import StudentRepository
from ..schemas import StudentCreate, StudentRead
from ..usecases import students as student_usecase
from .errors import to_http_exception

router = APIRouter(prefix="/students", tags=["students"])


@router.post("", response_model=StudentRead, status_code=status.HTTP_201_CREATED)
async def create_student(
    payload: StudentCreate,
    student_repo: StudentRepository = Depends(get_student_repo),
) -> StudentRead:
    try:
        student = await student_usecase.create_student(
            student_repo,
            name=payload.name,
            email=payload.email,
            is_admin=payload.is_admin,
        )
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return StudentRead.from_domain(student)


@router.get("/{student_id}", response_model=StudentRead)
async def get_student(
    student_id: int = Path(..., ge=1),
    student_repo: StudentRepository = Depends(get_student_repo),
) -> StudentRead:
    try:
        student = await student_usecase.get_student(student_repo, student_id=student_id)
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    if student is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")
    return StudentRead.from_domain(student)
