from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, status

from ..deps import get_canteen_repo, get_current_student_id, get_slot_store, get_student_repo
from ..domain.errors import DomainError
from ..domain.repositories import CanteenRepository, SlotStore, StudentRepository
from ..schemas import (
    CanteenCreate,
    CanteenRead,
    CanteenStatusRead,
    CanteenStatusSummary,
    CanteenUpdate,
    SlotStatusRead,
)
from ..usecases import availability as availability_usecase
from ..usecases import canteens as canteen_usecase
from ..utils.audit_log import emit_audit_log
from .errors import to_http_exception

router = APIRouter(prefix="/canteens", tags=["canteens"])


def _audit(action: str, *, student_id: str, canteen_id: int) -> None:
    try:
        emit_audit_log(
            action=action,  # type: ignore[arg-type]
            initiator="admin",
            student_id=int(student_id),
            canteen_id=canteen_id,
        )
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="audit log failed") from exc


@router.post("", response_model=CanteenRead, status_code=status.HTTP_201_CREATED)
async def create_canteen(
    payload: CanteenCreate,
    canteen_repo: CanteenRepository = Depends(get_canteen_repo),
    student_repo: StudentRepository = Depends(get_student_repo),
    student_id: str = Depends(get_current_student_id),
) -> CanteenRead:
    try:
        canteen = await canteen_usecase.create_canteen(
            canteen_repo,
            student_repo,
            name=payload.name,
            location=payload.location,
            capacity=payload.capacity,
            working_hours=payload.raw_working_hours(),
            created_by=student_id,
        )
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    _audit("canteen.created", student_id=student_id, canteen_id=canteen.id)
    return CanteenRead.from_domain(canteen)


@router.get("", response_model=List[CanteenRead])
async def list_canteens(canteen_repo: CanteenRepository = Depends(get_canteen_repo)) -> list[CanteenRead]:
    try:
        canteens = await canteen_usecase.list_canteens(canteen_repo)
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return [CanteenRead.from_domain(c) for c in canteens]


@router.get("/status", response_model=List[CanteenStatusSummary])
async def all_canteens_status(
    start_date: Optional[str] = Query(default=None, alias="startDate"),
    start_time: Optional[str] = Query(default=None, alias="startTime"),
    end_date: Optional[str] = Query(default=None, alias="endDate"),
    end_time: Optional[str] = Query(default=None, alias="endTime"),
    duration: Optional[str] = Query(default=None),
    canteen_repo: CanteenRepository = Depends(get_canteen_repo),
    store: SlotStore = Depends(get_slot_store),
) -> list[CanteenStatusSummary]:
    try:
        statuses = await availability_usecase.get_all_canteens_status(
            canteen_repo,
            store,
            start_date=start_date,
            start_time=start_time,
            end_date=end_date,
            end_time=end_time,
            duration=duration,
        )
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return [CanteenStatusSummary.from_domain(s) for s in statuses]


@router.get("/{canteen_id}", response_model=CanteenRead)
async def get_canteen(
    canteen_id: int = Path(..., ge=1),
    canteen_repo: CanteenRepository = Depends(get_canteen_repo),
) -> CanteenRead:
    try:
        canteen = await canteen_usecase.get_canteen(canteen_repo, canteen_id=canteen_id)
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    if canteen is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Canteen not found")
    return CanteenRead.from_domain(canteen)


@router.get("/{canteen_id}/status", response_model=CanteenStatusRead)
async def canteen_status(
    canteen_id: int = Path(..., ge=1),
    start_date: Optional[str] = Query(default=None, alias="startDate"),
    start_time: Optional[str] = Query(default=None, alias="startTime"),
    end_date: Optional[str] = Query(default=None, alias="endDate"),
    end_time: Optional[str] = Query(default=None, alias="endTime"),
    duration: Optional[str] = Query(default=None),
    canteen_repo: CanteenRepository = Depends(get_canteen_repo),
    store: SlotStore = Depends(get_slot_store),
) -> CanteenStatusRead:
    try:
        slots = await availability_usecase.get_canteen_status(
            canteen_repo,
            store,
            canteen_id=canteen_id,
            start_date=start_date,
            start_time=start_time,
            end_date=end_date,
            end_time=end_time,
            duration=duration,
        )
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    if slots is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Canteen not found")
    return CanteenStatusRead(canteen_id=canteen_id, slots=[SlotStatusRead.from_domain(s) for s in slots])


@router.put("/{canteen_id}", response_model=CanteenRead)
async def update_canteen(
    payload: CanteenUpdate,
    canteen_id: int = Path(..., ge=1),
    canteen_repo: CanteenRepository = Depends(get_canteen_repo),
    student_repo: StudentRepository = Depends(get_student_repo),
    student_id: str = Depends(get_current_student_id),
) -> CanteenRead:
    try:
        canteen = await canteen_usecase.update_canteen(
            canteen_repo,
            student_repo,
            canteen_id=canteen_id,
            updated_by=student_id,
            name=payload.name,
            location=payload.location,
            capacity=payload.capacity,
            working_hours=payload.raw_working_hours(),
        )
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    if canteen is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Canteen not found")
    _audit("canteen.updated", student_id=student_id, canteen_id=canteen.id)
    return CanteenRead.from_domain(canteen)


@router.delete("/{canteen_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_canteen(
    canteen_id: int = Path(..., ge=1),
    canteen_repo: CanteenRepository = Depends(get_canteen_repo),
    student_repo: StudentRepository = Depends(get_student_repo),
    student_id: str = Depends(get_current_student_id),
) -> Response:
    try:
        deleted = await canteen_usecase.delete_canteen(
            canteen_repo,
            student_repo,
            canteen_id=canteen_id,
            deleted_by=student_id,
        )
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Canteen not found")
    _audit("canteen.deleted", student_id=student_id, canteen_id=canteen_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
