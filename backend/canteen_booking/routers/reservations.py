from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from ..deps import get_canteen_repo, get_current_student_id, get_slot_store, get_student_repo
from ..domain.errors import DomainError
from ..domain.repositories import CanteenRepository, SlotStore, StudentRepository
from ..models import ReservationStatus
from ..schemas import ReservationCreate, ReservationRead
from ..usecases import reservations as reservation_usecase
from ..utils.audit_log import emit_audit_log
from .errors import to_http_exception

router = APIRouter(prefix="/reservations", tags=["reservations"])


@router.post("", response_model=ReservationRead, status_code=status.HTTP_201_CREATED)
async def create_reservation(
    payload: ReservationCreate,
    canteen_repo: CanteenRepository = Depends(get_canteen_repo),
    student_repo: StudentRepository = Depends(get_student_repo),
    store: SlotStore = Depends(get_slot_store),
) -> ReservationRead:
    try:
        reservation = await reservation_usecase.create_reservation(
            canteen_repo,
            student_repo,
            store,
            student_id=payload.student_id,
            canteen_id=payload.canteen_id,
            date=payload.date,
            time=payload.time,
            duration=payload.duration,
        )
    except DomainError as exc:
        raise to_http_exception(exc) from exc

    try:
        emit_audit_log(
            action="reservation.created",
            initiator="student",
            student_id=reservation.student_id,
            reservation_id=reservation.id,
            canteen_id=reservation.canteen_id,
            date=reservation.date,
            time=reservation.time,
            duration=reservation.duration,
            status_to=reservation.status,
        )
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="audit log failed") from exc
    return ReservationRead.from_domain(reservation)


@router.get("", response_model=List[ReservationRead])
async def list_my_reservations(
    start_date: Optional[str] = Query(default=None, alias="startDate"),
    end_date: Optional[str] = Query(default=None, alias="endDate"),
    store: SlotStore = Depends(get_slot_store),
    student_id: str = Depends(get_current_student_id),
) -> list[ReservationRead]:
    try:
        reservations = await reservation_usecase.list_student_reservations(
            store,
            student_id=student_id,
            start_date=start_date,
            end_date=end_date,
        )
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return [ReservationRead.from_domain(r) for r in reservations]


@router.get("/{reservation_id}", response_model=ReservationRead)
async def get_reservation(
    reservation_id: int = Path(..., ge=1),
    store: SlotStore = Depends(get_slot_store),
    student_id: str = Depends(get_current_student_id),
) -> ReservationRead:
    try:
        reservation = await reservation_usecase.get_reservation(
            store,
            reservation_id=reservation_id,
            student_id=student_id,
        )
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    if reservation is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reservation not found or unauthorized")
    return ReservationRead.from_domain(reservation)


@router.delete("/{reservation_id}", response_model=ReservationRead)
async def cancel_reservation(
    reservation_id: int = Path(..., ge=1),
    store: SlotStore = Depends(get_slot_store),
    student_id: str = Depends(get_current_student_id),
) -> ReservationRead:
    try:
        cancelled = await reservation_usecase.cancel_reservation(
            store,
            reservation_id=reservation_id,
            student_id=student_id,
        )
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    if cancelled is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reservation not found or unauthorized")

    try:
        emit_audit_log(
            action="reservation.cancelled",
            initiator="student",
            student_id=cancelled.student_id,
            reservation_id=cancelled.id,
            canteen_id=cancelled.canteen_id,
            date=cancelled.date,
            time=cancelled.time,
            duration=cancelled.duration,
            status_from=ReservationStatus.ACTIVE,
            status_to=cancelled.status,
        )
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="audit log failed") from exc
    return ReservationRead.from_domain(cancelled)
