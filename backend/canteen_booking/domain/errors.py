from enum import StrEnum


class ErrorKind(StrEnum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    PERMISSION = "permission"
    CONFLICT = "conflict"
    INFRASTRUCTURE = "infrastructure"


class DomainError(Exception):
    kind: ErrorKind


class ValidationError(DomainError):
    """Malformed or out-of-range client input. Message is safe to return verbatim."""

    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class InvalidTimeError(ValidationError):
    """Requested slot is outside the canteen's meal periods."""


class NotFoundError(DomainError):
    kind = ErrorKind.NOT_FOUND


class PermissionDeniedError(DomainError):
    kind = ErrorKind.PERMISSION


class ConflictError(DomainError):
    kind = ErrorKind.CONFLICT


class SlotFullyBookedError(ConflictError):
    def __init__(self, slot_key: str) -> None:
        super().__init__(f"Slot {slot_key} is fully booked")
        self.slot_key = slot_key


class AlreadyBookedError(ConflictError):
    pass


class EmailInUseError(ConflictError):
    pass


class InfrastructureError(DomainError):
    """Store unreachable, timed out or transaction aborted. Safe for the caller to retry."""

    kind = ErrorKind.INFRASTRUCTURE
