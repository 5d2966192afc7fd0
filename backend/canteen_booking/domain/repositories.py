from __future__ import annotations

from typing import Awaitable, Callable, Mapping, Protocol, Sequence, TypeVar

from ..models import Canteen, Student, WorkingPeriod

T = TypeVar("T")


class CanteenRepository(Protocol):
    async def get(self, canteen_id: int) -> Canteen | None: ...

    async def list_all(self) -> list[Canteen]: ...

    async def create(
        self,
        *,
        name: str,
        location: str,
        capacity: int,
        working_hours: tuple[WorkingPeriod, ...],
        created_by: int,
    ) -> Canteen: ...

    async def save(self, canteen: Canteen) -> Canteen: ...

    async def delete(self, canteen_id: int) -> bool: ...


class StudentRepository(Protocol):
    async def get(self, student_id: int) -> Student | None: ...

    async def exists(self, student_id: int) -> bool: ...

    async def create(self, *, name: str, email: str, is_admin: bool) -> Student: ...


class SlotTransaction(Protocol):
    """
    One optimistic unit of work. Reads run immediately against watched state;
    writes are queued and applied all-or-nothing when the unit commits.
    """

    async def get(self, key: str) -> str | None: ...

    async def hgetall(self, key: str) -> dict[str, str]: ...

    async def is_member(self, key: str, member: str) -> bool: ...

    async def incr(self, key: str) -> int: ...

    def increment(self, key: str) -> None: ...

    def decrement(self, key: str) -> None: ...

    def set_add(self, key: str, member: str) -> None: ...

    def set_remove(self, key: str, member: str) -> None: ...

    def hset(self, key: str, mapping: Mapping[str, str]) -> None: ...


class SlotStore(Protocol):
    async def get_many(self, keys: Sequence[str]) -> list[str | None]: ...

    async def hgetall(self, key: str) -> dict[str, str]: ...

    async def smembers(self, key: str) -> set[str]: ...

    async def transact(
        self,
        watch_keys: Sequence[str],
        fn: Callable[[SlotTransaction], Awaitable[T]],
    ) -> T: ...
