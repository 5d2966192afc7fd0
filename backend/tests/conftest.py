import asyncio
from collections import defaultdict
from typing import Any, Awaitable, Callable, Mapping, Sequence, TypeVar

import pytest
from canteen_booking.domain.errors import EmailInUseError, InfrastructureError
from canteen_booking.models import Canteen, Meal, Student, WorkingPeriod

T = TypeVar("T")


class FakeTransaction:
    def __init__(self, store: "FakeSlotStore") -> None:
        self.store = store
        self.queued: list[Callable[[], None]] = []

    async def get(self, key: str) -> str | None:
        return self.store.strings.get(key)

    async def hgetall(self, key: str) -> dict[str, str]:
        return dict(self.store.hashes.get(key, {}))

    async def is_member(self, key: str, member: str) -> bool:
        return member in self.store.sets.get(key, set())

    async def incr(self, key: str) -> int:
        return self.store.incr_by(key, 1)

    def increment(self, key: str) -> None:
        self.queued.append(lambda: self.store.incr_by(key, 1))

    def decrement(self, key: str) -> None:
        self.queued.append(lambda: self.store.incr_by(key, -1))

    def set_add(self, key: str, member: str) -> None:
        def op() -> None:
            self.store.sets.setdefault(key, set()).add(member)
            self.store.touch(key)

        self.queued.append(op)

    def set_remove(self, key: str, member: str) -> None:
        def op() -> None:
            self.store.sets.get(key, set()).discard(member)
            self.store.touch(key)

        self.queued.append(op)

    def hset(self, key: str, mapping: Mapping[str, str]) -> None:
        def op() -> None:
            self.store.hashes.setdefault(key, {}).update(mapping)
            self.store.touch(key)

        self.queued.append(op)


class FakeSlotStore:
    """In-memory store with WATCH-like semantics: a unit whose watched keys changed fails as a whole."""

    def __init__(self) -> None:
        self.strings: dict[str, str] = {}
        self.hashes: dict[str, dict[str, str]] = {}
        self.sets: dict[str, set[str]] = {}
        self.versions: defaultdict[str, int] = defaultdict(int)
        self.aborted = 0
        self.fail_with: Exception | None = None

    def touch(self, key: str) -> None:
        self.versions[key] += 1

    def incr_by(self, key: str, amount: int) -> int:
        value = int(self.strings.get(key, "0")) + amount
        self.strings[key] = str(value)
        self.touch(key)
        return value

    def counter(self, key: str) -> int:
        return int(self.strings.get(key, "0"))

    def members(self, key: str) -> set[str]:
        return set(self.sets.get(key, set()))

    async def get_many(self, keys: Sequence[str]) -> list[str | None]:
        if self.fail_with is not None:
            raise self.fail_with
        return [self.strings.get(key) for key in keys]

    async def hgetall(self, key: str) -> dict[str, str]:
        return dict(self.hashes.get(key, {}))

    async def smembers(self, key: str) -> set[str]:
        return self.members(key)

    async def transact(self, watch_keys: Sequence[str], fn: Callable[[Any], Awaitable[T]]) -> T:
        if self.fail_with is not None:
            raise self.fail_with
        seen = {key: self.versions[key] for key in watch_keys}
        tx = FakeTransaction(self)
        result = await fn(tx)
        # yield so racing callers interleave between the reads and EXEC
        await asyncio.sleep(0)
        if any(self.versions[key] != version for key, version in seen.items()):
            self.aborted += 1
            raise InfrastructureError("transaction aborted by concurrent updates, retry the request")
        for op in tx.queued:
            op()
        return result


class FakeCanteenRepo:
    def __init__(self) -> None:
        self.canteens: dict[int, Canteen] = {}
        self.next_id = 1

    def add(self, canteen: Canteen) -> Canteen:
        self.canteens[canteen.id] = canteen
        self.next_id = max(self.next_id, canteen.id + 1)
        return canteen

    async def get(self, canteen_id: int) -> Canteen | None:
        return self.canteens.get(canteen_id)

    async def list_all(self) -> list[Canteen]:
        return [self.canteens[k] for k in sorted(self.canteens)]

    async def create(self, *, name, location, capacity, working_hours, created_by) -> Canteen:  # type: ignore[no-untyped-def]
        canteen = Canteen(
            id=self.next_id,
            name=name,
            location=location,
            capacity=capacity,
            working_hours=working_hours,
            created_by=created_by,
        )
        return self.add(canteen)

    async def save(self, canteen: Canteen) -> Canteen:
        self.canteens[canteen.id] = canteen
        return canteen

    async def delete(self, canteen_id: int) -> bool:
        return self.canteens.pop(canteen_id, None) is not None


class FakeStudentRepo:
    def __init__(self) -> None:
        self.students: dict[int, Student] = {}

    def add(self, student_id: int, *, is_admin: bool = False) -> Student:
        student = Student(id=student_id, name=f"student {student_id}", email=f"s{student_id}@uni.edu", is_admin=is_admin)
        self.students[student_id] = student
        return student

    async def get(self, student_id: int) -> Student | None:
        return self.students.get(student_id)

    async def exists(self, student_id: int) -> bool:
        return student_id in self.students

    async def create(self, *, name: str, email: str, is_admin: bool) -> Student:
        if any(s.email == email for s in self.students.values()):
            raise EmailInUseError("Email already in use")
        student = Student(id=len(self.students) + 1, name=name, email=email, is_admin=is_admin)
        self.students[student.id] = student
        return student


BREAKFAST_ONLY = (WorkingPeriod(meal=Meal.BREAKFAST, start="08:00", end="10:00"),)
THREE_MEALS = (
    WorkingPeriod(meal=Meal.BREAKFAST, start="08:00", end="10:00"),
    WorkingPeriod(meal=Meal.LUNCH, start="12:00", end="14:30"),
    WorkingPeriod(meal=Meal.DINNER, start="18:00", end="20:00"),
)


def make_canteen(
    canteen_id: int = 1,
    *,
    capacity: int = 30,
    working_hours: tuple[WorkingPeriod, ...] = BREAKFAST_ONLY,
    name: str | None = None,
) -> Canteen:
    return Canteen(
        id=canteen_id,
        name=name or f"Canteen {canteen_id}",
        location="Campus",
        capacity=capacity,
        working_hours=working_hours,
    )


@pytest.fixture
def store() -> FakeSlotStore:
    return FakeSlotStore()


@pytest.fixture
def canteen_repo() -> FakeCanteenRepo:
    return FakeCanteenRepo()


@pytest.fixture
def student_repo() -> FakeStudentRepo:
    repo = FakeStudentRepo()
    for student_id in range(1, 11):
        repo.add(student_id)
    return repo


@pytest.fixture
def canteen_factory() -> Callable[..., Canteen]:
    return make_canteen


@pytest.fixture
def meal_periods() -> dict[str, tuple[WorkingPeriod, ...]]:
    return {"breakfast_only": BREAKFAST_ONLY, "three_meals": THREE_MEALS}
