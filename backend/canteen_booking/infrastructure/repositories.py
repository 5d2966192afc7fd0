from __future__ import annotations

import logging

from redis.asyncio import Redis
from redis.exceptions import RedisError

from ..domain.errors import EmailInUseError
from ..domain.keys import (
    CANTEEN_COUNTER_KEY,
    STUDENT_COUNTER_KEY,
    STUDENT_EMAIL_INDEX,
    canteen_key,
    student_key,
)
from ..domain.repositories import CanteenRepository, StudentRepository
from ..models import Canteen, Student, WorkingPeriod
from ..utils.time import utc_now
from .serializers import decode_canteen, decode_student, encode_canteen, encode_student
from .slot_store import store_errors

PENDING_EMAIL_CLAIM = "pending"

logger = logging.getLogger(__name__)


class RedisCanteenRepository(CanteenRepository):
    def __init__(self, redis: Redis) -> None:
        self.redis = redis

    async def get(self, canteen_id: int) -> Canteen | None:
        with store_errors():
            raw = await self.redis.hgetall(canteen_key(canteen_id))
        return decode_canteen(raw) if raw else None

    async def list_all(self) -> list[Canteen]:
        ids: list[int] = []
        with store_errors():
            async for key in self.redis.scan_iter(match="canteen:*"):
                suffix = key.split(":", 1)[1]
                if suffix.isdigit():
                    ids.append(int(suffix))
            ids.sort()
            pipe = self.redis.pipeline(transaction=False)
            for canteen_id in ids:
                pipe.hgetall(canteen_key(canteen_id))
            rows = await pipe.execute() if ids else []
        # a canteen deleted between SCAN and HGETALL comes back empty
        return [decode_canteen(raw) for raw in rows if raw]

    async def create(
        self,
        *,
        name: str,
        location: str,
        capacity: int,
        working_hours: tuple[WorkingPeriod, ...],
        created_by: int,
    ) -> Canteen:
        with store_errors():
            canteen_id = int(await self.redis.incr(CANTEEN_COUNTER_KEY))
            canteen = Canteen(
                id=canteen_id,
                name=name,
                location=location,
                capacity=capacity,
                working_hours=working_hours,
                created_by=created_by,
                created_at=utc_now(),
            )
            await self.redis.hset(canteen_key(canteen_id), mapping=encode_canteen(canteen))
        return canteen

    async def save(self, canteen: Canteen) -> Canteen:
        with store_errors():
            await self.redis.hset(canteen_key(canteen.id), mapping=encode_canteen(canteen))
        return canteen

    async def delete(self, canteen_id: int) -> bool:
        with store_errors():
            return int(await self.redis.delete(canteen_key(canteen_id))) == 1


class RedisStudentRepository(StudentRepository):
    def __init__(self, redis: Redis) -> None:
        self.redis = redis

    async def get(self, student_id: int) -> Student | None:
        with store_errors():
            raw = await self.redis.hgetall(student_key(student_id))
        return decode_student(raw) if raw else None

    async def exists(self, student_id: int) -> bool:
        with store_errors():
            return bool(await self.redis.exists(student_key(student_id)))

    async def create(self, *, name: str, email: str, is_admin: bool) -> Student:
        with store_errors():
            # the address is claimed before an id is allocated; a duplicate writes nothing
            claimed = await self.redis.hsetnx(STUDENT_EMAIL_INDEX, email, PENDING_EMAIL_CLAIM)
            if not claimed:
                raise EmailInUseError("Email already in use")
            try:
                student_id = int(await self.redis.incr(STUDENT_COUNTER_KEY))
                student = Student(id=student_id, name=name, email=email, is_admin=is_admin)
                async with self.redis.pipeline(transaction=True) as pipe:
                    pipe.hset(student_key(student_id), mapping=encode_student(student))
                    pipe.hset(STUDENT_EMAIL_INDEX, email, str(student_id))
                    await pipe.execute()
            except RedisError:
                logger.warning("releasing email claim after a failed sign-up")
                await self.redis.hdel(STUDENT_EMAIL_INDEX, email)
                raise
        return student
