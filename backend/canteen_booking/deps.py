from fastapi import Depends, Header, HTTPException, status
from redis.asyncio import Redis

from .infrastructure.repositories import RedisCanteenRepository, RedisStudentRepository
from .infrastructure.slot_store import RedisSlotStore
from .redis_client import redis


async def get_redis() -> Redis:
    return redis


async def get_current_student_id(student_id: str | None = Header(default=None, alias="studentid")) -> str:
    """Trusted caller identity from the `studentId` header; parsed and checked by the use cases."""
    if not student_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing studentId header")
    return student_id


async def get_canteen_repo(client: Redis = Depends(get_redis)) -> RedisCanteenRepository:
    return RedisCanteenRepository(client)


async def get_student_repo(client: Redis = Depends(get_redis)) -> RedisStudentRepository:
    return RedisStudentRepository(client)


async def get_slot_store(client: Redis = Depends(get_redis)) -> RedisSlotStore:
    return RedisSlotStore(client)
