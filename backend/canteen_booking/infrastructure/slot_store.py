"""
Redis storage for occupancy counters, membership sets and reservation records.

Compound check-and-act runs as an optimistic transaction:
WATCH the keys that are read → read them → queue writes after MULTI → EXEC.
If any watched key changed in between, EXEC aborts and the unit fails as a
whole; retrying it is up to the caller.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Awaitable, Callable, Iterator, Mapping, Sequence, TypeVar

from redis.asyncio import Redis
from redis.asyncio.client import Pipeline
from redis.exceptions import RedisError, WatchError

from ..domain.errors import InfrastructureError
from ..domain.repositories import SlotStore, SlotTransaction

T = TypeVar("T")

logger = logging.getLogger(__name__)


@contextmanager
def store_errors() -> Iterator[None]:
    """Surface Redis failures (connection, timeout, protocol) as InfrastructureError."""
    try:
        yield
    except RedisError as exc:
        raise InfrastructureError("store unavailable") from exc


class RedisSlotTransaction(SlotTransaction):
    def __init__(self, pipe: Pipeline) -> None:
        self.pipe = pipe
        self._queued: list[tuple[str, tuple[Any, ...], dict[str, Any]]] = []

    # ── Immediate reads (pipeline is in WATCH mode) ──────────────────────

    async def get(self, key: str) -> str | None:
        return await self.pipe.get(key)

    async def hgetall(self, key: str) -> dict[str, str]:
        return await self.pipe.hgetall(key)

    async def is_member(self, key: str, member: str) -> bool:
        return bool(await self.pipe.sismember(key, member))

    async def incr(self, key: str) -> int:
        return int(await self.pipe.incr(key))

    # ── Queued writes ────────────────────────────────────────────────────

    def increment(self, key: str) -> None:
        self._queued.append(("incr", (key,), {}))

    def decrement(self, key: str) -> None:
        self._queued.append(("decr", (key,), {}))

    def set_add(self, key: str, member: str) -> None:
        self._queued.append(("sadd", (key, member), {}))

    def set_remove(self, key: str, member: str) -> None:
        self._queued.append(("srem", (key, member), {}))

    def hset(self, key: str, mapping: Mapping[str, str]) -> None:
        self._queued.append(("hset", (key,), {"mapping": dict(mapping)}))

    def flush(self) -> None:
        """Buffer every queued write into the MULTI block."""
        for command, args, kwargs in self._queued:
            getattr(self.pipe, command)(*args, **kwargs)


class RedisSlotStore(SlotStore):
    """Redis wrapper; the only mutation surface for occupancy state."""

    def __init__(self, redis: Redis) -> None:
        self.redis = redis

    # ── Read ─────────────────────────────────────────────────────────────

    async def get_many(self, keys: Sequence[str]) -> list[str | None]:
        if not keys:
            return []
        with store_errors():
            return await self.redis.mget(list(keys))

    async def hgetall(self, key: str) -> dict[str, str]:
        with store_errors():
            return await self.redis.hgetall(key)

    async def smembers(self, key: str) -> set[str]:
        with store_errors():
            return set(await self.redis.smembers(key))

    # ── Transaction ──────────────────────────────────────────────────────

    async def transact(
        self,
        watch_keys: Sequence[str],
        fn: Callable[[SlotTransaction], Awaitable[T]],
    ) -> T:
        """
        Run `fn` once as an all-or-nothing unit guarded by WATCH on `watch_keys`.

        Domain errors raised by `fn` abort the unit with nothing written.
        Raises InfrastructureError when Redis fails or a watched key changed
        before EXEC; the unit is never re-run here.
        """
        if not watch_keys:
            raise ValueError("transact requires at least one watched key")

        try:
            async with self.redis.pipeline(transaction=True) as pipe:
                await pipe.watch(*watch_keys)
                tx = RedisSlotTransaction(pipe)
                result = await fn(tx)
                pipe.multi()
                tx.flush()
                await pipe.execute()
                return result
        except WatchError as exc:
            logger.info("transaction on %s aborted by a concurrent write", watch_keys[0])
            raise InfrastructureError("transaction aborted by concurrent updates, retry the request") from exc
        except RedisError as exc:
            raise InfrastructureError("store unavailable") from exc
