"""Grouped command submission.

A logical mutation (e.g. "create a card and bump the address book's ctag")
is collected into a :class:`Batch` and sent by :class:`BatchExecutor` as a
single MULTI/EXEC transaction: one round trip, executed back-to-back without
interleaving from other clients. Redis does not roll back commands of an
EXEC that succeeded when a sibling command fails.

A batch may carry requirements (a hash field that must exist). Required keys
are WATCHed and checked before MULTI; if one of them changes before EXEC the
transaction is discarded and the check is repeated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from redis.asyncio import Redis
from redis.asyncio.client import Pipeline
from redis.exceptions import WatchError

from ..debug import log_batch, log_batch_result, store_logger
from ..internal import BatchError, HTTPError


@dataclass
class Command:
    """A single store command, named after the redis-py client method."""

    name: str
    args: tuple[Any, ...] = ()
    kwargs: dict[str, Any] = field(default_factory=dict)

    def describe(self) -> str:
        key = self.args[0] if self.args else ""
        return f"{self.name.upper()} {key}".rstrip()


@dataclass
class Requirement:
    """A hash field that must exist when the batch is executed."""

    key: str
    hash_field: str
    message: str


@dataclass
class Batch:
    """Ordered list of commands belonging to one logical operation."""

    label: str
    commands: list[Command] = field(default_factory=list)
    requirements: list[Requirement] = field(default_factory=list)

    def require(self, key: str, hash_field: str, message: str) -> Batch:
        """Only execute if `hash_field` exists in `key`; otherwise 404 with `message`."""
        self.requirements.append(Requirement(key, hash_field, message))
        return self

    def add(self, name: str, *args: Any, **kwargs: Any) -> Batch:
        self.commands.append(Command(name, args, kwargs))
        return self

    def hset(self, key: str, mapping: dict[str, Any]) -> Batch:
        return self.add("hset", key, mapping=mapping)

    def hdel(self, key: str, *fields: str) -> Batch:
        return self.add("hdel", key, *fields)

    def hincrby(self, key: str, hash_field: str, amount: int = 1) -> Batch:
        return self.add("hincrby", key, hash_field, amount)

    def hmget(self, key: str, fields: list[str]) -> Batch:
        return self.add("hmget", key, fields)

    def delete(self, *keys: str) -> Batch:
        return self.add("delete", *keys)

    def zadd(self, key: str, mapping: dict[str, float]) -> Batch:
        return self.add("zadd", key, mapping)

    def zrem(self, key: str, *members: str) -> Batch:
        return self.add("zrem", key, *members)

    def sadd(self, key: str, *members: Any) -> Batch:
        return self.add("sadd", key, *members)

    def srem(self, key: str, *members: Any) -> Batch:
        return self.add("srem", key, *members)

    def __len__(self) -> int:
        return len(self.commands)


class BatchExecutor:
    """Submits batches to Redis as MULTI/EXEC transactions."""

    def __init__(self, redis: Redis) -> None:
        self.redis = redis

    async def check_requirements(self, pipe: Pipeline, batch: Batch) -> None:
        """Verify the requirements of a batch on a watching pipeline."""
        for requirement in batch.requirements:
            if not await pipe.hexists(requirement.key, requirement.hash_field):
                raise HTTPError(404, Exception(requirement.message))

    async def execute(self, batch: Batch) -> list[Any]:
        """Execute all commands of a batch in one transaction.

        Args:
            batch: Commands to submit

        Returns:
            One reply per command, in order

        Raises:
            HTTPError: If a requirement of the batch is not met (404)
            BatchError: If any command inside the transaction failed
            redis.exceptions.ConnectionError: If the store is unreachable
        """
        if not batch.commands:
            return []

        log_batch(batch.label, [(c.name, c.args + tuple(c.kwargs.values())) for c in batch.commands])

        async with self.redis.pipeline(transaction=True) as pipe:
            while True:
                try:
                    if batch.requirements:
                        await pipe.watch(*{r.key for r in batch.requirements})
                        await self.check_requirements(pipe, batch)
                        pipe.multi()
                    for command in batch.commands:
                        getattr(pipe, command.name)(*command.args, **command.kwargs)
                    results = await pipe.execute(raise_on_error=False)
                    break
                except WatchError:
                    store_logger.debug(f"Batch {batch.label!r} raced with a concurrent write, retrying")

        failures = [
            (command.describe(), result)
            for command, result in zip(batch.commands, results)
            if isinstance(result, Exception)
        ]
        if failures:
            store_logger.warning(f"Batch {batch.label!r} had {len(failures)} failed command(s)")
            raise BatchError(batch.label, failures)

        log_batch_result(batch.label, results)
        return list(results)
