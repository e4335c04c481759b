"""Redis connection management for the CardDAV store.

The storage core never opens or closes connections itself; the surrounding
service owns a :class:`StoreClient` and hands its Redis client to the
backend.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

from redis.asyncio import Redis

from .carddav.keyspace import KeySpace
from .carddav.redis_backend import RedisCardDAVBackend
from .debug import logger

CARDDAV_REDIS_URL = os.getenv("CARDDAV_REDIS_URL")
CARDDAV_REDIS_TIMEOUT = os.getenv("CARDDAV_REDIS_TIMEOUT")
CARDDAV_ADDRESSBOOKS_PREFIX = os.getenv("CARDDAV_ADDRESSBOOKS_PREFIX")
CARDDAV_CARDS_PREFIX = os.getenv("CARDDAV_CARDS_PREFIX")


@dataclass
class StoreConfig:
    """Configuration for the Redis store.

    Defaults are read from the environment when the module is imported.
    """

    url: str = CARDDAV_REDIS_URL or "redis://localhost:6379/0"
    timeout: float = float(CARDDAV_REDIS_TIMEOUT or 5.0)  # Socket timeout in seconds

    # Key prefixes
    addressbooks_prefix: str = CARDDAV_ADDRESSBOOKS_PREFIX or "addressbook-directory"
    cards_prefix: str = CARDDAV_CARDS_PREFIX or "card-store"

    def keyspace(self) -> KeySpace:
        return KeySpace(self.addressbooks_prefix, self.cards_prefix)


class StoreClient:
    """Owns the Redis connection used by the CardDAV backend."""

    def __init__(self, config: StoreConfig | None = None, redis: Redis | None = None) -> None:
        """Initialize store client.

        Args:
            config: Store configuration (uses default if None)
            redis: Pre-built Redis client, e.g. for tests (created from
                config.url on first use if None)
        """
        self.config = config or StoreConfig()
        self._redis: Redis | None = redis

    def get_redis(self) -> Redis:
        """Get or create the Redis client."""
        if self._redis is None:
            logger.debug(f"Connecting to {self.config.url}")
            self._redis = Redis.from_url(
                self.config.url,
                decode_responses=True,
                socket_timeout=self.config.timeout,
                socket_connect_timeout=self.config.timeout,
            )
        return self._redis

    def backend(self) -> RedisCardDAVBackend:
        """Create a backend bound to this client's connection."""
        return RedisCardDAVBackend(self.get_redis(), self.config.keyspace())

    async def ping(self) -> bool:
        """Check that the store is reachable."""
        return bool(await self.get_redis().ping())

    async def close(self) -> None:
        """Close the Redis client and release its connections."""
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None

    async def __aenter__(self) -> StoreClient:
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()
