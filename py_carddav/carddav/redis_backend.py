"""Redis-based CardDAV backend implementation."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Any

from redis.asyncio import Redis

from .carddav import AddressBook, Card
from .cards import CardStore
from .directory import AddressBookDirectory
from .keyspace import KeySpace


class RedisCardDAVBackend:
    """Redis-based CardDAV backend.

    Address books are Redis hashes indexed per principal in a set; cards are
    hashes indexed per address book in a sorted set scored by modification
    time. The Redis client is injected and its lifecycle stays with the
    caller (see :class:`py_carddav.store.StoreClient`).
    """

    def __init__(
        self,
        redis: Redis,
        keys: KeySpace | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize backend.

        Args:
            redis: Connected Redis client
            keys: Key naming scheme (uses default prefixes if None)
            clock: Source of card modification times (UTC now if None)
        """
        self.keys = keys or KeySpace()
        self.directory = AddressBookDirectory(redis, self.keys)
        self.cards = CardStore(redis, self.keys, clock)

    async def list_addressbooks(self, principal: str) -> list[AddressBook]:
        return await self.directory.list_for_principal(principal)

    async def update_addressbook(self, addressbook_id: int, mutations: dict[str, Any]) -> bool:
        return await self.directory.update_properties(addressbook_id, mutations)

    async def create_addressbook(
        self, principal: str, uri: str, properties: dict[str, Any]
    ) -> int:
        return await self.directory.create(principal, uri, properties)

    async def delete_addressbook(self, addressbook_id: int) -> None:
        await self.directory.delete(addressbook_id)

    async def list_cards(self, addressbook_id: int) -> list[Card]:
        return await self.cards.list(addressbook_id)

    async def get_card(self, addressbook_id: int, uri: str) -> Card | None:
        return await self.cards.get(addressbook_id, uri)

    async def create_card(self, addressbook_id: int, uri: str, body: str) -> str:
        return await self.cards.create(addressbook_id, uri, body)

    async def update_card(self, addressbook_id: int, uri: str, body: str) -> str:
        return await self.cards.update(addressbook_id, uri, body)

    async def delete_card(self, addressbook_id: int, uri: str) -> bool:
        return await self.cards.delete(addressbook_id, uri)
