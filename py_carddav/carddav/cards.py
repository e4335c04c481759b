"""Card store: card records and the per address book card index."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

from redis.asyncio import Redis
from redis.exceptions import ResponseError

from ..debug import logger
from ..internal import is_wrong_type
from .batch import Batch, BatchExecutor
from .carddav import Card, compute_etag, from_millis, to_millis
from .keyspace import KeySpace, parse_addressbook_id

CARD_FIELDS = ["body", "lastModified"]


def _utcnow() -> datetime:
    return datetime.now(UTC)


async def read_card_index(redis: Redis, keys: KeySpace, addressbook_id: int) -> list[str]:
    """Read the card uris of an address book, oldest modification first.

    A card index of the wrong type is treated as empty.
    """
    try:
        return await redis.zrange(keys.card_index(addressbook_id), 0, -1)
    except ResponseError as e:
        if not is_wrong_type(e):
            raise
        logger.warning(f"Ignoring malformed card index of address book {addressbook_id}: {e}")
        return []


class CardStore:
    """CRUD over cards.

    Each mutation writes the card, its index entry (create/delete only) and
    the owning address book's ctag bump in a single batch.
    """

    def __init__(
        self,
        redis: Redis,
        keys: KeySpace | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize card store.

        Args:
            redis: Connected Redis client (owned by the caller)
            keys: Key naming scheme (uses default prefixes if None)
            clock: Source of last-modified timestamps (UTC now if None)
        """
        self.redis = redis
        self.keys = keys or KeySpace()
        self.clock = clock or _utcnow
        self.executor = BatchExecutor(redis)

    def _batch(self, label: str, addressbook_id: int) -> Batch:
        """Start a batch that only runs while the address book record exists."""
        batch = Batch(label)
        batch.require(self.keys.addressbook(addressbook_id), "uri", f"Address book not found: {addressbook_id}")
        return batch

    async def list(self, addressbook_id: int | str) -> list[Card]:
        """List all cards of an address book, oldest modification first."""
        addressbook_id = parse_addressbook_id(addressbook_id)
        card_uris = await read_card_index(self.redis, self.keys, addressbook_id)
        if not card_uris:
            return []

        batch = Batch("list-cards")
        for uri in card_uris:
            batch.hmget(self.keys.card(addressbook_id, uri), CARD_FIELDS)
        results = await self.executor.execute(batch)

        cards = []
        for uri, (body, last_modified) in zip(card_uris, results):
            if body is None:
                logger.warning(f"Card {uri} is indexed in address book {addressbook_id} but has no record")
                continue
            cards.append(Card(addressbook_id, uri, body, from_millis(last_modified)))
        return cards

    async def get(self, addressbook_id: int | str, uri: str) -> Card | None:
        """Get a card, or None if it does not exist."""
        addressbook_id = parse_addressbook_id(addressbook_id)
        body, last_modified = await self.redis.hmget(self.keys.card(addressbook_id, uri), CARD_FIELDS)
        if body is None and last_modified is None:
            return None
        return Card(addressbook_id, uri, body or "", from_millis(last_modified))

    async def _write(self, label: str, addressbook_id: int | str, uri: str, body: str, index: bool) -> str:
        addressbook_id = parse_addressbook_id(addressbook_id)
        card_key = self.keys.card(addressbook_id, uri)

        now = to_millis(self.clock())
        batch = self._batch(label, addressbook_id)
        if not index:
            batch.require(card_key, "body", f"Card not found: {uri}")
        batch.hset(card_key, {"body": body, "lastModified": now})
        if index:
            batch.zadd(self.keys.card_index(addressbook_id), {uri: now})
        batch.hincrby(self.keys.addressbook(addressbook_id), "ctag", 1)
        await self.executor.execute(batch)
        return compute_etag(body)

    async def create(self, addressbook_id: int | str, uri: str, body: str) -> str:
        """Create a new card.

        Args:
            addressbook_id: Owning address book id
            uri: Card basename, unique within the address book
            body: vCard data, stored as-is

        Returns:
            Quoted ETag of the stored body

        Raises:
            HTTPError: If the address book does not exist (404)
        """
        return await self._write("create-card", addressbook_id, uri, body, index=True)

    async def update(self, addressbook_id: int | str, uri: str, body: str) -> str:
        """Update an existing card's body. Returns the new quoted ETag.

        Raises:
            HTTPError: If the address book or the card does not exist (404)
        """
        return await self._write("update-card", addressbook_id, uri, body, index=False)

    async def delete(self, addressbook_id: int | str, uri: str) -> bool:
        """Delete a card.

        Deleting an unknown uri still succeeds and bumps the ctag.

        Raises:
            HTTPError: If the address book does not exist (404)
        """
        addressbook_id = parse_addressbook_id(addressbook_id)

        batch = self._batch("delete-card", addressbook_id)
        batch.delete(self.keys.card(addressbook_id, uri))
        batch.zrem(self.keys.card_index(addressbook_id), uri)
        batch.hincrby(self.keys.addressbook(addressbook_id), "ctag", 1)
        await self.executor.execute(batch)
        return True
