"""Address book directory: address book records and the principal index."""

from __future__ import annotations

from typing import Any

from redis.asyncio import Redis
from redis.exceptions import ResponseError

from ..debug import logger
from ..internal import http_errorf, is_wrong_type
from .batch import Batch, BatchExecutor
from .carddav import (
    ADDRESSBOOK_DESCRIPTION,
    DISPLAY_NAME,
    GETCTAG,
    SUPPORTED_ADDRESS_DATA,
    WRITABLE_PROPERTIES,
    AddressBook,
    SupportedAddressData,
)
from .cards import read_card_index
from .keyspace import KeySpace, allocate_addressbook_id, parse_addressbook_id

# Fields of the address book hash, in HMGET order
ADDRESSBOOK_FIELDS = ["uri", "principal", "displayName", "description", "ctag"]


def _parse_ids(members: set[str] | list[str], principal: str) -> list[int]:
    """Parse the members of a principal index, skipping malformed entries."""
    ids = []
    for member in members:
        try:
            ids.append(int(member))
        except (TypeError, ValueError):
            logger.warning(f"Ignoring malformed address book id {member!r} for principal {principal!r}")
    return sorted(ids)


def _parse_ctag(value: str | None) -> int:
    try:
        return int(value) if value is not None else 0
    except ValueError:
        return 0


class AddressBookDirectory:
    """CRUD over address books and the principal -> address book index.

    Every mutation is written as one batch; the ctag is bumped with HINCRBY
    inside that batch and the principal index is a native set, so no
    read-modify-write of shared counters happens here.
    """

    def __init__(self, redis: Redis, keys: KeySpace | None = None) -> None:
        """Initialize directory.

        Args:
            redis: Connected Redis client (owned by the caller)
            keys: Key naming scheme (uses default prefixes if None)
        """
        self.redis = redis
        self.keys = keys or KeySpace()
        self.executor = BatchExecutor(redis)

    def _to_addressbook(self, addressbook_id: int, data: list[str | None]) -> AddressBook:
        uri, principal, display_name, description, ctag = data
        addressbook = AddressBook(
            id=addressbook_id,
            uri=uri or "",
            principal=principal or "",
            display_name=display_name,
            description=description,
            ctag=_parse_ctag(ctag),
        )
        addressbook.properties = {
            DISPLAY_NAME: display_name,
            ADDRESSBOOK_DESCRIPTION: description,
            SUPPORTED_ADDRESS_DATA: SupportedAddressData(),
            GETCTAG: addressbook.ctag,
        }
        return addressbook

    async def list_for_principal(self, principal: str) -> list[AddressBook]:
        """List all address books owned by a principal.

        A missing or malformed index yields an empty list. Ids whose record
        no longer exists are skipped.

        Args:
            principal: Owning principal

        Returns:
            Address books in ascending id order
        """
        try:
            members = await self.redis.smembers(self.keys.principal_index(principal))
        except ResponseError as e:
            if not is_wrong_type(e):
                raise
            logger.warning(f"Ignoring malformed address book index of {principal!r}: {e}")
            return []

        ids = _parse_ids(members, principal)
        if not ids:
            return []

        batch = Batch("list-addressbooks")
        for addressbook_id in ids:
            batch.hmget(self.keys.addressbook(addressbook_id), ADDRESSBOOK_FIELDS)
        results = await self.executor.execute(batch)

        addressbooks = []
        for addressbook_id, data in zip(ids, results):
            if data[0] is None:
                logger.warning(f"Address book {addressbook_id} is indexed for {principal!r} but has no record")
                continue
            addressbooks.append(self._to_addressbook(addressbook_id, data))
        return addressbooks

    async def get(self, addressbook_id: int | str) -> AddressBook | None:
        """Get a single address book, or None if it does not exist."""
        addressbook_id = parse_addressbook_id(addressbook_id)
        data = await self.redis.hmget(self.keys.addressbook(addressbook_id), ADDRESSBOOK_FIELDS)
        if data[0] is None:
            return None
        return self._to_addressbook(addressbook_id, data)

    async def exists(self, addressbook_id: int | str) -> bool:
        """Check whether an address book record exists."""
        return bool(await self.redis.hexists(self.keys.addressbook(addressbook_id), "uri"))

    async def update_properties(self, addressbook_id: int | str, mutations: dict[str, Any]) -> bool:
        """Update an address book's properties.

        Only display name and description can be changed. If any other
        property is part of the mutations the entire update is rejected.
        A value of None removes the property.

        Args:
            addressbook_id: Address book id
            mutations: Property name (Clark notation) to new value

        Returns:
            True if the update was written, False if it was rejected

        Raises:
            HTTPError: If the address book does not exist (404)
        """
        updates: dict[str, Any] = {}
        for prop, value in mutations.items():
            stored_field = WRITABLE_PROPERTIES.get(prop)
            if stored_field is None:
                # If any unsupported values were being updated, we must
                # let the entire request fail.
                logger.info(f"Rejecting update of address book {addressbook_id}: unsupported property {prop}")
                return False
            updates[stored_field] = value

        # No values are being updated?
        if not updates:
            return False

        key = self.keys.addressbook(addressbook_id)
        batch = Batch("update-addressbook")
        batch.require(key, "uri", f"Address book not found: {addressbook_id}")
        values = {k: v for k, v in updates.items() if v is not None}
        removed = [k for k, v in updates.items() if v is None]
        if values:
            batch.hset(key, values)
        if removed:
            batch.hdel(key, *removed)
        batch.hincrby(key, "ctag", 1)
        await self.executor.execute(batch)
        return True

    async def create(self, principal: str, uri: str, properties: dict[str, Any]) -> int:
        """Create a new address book.

        Args:
            principal: Owning principal
            uri: Basename of the address book url, unique per principal
            properties: Initial properties (display name, description)

        Returns:
            Id of the new address book

        Raises:
            HTTPError: Unknown property (400) or uri already in use (409)
        """
        record: dict[str, Any] = {"uri": uri, "principal": principal, "ctag": 1}
        for prop, value in properties.items():
            stored_field = WRITABLE_PROPERTIES.get(prop)
            if stored_field is None:
                raise http_errorf(400, "Unknown property: %s", prop)
            if value is not None:
                record[stored_field] = value

        existing = await self.list_for_principal(principal)
        if any(addressbook.uri == uri for addressbook in existing):
            raise http_errorf(409, "Address book already exists: %s", uri)

        addressbook_id = await allocate_addressbook_id(self.redis, self.keys)

        batch = Batch("create-addressbook")
        batch.hset(self.keys.addressbook(addressbook_id), record)
        batch.sadd(self.keys.principal_index(principal), addressbook_id)
        await self.executor.execute(batch)

        logger.info(f"Created address book {addressbook_id} ({uri}) for {principal!r}")
        return addressbook_id

    async def delete(self, addressbook_id: int | str) -> None:
        """Delete an address book and all its cards.

        Raises:
            HTTPError: If the address book does not exist (404)
        """
        addressbook_id = parse_addressbook_id(addressbook_id)
        key = self.keys.addressbook(addressbook_id)

        # The owner is needed to update the principal index
        principal = await self.redis.hget(key, "principal")
        if principal is None:
            raise http_errorf(404, "Address book not found: %s", addressbook_id)

        card_index = self.keys.card_index(addressbook_id)
        card_uris = await read_card_index(self.redis, self.keys, addressbook_id)

        batch = Batch("delete-addressbook")
        batch.delete(key, card_index, *[self.keys.card(addressbook_id, uri) for uri in card_uris])
        batch.srem(self.keys.principal_index(principal), addressbook_id)
        await self.executor.execute(batch)

        logger.info(f"Deleted address book {addressbook_id} with {len(card_uris)} card(s)")
