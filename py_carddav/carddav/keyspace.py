"""Key naming and identifier allocation for the Redis store.

Layout (default prefixes)::

    addressbook-directory/id-counter             STRING  INCR source for ids
    addressbook-directory/by-principal/<p>       SET     address book ids of <p>
    addressbook-directory/<id>                   HASH    uri, principal, displayName,
                                                         description, ctag
    addressbook-directory/<id>/cards             ZSET    card uris, score = lastModified
    card-store/<id>/<uri>                        HASH    body, lastModified
"""

from __future__ import annotations

from dataclasses import dataclass

from redis.asyncio import Redis


def parse_addressbook_id(addressbook_id: int | str) -> int:
    """Normalize an address book id to int.

    Only ints and strings of ASCII digits are accepted; anything else (bool,
    float, signed or non-ASCII strings) raises ValueError.
    """
    if isinstance(addressbook_id, int) and not isinstance(addressbook_id, bool):
        return addressbook_id
    if isinstance(addressbook_id, str) and addressbook_id.isascii() and addressbook_id.isdigit():
        return int(addressbook_id)
    raise ValueError(f"invalid address book id: {addressbook_id!r}")


@dataclass(frozen=True)
class KeySpace:
    """Deterministic key names for address books and cards."""

    addressbooks_prefix: str = "addressbook-directory"
    cards_prefix: str = "card-store"

    def __post_init__(self) -> None:
        for prefix in (self.addressbooks_prefix, self.cards_prefix):
            if not prefix or "/" in prefix:
                raise ValueError(f"invalid key prefix: {prefix!r}")
        if self.addressbooks_prefix == self.cards_prefix:
            raise ValueError("address book and card prefixes must differ")

    def id_counter(self) -> str:
        return f"{self.addressbooks_prefix}/id-counter"

    def principal_index(self, principal: str) -> str:
        return f"{self.addressbooks_prefix}/by-principal/{principal}"

    def addressbook(self, addressbook_id: int | str) -> str:
        return f"{self.addressbooks_prefix}/{parse_addressbook_id(addressbook_id)}"

    def card_index(self, addressbook_id: int | str) -> str:
        return f"{self.addressbooks_prefix}/{parse_addressbook_id(addressbook_id)}/cards"

    def card(self, addressbook_id: int | str, uri: str) -> str:
        return f"{self.cards_prefix}/{parse_addressbook_id(addressbook_id)}/{uri}"


async def allocate_addressbook_id(redis: Redis, keys: KeySpace) -> int:
    """Allocate a fresh address book id.

    Uses INCR on the id counter, so ids are strictly increasing, never reused
    and unique across concurrent callers.
    """
    return int(await redis.incr(keys.id_counter()))
