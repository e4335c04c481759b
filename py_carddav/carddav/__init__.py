"""CardDAV storage support for py-carddav."""

from .backend import CardDAVBackend
from .batch import Batch, BatchExecutor
from .carddav import (
    ADDRESSBOOK_DESCRIPTION,
    DISPLAY_NAME,
    GETCTAG,
    SUPPORTED_ADDRESS_DATA,
    AddressBook,
    Card,
    SupportedAddressData,
    compute_etag,
)
from .cards import CardStore
from .directory import AddressBookDirectory
from .keyspace import KeySpace, allocate_addressbook_id
from .redis_backend import RedisCardDAVBackend

__all__ = [
    "CardDAVBackend",
    "RedisCardDAVBackend",
    "AddressBookDirectory",
    "CardStore",
    "Batch",
    "BatchExecutor",
    "KeySpace",
    "allocate_addressbook_id",
    "ADDRESSBOOK_DESCRIPTION",
    "DISPLAY_NAME",
    "GETCTAG",
    "SUPPORTED_ADDRESS_DATA",
    "AddressBook",
    "Card",
    "SupportedAddressData",
    "compute_etag",
]
