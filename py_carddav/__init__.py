"""A Redis storage backend for CardDAV address books."""

from .carddav import (
    AddressBook,
    AddressBookDirectory,
    Card,
    CardDAVBackend,
    CardStore,
    KeySpace,
    RedisCardDAVBackend,
)
from .internal import BatchError, HTTPError
from .store import StoreClient, StoreConfig

__version__ = "0.1.0"

__all__ = [
    "AddressBook",
    "AddressBookDirectory",
    "Card",
    "CardDAVBackend",
    "CardStore",
    "KeySpace",
    "RedisCardDAVBackend",
    "BatchError",
    "HTTPError",
    "StoreClient",
    "StoreConfig",
]
