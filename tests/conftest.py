"""Shared fixtures: an in-memory Redis per test and a controllable clock."""

from datetime import UTC, datetime, timedelta

import fakeredis
import pytest

from py_carddav.carddav import AddressBookDirectory, CardStore, KeySpace, RedisCardDAVBackend

VCARD_BOB = """BEGIN:VCARD
VERSION:3.0
FN:Bob Example
N:Example;Bob;;;
UID:bob-123
EMAIL:bob@example.com
END:VCARD"""

VCARD_CAROL = """BEGIN:VCARD
VERSION:4.0
FN:Carol Example
UID:carol-456
END:VCARD"""


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float = 1.0) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
async def redis():
    """Create and cleanup an isolated in-memory Redis."""
    client = fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer(), decode_responses=True)
    yield client
    await client.aclose()


@pytest.fixture
def keys():
    return KeySpace()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def directory(redis, keys):
    return AddressBookDirectory(redis, keys)


@pytest.fixture
def card_store(redis, keys, clock):
    return CardStore(redis, keys, clock)


@pytest.fixture
def backend(redis, keys, clock):
    return RedisCardDAVBackend(redis, keys, clock)


@pytest.fixture
def vcard_bob():
    return VCARD_BOB


@pytest.fixture
def vcard_carol():
    return VCARD_CAROL
