"""Tests for the address book directory."""

import pytest

from py_carddav.carddav import (
    ADDRESSBOOK_DESCRIPTION,
    DISPLAY_NAME,
    GETCTAG,
    SUPPORTED_ADDRESS_DATA,
    SupportedAddressData,
)
from py_carddav.internal import HTTPError


async def test_create_and_list(directory):
    """Test that a new address book is listed with ctag 1."""
    addressbook_id = await directory.create("alice", "home", {DISPLAY_NAME: "Home"})

    addressbooks = await directory.list_for_principal("alice")

    assert addressbook_id == 1
    assert len(addressbooks) == 1
    ab = addressbooks[0]
    assert (ab.id, ab.uri, ab.principal, ab.ctag) == (1, "home", "alice", 1)
    assert ab.display_name == "Home"
    assert ab.description is None


async def test_listed_properties(directory):
    """Test the protocol properties attached to listed address books."""
    await directory.create("alice", "home", {ADDRESSBOOK_DESCRIPTION: "Family"})

    (ab,) = await directory.list_for_principal("alice")

    assert ab.properties[ADDRESSBOOK_DESCRIPTION] == "Family"
    assert isinstance(ab.properties[SUPPORTED_ADDRESS_DATA], SupportedAddressData)
    assert ab.properties[GETCTAG] == 1
    assert ab.properties[DISPLAY_NAME] is None


async def test_principals_are_isolated(directory):
    """Test that principals only see their own address books."""
    await directory.create("alice", "home", {})
    await directory.create("bob", "home", {})
    await directory.create("alice", "work", {})

    assert [ab.uri for ab in await directory.list_for_principal("alice")] == ["home", "work"]
    assert [ab.id for ab in await directory.list_for_principal("bob")] == [2]
    assert await directory.list_for_principal("carol") == []


async def test_create_unknown_property_rejected(directory, redis):
    """Test that an unknown property fails the create without side effects."""
    with pytest.raises(HTTPError) as exc_info:
        await directory.create("alice", "home", {"{urn:x}unknown-prop": "v"})

    assert exc_info.value.code == 400
    assert await directory.list_for_principal("alice") == []
    assert await redis.get(directory.keys.id_counter()) is None


async def test_create_duplicate_uri_rejected(directory):
    """Test that a principal cannot own two address books with one uri."""
    await directory.create("alice", "home", {})

    with pytest.raises(HTTPError) as exc_info:
        await directory.create("alice", "home", {})

    assert exc_info.value.code == 409
    assert len(await directory.list_for_principal("alice")) == 1


async def test_malformed_index_members_ignored(directory, redis):
    """Test that non-integer members of the principal index are skipped."""
    await directory.create("alice", "home", {})
    await redis.sadd(directory.keys.principal_index("alice"), "garbage")

    addressbooks = await directory.list_for_principal("alice")

    assert [ab.uri for ab in addressbooks] == ["home"]


async def test_dangling_index_entry_ignored(directory, redis):
    """Test that ids without a record are skipped."""
    await directory.create("alice", "home", {})
    await redis.sadd(directory.keys.principal_index("alice"), 99)

    assert [ab.id for ab in await directory.list_for_principal("alice")] == [1]


async def test_update_properties(directory):
    """Test a successful property update bumps the ctag."""
    addressbook_id = await directory.create("alice", "home", {DISPLAY_NAME: "Home"})

    ok = await directory.update_properties(
        addressbook_id, {DISPLAY_NAME: "My Home", ADDRESSBOOK_DESCRIPTION: "Private"}
    )

    ab = await directory.get(addressbook_id)
    assert ok is True
    assert (ab.display_name, ab.description, ab.ctag) == ("My Home", "Private", 2)


async def test_update_removes_property(directory):
    """Test that a None value removes the property."""
    addressbook_id = await directory.create("alice", "home", {DISPLAY_NAME: "Home"})

    assert await directory.update_properties(addressbook_id, {DISPLAY_NAME: None})

    ab = await directory.get(addressbook_id)
    assert ab.display_name is None
    assert ab.ctag == 2


async def test_update_unknown_property_rejects_everything(directory):
    """Test that one unsupported property rejects the whole update."""
    addressbook_id = await directory.create("alice", "home", {DISPLAY_NAME: "Home"})

    ok = await directory.update_properties(
        addressbook_id, {DISPLAY_NAME: "Changed", "{DAV:}getetag": "x"}
    )

    ab = await directory.get(addressbook_id)
    assert ok is False
    assert (ab.display_name, ab.ctag) == ("Home", 1)


async def test_update_nothing(directory):
    """Test that an empty mutation set is a no-op."""
    addressbook_id = await directory.create("alice", "home", {})

    assert await directory.update_properties(addressbook_id, {}) is False
    assert (await directory.get(addressbook_id)).ctag == 1


async def test_update_missing_addressbook(directory):
    """Test updating an unknown address book."""
    with pytest.raises(HTTPError) as exc_info:
        await directory.update_properties(42, {DISPLAY_NAME: "x"})

    assert exc_info.value.code == 404


async def test_ctag_only_hash_is_not_an_addressbook(directory, redis):
    """Test that a stray hash without a uri is treated as a missing address book."""
    await redis.hset(directory.keys.addressbook(42), mapping={"ctag": "1"})

    assert not await directory.exists(42)
    with pytest.raises(HTTPError) as exc_info:
        await directory.update_properties(42, {DISPLAY_NAME: "Ghost"})
    assert exc_info.value.code == 404
    assert await redis.hgetall(directory.keys.addressbook(42)) == {"ctag": "1"}


async def test_delete_cascades(directory, card_store, redis):
    """Test that deleting an address book removes its cards and index entry."""
    home = await directory.create("alice", "home", {})
    work = await directory.create("alice", "work", {})
    await card_store.create(home, "c1.vcf", "one")
    await card_store.create(home, "c2.vcf", "two")
    await card_store.create(work, "c3.vcf", "three")

    await directory.delete(home)

    assert await card_store.get(home, "c1.vcf") is None
    assert await card_store.get(home, "c2.vcf") is None
    assert await card_store.list(home) == []
    assert await directory.get(home) is None
    assert [ab.id for ab in await directory.list_for_principal("alice")] == [work]
    assert await card_store.get(work, "c3.vcf") is not None
    assert not await redis.exists(directory.keys.card_index(home))


async def test_delete_missing_addressbook(directory):
    """Test deleting an unknown address book."""
    with pytest.raises(HTTPError) as exc_info:
        await directory.delete(5)

    assert exc_info.value.code == 404


async def test_ids_never_reused(directory):
    """Test that ids keep increasing after a delete."""
    first = await directory.create("alice", "home", {})
    await directory.delete(first)

    second = await directory.create("alice", "home", {})

    assert second > first


async def test_wrong_type_index_treated_as_empty(directory, redis):
    """Test that a principal index holding a legacy serialized blob lists nothing."""
    await redis.hset("addressbook-directory/by-principal/alice", mapping={"ids": "[1, 2]"})

    assert await directory.list_for_principal("alice") == []
