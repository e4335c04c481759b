#!/usr/bin/env python3
"""Create a sample address book with one contact in a Redis store."""

import asyncio

from py_carddav.carddav import ADDRESSBOOK_DESCRIPTION, DISPLAY_NAME
from py_carddav.store import StoreClient, StoreConfig

# Sample vCard
SAMPLE_VCARD = """BEGIN:VCARD
VERSION:3.0
UID:contact-001@example.com
FN:John Doe
N:Doe;John;;;
EMAIL;TYPE=INTERNET:john.doe@example.com
TEL;TYPE=CELL:+1-555-0100
END:VCARD
"""


async def create_sample_data(config: StoreConfig, principal: str = "principals/current") -> int:
    """Create sample address book data.

    Args:
        config: Store to write to
        principal: Owner of the sample address book

    Returns:
        Id of the created address book
    """
    async with StoreClient(config) as client:
        backend = client.backend()

        addressbook_id = await backend.create_addressbook(
            principal,
            "personal",
            {DISPLAY_NAME: "Personal Contacts", ADDRESSBOOK_DESCRIPTION: "Personal address book"},
        )
        print(f"Created personal contacts with id {addressbook_id}")

        etag = await backend.create_card(addressbook_id, "contact-001.vcf", SAMPLE_VCARD.strip())
        print(f"Created contact-001.vcf with etag {etag}")

        return addressbook_id


if __name__ == "__main__":
    config = StoreConfig()
    print(f"Creating sample data in: {config.url}\n")

    asyncio.run(create_sample_data(config))

    print("\nSample data created successfully!")
    print("\nInspect it with:")
    print("  py-carddav-admin list-addressbooks principals/current")
