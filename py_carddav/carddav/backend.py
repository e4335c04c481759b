"""CardDAV storage backend interface."""

from __future__ import annotations

from typing import Any, Protocol

from .carddav import AddressBook, Card


class CardDAVBackend(Protocol):
    """CardDAV storage backend interface.

    Implementations provide storage and retrieval of address books and cards
    on behalf of a CardDAV server. Routing, XML marshalling and access
    control are the caller's responsibility.
    """

    async def list_addressbooks(self, principal: str) -> list[AddressBook]:
        """List all address books for a principal.

        Args:
            principal: Owning principal

        Returns:
            List of AddressBook objects (empty if the principal has none)
        """
        ...

    async def update_addressbook(self, addressbook_id: int, mutations: dict[str, Any]) -> bool:
        """Update an address book's properties.

        Args:
            addressbook_id: Address book id
            mutations: Property name (Clark notation) to new value

        Returns:
            True on success, False if any property is not supported
        """
        ...

    async def create_addressbook(
        self, principal: str, uri: str, properties: dict[str, Any]
    ) -> int:
        """Create a new address book.

        Args:
            principal: Owning principal
            uri: Basename of the address book url
            properties: Initial properties

        Returns:
            Id of the new address book

        Raises:
            HTTPError: If a property is unknown (400)
        """
        ...

    async def delete_addressbook(self, addressbook_id: int) -> None:
        """Delete an address book and all of its cards."""
        ...

    async def list_cards(self, addressbook_id: int) -> list[Card]:
        """List all cards in an address book."""
        ...

    async def get_card(self, addressbook_id: int, uri: str) -> Card | None:
        """Get a card.

        Returns:
            The Card, or None if it does not exist
        """
        ...

    async def create_card(self, addressbook_id: int, uri: str, body: str) -> str:
        """Create a card.

        Returns:
            Quoted ETag of the stored body
        """
        ...

    async def update_card(self, addressbook_id: int, uri: str, body: str) -> str:
        """Update a card.

        Returns:
            Quoted ETag of the stored body
        """
        ...

    async def delete_card(self, addressbook_id: int, uri: str) -> bool:
        """Delete a card."""
        ...
