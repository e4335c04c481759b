"""CardDAV storage types.

CardDAV is defined in RFC 6352. Only the properties the storage layer
persists or synthesizes are modelled here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from hashlib import md5
from typing import Any

from lxml import etree

NAMESPACE = "DAV:"
CARDDAV_NAMESPACE = "urn:ietf:params:xml:ns:carddav"
CALENDARSERVER_NAMESPACE = "http://calendarserver.org/ns/"

# Property names (Clark notation)
DISPLAY_NAME = f"{{{NAMESPACE}}}displayname"
ADDRESSBOOK_DESCRIPTION = f"{{{CARDDAV_NAMESPACE}}}addressbook-description"
SUPPORTED_ADDRESS_DATA = f"{{{CARDDAV_NAMESPACE}}}supported-address-data"
GETCTAG = f"{{{CALENDARSERVER_NAMESPACE}}}getctag"

# Writable address book properties mapped to their stored field names
WRITABLE_PROPERTIES = {
    DISPLAY_NAME: "displayName",
    ADDRESSBOOK_DESCRIPTION: "description",
}


@dataclass(frozen=True)
class AddressDataType:
    """A content type/version pair an address book accepts."""

    content_type: str = "text/vcard"
    version: str = "3.0"


@dataclass(frozen=True)
class SupportedAddressData:
    """CARDDAV:supported-address-data property value."""

    types: tuple[AddressDataType, ...] = (
        AddressDataType("text/vcard", "3.0"),
        AddressDataType("text/vcard", "4.0"),
    )

    def to_xml(self) -> etree._Element:
        """Convert to XML element."""
        elem = etree.Element(SUPPORTED_ADDRESS_DATA)
        for data_type in self.types:
            addr_data_type = etree.SubElement(elem, f"{{{CARDDAV_NAMESPACE}}}address-data-type")
            addr_data_type.set("content-type", data_type.content_type)
            addr_data_type.set("version", data_type.version)
        return elem


@dataclass
class AddressBook:
    """CardDAV address book collection as stored for one principal."""

    id: int
    uri: str
    principal: str
    display_name: str | None = None
    description: str | None = None
    ctag: int = 1
    properties: dict[str, Any] = field(default_factory=dict)


@dataclass
class Card:
    """CardDAV address object (opaque vCard body)."""

    addressbook_id: int
    uri: str
    body: str
    last_modified: datetime | None = None

    @property
    def etag(self) -> str:
        """Quoted content fingerprint of the body."""
        return compute_etag(self.body)

    @property
    def size(self) -> int:
        """Size of the body in bytes."""
        return len(self.body.encode("utf-8"))


def compute_etag(body: str) -> str:
    """Compute the ETag for a card body.

    The ETag is the MD5 hex digest of the UTF-8 encoded body, enclosed in
    double quotes. Identical bodies always produce the same ETag.
    """
    return f'"{md5(body.encode("utf-8")).hexdigest()}"'


def to_millis(dt: datetime) -> int:
    """Convert a datetime to integer milliseconds since the epoch."""
    return int(dt.timestamp() * 1000)


def from_millis(value: str | int | None) -> datetime | None:
    """Parse a stored millisecond timestamp; unparsable values yield None."""
    if value is None:
        return None
    try:
        return datetime.fromtimestamp(int(value) / 1000, tz=UTC)
    except (TypeError, ValueError, OverflowError):
        return None
