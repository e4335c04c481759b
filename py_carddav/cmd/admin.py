"""CardDAV store command-line tool."""

import argparse
import asyncio
import sys

from redis.exceptions import RedisError

from py_carddav.carddav import ADDRESSBOOK_DESCRIPTION, DISPLAY_NAME, CardDAVBackend
from py_carddav.internal import BatchError, HTTPError


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        description="Inspect and maintain a Redis CardDAV store",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List the address books of a principal
  py-carddav-admin list-addressbooks principals/alice

  # Create an address book
  py-carddav-admin create-addressbook principals/alice home --display-name "Home"

  # Store a card from a file (created if missing, updated otherwise)
  py-carddav-admin put-card 1 bob.vcf bob.vcf

The store is selected with --url or the CARDDAV_REDIS_URL environment variable.
        """,
    )
    parser.add_argument(
        "--url",
        default=None,
        help="Redis url (default: $CARDDAV_REDIS_URL or redis://localhost:6379/0)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="enable debug logging (logs every store batch as JSON)",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("list-addressbooks", help="list address books of a principal")
    p.add_argument("principal")

    p = sub.add_parser("create-addressbook", help="create an address book")
    p.add_argument("principal")
    p.add_argument("uri")
    p.add_argument("--display-name")
    p.add_argument("--description")

    p = sub.add_parser("update-addressbook", help="change display name or description")
    p.add_argument("addressbook_id", type=int)
    p.add_argument("--display-name")
    p.add_argument("--description")

    p = sub.add_parser("delete-addressbook", help="delete an address book and its cards")
    p.add_argument("addressbook_id", type=int)

    p = sub.add_parser("list-cards", help="list cards of an address book")
    p.add_argument("addressbook_id", type=int)

    p = sub.add_parser("get-card", help="print a card body")
    p.add_argument("addressbook_id", type=int)
    p.add_argument("uri")

    p = sub.add_parser("put-card", help="create or update a card")
    p.add_argument("addressbook_id", type=int)
    p.add_argument("uri")
    p.add_argument("file", help="file with the vCard data ('-' for stdin)")

    p = sub.add_parser("delete-card", help="delete a card")
    p.add_argument("addressbook_id", type=int)
    p.add_argument("uri")

    return parser


def _properties(args: argparse.Namespace) -> dict[str, str]:
    props = {}
    if args.display_name is not None:
        props[DISPLAY_NAME] = args.display_name
    if args.description is not None:
        props[ADDRESSBOOK_DESCRIPTION] = args.description
    return props


def _read_body(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, encoding="utf-8") as f:
        return f.read()


async def run(args: argparse.Namespace, backend: CardDAVBackend) -> int:
    """Execute a parsed command against a backend.

    Returns:
        Process exit code
    """
    if args.command == "list-addressbooks":
        for ab in await backend.list_addressbooks(args.principal):
            print(f"{ab.id}\t{ab.uri}\tctag={ab.ctag}\t{ab.display_name or ''}")

    elif args.command == "create-addressbook":
        addressbook_id = await backend.create_addressbook(args.principal, args.uri, _properties(args))
        print(addressbook_id)

    elif args.command == "update-addressbook":
        if not await backend.update_addressbook(args.addressbook_id, _properties(args)):
            print("Error: nothing to update", file=sys.stderr)
            return 1

    elif args.command == "delete-addressbook":
        await backend.delete_addressbook(args.addressbook_id)

    elif args.command == "list-cards":
        for card in await backend.list_cards(args.addressbook_id):
            modified = card.last_modified.isoformat() if card.last_modified else "-"
            print(f"{card.uri}\t{card.etag}\t{card.size}\t{modified}")

    elif args.command == "get-card":
        card = await backend.get_card(args.addressbook_id, args.uri)
        if card is None:
            print(f"Error: card not found: {args.uri}", file=sys.stderr)
            return 1
        print(card.body)

    elif args.command == "put-card":
        body = _read_body(args.file)
        if await backend.get_card(args.addressbook_id, args.uri) is None:
            etag = await backend.create_card(args.addressbook_id, args.uri, body)
        else:
            etag = await backend.update_card(args.addressbook_id, args.uri, body)
        print(etag)

    elif args.command == "delete-card":
        await backend.delete_card(args.addressbook_id, args.uri)

    return 0


async def _main(args: argparse.Namespace) -> int:
    from py_carddav.store import StoreClient, StoreConfig

    config = StoreConfig()
    if args.url:
        config.url = args.url

    async with StoreClient(config) as client:
        try:
            return await run(args, client.backend())
        except (HTTPError, BatchError, RedisError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the store admin tool."""
    args = build_parser().parse_args(argv)

    # Setup debug logging if requested
    if args.debug:
        from py_carddav.debug import setup_debug_logging
        setup_debug_logging()

    sys.exit(asyncio.run(_main(args)))


if __name__ == "__main__":
    main()
