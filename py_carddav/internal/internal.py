"""Error types shared by the storage core and its callers."""

from __future__ import annotations

from typing import Any


class HTTPError(Exception):
    """HTTP error with status code."""

    def __init__(self, code: int, err: Exception | None = None):
        self.code = code
        self.err = err
        super().__init__(str(self))

    def __str__(self) -> str:
        from http import HTTPStatus

        try:
            text = HTTPStatus(self.code).phrase
        except ValueError:
            text = "Unknown"

        s = f"{self.code} {text}"
        if self.err:
            return f"{s}: {self.err}"
        return s


def http_errorf(code: int, format_str: str, *args: Any) -> HTTPError:
    """Create an HTTPError with a formatted message."""
    return HTTPError(code, Exception(format_str % args if args else format_str))


class BatchError(Exception):
    """One or more commands of a store batch failed.

    The batch was transmitted and executed as a unit; commands that did not
    fail are not rolled back.
    """

    def __init__(self, label: str, failures: list[tuple[str, Exception]]):
        self.label = label
        self.failures = failures
        super().__init__(str(self))

    def __str__(self) -> str:
        details = "; ".join(f"{command}: {err}" for command, err in self.failures)
        return f"batch {self.label!r} failed ({len(self.failures)} command(s)): {details}"


def is_wrong_type(err: Exception | None) -> bool:
    """Check if a store error means a key holds an unexpected data type."""
    return str(err).startswith("WRONGTYPE")
