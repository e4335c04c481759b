"""Internal helpers for py-carddav."""

from .internal import BatchError, HTTPError, http_errorf, is_wrong_type

__all__ = [
    "BatchError",
    "HTTPError",
    "http_errorf",
    "is_wrong_type",
]
