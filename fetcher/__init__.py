"""Fetcher subsystem: bounded HTTP retrieval with redirect, size, and time limits."""

from core.errors import (
    DownloadTooLarge,
    FetchConnectionError,
    FetchError,
    FetchTimeout,
    HTTPStatusError,
    TooManyRedirects,
)
from fetcher.http import BoundedFetcher, fetch_content_length, fetch_response
from fetcher.logging import emit_event, emit_fetch_log

__all__ = [
    "BoundedFetcher",
    "DownloadTooLarge",
    "FetchConnectionError",
    "FetchError",
    "FetchTimeout",
    "HTTPStatusError",
    "TooManyRedirects",
    "emit_event",
    "emit_fetch_log",
    "fetch_content_length",
    "fetch_response",
]
