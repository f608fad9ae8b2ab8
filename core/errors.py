"""Fetch error taxonomy.

Every failure surfaced by the bounded fetcher is one of these, each tagged
with the FetchErrorCode written to fetch logs.
"""

from __future__ import annotations

from core.models import FetchErrorCode


class FetchError(Exception):
    """Base class for fetch failures."""

    code: FetchErrorCode = FetchErrorCode.FETCH_ERROR

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class DownloadTooLarge(FetchError):
    """Raised when a streamed body exceeds the byte budget."""

    code = FetchErrorCode.BODY_TOO_LARGE

    def __init__(self, limit_bytes: int, url: str | None = None) -> None:
        super().__init__(f"response exceeds {limit_bytes} bytes", url)
        self.limit_bytes = limit_bytes


class FetchTimeout(FetchError):
    """Raised when a hop (or the whole chain, when bounded) runs out of time."""

    code = FetchErrorCode.TIMEOUT


class TooManyRedirects(FetchError):
    """Raised when a redirect arrives with no redirect budget left."""

    code = FetchErrorCode.REDIRECT_LIMIT

    def __init__(self, max_redirects: int, url: str | None = None) -> None:
        super().__init__(f"redirects exceeded {max_redirects}", url)
        self.max_redirects = max_redirects


class HTTPStatusError(FetchError):
    """Raised for a final response other than 200."""

    code = FetchErrorCode.HTTP_ERROR

    def __init__(self, status_code: int, message: str, url: str | None = None) -> None:
        detail = f"HTTP {status_code}: {message}" if message else f"HTTP {status_code}"
        super().__init__(detail, url)
        self.status_code = status_code
        self.reason = message


class FetchConnectionError(FetchError):
    """Raised for DNS, connect, TLS, or malformed-target failures."""

    code = FetchErrorCode.FETCH_ERROR
