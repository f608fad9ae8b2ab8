"""
Default fetch configuration for link-preview-fetch.

These values seed `FetchLimits.default()`. They are read once when a
`FetchLimits` value is built and never consulted again mid-fetch; callers
that need different limits build their own `FetchLimits` instead of
mutating this class.

Design: defaults are "small + verified". Link previews only need the head
of a page, so the download budget is deliberately tight.
"""

from typing import Optional


class FetchDefaults:
    """
    Default limits for the bounded fetcher.
    """

    # ========================================================================
    # Timeouts
    # ========================================================================

    CONNECT_TIMEOUT_SECONDS: float = 5.0
    """Seconds to wait for the TCP/TLS connection to open."""

    TIMEOUT_SECONDS: float = 10.0
    """Read timeout and per-hop wall-clock budget (seconds)."""

    CHAIN_TIMEOUT_SECONDS: Optional[float] = None
    """Optional deadline across a whole redirect chain. None = per-hop only."""

    # ========================================================================
    # Size / redirect limits
    # ========================================================================

    MAX_DOWNLOAD_KB: int = 2048
    """Maximum body size in kilobytes (converted to bytes as kb * 1024)."""

    MAX_REDIRECTS: int = 5
    """Maximum redirect hops per fetch."""

    CHUNK_SIZE: int = 8192
    """Streaming chunk size in bytes."""

    # ========================================================================
    # Request identity / transport security
    # ========================================================================

    USER_AGENT: Optional[str] = "link-preview-fetch/0.1 (+https://example.org/link-preview-fetch)"
    """Default User-Agent, injected only when the caller did not set one."""

    VERIFY_TLS: bool = True
    """Verify TLS certificates. Disabling requires an explicit opt-in."""

    @classmethod
    def validate(cls) -> None:
        """
        Validate defaults at startup.

        Raises:
            AssertionError: If any default is out of range.
        """
        assert (
            cls.CONNECT_TIMEOUT_SECONDS > 0
        ), "CONNECT_TIMEOUT_SECONDS must be > 0"

        assert (
            cls.TIMEOUT_SECONDS > 0
        ), "TIMEOUT_SECONDS must be > 0"

        assert (
            cls.CHAIN_TIMEOUT_SECONDS is None or cls.CHAIN_TIMEOUT_SECONDS > 0
        ), "CHAIN_TIMEOUT_SECONDS must be None or > 0"

        assert (
            cls.MAX_DOWNLOAD_KB > 0
        ), "MAX_DOWNLOAD_KB must be > 0"

        assert (
            cls.MAX_REDIRECTS >= 0
        ), "MAX_REDIRECTS must be ≥0"

        assert (
            cls.CHUNK_SIZE > 0
        ), "CHUNK_SIZE must be > 0"


# Validate at module import time
FetchDefaults.validate()
