"""
Core Pydantic models for link-preview-fetch.

Design principles:
- Limits are immutable values passed explicitly into every fetch
- Every fetch produces exactly one FetchLog (success or failure)
- Parsed documents carry only head metadata, never the DOM
"""

from datetime import datetime
from enum import Enum
from typing import Optional, Dict
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.config import FetchDefaults


# ============================================================================
# Enums
# ============================================================================

class FetchErrorCode(str, Enum):
    """Why did a fetch fail?"""
    TIMEOUT = "TIMEOUT"
    FETCH_ERROR = "FETCH_ERROR"  # DNS / connect / TLS
    BODY_TOO_LARGE = "BODY_TOO_LARGE"
    REDIRECT_LIMIT = "REDIRECT_LIMIT"
    HTTP_ERROR = "HTTP_ERROR"  # Final non-200, non-redirect status


# ============================================================================
# Fetch Limits
# ============================================================================

class FetchLimits(BaseModel):
    """
    Read-only limits for one fetch call (and every hop of its redirect chain).

    Build once, share freely: the model is frozen, so concurrent fetches can
    hold the same instance without coordination.

    Example:
      limits = FetchLimits.from_kilobytes(max_download_kb=512, max_redirects=3)
      fetch_response("https://example.com", limits=limits)
    """
    model_config = ConfigDict(frozen=True)

    max_body_bytes: int = Field(gt=0)
    connect_timeout_seconds: float = Field(default=FetchDefaults.CONNECT_TIMEOUT_SECONDS, gt=0)
    read_timeout_seconds: float = Field(default=FetchDefaults.TIMEOUT_SECONDS, gt=0)
    overall_timeout_seconds: float = Field(default=FetchDefaults.TIMEOUT_SECONDS, gt=0)
    max_redirects: int = Field(default=FetchDefaults.MAX_REDIRECTS, ge=0)
    user_agent: Optional[str] = FetchDefaults.USER_AGENT

    # Certificate verification is on unless a caller opts out explicitly.
    verify_tls: bool = FetchDefaults.VERIFY_TLS

    # None keeps per-hop semantics: each hop gets overall_timeout_seconds.
    chain_timeout_seconds: Optional[float] = FetchDefaults.CHAIN_TIMEOUT_SECONDS
    chunk_size: int = Field(default=FetchDefaults.CHUNK_SIZE, gt=0)

    @field_validator("chain_timeout_seconds")
    @classmethod
    def _positive_chain_timeout(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and value <= 0:
            raise ValueError("chain_timeout_seconds must be > 0 when set")
        return value

    @classmethod
    def from_kilobytes(cls, max_download_kb: int, **overrides) -> "FetchLimits":
        """Build limits from the kilobyte-based configuration surface."""
        if max_download_kb <= 0:
            raise ValueError("max_download_kb must be > 0")
        return cls(max_body_bytes=max_download_kb * 1024, **overrides)

    @classmethod
    def default(cls) -> "FetchLimits":
        """Build limits from FetchDefaults."""
        return cls.from_kilobytes(FetchDefaults.MAX_DOWNLOAD_KB)


# ============================================================================
# Fetch / Network Logging
# ============================================================================

class FetchLog(BaseModel):
    """
    Log entry for a single top-level fetch (all hops of its redirect chain).
    """
    id: str = Field(default_factory=lambda: str(uuid4()))
    url: str

    status_code: Optional[int] = None  # Final HTTP status, when one was received
    latency_ms: Optional[int] = None
    bytes_received: Optional[int] = None
    redirects_followed: int = 0

    error_code: Optional[FetchErrorCode] = None
    error_message: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    run_id: Optional[str] = None


# ============================================================================
# Parsed Documents
# ============================================================================

class HtmlDocument(BaseModel):
    """
    Head metadata pulled from a fetched HTML page.

    An empty document (raw_html == "") stands in for a page that could not be
    fetched; consumers treat it as "no metadata".
    """
    url: str
    html_title: Optional[str] = None
    meta_tags: Dict[str, str] = Field(default_factory=dict)  # property/name -> content
    canonical_href: Optional[str] = None
    raw_html: str = ""

    @property
    def is_empty(self) -> bool:
        """True when no markup was available to parse."""
        return not self.raw_html

    def meta(self, key: str) -> Optional[str]:
        """Look up a meta tag by lowercase property/name."""
        return self.meta_tags.get(key.lower())
