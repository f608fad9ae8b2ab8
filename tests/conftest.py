"""
Shared pytest fixtures and configuration for link-preview-fetch tests.
"""

import pytest

from core.models import FetchLimits


# ============================================================================
# Fixtures: Limits
# ============================================================================

@pytest.fixture
def limits() -> FetchLimits:
    """Small, deterministic limits for fetcher tests."""
    return FetchLimits(
        max_body_bytes=10_000,
        connect_timeout_seconds=2.0,
        read_timeout_seconds=3.0,
        overall_timeout_seconds=10.0,
        max_redirects=3,
        user_agent="test-agent/1.0",
        chunk_size=1024,
    )


# ============================================================================
# Fixtures: Clock
# ============================================================================

class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    """Clock that only moves when a test (or a test double) advances it."""
    return FakeClock()


# ============================================================================
# Fixtures: HTML
# ============================================================================

@pytest.fixture
def article_html() -> bytes:
    """Small article page with head metadata and a canonical link."""
    return (
        b"<!doctype html><html><head>"
        b'<meta charset="utf-8">'
        b"<title>  Example   Article </title>"
        b'<meta property="og:title" content="OG Title">'
        b'<meta property="og:description" content="A &lt;b&gt;short&lt;/b&gt; summary">'
        b'<meta property="og:image" content="/img/cover.png">'
        b'<link rel="canonical" href="https://example.com/posts/1">'
        b"</head><body>"
        b"<p>First paragraph.</p><script>var hidden = 1;</script><p>Second paragraph.</p>"
        b"</body></html>"
    )


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: end-to-end integration tests")
    config.addinivalue_line("markers", "unit: unit tests")
