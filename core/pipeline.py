"""
Pipeline interface for link-preview-fetch.

Defines the contract for turning a URL into preview metadata:
fetch → parse → (optional) canonical re-fetch → parse

This is intentionally minimal:
- Fetch errors are the only errors swallowed, and only here
- At most one extra fetch (the canonical link) per run
- No retries (redirects are followed inside the fetch stage)
"""

from abc import ABC, abstractmethod
from typing import Mapping, Optional

from core.errors import FetchError
from core.models import HtmlDocument
from core.structured_logging import emit_json_event
from quality.uri import uri_encode
from quality.urlnorm import host_and_path, resolve_absolute_url


IGNORE_CANONICAL_META = "og:ignore_canonical"


# ============================================================================
# Stage Interfaces
# ============================================================================

class FetchStage(ABC):
    """
    Fetch stage: given a URL, download its body under size/time/redirect limits.

    Responsibilities:
    - Follow 301/302 redirects up to the configured depth
    - Abort oversized or slow bodies (never return a partial body)
    - Observability: log every fetch (success + error)
    """

    @abstractmethod
    def fetch(
        self,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        run_id: Optional[str] = None,
    ) -> bytes:
        """
        Fetch a single URL.

        Args:
            url: URL to fetch
            headers: Extra request headers
            run_id: Run ID for tracking

        Returns:
            The complete response body

        Raises:
            FetchError: One subclass per failure kind
        """
        pass


class ParseStage(ABC):
    """
    Parse stage: convert bytes → HtmlDocument.

    Responsibilities:
    - Extract head metadata (title, meta tags, canonical link)
    """

    @abstractmethod
    def parse(self, body: bytes, url: str) -> HtmlDocument:
        """
        Parse downloaded content.

        Args:
            body: Raw response body
            url: URL the body was fetched from

        Returns:
            HtmlDocument with head metadata
        """
        pass


# ============================================================================
# Preview Pipeline
# ============================================================================

class PreviewPipeline:
    """
    Fetch a page and prefer its canonical version when it points elsewhere.

    Usage:
        pipeline = PreviewPipeline(BoundedFetcher(limits), HtmlParseStage())
        document = pipeline.run("https://example.com/post?utm_source=x")
    """

    def __init__(self, fetch: FetchStage, parse: ParseStage):
        """Initialize pipeline stage instances."""
        self.fetch = fetch
        self.parse = parse

    @staticmethod
    def _emit_pipeline_event(
        event_type: str,
        *,
        run_id: Optional[str],
        level: str = "info",
        **payload: object,
    ) -> None:
        """Emit a structured pipeline event."""
        emit_json_event(
            event_type,
            run_id=run_id,
            level=level,
            component="pipeline",
            **payload,
        )

    def _fetch_document(
        self,
        url: str,
        headers: Optional[Mapping[str, str]],
        run_id: Optional[str],
    ) -> HtmlDocument:
        """Fetch + parse one URL; a failed fetch yields an empty document."""
        try:
            body = self.fetch.fetch(url, headers=headers, run_id=run_id)
        except FetchError as exc:
            self._emit_pipeline_event(
                "preview_fetch_failed",
                run_id=run_id,
                level="warning",
                url=url,
                error_code=exc.code.value,
                error=str(exc),
            )
            return HtmlDocument(url=url)
        return self.parse.parse(body, url)

    def _canonical_target(self, document: HtmlDocument, url: str) -> Optional[str]:
        """Return the canonical URL to re-fetch, or None when the page is already canonical."""
        if (document.meta(IGNORE_CANONICAL_META) or "").strip() == "true":
            return None
        if not document.canonical_href:
            return None

        canonical = resolve_absolute_url(document.canonical_href, url)
        if host_and_path(canonical) == host_and_path(url):
            return None
        return uri_encode(canonical)

    def run(
        self,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        run_id: Optional[str] = None,
    ) -> HtmlDocument:
        """
        Execute fetch → parse, then follow the canonical link at most once.

        The canonical document replaces the original only when its fetch
        succeeds; otherwise the original document is returned.
        """
        document = self._fetch_document(url, headers, run_id)

        canonical = self._canonical_target(document, url)
        if canonical is None:
            return document

        self._emit_pipeline_event(
            "preview_canonical_followed",
            run_id=run_id,
            url=url,
            canonical_url=canonical,
        )
        canonical_document = self._fetch_document(canonical, headers, run_id)
        if canonical_document.is_empty:
            return document
        return canonical_document
