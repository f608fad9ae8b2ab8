"""HTML parse stage producing HtmlDocument head metadata for previews."""

from __future__ import annotations

import re
from html.parser import HTMLParser

from core.models import HtmlDocument
from core.pipeline import ParseStage


_META_CHARSET_RE = re.compile(rb"<meta[^>]+charset=[\"']?([a-zA-Z0-9._-]+)", flags=re.IGNORECASE)
_CHARSET_SNIFF_BYTES = 2048


class _HeadMetadataParser(HTMLParser):
    """Capture title/meta/canonical metadata from HTML head."""

    def __init__(self) -> None:
        super().__init__()
        self.meta_tags: dict[str, str] = {}
        self.canonical_href: str | None = None
        self._capture_title = False
        self._title_chunks: list[str] = []

    @property
    def html_title(self) -> str | None:
        """Return normalized title text."""
        if not self._title_chunks:
            return None
        title = " ".join("".join(self._title_chunks).split())
        return title or None

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        attrs_map = {k.lower(): (v or "").strip() for k, v in attrs}
        tag_lower = tag.lower()
        if tag_lower == "meta":
            key = (attrs_map.get("property") or attrs_map.get("name") or "").lower()
            # First occurrence wins, matching how crawlers read duplicated og: tags.
            if key and "content" in attrs_map and key not in self.meta_tags:
                self.meta_tags[key] = attrs_map["content"]
            return

        if tag_lower == "link":
            rel = attrs_map.get("rel", "").lower()
            href = attrs_map.get("href", "")
            if "canonical" in rel.split() and href and self.canonical_href is None:
                self.canonical_href = href
            return

        if tag_lower == "title":
            self._capture_title = True

    def handle_endtag(self, tag: str) -> None:
        if tag.lower() == "title":
            self._capture_title = False

    def handle_data(self, data: str) -> None:
        if self._capture_title:
            self._title_chunks.append(data)


def decode_body(body: bytes) -> str:
    """Decode body bytes using a <meta charset> hint with safe fallback."""
    encodings: list[str] = []
    charset_match = _META_CHARSET_RE.search(body[:_CHARSET_SNIFF_BYTES])
    if charset_match:
        encodings.append(charset_match.group(1).decode("ascii"))
    encodings.extend(["utf-8", "latin-1"])

    for encoding in encodings:
        try:
            return body.decode(encoding)
        except (LookupError, UnicodeDecodeError):
            continue

    return body.decode("utf-8", errors="replace")


class HtmlParseStage(ParseStage):
    """Convert a fetched HTML body into HtmlDocument."""

    def parse(self, body: bytes, url: str) -> HtmlDocument:
        """Parse head metadata; empty bodies give empty documents."""
        if not body:
            return HtmlDocument(url=url)

        html_text = decode_body(body)
        head_parser = _HeadMetadataParser()
        head_parser.feed(html_text)
        head_parser.close()

        return HtmlDocument(
            url=url,
            html_title=head_parser.html_title,
            meta_tags=head_parser.meta_tags,
            canonical_href=head_parser.canonical_href,
            raw_html=html_text,
        )
