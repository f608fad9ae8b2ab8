"""Text helpers applied to metadata values pulled from parsed documents.

None of these are used on URLs; URLs go through quality.urlnorm instead.
"""

from __future__ import annotations

import html
import re
from html.parser import HTMLParser
from typing import Any, Mapping


_TAG_RE = re.compile(r"<[^>]+>")
_SKIPPED_CONTENT_TAGS = {"script", "style", "noscript", "template", "iframe", "svg", "math"}


class _FragmentTextCollector(HTMLParser):
    """Collect character data from an HTML fragment, dropping script/style payloads."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self._skip_depth = 0
        self._chunks: list[str] = []

    @property
    def text(self) -> str:
        return "".join(self._chunks)

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        _ = attrs
        if tag.lower() in _SKIPPED_CONTENT_TAGS:
            self._skip_depth += 1

    def handle_endtag(self, tag: str) -> None:
        if tag.lower() in _SKIPPED_CONTENT_TAGS and self._skip_depth > 0:
            self._skip_depth -= 1

    def handle_data(self, data: str) -> None:
        if self._skip_depth == 0:
            self._chunks.append(data)


def is_blank(value: Any) -> bool:
    """True for None, False, whitespace-only strings, and empty containers."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if hasattr(value, "__len__"):
        return len(value) == 0
    return value is False


def clean_html(html: str) -> str:
    """Replace every tag with a space and drop newlines."""
    return _TAG_RE.sub(" ", html).replace("\n", "")


def truncate(text: str, length: int = 50) -> str:
    """Cut at the last space at or before `length` and append "..."."""
    if len(text) <= length:
        return text
    cut = text.rfind(" ", 0, length + 1)
    if cut == -1:
        cut = length
    return text[:cut] + "..."


def sanitize(value: str | None) -> str | None:
    """
    Strip markup from a metadata value; None when nothing readable is left.

    Entities are decoded while collecting text, so the result is re-escaped:
    "&lt;script&gt;" stays inert instead of becoming a live tag.
    """
    if is_blank(value):
        return None
    collector = _FragmentTextCollector()
    collector.feed(value)
    collector.close()
    return html.escape(collector.text.strip(), quote=False)


def get_meta_value(meta: Mapping[str, str] | None, attr: str) -> str | None:
    """Sanitized meta[attr], or None when missing or blank."""
    if not meta or is_blank(meta.get(attr)):
        return None
    return sanitize(meta[attr])
