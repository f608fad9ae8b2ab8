"""URL resolution and output normalization for preview markup."""

from __future__ import annotations

import re
import unicodedata
from urllib.parse import urlsplit


_HTTP_SCHEME_RE = re.compile(r"^https?://", flags=re.IGNORECASE)

# ASCII word characters plus URL punctuation; combining marks are checked separately.
_OUTPUT_ALLOWED_RE = re.compile(r"[\w\-`.~:/?#\[\]@!$&'()*+,;=%’]", flags=re.ASCII)


def _host_with_port(url: str) -> str:
    """Return host[:port] of a URL (userinfo dropped, default ports omitted)."""
    parts = urlsplit(url)
    host = parts.hostname or ""
    if parts.port:
        return f"{host}:{parts.port}"
    return host


def origin_of(url: str) -> str:
    """Return scheme://host[:port] for a URL."""
    return f"{urlsplit(url).scheme}://{_host_with_port(url)}"


def host_and_path(url: str) -> str:
    """Return host + path, the identity used when comparing canonical links."""
    parts = urlsplit(url)
    return f"{parts.hostname or ''}{parts.path}"


def _base_directory(path: str) -> str:
    """Directory portion of a path: "/a/b" -> "/a", "/a/" -> "/a", "/page" -> ""."""
    return path.rsplit("/", 1)[0] if "/" in path else ""


def resolve_absolute_url(src: str | None, url: str) -> str | None:
    """
    Resolve a possibly relative `src` against the page URL `url`.

    Rules:
    - "//host/x" (scheme-relative) takes the page scheme
    - a src without http(s):// is joined under the page host, below the
      page's directory when src is not rooted with "/"
    - http(s) URLs pass through unchanged
    """
    if not src:
        return src

    base = urlsplit(url)
    if src.startswith("//"):
        return f"{base.scheme}:{src}"

    if _HTTP_SCHEME_RE.match(src):
        return src

    host = _host_with_port(url).removesuffix("/")
    relative = src.removeprefix("/")
    base_dir = _base_directory(base.path).removesuffix("/")

    if not src.startswith("/") and base_dir.strip():
        return f"{base.scheme}://{host}{base_dir}/{relative}"
    return f"{base.scheme}://{host}/{relative}"


def normalize_url_for_output(url: str | None) -> str:
    """
    Make an (already percent-encoded) URL safe to drop into HTML attribute text.

    Quotes become entities, spaces become %20, and anything outside the URL
    allow-list is removed. Run this last, after uri_encode.
    """
    if url is None:
        return ""

    url = url.replace(" ", "%20")
    url = url.replace("'", "&apos;")
    url = url.replace('"', "&quot;")
    return "".join(
        char
        for char in url
        if _OUTPUT_ALLOWED_RE.match(char) or unicodedata.category(char).startswith("M")
    )
