"""RFC3986-aware URI encoding for URLs re-emitted as request targets or markup.

The codec is a best-effort normalizer, not a validator: every input string
parses, and each component is re-encoded with the character set RFC3986
reserves for it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import quote, unquote


RFC_3986_URI_RE = re.compile(
    r"^(?P<scheme_part>(?P<scheme>[^:/?#]+):)?"
    r"(?P<authority_part>//(?P<authority>[^/?#]*))?"
    r"(?P<path>[^?#]*)"
    r"(\?(?P<query>[^#]*))?"
    r"(#(?P<fragment>.*))?$",
    flags=re.DOTALL,
)
DOUBLE_ESCAPED_RE = re.compile(r"%25([0-9a-f]{2})", flags=re.IGNORECASE)

# pchar minus "%" (RFC3986 3.3); unreserved characters are always safe for quote().
_PATH_SAFE = "/:@!$&'()*+,;="

# Hash-bang fragments ("#!/route") are left readable.
_HASHBANG_ESCAPED = "%21%2F"


@dataclass(frozen=True, slots=True)
class URIComponents:
    """The five generic-syntax components of a URI (delimiters stripped)."""

    path: str
    scheme: str | None = None
    authority: str | None = None
    query: str | None = None
    fragment: str | None = None

    def unparse(self) -> str:
        """Reassemble components with their delimiters."""
        parts: list[str] = []
        if self.scheme is not None:
            parts.append(f"{self.scheme}:")
        if self.authority is not None:
            parts.append(f"//{self.authority}")
        parts.append(self.path)
        if self.query is not None:
            parts.append(f"?{self.query}")
        if self.fragment is not None:
            parts.append(f"#{self.fragment}")
        return "".join(parts)


def parse_uri(uri: str) -> URIComponents:
    """Split a URI into scheme, authority, path, query, and fragment."""
    match = RFC_3986_URI_RE.match(uri)
    if match is None:
        raise ValueError(f"Unparseable URI: {uri!r}")
    return URIComponents(
        scheme=match.group("scheme"),
        authority=match.group("authority"),
        path=match.group("path") or "",
        query=match.group("query"),
        fragment=match.group("fragment"),
    )


def uri_query_encode(query_string: str | None) -> str:
    """
    Percent-encode one query (or fragment) value.

    - space becomes %20, never "+"
    - a literal "+" becomes %2B
    - an existing "%" is kept as-is, so already-encoded values are stable
    """
    if not query_string:
        return ""
    return quote(query_string, safe="").replace("%25", "%")


def _encode_query(query: str) -> str:
    pairs = []
    for pair in query.split("&"):
        pairs.append("=".join(uri_query_encode(part) for part in pair.split("=", 1)))
    return "&".join(pairs)


def uri_encode(url: str | None) -> str:
    """
    Percent-encode a URI component by component.

    Scheme and authority are copied verbatim. The path keeps "+" and encodes
    space as %20; a %25XX left over from encoding an already-encoded path is
    collapsed back to %XX. Query pairs and the fragment use the query encoder.
    """
    if url is None:
        return ""

    parts = parse_uri(url)

    encoded = ""
    if parts.scheme is not None:
        encoded += f"{parts.scheme}:"
    if parts.authority is not None:
        encoded += f"//{parts.authority}"
    encoded += quote(parts.path, safe=_PATH_SAFE)
    encoded = DOUBLE_ESCAPED_RE.sub(r"%\1", encoded)

    if parts.query is not None:
        encoded += "?" + _encode_query(parts.query)

    if parts.fragment is not None:
        encoded += "#" + uri_query_encode(parts.fragment).replace(_HASHBANG_ESCAPED, "!/")

    return encoded


def uri_decode(url: str | None) -> str:
    """Best-effort percent-decoding; "+" is left alone."""
    if not url:
        return ""
    return unquote(url)
