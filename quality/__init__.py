"""Quality utilities: URI encoding, URL resolution, and output normalization."""

from quality.humanize import pretty_filesize
from quality.uri import URIComponents, parse_uri, uri_decode, uri_encode, uri_query_encode
from quality.urlnorm import normalize_url_for_output, origin_of, resolve_absolute_url

__all__ = [
    "URIComponents",
    "normalize_url_for_output",
    "origin_of",
    "parse_uri",
    "pretty_filesize",
    "resolve_absolute_url",
    "uri_decode",
    "uri_encode",
    "uri_query_encode",
]
