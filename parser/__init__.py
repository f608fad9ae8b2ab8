"""Parser package for HTML head metadata + text helpers."""

from parser.html import HtmlParseStage, decode_body
from parser.text import clean_html, get_meta_value, is_blank, sanitize, truncate

__all__ = [
    "HtmlParseStage",
    "clean_html",
    "decode_body",
    "get_meta_value",
    "is_blank",
    "sanitize",
    "truncate",
]
