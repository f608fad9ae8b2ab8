"""Unit tests for quality/urlnorm.py resolution and output normalization."""

from __future__ import annotations

import pytest

from quality.urlnorm import host_and_path, normalize_url_for_output, origin_of, resolve_absolute_url


@pytest.mark.unit
@pytest.mark.parametrize(
    ("src", "base", "expected"),
    [
        ("//example.com/a.png", "https://site.org/x", "https://example.com/a.png"),
        ("//example.com/a.png", "http://site.org/x", "http://example.com/a.png"),
        ("img/a.png", "https://site.org/page", "https://site.org/img/a.png"),
        ("img/a.png", "https://site.org/blog/post", "https://site.org/blog/img/a.png"),
        ("img/a.png", "https://site.org/blog/", "https://site.org/blog/img/a.png"),
        ("img/a.png", "https://site.org", "https://site.org/img/a.png"),
        ("/img/a.png", "https://site.org/blog/post", "https://site.org/img/a.png"),
        ("a.png", "http://site.org:8080/", "http://site.org:8080/a.png"),
        ("https://cdn.example.com/a.png", "https://site.org/x", "https://cdn.example.com/a.png"),
        ("HTTP://cdn.example.com/a.png", "https://site.org/x", "HTTP://cdn.example.com/a.png"),
    ],
)
def test_resolve_absolute_url(src, base, expected):
    assert resolve_absolute_url(src, base) == expected


@pytest.mark.unit
def test_resolve_absolute_url_passes_through_missing_src():
    assert resolve_absolute_url(None, "https://site.org/") is None
    assert resolve_absolute_url("", "https://site.org/") == ""


@pytest.mark.unit
def test_origin_of_keeps_explicit_port_and_drops_userinfo():
    assert origin_of("https://user:pw@Example.com:8443/x?y=1") == "https://example.com:8443"
    assert origin_of("http://example.com/path") == "http://example.com"


@pytest.mark.unit
def test_host_and_path_ignores_query_and_fragment():
    assert host_and_path("https://Example.com/a/b?utm=1#top") == "example.com/a/b"


@pytest.mark.unit
def test_normalize_url_for_output_escapes_quotes_and_spaces():
    assert normalize_url_for_output("a b'c\"d") == "a%20b&apos;c&quot;d"


@pytest.mark.unit
def test_normalize_url_for_output_drops_markup_characters():
    assert normalize_url_for_output("https://x.com/<script>alert(1)</script>") == (
        "https://x.com/scriptalert(1)/script"
    )


@pytest.mark.unit
def test_normalize_url_for_output_drops_unsafe_ascii():
    assert normalize_url_for_output("a{b}|c\\d^e\nf") == "abcdef"


@pytest.mark.unit
def test_normalize_url_for_output_keeps_allowed_punctuation():
    url = "https://x.com/p-`.~:/?#[]@!$&()*+,;=%20"

    assert normalize_url_for_output(url) == url


@pytest.mark.unit
def test_normalize_url_for_output_keeps_combining_marks_and_right_quote():
    assert normalize_url_for_output("e\u0301\u2019s") == "e\u0301\u2019s"
    assert normalize_url_for_output("x\u200by") == "xy"


@pytest.mark.unit
def test_normalize_url_for_output_none_is_empty():
    assert normalize_url_for_output(None) == ""


@pytest.mark.unit
def test_normalize_url_for_output_drops_non_ascii_letters():
    assert normalize_url_for_output("https://x.com/caféａ") == "https://x.com/caf"
    assert normalize_url_for_output("https://x.com/рay") == "https://x.com/ay"
