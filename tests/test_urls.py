"""URL token cleanup, extraction and bare-URL autolinking."""

import pytest

from clawmark.urls import autolink_bare, extract_urls, is_host_only, is_safe_href, sanitize_url


@pytest.mark.parametrize("raw", [None, "", "   ", "\t\n"])
def test_sanitize_empty_inputs(raw):
    assert sanitize_url(raw) == ""


def test_sanitize_leaves_normal_url():
    assert sanitize_url("https://example.com/path") == "https://example.com/path"


def test_sanitize_strips_angle_brackets():
    assert sanitize_url("<https://example.com/path>") == "https://example.com/path"


@pytest.mark.parametrize("suffix", [")", "]", "}", ".", ",", ";", ":", "!", "?", "...", "**"])
def test_sanitize_strips_trailing_residue(suffix):
    assert sanitize_url("https://example.com/path" + suffix) == "https://example.com/path"


def test_sanitize_strips_percent_encoded_stars_case_insensitive():
    assert sanitize_url("https://example.com/path%2A%2a") == "https://example.com/path"


def test_sanitize_host_only_drops_slash():
    assert sanitize_url("https://example.com/") == "https://example.com"
    assert sanitize_url("http://example.com/") == "http://example.com"


def test_sanitize_path_keeps_slash():
    assert sanitize_url("https://example.com/p/") == "https://example.com/p/"
    assert sanitize_url("https://example.com/path/**") == "https://example.com/path/"


def test_sanitize_strips_stars_before_slash():
    assert sanitize_url("https://example.com**/") == "https://example.com"


def test_sanitize_trims_whitespace():
    assert sanitize_url("  https://example.com  ") == "https://example.com"


def test_sanitize_combination():
    assert sanitize_url("<https://example.com/path**.)>") == "https://example.com/path"


@pytest.mark.parametrize(
    "raw",
    [
        "https://x.com/.",
        "<<https://x.com/a>>",
        "https://x.com/a/.",
        "https://example.com/path%2A.",
        "https://x.com/%2a/",
        "plain text",
        "http://",
    ],
)
def test_sanitize_is_stable(raw):
    once = sanitize_url(raw)
    assert sanitize_url(once) == once


def test_sanitize_exposed_slash_on_host_only():
    assert sanitize_url("https://x.com/.") == "https://x.com"


def test_is_host_only():
    assert is_host_only("https://example.com")
    assert is_host_only("http://example.com:8080")
    assert not is_host_only("https://example.com/a")
    assert not is_host_only("ftp://example.com")


def test_is_safe_href():
    assert is_safe_href("https://a.com")
    assert is_safe_href("mailto:someone@example.com")
    assert is_safe_href("docs/readme.md")
    assert not is_safe_href("")
    assert not is_safe_href("javascript:alert(1")
    assert not is_safe_href("JavaScript:alert(1")
    assert not is_safe_href("data:text/html,hi")
    assert not is_safe_href("java\tscript:alert(1")


def test_extract_urls_none():
    assert extract_urls(None) == []
    assert extract_urls("hello world") == []


def test_extract_urls_single():
    assert extract_urls("visit https://example.com ok") == ["https://example.com"]


def test_extract_urls_deduplicates_after_cleanup():
    text = "https://a.com and https://b.com and https://a.com."
    assert extract_urls(text) == ["https://a.com", "https://b.com"]


def test_extract_urls_stops_at_angle_bracket():
    assert extract_urls("x https://a.com/p<b>") == ["https://a.com/p"]


def test_extract_urls_elements_are_sanitized():
    text = "(see https://a.com/x), **https://b.com/**, <https://c.com/y/>"
    urls = extract_urls(text)
    assert len(urls) == len(set(urls))
    assert all(sanitize_url(u) == u for u in urls)


def test_autolink_plain_text_unchanged():
    assert autolink_bare("hello world") == "hello world"


def test_autolink_wraps_bare_urls():
    assert autolink_bare("visit http://example.com now") == "visit <http://example.com> now"
    assert autolink_bare("see https://a.com and https://b.com") == (
        "see <https://a.com> and <https://b.com>"
    )


def test_autolink_trailing_punctuation_is_dropped():
    assert autolink_bare("see https://example.com.") == "see <https://example.com>"


def test_autolink_skips_fenced_code():
    text = "```\nhttps://example.com\n```"
    assert autolink_bare(text) == text


def test_autolink_skips_inline_code():
    text = "run `https://example.com` here"
    assert autolink_bare(text) == text


def test_autolink_after_fence():
    assert autolink_bare("```\ncode\n```\nhttps://example.com") == (
        "```\ncode\n```\n<https://example.com>"
    )


def test_autolink_breaks_markdown_link():
    # Not markdown-aware: the closing paren is swallowed by the sanitizer.
    assert autolink_bare("[click](https://example.com)") == "[click](<https://example.com>"


def test_autolink_none():
    assert autolink_bare(None) == ""
