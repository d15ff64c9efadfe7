"""URL token cleanup, bulk extraction and bare-URL autolinking."""

from __future__ import annotations

import re

_ASCII_WHITESPACE = " \t\n\r\f\v"
_TRAILING_PUNCT = ")]}.,;:!?*"
_URL_RE = re.compile(r"https?://[^\s<]+")
_SCHEME_RE = re.compile(r"^([A-Za-z][A-Za-z0-9+.-]*):")
_SAFE_SCHEMES = frozenset({"http", "https", "mailto"})


def _as_text(value) -> str:
    return "" if value is None else str(value)


def _host_only_span(s: str, start: int, end: int) -> bool:
    if s.startswith("https://", start, end):
        host = start + 8
    elif s.startswith("http://", start, end):
        host = start + 7
    else:
        return False
    return s.find("/", host, end) == -1


def is_host_only(url: str) -> bool:
    """True for ``http(s)://host`` with nothing after the host."""
    return _host_only_span(url, 0, len(url))


def _strip_residue(s: str, start: int, end: int) -> int:
    while end > start:
        if s[end - 1] in _TRAILING_PUNCT:
            end -= 1
        elif end - start >= 3 and s[end - 3 : end].lower() == "%2a":
            end -= 3
        else:
            break
    return end


def sanitize_url(raw) -> str:
    """Clean a candidate URL token glued to chat punctuation or markdown residue.

    Strips surrounding angle brackets, trailing emphasis stars, percent-encoded
    stars and sentence punctuation. A trailing slash survives unless the URL is
    host-only. Returns ``""`` when nothing is left.

    The passes repeat until nothing changes, so the result is stable under a
    second call. The token is tracked as ``s[start:end]`` plus an optional
    kept slash and never copied.
    """
    s = _as_text(raw)
    start, end = 0, len(s)
    # The kept slash sits after s[start:end], past any residue stripped in front of it.
    slash = False
    while True:
        state = (start, end, slash)

        while start < end and s[start] in _ASCII_WHITESPACE:
            start += 1
        if not slash:
            while end > start and s[end - 1] in _ASCII_WHITESPACE:
                end -= 1
            if start == end:
                return ""
            if end - start >= 2 and s[start] == "<" and s[end - 1] == ">":
                start += 1
                end -= 1
            if end > start and s[end - 1] == "/":
                end -= 1
                slash = True

        end = _strip_residue(s, start, end)
        if slash and _host_only_span(s, start, end):
            slash = False

        if (start, end, slash) == state:
            return s[start:end] + ("/" if slash else "")


def is_safe_href(url: str) -> bool:
    """Whether a sanitized URL may be placed in an ``href`` attribute."""
    if not url:
        return False
    if any(ord(ch) <= 0x20 or ord(ch) == 0x7F for ch in url):
        return False
    m = _SCHEME_RE.match(url)
    if m is None:
        return True
    return m.group(1).lower() in _SAFE_SCHEMES


def extract_urls(raw) -> list[str]:
    """Harvest bare http(s) URLs, sanitized and deduplicated in first-seen order."""
    seen: set[str] = set()
    urls: list[str] = []
    for match in _URL_RE.finditer(_as_text(raw)):
        url = sanitize_url(match.group(0))
        if not url or url in seen:
            continue
        seen.add(url)
        urls.append(url)
    return urls


def autolink_bare(md) -> str:
    """Wrap bare URLs outside code spans and fences in ``<...>``.

    Not aware of ``[label](url)`` syntax: the URL inside the parentheses is
    treated as bare, and the closing paren is swallowed by the sanitizer.
    """
    s = _as_text(md)
    out: list[str] = []
    i = 0
    n = len(s)
    in_fence = False
    in_inline = False

    while i < n:
        if not in_inline and s.startswith("```", i):
            in_fence = not in_fence
            out.append("```")
            i += 3
            continue

        if not in_fence and s[i] == "`":
            in_inline = not in_inline
            out.append("`")
            i += 1
            continue

        if not in_fence and not in_inline and (
            s.startswith("http://", i) or s.startswith("https://", i)
        ):
            j = i
            while j < n and not s[j].isspace():
                j += 1
            token = s[i:j]
            url = sanitize_url(token)
            out.append(f"<{url}>" if url else token)
            i = j
            continue

        out.append(s[i])
        i += 1

    return "".join(out)
