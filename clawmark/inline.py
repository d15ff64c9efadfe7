"""Inline markdown: escaping, code spans, emphasis, links and bare URLs.

Everything here works on a single logical line. Every character that comes
from the input leaves this module HTML-escaped; the only markup produced is
``<b>``, ``<i>``, ``<s>``, ``<tt>`` and ``<a href>``.
"""

from __future__ import annotations

from bisect import bisect_left
from typing import NamedTuple

from clawmark.urls import is_safe_href, sanitize_url

_HTML_ESCAPES = {
    ord("&"): "&amp;",
    ord("<"): "&lt;",
    ord(">"): "&gt;",
    ord('"'): "&quot;",
    ord("'"): "&#39;",
}

# Backslash-escaped characters are swapped for Unicode noncharacters so no
# later stage can mistake them for syntax, then restored at the very end.
ESCAPABLE = "`*[]()_~#->"
_LITERAL_BASE = 0xFDD0
_NONCHARACTERS = {cp: None for cp in range(0xFDD0, 0xFDF0)}
_TO_LITERAL = {ord(ch): chr(_LITERAL_BASE + i) for i, ch in enumerate(ESCAPABLE)}
_FROM_LITERAL = {_LITERAL_BASE + i: ch for i, ch in enumerate(ESCAPABLE)}
_FROM_LITERAL_HTML = {
    _LITERAL_BASE + i: ch.translate(_HTML_ESCAPES) for i, ch in enumerate(ESCAPABLE)
}


class Delimiter(NamedTuple):
    marker: str
    open_tag: str
    close_tag: str
    needs_boundary: bool


# Probe order matters: at equal positions the longer marker wins.
DELIMITERS: tuple[Delimiter, ...] = (
    Delimiter("***", "<b><i>", "</i></b>", False),
    Delimiter("___", "<b><i>", "</i></b>", True),
    Delimiter("**", "<b>", "</b>", False),
    Delimiter("__", "<b>", "</b>", True),
    Delimiter("~~", "<s>", "</s>", False),
    Delimiter("*", "<i>", "</i>", False),
    Delimiter("_", "<i>", "</i>", True),
)


def escape_html(s) -> str:
    """Escape ``& < > " '`` as entities. ``None`` becomes ``""``."""
    if s is None:
        return ""
    return str(s).translate(_HTML_ESCAPES)


def protect_escapes(text: str) -> str:
    """Consume markdown backslash escapes, leaving protected literals behind."""
    text = text.translate(_NONCHARACTERS)
    if "\\" not in text:
        return text
    out: list[str] = []
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == "\\" and i + 1 < n and text[i + 1] in ESCAPABLE:
            out.append(text[i + 1].translate(_TO_LITERAL))
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def restore_literals(text: str) -> str:
    """Turn protected literals back into their raw characters."""
    return text.translate(_FROM_LITERAL)


def _is_word_char(ch: str) -> bool:
    return ch == "_" or (ch.isascii() and ch.isalnum())


def _at_boundary(text: str, pos: int, length: int) -> bool:
    before = text[pos - 1] if pos > 0 else ""
    after = text[pos + length] if pos + length < len(text) else ""
    return not (before and after and _is_word_char(before) and _is_word_char(after))


class _DelimiterIndex:
    """Sorted positions of every delimiter occurrence, built once per text.

    An occurrence that passes the word-boundary test against its real
    neighbours passes it in any span. One that fails can still be accepted at
    the very start or end of a span, where the neighbour on that side counts
    as absent; ``find`` checks those two spots directly.
    """

    def __init__(self, text: str):
        self.text = text
        self.positions: dict[str, list[int]] = {}
        for delim in DELIMITERS:
            size = len(delim.marker)
            found: list[int] = []
            idx = text.find(delim.marker)
            while idx != -1:
                if not delim.needs_boundary or _at_boundary(text, idx, size):
                    found.append(idx)
                idx = text.find(delim.marker, idx + 1)
            self.positions[delim.marker] = found

    def find(self, delim: Delimiter, start: int, lo: int, hi: int) -> int:
        """First acceptable occurrence at or after ``start`` inside ``text[lo:hi]``."""
        marker = delim.marker
        size = len(marker)
        if start == lo and self.text.startswith(marker, lo, hi):
            return lo

        best = -1
        positions = self.positions[marker]
        k = bisect_left(positions, start)
        if k < len(positions) and positions[k] + size <= hi:
            best = positions[k]

        edge = hi - size
        if edge >= start and (best == -1 or edge < best) and self.text.startswith(marker, edge, hi):
            best = edge
        return best

    def find_opener(self, lo: int, hi: int) -> tuple[int, Delimiter] | None:
        best: tuple[int, Delimiter] | None = None
        for delim in DELIMITERS:
            idx = self.find(delim, lo, lo, hi)
            if idx != -1 and (best is None or idx < best[0]):
                best = (idx, delim)
        return best


def _is_url_start(text: str, i: int) -> bool:
    return text.startswith("http://", i) or text.startswith("https://", i)


def _link(href: str, label: str) -> str:
    return f'<a href="{escape_html(href)}">{escape_html(label)}</a>'


def render_noformat(text: str) -> str:
    """Render a segment with no emphasis: ``[label](url)``, bare URLs, escaping."""
    out: list[str] = []
    i = 0
    n = len(text)
    plain_start = 0
    # Last find() results; reused while they still lie ahead of the scan.
    close_bracket = close_paren = None

    while i < n:
        ch = text[i]
        if ch == "[":
            if close_bracket is None or -1 < close_bracket <= i:
                close_bracket = text.find("]", i + 1)
            if close_bracket != -1 and text.startswith("(", close_bracket + 1):
                if close_paren is None or -1 < close_paren < close_bracket + 2:
                    close_paren = text.find(")", close_bracket + 2)
                if close_paren != -1:
                    out.append(escape_html(text[plain_start:i]))
                    label = text[i + 1 : close_bracket]
                    href = sanitize_url(text[close_bracket + 2 : close_paren])
                    if href and is_safe_href(restore_literals(href)):
                        out.append(_link(href, label))
                    else:
                        out.append(escape_html(text[i : close_paren + 1]))
                    i = plain_start = close_paren + 1
                    continue

        if ch == "h" and _is_url_start(text, i):
            out.append(escape_html(text[plain_start:i]))
            j = i
            while j < n and not text[j].isspace():
                j += 1
            href = sanitize_url(text[i:j])
            if href:
                out.append(_link(href, href))
            i = plain_start = j
            continue

        i += 1

    out.append(escape_html(text[plain_start:]))
    return "".join(out)


def _render_span(index: _DelimiterIndex, lo: int, hi: int) -> str:
    text = index.text
    out: list[str] = []
    while lo < hi:
        found = index.find_opener(lo, hi)
        if found is None:
            out.append(render_noformat(text[lo:hi]))
            break

        pos, delim = found
        inner_start = pos + len(delim.marker)
        close = index.find(delim, inner_start, lo, hi)
        if close == -1:
            out.append(render_noformat(text[lo:inner_start]))
            lo = inner_start
            continue

        out.append(render_noformat(text[lo:pos]))
        out.append(delim.open_tag)
        out.append(_render_span(index, inner_start, close))
        out.append(delim.close_tag)
        lo = close + len(delim.marker)

    return "".join(out)


def render_format(text: str) -> str:
    """Render emphasis delimiters, delegating unformatted stretches to render_noformat.

    Spans are offsets into the original text and delimiter lookups go through
    an index built once, so no span is copied or rescanned. The text after
    each matched pair is handled by the loop; only the inner span recurses,
    and it never holds an acceptable occurrence of its own delimiter.
    """
    if not text:
        return ""
    return _render_span(_DelimiterIndex(text), 0, len(text))


def render_inline(line) -> str:
    """Render one line of inline markdown to escaped HTML."""
    if line is None:
        return ""
    raw = protect_escapes(str(line))

    out: list[str] = []
    buf: list[str] = []
    in_code = False
    for ch in raw:
        if ch != "`":
            buf.append(ch)
            continue
        if in_code:
            out.append(f"<tt>{escape_html(''.join(buf))}</tt>")
        elif buf:
            out.append(render_format("".join(buf)))
        buf = []
        in_code = not in_code

    if in_code:
        out.append(render_format("`" + "".join(buf)))
    elif buf:
        out.append(render_format("".join(buf)))

    return "".join(out).translate(_FROM_LITERAL_HTML)
