"""Keyword/string/comment highlighting for fenced code blocks."""

from __future__ import annotations

import re

from clawmark.inline import escape_html
from clawmark.models import RenderStyle

KEYWORDS = frozenset(
    """
    export if then else elif fi for in do done while until case esac function
    return local source echo sudo cd mkdir rm var let const def class import
    from async await try catch except finally throw new this self switch break
    continue yield typeof instanceof raise with as pass lambda print not and or
    func defer go range select chan struct enum impl trait pub mod use fn mut
    loop match where type package interface true false null undefined None
    True False nil
    """.split()
)

_IDENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_NUMBER_RE = re.compile(r"[0-9][A-Za-z0-9_]*")


def _color(text: str, color: str | None) -> str:
    if not color:
        return escape_html(text)
    return f'<span style="color:{escape_html(color)}">{escape_html(text)}</span>'


def _string_end(line: str, start: int) -> int:
    quote = line[start]
    j = start + 1
    n = len(line)
    while j < n:
        if line[j] == "\\":
            j += 2
            continue
        if line[j] == quote:
            return j + 1
        j += 1
    return n


def highlight_line(line: str, opts: RenderStyle | None) -> str:
    """Highlight a single line of code. Without opts the line is only escaped."""
    if opts is None:
        return escape_html(line)

    trimmed = line.lstrip()
    if (trimmed.startswith("#") and not trimmed.startswith("#!")) or trimmed.startswith("//"):
        return _color(line, opts.code_comment_color)

    out: list[str] = []
    i = 0
    n = len(line)
    while i < n:
        ch = line[i]

        if ch in "\"'":
            end = _string_end(line, i)
            out.append(_color(line[i:end], opts.code_string_color))
            i = end
            continue

        if ch == "#" and i > 0 and line[i - 1].isspace():
            out.append(_color(line[i:], opts.code_comment_color))
            break

        m = _IDENT_RE.match(line, i)
        if m:
            word = m.group(0)
            if word in KEYWORDS:
                out.append(_color(word, opts.code_keyword_color))
            else:
                out.append(escape_html(word))
            i = m.end()
            continue

        # Keeps "1if" from lighting up the "if".
        m = _NUMBER_RE.match(line, i)
        if m:
            out.append(escape_html(m.group(0)))
            i = m.end()
            continue

        out.append(escape_html(ch))
        i += 1

    return "".join(out)


def highlight_code(code: str, opts: RenderStyle | None) -> str:
    """Highlight a whole fenced block line by line."""
    if opts is None:
        return escape_html(code)
    return "\n".join(highlight_line(line, opts) for line in code.split("\n"))
