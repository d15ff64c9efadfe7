"""Markdown-lite to HTML renderer for chat message bodies.

The output is a fragment in the small tag vocabulary a rich-text label
understands (``<b> <i> <s> <tt> <pre> <a> <br/> <hr/> <h1>-<h4> <ul> <ol>
<li> <table> <tr> <th> <td>`` and, when styled, ``<span style>``).
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Literal

from clawmark.highlight import highlight_code
from clawmark.inline import escape_html, render_inline
from clawmark.models import RenderStyle

logger = logging.getLogger(__name__)

_HR_RE = re.compile(r"^(-{3,}|\*{3,}|_{3,})$")
_HEADING_RE = re.compile(r"^(#{1,4})\s+(.*)$")
_UL_RE = re.compile(r"^[-*]\s+(.*)$")
_OL_RE = re.compile(r"^\d+\.\s+(.*)$")
_QUOTE_RE = re.compile(r"^>\s?(.*)$")
_TABLE_SEPARATOR_RE = re.compile(r"^[|\-: ]+$")
_PRE_RE = re.compile(r"(<pre>.*?</pre>)", re.DOTALL)
_TT_RE = re.compile(r"<tt>.*?</tt>", re.DOTALL)

_SEP_WHITESPACE = " \t\u00a0"

LineType = Literal["none", "text", "blank", "block"]
ListKind = Literal["ul", "ol"]


def coerce_style(style: RenderStyle | Mapping | None) -> RenderStyle | None:
    """Accept a RenderStyle, a plain mapping of style fields, or nothing."""
    if style is None or isinstance(style, RenderStyle):
        return style
    return RenderStyle.model_validate(dict(style))


def split_hyphen_list_line(line) -> list[str]:
    """Split ``A - B - C`` style inline lists into ``["A", "- B", "- C"]``.

    A separator is a ``-`` with space, tab or NBSP on both sides. Fewer than two
    separators leave the line untouched.
    """
    s = "" if line is None else str(line)
    seps: list[tuple[int, int]] = []
    i = 1
    while i < len(s) - 1:
        if s[i] == "-" and s[i - 1] in _SEP_WHITESPACE and s[i + 1] in _SEP_WHITESPACE:
            left = i - 1
            while left >= 0 and s[left] in _SEP_WHITESPACE:
                left -= 1
            right = i + 1
            while right < len(s) and s[right] in _SEP_WHITESPACE:
                right += 1
            seps.append((left + 1, right))
            i = right
            continue
        i += 1

    if len(seps) < 2:
        return [s]

    parts = [s[: seps[0][0]].rstrip()]
    for (_, seg_start), (seg_end, _) in zip(seps, seps[1:]):
        parts.append("- " + s[seg_start:seg_end].strip())
    parts.append("- " + s[seps[-1][1] :].lstrip())
    return parts


def _leading_columns(line: str) -> int:
    cols = 0
    for ch in line:
        if ch == " ":
            cols += 1
        elif ch == "\t":
            cols += 4
        else:
            break
    return cols


def _style_attr(**props: str | None) -> str:
    decls = ";".join(f"{name.replace('_', '-')}:{value}" for name, value in props.items() if value)
    return f' style="{escape_html(decls)}"' if decls else ""


class _BlockParser:
    """Line-oriented state machine. One instance per render call."""

    def __init__(self, style: RenderStyle | None):
        self.style = style
        self.out: list[str] = []
        self.in_fence = False
        self.fence_buf: list[str] = []
        self.list_stack: list[tuple[ListKind, int]] = []
        self.in_blockquote = False
        self.in_table = False
        self.table_rows: list[list[str]] = []
        self.table_has_header = False
        self.last_line_type: LineType = "none"

    def _opt(self, name: str) -> str | None:
        return getattr(self.style, name) if self.style is not None else None

    # -- closing ---------------------------------------------------------

    def close_lists(self) -> None:
        while self.list_stack:
            kind, _ = self.list_stack.pop()
            self.out.append(f"</{kind}>")

    def close_blockquote(self) -> None:
        if self.in_blockquote:
            self.out.append("</td></tr></table>")
            self.in_blockquote = False

    def close_table(self) -> None:
        if not self.in_table:
            return
        cell_style = ""
        border = self._opt("table_border")
        if border:
            cell_style = _style_attr(border=f"1px solid {border}", padding="4px")
        parts = ["<table>"]
        for index, row in enumerate(self.table_rows):
            tag = "th" if index == 0 and self.table_has_header else "td"
            cells = "".join(f"<{tag}{cell_style}>{render_inline(cell)}</{tag}>" for cell in row)
            parts.append(f"<tr>{cells}</tr>")
        parts.append("</table>")
        self.out.append("".join(parts))
        self.in_table = False
        self.table_rows = []
        self.table_has_header = False

    def close_blocks(self) -> None:
        self.close_lists()
        self.close_blockquote()
        self.close_table()

    # -- line handlers ---------------------------------------------------

    def flush_fence(self) -> None:
        code = "\n".join(self.fence_buf)
        self.out.append(f"<pre><tt>{highlight_code(code, self.style)}</tt></pre>")
        self.fence_buf = []
        self.in_fence = False
        self.last_line_type = "block"

    def list_item(self, line: str, kind: ListKind, body: str) -> None:
        self.close_blockquote()
        self.close_table()
        indent = _leading_columns(line)
        while self.list_stack and self.list_stack[-1][1] > indent:
            self.out.append(f"</{self.list_stack.pop()[0]}>")

        if not self.list_stack or self.list_stack[-1][1] < indent:
            self.list_stack.append((kind, indent))
            self.out.append(f"<{kind}>")
        elif self.list_stack[-1][0] != kind:
            self.out.append(f"</{self.list_stack.pop()[0]}>")
            self.list_stack.append((kind, indent))
            self.out.append(f"<{kind}>")

        self.out.append(f"<li>{render_inline(body)}</li>")
        self.last_line_type = "block"

    def blockquote(self, body: str) -> None:
        self.close_table()
        self.close_lists()
        if self.in_blockquote:
            self.out.append("<br/>")
        else:
            border = self._opt("blockquote_border")
            bar = f' bgcolor="{escape_html(border)}"' if border else ""
            text_style = _style_attr(color=self._opt("blockquote_fg"))
            self.out.append(f'<table><tr><td width="3"{bar}></td><td{text_style}>')
            self.in_blockquote = True
        self.out.append(render_inline(body))
        self.last_line_type = "block"

    def table_row(self, trimmed: str) -> None:
        if _TABLE_SEPARATOR_RE.match(trimmed) and "-" in trimmed:
            self.table_has_header = True
            return
        if not self.in_table:
            self.close_lists()
            self.close_blockquote()
            self.in_table = True
            self.table_rows = []
            self.table_has_header = False
        cells = trimmed.split("|")[1:-1]
        self.table_rows.append([cell.strip() for cell in cells])
        self.last_line_type = "block"

    def text(self, line: str) -> None:
        self.close_blocks()
        if self.last_line_type != "none":
            self.out.append("<br/>")
        segments = split_hyphen_list_line(line.rstrip())
        self.out.append("<br/>".join(render_inline(segment) for segment in segments))
        self.last_line_type = "text"

    def feed(self, line: str) -> None:
        trimmed = line.strip()

        if trimmed.startswith("```"):
            if self.in_fence:
                self.flush_fence()
            else:
                self.close_blocks()
                self.in_fence = True
                self.fence_buf = []
            return

        if self.in_fence:
            self.fence_buf.append(line)
            return

        if not trimmed:
            self.close_blocks()
            if self.last_line_type in ("text", "blank"):
                self.out.append("<br/>")
            self.last_line_type = "blank"
            return

        if _HR_RE.match(trimmed):
            self.close_blocks()
            self.out.append("<hr/>")
            self.last_line_type = "block"
            return

        m = _HEADING_RE.match(trimmed)
        if m:
            self.close_blocks()
            level = len(m.group(1))
            color = _style_attr(color=self._opt("heading_color"))
            self.out.append(f"<h{level}{color}>{render_inline(m.group(2))}</h{level}>")
            self.last_line_type = "block"
            return

        m = _UL_RE.match(trimmed)
        if m:
            self.list_item(line, "ul", m.group(1))
            return

        m = _OL_RE.match(trimmed)
        if m:
            self.list_item(line, "ol", m.group(1))
            return

        m = _QUOTE_RE.match(trimmed)
        if m:
            self.blockquote(m.group(1))
            return

        if len(trimmed) >= 2 and trimmed.startswith("|") and trimmed.endswith("|"):
            self.table_row(trimmed)
            return

        self.text(line)

    def finish(self) -> str:
        if self.in_fence:
            logger.debug("Flushing unclosed code fence (%d lines)", len(self.fence_buf))
            self.flush_fence()
        self.close_blocks()
        return "".join(self.out)


def _post_process(body: str, style: RenderStyle | None) -> str:
    """Apply code colors without letting inline-code styling reach fenced blocks."""
    if style is None:
        return body

    tt_open = ""
    if style.styles_inline_code:
        tt_open = f"<span{_style_attr(background_color=style.code_bg, color=style.code_fg)}>"
    pre_open = ""
    if style.code_block_bg:
        pre_open = f"<pre{_style_attr(background_color=style.code_block_bg, padding='8px')}>"
    if not tt_open and not pre_open:
        return body

    # Odd indices are the protected <pre> spans.
    pieces = _PRE_RE.split(body)
    for index, piece in enumerate(pieces):
        if index % 2:
            if pre_open:
                pieces[index] = pre_open + piece[len("<pre>") :]
        elif tt_open:
            pieces[index] = _TT_RE.sub(lambda m: f"{tt_open}{m.group(0)}</span>", piece)
    return "".join(pieces)


def render_markdown(md, style: RenderStyle | Mapping | None = None) -> str:
    """Convert markdown-lite text to an HTML fragment.

    ``style`` may be a :class:`RenderStyle` or a mapping of its fields; without
    it no style attributes are emitted and code blocks are only escaped.
    Malformed markdown never raises, it renders best-effort.
    """
    if md is None:
        return ""
    text = str(md)
    if not text:
        return ""
    opts = coerce_style(style)

    text = text.replace("\r\n", "\n").replace("\r", "\n")
    parser = _BlockParser(opts)
    for line in text.split("\n"):
        parser.feed(line)
    return _post_process(parser.finish(), opts)
