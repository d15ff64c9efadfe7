"""Reflow dense agent output into block-friendly markdown before rendering.

Agents tend to answer in one long line: ``Summary: 1. foo 2. bar - baz - qux``.
The rewrites below break such lines at bold labels, numbered items and
hyphen bullets so the block parser sees real list items. Fenced code is copied
through untouched.
"""

from __future__ import annotations

import re

from clawmark.md_render import split_hyphen_list_line

_BOLD_LABEL_RE = re.compile(r"\*\*([^*\n]{1,120}):\*\*\s*")
_LABEL_BEFORE_LIST_RE = re.compile(r"(^|[.!?])\s*([A-Z][^:\n]{1,80}):\s*(?=(\d{1,2}\.)|-\s)")
# Matches start on a non-space, or on the first whitespace of a line, so each
# whitespace run is scanned once.
_RUN_ENTRY = r"(\S|(?<![^\n])[^\S\n])"
_NUMBERED_ITEM_RE = re.compile(_RUN_ENTRY + r"\s+(\d{1,2})\.\s+")
_BULLET_RE = re.compile(r"(^|\s)-\s+")
_INNER_BULLET_RE = re.compile(_RUN_ENTRY + r"\s+-\s+")
_EXCESS_NEWLINES_RE = re.compile(r"\n{3,}")
_NUMBERED_PREFIX_RE = re.compile(r"^\d+\.\s")


def _is_fence_line(line: str) -> bool:
    return line.lstrip().startswith("```")


def _is_list_like(line: str) -> bool:
    t = line.lstrip()
    return (
        t.startswith(("- ", "* ", ">", "#"))
        or _NUMBERED_PREFIX_RE.match(t) is not None
    )


def expand_inline_structure(line: str) -> list[str]:
    """Apply the reflow rewrites to one line and return the resulting lines."""
    s = _BOLD_LABEL_RE.sub(r"\n\n**\1:**\n", line)
    s = _LABEL_BEFORE_LIST_RE.sub(r"\1\n\n\2:\n", s)
    s = _NUMBERED_ITEM_RE.sub(r"\1\n\2. ", s)
    if len(_BULLET_RE.findall(s)) >= 2:
        s = _INNER_BULLET_RE.sub(r"\1\n- ", s)
    s = _EXCESS_NEWLINES_RE.sub("\n\n", s)
    return s.split("\n")


def normalize_for_display(md, force_hard_line_breaks: bool = False) -> str:
    """Turn dense agent text into markdown the block parser breaks sensibly.

    With ``force_hard_line_breaks`` every line that is not list-like gets the
    two-space hard-break suffix.
    """
    if md is None:
        return ""
    s = str(md)
    if not s:
        return ""
    s = s.replace("\r\n", "\n").replace("\r", "\n")

    lines = s.split("\n")
    last = len(lines) - 1
    out: list[str] = []
    in_fence = False

    for index, line in enumerate(lines):
        if _is_fence_line(line) or in_fence:
            if _is_fence_line(line):
                in_fence = not in_fence
            out.append(line)
            if index < last:
                out.append("\n")
            continue

        for expanded in expand_inline_structure(line):
            if not expanded:
                out.append("\n")
                continue
            for segment in split_hyphen_list_line(expanded):
                out.append(segment)
                if force_hard_line_breaks and not _is_list_like(segment):
                    out.append("  ")
                out.append("\n")

    return "".join(out)
