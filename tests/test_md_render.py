"""Block parser: lines, fences, lists, headings, quotes, tables, post-processing."""

import pytest
from pydantic import ValidationError

from clawmark.md_render import render_markdown, split_hyphen_list_line
from clawmark.models import RenderStyle


def test_empty_and_none():
    assert render_markdown("") == ""
    assert render_markdown(None) == ""


def test_single_line_inline():
    assert render_markdown("hello **bold**") == "hello <b>bold</b>"


def test_inline_code_in_text():
    assert render_markdown("use `<tag>` now") == "use <tt>&lt;tag&gt;</tt> now"


def test_lines_joined_with_breaks():
    assert render_markdown("line1\nline2") == "line1<br/>line2"


def test_blank_line_breaks():
    assert render_markdown("a\n\nb") == "a<br/><br/>b"
    assert render_markdown("\nb") == "<br/>b"
    assert render_markdown("a\n") == "a<br/>"


@pytest.mark.parametrize("source", ["a\r\nb", "a\rb"])
def test_line_endings_normalized(source):
    assert render_markdown(source) == "a<br/>b"


def test_trailing_hard_break_spaces_dropped():
    assert render_markdown("one  \ntwo") == "one<br/>two"


# --- fences ---


def test_fenced_code_block():
    assert render_markdown("```\ncode here\n```") == "<pre><tt>code here</tt></pre>"


def test_fence_escapes_html():
    assert render_markdown("```\n<script>alert(1)</script>\n```") == (
        "<pre><tt>&lt;script&gt;alert(1)&lt;/script&gt;</tt></pre>"
    )


def test_unclosed_fence_is_flushed():
    assert render_markdown("```\ncode here") == "<pre><tt>code here</tt></pre>"


def test_fence_language_tag_ignored():
    assert render_markdown("```javascript\nconsole.log(1)\n```") == (
        "<pre><tt>console.log(1)</tt></pre>"
    )


def test_fence_keeps_lines_and_markdown_verbatim():
    assert render_markdown("```\n# not a heading\n  - **x**\n```") == (
        "<pre><tt># not a heading\n  - **x**</tt></pre>"
    )


def test_text_around_fence():
    assert render_markdown("before\n```\ncode\n```\nafter") == (
        "before<pre><tt>code</tt></pre><br/>after"
    )


def test_fence_closes_open_list():
    assert render_markdown("- a\n```\nx\n```") == "<ul><li>a</li></ul><pre><tt>x</tt></pre>"


# --- lists ---


def test_nested_unordered_list():
    assert render_markdown("- a\n- b\n    - c\n- d") == (
        "<ul><li>a</li><li>b</li><ul><li>c</li></ul><li>d</li></ul>"
    )


def test_star_bullets():
    assert render_markdown("* a\n* b") == "<ul><li>a</li><li>b</li></ul>"


def test_ordered_list():
    assert render_markdown("1. one\n2. two") == "<ol><li>one</li><li>two</li></ol>"


def test_list_kind_switch_at_same_indent():
    assert render_markdown("- a\n1. b") == "<ul><li>a</li></ul><ol><li>b</li></ol>"


def test_ordered_nested_in_unordered():
    assert render_markdown("- a\n  1. b\n- c") == (
        "<ul><li>a</li><ol><li>b</li></ol><li>c</li></ul>"
    )


def test_tab_counts_as_four_columns():
    assert render_markdown("- a\n\t- b") == "<ul><li>a</li><ul><li>b</li></ul></ul>"


def test_list_items_render_inline():
    assert render_markdown("- **a** and `b`") == "<ul><li><b>a</b> and <tt>b</tt></li></ul>"


def test_blank_line_closes_list():
    assert render_markdown("- a\n\n- b") == "<ul><li>a</li></ul><ul><li>b</li></ul>"


def test_text_after_list():
    assert render_markdown("- a\ntext") == "<ul><li>a</li></ul><br/>text"


def test_list_items_are_not_hyphen_split():
    assert render_markdown("- A - B - C") == "<ul><li>A - B - C</li></ul>"


def test_bold_line_is_not_a_list_item():
    assert render_markdown("**Note** here") == "<b>Note</b> here"


# --- headings and rules ---


@pytest.mark.parametrize("level", [1, 2, 3, 4])
def test_headings(level):
    assert render_markdown("#" * level + " Title") == f"<h{level}>Title</h{level}>"


def test_heading_levels_beyond_four_are_text():
    assert render_markdown("##### Five") == "##### Five"


def test_hashtag_is_text():
    assert render_markdown("#hashtag") == "#hashtag"


def test_heading_renders_inline():
    assert render_markdown("## A *b* <c>") == "<h2>A <i>b</i> &lt;c&gt;</h2>"


def test_heading_color():
    style = RenderStyle(heading_color="#336699")
    assert render_markdown("## Sub", style) == '<h2 style="color:#336699">Sub</h2>'


@pytest.mark.parametrize("rule", ["---", "***", "___", "-----"])
def test_horizontal_rules(rule):
    assert render_markdown(rule) == "<hr/>"


def test_rule_between_text():
    assert render_markdown("a\n---\nb") == "a<hr/><br/>b"


def test_escaped_markers_are_text():
    assert render_markdown("\\# not heading") == "# not heading"
    assert render_markdown("\\- not a list") == "- not a list"


# --- blockquotes ---


def test_blockquote_plain():
    assert render_markdown("> quoted\n> more") == (
        '<table><tr><td width="3"></td><td>quoted<br/>more</td></tr></table>'
    )


def test_blockquote_without_space():
    assert render_markdown(">tight") == '<table><tr><td width="3"></td><td>tight</td></tr></table>'


def test_blockquote_styled():
    style = RenderStyle(blockquote_border="#888", blockquote_fg="#555")
    assert render_markdown("> quoted", style) == (
        '<table><tr><td width="3" bgcolor="#888"></td>'
        '<td style="color:#555">quoted</td></tr></table>'
    )


def test_blockquote_then_text():
    assert render_markdown("> q\ntext") == (
        '<table><tr><td width="3"></td><td>q</td></tr></table><br/>text'
    )


def test_nested_quote_marker_is_literal():
    assert render_markdown(">> deep") == (
        '<table><tr><td width="3"></td><td>&gt; deep</td></tr></table>'
    )


# --- tables ---


def test_table_with_header():
    assert render_markdown("| H | K |\n|---|---|\n| 1 | 2 |") == (
        "<table><tr><th>H</th><th>K</th></tr><tr><td>1</td><td>2</td></tr></table>"
    )


def test_table_without_header():
    assert render_markdown("| a | b |\n| c | d |") == (
        "<table><tr><td>a</td><td>b</td></tr><tr><td>c</td><td>d</td></tr></table>"
    )


def test_table_alignment_separator():
    assert render_markdown("| H |\n|:--:|\n| 1 |") == (
        "<table><tr><th>H</th></tr><tr><td>1</td></tr></table>"
    )


def test_table_cells_render_inline():
    assert render_markdown("| **x** | `y` |") == (
        "<table><tr><td><b>x</b></td><td><tt>y</tt></td></tr></table>"
    )


def test_table_border_style():
    style = RenderStyle(table_border="#ccc")
    assert render_markdown("| H |\n|---|\n| 1 |", style) == (
        '<table><tr><th style="border:1px solid #ccc;padding:4px">H</th></tr>'
        '<tr><td style="border:1px solid #ccc;padding:4px">1</td></tr></table>'
    )


def test_table_then_text():
    assert render_markdown("| a |\ntext") == "<table><tr><td>a</td></tr></table><br/>text"


def test_list_after_table_flushes_table_first():
    assert render_markdown("| a |\n- b") == (
        "<table><tr><td>a</td></tr></table><ul><li>b</li></ul>"
    )


# --- hyphen lists in text ---


def test_text_hyphen_list_split():
    assert render_markdown("A - B - C") == "A<br/>- B<br/>- C"


def test_text_single_hyphen_untouched():
    assert render_markdown("A - B") == "A - B"


def test_split_hyphen_list_line():
    assert split_hyphen_list_line("hello world") == ["hello world"]
    assert split_hyphen_list_line("A - B") == ["A - B"]
    assert split_hyphen_list_line("A - B - C") == ["A", "- B", "- C"]
    assert split_hyphen_list_line("A - B - C - D") == ["A", "- B", "- C", "- D"]


def test_split_hyphen_list_line_whitespace_kinds():
    assert split_hyphen_list_line("A\t-\tB\t-\tC") == ["A", "- B", "- C"]
    assert split_hyphen_list_line("A - B - C") == ["A", "- B", "- C"]
    assert split_hyphen_list_line("A  -  B  -   C") == ["A", "- B", "- C"]


def test_split_hyphen_list_line_ignores_word_hyphens():
    assert split_hyphen_list_line("well-known - re-run") == ["well-known - re-run"]


def test_split_hyphen_list_line_none():
    assert split_hyphen_list_line(None) == [""]


# --- styles and post-processing ---


def test_inline_code_styled_but_fence_untouched():
    style = RenderStyle(code_bg="#eee", code_fg="#c00", code_block_bg="#f5f5f5")
    assert render_markdown("run `x`\n```\ny\n```", style) == (
        'run <span style="background-color:#eee;color:#c00"><tt>x</tt></span>'
        '<pre style="background-color:#f5f5f5;padding:8px"><tt>y</tt></pre>'
    )


def test_inline_code_foreground_only():
    style = RenderStyle(code_fg="#c00")
    assert render_markdown("`x`", style) == '<span style="color:#c00"><tt>x</tt></span>'


def test_code_block_highlighting():
    style = RenderStyle(code_keyword_color="#00f")
    assert render_markdown("```\nif x\n```", style) == (
        '<pre><tt><span style="color:#00f">if</span> x</tt></pre>'
    )


def test_style_without_palette_only_escapes_fence():
    assert render_markdown("```\nif <x>\n```", RenderStyle()) == "<pre><tt>if &lt;x&gt;</tt></pre>"


def test_style_as_mapping():
    assert render_markdown("# T", {"heading_color": "red"}) == '<h1 style="color:red">T</h1>'


def test_blank_style_value_emits_no_attribute():
    assert render_markdown("# T", {"heading_color": "  "}) == "<h1>T</h1>"


def test_unsafe_style_value_rejected():
    with pytest.raises(ValidationError):
        render_markdown("# T", {"heading_color": 'red" onclick="x'})
    with pytest.raises(ValidationError):
        RenderStyle(code_bg="red;background:url(x)")


def test_lone_pipe_is_text_not_a_table():
    assert render_markdown("|") == "|"
    assert render_markdown("a\n|") == "a<br/>|"


def test_double_pipe_is_an_empty_table_row():
    assert render_markdown("||") == "<table><tr><td></td></tr></table>"
