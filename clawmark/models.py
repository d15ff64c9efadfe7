"""Pydantic models for the render style record and request/response schemas."""

from __future__ import annotations

import re

from pydantic import BaseModel, Field, field_validator

# Hex colors, names and rgb()/rgba()/hsl() forms. Anything else could close the
# style attribute or smuggle extra CSS declarations.
_COLOR_PATTERN = re.compile(r"^[#A-Za-z0-9(),.% -]{1,64}$")


def _validate_color(value: str | None) -> str | None:
    """Normalize a style color: blank means absent, unsafe values are rejected."""
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    if not _COLOR_PATTERN.match(value):
        raise ValueError("Style color contains unsupported characters")
    return value


class RenderStyle(BaseModel):
    """Optional colors applied by the renderer. Absent fields emit no attribute."""

    code_bg: str | None = Field(default=None, description="Inline code background")
    code_fg: str | None = Field(default=None, description="Inline code foreground")
    code_block_bg: str | None = Field(default=None, description="Fenced code block background")
    code_keyword_color: str | None = Field(default=None, description="Highlighted keywords")
    code_string_color: str | None = Field(default=None, description="Highlighted string literals")
    code_comment_color: str | None = Field(default=None, description="Highlighted comments")
    heading_color: str | None = Field(default=None, description="Foreground for h1-h4")
    blockquote_border: str | None = Field(default=None, description="Blockquote left bar")
    blockquote_fg: str | None = Field(default=None, description="Blockquote text")
    table_border: str | None = Field(default=None, description="Table cell border")

    model_config = {"frozen": True, "extra": "ignore"}

    @field_validator(
        "code_bg",
        "code_fg",
        "code_block_bg",
        "code_keyword_color",
        "code_string_color",
        "code_comment_color",
        "heading_color",
        "blockquote_border",
        "blockquote_fg",
        "table_border",
    )
    @classmethod
    def validate_color(cls, v: str | None) -> str | None:
        return _validate_color(v)

    @property
    def styles_inline_code(self) -> bool:
        return bool(self.code_bg or self.code_fg)


class RenderRequest(BaseModel):
    markdown: str = Field(default="", description="Markdown source to render")
    style: RenderStyle | None = Field(
        default=None, description="Colors to apply; the server default is used when omitted"
    )
    normalize: bool = Field(
        default=False, description="Reflow dense agent output before rendering"
    )
    force_hard_line_breaks: bool = Field(
        default=False, description="Append markdown hard breaks while normalizing"
    )


class RenderResponse(BaseModel):
    html: str
    urls: list[str] = Field(default_factory=list)


class NormalizeRequest(BaseModel):
    markdown: str = ""
    force_hard_line_breaks: bool | None = None


class MarkdownRequest(BaseModel):
    markdown: str = ""


class MarkdownResponse(BaseModel):
    markdown: str


class UrlsResponse(BaseModel):
    urls: list[str]


class SanitizeUrlRequest(BaseModel):
    url: str = ""


class SanitizeUrlResponse(BaseModel):
    url: str


class ErrorResponse(BaseModel):
    error: str
