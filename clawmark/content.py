"""Message content helpers and content negotiation.

Chat protocol messages carry either a plain string or a list of content
blocks; the helpers here turn them into the markdown source the renderer
consumes. The HTTP routes accept JSON or markdown with YAML frontmatter and
answer in JSON, HTML or markdown depending on the Accept header.
"""

from __future__ import annotations

import json

import frontmatter
from fastapi import Request, Response
from pydantic import BaseModel

_BODY_KEYS = ("html", "markdown", "url", "error")


def extract_text_from_content(content) -> str:
    """Join the text blocks of a message payload. Non-text payloads yield ``""``."""
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, dict) and block.get("type") == "text" and block.get("text"):
                parts.append(str(block["text"]))
        return "\n".join(parts)
    return ""


def extract_content_blocks_json(blocks: list | None) -> str:
    """Serialize content blocks when at least one of them is not plain text."""
    if not blocks:
        return ""
    has_non_text = any(isinstance(b, dict) and b.get("type") != "text" for b in blocks)
    if not has_non_text:
        return ""
    return json.dumps(blocks, separators=(",", ":"), ensure_ascii=False)


def truncate_for_toast(s, max_len: int) -> str:
    """First non-blank line of ``s``, cut to ``max_len`` characters with an ellipsis."""
    t = "" if s is None else str(s)
    t = t.replace("\r\n", "\n").replace("\r", "\n")
    for line in t.split("\n"):
        line = line.strip()
        if line:
            t = line
            break
    if len(t) > max_len:
        t = t[: max(max_len - 1, 0)] + "…"
    return t


async def parse_body(request: Request) -> dict:
    """Parse request body as JSON or markdown with YAML frontmatter."""
    content_type = request.headers.get("content-type", "")
    raw = await request.body()
    text = raw.decode("utf-8")

    if not text.strip():
        return {}

    if "application/json" in content_type:
        return json.loads(text)

    # Some clients send JSON without a content-type
    stripped = text.strip()
    if stripped.startswith("{") and "text/markdown" not in content_type:
        try:
            return json.loads(stripped)
        except json.JSONDecodeError:
            pass

    # Markdown with optional YAML frontmatter; the body is the source to process
    post = frontmatter.loads(text)
    result = dict(post.metadata)
    body = post.content.strip("\n")
    if body:
        result["markdown"] = body
    return result


def wants_json(request: Request) -> bool:
    accept = request.headers.get("accept", "")
    return "application/json" in accept


def render_response(
    request: Request,
    data: dict | BaseModel,
    status_code: int = 200,
    headers: dict | None = None,
    media_type: str = "text/markdown",
) -> Response:
    """Return JSON, or the body field as ``media_type`` with the rest as frontmatter."""
    if isinstance(data, BaseModel):
        data = data.model_dump(mode="json")

    if wants_json(request):
        return Response(
            content=json.dumps(data, indent=2),
            status_code=status_code,
            media_type="application/json",
            headers=headers,
        )

    # Copy before mutating so callers' dicts are not affected
    data = dict(data)

    body_key = next((k for k in _BODY_KEYS if k in data), None)
    body = str(data.pop(body_key)) if body_key else ""

    if media_type == "text/html" or not data:
        content = body
    else:
        content = frontmatter.dumps(frontmatter.Post(body, **data))

    return Response(
        content=content,
        status_code=status_code,
        media_type=media_type,
        headers=headers,
    )
