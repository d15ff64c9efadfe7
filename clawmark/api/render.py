"""Render, normalize and URL routes over the markdown-lite engine."""

from __future__ import annotations

import asyncio
import logging

import yaml
from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, ValidationError

from clawmark.config import settings
from clawmark.content import parse_body, render_response
from clawmark.md_render import render_markdown
from clawmark.models import (
    ErrorResponse,
    MarkdownRequest,
    MarkdownResponse,
    NormalizeRequest,
    RenderRequest,
    RenderResponse,
    SanitizeUrlRequest,
    SanitizeUrlResponse,
    UrlsResponse,
)
from clawmark.normalize import normalize_for_display
from clawmark.rate_limit import limiter
from clawmark.urls import autolink_bare, extract_urls, sanitize_url

logger = logging.getLogger("clawmark.render")

router = APIRouter()

_ERRORS = {400: {"model": ErrorResponse}, 413: {"model": ErrorResponse}}


async def _load(request: Request, model: type[BaseModel]):
    """Parse and validate the request body, rejecting oversized input."""
    try:
        body = await parse_body(request)
    except (ValueError, yaml.YAMLError):
        raise HTTPException(status_code=400, detail="Invalid request body") from None
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="Invalid request body")
    try:
        req = model(**body)
    except ValidationError:
        raise HTTPException(status_code=400, detail="Invalid request body") from None

    size = len(getattr(req, "markdown", "") or getattr(req, "url", "") or "")
    if size > settings.max_input_chars:
        logger.warning("Rejected %d-char body (limit %d)", size, settings.max_input_chars)
        raise HTTPException(status_code=413, detail="Input too large")
    return req


@router.post("/v1/render", response_model=RenderResponse, responses=_ERRORS)
@limiter.limit(settings.rate_limit_render)
async def render(request: Request):
    """Render markdown-lite to an HTML fragment and list the URLs it mentions."""
    req = await _load(request, RenderRequest)
    source = req.markdown
    if req.normalize:
        source = normalize_for_display(source, req.force_hard_line_breaks)
    style = req.style if req.style is not None else settings.default_style()
    # CPU-bound, runs in a worker thread.
    html = await asyncio.to_thread(render_markdown, source, style)
    logger.debug("Rendered %d chars of markdown into %d chars of HTML", len(source), len(html))
    urls = extract_urls(req.markdown)
    return render_response(
        request,
        RenderResponse(html=html, urls=urls),
        headers={"X-Url-Count": str(len(urls))},
        media_type="text/html",
    )


@router.post("/v1/normalize", response_model=MarkdownResponse, responses=_ERRORS)
@limiter.limit(settings.rate_limit_render)
async def normalize(request: Request):
    """Reflow dense agent output into block-friendly markdown."""
    req = await _load(request, NormalizeRequest)
    force = (
        req.force_hard_line_breaks
        if req.force_hard_line_breaks is not None
        else settings.force_hard_line_breaks
    )
    return render_response(
        request, MarkdownResponse(markdown=normalize_for_display(req.markdown, force))
    )


@router.post("/v1/autolink", response_model=MarkdownResponse, responses=_ERRORS)
@limiter.limit(settings.rate_limit_render)
async def autolink(request: Request):
    """Wrap bare URLs outside code in angle brackets."""
    req = await _load(request, MarkdownRequest)
    return render_response(request, MarkdownResponse(markdown=autolink_bare(req.markdown)))


@router.post("/v1/urls", response_model=UrlsResponse, responses=_ERRORS)
@limiter.limit(settings.rate_limit_render)
async def urls(request: Request):
    """List the distinct bare URLs in the text, in order of appearance."""
    req = await _load(request, MarkdownRequest)
    return render_response(request, UrlsResponse(urls=extract_urls(req.markdown)))


@router.post("/v1/sanitize-url", response_model=SanitizeUrlResponse, responses=_ERRORS)
@limiter.limit(settings.rate_limit_render)
async def sanitize(request: Request):
    """Clean a single URL token."""
    req = await _load(request, SanitizeUrlRequest)
    return render_response(request, SanitizeUrlResponse(url=sanitize_url(req.url)))
