"""clawmark: markdown-lite rendering service for chat message bodies."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import HTTPException
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from clawmark.api.router import api_router
from clawmark.config import settings
from clawmark.content import render_response
from clawmark.highlight import KEYWORDS
from clawmark.rate_limit import limiter

VERSION = "0.3.0"

logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger("clawmark")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "Render service ready: max input %d chars, default style %s, %d highlight keywords",
        settings.max_input_chars,
        "configured" if settings.default_style() else "none",
        len(KEYWORDS),
    )
    yield
    logger.info("Render service stopped")


app = FastAPI(
    title="clawmark",
    description="Markdown-lite rendering and URL sanitization for chat clients",
    version=VERSION,
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.include_router(api_router)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return render_response(
        request,
        {"error": exc.detail},
        status_code=exc.status_code,
    )


@app.get("/health")
async def health():
    return {"status": "ok", "version": VERSION}


def main():
    import uvicorn

    uvicorn.run(
        "clawmark.main:app",
        host=settings.host,
        port=settings.port,
    )


if __name__ == "__main__":
    main()
