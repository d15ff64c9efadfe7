"""Test fixtures: an httpx client bound to the ASGI app."""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from clawmark.main import app
from clawmark.rate_limit import limiter


@pytest.fixture
async def client():
    limiter.reset()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def json_header() -> dict:
    return {"Accept": "application/json", "Content-Type": "application/json"}
