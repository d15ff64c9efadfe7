"""Mount all API routes."""

from fastapi import APIRouter

from clawmark.api.render import router as render_router

api_router = APIRouter()
api_router.include_router(render_router, tags=["render"])
