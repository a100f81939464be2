"""API router package."""

from fastapi import APIRouter

from .health import router as health_router
from .observability import router as observability_router
from .realign import router as realign_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(realign_router)
api_router.include_router(observability_router)

__all__ = ["api_router"]
