"""API package - FastAPI routes and dependencies."""
from .dependencies import get_backend, get_session_registry
from .routers import follows_router, health_router, posts_router, reels_router

__all__ = [
    "follows_router",
    "get_backend",
    "get_session_registry",
    "health_router",
    "posts_router",
    "reels_router",
]
