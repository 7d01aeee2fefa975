"""API routers package."""
from .follows import router as follows_router
from .health import router as health_router
from .posts import router as posts_router
from .reels import router as reels_router

__all__ = ["follows_router", "health_router", "posts_router", "reels_router"]
