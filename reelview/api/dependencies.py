"""
Dependency injection container.
Creates and wires all application components.
Uses FastAPI's dependency injection system.
"""
import logging
from functools import lru_cache
from typing import Optional

from fastapi import Depends, FastAPI, Header, Request

from reelview.config import Settings, get_settings
from reelview.core.circuit_breaker import CircuitBreaker
from reelview.media.commands import BufferedFullscreenHost, BufferedMediaElement, CommandBuffer
from reelview.models.interfaces import AuthGateway, BackendClient, StaticIdentityProvider
from reelview.models.schemas import Identity, PostItem, SessionCreateRequest, VideoItem
from reelview.repositories.memory import InMemoryAuthGateway, InMemoryBackend
from reelview.services.engagement import EngagementStateStore
from reelview.services.feed import FeedDataLoader
from reelview.services.follow import FollowService
from reelview.services.registry import SessionRegistry
from reelview.services.session import FeedSession, ReelsSession

logger = logging.getLogger(__name__)


# =============================================================================
# Backend (Application Lifetime, created in lifespan)
# =============================================================================


async def init_backend(app: FastAPI, settings: Settings) -> None:
    """Create the backend client and auth gateway for the configured backend."""
    if settings.BACKEND == "supabase":
        from reelview.repositories.supabase import (
            SupabaseAuthGateway,
            SupabaseBackend,
            create_supabase_client,
        )

        client = await create_supabase_client(settings)
        app.state.backend = SupabaseBackend(client)
        app.state.auth_gateway = SupabaseAuthGateway(client)
    else:
        backend = InMemoryBackend()
        app.state.backend = backend
        app.state.auth_gateway = InMemoryAuthGateway(backend)
    logger.info(f"Backend initialised: {settings.BACKEND}")


def get_backend(request: Request) -> BackendClient:
    """Backend client created at startup."""
    return request.app.state.backend


def get_auth_gateway(request: Request) -> AuthGateway:
    """Auth gateway created at startup."""
    return request.app.state.auth_gateway


# =============================================================================
# Singleton Instances (Application Lifetime)
# =============================================================================


@lru_cache()
def get_session_registry() -> SessionRegistry:
    """Get singleton registry of open feed sessions."""
    return SessionRegistry(ttl_seconds=get_settings().SESSION_TTL_SEC)


@lru_cache()
def get_read_circuit_breaker() -> CircuitBreaker:
    """Get singleton circuit breaker for feed reads."""
    settings = get_settings()
    return CircuitBreaker(
        name="backend_reads",
        failure_threshold=settings.CIRCUIT_BREAKER_FAILURE_THRESHOLD,
        recovery_timeout_sec=settings.CIRCUIT_BREAKER_RECOVERY_TIMEOUT_SEC,
    )


# =============================================================================
# Request-Scoped Dependencies (Per-Request Lifetime)
# =============================================================================


async def get_identity(
    authorization: Optional[str] = Header(default=None),
    gateway: AuthGateway = Depends(get_auth_gateway),
) -> Optional[Identity]:
    """Resolve ``Authorization: Bearer <token>``; anonymous if absent or invalid."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return await gateway.resolve(token.strip())


def get_follow_service(
    backend: BackendClient = Depends(get_backend),
    identity: Optional[Identity] = Depends(get_identity),
) -> FollowService:
    return FollowService(backend, StaticIdentityProvider(identity))


# =============================================================================
# Session Factories
# =============================================================================


def build_reels_session(
    backend: BackendClient,
    identity: Optional[Identity],
    request: SessionCreateRequest,
) -> ReelsSession:
    """Wire a reels session whose media calls queue into a command buffer."""
    settings = get_settings()
    buffer = CommandBuffer(request.capabilities)
    return ReelsSession(
        session_id=SessionRegistry.new_id(),
        loader=FeedDataLoader(
            backend,
            VideoItem,
            table="videos",
            page_size=min(settings.FEED_PAGE_SIZE, settings.MAX_FEED_PAGE_SIZE),
            circuit_breaker=get_read_circuit_breaker(),
        ),
        engagement=EngagementStateStore(
            backend,
            StaticIdentityProvider(identity),
            item_column="video_id",
            rollback_on_failure=settings.LIKE_ROLLBACK_ON_FAILURE,
        ),
        element_factory=lambda item_id: BufferedMediaElement(item_id, buffer),
        fullscreen_host=BufferedFullscreenHost(buffer),
        orientation=request.orientation,
        muted=request.muted,
        share_base_url=settings.SHARE_BASE_URL,
        command_buffer=buffer,
    )


def build_posts_session(
    backend: BackendClient,
    identity: Optional[Identity],
) -> FeedSession:
    settings = get_settings()
    return FeedSession(
        session_id=SessionRegistry.new_id(),
        loader=FeedDataLoader(
            backend,
            PostItem,
            table="posts",
            page_size=min(settings.FEED_PAGE_SIZE, settings.MAX_FEED_PAGE_SIZE),
            circuit_breaker=get_read_circuit_breaker(),
        ),
        engagement=EngagementStateStore(
            backend,
            StaticIdentityProvider(identity),
            item_column="post_id",
            rollback_on_failure=settings.LIKE_ROLLBACK_ON_FAILURE,
        ),
        share_base_url=settings.SHARE_BASE_URL,
    )


# =============================================================================
# Cleanup Functions
# =============================================================================


def clear_caches() -> None:
    """Close open sessions and clear cached singletons (for testing)."""
    get_session_registry().close_all()
    get_session_registry.cache_clear()
    get_read_circuit_breaker.cache_clear()
