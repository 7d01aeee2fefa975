"""
Posts feed API router.
Same session model as reels without playback: load, like, comment, share.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, status

from reelview.api.dependencies import (
    build_posts_session,
    get_backend,
    get_identity,
    get_session_registry,
)
from reelview.models.interfaces import BackendClient
from reelview.models.schemas import (
    Comment,
    CommentCreateRequest,
    EngagementResponse,
    Identity,
    PostsSessionResponse,
    PostView,
    ShareResponse,
)
from reelview.services.registry import SessionRegistry
from reelview.services.session import FeedSession

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/posts/sessions", tags=["posts"])


def _view(session: FeedSession) -> PostsSessionResponse:
    return PostsSessionResponse(
        session_id=session.session_id,
        status=session.status,
        error=session.error,
        items=[
            PostView(item=item, engagement=session.engagement_for(item.id))
            for item in session.items
        ],
    )


def _session(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
) -> FeedSession:
    return registry.get(session_id, FeedSession)


@router.post(
    "",
    response_model=PostsSessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Open Posts Session",
)
async def create_session(
    backend: BackendClient = Depends(get_backend),
    identity: Optional[Identity] = Depends(get_identity),
    registry: SessionRegistry = Depends(get_session_registry),
) -> PostsSessionResponse:
    session = build_posts_session(backend, identity)
    registry.add(session)
    await session.load()
    logger.info(
        f"Posts session opened: items={len(session.items)}",
        extra={"session_id": session.session_id},
    )
    return _view(session)


@router.get("/{session_id}", response_model=PostsSessionResponse, summary="Get Posts Session")
async def get_session(session: FeedSession = Depends(_session)) -> PostsSessionResponse:
    return _view(session)


@router.post("/{session_id}/reload", response_model=PostsSessionResponse, summary="Reload Posts")
async def reload_session(session: FeedSession = Depends(_session)) -> PostsSessionResponse:
    await session.load()
    return _view(session)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Close Posts Session")
async def close_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
) -> None:
    registry.get(session_id, FeedSession)
    registry.remove(session_id)


@router.post("/{session_id}/items/{item_id}/like", response_model=EngagementResponse, summary="Toggle Like")
async def like_item(item_id: str, session: FeedSession = Depends(_session)) -> EngagementResponse:
    engagement = await session.toggle_like(item_id)
    return EngagementResponse(item_id=item_id, engagement=engagement)


@router.get("/{session_id}/items/{item_id}/comments", response_model=List[Comment], summary="List Comments")
async def list_comments(item_id: str, session: FeedSession = Depends(_session)) -> List[Comment]:
    return await session.list_comments(item_id)


@router.post(
    "/{session_id}/items/{item_id}/comments",
    response_model=Comment,
    status_code=status.HTTP_201_CREATED,
    summary="Add Comment",
)
async def add_comment(
    item_id: str,
    body: CommentCreateRequest,
    session: FeedSession = Depends(_session),
) -> Comment:
    return await session.add_comment(item_id, body.content)


@router.post("/{session_id}/items/{item_id}/share", response_model=ShareResponse, summary="Share Link")
async def share_item(item_id: str, session: FeedSession = Depends(_session)) -> ShareResponse:
    url = await session.share(item_id)
    return ShareResponse(item_id=item_id, url=url)
