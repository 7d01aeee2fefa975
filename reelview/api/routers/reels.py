"""
Reels API router.
Drives a reels session from a thin host shell: the shell forwards scroll,
orientation and media events and executes the media commands returned in
each response.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, status

from reelview.api.dependencies import (
    build_reels_session,
    get_backend,
    get_identity,
    get_session_registry,
)
from reelview.models.interfaces import BackendClient
from reelview.models.schemas import (
    Comment,
    CommentCreateRequest,
    EngagementResponse,
    FullscreenEventRequest,
    Identity,
    OrientationRequest,
    PlaybackEventRequest,
    ReelsSessionResponse,
    ReelView,
    ScrollRequest,
    SessionCreateRequest,
    ShareResponse,
)
from reelview.services.registry import SessionRegistry
from reelview.services.session import ReelsSession

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/reels/sessions", tags=["reels"])


def _view(session: ReelsSession) -> ReelsSessionResponse:
    """Session snapshot plus the media commands queued since the last call."""
    return ReelsSessionResponse(
        session_id=session.session_id,
        status=session.status,
        error=session.error,
        active_index=session.active_index,
        orientation=session.orientation,
        items=[
            ReelView(
                item=item,
                engagement=session.engagement_for(item.id),
                playback=session.playback_state(item.id),
            )
            for item in session.items
        ],
        commands=session.drain_commands(),
    )


def _session(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
) -> ReelsSession:
    return registry.get(session_id, ReelsSession)


# =============================================================================
# Session lifecycle
# =============================================================================


@router.post(
    "",
    response_model=ReelsSessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Open Reels Session",
)
async def create_session(
    request: SessionCreateRequest,
    backend: BackendClient = Depends(get_backend),
    identity: Optional[Identity] = Depends(get_identity),
    registry: SessionRegistry = Depends(get_session_registry),
) -> ReelsSessionResponse:
    """
    Open a reels session and load the first page.

    The first item is activated immediately, so the response already
    carries its autoplay (and, in landscape, fullscreen) commands.
    """
    session = build_reels_session(backend, identity, request)
    registry.add(session)
    await session.load()
    logger.info(
        f"Reels session opened: items={len(session.items)}, status={session.status.value}",
        extra={"session_id": session.session_id},
    )
    return _view(session)


@router.get("/{session_id}", response_model=ReelsSessionResponse, summary="Get Reels Session")
async def get_session(session: ReelsSession = Depends(_session)) -> ReelsSessionResponse:
    return _view(session)


@router.post("/{session_id}/reload", response_model=ReelsSessionResponse, summary="Reload Reels")
async def reload_session(session: ReelsSession = Depends(_session)) -> ReelsSessionResponse:
    """Re-fetch the first page; the item list and engagement are replaced."""
    await session.load()
    return _view(session)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Close Reels Session")
async def close_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
) -> None:
    registry.get(session_id, ReelsSession)
    registry.remove(session_id)


# =============================================================================
# Host events
# =============================================================================


@router.post("/{session_id}/scroll", response_model=ReelsSessionResponse, summary="Report Scroll")
async def report_scroll(
    body: ScrollRequest,
    session: ReelsSession = Depends(_session),
) -> ReelsSessionResponse:
    await session.on_scroll(body.offset, body.item_height)
    return _view(session)


@router.post("/{session_id}/orientation", response_model=ReelsSessionResponse, summary="Report Orientation")
async def report_orientation(
    body: OrientationRequest,
    session: ReelsSession = Depends(_session),
) -> ReelsSessionResponse:
    await session.on_orientation_change(body.orientation)
    return _view(session)


@router.post(
    "/{session_id}/items/{item_id}/fullscreen-events",
    response_model=ReelsSessionResponse,
    summary="Report Fullscreen Change",
)
async def report_fullscreen_event(
    item_id: str,
    body: FullscreenEventRequest,
    session: ReelsSession = Depends(_session),
) -> ReelsSessionResponse:
    session.on_fullscreen_event(item_id, body.source, body.is_fullscreen)
    return _view(session)


@router.post(
    "/{session_id}/items/{item_id}/playback-events",
    response_model=ReelsSessionResponse,
    summary="Report Playback Outcome",
)
async def report_playback_event(
    item_id: str,
    body: PlaybackEventRequest,
    session: ReelsSession = Depends(_session),
) -> ReelsSessionResponse:
    await session.on_playback_event(item_id, body.event)
    return _view(session)


# =============================================================================
# User controls
# =============================================================================


@router.post("/{session_id}/items/{item_id}/tap", response_model=ReelsSessionResponse, summary="Toggle Play")
async def tap_item(item_id: str, session: ReelsSession = Depends(_session)) -> ReelsSessionResponse:
    await session.toggle_play(item_id)
    return _view(session)


@router.post("/{session_id}/items/{item_id}/mute", response_model=ReelsSessionResponse, summary="Toggle Mute")
async def mute_item(item_id: str, session: ReelsSession = Depends(_session)) -> ReelsSessionResponse:
    await session.toggle_mute(item_id)
    return _view(session)


@router.post(
    "/{session_id}/items/{item_id}/fullscreen",
    response_model=ReelsSessionResponse,
    summary="Enter Fullscreen",
)
async def enter_fullscreen(item_id: str, session: ReelsSession = Depends(_session)) -> ReelsSessionResponse:
    await session.enter_fullscreen(item_id)
    return _view(session)


@router.delete(
    "/{session_id}/items/{item_id}/fullscreen",
    response_model=ReelsSessionResponse,
    summary="Exit Fullscreen",
)
async def exit_fullscreen(item_id: str, session: ReelsSession = Depends(_session)) -> ReelsSessionResponse:
    await session.exit_fullscreen(item_id)
    return _view(session)


# =============================================================================
# Engagement
# =============================================================================


@router.post("/{session_id}/items/{item_id}/like", response_model=EngagementResponse, summary="Toggle Like")
async def like_item(item_id: str, session: ReelsSession = Depends(_session)) -> EngagementResponse:
    engagement = await session.toggle_like(item_id)
    return EngagementResponse(item_id=item_id, engagement=engagement)


@router.get("/{session_id}/items/{item_id}/comments", response_model=List[Comment], summary="List Comments")
async def list_comments(item_id: str, session: ReelsSession = Depends(_session)) -> List[Comment]:
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
    session: ReelsSession = Depends(_session),
) -> Comment:
    return await session.add_comment(item_id, body.content)


@router.post("/{session_id}/items/{item_id}/share", response_model=ShareResponse, summary="Share Link")
async def share_item(item_id: str, session: ReelsSession = Depends(_session)) -> ShareResponse:
    url = await session.share(item_id)
    return ShareResponse(item_id=item_id, url=url)
