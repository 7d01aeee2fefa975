"""
Follow graph API router.
"""
from fastapi import APIRouter, Depends

from reelview.api.dependencies import get_follow_service
from reelview.models.schemas import FollowResponse
from reelview.services.follow import FollowService

router = APIRouter(prefix="/v1/follows", tags=["follows"])


async def _follow_view(user_id: str, service: FollowService, is_following: bool) -> FollowResponse:
    counts = await service.counts(user_id)
    return FollowResponse(
        user_id=user_id,
        is_following=is_following,
        followers_count=counts["followers"],
        following_count=counts["following"],
    )


@router.get("/{user_id}", response_model=FollowResponse, summary="Follow Status")
async def get_follow_status(
    user_id: str,
    service: FollowService = Depends(get_follow_service),
) -> FollowResponse:
    """Whether the caller follows ``user_id``, plus the profile's counts."""
    return await _follow_view(user_id, service, await service.is_following(user_id))


@router.post("/{user_id}", response_model=FollowResponse, summary="Toggle Follow")
async def toggle_follow(
    user_id: str,
    service: FollowService = Depends(get_follow_service),
) -> FollowResponse:
    is_following = await service.toggle_follow(user_id)
    return await _follow_view(user_id, service, is_following)
