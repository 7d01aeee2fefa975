"""
Tests for the follow graph service.
"""
import pytest

from reelview.core.exceptions import RemoteWriteFailure, UnauthenticatedError, ValidationError
from reelview.services.follow import FollowService


class TestFollowService:
    @pytest.mark.asyncio
    async def test_is_following(self, backend, signed_in):
        service = FollowService(backend, signed_in)

        assert await service.is_following("u3") is True
        assert await service.is_following("u2") is False

    @pytest.mark.asyncio
    async def test_signed_out_is_not_following(self, backend, signed_out):
        service = FollowService(backend, signed_out)

        assert await service.is_following("u3") is False
        with pytest.raises(UnauthenticatedError):
            await service.toggle_follow("u3")

    @pytest.mark.asyncio
    async def test_toggle_follow(self, backend, signed_in):
        service = FollowService(backend, signed_in)

        assert await service.toggle_follow("u2") is True
        assert await service.counts("u2") == {"followers": 1, "following": 0}

        assert await service.toggle_follow("u2") is False
        assert await service.counts("u2") == {"followers": 0, "following": 0}

    @pytest.mark.asyncio
    async def test_cannot_follow_self(self, backend, signed_in):
        service = FollowService(backend, signed_in)

        with pytest.raises(ValidationError):
            await service.toggle_follow("u1")

    @pytest.mark.asyncio
    async def test_write_failure_propagates(self, backend, signed_in):
        backend.write_failures.add("followers")
        service = FollowService(backend, signed_in)

        with pytest.raises(RemoteWriteFailure):
            await service.toggle_follow("u3")

        assert await service.is_following("u3") is True

    @pytest.mark.asyncio
    async def test_counts(self, backend, signed_in):
        service = FollowService(backend, signed_in)

        assert await service.counts("u3") == {"followers": 2, "following": 0}
        assert await service.counts("u1") == {"followers": 0, "following": 1}
