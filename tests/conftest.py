"""
Pytest configuration and fixtures.
"""
from typing import List

import pytest
from fastapi.testclient import TestClient

from reelview.api.dependencies import clear_caches, get_auth_gateway, get_backend
from reelview.core.exceptions import MediaApiFailure
from reelview.main import app
from reelview.models.interfaces import StaticIdentityProvider
from reelview.models.schemas import Identity
from reelview.repositories.memory import InMemoryAuthGateway, InMemoryBackend


class FakeMediaElement:
    """MediaElement double that records calls and fails on demand."""

    def __init__(self, item_id: str = "v1") -> None:
        self.item_id = item_id
        self.calls: List[str] = []
        self.fail: set = set()

    async def _call(self, name: str) -> None:
        self.calls.append(name)
        if name in self.fail:
            raise MediaApiFailure(name, "denied by test")

    async def play(self) -> None:
        await self._call("play")

    async def pause(self) -> None:
        await self._call("pause")

    async def set_muted(self, muted: bool) -> None:
        await self._call(f"muted={muted}")

    async def request_fullscreen(self) -> None:
        await self._call("element_fullscreen")

    async def enter_vendor_fullscreen(self) -> None:
        await self._call("vendor_fullscreen")

    async def exit_vendor_fullscreen(self) -> None:
        await self._call("exit_vendor_fullscreen")


class FakeFullscreenHost:
    """FullscreenHost double; container fullscreen can be switched off."""

    def __init__(self) -> None:
        self.calls: List[str] = []
        self.fail: set = set()

    async def request_fullscreen(self, item_id: str) -> None:
        self.calls.append(f"container_fullscreen:{item_id}")
        if "request" in self.fail:
            raise MediaApiFailure("request_fullscreen", "denied by test")

    async def exit_fullscreen(self) -> None:
        self.calls.append("exit_fullscreen")
        if "exit" in self.fail:
            raise MediaApiFailure("exit_fullscreen", "denied by test")


class FakeClipboard:
    def __init__(self) -> None:
        self.text = None

    async def write_text(self, text: str) -> None:
        self.text = text


@pytest.fixture
def backend():
    """Seeded in-memory backend."""
    return InMemoryBackend()


@pytest.fixture
def empty_backend():
    """In-memory backend with no rows."""
    return InMemoryBackend(seed=False)


@pytest.fixture
def alice():
    return Identity(id="u1", email="alice@reelview.test")


@pytest.fixture
def signed_in(alice):
    """Identity context for the seeded user alice (u1)."""
    return StaticIdentityProvider(alice)


@pytest.fixture
def signed_out():
    return StaticIdentityProvider(None)


@pytest.fixture
def element():
    return FakeMediaElement()


@pytest.fixture
def host():
    return FakeFullscreenHost()


@pytest.fixture
def clipboard():
    return FakeClipboard()


@pytest.fixture
def test_client(backend):
    """
    TestClient fixture with dependency overrides.
    Uses the in-memory backend for isolation.
    """
    app.dependency_overrides[get_backend] = lambda: backend
    app.dependency_overrides[get_auth_gateway] = lambda: InMemoryAuthGateway(backend)

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
    clear_caches()
