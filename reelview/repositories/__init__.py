"""Backend implementations package."""
from .memory import InMemoryAuthGateway, InMemoryBackend

__all__ = [
    "InMemoryAuthGateway",
    "InMemoryBackend",
]
