"""Challenge store adapters: in-process memory and Redis."""

from .memory_store import InMemoryChallengeStore
from .redis_store import RedisChallengeStore

__all__ = ["InMemoryChallengeStore", "RedisChallengeStore"]
