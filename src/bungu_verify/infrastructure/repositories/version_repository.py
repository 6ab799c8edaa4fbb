"""Cache-backed change counters the front end polls to detect tournament updates."""

from typing import Any


class VersionCounterRepository:
    def __init__(self, cache: Any):
        """Initialize with a cache client (Redis or InMemoryCache).

        Args:
            cache: Cache client implementing get/incr operations
        """
        self.cache = cache

    @staticmethod
    def _key(tournament_id: str) -> str:
        return f"tour:{tournament_id}:version"

    async def get(self, tournament_id: str) -> int:
        """Current version, 0 when the counter was never bumped."""
        value = await self.cache.get(self._key(tournament_id))
        if value is None:
            return 0
        return int(value)

    async def increment(self, tournament_id: str) -> int:
        return int(await self.cache.incr(self._key(tournament_id)))
