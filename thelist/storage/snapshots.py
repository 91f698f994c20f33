"""Cache-or-store list snapshot loading."""

import time
from typing import Any, Callable

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from thelist.logging import get_logger
from thelist.storage.db import get_session_factory
from thelist.storage.repo_records import RecordsRepo

logger = get_logger(__name__)

Snapshot = dict[str, dict[str, Any]]

_cache: "SnapshotCache | None" = None


class SnapshotCache:
    """In-memory list snapshots keyed by (user_id, list_type) with TTL.

    Writes go through invalidate(); cached snapshots are never mutated in
    place, so a spin holding one keeps a stable view.
    """

    def __init__(self, ttl_seconds: int = 300, clock: Callable[[], float] = time.monotonic) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[tuple[str, str], tuple[float, Snapshot]] = {}

    def get(self, user_id: str, list_type: str) -> Snapshot | None:
        """Cached snapshot, or None if missing or expired."""
        entry = self._entries.get((user_id, list_type))
        if entry is None:
            return None
        stored_at, snapshot = entry
        if self._clock() - stored_at > self._ttl:
            del self._entries[(user_id, list_type)]
            return None
        return dict(snapshot)

    def put(self, user_id: str, list_type: str, snapshot: Snapshot) -> None:
        self._entries[(user_id, list_type)] = (self._clock(), dict(snapshot))

    def invalidate(self, user_id: str, list_type: str | None = None) -> None:
        """Drop one list, or every list of the user when list_type is None."""
        if list_type is not None:
            self._entries.pop((user_id, list_type), None)
            return
        for key in [k for k in self._entries if k[0] == user_id]:
            del self._entries[key]

    def prune(self) -> int:
        """Remove expired entries. Returns how many were removed."""
        now = self._clock()
        expired = [key for key, (stored_at, _) in self._entries.items() if now - stored_at > self._ttl]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)


def get_snapshot_cache() -> SnapshotCache:
    """Get or create the process-wide snapshot cache."""
    global _cache

    if _cache is None:
        from thelist.config import config
        _cache = SnapshotCache(ttl_seconds=config.snapshot_cache_ttl_seconds)

    return _cache


def make_snapshot_loader(
    user_id: str,
    cache: SnapshotCache | None = None,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
):
    """Build a loader that reads one list for user_id, cache first.

    Args:
        user_id: Owner of the lists
        cache: Snapshot cache (defaults to the process-wide one)
        session_factory: Session factory (defaults to the app's)

    Returns:
        Async callable list_type -> snapshot
    """

    async def load(list_type: str) -> Snapshot:
        snapshot_cache = cache or get_snapshot_cache()
        cached = snapshot_cache.get(user_id, list_type)
        if cached is not None:
            return cached

        factory = session_factory or get_session_factory()
        async with factory() as session:
            snapshot = await RecordsRepo(session).get_snapshot(user_id, list_type)

        snapshot_cache.put(user_id, list_type, snapshot)
        logger.debug(f"Loaded {len(snapshot)} records for {user_id}/{list_type}")
        return snapshot

    return load
