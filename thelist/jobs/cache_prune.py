"""Periodic cleanup of in-memory snapshot cache, sessions and idle panels."""

from dataclasses import dataclass

from thelist.logging import get_logger

logger = get_logger(__name__)


@dataclass
class PruneStats:
    """Counts of entries removed by one prune run."""

    snapshots: int = 0
    sessions: int = 0
    panels: int = 0


async def run_cache_prune() -> PruneStats:
    """Drop expired snapshots and sessions, and panels with nothing in flight.

    Returns:
        PruneStats for the run
    """
    from thelist.bot.session import user_sessions, wheel_panels
    from thelist.storage.snapshots import get_snapshot_cache

    stats = PruneStats(
        snapshots=get_snapshot_cache().prune(),
        sessions=user_sessions.prune_expired(),
        panels=wheel_panels.prune_idle(),
    )

    if stats.snapshots or stats.sessions or stats.panels:
        logger.info(
            f"Cache prune: snapshots={stats.snapshots} "
            f"sessions={stats.sessions} panels={stats.panels}"
        )
    return stats
