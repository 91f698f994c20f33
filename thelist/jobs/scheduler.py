"""APScheduler configuration and job management."""

from apscheduler.jobstores.base import JobLookupError
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from thelist.logging import get_logger

logger = get_logger(__name__)

_scheduler: AsyncIOScheduler | None = None

CACHE_PRUNE_JOB_ID = "cache_prune"


def get_scheduler() -> AsyncIOScheduler:
    """Get or create the scheduler instance."""
    global _scheduler

    if _scheduler is None:
        logger.info("Creating scheduler")
        _scheduler = AsyncIOScheduler(
            jobstores={"default": MemoryJobStore()},
            job_defaults={
                "coalesce": True,
                "max_instances": 1,
                "misfire_grace_time": 60,
            },
        )

    return _scheduler


def start_scheduler() -> None:
    """Start the scheduler if not already running."""
    scheduler = get_scheduler()
    if not scheduler.running:
        logger.info("Starting scheduler")
        scheduler.start()


def shutdown_scheduler() -> None:
    """Shutdown the scheduler gracefully."""
    global _scheduler
    if _scheduler is not None and _scheduler.running:
        logger.info("Shutting down scheduler")
        _scheduler.shutdown(wait=False)
    _scheduler = None


def add_job(func, trigger: str, **kwargs) -> str:
    """Add a job to the scheduler."""
    scheduler = get_scheduler()
    job = scheduler.add_job(func, trigger, **kwargs)
    logger.info(f"Added job {job.id} with trigger {trigger}")
    return job.id


def remove_job(job_id: str) -> bool:
    """Remove a job from the scheduler."""
    scheduler = get_scheduler()
    try:
        scheduler.remove_job(job_id)
        logger.info(f"Removed job {job_id}")
        return True
    except JobLookupError:
        logger.warning(f"Job {job_id} not found")
        return False


def setup_cache_prune_job(interval_minutes: int | None = None) -> str | None:
    """Schedule the snapshot cache / session prune.

    Args:
        interval_minutes: Override for CACHE_PRUNE_INTERVAL_MINUTES

    Returns:
        Job id, or None when the interval is not positive
    """
    from thelist.jobs.cache_prune import run_cache_prune

    if interval_minutes is None:
        from thelist.config import config
        interval_minutes = config.cache_prune_interval_minutes

    if interval_minutes <= 0:
        logger.info("Cache prune job not scheduled: CACHE_PRUNE_INTERVAL_MINUTES <= 0")
        return None

    job = get_scheduler().add_job(
        run_cache_prune,
        "interval",
        minutes=interval_minutes,
        id=CACHE_PRUNE_JOB_ID,
        name="Snapshot Cache Prune",
        replace_existing=True,
    )
    logger.info(f"Scheduled cache_prune: every {interval_minutes}m, job_id={job.id}")
    return job.id


def setup_all_jobs() -> None:
    """Setup all scheduled jobs."""
    setup_cache_prune_job()
    logger.info("All jobs configured")
