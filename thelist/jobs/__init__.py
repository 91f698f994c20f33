"""Jobs module for scheduled tasks and background processing."""

from thelist.jobs.cache_prune import PruneStats, run_cache_prune
from thelist.jobs.scheduler import (
    add_job,
    get_scheduler,
    remove_job,
    setup_all_jobs,
    setup_cache_prune_job,
    shutdown_scheduler,
    start_scheduler,
)

__all__ = [
    "add_job",
    "get_scheduler",
    "remove_job",
    "run_cache_prune",
    "setup_all_jobs",
    "setup_cache_prune_job",
    "shutdown_scheduler",
    "start_scheduler",
    "PruneStats",
]
