"""
ARQ Worker for background stats reconciliation.

This worker handles:
- refresh_user_stats: Recomputes one user's stats (enqueued by integrations
  that write tasks outside the API)
- reconcile_all_stats: Cron sweep over every user

Usage:
    arq taskpulse.worker.WorkerSettings
"""

from arq import cron
from arq.connections import RedisSettings

from taskpulse.config import get_settings
from taskpulse.services.reconcile import reconcile_all_stats, refresh_user_stats
from taskpulse.logging_config import setup_logging, get_logger

# Initialize logging for the worker
setup_logging()
logger = get_logger(__name__)

settings = get_settings()


def parse_redis_url(url: str) -> RedisSettings:
    """Parse redis URL into RedisSettings."""
    # redis://localhost:6380/0 -> host=localhost, port=6380, database=0
    url = url.replace("redis://", "")
    database = 0
    if "/" in url:
        url, db_part = url.split("/", 1)
        if db_part:
            database = int(db_part)
    if ":" in url:
        host, port = url.split(":")
        return RedisSettings(host=host, port=int(port), database=database)
    return RedisSettings(host=url, database=database)


def reconcile_minutes(every: int) -> set[int]:
    """Minutes past the hour at which the sweep runs, `every` minutes apart."""
    every = min(max(every, 1), 60)
    return set(range(0, 60, every))


async def startup(ctx: dict) -> None:
    logger.info("ARQ Worker starting up...")
    logger.info(f"Redis: {settings.redis_url}")


async def shutdown(ctx: dict) -> None:
    logger.info("ARQ Worker shutting down...")


class WorkerSettings:
    """ARQ Worker configuration."""

    functions = [refresh_user_stats]
    cron_jobs = [
        cron(
            reconcile_all_stats,
            minute=reconcile_minutes(settings.stats_reconcile_minutes),
            run_at_startup=True,
        ),
    ]
    on_startup = startup
    on_shutdown = shutdown
    redis_settings = parse_redis_url(settings.redis_url)
    max_jobs = 10
    job_timeout = 300  # 5 minutes max per job
