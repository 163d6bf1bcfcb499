"""
Background stats reconciliation.

Mutations keep UserStats current on their own. These jobs exist for rows
that drift anyway, for example when a time tracker writes actual_time
straight into the tasks table. Both jobs simply recompute from the task
collection, so running them at any time is safe.
"""

from sqlmodel import select

from taskpulse.database import get_session_context
from taskpulse.models import Task, UserStats
from taskpulse.services.insights import recompute_user_stats
from taskpulse.logging_config import get_logger

logger = get_logger(__name__)


async def refresh_user_stats(ctx: dict, user_id: str) -> str:
    """
    ARQ job: Recompute stats for one user.

    Args:
        ctx: ARQ context
        user_id: Owner whose stats should be rebuilt

    Returns:
        Status message
    """
    async with get_session_context() as session:
        stats = await recompute_user_stats(session, user_id)
        return (
            f"Refreshed stats for {user_id}: "
            f"{stats.completed_tasks}/{stats.total_tasks} completed"
        )


async def reconcile_all_stats(ctx: dict) -> str:
    """
    ARQ cron job: Recompute stats for every known user.

    Covers users that have tasks and users that only have a stats row left
    over (all of their tasks deleted out of band).

    Returns:
        Status message
    """
    async with get_session_context() as session:
        owners = await session.execute(select(Task.owner_id).distinct())
        stat_users = await session.execute(select(UserStats.user_id))
        user_ids = sorted(set(owners.scalars().all()) | set(stat_users.scalars().all()))

        for user_id in user_ids:
            await recompute_user_stats(session, user_id)

    logger.info(f"Reconciled stats for {len(user_ids)} users")
    return f"Reconciled {len(user_ids)} users"
