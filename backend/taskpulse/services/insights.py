"""
Completion statistics and duration prediction.

The per-user UserStats row is a cache over the task collection: it is only
ever written by recompute_user_stats(), which rebuilds it from scratch, so it
is always a deterministic function of the tasks at the time of the last call.

The duration "prediction" is a plain historical mean over completed tasks
with the same priority and category. It is not a trained model.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from taskpulse.models import Task, UserStats
from taskpulse.models.columns import utc_now
from taskpulse.schemas.stats import PriorityCount
from taskpulse.schemas.task import Priority
from taskpulse.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class StatsSnapshot:
    """Aggregate values for one task collection."""
    total_tasks: int
    completed_tasks: int
    completion_rate: float  # percent, 0 when there are no tasks
    avg_completion_time: float  # hours, 0 when no completed task has actual_time


def _plain(value) -> str:
    return value.value if isinstance(value, Enum) else value


def compute_stats(tasks: Iterable) -> StatsSnapshot:
    """
    Aggregate a task collection.

    avg_completion_time averages actual_time over completed tasks that
    have one; completed tasks without tracked time are left out entirely
    rather than counted as zero.
    """
    tasks = list(tasks)
    completed = [task for task in tasks if task.completed]
    tracked = [task.actual_time for task in completed if task.actual_time is not None]

    total = len(tasks)
    return StatsSnapshot(
        total_tasks=total,
        completed_tasks=len(completed),
        completion_rate=len(completed) / total * 100 if total else 0.0,
        avg_completion_time=sum(tracked) / len(tracked) if tracked else 0.0,
    )


def priority_breakdown(tasks: Iterable) -> dict[Priority, PriorityCount]:
    """Total and completed counts per priority, always with all three keys."""
    counts = {priority: PriorityCount() for priority in Priority}
    for task in tasks:
        bucket = counts[Priority(_plain(task.priority))]
        bucket.total += 1
        if task.completed:
            bucket.completed += 1
    return counts


def similar_tasks(tasks: Iterable, candidate) -> list:
    """Completed tasks sharing the candidate's priority and category."""
    priority = _plain(candidate.priority)
    return [
        task for task in tasks
        if task.completed
        and _plain(task.priority) == priority
        and task.category == candidate.category
    ]


def predict(tasks: Sequence, candidate) -> float:
    """
    Estimate hours for `candidate` from completed similar tasks.

    Returns the mean actual_time of similar tasks (missing values count as 0).
    With no similar history it falls back to the candidate's own
    estimated_time, or 0.
    """
    similar = similar_tasks(tasks, candidate)
    if similar:
        return sum(task.actual_time or 0 for task in similar) / len(similar)
    return candidate.estimated_time or 0.0


async def recompute_user_stats(session: AsyncSession, user_id: str) -> UserStats:
    """
    Rebuild and upsert the UserStats row for `user_id`.

    Reads the tasks through the same session, so unflushed changes from the
    current transaction are included. The caller owns the commit.
    """
    result = await session.execute(select(Task).where(Task.owner_id == user_id))
    snapshot = compute_stats(result.scalars().all())

    stats = await session.get(UserStats, user_id)
    if stats is None:
        stats = UserStats(user_id=user_id)
        session.add(stats)

    stats.total_tasks = snapshot.total_tasks
    stats.completed_tasks = snapshot.completed_tasks
    stats.completion_rate = snapshot.completion_rate
    stats.avg_completion_time = snapshot.avg_completion_time
    stats.updated_at = utc_now()

    await session.flush()

    logger.debug(
        f"Recomputed stats for user={user_id}: "
        f"{snapshot.completed_tasks}/{snapshot.total_tasks} done, "
        f"avg={snapshot.avg_completion_time:.2f}h"
    )
    return stats
