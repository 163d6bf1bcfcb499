"""
Stats routes for the TaskPulse API.
"""

from fastapi import APIRouter, Depends

from taskpulse.dependencies import get_task_store
from taskpulse.models import UserStats
from taskpulse.schemas import UserStatsRead
from taskpulse.services.task_store import TaskStore

router = APIRouter()


@router.get("/", response_model=UserStatsRead)
async def get_stats(
    store: TaskStore = Depends(get_task_store),
) -> UserStats:
    """Persisted stats for the caller, as of their last mutation."""
    return await store.get_stats()


@router.post("/refresh", response_model=UserStatsRead)
async def refresh_stats(
    store: TaskStore = Depends(get_task_store),
) -> UserStats:
    """Recompute the caller's stats from their tasks and persist the result."""
    return await store.refresh_stats()
