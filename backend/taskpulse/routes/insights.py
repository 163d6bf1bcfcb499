"""
Insights routes for the TaskPulse API.

Predictions are historical means over completed tasks with the same
priority and category, not model output.
"""

import uuid
from fastapi import APIRouter, Depends

from taskpulse.dependencies import get_task_store
from taskpulse.schemas import (
    InsightsRead,
    PredictionRead,
    PredictionRequest,
    TaskRead,
    UserStatsRead,
)
from taskpulse.services.insights import predict, priority_breakdown, similar_tasks
from taskpulse.services.mutations import clean_category
from taskpulse.services.task_store import TaskStore
from taskpulse.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter()


def _prediction(tasks: list, candidate) -> PredictionRead:
    return PredictionRead(
        predicted_time=predict(tasks, candidate),
        based_on=len(similar_tasks(tasks, candidate)),
    )


@router.get("/", response_model=InsightsRead)
async def get_insights(
    task_id: uuid.UUID | None = None,
    store: TaskStore = Depends(get_task_store),
) -> InsightsRead:
    """
    Stats, per-priority completion and, with `task_id`, a duration
    prediction for that task.
    """
    tasks = await store.list_for_user()
    stats = await store.get_stats()

    prediction = None
    if task_id is not None:
        candidate = TaskRead.model_validate(await store.get(task_id))
        # The candidate never counts as its own history
        history = [task for task in tasks if task.id != candidate.id]
        prediction = _prediction(history, candidate)

    return InsightsRead(
        stats=UserStatsRead.model_validate(stats),
        priority_breakdown=priority_breakdown(tasks),
        task_id=task_id,
        prediction=prediction,
    )


@router.post("/predict", response_model=PredictionRead)
async def predict_duration(
    candidate: PredictionRequest,
    store: TaskStore = Depends(get_task_store),
) -> PredictionRead:
    """Estimate hours for a task that has not been created yet."""
    candidate = candidate.model_copy(
        update={"category": clean_category(candidate.category, store.default_category)}
    )
    tasks = await store.list_for_user()
    result = _prediction(tasks, candidate)
    logger.debug(
        f"Predicted {result.predicted_time:.2f}h for {candidate.priority.value}/{candidate.category} "
        f"from {result.based_on} tasks"
    )
    return result
