import uuid
from datetime import datetime
from pydantic import BaseModel, Field, computed_field

from taskpulse.schemas.task import Priority


class UserStatsRead(BaseModel):
    """Schema for reading the persisted per-user statistics."""
    user_id: str
    total_tasks: int
    completed_tasks: int
    completion_rate: float
    avg_completion_time: float
    updated_at: datetime

    model_config = {"from_attributes": True}


class PriorityCount(BaseModel):
    total: int = 0
    completed: int = 0

    @computed_field
    @property
    def completion_rate(self) -> float:
        """Percent of tasks at this priority that are completed."""
        return self.completed / self.total * 100 if self.total else 0.0


class PredictionRequest(BaseModel):
    """A candidate task to estimate, typically one that is not created yet."""
    priority: Priority
    category: str | None = None  # Blank means DEFAULT_CATEGORY, as on create
    estimated_time: float | None = Field(default=None, ge=0)


class PredictionRead(BaseModel):
    predicted_time: float
    based_on: int  # Number of completed similar tasks; 0 means the estimate was echoed


class InsightsRead(BaseModel):
    """Everything the insights panel shows in one response."""
    stats: UserStatsRead
    priority_breakdown: dict[Priority, PriorityCount]
    task_id: uuid.UUID | None = None
    prediction: PredictionRead | None = None
