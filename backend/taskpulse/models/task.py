import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Column
from sqlmodel import SQLModel, Field

from taskpulse.models.columns import UTCTimestamp, utc_now


class Task(SQLModel, table=True):
    """
    Task model, one row per task, scoped to its owner.

    Key fields:
    - owner_id: Identity of the user the task belongs to; every query filters on it
    - completed_at: Set exactly while completed is true
    - collaboration: {assigned_to, collaborators, comments}, validated by
      schemas.task.Collaboration before it is written
    """

    __tablename__ = "tasks"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    owner_id: str = Field(index=True)

    title: str
    description: str | None = Field(default=None)
    completed: bool = Field(default=False, index=True)
    priority: str = Field(index=True)  # high | medium | low
    category: str = Field(index=True)
    deadline: datetime | None = Field(default=None, sa_type=UTCTimestamp)

    # Hours
    estimated_time: float | None = Field(default=None, ge=0)
    actual_time: float | None = Field(default=None, ge=0)

    completed_at: datetime | None = Field(default=None, sa_type=UTCTimestamp)

    collaboration: dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False),
    )

    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCTimestamp, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=UTCTimestamp)
