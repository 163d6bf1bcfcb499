import uuid
from datetime import datetime
from enum import Enum
from pydantic import BaseModel, Field, field_validator

from taskpulse.models.columns import as_utc


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Comment(BaseModel):
    """A single comment on a task. Comments are append-only."""
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    text: str
    author: str
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def _created_utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class Collaboration(BaseModel):
    """
    Optional collaboration metadata attached to a task.

    Member identifiers are stored as-is; resolving them to names is the
    member directory's job.
    """
    assigned_to: str | None = None
    collaborators: list[str] = Field(default_factory=list)
    comments: list[Comment] = Field(default_factory=list)

    @field_validator("collaborators")
    @classmethod
    def _unique_collaborators(cls, value: list[str]) -> list[str]:
        # First occurrence wins, order preserved
        return list(dict.fromkeys(value))


class TaskCreate(BaseModel):
    """Schema for creating a new task."""
    title: str
    description: str | None = None
    priority: Priority
    category: str | None = None  # Falls back to DEFAULT_CATEGORY
    deadline: datetime | None = None
    estimated_time: float | None = Field(default=None, ge=0)
    completed: bool = False

    model_config = {"use_enum_values": True}

    @field_validator("deadline")
    @classmethod
    def _deadline_utc(cls, value: datetime | None) -> datetime | None:
        return as_utc(value)


class TaskUpdate(BaseModel):
    """
    Schema for editing a task.

    Only fields present in the request body are applied; everything else is
    preserved.
    """
    title: str | None = None
    description: str | None = None
    priority: Priority | None = None
    category: str | None = None
    deadline: datetime | None = None
    estimated_time: float | None = Field(default=None, ge=0)
    actual_time: float | None = Field(default=None, ge=0)  # From time tracking
    completed: bool | None = None

    model_config = {"use_enum_values": True}

    @field_validator("deadline")
    @classmethod
    def _deadline_utc(cls, value: datetime | None) -> datetime | None:
        return as_utc(value)


class TaskRead(BaseModel):
    """Schema for reading a task; also the snapshot type the mutators work on."""
    id: uuid.UUID
    owner_id: str
    title: str
    description: str | None
    completed: bool
    priority: Priority
    category: str
    deadline: datetime | None
    estimated_time: float | None
    actual_time: float | None
    completed_at: datetime | None
    collaboration: Collaboration = Field(default_factory=Collaboration)
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @field_validator("deadline", "completed_at", "created_at", "updated_at")
    @classmethod
    def _timestamps_utc(cls, value: datetime | None) -> datetime | None:
        return as_utc(value)


class AssignRequest(BaseModel):
    member_id: str


class CollaboratorRequest(BaseModel):
    member_id: str


class CommentCreate(BaseModel):
    text: str
