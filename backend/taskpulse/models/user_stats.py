from datetime import datetime
from sqlmodel import SQLModel, Field

from taskpulse.models.columns import UTCTimestamp, utc_now


class UserStats(SQLModel, table=True):
    """
    Cached aggregate over one user's tasks.

    Never edited directly: services.insights.recompute_user_stats overwrites
    the whole row from the current task collection.
    """

    __tablename__ = "user_stats"

    user_id: str = Field(primary_key=True)
    total_tasks: int = Field(default=0, ge=0)
    completed_tasks: int = Field(default=0, ge=0)
    completion_rate: float = Field(default=0.0)  # percent, 0-100
    avg_completion_time: float = Field(default=0.0)  # hours
    updated_at: datetime = Field(default_factory=utc_now, sa_type=UTCTimestamp)
