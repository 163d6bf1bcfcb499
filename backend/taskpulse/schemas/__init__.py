from taskpulse.schemas.task import (
    Priority,
    Comment,
    Collaboration,
    TaskCreate,
    TaskUpdate,
    TaskRead,
    AssignRequest,
    CollaboratorRequest,
    CommentCreate,
)
from taskpulse.schemas.stats import (
    UserStatsRead,
    PriorityCount,
    PredictionRequest,
    PredictionRead,
    InsightsRead,
)
from taskpulse.schemas.member import Member

__all__ = [
    "Priority",
    "Comment",
    "Collaboration",
    "TaskCreate",
    "TaskUpdate",
    "TaskRead",
    "AssignRequest",
    "CollaboratorRequest",
    "CommentCreate",
    "UserStatsRead",
    "PriorityCount",
    "PredictionRequest",
    "PredictionRead",
    "InsightsRead",
    "Member",
]
