from taskpulse.models.task import Task
from taskpulse.models.user_stats import UserStats

__all__ = ["Task", "UserStats"]
