"""
Request-scoped dependencies shared by the routers.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskpulse.auth import AuthenticatedUser, get_current_user
from taskpulse.config import Settings, get_settings
from taskpulse.database import get_session
from taskpulse.services.task_store import TaskStore


async def get_task_store(
    session: AsyncSession = Depends(get_session),
    user: AuthenticatedUser = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
) -> TaskStore:
    """TaskStore bound to the authenticated caller."""
    return TaskStore(session, user.uid, default_category=settings.default_category)
