"""
Owner-scoped task persistence.

TaskStore is the single source of truth for one user's tasks. Every write
goes through the same sequence inside one transaction:

    write task row -> flush -> recompute_user_stats() -> commit

so a caller that sees a mutation succeed can immediately rely on the
persisted UserStats. Any database error rolls the whole transaction back and
surfaces as BackendUnavailableError; nothing is retried here.
"""

import uuid
from contextlib import asynccontextmanager
from typing import Any, Callable

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from taskpulse.config import get_settings
from taskpulse.exceptions import BackendUnavailableError, NotFoundError, ValidationError
from taskpulse.logging_config import get_logger
from taskpulse.models import Task, UserStats
from taskpulse.models.columns import as_utc, utc_now
from taskpulse.schemas.task import Collaboration, Priority, TaskCreate, TaskRead
from taskpulse.services.insights import recompute_user_stats
from taskpulse.services.mutations import (
    MUTABLE_FIELDS,
    changed_fields,
    clean_category,
    clean_title,
    prepare_new_task,
)

logger = get_logger(__name__)

# completed_at is derived from completed, never patched directly
PATCHABLE_FIELDS = (frozenset(MUTABLE_FIELDS) - {"completed_at"}) | {"collaboration"}


class TaskStore:
    """CRUD over the tasks owned by `owner_id`."""

    def __init__(
        self,
        session: AsyncSession,
        owner_id: str,
        default_category: str | None = None,
    ):
        self._session = session
        self.owner_id = owner_id
        self.default_category = default_category or get_settings().default_category

    @asynccontextmanager
    async def _backend(self, operation: str):
        try:
            yield
        except SQLAlchemyError as exc:
            logger.error(f"Backend failure during '{operation}' for user={self.owner_id}: {exc}")
            await self._session.rollback()
            raise BackendUnavailableError(operation) from exc

    async def _get_owned(self, task_id: uuid.UUID) -> Task:
        result = await self._session.execute(
            select(Task).where(Task.id == task_id, Task.owner_id == self.owner_id)
        )
        task = result.scalar_one_or_none()
        if task is None:
            raise NotFoundError("Task", str(task_id))
        return task

    async def _commit_with_stats(self) -> None:
        await recompute_user_stats(self._session, self.owner_id)
        await self._session.commit()

    async def create(self, task_in: TaskCreate) -> Task:
        """
        Create a task for the owner.

        Raises:
            ValidationError: Blank title; nothing is written.
        """
        data = prepare_new_task(task_in, self.default_category).model_dump()
        task = Task(owner_id=self.owner_id, **data)
        if task.completed:
            task.completed_at = utc_now()

        async with self._backend("create task"):
            self._session.add(task)
            await self._session.flush()
            await self._commit_with_stats()

        logger.info(
            f"Created task: id={task.id} title='{task.title}' "
            f"priority={task.priority} category='{task.category}' user={self.owner_id}"
        )
        return task

    async def list_for_user(self) -> list[Task]:
        """The owner's tasks, most recently created first."""
        async with self._backend("load tasks"):
            result = await self._session.execute(
                select(Task)
                .where(Task.owner_id == self.owner_id)
                .order_by(Task.created_at.desc())
            )
            tasks = list(result.scalars().all())

        logger.debug(f"Listed {len(tasks)} tasks for user={self.owner_id}")
        return tasks

    async def get(self, task_id: uuid.UUID) -> Task:
        async with self._backend("load task"):
            return await self._get_owned(task_id)

    def _clean_patch(self, task: Task, patch: dict[str, Any]) -> dict[str, Any]:
        """
        Hold a raw patch to the same rules as create and edit_fields.

        completed_at is never taken from the patch; it follows completed.
        """
        patch = dict(patch)

        if "title" in patch:
            patch["title"] = clean_title(patch["title"])
        if "category" in patch:
            patch["category"] = clean_category(patch["category"], self.default_category)
        if "priority" in patch:
            try:
                patch["priority"] = Priority(patch["priority"]).value
            except ValueError:
                raise ValidationError(f"Unknown priority: {patch['priority']!r}", field="priority") from None
        for field in ("estimated_time", "actual_time"):
            if patch.get(field) is not None and patch[field] < 0:
                raise ValidationError(f"{field} cannot be negative", field=field)
        if "deadline" in patch:
            patch["deadline"] = as_utc(patch["deadline"])
        if "collaboration" in patch:
            try:
                collaboration = Collaboration.model_validate(patch["collaboration"] or {})
            except PydanticValidationError as exc:
                raise ValidationError(f"Invalid collaboration: {exc.errors()[0]['msg']}", field="collaboration") from exc
            patch["collaboration"] = collaboration.model_dump(mode="json")

        if "completed" in patch:
            if patch["completed"] is None:
                raise ValidationError("Completed must be true or false", field="completed")
            patch["completed"] = bool(patch["completed"])
            if not patch["completed"]:
                patch["completed_at"] = None
            elif not task.completed or task.completed_at is None:
                patch["completed_at"] = utc_now()

        return patch

    async def update(self, task_id: uuid.UUID, patch: dict[str, Any]) -> Task:
        """
        Apply a shallow field patch.

        A completed false->true change stamps completed_at with the current
        time; true->false clears it. Titles, categories and collaboration go
        through the same normalization as the mutators.

        Raises:
            ValidationError: Unknown field or a value that breaks a task rule;
                nothing is written.
            NotFoundError: The task is missing or belongs to another user.
        """
        unknown = set(patch) - PATCHABLE_FIELDS
        if unknown:
            raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        async with self._backend("update task"):
            task = await self._get_owned(task_id)
            patch = self._clean_patch(task, patch)

            logger.info(f"Updating task {task_id} for user={self.owner_id}: {sorted(patch)}")

            for field, value in patch.items():
                setattr(task, field, value)
            task.updated_at = utc_now()

            self._session.add(task)
            await self._session.flush()
            await self._commit_with_stats()

        return task

    async def apply(
        self,
        task_id: uuid.UUID,
        mutation: Callable[..., TaskRead],
        *args: Any,
        **kwargs: Any,
    ) -> Task:
        """
        Run a pure mutation against the stored task and persist the difference.

        `mutation` receives the current TaskRead snapshot followed by *args and
        **kwargs (see services.mutations). A mutation that changes nothing,
        such as re-adding an existing collaborator, writes nothing.
        """
        task = await self.get(task_id)
        before = TaskRead.model_validate(task)
        after = mutation(before, *args, **kwargs)

        patch = changed_fields(before, after)
        patch.pop("completed_at", None)
        if not patch:
            logger.debug(f"{mutation.__name__} on task {task_id} changed nothing")
            return task

        return await self.update(task_id, patch)

    async def delete(self, task_id: uuid.UUID) -> None:
        """
        Delete a task.

        Raises:
            NotFoundError: The task is missing or belongs to another user;
                stats are left untouched.
        """
        async with self._backend("delete task"):
            task = await self._get_owned(task_id)
            logger.info(f"Deleting task {task_id}: '{task.title}' user={self.owner_id}")
            await self._session.delete(task)
            await self._session.flush()
            await self._commit_with_stats()

    async def refresh_stats(self) -> UserStats:
        """Recompute and persist the owner's stats from the current tasks."""
        async with self._backend("refresh stats"):
            stats = await recompute_user_stats(self._session, self.owner_id)
            await self._session.commit()
        return stats

    async def get_stats(self) -> UserStats:
        """Persisted stats, computed on first access if no row exists yet."""
        async with self._backend("load stats"):
            stats = await self._session.get(UserStats, self.owner_id)
        if stats is None:
            logger.info(f"No stats row for user={self.owner_id}, computing")
            stats = await self.refresh_stats()
        return stats
