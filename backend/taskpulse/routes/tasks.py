"""
Task routes for the TaskPulse API.
"""

import uuid
from fastapi import APIRouter, Depends, status

from taskpulse.auth import AuthenticatedUser, get_current_user
from taskpulse.config import Settings, get_settings
from taskpulse.dependencies import get_task_store
from taskpulse.models import Task
from taskpulse.schemas import (
    TaskCreate,
    TaskUpdate,
    TaskRead,
    AssignRequest,
    CollaboratorRequest,
    CommentCreate,
)
from taskpulse.services import mutations
from taskpulse.services.task_store import TaskStore
from taskpulse.services.views import FilterKey, SortKey, distinct_categories, project
from taskpulse.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.post("/", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
async def create_task(
    task_in: TaskCreate,
    store: TaskStore = Depends(get_task_store),
) -> Task:
    """
    Create a new task.

    A blank title is rejected with 422 and nothing is stored. A missing or
    blank category falls back to the configured default.
    """
    return await store.create(task_in)


@router.get("/", response_model=list[TaskRead])
async def list_tasks(
    sort: SortKey | None = None,
    filter: FilterKey = FilterKey.ALL,
    store: TaskStore = Depends(get_task_store),
) -> list[Task]:
    """
    List the caller's tasks.

    Without `sort`, tasks come newest first. Sorting is stable, so ties keep
    that order.
    """
    tasks = await store.list_for_user()
    return project(tasks, sort_key=sort, filter_key=filter)


@router.get("/categories", response_model=list[str])
async def list_categories(
    store: TaskStore = Depends(get_task_store),
    settings: Settings = Depends(get_settings),
) -> list[str]:
    """Categories in use across the caller's tasks, or the default when there are none."""
    categories = distinct_categories(await store.list_for_user())
    return categories or [settings.default_category]


@router.get("/{task_id}", response_model=TaskRead)
async def get_task(
    task_id: uuid.UUID,
    store: TaskStore = Depends(get_task_store),
) -> Task:
    """Get a task by ID."""
    return await store.get(task_id)


@router.patch("/{task_id}", response_model=TaskRead)
async def update_task(
    task_id: uuid.UUID,
    task_in: TaskUpdate,
    store: TaskStore = Depends(get_task_store),
) -> Task:
    """
    Edit a task.

    Only fields present in the body change. Setting `completed` stamps or
    clears completed_at.
    """
    return await store.apply(
        task_id,
        mutations.edit_fields,
        task_in,
        default_category=store.default_category,
    )


@router.post("/{task_id}/toggle", response_model=TaskRead)
async def toggle_task(
    task_id: uuid.UUID,
    store: TaskStore = Depends(get_task_store),
) -> Task:
    """Complete an open task, or reopen a completed one."""
    return await store.apply(task_id, mutations.toggle_complete)


@router.post("/{task_id}/assign", response_model=TaskRead)
async def assign_task(
    task_id: uuid.UUID,
    body: AssignRequest,
    store: TaskStore = Depends(get_task_store),
) -> Task:
    return await store.apply(task_id, mutations.assign, body.member_id)


@router.post("/{task_id}/collaborators", response_model=TaskRead)
async def add_collaborator(
    task_id: uuid.UUID,
    body: CollaboratorRequest,
    store: TaskStore = Depends(get_task_store),
) -> Task:
    """Add a collaborator. Adding someone twice is a no-op."""
    return await store.apply(task_id, mutations.add_collaborator, body.member_id)


@router.post("/{task_id}/comments", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
async def add_comment(
    task_id: uuid.UUID,
    body: CommentCreate,
    store: TaskStore = Depends(get_task_store),
    user: AuthenticatedUser = Depends(get_current_user),
) -> Task:
    """Append a comment authored by the caller."""
    return await store.apply(task_id, mutations.append_comment, body.text, user.uid)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: uuid.UUID,
    store: TaskStore = Depends(get_task_store),
) -> None:
    """Delete a task. Unknown or foreign IDs return 404 and leave stats untouched."""
    await store.delete(task_id)
