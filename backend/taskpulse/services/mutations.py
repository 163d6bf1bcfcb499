"""
Pure state transitions for a task.

Every function here takes a TaskRead snapshot plus caller input and returns
a new snapshot; nothing is persisted and the input is never modified.
TaskStore.apply() diffs the result with changed_fields() and writes only
what moved.

Completion state machine:
- Incomplete -> Complete: completed_at := now
- Complete -> Incomplete: completed_at := None
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Any

from taskpulse.exceptions import ValidationError
from taskpulse.models.columns import utc_now
from taskpulse.schemas.task import Comment, TaskCreate, TaskRead, TaskUpdate

# Columns a mutation may change; id, owner_id and timestamps are never patched
MUTABLE_FIELDS = (
    "title",
    "description",
    "completed",
    "priority",
    "category",
    "deadline",
    "estimated_time",
    "actual_time",
    "completed_at",
)


def _replace(task: TaskRead, **changes: Any) -> TaskRead:
    # Re-validate so the Collaboration invariants run on every transition
    return TaskRead.model_validate({**task.model_dump(), **changes})


def clean_title(title: str | None) -> str:
    cleaned = (title or "").strip()
    if not cleaned:
        raise ValidationError("Task title cannot be empty", field="title")
    return cleaned


def clean_category(category: str | None, default_category: str) -> str:
    cleaned = (category or "").strip()
    return cleaned or default_category


def _completion_timestamp(completed: bool, previous: TaskRead | None, now: datetime) -> datetime | None:
    if not completed:
        return None
    if previous is not None and previous.completed and previous.completed_at is not None:
        return previous.completed_at
    return now


def prepare_new_task(task_in: TaskCreate, default_category: str) -> TaskCreate:
    """
    Validate and normalize input for a new task.

    Raises:
        ValidationError: If the title is empty or whitespace-only.
    """
    return task_in.model_copy(update={
        "title": clean_title(task_in.title),
        "category": clean_category(task_in.category, default_category),
    })


def toggle_complete(task: TaskRead, now: datetime | None = None) -> TaskRead:
    """Flip completion and derive completed_at from the new state."""
    completed = not task.completed
    return _replace(
        task,
        completed=completed,
        completed_at=(now or utc_now()) if completed else None,
    )


def edit_fields(
    task: TaskRead,
    patch: TaskUpdate,
    default_category: str,
    now: datetime | None = None,
) -> TaskRead:
    """
    Shallow merge of the fields explicitly set on the patch.

    Title and category follow the same rules as creation. Sending
    completed re-derives completed_at; completed_at itself cannot be patched.
    """
    changes = patch.model_dump(exclude_unset=True)

    if "title" in changes:
        changes["title"] = clean_title(changes["title"])
    if "category" in changes:
        changes["category"] = clean_category(changes["category"], default_category)
    if "priority" in changes and changes["priority"] is None:
        raise ValidationError("Priority cannot be cleared", field="priority")
    if "completed" in changes:
        if changes["completed"] is None:
            raise ValidationError("Completed must be true or false", field="completed")
        changes["completed_at"] = _completion_timestamp(
            changes["completed"], task, now or utc_now()
        )

    return _replace(task, **changes)


def assign(task: TaskRead, member_id: str) -> TaskRead:
    collaboration = task.collaboration.model_copy(update={"assigned_to": member_id})
    return _replace(task, collaboration=collaboration.model_dump())


def add_collaborator(task: TaskRead, member_id: str) -> TaskRead:
    """Add a collaborator; adding one who is already present changes nothing."""
    if member_id in task.collaboration.collaborators:
        return task
    collaborators = [*task.collaboration.collaborators, member_id]
    collaboration = task.collaboration.model_copy(update={"collaborators": collaborators})
    return _replace(task, collaboration=collaboration.model_dump())


def append_comment(
    task: TaskRead,
    text: str,
    author: str,
    now: datetime | None = None,
) -> TaskRead:
    """
    Append a comment authored by `author`.

    Raises:
        ValidationError: If the comment text is empty or whitespace-only.
    """
    if not text or not text.strip():
        raise ValidationError("Comment cannot be empty", field="text")

    comment = Comment(
        id=uuid.uuid4(),
        text=text.strip(),
        author=author,
        created_at=now or utc_now(),
    )
    comments = [*task.collaboration.comments, comment]
    collaboration = task.collaboration.model_copy(update={"comments": comments})
    return _replace(task, collaboration=collaboration.model_dump())


def changed_fields(before: TaskRead, after: TaskRead) -> dict[str, Any]:
    """
    Column patch that turns `before` into `after`.

    Enum values are stored as their plain string and collaboration as JSON.
    """
    patch = {}
    for field in MUTABLE_FIELDS:
        value = getattr(after, field)
        if value != getattr(before, field):
            patch[field] = value.value if isinstance(value, Enum) else value

    if after.collaboration != before.collaboration:
        patch["collaboration"] = after.collaboration.model_dump(mode="json")

    return patch
