"""
Pure task transitions: completion state machine, edits, collaboration.
"""

import uuid
from datetime import datetime, timezone

import pytest

from taskpulse.exceptions import ValidationError
from taskpulse.schemas import Priority, TaskCreate, TaskRead, TaskUpdate
from taskpulse.services import mutations

NOW = datetime(2026, 3, 2, 9, 30, tzinfo=timezone.utc)
LATER = datetime(2026, 3, 3, 17, 0, tzinfo=timezone.utc)


def make_task(**overrides) -> TaskRead:
    data = {
        "id": uuid.uuid4(),
        "owner_id": "user-alice",
        "title": "Write report",
        "description": None,
        "completed": False,
        "priority": Priority.MEDIUM,
        "category": "Work",
        "deadline": None,
        "estimated_time": 2.0,
        "actual_time": None,
        "completed_at": None,
        "created_at": NOW,
        "updated_at": NOW,
    }
    data.update(overrides)
    return TaskRead(**data)


class TestPrepareNewTask:

    def test_blank_title_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            mutations.prepare_new_task(TaskCreate(title="   ", priority="high"), "Personal")
        assert exc_info.value.field == "title"

    def test_title_trimmed_and_category_defaulted(self):
        prepared = mutations.prepare_new_task(
            TaskCreate(title="  Buy milk ", priority="low", category="  "),
            "Personal",
        )
        assert prepared.title == "Buy milk"
        assert prepared.category == "Personal"

    def test_explicit_category_kept(self):
        prepared = mutations.prepare_new_task(
            TaskCreate(title="Deploy", priority="high", category="Work"),
            "Personal",
        )
        assert prepared.category == "Work"


class TestToggleComplete:

    def test_complete_sets_completed_at(self):
        done = mutations.toggle_complete(make_task(), now=NOW)
        assert done.completed is True
        assert done.completed_at == NOW

    def test_reopen_clears_completed_at(self):
        task = make_task(completed=True, completed_at=NOW)
        reopened = mutations.toggle_complete(task, now=LATER)
        assert reopened.completed is False
        assert reopened.completed_at is None

    def test_round_trip_keeps_invariant(self):
        task = make_task()
        for _ in range(4):
            task = mutations.toggle_complete(task, now=NOW)
            assert task.completed == (task.completed_at is not None)

    def test_input_not_modified(self):
        task = make_task()
        mutations.toggle_complete(task, now=NOW)
        assert task.completed is False
        assert task.completed_at is None


class TestEditFields:

    def test_only_patched_fields_change(self):
        task = make_task(description="keep me")
        edited = mutations.edit_fields(task, TaskUpdate(priority="high"), "Personal")
        assert edited.priority == Priority.HIGH
        assert edited.description == "keep me"
        assert edited.title == task.title
        assert edited.id == task.id

    def test_explicit_none_clears_optional_field(self):
        task = make_task(deadline=NOW)
        edited = mutations.edit_fields(task, TaskUpdate(deadline=None), "Personal")
        assert edited.deadline is None

    def test_blank_title_rejected(self):
        with pytest.raises(ValidationError):
            mutations.edit_fields(make_task(), TaskUpdate(title=" "), "Personal")

    def test_blank_category_falls_back(self):
        edited = mutations.edit_fields(make_task(), TaskUpdate(category=""), "Personal")
        assert edited.category == "Personal"

    def test_completing_through_edit_stamps_completed_at(self):
        edited = mutations.edit_fields(make_task(), TaskUpdate(completed=True), "Personal", now=NOW)
        assert edited.completed_at == NOW

    def test_completing_twice_keeps_original_timestamp(self):
        task = make_task(completed=True, completed_at=NOW)
        edited = mutations.edit_fields(task, TaskUpdate(completed=True), "Personal", now=LATER)
        assert edited.completed_at == NOW

    def test_clearing_priority_rejected(self):
        with pytest.raises(ValidationError):
            mutations.edit_fields(make_task(), TaskUpdate(priority=None), "Personal")


class TestCollaboration:

    def test_assign(self):
        assigned = mutations.assign(make_task(), "m-1")
        assert assigned.collaboration.assigned_to == "m-1"

    def test_add_collaborator_twice_keeps_single_entry(self):
        task = mutations.add_collaborator(make_task(), "m-1")
        task = mutations.add_collaborator(task, "m-1")
        assert task.collaboration.collaborators == ["m-1"]

    def test_duplicate_collaborators_dropped_on_load(self):
        task = make_task(collaboration={"collaborators": ["m-1", "m-2", "m-1"]})
        assert task.collaboration.collaborators == ["m-1", "m-2"]

    def test_append_comment(self):
        task = mutations.append_comment(make_task(), "  Looks good  ", "user-bob", now=NOW)
        task = mutations.append_comment(task, "Ship it", "user-alice", now=LATER)

        comments = task.collaboration.comments
        assert [c.text for c in comments] == ["Looks good", "Ship it"]
        assert comments[0].author == "user-bob"
        assert comments[0].created_at == NOW
        assert comments[0].id != comments[1].id

    def test_blank_comment_rejected(self):
        with pytest.raises(ValidationError):
            mutations.append_comment(make_task(), "   ", "user-bob")


class TestChangedFields:

    def test_no_change_gives_empty_patch(self):
        task = make_task()
        assert mutations.changed_fields(task, task) == {}

    def test_patch_uses_plain_values(self):
        before = make_task()
        after = mutations.edit_fields(before, TaskUpdate(priority="low"), "Personal")
        patch = mutations.changed_fields(before, after)
        assert patch == {"priority": "low"}
        assert type(patch["priority"]) is str

    def test_collaboration_serialized_as_json(self):
        before = make_task()
        after = mutations.append_comment(before, "hi", "user-bob", now=NOW)
        patch = mutations.changed_fields(before, after)
        comment = patch["collaboration"]["comments"][0]
        assert comment["created_at"] == "2026-03-02T09:30:00Z"
        assert isinstance(comment["id"], str)
