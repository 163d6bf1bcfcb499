"""
TaskStore: owner scoping, completion stamping, stats kept in step with writes.
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import OperationalError

from taskpulse.exceptions import BackendUnavailableError, NotFoundError, ValidationError
from taskpulse.models import UserStats
from taskpulse.schemas import TaskCreate, TaskUpdate
from taskpulse.services import mutations
from taskpulse.services.task_store import TaskStore
from tests.conftest import OTHER_USER, TEST_USER


def new_task(title="Write report", priority="medium", **kwargs) -> TaskCreate:
    return TaskCreate(title=title, priority=priority, **kwargs)


async def stats_row(session, user_id=TEST_USER) -> UserStats | None:
    return await session.get(UserStats, user_id)


class TestCreate:

    async def test_defaults(self, store, test_session):
        task = await store.create(new_task(category=None))

        assert task.owner_id == TEST_USER
        assert task.completed is False
        assert task.completed_at is None
        assert task.category == "Personal"
        assert isinstance(task.id, uuid.UUID)

        stats = await stats_row(test_session)
        assert stats.total_tasks == 1
        assert stats.completed_tasks == 0

    async def test_created_completed_gets_timestamp(self, store):
        task = await store.create(new_task(completed=True))
        assert task.completed is True
        assert task.completed_at is not None

    async def test_blank_title_leaves_collection_unchanged(self, store, test_session):
        await store.create(new_task("Existing"))

        with pytest.raises(ValidationError):
            await store.create(new_task("  \t "))

        assert len(await store.list_for_user()) == 1
        assert (await stats_row(test_session)).total_tasks == 1


class TestListForUser:

    async def test_only_own_tasks(self, test_session, store):
        other = TaskStore(test_session, OTHER_USER, default_category="Personal")
        await store.create(new_task("mine"))
        await other.create(new_task("theirs"))

        assert [t.title for t in await store.list_for_user()] == ["mine"]
        assert [t.title for t in await other.list_for_user()] == ["theirs"]


class TestUpdate:

    async def test_complete_then_reopen(self, store, test_session):
        task = await store.create(new_task())

        done = await store.update(task.id, {"completed": True})
        assert done.completed is True
        assert done.completed_at is not None
        assert (await stats_row(test_session)).completed_tasks == 1

        reopened = await store.update(task.id, {"completed": False})
        assert reopened.completed is False
        assert reopened.completed_at is None
        assert (await stats_row(test_session)).completed_tasks == 0

    async def test_foreign_task_not_found(self, test_session, store):
        other = TaskStore(test_session, OTHER_USER)
        task = await other.create(new_task("theirs"))

        with pytest.raises(NotFoundError):
            await store.update(task.id, {"title": "hijacked"})

        assert (await other.get(task.id)).title == "theirs"

    async def test_identity_fields_rejected(self, store):
        task = await store.create(new_task())
        with pytest.raises(ValidationError):
            await store.update(task.id, {"owner_id": OTHER_USER})

    async def test_completed_at_not_patchable(self, store):
        task = await store.create(new_task())
        await store.update(task.id, {"completed": True})

        with pytest.raises(ValidationError):
            await store.update(task.id, {"completed_at": None})

        task = await store.get(task.id)
        assert task.completed is True
        assert task.completed_at is not None

    async def test_completing_twice_keeps_first_stamp(self, store):
        task = await store.create(new_task())
        first = (await store.update(task.id, {"completed": True})).completed_at

        again = await store.update(task.id, {"completed": True})
        assert again.completed_at == first

    async def test_blank_title_rejected(self, store):
        task = await store.create(new_task("Keep me"))

        with pytest.raises(ValidationError):
            await store.update(task.id, {"title": "   "})

        assert (await store.get(task.id)).title == "Keep me"

    async def test_title_and_category_normalized(self, store):
        task = await store.create(new_task(category="Work"))

        updated = await store.update(task.id, {"title": "  Renamed ", "category": ""})

        assert updated.title == "Renamed"
        assert updated.category == "Personal"

    async def test_unknown_priority_rejected(self, store):
        task = await store.create(new_task())
        with pytest.raises(ValidationError):
            await store.update(task.id, {"priority": "urgent"})

    async def test_duplicate_collaborators_collapsed(self, store, test_session):
        task = await store.create(new_task())

        await store.update(task.id, {
            "collaboration": {"assigned_to": "m-1", "collaborators": ["m-2", "m-2", "m-3"], "comments": []},
        })

        test_session.expunge_all()
        reloaded = await store.get(task.id)
        assert reloaded.collaboration["collaborators"] == ["m-2", "m-3"]
        assert reloaded.collaboration["assigned_to"] == "m-1"

    async def test_timestamps_are_utc_after_reload(self, store, test_session):
        task = await store.create(new_task(deadline=datetime(2026, 4, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))))
        await store.update(task.id, {"completed": True})

        test_session.expunge_all()
        reloaded = await store.get(task.id)
        assert reloaded.deadline == datetime(2026, 4, 1, 12, 0, tzinfo=timezone.utc)
        assert reloaded.deadline.utcoffset() == timedelta(0)
        assert reloaded.created_at.tzinfo is not None
        assert reloaded.completed_at.tzinfo is not None

    async def test_actual_time_feeds_average(self, store, test_session):
        task = await store.create(new_task())
        await store.update(task.id, {"completed": True, "actual_time": 2.5})

        stats = await stats_row(test_session)
        assert stats.avg_completion_time == 2.5
        assert stats.completion_rate == 100.0


class TestApply:

    async def test_toggle_round_trip(self, store):
        task = await store.create(new_task())

        task = await store.apply(task.id, mutations.toggle_complete)
        assert task.completed and task.completed_at is not None

        task = await store.apply(task.id, mutations.toggle_complete)
        assert not task.completed and task.completed_at is None

    async def test_edit_preserves_other_fields(self, store):
        task = await store.create(new_task(description="details", estimated_time=3))
        edited = await store.apply(
            task.id, mutations.edit_fields, TaskUpdate(title="Renamed"), "Personal"
        )
        assert edited.title == "Renamed"
        assert edited.description == "details"
        assert edited.estimated_time == 3

    async def test_collaborator_added_once(self, store):
        task = await store.create(new_task())
        await store.apply(task.id, mutations.add_collaborator, "m-1")
        task = await store.apply(task.id, mutations.add_collaborator, "m-1")
        assert task.collaboration["collaborators"] == ["m-1"]

    async def test_comment_persisted(self, store, test_session):
        task = await store.create(new_task())
        await store.apply(task.id, mutations.append_comment, "First!", TEST_USER)

        test_session.expunge_all()
        reloaded = await store.get(task.id)
        comments = reloaded.collaboration["comments"]
        assert len(comments) == 1
        assert comments[0]["text"] == "First!"
        assert comments[0]["author"] == TEST_USER


class TestDelete:

    async def test_delete_updates_stats(self, store, test_session):
        keep = await store.create(new_task("keep"))
        drop = await store.create(new_task("drop", completed=True))

        await store.delete(drop.id)

        assert [t.id for t in await store.list_for_user()] == [keep.id]
        stats = await stats_row(test_session)
        assert stats.total_tasks == 1
        assert stats.completed_tasks == 0

    async def test_missing_task_leaves_stats_unchanged(self, store, test_session):
        await store.create(new_task(completed=True))
        before = await stats_row(test_session)
        snapshot = (before.total_tasks, before.completed_tasks, before.updated_at)

        with pytest.raises(NotFoundError):
            await store.delete(uuid.uuid4())

        after = await stats_row(test_session)
        assert (after.total_tasks, after.completed_tasks, after.updated_at) == snapshot


class TestBackendFailure:

    async def test_failed_commit_rolls_back(self, store, test_session, monkeypatch):
        await store.create(new_task("existing"))

        async def broken_commit():
            raise OperationalError("COMMIT", {}, Exception("connection reset"))

        monkeypatch.setattr(test_session, "commit", broken_commit)

        with pytest.raises(BackendUnavailableError):
            await store.create(new_task("lost"))

        monkeypatch.undo()
        assert [t.title for t in await store.list_for_user()] == ["existing"]
        assert (await stats_row(test_session)).total_tasks == 1


class TestStats:

    async def test_get_stats_computes_missing_row(self, store, test_session):
        stats = await store.get_stats()
        assert stats.user_id == TEST_USER
        assert stats.total_tasks == 0
        assert await stats_row(test_session) is not None
