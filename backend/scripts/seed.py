#!/usr/bin/env python3
"""
Seed script to generate demo tasks for one user.

Creates a mix of open and completed tasks across priorities and categories,
with tracked time on most completed ones, so the insights endpoints have
history to work with. Tasks go through TaskStore, so stats are kept in sync
exactly as they are for API writes.

Usage:
    python -m scripts.seed --user <firebase uid> [--tasks 40] [--clear]

Options:
    --user UID    Owner of the generated tasks (required)
    --tasks N     Number of tasks to create (default: 40)
    --clear       Delete the user's existing tasks first
    --seed N      Random seed for reproducible data
"""

import argparse
import asyncio
import random
import time
from datetime import timedelta

from sqlalchemy import delete

from taskpulse.database import async_session_maker, init_db
from taskpulse.models import Task
from taskpulse.models.columns import utc_now
from taskpulse.schemas import Priority, TaskCreate
from taskpulse.services.task_store import TaskStore

CATEGORIES = ["Personal", "Work", "Errands", "Learning"]
TITLES = {
    "Personal": ["Call the dentist", "Plan weekend trip", "Renew passport", "Sort photos"],
    "Work": ["Review pull request", "Write quarterly report", "Prepare demo", "Triage bug queue"],
    "Errands": ["Buy groceries", "Pick up dry cleaning", "Return library books", "Car service"],
    "Learning": ["Finish SQL course module", "Read chapter 4", "Practice Spanish", "Watch talk"],
}


async def clear_tasks(user_id: str) -> None:
    """Delete every task owned by the user."""
    print(f"Clearing tasks for {user_id}...")
    async with async_session_maker() as session:
        await session.execute(delete(Task).where(Task.owner_id == user_id))
        store = TaskStore(session, user_id)
        await store.refresh_stats()
    print("Tasks cleared.")


def generate_tasks(count: int, rng: random.Random) -> list[tuple[TaskCreate, float | None]]:
    """
    Build task payloads with an optional actual_time.

    A non-None actual_time marks the task for completion after creation.
    """
    now = utc_now()
    generated = []
    for _ in range(count):
        category = rng.choice(CATEGORIES)
        priority = rng.choice(list(Priority))
        estimate = round(rng.uniform(0.5, 6.0), 1)
        deadline = now + timedelta(days=rng.randint(-5, 30)) if rng.random() < 0.7 else None

        task_in = TaskCreate(
            title=rng.choice(TITLES[category]),
            priority=priority,
            category=category,
            deadline=deadline,
            estimated_time=estimate,
        )

        actual_time = None
        if rng.random() < 0.5:
            # Tracked time lands between 70% and 160% of the estimate
            actual_time = round(estimate * rng.uniform(0.7, 1.6), 1)
        generated.append((task_in, actual_time))
    return generated


async def insert_tasks(user_id: str, payloads: list[tuple[TaskCreate, float | None]]) -> None:
    async with async_session_maker() as session:
        store = TaskStore(session, user_id)
        for task_in, actual_time in payloads:
            task = await store.create(task_in)
            if actual_time is not None:
                await store.update(task.id, {"completed": True, "actual_time": actual_time})


async def print_stats(user_id: str) -> None:
    async with async_session_maker() as session:
        stats = await TaskStore(session, user_id).get_stats()

    print(f"\n=== Stats for {user_id} ===")
    print(f"Tasks:           {stats.total_tasks}")
    print(f"Completed:       {stats.completed_tasks}")
    print(f"Completion rate: {stats.completion_rate:.1f}%")
    print(f"Avg time:        {stats.avg_completion_time:.2f}h")


async def main():
    parser = argparse.ArgumentParser(description="Seed the database with demo tasks")
    parser.add_argument("--user", type=str, required=True, help="Owner uid for the tasks")
    parser.add_argument("--tasks", type=int, default=40, help="Number of tasks to create")
    parser.add_argument("--clear", action="store_true", help="Clear the user's tasks first")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")

    args = parser.parse_args()

    print("=== TaskPulse Seed Script ===")

    await init_db()

    if args.clear:
        await clear_tasks(args.user)

    rng = random.Random(args.seed)
    payloads = generate_tasks(args.tasks, rng)

    start_time = time.time()
    await insert_tasks(args.user, payloads)
    print(f"Inserted {len(payloads)} tasks in {time.time() - start_time:.2f}s")

    await print_stats(args.user)

    print("\n=== Seeding Complete ===")


if __name__ == "__main__":
    asyncio.run(main())
