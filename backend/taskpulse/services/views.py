"""
Sorted and filtered projections of a task collection.

Projections are read-only: nothing here mutates its input or touches the
database. All sorts rely on sorted() being stable, so tasks with equal keys
keep their incoming order (newest first when fed from TaskStore).
"""

import locale
from collections.abc import Iterable, Sequence
from datetime import datetime
from enum import Enum
from typing import TypeVar

T = TypeVar("T")

PRIORITY_RANK = {"high": 0, "medium": 1, "low": 2}


class SortKey(str, Enum):
    PRIORITY = "priority"
    DEADLINE = "deadline"
    CATEGORY = "category"


class FilterKey(str, Enum):
    ALL = "all"
    TODO = "todo"
    DONE = "done"


def _priority_key(task) -> int:
    return PRIORITY_RANK[_plain(task.priority)]


def _deadline_key(task) -> tuple[bool, datetime]:
    # Undated tasks compare greater than any dated one and equal to each other
    if task.deadline is None:
        return (True, datetime.min)
    return (False, task.deadline)


def _category_key(task) -> tuple[str, str]:
    # Case-insensitive under the process collation; case only breaks ties
    return (locale.strxfrm(task.category.casefold()), locale.strxfrm(task.category))


def _plain(value) -> str:
    return value.value if isinstance(value, Enum) else value


SORT_KEYS = {
    SortKey.PRIORITY: _priority_key,
    SortKey.DEADLINE: _deadline_key,
    SortKey.CATEGORY: _category_key,
}


def filter_tasks(tasks: Iterable[T], filter_key: FilterKey = FilterKey.ALL) -> list[T]:
    if filter_key == FilterKey.TODO:
        return [task for task in tasks if not task.completed]
    if filter_key == FilterKey.DONE:
        return [task for task in tasks if task.completed]
    return list(tasks)


def sort_tasks(tasks: Iterable[T], sort_key: SortKey | None = None) -> list[T]:
    if sort_key is None:
        return list(tasks)
    return sorted(tasks, key=SORT_KEYS[SortKey(sort_key)])


def project(
    tasks: Sequence[T],
    sort_key: SortKey | None = None,
    filter_key: FilterKey = FilterKey.ALL,
) -> list[T]:
    """
    Filter, then sort, a task collection.

    Args:
        tasks: Any objects exposing completed, priority, deadline and category
        sort_key: priority (high, medium, low), deadline (ascending, undated
            last) or category (case-insensitive, locale collation); None keeps input order
        filter_key: all, todo (incomplete only) or done (completed only)

    Returns:
        A new list; the input sequence is left untouched.
    """
    return sort_tasks(filter_tasks(tasks, FilterKey(filter_key)), sort_key)


def distinct_categories(tasks: Iterable) -> list[str]:
    """Categories in use across the collection, in first-seen order."""
    return list(dict.fromkeys(task.category for task in tasks))
