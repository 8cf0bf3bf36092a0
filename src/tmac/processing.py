from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List

from .errors import InvariantViolation
from .models import Task, TodoStatus


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class TodoStatistics:
    """
    Counts over a collection of todos.
    """
    total: int = 0
    completed: int = 0
    pending: int = 0


# PUBLIC_INTERFACE
def filter_by_status(todos: Iterable[Task], status: TodoStatus) -> List[Task]:
    """
    Return the todos whose status equals `status`, in their original order.
    """
    return [t for t in todos if t.status() == status]


# PUBLIC_INTERFACE
def calculate_statistics(todos: Iterable[Task]) -> TodoStatistics:
    """
    Calculate the total number of todos and how many are completed and pending.
    """
    items = list(todos)
    total = len(items)
    completed = len(filter_by_status(items, TodoStatus.COMPLETE))
    return TodoStatistics(total=total, completed=completed, pending=total - completed)


# PUBLIC_INTERFACE
def group_by_user(todos: Iterable[Task]) -> Dict[Any, List[Task]]:
    """
    Group todos by owner id, keeping first-seen order of owners and todos.

    Todos without an owner id are grouped under the None key. Buckets are plain
    dict keys, so owner ids that compare equal (1, 1.0, True) share a bucket;
    use `is_owned_by` for type-strict checks. Unhashable owner ids raise
    InvariantViolation.
    """
    groups: Dict[Any, List[Task]] = {}
    for t in todos:
        owner = getattr(t, "user_id", None)
        try:
            bucket = groups.setdefault(owner, [])
        except TypeError:
            raise InvariantViolation(f"owner id {owner!r} of todo {t.id!r} cannot be grouped") from None
        bucket.append(t)
    return groups
