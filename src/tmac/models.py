from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, MutableSequence
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from .errors import DeserializationError, InvariantViolation
from .schemas import DueDateInput, PriorityTodoRecord, TodoRecord, UserRecord, parse_due_date

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class TodoStatus(str, Enum):
    """Status of a todo, always derived from its completion flag."""

    PENDING = "PENDING"
    COMPLETE = "COMPLETE"


def _strict_equals(left: Any, right: Any) -> bool:
    # 1 != "1" and True != 1
    return type(left) is type(right) and left == right


def _validate(schema: type, record: Any) -> Any:
    if record is None:
        raise DeserializationError("record is None")
    try:
        return schema.model_validate(record)
    except PydanticValidationError as e:
        raise DeserializationError(str(e)) from e


# PUBLIC_INTERFACE
@dataclass
class Todo:
    """
    A unit of work with a completion flag and an owner reference.

    Fields:
    - id: unique id (opaque)
    - title: todo title
    - completed: completion flag; stored as given, read by truthiness
    - user_id: id of the owning user (foreign key only)
    """

    kind: ClassVar[str] = "todo"

    id: Any
    title: Any
    completed: Any
    user_id: Any

    @classmethod
    def from_dict(cls, record: Any) -> Optional["Todo"]:
        """
        Build a Todo from an API record.

        Returns None (and logs one error) when the record is missing or malformed.
        Absent fields become None; `completed` is coerced to bool.
        """
        try:
            return cls._from_record(record)
        except DeserializationError as err:
            logger.error("Couldn't create todo from dict: %s", err)
            return None

    @classmethod
    def _from_record(cls, record: Any) -> "Todo":
        data: TodoRecord = _validate(TodoRecord, record)
        return cls(data.id, data.title, data.completed, data.user_id)

    def toggle(self) -> None:
        """Toggles todo state. Completed <-> Not Completed"""
        self.completed = not self.completed

    def status(self) -> TodoStatus:
        return TodoStatus.COMPLETE if self.completed else TodoStatus.PENDING

    def is_owned_by(self, user_id: Any) -> bool:
        return _strict_equals(self.user_id, user_id)

    def is_overdue(self) -> bool:
        """A plain todo has no due date and is never overdue."""
        return False

    def serialize(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "completed": self.completed,
            "userId": self.user_id,
        }


# PUBLIC_INTERFACE
@dataclass
class PriorityTodo:
    """
    A todo variant with a priority and an optional due date.

    Shares the Todo capabilities (status, ownership, toggle, serialize) and adds
    the overdue check. `serialize()` keeps the plain todo shape; priority and
    due date are not part of the exported snapshot.
    """

    kind: ClassVar[str] = "priority"

    id: Any
    title: Any
    completed: Any
    user_id: Any
    priority: Any = None
    due_date: Optional[DueDateInput] = None

    @classmethod
    def from_dict(cls, record: Any) -> Optional["PriorityTodo"]:
        """
        Build a PriorityTodo from a record with optional `priority` and `dueDate` keys.
        """
        try:
            return cls._from_record(record)
        except DeserializationError as err:
            logger.error("Couldn't create todo from dict: %s", err)
            return None

    @classmethod
    def _from_record(cls, record: Any) -> "PriorityTodo":
        data: PriorityTodoRecord = _validate(PriorityTodoRecord, record)
        return cls(data.id, data.title, data.completed, data.user_id, data.priority, data.due_date)

    def toggle(self) -> None:
        self.completed = not self.completed

    def status(self) -> TodoStatus:
        return TodoStatus.COMPLETE if self.completed else TodoStatus.PENDING

    def is_owned_by(self, user_id: Any) -> bool:
        return _strict_equals(self.user_id, user_id)

    def is_overdue(self) -> bool:
        """
        True when the todo was due strictly before now and is not completed.
        """
        if not self.due_date:
            return False
        due = parse_due_date(self.due_date)
        now = datetime.now(due.tzinfo) if due.tzinfo is not None else datetime.now()
        return due < now and not self.completed

    def serialize(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "completed": self.completed,
            "userId": self.user_id,
        }


# Tagged union over the two todo variants; `kind` carries the tag.
Task = Union[Todo, PriorityTodo]
TASK_TYPES = (Todo, PriorityTodo)


def task_from_record(record: Any) -> Task:
    """
    Build the matching variant for a record, raising DeserializationError when malformed.

    Records that carry a `priority` or `dueDate` key become PriorityTodo.
    """
    if isinstance(record, Mapping) and ("priority" in record or "dueDate" in record):
        return PriorityTodo._from_record(record)
    return Todo._from_record(record)


# PUBLIC_INTERFACE
@dataclass
class User:
    """
    A user of the application and the todos they own.

    Fields:
    - id: unique id for the user
    - name: the user's name (first name last name)
    - email: the user's email address
    - todos: the user's todos; kept by reference, never copied
    """

    id: Any
    name: Any
    email: Any
    todos: Any = field(default_factory=list)

    @classmethod
    def from_dict(cls, record: Any) -> Optional["User"]:
        """
        Build a User from an API record.

        Returns None (and logs one error) when the record is missing or malformed,
        including when an embedded todo belongs to another user.
        """
        try:
            return cls._from_record(record)
        except DeserializationError as err:
            logger.error("Couldn't create user from dict: %s", err)
            return None

    @classmethod
    def _from_record(cls, record: Any) -> "User":
        data: UserRecord = _validate(UserRecord, record)
        todos: List[Task] = []
        for entry in data.todos:
            todo = entry if isinstance(entry, TASK_TYPES) else task_from_record(entry)
            if not todo.is_owned_by(data.id):
                raise DeserializationError(
                    f"todo {todo.id!r} belongs to user {todo.user_id!r}, not {data.id!r}"
                )
            todos.append(todo)
        return cls(data.id, data.name, data.email, todos)

    def add_todo(self, todo: Task) -> None:
        """
        Append a todo to the user's todos.

        Raises InvariantViolation if the todos collection cannot be appended to,
        or if the todo is owned by a different user.
        """
        if not isinstance(self.todos, MutableSequence):
            raise InvariantViolation(
                f"cannot add a todo to user {self.id!r}: todos is {type(self.todos).__name__}, not a list"
            )
        owner = getattr(todo, "user_id", None)
        if not _strict_equals(owner, self.id):
            raise InvariantViolation(
                f"todo {getattr(todo, 'id', None)!r} belongs to user {owner!r}, not {self.id!r}"
            )
        self.todos.append(todo)

    def _iter_todos(self) -> List[Task]:
        if not isinstance(self.todos, Iterable) or isinstance(self.todos, (str, bytes)):
            raise InvariantViolation(
                f"todos of user {self.id!r} is {type(self.todos).__name__}, not iterable"
            )
        return list(self.todos)

    def completion_rate(self) -> float:
        """
        Fraction of the user's todos that are complete (between 0 and 1).
        """
        todos = self._iter_todos()
        if not todos:
            return 0.0
        completed = sum(1 for t in todos if t.status() == TodoStatus.COMPLETE)
        return completed / len(todos)

    def todos_by_status(self, status: Any) -> List[Task]:
        return [t for t in self._iter_todos() if t.status() == status]

    def serialize(self) -> Dict[str, Any]:
        todos = self.todos
        if isinstance(todos, Iterable) and not isinstance(todos, (str, bytes)):
            todos = [t.serialize() if hasattr(t, "serialize") else t for t in todos]
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "todos": todos,
        }
