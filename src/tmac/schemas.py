from __future__ import annotations

from datetime import date, datetime, time
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Shared type for an incoming due date which can be a date, datetime, or ISO8601 string
DueDateInput = Union[date, datetime, str]


def parse_due_date(value: Optional[DueDateInput]) -> Optional[datetime]:
    """Return a `dueDate` value as a datetime; a bare date falls on midnight."""
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip())
        except ValueError:
            raise ValueError(f"dueDate {value!r} is not an ISO8601 date or datetime") from None
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    raise ValueError(f"dueDate must be a date, datetime or ISO8601 string, not {type(value).__name__}")


# PUBLIC_INTERFACE
class TodoRecord(BaseModel):
    """
    Wire record for a todo as returned by the API.

    Every field is optional: absent fields come through as None rather than a
    default. `completed` is the only field that is coerced, by truthiness.
    """

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "example": {"userId": 1, "id": 1, "title": "delectus aut autem", "completed": False}
        },
    )

    id: Any = Field(default=None, description="Unique identifier of the todo")
    title: Any = Field(default=None, description="Todo title")
    completed: bool = Field(default=False, description="Completion flag, coerced by truthiness")
    user_id: Any = Field(default=None, alias="userId", description="Owning user id")

    @field_validator("completed", mode="before")
    @classmethod
    def coerce_completed(cls, v: Any) -> bool:
        """
        Legacy tolerance: the API flag is read by truthiness, so "false" counts as complete.
        """
        return bool(v)


# PUBLIC_INTERFACE
class PriorityTodoRecord(TodoRecord):
    """
    Wire record for a todo carrying a priority and an optional due date.
    """

    priority: Any = Field(default=None, description="Ordering hint, numeric by convention")
    due_date: Optional[datetime] = Field(default=None, alias="dueDate", description="Deadline")

    @field_validator("due_date", mode="before")
    @classmethod
    def normalize_due_date(cls, v: Optional[DueDateInput]) -> Optional[datetime]:
        return parse_due_date(v)


# PUBLIC_INTERFACE
class UserRecord(BaseModel):
    """
    Wire record for a user. A missing or null `todos` becomes an empty list.
    """

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "example": {"id": 1, "name": "Leanne Graham", "email": "Sincere@april.biz"}
        },
    )

    id: Any = Field(default=None, description="Unique identifier of the user")
    name: Any = Field(default=None, description="Full name")
    email: Any = Field(default=None, description="Email address")
    todos: List[Any] = Field(default_factory=list, description="Todos owned by the user")

    @field_validator("todos", mode="before")
    @classmethod
    def default_todos(cls, v: Any) -> Any:
        return [] if v is None else v
