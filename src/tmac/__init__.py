"""
TMAC (Task Management API Client) package.

An in-memory model of users and todos on top of the JSONPlaceholder REST API,
with the HTTP client that fetches them and a few aggregation helpers.
"""

__version__ = "0.1.0"

from .client import BASE_URL, APIClient, FetchResult  # noqa: E402
from .errors import (  # noqa: E402
    DeserializationError,
    HTTPStatusError,
    InvariantViolation,
    TmacError,
    TransportError,
    ValidationError,
)
from .models import PriorityTodo, Task, Todo, TodoStatus, User  # noqa: E402
from .processing import TodoStatistics, calculate_statistics, filter_by_status, group_by_user  # noqa: E402

__all__ = [
    "APIClient",
    "BASE_URL",
    "DeserializationError",
    "FetchResult",
    "HTTPStatusError",
    "InvariantViolation",
    "PriorityTodo",
    "Task",
    "TmacError",
    "Todo",
    "TodoStatistics",
    "TodoStatus",
    "TransportError",
    "User",
    "ValidationError",
    "calculate_statistics",
    "filter_by_status",
    "group_by_user",
]
