"""
HTTP client for the JSONPlaceholder todo/user API (https://jsonplaceholder.typicode.com).

Every fetch returns a FetchResult instead of raising: transport failures,
non-2xx responses and undecodable payloads are logged once and carried in
`FetchResult.error`. Only malformed caller input (ValidationError) raises.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Generic, List, Optional, Tuple, TypeVar

import httpx

from .errors import DeserializationError, HTTPStatusError, TmacError, TransportError, ValidationError
from .models import Todo, User

logger = logging.getLogger(__name__)

BASE_URL = "https://jsonplaceholder.typicode.com"

T = TypeVar("T")


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class FetchResult(Generic[T]):
    """
    Outcome of one API call.

    - value: the deserialized entity or list on success, None on failure
    - error: the TmacError that ended the call, None on success
    - skipped: number of malformed records dropped from a list response
    """
    value: Optional[T] = None
    error: Optional[TmacError] = None
    skipped: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None


def _check_user_id(user_id: Any) -> None:
    try:
        number = float(user_id)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid userId: {user_id}") from None
    if not math.isfinite(number):
        raise ValidationError(f"Invalid userId: {user_id}")


def _many(factory: Callable[[Any], Optional[T]]) -> Callable[[Any], Tuple[List[T], int]]:
    """
    Build a list response item by item, dropping records the factory rejects.
    """
    def build(data: Any) -> Tuple[List[T], int]:
        if not isinstance(data, list):
            raise DeserializationError(f"expected a JSON array, got {type(data).__name__}")
        items: List[T] = []
        for record in data:
            item = factory(record)
            if item is not None:
                items.append(item)
        skipped = len(data) - len(items)
        if skipped:
            logger.warning("Dropped %d malformed record(s) out of %d", skipped, len(data))
        return items, skipped

    return build


def _one(build: Callable[[Any], T]) -> Callable[[Any], Tuple[T, int]]:
    return lambda data: (build(data), 0)


# PUBLIC_INTERFACE
class APIClient:
    """
    Synchronous client used to fetch users and todos.

    Args:
        base_url: API root, without a trailing slash.
        http_client: optional httpx.Client to send requests through; the caller keeps ownership.
        timeout: request timeout in seconds for the client created here; None keeps httpx's default.
    """

    def __init__(
        self,
        base_url: str = BASE_URL,
        http_client: Optional[httpx.Client] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._owns_client = http_client is None
        if http_client is None:
            http_client = httpx.Client(timeout=timeout) if timeout is not None else httpx.Client()
        self._http = http_client

    def close(self) -> None:
        if self._owns_client:
            self._http.close()

    def __enter__(self) -> "APIClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def handle_response(self, response: httpx.Response) -> Any:
        """
        Return the decoded JSON body of a successful response.

        Raises HTTPStatusError for non-2xx responses (with best-effort body text)
        and DeserializationError when the body is not valid JSON.
        """
        if not response.is_success:
            try:
                body = response.text
            except (httpx.StreamError, httpx.DecodingError):
                body = ""
            raise HTTPStatusError(response.status_code, response.reason_phrase, body)
        try:
            return response.json()
        except ValueError as e:
            raise DeserializationError(f"response body is not valid JSON: {e}") from e

    def _get(self, path: str) -> Any:
        url = f"{self.base_url}{path}"
        logger.debug("GET %s", url)
        try:
            response = self._http.get(url)
        except httpx.RequestError as e:
            raise TransportError(f"request to {url} failed: {e!r}", e) from e
        return self.handle_response(response)

    def _fetch(self, what: str, path: str, build: Callable[[Any], Tuple[T, int]]) -> FetchResult[T]:
        try:
            value, skipped = build(self._get(path))
        except (TransportError, HTTPStatusError, DeserializationError) as err:
            logger.error("Error fetching %s: %s", what, err)
            return FetchResult(error=err)
        return FetchResult(value=value, skipped=skipped)

    def fetch_users(self) -> FetchResult[List[User]]:
        """
        Query the api for users and return them as `User` objects.
        """
        return self._fetch("users", "/users", _many(User.from_dict))

    def fetch_user_by_id(self, user_id: Any) -> FetchResult[User]:
        """
        Fetch a single user. A malformed record fails the result with a DeserializationError.
        """
        return self._fetch("user", f"/users/{user_id}", _one(User._from_record))

    def fetch_todos(self) -> FetchResult[List[Todo]]:
        """
        Query the api for todos and return them as `Todo` objects.
        """
        return self._fetch("todos", "/todos", _many(Todo.from_dict))

    def fetch_todos_by_user_id(self, user_id: Any) -> FetchResult[List[Todo]]:
        """
        Query the api for the todos of one user.

        Raises ValidationError, without sending a request, when `user_id` is not numeric.
        """
        _check_user_id(user_id)
        return self._fetch("todos", f"/users/{str(user_id).strip()}/todos", _many(Todo.from_dict))
