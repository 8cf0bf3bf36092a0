from typing import Callable, List

import httpx
import pytest
from fastapi import FastAPI, HTTPException, Request
from fastapi.testclient import TestClient

from tmac.client import APIClient

BASE = "http://testserver"

USERS = [
    {"id": 1, "name": "Leanne Graham", "username": "Bret", "email": "Sincere@april.biz"},
    {"id": 2, "name": "Ervin Howell", "username": "Antonette", "email": "Shanna@melissa.tv"},
    {"id": 3, "name": "Clementine Bauch", "username": "Samantha", "email": "Nathan@yesenia.net"},
]

TODOS = [
    {"userId": 1, "id": 1, "title": "delectus aut autem", "completed": False},
    {"userId": 1, "id": 2, "title": "quis ut nam facilis", "completed": True},
    {"userId": 1, "id": 3, "title": "fugiat veniam minus", "completed": True},
    {"userId": 2, "id": 4, "title": "et porro tempora", "completed": False},
]


def create_fake_api() -> FastAPI:
    """
    A minimal stand-in for the JSONPlaceholder API. Requested paths are recorded
    on `app.state.requested`.
    """
    app = FastAPI(title="Fake JSONPlaceholder")
    app.state.requested = []

    @app.middleware("http")
    async def record_path(request: Request, call_next):
        app.state.requested.append(request.url.path)
        return await call_next(request)

    @app.get("/users")
    def list_users():
        return USERS

    @app.get("/users/{user_id}")
    def get_user(user_id: int):
        for u in USERS:
            if u["id"] == user_id:
                return u
        raise HTTPException(status_code=404, detail="Not Found")

    @app.get("/users/{user_id}/todos")
    def list_user_todos(user_id: int):
        return [t for t in TODOS if t["userId"] == user_id]

    @app.get("/todos")
    def list_todos():
        return TODOS

    return app


@pytest.fixture
def fake_api() -> FastAPI:
    return create_fake_api()


@pytest.fixture
def api(fake_api):
    with TestClient(fake_api) as http:
        yield APIClient(base_url=BASE, http_client=http)


@pytest.fixture
def mock_api() -> Callable[[Callable[[httpx.Request], httpx.Response]], APIClient]:
    """
    Factory for an APIClient whose requests are answered by `handler`.
    """
    clients: List[httpx.Client] = []

    def make(handler: Callable[[httpx.Request], httpx.Response]) -> APIClient:
        http = httpx.Client(transport=httpx.MockTransport(handler))
        clients.append(http)
        return APIClient(base_url=BASE, http_client=http)

    yield make
    for c in clients:
        c.close()
