from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from database import build_engine
from main import app
from routers.auth_scope import get_instagram_client, get_orchestrator, get_store
from services.automation import ActionRegistry, AutomationOrchestrator
from services.entity_store import EntityStore
from services.instagram import InstagramClient
from services.passwords import hash_password
from services.session_token import create_session_token

IG_BASE_URL = "https://ig.test"
SESSION_COOKIE = "csrftoken=csrf123; sessionid=sess456; ds_user_id=42"

RouteReply = Union[
    Tuple[int, Any],
    Callable[[httpx.Request], httpx.Response],
    Exception,
]


class FakeInstagram:
    """MockTransport handler: canned replies per (method, path), every request recorded."""

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, str], RouteReply] = {}
        self.requests: List[httpx.Request] = []

    def reply(self, method: str, path: str, status: int = 200, json: Any = None) -> None:
        self.routes[(method.upper(), path)] = (status, json)

    def fail(self, method: str, path: str, exc: Exception) -> None:
        self.routes[(method.upper(), path)] = exc

    def handle(self, method: str, path: str, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.routes[(method.upper(), path)] = handler

    def paths(self) -> List[str]:
        return [request.url.path for request in self.requests]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        reply = self.routes.get((request.method, request.url.path))
        if reply is None:
            return httpx.Response(404, json={"status": "fail"})
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply(request)
        status, payload = reply
        if payload is None:
            return httpx.Response(status)
        return httpx.Response(status, json=payload)


def profile_payload(user_id: str = "1001", username: str = "alice") -> Dict[str, Any]:
    return {"data": {"user": {"id": user_id, "username": username, "full_name": "Alice"}}}


def auth_header(user) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_session_token(user.id, user.username).token}"}


@pytest_asyncio.fixture
async def store():
    entity_store = EntityStore(build_engine("sqlite+aiosqlite:///:memory:"))
    await entity_store.create_schema()
    yield entity_store
    await entity_store.dispose()


@pytest.fixture
def fake_instagram() -> FakeInstagram:
    return FakeInstagram()


@pytest_asyncio.fixture
async def instagram_client(fake_instagram):
    http = httpx.AsyncClient(transport=httpx.MockTransport(fake_instagram))
    yield InstagramClient(http, base_url=IG_BASE_URL)
    await http.aclose()


@pytest.fixture
def registry(instagram_client) -> ActionRegistry:
    return ActionRegistry(instagram_client, timeout_seconds=5)


@pytest.fixture
def orchestrator(store, registry) -> AutomationOrchestrator:
    return AutomationOrchestrator(store, registry)


@pytest.fixture
def make_user(store):
    async def _make_user(username: str = "operator", password: str = "secret-pass", is_admin: bool = False):
        return await store.create_user(
            username=username,
            password_hash=hash_password(password),
            email=f"{username}@example.com",
            is_admin=is_admin,
        )

    return _make_user


@pytest.fixture
def make_account_with_cookie(store):
    async def _make(user, username: str = "ig_main", cookie_value: Optional[str] = SESSION_COOKIE):
        account = await store.create_account(user_id=user.id, username=username)
        cookie = None
        if cookie_value is not None:
            cookie = await store.create_cookie(account_id=account.id, cookie_value=cookie_value)
        return account, cookie

    return _make


@pytest_asyncio.fixture
async def api_client(store, orchestrator, instagram_client):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    app.dependency_overrides[get_instagram_client] = lambda: instagram_client
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
