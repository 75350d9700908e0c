import json
from typing import Any, Callable, Optional, Union

import httpx
import pytest
from fastapi.testclient import TestClient

from finetune_intake.cache import Cache
from finetune_intake.domain.agreements.draft_store import AgreementDraftStore, get_draft_store
from finetune_intake.domain.wizard.session import WizardSessionStore, get_session_store
from finetune_intake.models import Customer
from finetune_intake.services.finetune_api import FineTuneAPI, get_finetune_api

JANE_RECORD = {
    "id": 7,
    "firstName": "Jane",
    "lastName": "Doe",
    "email": "jane@example.com",
    "phone": "(555) 123-4567",
}


class FakeFineTune:
    """Routes httpx requests to canned FineTune API responses and records them"""

    def __init__(self):
        self.routes: dict[tuple[str, str], Union[tuple[int, Any], Callable]] = {}
        self.requests: list[httpx.Request] = []

    def on(self, method: str, path: str, status: int = 200, body: Any = None, handler: Optional[Callable] = None):
        self.routes[(method, path)] = handler or (status, body)
        return self

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"message": "Not found"})
        if callable(route):
            return route(request)
        status, body = route
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def body(self, method: str, path: str, index: int = -1) -> Any:
        return json.loads(self.calls(method, path)[index].content)

    def make_api(self) -> FineTuneAPI:
        return FineTuneAPI(
            base_url="http://finetune.test",
            token="test-token",
            timeout=5,
            transport=httpx.MockTransport(self),
        )


class FakeRedis:
    """The slice of redis.asyncio.Redis the cache uses"""

    def __init__(self):
        self.store: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    async def get(self, key):
        return self.store.get(key)

    async def setex(self, key, ttl, value):
        self.store[key] = value
        self.ttls[key] = ttl

    async def delete(self, key):
        self.store.pop(key, None)
        self.ttls.pop(key, None)


@pytest.fixture
def fake_api():
    return FakeFineTune()


@pytest.fixture
def api(fake_api):
    return fake_api.make_api()


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def draft_store(fake_redis):
    return AgreementDraftStore(Cache(fake_redis), ttl=600)


@pytest.fixture
def jane_record():
    """Customer record as the FineTune API returns it"""
    return dict(JANE_RECORD)


@pytest.fixture
def jane(jane_record):
    return Customer.model_validate(jane_record)


@pytest.fixture
def session_store():
    return WizardSessionStore(ttl=3600)


@pytest.fixture
def intake_app(fake_api, draft_store, session_store):
    """The app wired to the fake FineTune API, in-test sessions and drafts"""
    from finetune_intake.main import app

    app.dependency_overrides[get_finetune_api] = fake_api.make_api
    app.dependency_overrides[get_session_store] = lambda: session_store
    app.dependency_overrides[get_draft_store] = lambda: draft_store
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(intake_app):
    return TestClient(intake_app)
