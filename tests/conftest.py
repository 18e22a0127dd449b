import json

import httpx
import pytest
from mongomock_motor import AsyncMongoMockClient

from saad_social.models import init_db
from saad_social.services.auth_service import AuthProvider
from saad_social.services.database_service import DatabaseService
from saad_social.services.gemini_service import AdvisoryService, GeminiClient
from saad_social.services.live import Backend


class FakeClock:
    """Đồng hồ epoch ms tăng dần đều, để thứ tự timestamp luôn xác định."""

    def __init__(self, start: int = 1_700_000_000_000, step: int = 1000):
        self.value = start
        self.step = step

    def __call__(self) -> int:
        self.value += self.step
        return self.value


def gemini_transport(text=None, status_code=200, body=None, calls=None):
    """MockTransport trả về một phản hồi generateContent cố định."""

    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(json.loads(request.content))
        if body is not None:
            return httpx.Response(status_code, json=body)
        return httpx.Response(
            status_code,
            json={"candidates": [{"content": {"parts": [{"text": text or ""}]}}]},
        )

    return httpx.MockTransport(handler)


def advisory_with(**kwargs) -> AdvisoryService:
    return AdvisoryService(client=GeminiClient(api_key="test-key", transport=gemini_transport(**kwargs)))


@pytest.fixture
async def database():
    client = AsyncMongoMockClient()
    database = client["saad-social-test"]
    await init_db(database)
    return database


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def backend(database):
    return Backend(database)


@pytest.fixture
async def db(backend, clock):
    return await DatabaseService(backend, AuthProvider(), clock=clock).connect()


@pytest.fixture
def make_session(backend, clock):
    """Tạo thêm một phiên (một 'tab' khác) dùng chung backend."""

    def factory() -> DatabaseService:
        return DatabaseService(backend, AuthProvider(), clock=clock)

    return factory


@pytest.fixture
async def alice(db):
    return await db.register("Alice", "alice@example.com", "+1000", "secret1")


@pytest.fixture
async def bob(make_session):
    return await make_session().register("Bob", "bob@example.com", "+2000", "secret2")
