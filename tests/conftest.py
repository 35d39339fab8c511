"""
Shared fixtures.

The environment is configured before anything from careermate is imported:
settings, the engine and the rate limiter are all built at import time.
"""
import os
import tempfile
import uuid

_DB_DIR = tempfile.mkdtemp(prefix="careermate-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["JWT_SECRET"] = "test-secret-key-for-careermate-tests"
os.environ["TEST_MODE"] = "false"
os.environ["OPENAI_API_KEY"] = "sk-test"
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from careermate.main import app  # noqa: E402
from careermate.services.career_ai import CareerAIService, get_career_ai_service  # noqa: E402
from careermate.services.gateway import ServiceGateway  # noqa: E402
from careermate.services.llm_client import LLMClient  # noqa: E402


class FakeLLMClient(LLMClient):
    """Returns queued replies in order; an Exception in the queue is raised instead"""

    provider = "fake"

    def __init__(self, replies=None):
        # Empty gateway config: calls pass straight through
        super().__init__(model="fake-model", gateway=ServiceGateway(config={}))
        self.replies = list(replies or [])
        self.calls = []

    def queue(self, *replies):
        self.replies.extend(replies)

    async def _complete(self, system, user, temperature, max_tokens, top_p):
        self.calls.append(
            {"system": system, "user": user, "temperature": temperature, "max_tokens": max_tokens, "top_p": top_p}
        )
        if not self.replies:
            raise AssertionError("FakeLLMClient has no reply queued")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def fake_llm():
    return FakeLLMClient()


@pytest.fixture
def client(fake_llm):
    service = CareerAIService(llm=fake_llm)
    app.dependency_overrides[get_career_ai_service] = lambda: service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def register(client, email=None, password="secret123", **profile):
    """Register a fresh user and return (token, user)"""
    email = email or f"user-{uuid.uuid4().hex[:10]}@careermate.io"
    resp = client.post(
        "/api/auth/register",
        json={"email": email, "password": password, "firstName": "Ada", "lastName": "Lovelace", "profile": profile},
    )
    assert resp.status_code == 201, resp.text
    body = resp.json()
    return body["token"], body["user"]


@pytest.fixture
def auth_headers(client):
    token, _ = register(client)
    return {"Authorization": f"Bearer {token}"}
