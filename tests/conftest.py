import asyncio
from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock, patch

import pytest
from httpx import ASGITransport, AsyncClient

from llm_proxy.core.config import settings

# Override settings for tests
settings.openai_api_key = "sk-test-openai"
settings.anthropic_api_key = "sk-ant-test"
settings.gemini_api_key = "AIzaSyTest-fake-key"
settings.google_client_id = "test-client-id.apps.googleusercontent.com"
settings.auth_enabled = True
settings.redis_url = ""

from llm_proxy.core.dependencies import get_identity_gate  # noqa: E402
from llm_proxy.core.quota import QuotaGate, get_quota_gate  # noqa: E402
from llm_proxy.core.security import IdentityGate  # noqa: E402
from llm_proxy.main import app  # noqa: E402

VALID_TOKEN = "valid-id-token"
TEST_CLAIMS = {"sub": "user-123", "email": "test@example.com", "aud": settings.google_client_id}


class FakeCounterStore:
    """In-memory stand-in for the Redis INCR/EXPIRE commands the quota gate uses."""

    def __init__(self):
        self.counts: dict[str, int] = {}
        self.ttls: dict[str, int] = {}
        self.expire_calls: list[tuple[str, int]] = []
        self._lock = asyncio.Lock()

    async def incr(self, key: str) -> int:
        async with self._lock:
            self.counts[key] = self.counts.get(key, 0) + 1
            return self.counts[key]

    async def expire(self, key: str, seconds: int) -> bool:
        self.ttls[key] = seconds
        self.expire_calls.append((key, seconds))
        return True


def fake_verifier(token: str, audience: str) -> dict:
    if token != VALID_TOKEN:
        raise ValueError("Token used too late")
    return dict(TEST_CLAIMS)


@pytest.fixture
def counter_store() -> FakeCounterStore:
    return FakeCounterStore()


@pytest.fixture
def quota_gate(counter_store: FakeCounterStore) -> QuotaGate:
    return QuotaGate(counter_store, daily_limit=50)


@pytest.fixture
def identity_gate() -> IdentityGate:
    return IdentityGate(audience=lambda: settings.google_client_id, verifier=fake_verifier)


@pytest.fixture
async def client(identity_gate: IdentityGate, quota_gate: QuotaGate) -> AsyncGenerator[AsyncClient, None]:
    app.dependency_overrides[get_identity_gate] = lambda: identity_gate
    app.dependency_overrides[get_quota_gate] = lambda: quota_gate
    # Unhandled errors are re-raised by Starlette after the 500 handler responds
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {VALID_TOKEN}"}


@pytest.fixture
def upstream():
    """Patch httpx.AsyncClient for outbound provider calls.

    Vendor adapters call ``upstream.request``; the transcription adapter calls ``upstream.post``.
    """
    with patch("llm_proxy.gateway.vendor_adapters.httpx.AsyncClient") as MockClient:
        mock_client = AsyncMock()
        mock_client.__aenter__ = AsyncMock(return_value=mock_client)
        mock_client.__aexit__ = AsyncMock(return_value=False)
        MockClient.return_value = mock_client
        yield mock_client


@pytest.fixture
def stt_upstream(upstream):
    """Same patched client, named for speech-to-text tests."""
    return upstream
