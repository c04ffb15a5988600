# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from specpilot.config import ProviderCredentials, Settings, get_settings
from specpilot.main import app
from specpilot.services.provider_clients import TextGenerationProvider


class FakeProvider(TextGenerationProvider):
    """Provider double that replays scripted outputs and records every call."""

    def __init__(self, provider_id, model="fake-model", responses=None, error=None):
        self.provider_id = provider_id
        self.model = model
        self.responses = list(responses or [])
        self.error = error
        self.calls = []

    async def generate(self, system_prompt, user_prompt, temperature, max_tokens):
        self.calls.append({
            "system_prompt": system_prompt,
            "user_prompt": user_prompt,
            "temperature": temperature,
            "max_tokens": max_tokens,
        })
        if self.error is not None:
            raise self.error
        return self.responses.pop(0) if self.responses else ""


@pytest.fixture
def anyio_backend():
    # Polling is built on asyncio tasks
    return "asyncio"


@pytest.fixture
def make_provider():
    return FakeProvider


@pytest.fixture
def settings():
    return Settings(
        credentials=ProviderCredentials(
            openai_api_key="sk-test",
            anthropic_api_key="sk-ant-test",
        ),
        codegen_api_key="cg-key",
        codegen_org_id="42",
        codegen_api_base_url="https://codegen.test",
        poll_interval_seconds=0.01,
        webhook_url="https://n8n.test/webhook/spec",
        webhook_token="hook-token",
        github_access_token="ghp_test",
    )


@pytest.fixture
def client(settings):
    """FastAPI test client with settings pinned to the test values."""
    app.dependency_overrides[get_settings] = lambda: settings

    # Context manager runs the lifespan, which creates the polling registry
    with TestClient(app) as test_client:
        try:
            yield test_client
        finally:
            app.dependency_overrides.clear()
