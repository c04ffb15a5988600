import pytest

from specpilot.config import (
    DEFAULT_CODEGEN_API_BASE_URL,
    DEFAULT_POLL_INTERVAL_SECONDS,
    POLICY_AVAILABILITY_FIRST,
    POLICY_FIXED_PRIORITY,
    Settings,
)
from specpilot.exceptions import ConfigurationError

ENV_VARS = (
    "OPENAI_API_KEY",
    "ANTHROPIC_API_KEY",
    "AI_PROVIDER_POLICY",
    "CODEGEN_API_KEY",
    "CODEGEN_ORG_ID",
    "CODEGEN_API_BASE_URL",
    "CODEGEN_POLL_INTERVAL",
    "N8N_WEBHOOK_URL",
    "N8N_WEBHOOK_TOKEN",
    "GITHUB_ACCESS_TOKEN",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_when_nothing_is_set():
    settings = Settings.from_env()

    assert settings.credentials.openai_api_key is None
    assert settings.credentials.anthropic_api_key is None
    assert settings.provider_policy == POLICY_FIXED_PRIORITY
    assert settings.codegen_api_base_url == DEFAULT_CODEGEN_API_BASE_URL
    assert settings.poll_interval_seconds == DEFAULT_POLL_INTERVAL_SECONDS


def test_values_are_read_and_trimmed(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", " sk-1 ")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "   ")
    monkeypatch.setenv("AI_PROVIDER_POLICY", "AVAILABILITY_FIRST")
    monkeypatch.setenv("CODEGEN_API_BASE_URL", "https://codegen.internal/")
    monkeypatch.setenv("CODEGEN_POLL_INTERVAL", "3")

    settings = Settings.from_env()

    assert settings.credentials.openai_api_key == "sk-1"
    assert settings.credentials.anthropic_api_key is None
    assert settings.provider_policy == POLICY_AVAILABILITY_FIRST
    assert settings.codegen_api_base_url == "https://codegen.internal"
    assert settings.poll_interval_seconds == 3.0


@pytest.mark.parametrize("policy, interval", [("random", "soon"), ("", "-1")])
def test_invalid_values_fall_back_to_defaults(monkeypatch, policy, interval):
    monkeypatch.setenv("AI_PROVIDER_POLICY", policy)
    monkeypatch.setenv("CODEGEN_POLL_INTERVAL", interval)

    settings = Settings.from_env()

    assert settings.provider_policy == POLICY_FIXED_PRIORITY
    assert settings.poll_interval_seconds == DEFAULT_POLL_INTERVAL_SECONDS


def test_require_names_the_missing_variable():
    with pytest.raises(ConfigurationError) as exc:
        Settings.require(None, "CODEGEN_API_KEY", "CodeGen API key")

    assert exc.value.variable == "CODEGEN_API_KEY"
    assert str(exc.value) == (
        "CodeGen API key is not configured. Please add CODEGEN_API_KEY environment variable."
    )


def test_require_returns_value():
    assert Settings.require("abc", "X", "x") == "abc"
