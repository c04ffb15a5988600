# src/specpilot/config.py

"""
Process-wide configuration read from environment variables.

Values are read once (``get_settings`` is cached) and never mutated.
A missing value is only fatal for the operation that needs it; callers
use ``Settings.require`` to raise a ``ConfigurationError`` naming the
missing variable before any network call is attempted.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from specpilot.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

POLICY_FIXED_PRIORITY = "fixed_priority"
POLICY_AVAILABILITY_FIRST = "availability_first"

DEFAULT_CODEGEN_API_BASE_URL = "https://api.codegen.com"
DEFAULT_POLL_INTERVAL_SECONDS = 5.0


def _env(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True)
class ProviderCredentials:
    """API keys for the two text-generation providers."""
    openai_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None


@dataclass(frozen=True)
class Settings:
    credentials: ProviderCredentials
    provider_policy: str = POLICY_FIXED_PRIORITY
    codegen_api_key: Optional[str] = None
    codegen_org_id: Optional[str] = None
    codegen_api_base_url: str = DEFAULT_CODEGEN_API_BASE_URL
    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS
    webhook_url: Optional[str] = None
    webhook_token: Optional[str] = None
    github_access_token: Optional[str] = None

    @classmethod
    def from_env(cls) -> "Settings":
        policy = (_env("AI_PROVIDER_POLICY") or POLICY_FIXED_PRIORITY).lower()
        if policy not in (POLICY_FIXED_PRIORITY, POLICY_AVAILABILITY_FIRST):
            logger.warning(
                "Unknown AI_PROVIDER_POLICY=%s, falling back to %s",
                policy,
                POLICY_FIXED_PRIORITY,
            )
            policy = POLICY_FIXED_PRIORITY

        interval = DEFAULT_POLL_INTERVAL_SECONDS
        raw_interval = _env("CODEGEN_POLL_INTERVAL")
        if raw_interval:
            try:
                interval = float(raw_interval)
            except ValueError:
                logger.warning("Invalid CODEGEN_POLL_INTERVAL=%s, using default", raw_interval)
            if interval <= 0:
                interval = DEFAULT_POLL_INTERVAL_SECONDS

        return cls(
            credentials=ProviderCredentials(
                openai_api_key=_env("OPENAI_API_KEY"),
                anthropic_api_key=_env("ANTHROPIC_API_KEY"),
            ),
            provider_policy=policy,
            codegen_api_key=_env("CODEGEN_API_KEY"),
            codegen_org_id=_env("CODEGEN_ORG_ID"),
            codegen_api_base_url=(_env("CODEGEN_API_BASE_URL") or DEFAULT_CODEGEN_API_BASE_URL).rstrip("/"),
            poll_interval_seconds=interval,
            webhook_url=_env("N8N_WEBHOOK_URL"),
            webhook_token=_env("N8N_WEBHOOK_TOKEN"),
            github_access_token=_env("GITHUB_ACCESS_TOKEN"),
        )

    @staticmethod
    def require(value: Optional[str], variable: str, description: str) -> str:
        """Return ``value`` or raise ``ConfigurationError`` naming ``variable``."""
        if not value:
            raise ConfigurationError(
                variable,
                f"{description} is not configured. Please add {variable} environment variable.",
            )
        return value


@lru_cache
def get_settings() -> Settings:
    """FastAPI dependency / module helper returning the process settings."""
    return Settings.from_env()
