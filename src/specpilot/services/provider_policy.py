# src/specpilot/services/provider_policy.py

"""
Provider selection and fallback.

Two policies are supported, chosen with ``AI_PROVIDER_POLICY``:

``availability_first``
    Anthropic when its key is configured, OpenAI otherwise. No fallback.

``fixed_priority``
    OpenAI first. A 403 from OpenAI is retried exactly once on Anthropic
    when an Anthropic key is configured; any other error is surfaced
    immediately.
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional, Tuple

from opentelemetry import trace

from specpilot.config import (
    POLICY_AVAILABILITY_FIRST,
    POLICY_FIXED_PRIORITY,
    Settings,
)
from specpilot.exceptions import ConfigurationError, ProviderError, ProviderFallbackError
from specpilot.metrics import provider_fallbacks_total
from specpilot.models.generation import GenerationOutput
from specpilot.services.provider_clients import (
    PROVIDER_ANTHROPIC,
    PROVIDER_OPENAI,
    GenerationTask,
    TextGenerationProvider,
    build_providers,
    invoke,
)

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

_ORDER = {
    POLICY_FIXED_PRIORITY: (PROVIDER_OPENAI, PROVIDER_ANTHROPIC),
    POLICY_AVAILABILITY_FIRST: (PROVIDER_ANTHROPIC, PROVIDER_OPENAI),
}


class ProviderSelectionPolicy:
    """Stateless decision of which provider to call and whether to fall back."""

    def __init__(
        self,
        providers: Mapping[str, TextGenerationProvider],
        mode: str = POLICY_FIXED_PRIORITY,
    ):
        if mode not in _ORDER:
            raise ValueError(f"Unknown provider policy: {mode}")
        self.providers = dict(providers)
        self.mode = mode

    @property
    def order(self) -> Tuple[str, ...]:
        return _ORDER[self.mode]

    def primary(self) -> TextGenerationProvider:
        for provider_id in self.order:
            provider = self.providers.get(provider_id)
            if provider is not None:
                return provider
        raise ConfigurationError(
            "OPENAI_API_KEY/ANTHROPIC_API_KEY",
            "No AI provider API key is configured. Please add either "
            "ANTHROPIC_API_KEY or OPENAI_API_KEY environment variable.",
        )

    def fallback_for(self, primary: TextGenerationProvider) -> Optional[TextGenerationProvider]:
        if self.mode != POLICY_FIXED_PRIORITY:
            return None
        for provider_id in self.order:
            if provider_id != primary.provider_id and provider_id in self.providers:
                return self.providers[provider_id]
        return None

    async def run(self, task: GenerationTask) -> GenerationOutput:
        """
        Execute ``task`` with at most one fallback attempt.

        Raises:
            ConfigurationError: no provider configured.
            ProviderError: the selected provider failed and no fallback applies.
            ProviderFallbackError: primary and fallback both failed.
        """
        primary = self.primary()

        with tracer.start_as_current_span("policy.run") as span:
            span.set_attribute("policy.mode", self.mode)
            span.set_attribute("task.name", task.name)
            span.set_attribute("provider.primary", primary.provider_id)

            try:
                text = await invoke(task, primary)
                return GenerationOutput(text=text, provider=primary.provider_id, model=primary.model)
            except ProviderError as primary_error:
                fallback = self.fallback_for(primary)
                if not primary_error.is_forbidden or fallback is None:
                    span.set_attribute("policy.fallback", False)
                    raise

                logger.warning(
                    "%s returned 403 for %s, retrying once with %s",
                    primary.provider_id,
                    task.name,
                    fallback.provider_id,
                )
                provider_fallbacks_total.labels(task.name).inc()
                span.set_attribute("policy.fallback", True)
                span.set_attribute("provider.fallback", fallback.provider_id)

                try:
                    text = await invoke(task, fallback)
                except ProviderError as fallback_error:
                    raise ProviderFallbackError(primary_error, fallback_error) from fallback_error

                return GenerationOutput(
                    text=text,
                    provider=fallback.provider_id,
                    model=fallback.model,
                    fell_back=True,
                )

    def describe(self) -> dict:
        """Provider and model the policy will try first, for display."""
        try:
            primary = self.primary()
        except ConfigurationError:
            return {"provider": None, "model": None, "policy": self.mode}
        return {"provider": primary.provider_id, "model": primary.model, "policy": self.mode}


def build_policy(settings: Settings) -> ProviderSelectionPolicy:
    return ProviderSelectionPolicy(
        build_providers(settings.credentials),
        mode=settings.provider_policy,
    )
