# src/specpilot/services/provider_clients.py

"""
Text-generation provider adapters.

Both providers implement ``TextGenerationProvider.generate`` so the
selection policy never branches on provider identity. Each adapter turns
SDK failures into ``ProviderError`` carrying the HTTP status when one is
available. Adapters never retry: the SDKs are created with
``max_retries=0`` and retry decisions live in ``provider_policy``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Mapping

import anthropic
import openai
from opentelemetry import trace

from specpilot.config import ProviderCredentials
from specpilot.exceptions import ProviderError
from specpilot.metrics import provider_calls_total
from specpilot.services.prompt_templates import (
    ENHANCE_SYSTEM_PROMPT,
    SPECIFY_SYSTEM_PROMPT,
    build_enhancement_prompt,
    build_specification_prompt,
)

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

PROVIDER_OPENAI = "openai"
PROVIDER_ANTHROPIC = "anthropic"

OPENAI_MODEL = "gpt-4o"
ANTHROPIC_MODEL = "claude-3-haiku-20240307"


class TextGenerationProvider(ABC):
    """Uniform interface over one text-generation backend."""

    provider_id: str
    model: str

    @abstractmethod
    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        max_tokens: int,
    ) -> str:
        """Return the generated text, stripped of outer whitespace."""


class OpenAIProvider(TextGenerationProvider):
    provider_id = PROVIDER_OPENAI

    def __init__(self, api_key: str, model: str = OPENAI_MODEL):
        self.model = model
        self.client = openai.AsyncOpenAI(api_key=api_key, max_retries=0)

    async def generate(self, system_prompt, user_prompt, temperature, max_tokens) -> str:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                temperature=temperature,
                max_tokens=max_tokens,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
            )
        except openai.APIStatusError as e:
            raise ProviderError(self.provider_id, e.message, e.status_code) from e
        except openai.APIError as e:
            raise ProviderError(self.provider_id, str(e)) from e

        if not response.choices:
            return ""
        return (response.choices[0].message.content or "").strip()


class AnthropicProvider(TextGenerationProvider):
    provider_id = PROVIDER_ANTHROPIC

    def __init__(self, api_key: str, model: str = ANTHROPIC_MODEL):
        self.model = model
        self.client = anthropic.AsyncAnthropic(api_key=api_key, max_retries=0)

    async def generate(self, system_prompt, user_prompt, temperature, max_tokens) -> str:
        try:
            message = await self.client.messages.create(
                model=self.model,
                max_tokens=max_tokens,
                temperature=temperature,
                system=system_prompt,
                messages=[{"role": "user", "content": user_prompt}],
            )
        except anthropic.APIStatusError as e:
            raise ProviderError(self.provider_id, e.message, e.status_code) from e
        except anthropic.APIError as e:
            raise ProviderError(self.provider_id, str(e)) from e

        # Content is a list of blocks; only text blocks carry output
        parts = [
            block.text
            for block in (message.content or [])
            if isinstance(getattr(block, "text", None), str)
        ]
        return "".join(parts).strip()


@dataclass(frozen=True)
class TaskSettings:
    temperature: float
    max_tokens: int


@dataclass(frozen=True)
class GenerationTask:
    """A composed instruction plus per-provider sampling settings."""

    name: str
    system_prompt: str
    instruction: str
    settings: Mapping[str, TaskSettings]


ENHANCE_SETTINGS: Mapping[str, TaskSettings] = MappingProxyType({
    PROVIDER_OPENAI: TaskSettings(temperature=0.7, max_tokens=1000),
    PROVIDER_ANTHROPIC: TaskSettings(temperature=0.7, max_tokens=4096),
})

# Lower temperature: the output has to be valid YAML, not creative prose
SPECIFY_SETTINGS: Mapping[str, TaskSettings] = MappingProxyType({
    PROVIDER_OPENAI: TaskSettings(temperature=0.2, max_tokens=4000),
    PROVIDER_ANTHROPIC: TaskSettings(temperature=0.5, max_tokens=4096),
})


def enhance_task(user_text: str) -> GenerationTask:
    return GenerationTask(
        name="enhance",
        system_prompt=ENHANCE_SYSTEM_PROMPT,
        instruction=build_enhancement_prompt(user_text),
        settings=ENHANCE_SETTINGS,
    )


def specify_task(enhanced_text: str) -> GenerationTask:
    return GenerationTask(
        name="specify",
        system_prompt=SPECIFY_SYSTEM_PROMPT,
        instruction=build_specification_prompt(enhanced_text),
        settings=SPECIFY_SETTINGS,
    )


async def invoke(task: GenerationTask, provider: TextGenerationProvider) -> str:
    """Run ``task`` against ``provider`` once."""
    if not task.instruction or not task.instruction.strip():
        raise ValueError("Task instruction must not be empty")

    settings = task.settings[provider.provider_id]

    with tracer.start_as_current_span("provider.invoke") as span:
        span.set_attribute("provider.id", provider.provider_id)
        span.set_attribute("provider.model", provider.model)
        span.set_attribute("task.name", task.name)
        span.set_attribute("task.temperature", settings.temperature)

        logger.info(
            "Using %s (%s) for %s", provider.provider_id, provider.model, task.name
        )
        try:
            text = await provider.generate(
                task.system_prompt,
                task.instruction,
                settings.temperature,
                settings.max_tokens,
            )
        except ProviderError as e:
            provider_calls_total.labels(provider.provider_id, task.name, "error").inc()
            span.set_attribute("provider.error_status", e.status_code or 0)
            logger.warning("%s call failed for %s: %s", provider.provider_id, task.name, e)
            raise

        provider_calls_total.labels(provider.provider_id, task.name, "success").inc()
        span.set_attribute("output.length", len(text))
        return text


def build_providers(credentials: ProviderCredentials) -> Dict[str, TextGenerationProvider]:
    """Instantiate one adapter per configured credential."""
    providers: Dict[str, TextGenerationProvider] = {}
    if credentials.openai_api_key:
        providers[PROVIDER_OPENAI] = OpenAIProvider(credentials.openai_api_key)
    if credentials.anthropic_api_key:
        providers[PROVIDER_ANTHROPIC] = AnthropicProvider(credentials.anthropic_api_key)
    return providers
