# src/specpilot/services/generation_service.py

"""
The two LLM stages of the pipeline: enhance a request, then specify it.

Each stage builds its task, runs it through the provider policy
independently and post-processes the result.
"""

from __future__ import annotations

import logging

from opentelemetry import trace

from specpilot.exceptions import ProviderError
from specpilot.models.generation import GenerationOutput, GenerationRequest
from specpilot.services import spec_postprocessor
from specpilot.services.provider_clients import enhance_task, specify_task
from specpilot.services.provider_policy import ProviderSelectionPolicy

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class GenerationService:

    def __init__(self, policy: ProviderSelectionPolicy):
        self.policy = policy

    async def enhance(self, request: GenerationRequest) -> GenerationOutput:
        """Rewrite the user's request into a detailed code generation prompt."""
        with tracer.start_as_current_span("service.enhance_prompt") as span:
            span.set_attribute("prompt.length", len(request.text))

            output = await self.policy.run(enhance_task(request.text))
            if not output.text:
                raise ProviderError(output.provider, "Provider returned an empty enhancement")

            logger.info(
                "Enhanced prompt with %s: %d -> %d characters",
                output.provider,
                len(request.text),
                len(output.text),
            )
            return output

    async def specify(self, enhanced_text: str) -> GenerationOutput:
        """
        Generate an OpenAPI document for ``enhanced_text``.

        The returned text is cleaned; ``warning`` is set when it still does
        not start with the ``openapi:`` marker.
        """
        if not enhanced_text or not enhanced_text.strip():
            raise ValueError("Enhanced prompt must not be empty")

        with tracer.start_as_current_span("service.generate_specification") as span:
            output = await self.policy.run(specify_task(enhanced_text))

            spec = spec_postprocessor.clean(output.text)
            warning = spec_postprocessor.validate(spec)

            span.set_attribute("spec.length", len(spec))
            span.set_attribute("spec.valid", warning is None)
            logger.info(
                "Generated specification with %s (%d characters, valid=%s)",
                output.provider,
                len(spec),
                warning is None,
            )
            return output.model_copy(
                update={"text": spec, "warning": str(warning) if warning else None}
            )
