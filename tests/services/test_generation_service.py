"""
Tests for the enhance and specify stages, and the full pipeline from a
user request to a submitted backend job.
"""
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from specpilot.exceptions import ProviderError
from specpilot.models.codegen_job import CodeGenOptions, JobType, TargetOptions
from specpilot.models.generation import GenerationRequest
from specpilot.services.codegen_service import CodeGenService
from specpilot.services.generation_service import GenerationService
from specpilot.services.provider_clients import PROVIDER_ANTHROPIC, PROVIDER_OPENAI
from specpilot.services.provider_policy import ProviderSelectionPolicy

pytestmark = pytest.mark.anyio

GENERATED_SPEC = (
    "```yaml\n"
    "Here is the specification you asked for.\n"
    "openapi: 3.0.0\n"
    "info:\n"
    "  title: Todo API\n"
    "  version: 1.0.0\n"
    "paths:\n"
    "  /todos:\n"
    "    get:\n"
    "      responses:\n"
    "        '200':\n"
    "          description: OK\n"
    "```"
)


def _service(make_provider, *responses, error=None):
    provider = make_provider(PROVIDER_OPENAI, model="gpt-4o", responses=list(responses), error=error)
    return GenerationService(ProviderSelectionPolicy({PROVIDER_OPENAI: provider})), provider


class TestEnhance:

    async def test_returns_provider_output(self, make_provider):
        service, provider = _service(make_provider, "A detailed prompt")

        output = await service.enhance(GenerationRequest(text="todo api"))

        assert output.text == "A detailed prompt"
        assert output.provider == PROVIDER_OPENAI
        assert output.model == "gpt-4o"
        assert 'Original prompt: "todo api"' in provider.calls[0]["user_prompt"]

    async def test_empty_output_is_an_error(self, make_provider):
        service, _ = _service(make_provider, "")

        with pytest.raises(ProviderError):
            await service.enhance(GenerationRequest(text="todo api"))

    def test_blank_request_is_rejected(self):
        with pytest.raises(ValueError):
            GenerationRequest(text="   ")


class TestSpecify:

    async def test_output_is_cleaned(self, make_provider):
        service, _ = _service(make_provider, GENERATED_SPEC)

        output = await service.specify("Detailed todo requirements")

        assert output.text.startswith("openapi: 3.0.0")
        assert "```" not in output.text
        assert "Here is the specification" not in output.text
        assert output.warning is None

    async def test_unrecognized_output_carries_warning(self, make_provider):
        service, _ = _service(make_provider, "I cannot help with that.")

        output = await service.specify("Detailed todo requirements")

        assert output.text == "I cannot help with that."
        assert "valid OpenAPI/Swagger" in output.warning

    async def test_blank_input_rejected(self, make_provider):
        service, provider = _service(make_provider, GENERATED_SPEC)

        with pytest.raises(ValueError):
            await service.specify("  ")

        assert provider.calls == []

    async def test_stages_fall_back_independently(self, make_provider):
        forbidden = ProviderError(PROVIDER_OPENAI, "Forbidden", status_code=403)
        openai = make_provider(PROVIDER_OPENAI, error=forbidden)
        anthropic = make_provider(PROVIDER_ANTHROPIC, responses=["enhanced", GENERATED_SPEC])
        service = GenerationService(
            ProviderSelectionPolicy({PROVIDER_OPENAI: openai, PROVIDER_ANTHROPIC: anthropic})
        )

        enhanced = await service.enhance(GenerationRequest(text="todo"))
        spec = await service.specify(enhanced.text)

        assert enhanced.fell_back and spec.fell_back
        assert len(openai.calls) == 2
        assert len(anthropic.calls) == 2


class TestPipeline:

    async def test_request_to_backend_job(self, make_provider, settings):
        user_text = "build a todo list API"
        service, _ = _service(
            make_provider,
            "Build a REST API for managing todo items with CRUD endpoints and due dates.",
            GENERATED_SPEC,
        )

        enhanced = await service.enhance(GenerationRequest(text=user_text))
        assert enhanced.text and enhanced.text != user_text

        spec = await service.specify(enhanced.text)
        assert spec.text.startswith("openapi:")

        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = AsyncMock()
            response = MagicMock(status_code=200, is_success=True, text="")
            response.json.return_value = {"id": "run-77"}
            mock_client.post = AsyncMock(return_value=response)
            mock_client_class.return_value.__aenter__.return_value = mock_client

            result = await CodeGenService(settings).submit(
                spec.text,
                CodeGenOptions(
                    backend=TargetOptions(
                        framework="Ruby on Rails",
                        database="postgresql",
                        repository="acme/todo-api",
                    )
                ),
            )

        assert result.backend_job_id == "run-77"
        prompt = result.prompts[JobType.BACKEND]
        assert "PostgreSQL" in prompt
        assert "acme/todo-api" in prompt
        assert prompt.endswith(spec.text)
