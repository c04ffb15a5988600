import pytest

from specpilot.api.dependencies.services import get_generation_service, get_provider_policy
from specpilot.exceptions import ProviderError
from specpilot.main import app
from specpilot.services.generation_service import GenerationService
from specpilot.services.prompt_templates import SUGGESTIONS
from specpilot.services.provider_clients import PROVIDER_ANTHROPIC, PROVIDER_OPENAI
from specpilot.services.provider_policy import ProviderSelectionPolicy


@pytest.fixture
def use_providers(client):
    """Route generation through fake providers: ``use_providers(openai=..., anthropic=...)``."""
    def _apply(**providers):
        policy = ProviderSelectionPolicy({k: v for k, v in providers.items() if v is not None})
        app.dependency_overrides[get_provider_policy] = lambda: policy
        app.dependency_overrides[get_generation_service] = lambda: GenerationService(policy)
        return policy
    return _apply


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_metrics_exposed(client):
    resp = client.get("/metrics")
    assert resp.status_code == 200
    assert "specpilot_provider_calls_total" in resp.text


def test_ai_provider(client, use_providers, make_provider):
    use_providers(openai=make_provider(PROVIDER_OPENAI, model="gpt-4o"))

    resp = client.get("/ai-provider")

    assert resp.status_code == 200
    assert resp.json() == {"provider": "openai", "model": "gpt-4o", "policy": "fixed_priority"}


def test_suggestions(client):
    resp = client.get("/prompts/suggestions")
    assert resp.json()["suggestions"] == list(SUGGESTIONS)


def test_enhance_prompt(client, use_providers, make_provider):
    use_providers(openai=make_provider(PROVIDER_OPENAI, model="gpt-4o", responses=["Detailed prompt"]))

    resp = client.post("/prompts/enhance", json={"prompt": "todo api"})

    assert resp.status_code == 200
    assert resp.json() == {
        "enhanced_prompt": "Detailed prompt",
        "provider": "openai",
        "model": "gpt-4o",
        "fell_back": False,
    }


def test_enhance_prompt_blank_is_422(client):
    resp = client.post("/prompts/enhance", json={"prompt": "   "})
    assert resp.status_code == 422


def test_enhance_prompt_falls_back_on_403(client, use_providers, make_provider):
    use_providers(
        openai=make_provider(PROVIDER_OPENAI, error=ProviderError(PROVIDER_OPENAI, "Forbidden", 403)),
        anthropic=make_provider(PROVIDER_ANTHROPIC, model="claude", responses=["From Claude"]),
    )

    resp = client.post("/prompts/enhance", json={"prompt": "todo api"})

    body = resp.json()
    assert body["enhanced_prompt"] == "From Claude"
    assert body["provider"] == "anthropic"
    assert body["fell_back"] is True


def test_enhance_prompt_provider_error_is_502(client, use_providers, make_provider):
    use_providers(
        openai=make_provider(PROVIDER_OPENAI, error=ProviderError(PROVIDER_OPENAI, "Server error", 500)),
        anthropic=make_provider(PROVIDER_ANTHROPIC, responses=["unused"]),
    )

    resp = client.post("/prompts/enhance", json={"prompt": "todo api"})

    assert resp.status_code == 502
    assert "openai (HTTP 500)" in resp.json()["detail"]


def test_enhance_prompt_without_providers_is_500(client, use_providers):
    use_providers()

    resp = client.post("/prompts/enhance", json={"prompt": "todo api"})

    assert resp.status_code == 500
    assert "OPENAI_API_KEY" in resp.json()["detail"]


def test_generate_spec(client, use_providers, make_provider):
    use_providers(openai=make_provider(
        PROVIDER_OPENAI, responses=["```yaml\nopenapi: 3.0.0\npaths: {}\n```"]
    ))

    resp = client.post("/specs/generate", json={"enhanced_prompt": "Detailed prompt"})

    body = resp.json()
    assert resp.status_code == 200
    assert body["swagger_spec"] == "openapi: 3.0.0\npaths: {}"
    assert body["valid"] is True
    assert body["warning"] is None


def test_generate_spec_warning_is_not_fatal(client, use_providers, make_provider):
    use_providers(openai=make_provider(PROVIDER_OPENAI, responses=["Sorry, no spec"]))

    resp = client.post("/specs/generate", json={"enhanced_prompt": "Detailed prompt"})

    assert resp.status_code == 200
    assert resp.json()["valid"] is False
    assert resp.json()["warning"]


def test_validate_spec(client):
    resp = client.post("/specs/validate", json={"swagger_spec": "```\nopenapi: 3.0.0\n```"})

    assert resp.json()["swagger_spec"] == "openapi: 3.0.0"
    assert resp.json()["valid"] is True


def test_validate_spec_empty_is_400(client):
    assert client.post("/specs/validate", json={"swagger_spec": " "}).status_code == 400


def test_upload_spec(client):
    files = {"file": ("pets.yaml", b"openapi: 3.0.0\npaths: {}\n", "application/x-yaml")}

    resp = client.post("/specs/upload", files=files)

    assert resp.status_code == 200
    assert resp.json()["filename"] == "pets.yaml"
    assert resp.json()["valid"] is True


def test_upload_spec_wrong_extension(client):
    files = {"file": ("pets.txt", b"openapi: 3.0.0\n", "text/plain")}

    resp = client.post("/specs/upload", files=files)

    assert resp.status_code == 400
    assert "YAML or JSON" in resp.json()["detail"]


def test_upload_spec_empty_file(client):
    files = {"file": ("pets.yaml", b"", "application/x-yaml")}
    assert client.post("/specs/upload", files=files).status_code == 400


def test_download_spec(client):
    resp = client.post("/specs/download", json={"swagger_spec": "openapi: 3.0.0\n"})

    assert resp.status_code == 200
    assert resp.text == "openapi: 3.0.0\n"
    assert 'filename="swagger-api-spec.yaml"' in resp.headers["content-disposition"]
