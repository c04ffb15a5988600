import dataclasses
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from specpilot.exceptions import ConfigurationError
from specpilot.services.webhook_service import WebhookService

pytestmark = pytest.mark.anyio


class TestSendSpec:
    """Forwarding a specification to the n8n webhook."""

    async def test_success_with_bearer_token(self):
        service = WebhookService("https://n8n.test/hook", token="secret")

        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = AsyncMock()
            mock_client.post = AsyncMock(return_value=MagicMock(status_code=200, text="ok"))
            mock_client_class.return_value.__aenter__.return_value = mock_client

            result = await service.send_spec("openapi: 3.0.0")

        assert result.success
        assert result.message == "Swagger specification successfully sent to n8n"
        args, kwargs = mock_client.post.call_args
        assert args[0] == "https://n8n.test/hook"
        assert kwargs["json"] == {"swaggerSpec": "openapi: 3.0.0"}
        assert kwargs["headers"]["Authorization"] == "Bearer secret"

    async def test_no_token_means_no_authorization_header(self):
        service = WebhookService("https://n8n.test/hook")

        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = AsyncMock()
            mock_client.post = AsyncMock(return_value=MagicMock(status_code=204, text=""))
            mock_client_class.return_value.__aenter__.return_value = mock_client

            await service.send_spec("openapi: 3.0.0")

        _, kwargs = mock_client.post.call_args
        assert "Authorization" not in kwargs["headers"]

    async def test_error_status_reported_not_raised(self):
        service = WebhookService("https://n8n.test/hook")

        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = AsyncMock()
            mock_client.post = AsyncMock(return_value=MagicMock(status_code=500, text="workflow error"))
            mock_client_class.return_value.__aenter__.return_value = mock_client

            result = await service.send_spec("openapi: 3.0.0")

        assert not result.success
        assert result.message.startswith("Failed to send Swagger to n8n")
        assert "500" in result.message
        assert "workflow error" in result.message

    async def test_network_error_reported(self):
        service = WebhookService("https://n8n.test/hook")

        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = AsyncMock()
            mock_client.post = AsyncMock(side_effect=httpx.ConnectTimeout("timed out"))
            mock_client_class.return_value.__aenter__.return_value = mock_client

            result = await service.send_spec("openapi: 3.0.0")

        assert not result.success


def test_from_settings_requires_url(settings):
    with pytest.raises(ConfigurationError) as exc:
        WebhookService.from_settings(dataclasses.replace(settings, webhook_url=None))

    assert "N8N_WEBHOOK_URL" in str(exc.value)


def test_from_settings(settings):
    service = WebhookService.from_settings(settings)

    assert service.url == "https://n8n.test/webhook/spec"
    assert service.token == "hook-token"
