# src/specpilot/services/webhook_service.py

"""
Forwards a specification to the configured automation webhook (n8n).
"""

import logging
from typing import Optional

import httpx
from opentelemetry import trace
from pydantic import BaseModel

from specpilot.config import Settings
from specpilot.exceptions import RemoteServiceError

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class WebhookResult(BaseModel):
    success: bool
    message: str


class WebhookService:

    def __init__(self, url: str, token: Optional[str] = None, timeout: float = 30.0):
        self.url = url
        self.token = token
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "WebhookService":
        url = Settings.require(settings.webhook_url, "N8N_WEBHOOK_URL", "N8N webhook URL")
        return cls(url, settings.webhook_token)

    async def send_spec(self, swagger_spec: str) -> WebhookResult:
        """
        POST ``{"swaggerSpec": ...}`` to the webhook.

        Delivery failures are reported in the result instead of raised.
        """
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        with tracer.start_as_current_span("webhook.send_spec") as span:
            span.set_attribute("spec.length", len(swagger_spec))
            try:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(
                        self.url, json={"swaggerSpec": swagger_spec}, headers=headers
                    )
                if response.status_code >= 400:
                    raise RemoteServiceError("Webhook", response.status_code, response.text)
            except (httpx.RequestError, RemoteServiceError) as e:
                logger.error(f"Error sending Swagger to n8n: {e}")
                span.set_attribute("webhook.success", False)
                return WebhookResult(success=False, message=f"Failed to send Swagger to n8n: {e}")

            span.set_attribute("webhook.success", True)
            logger.info("Swagger specification sent to webhook")
            return WebhookResult(success=True, message="Swagger specification successfully sent to n8n")
