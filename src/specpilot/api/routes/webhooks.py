# src/specpilot/api/routes/webhooks.py

import logging

from fastapi import APIRouter, Depends, HTTPException

from specpilot.api.errors import to_http_exception
from specpilot.api.routes.specs import SpecBody
from specpilot.config import Settings, get_settings
from specpilot.exceptions import ConfigurationError
from specpilot.services.webhook_service import WebhookResult, WebhookService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/webhooks",
    tags=["Webhooks"],
)


@router.post("/spec", response_model=WebhookResult)
async def send_spec_to_webhook(body: SpecBody, settings: Settings = Depends(get_settings)):
    """
    Forward the specification to the configured n8n webhook.

    Delivery failures come back as ``success=false``; only a missing
    webhook URL is an HTTP error.
    """
    if not body.swagger_spec.strip():
        raise HTTPException(status_code=400, detail="Swagger specification must not be empty")

    try:
        service = WebhookService.from_settings(settings)
    except ConfigurationError as e:
        logger.error(str(e))
        raise to_http_exception(e)

    return await service.send_spec(body.swagger_spec)
