# src/specpilot/api/routes/prompts.py

import logging
from typing import List

from fastapi import APIRouter, Depends
from opentelemetry import trace
from pydantic import BaseModel, field_validator

from specpilot.api.dependencies.services import get_generation_service
from specpilot.api.errors import to_http_exception
from specpilot.exceptions import SpecPilotError
from specpilot.models.generation import GenerationRequest
from specpilot.services.generation_service import GenerationService
from specpilot.services.prompt_templates import SUGGESTIONS

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

router = APIRouter(
    prefix="/prompts",
    tags=["Prompts"],
)


# ----------------------------------------
# Pydantic models
# ----------------------------------------
class EnhanceRequest(BaseModel):
    prompt: str

    @field_validator("prompt")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Prompt must not be empty")
        return value


class EnhanceResponse(BaseModel):
    enhanced_prompt: str
    provider: str
    model: str
    fell_back: bool = False


class SuggestionsResponse(BaseModel):
    suggestions: List[str]


# ----------------------------------------
# GET /prompts/suggestions
# ----------------------------------------
@router.get("/suggestions", response_model=SuggestionsResponse)
async def list_suggestions():
    return SuggestionsResponse(suggestions=list(SUGGESTIONS))


# ----------------------------------------
# POST /prompts/enhance
# ----------------------------------------
@router.post("/enhance", response_model=EnhanceResponse)
async def enhance_prompt(
    body: EnhanceRequest,
    service: GenerationService = Depends(get_generation_service),
):
    """
    Rewrite a short feature request into a detailed generation prompt.
    """
    with tracer.start_as_current_span("api.enhance_prompt") as span:
        span.set_attribute("prompt.length", len(body.prompt))
        try:
            output = await service.enhance(GenerationRequest(text=body.prompt))
        except SpecPilotError as e:
            logger.exception("Prompt enhancement failed")
            raise to_http_exception(e)

        return EnhanceResponse(
            enhanced_prompt=output.text,
            provider=output.provider,
            model=output.model,
            fell_back=output.fell_back,
        )
