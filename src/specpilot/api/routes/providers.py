# src/specpilot/api/routes/providers.py

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from specpilot.api.dependencies.services import get_provider_policy
from specpilot.services.provider_policy import ProviderSelectionPolicy

router = APIRouter(tags=["AI Provider"])


class AIProviderResponse(BaseModel):
    provider: Optional[str] = None
    model: Optional[str] = None
    policy: str


@router.get("/ai-provider", response_model=AIProviderResponse)
async def get_ai_provider(policy: ProviderSelectionPolicy = Depends(get_provider_policy)):
    """Provider and model the next generation request will try first."""
    return AIProviderResponse(**policy.describe())
