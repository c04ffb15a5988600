# src/specpilot/api/dependencies/services.py

from functools import lru_cache

from fastapi import Depends, Request

from specpilot.config import Settings, get_settings
from specpilot.services.codegen_service import CodeGenService
from specpilot.services.generation_service import GenerationService
from specpilot.services.polling_controller import PollingRegistry
from specpilot.services.provider_policy import ProviderSelectionPolicy, build_policy


@lru_cache(maxsize=4)
def _policy_for(settings: Settings) -> ProviderSelectionPolicy:
    # SDK clients hold connection pools; build them once per settings object
    return build_policy(settings)


def get_provider_policy(settings: Settings = Depends(get_settings)) -> ProviderSelectionPolicy:
    return _policy_for(settings)


def get_generation_service(
    policy: ProviderSelectionPolicy = Depends(get_provider_policy),
) -> GenerationService:
    return GenerationService(policy)


def get_codegen_service(settings: Settings = Depends(get_settings)) -> CodeGenService:
    return CodeGenService(settings)


def get_polling_registry(request: Request) -> PollingRegistry:
    """The registry lives on app state so the lifespan can cancel it on shutdown."""
    return request.app.state.polling_registry
