# src/specpilot/api/routes/github.py

import asyncio
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from opentelemetry import trace
from pydantic import BaseModel

from specpilot.api.errors import to_http_exception
from specpilot.config import Settings, get_settings
from specpilot.exceptions import RemoteServiceError
from specpilot.services.github_api_service import GitHubAPIService

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

router = APIRouter(
    prefix="/github",
    tags=["GitHub"],
)


class TokenStatusResponse(BaseModel):
    has_token: bool


class RepositoryOut(BaseModel):
    id: int
    name: str
    full_name: str
    private: bool
    html_url: Optional[str] = None


class RepositoryAccessResponse(BaseModel):
    full_name: str
    accessible: bool


def _service(settings: Settings) -> GitHubAPIService:
    if not GitHubAPIService.has_token(settings):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No GitHub token configured",
        )
    return GitHubAPIService.from_settings(settings)


@router.get("/token-status", response_model=TokenStatusResponse)
async def get_token_status(settings: Settings = Depends(get_settings)):
    return TokenStatusResponse(has_token=GitHubAPIService.has_token(settings))


@router.get("/repositories", response_model=List[RepositoryOut])
async def list_repositories(settings: Settings = Depends(get_settings)):
    """
    Repositories of the token owner, most recently updated first.
    """
    service = _service(settings)
    try:
        return await service.list_repositories()
    except RemoteServiceError as e:
        logger.exception("Error fetching repositories")
        raise to_http_exception(e)


@router.get("/repositories/{owner}/{name}/access", response_model=RepositoryAccessResponse)
async def check_repository_access(owner: str, name: str, settings: Settings = Depends(get_settings)):
    full_name = f"{owner}/{name}"
    service = _service(settings)
    with tracer.start_as_current_span("api.check_repository_access") as span:
        span.set_attribute("repository", full_name)
        # PyGithub is blocking
        accessible = await asyncio.to_thread(service.verify_access, full_name)
        return RepositoryAccessResponse(full_name=full_name, accessible=accessible)
