# src/specpilot/api/routes/codegen.py

import logging
from datetime import datetime
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from opentelemetry import trace
from pydantic import BaseModel

from specpilot.api.dependencies.services import get_codegen_service, get_polling_registry
from specpilot.api.errors import to_http_exception
from specpilot.exceptions import SpecPilotError
from specpilot.models.codegen_job import (
    CodeGenJob,
    CodeGenOptions,
    DeploymentMode,
    JobType,
    TargetError,
)
from specpilot.services.codegen_prompts import build_codegen_prompt
from specpilot.services.codegen_service import CodeGenService
from specpilot.services.framework_catalog import DATABASE_OPTIONS, list_frameworks
from specpilot.services.polling_controller import PollingRegistry

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

router = APIRouter(
    prefix="/codegen",
    tags=["Code Generation"],
)


# ----------------------------------------
# Pydantic models
# ----------------------------------------
class DatabaseOptionOut(BaseModel):
    value: str
    label: str
    description: str
    features: List[str]


class FrameworkCatalogResponse(BaseModel):
    backend: List[str]
    frontend: List[str]
    databases: List[DatabaseOptionOut]


class PromptPreviewRequest(BaseModel):
    target: JobType
    framework: str
    swagger_spec: str
    database: Optional[str] = None
    repository: Optional[str] = None
    deployment_mode: DeploymentMode = DeploymentMode.DOCKER


class PromptPreviewResponse(BaseModel):
    target: JobType
    framework: str
    prompt: str


class SubmitJobsRequest(CodeGenOptions):
    swagger_spec: str


class SubmitJobsResponse(BaseModel):
    session_id: Optional[str] = None
    backend_job_id: Optional[str] = None
    frontend_job_id: Optional[str] = None
    jobs: Dict[str, CodeGenJob]
    errors: Dict[str, TargetError]


class SessionResponse(BaseModel):
    session_id: str
    created_at: datetime
    jobs: Dict[str, CodeGenJob]
    rounds: int
    done: bool
    polling: bool
    last_error: Optional[str] = None


# ----------------------------------------
# GET /codegen/frameworks
# ----------------------------------------
@router.get("/frameworks", response_model=FrameworkCatalogResponse)
async def get_frameworks():
    return FrameworkCatalogResponse(
        backend=list(list_frameworks(JobType.BACKEND)),
        frontend=list(list_frameworks(JobType.FRONTEND)),
        databases=[
            DatabaseOptionOut(
                value=option.value,
                label=option.label,
                description=option.description,
                features=list(option.features),
            )
            for option in DATABASE_OPTIONS.values()
        ],
    )


# ----------------------------------------
# POST /codegen/prompt
# ----------------------------------------
@router.post("/prompt", response_model=PromptPreviewResponse)
async def preview_prompt(body: PromptPreviewRequest):
    """
    Show the exact prompt a job for this target would be submitted with.
    """
    try:
        prompt = build_codegen_prompt(
            body.target,
            body.framework,
            body.swagger_spec,
            database=body.database,
            repository=body.repository,
            deployment_mode=body.deployment_mode,
        )
    except SpecPilotError as e:
        raise to_http_exception(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return PromptPreviewResponse(target=body.target, framework=body.framework, prompt=prompt)


# ----------------------------------------
# POST /codegen/jobs
# ----------------------------------------
@router.post("/jobs", response_model=SubmitJobsResponse, status_code=status.HTTP_201_CREATED)
async def submit_jobs(
    body: SubmitJobsRequest,
    service: CodeGenService = Depends(get_codegen_service),
    registry: PollingRegistry = Depends(get_polling_registry),
):
    """
    Submit backend and/or frontend generation jobs and start tracking them.

    A target that fails (unknown framework, remote error) is reported in
    ``errors`` while the other target still goes through. If nothing was
    submitted the request fails.
    """
    with tracer.start_as_current_span("api.submit_codegen_jobs") as span:
        try:
            result = await service.submit(body.swagger_spec, body)
        except SpecPilotError as e:
            logger.exception("Code generation submission failed")
            raise to_http_exception(e)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        errors = {job_type.value: error for job_type, error in result.errors.items()}

        if not result.submitted:
            remote_failure = any(e.kind == "remote_service" for e in result.errors.values())
            detail = "; ".join(f"{target}: {error.message}" for target, error in errors.items())
            logger.warning("No code generation job submitted: %s", detail)
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY if remote_failure else status.HTTP_400_BAD_REQUEST,
                detail=detail,
            )

        session = registry.create(result.jobs, service.check_status)
        span.set_attribute("session.id", session.id)

        return SubmitJobsResponse(
            session_id=session.id,
            backend_job_id=result.backend_job_id,
            frontend_job_id=result.frontend_job_id,
            jobs={job_type.value: job for job_type, job in result.jobs.items()},
            errors=errors,
        )


# ----------------------------------------
# GET /codegen/jobs/{job_id}
# ----------------------------------------
@router.get("/jobs/{job_id}", response_model=CodeGenJob)
async def get_job(
    job_id: str,
    job_type: Optional[JobType] = Query(None, alias="type"),
    service: CodeGenService = Depends(get_codegen_service),
):
    try:
        job = await service.check_status(job_id, job_type)
    except SpecPilotError as e:
        logger.exception("Status check failed for job=%s", job_id)
        raise to_http_exception(e)

    if job is None:
        raise HTTPException(status_code=404, detail="Job not found")
    return job


# ----------------------------------------
# Tracking sessions
# ----------------------------------------
@router.get("/sessions/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: str,
    registry: PollingRegistry = Depends(get_polling_registry),
):
    session = registry.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Tracking session not found")
    return SessionResponse(**session.snapshot())


@router.delete("/sessions/{session_id}")
async def reset_session(
    session_id: str,
    registry: PollingRegistry = Depends(get_polling_registry),
):
    """Stop polling and forget the session's jobs."""
    if not registry.reset(session_id):
        raise HTTPException(status_code=404, detail="Tracking session not found")
    return {"session_id": session_id, "reset": True}
