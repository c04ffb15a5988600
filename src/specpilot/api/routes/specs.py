# src/specpilot/api/routes/specs.py

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import PlainTextResponse
from opentelemetry import trace
from pydantic import BaseModel, field_validator

from specpilot.api.dependencies.services import get_generation_service
from specpilot.api.errors import to_http_exception
from specpilot.exceptions import SpecPilotError
from specpilot.services.generation_service import GenerationService
from specpilot.services.spec_upload_service import LoadedSpec, inspect_text, load_uploaded_spec

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

router = APIRouter(
    prefix="/specs",
    tags=["Specifications"],
)

DOWNLOAD_FILENAME = "swagger-api-spec.yaml"


class GenerateSpecRequest(BaseModel):
    enhanced_prompt: str

    @field_validator("enhanced_prompt")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Enhanced prompt must not be empty")
        return value


class GenerateSpecResponse(BaseModel):
    swagger_spec: str
    provider: str
    model: str
    fell_back: bool = False
    valid: bool
    warning: Optional[str] = None


class SpecBody(BaseModel):
    swagger_spec: str


@router.post("/generate", response_model=GenerateSpecResponse)
async def generate_spec(
    body: GenerateSpecRequest,
    service: GenerationService = Depends(get_generation_service),
):
    """
    Generate an OpenAPI 3.0 YAML document from an enhanced prompt.

    A document that still lacks the ``openapi:`` marker after cleaning is
    returned with ``valid=false`` and a warning rather than rejected.
    """
    with tracer.start_as_current_span("api.generate_spec"):
        try:
            output = await service.specify(body.enhanced_prompt)
        except SpecPilotError as e:
            logger.exception("Specification generation failed")
            raise to_http_exception(e)

        return GenerateSpecResponse(
            swagger_spec=output.text,
            provider=output.provider,
            model=output.model,
            fell_back=output.fell_back,
            valid=output.warning is None,
            warning=output.warning,
        )


@router.post("/validate", response_model=LoadedSpec)
async def validate_spec(body: SpecBody):
    if not body.swagger_spec.strip():
        raise HTTPException(status_code=400, detail="Please paste some content first")
    return inspect_text(body.swagger_spec)


@router.post("/upload", response_model=LoadedSpec)
async def upload_spec(file: UploadFile = File(...)):
    """
    Load an existing Swagger/OpenAPI document from a .yaml, .yml or .json file.
    """
    raw = await file.read()
    if not raw:
        raise HTTPException(status_code=400, detail="Empty file uploaded")

    try:
        return load_uploaded_spec(file.filename, raw)
    except ValueError as e:
        logger.warning("Rejected upload %s: %s", file.filename, e)
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/download", response_class=PlainTextResponse)
async def download_spec(body: SpecBody):
    return PlainTextResponse(
        content=body.swagger_spec,
        media_type="application/x-yaml",
        headers={"Content-Disposition": f'attachment; filename="{DOWNLOAD_FILENAME}"'},
    )
