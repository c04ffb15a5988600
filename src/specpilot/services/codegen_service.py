# src/specpilot/services/codegen_service.py

"""
Client for the remote code generation service.

Submits one job per requested target and maps the service's free-form job
status vocabulary onto the four states this application understands.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

import httpx
from opentelemetry import trace

from specpilot.config import Settings
from specpilot.exceptions import RemoteServiceError, UnsupportedFrameworkError
from specpilot.metrics import codegen_jobs_submitted_total, codegen_status_checks_total
from specpilot.models.codegen_job import (
    CodeGenJob,
    CodeGenOptions,
    JobStatus,
    JobType,
    SubmissionResult,
    TargetError,
)
from specpilot.services.codegen_prompts import build_codegen_prompt

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

UNKNOWN_JOB_ID = "unknown"

STATUS_MAP: Mapping[str, JobStatus] = MappingProxyType({
    "pending": JobStatus.PENDING,
    "queued": JobStatus.PENDING,
    "waiting": JobStatus.PENDING,
    "running": JobStatus.RUNNING,
    "in_progress": JobStatus.RUNNING,
    "processing": JobStatus.RUNNING,
    "completed": JobStatus.COMPLETED,
    "success": JobStatus.COMPLETED,
    "finished": JobStatus.COMPLETED,
    "done": JobStatus.COMPLETED,
    "failed": JobStatus.FAILED,
    "error": JobStatus.FAILED,
    "cancelled": JobStatus.FAILED,
})


def normalize_status(remote_status: Any) -> JobStatus:
    """Map a remote status string onto ``JobStatus``; unknown or absent -> pending."""
    if not isinstance(remote_status, str):
        return JobStatus.PENDING
    return STATUS_MAP.get(remote_status.strip().lower(), JobStatus.PENDING)


def derive_progress(status: JobStatus, explicit: Any = None) -> int:
    """
    Progress percentage for a job.

    The remote service rarely reports progress, so when it is absent we use
    a fixed midpoint for running jobs.
    """
    if isinstance(explicit, (int, float)) and not isinstance(explicit, bool):
        return max(0, min(100, int(explicit)))
    if status == JobStatus.COMPLETED:
        return 100
    if status == JobStatus.RUNNING:
        return 50
    return 0


def _first(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = data.get(key)
        if value not in (None, ""):
            return value
    return None


def _text(value: Any) -> Optional[str]:
    """Coerce a free-form remote field to text; mappings prefer their ``message``."""
    if value is None:
        return None
    if isinstance(value, Mapping):
        message = value.get("message")
        if isinstance(message, str) and message:
            return message
        return json.dumps(value, default=str)
    if isinstance(value, (list, tuple)):
        return json.dumps(value, default=str)
    return str(value)


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            logger.debug("Unparseable timestamp from code generation service: %s", value)
    return None


def extract_job_id(data: Any) -> str:
    """The service has returned the identifier under several names."""
    if not isinstance(data, Mapping):
        return UNKNOWN_JOB_ID
    job_id = _first(data, "jobId", "id", "runId")
    return str(job_id) if job_id is not None else UNKNOWN_JOB_ID


def job_from_payload(job_id: str, data: Mapping[str, Any], job_type: Optional[JobType] = None) -> CodeGenJob:
    status = normalize_status(data.get("status"))

    remote_type = data.get("type")
    if remote_type in (JobType.BACKEND.value, JobType.FRONTEND.value):
        resolved_type = JobType(remote_type)
    else:
        resolved_type = job_type or JobType.BACKEND

    created_at = _parse_timestamp(_first(data, "createdAt", "created_at"))
    fields = dict(
        id=job_id,
        status=status,
        type=resolved_type,
        completed_at=_parse_timestamp(_first(data, "completedAt", "completed_at")),
        pull_request_url=_text(_first(data, "pullRequestUrl", "pull_request_url", "pr_url")),
        repository_url=_text(_first(data, "repositoryUrl", "repository_url", "repo_url")),
        error=_text(_first(data, "error", "errorMessage", "error_message")),
        progress=derive_progress(status, data.get("progress")),
    )
    if created_at is not None:
        fields["created_at"] = created_at
    return CodeGenJob(**fields)


class CodeGenService:
    """Submits and inspects remote code generation runs."""

    def __init__(self, settings: Settings, timeout: float = 30.0):
        self.settings = settings
        self.timeout = timeout

    def _credentials(self) -> Tuple[str, str]:
        api_key = Settings.require(self.settings.codegen_api_key, "CODEGEN_API_KEY", "CodeGen API key")
        org_id = Settings.require(self.settings.codegen_org_id, "CODEGEN_ORG_ID", "CodeGen Org ID")
        return api_key, org_id

    @staticmethod
    def _headers(api_key: str) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key}",
        }

    def _run_url(self, org_id: str) -> str:
        return f"{self.settings.codegen_api_base_url}/v1/organizations/{org_id}/agent/run"

    def _status_url(self, org_id: str, job_id: str) -> str:
        return f"{self.settings.codegen_api_base_url}/v1/organizations/{org_id}/agent/runs/{job_id}"

    async def submit(self, spec: str, options: CodeGenOptions) -> SubmissionResult:
        """
        Submit one job per requested target.

        A prompt that cannot be built (unknown framework, bad options) or a
        failed POST is recorded against its target only; the other target is
        still submitted.

        Raises:
            ConfigurationError: CODEGEN_API_KEY or CODEGEN_ORG_ID missing.
            ValueError: empty specification.
        """
        api_key, org_id = self._credentials()
        if not spec or not spec.strip():
            raise ValueError("Swagger specification must not be empty")

        result = SubmissionResult()

        with tracer.start_as_current_span("codegen.submit") as span:
            span.set_attribute("codegen.targets", ",".join(t.value for t in options.targets()))
            span.set_attribute("codegen.deployment_mode", options.deployment_mode.value)

            for target, target_options in options.targets().items():
                try:
                    result.prompts[target] = build_codegen_prompt(
                        target,
                        target_options.framework,
                        spec,
                        database=target_options.database,
                        repository=target_options.repository,
                        deployment_mode=options.deployment_mode,
                    )
                except UnsupportedFrameworkError as e:
                    logger.warning("Skipping %s job: %s", target.value, e)
                    result.errors[target] = TargetError(kind="unsupported_framework", message=str(e))
                except ValueError as e:
                    logger.warning("Skipping %s job: %s", target.value, e)
                    result.errors[target] = TargetError(kind="invalid_options", message=str(e))

            if not result.prompts:
                return result

            async with httpx.AsyncClient(timeout=self.timeout) as client:
                for target, prompt in result.prompts.items():
                    try:
                        job_id = await self._create_run(client, api_key, org_id, target, prompt)
                    except RemoteServiceError as e:
                        logger.error("Failed to submit %s job: %s", target.value, e)
                        result.errors[target] = TargetError(kind="remote_service", message=str(e))
                        continue

                    target_options = options.targets()[target]
                    job = CodeGenJob.placeholder(
                        job_id,
                        target,
                        framework=target_options.framework,
                        database=target_options.database,
                        repository=target_options.repository,
                    )
                    if job_id == UNKNOWN_JOB_ID:
                        # Nothing to poll; terminal so tracking can finish
                        job = job.model_copy(update={
                            "status": JobStatus.FAILED,
                            "error": "Code generation service returned no job identifier",
                        })
                    result.jobs[target] = job
                    codegen_jobs_submitted_total.labels(target.value).inc()

        result.backend_job_id = result.jobs[JobType.BACKEND].id if JobType.BACKEND in result.jobs else None
        result.frontend_job_id = result.jobs[JobType.FRONTEND].id if JobType.FRONTEND in result.jobs else None

        logger.info(
            "Submitted code generation jobs backend=%s frontend=%s errors=%s",
            result.backend_job_id,
            result.frontend_job_id,
            {t.value: e.kind for t, e in result.errors.items()},
        )
        return result

    async def _create_run(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        org_id: str,
        target: JobType,
        prompt: str,
    ) -> str:
        operation = f"{target.value.capitalize()} generation API"
        try:
            response = await client.post(
                self._run_url(org_id),
                json={"prompt": prompt},
                headers=self._headers(api_key),
            )
        except httpx.RequestError as e:
            raise RemoteServiceError(operation, None, str(e)) from e

        if not response.is_success:
            raise RemoteServiceError(operation, response.status_code, response.text)

        try:
            data = response.json()
        except ValueError:
            logger.warning("%s returned a non-JSON body", operation)
            data = {}

        job_id = extract_job_id(data)
        logger.info("Created %s run %s", target.value, job_id)
        return job_id

    async def check_status(self, job_id: str, job_type: Optional[JobType] = None) -> Optional[CodeGenJob]:
        """
        Fetch and normalize a job.

        Returns ``None`` when the service answers 404.

        Raises:
            ConfigurationError: CODEGEN_API_KEY or CODEGEN_ORG_ID missing.
            RemoteServiceError: any other non-success response, or a body that
                is not JSON.
        """
        api_key, org_id = self._credentials()
        operation = "Job status API"

        with tracer.start_as_current_span("codegen.check_status") as span:
            span.set_attribute("codegen.job_id", job_id)

            try:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(
                        self._status_url(org_id, job_id),
                        headers=self._headers(api_key),
                    )
            except httpx.RequestError as e:
                codegen_status_checks_total.labels("error").inc()
                raise RemoteServiceError(operation, None, str(e)) from e

            if response.status_code == 404:
                codegen_status_checks_total.labels("not_found").inc()
                logger.info("Job %s not found yet", job_id)
                return None

            if not response.is_success:
                codegen_status_checks_total.labels("error").inc()
                raise RemoteServiceError(operation, response.status_code, response.text)

            try:
                data = response.json()
            except ValueError as e:
                codegen_status_checks_total.labels("error").inc()
                raise RemoteServiceError(
                    operation, None, f"unreadable response body: {response.text[:200]}"
                ) from e
            if not isinstance(data, Mapping):
                data = {}

            job = job_from_payload(job_id, data, job_type)
            codegen_status_checks_total.labels(job.status.value).inc()
            span.set_attribute("codegen.status", job.status.value)
            logger.debug("Job %s remote=%s normalized=%s", job_id, data.get("status"), job.status.value)
            return job
