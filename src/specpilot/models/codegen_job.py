# src/specpilot/models/codegen_job.py

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class JobStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


class JobType(str, Enum):
    BACKEND = "backend"
    FRONTEND = "frontend"


class DeploymentMode(str, Enum):
    DOCKER = "docker"
    LOCAL = "local"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CodeGenJob(BaseModel):
    """One remote code generation run as seen by this service."""

    id: str
    status: JobStatus = JobStatus.PENDING
    type: JobType
    framework: Optional[str] = None
    database: Optional[str] = None
    repository: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    completed_at: Optional[datetime] = None
    pull_request_url: Optional[str] = None
    repository_url: Optional[str] = None
    error: Optional[str] = None
    progress: int = 0

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @classmethod
    def placeholder(
        cls,
        job_id: str,
        job_type: JobType,
        framework: Optional[str] = None,
        database: Optional[str] = None,
        repository: Optional[str] = None,
    ) -> "CodeGenJob":
        """Local record created the moment submission returns an id."""
        return cls(
            id=job_id,
            type=job_type,
            framework=framework,
            database=database if job_type == JobType.BACKEND else None,
            repository=repository,
        )


class TargetOptions(BaseModel):
    framework: str = Field(..., min_length=1)
    database: Optional[str] = None
    repository: Optional[str] = None

    @field_validator("framework")
    @classmethod
    def _strip_framework(cls, value: str) -> str:
        return value.strip()

    @field_validator("database", "repository")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None


class CodeGenOptions(BaseModel):
    """Which targets to generate and how."""

    backend: Optional[TargetOptions] = None
    frontend: Optional[TargetOptions] = None
    deployment_mode: DeploymentMode = DeploymentMode.DOCKER

    @model_validator(mode="after")
    def _require_a_target(self) -> "CodeGenOptions":
        if self.backend is None and self.frontend is None:
            raise ValueError("At least one of backend or frontend must be requested")
        return self

    def targets(self) -> Dict[JobType, TargetOptions]:
        requested: Dict[JobType, TargetOptions] = {}
        if self.backend is not None:
            requested[JobType.BACKEND] = self.backend
        if self.frontend is not None:
            requested[JobType.FRONTEND] = self.frontend
        return requested


class TargetError(BaseModel):
    kind: str
    message: str


class SubmissionResult(BaseModel):
    backend_job_id: Optional[str] = None
    frontend_job_id: Optional[str] = None
    jobs: Dict[JobType, CodeGenJob] = Field(default_factory=dict)
    prompts: Dict[JobType, str] = Field(default_factory=dict)
    errors: Dict[JobType, TargetError] = Field(default_factory=dict)

    @property
    def submitted(self) -> bool:
        return bool(self.jobs)
