from .codegen_job import (
    CodeGenJob,
    CodeGenOptions,
    DeploymentMode,
    JobStatus,
    JobType,
    SubmissionResult,
    TargetError,
    TargetOptions,
)
from .generation import GenerationOutput, GenerationRequest
