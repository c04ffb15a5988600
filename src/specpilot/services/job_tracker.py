# src/specpilot/services/job_tracker.py

"""
Pure state transition for tracked code generation jobs.

No I/O happens here; the polling controller feeds fetched jobs in and
acts on the returned ``done`` flag.
"""

from __future__ import annotations

from typing import Dict, Mapping, Optional, Tuple

from specpilot.models.codegen_job import CodeGenJob, JobType

# Fields only this service knows; the remote payload never carries them
_LOCAL_FIELDS = ("framework", "database", "repository")


def merge_job(previous: CodeGenJob, update: Optional[CodeGenJob]) -> CodeGenJob:
    if update is None:
        return previous

    local = {
        field: getattr(previous, field)
        for field in _LOCAL_FIELDS
        if getattr(update, field) is None
    }
    # Remote status endpoint may omit creation time; keep the submission time
    if "created_at" not in update.model_fields_set:
        local["created_at"] = previous.created_at
    local["type"] = previous.type
    return update.model_copy(update=local)


def all_terminal(jobs: Mapping[JobType, CodeGenJob]) -> bool:
    return bool(jobs) and all(job.is_terminal for job in jobs.values())


def advance(
    jobs: Mapping[JobType, CodeGenJob],
    updates: Mapping[JobType, Optional[CodeGenJob]],
) -> Tuple[Dict[JobType, CodeGenJob], bool]:
    """
    Apply one polling round.

    Args:
        jobs: Currently tracked jobs by target.
        updates: Fetched job per target; ``None`` (not found yet) or a
            missing key leaves the previous record untouched.

    Returns:
        The new job mapping and whether every tracked job is terminal.
    """
    next_jobs = {
        job_type: merge_job(job, updates.get(job_type))
        for job_type, job in jobs.items()
    }
    return next_jobs, all_terminal(next_jobs)
