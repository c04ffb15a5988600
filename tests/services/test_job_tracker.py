from datetime import datetime, timezone

from specpilot.models.codegen_job import CodeGenJob, JobStatus, JobType
from specpilot.services.job_tracker import advance, all_terminal, merge_job

SUBMITTED_AT = datetime(2025, 1, 1, tzinfo=timezone.utc)


def _tracked():
    return {
        JobType.BACKEND: CodeGenJob(
            id="b-1",
            type=JobType.BACKEND,
            framework="Go Gin",
            database="postgresql",
            repository="acme/api",
            created_at=SUBMITTED_AT,
        ),
        JobType.FRONTEND: CodeGenJob(id="f-1", type=JobType.FRONTEND, framework="React"),
    }


def _remote(job_id, job_type, status, **extra):
    return CodeGenJob(id=job_id, type=job_type, status=status, **extra)


def test_none_update_keeps_previous_record():
    jobs = _tracked()

    next_jobs, done = advance(jobs, {JobType.BACKEND: None, JobType.FRONTEND: None})

    assert next_jobs == jobs
    assert not done


def test_update_preserves_local_fields():
    jobs = _tracked()
    update = _remote("b-1", JobType.BACKEND, JobStatus.RUNNING, progress=50)

    next_jobs, done = advance(jobs, {JobType.BACKEND: update})

    backend = next_jobs[JobType.BACKEND]
    assert backend.status is JobStatus.RUNNING
    assert backend.framework == "Go Gin"
    assert backend.database == "postgresql"
    assert backend.repository == "acme/api"
    assert backend.created_at == SUBMITTED_AT
    assert next_jobs[JobType.FRONTEND] is jobs[JobType.FRONTEND]
    assert not done


def test_input_mapping_is_not_mutated():
    jobs = _tracked()
    advance(jobs, {JobType.BACKEND: _remote("b-1", JobType.BACKEND, JobStatus.COMPLETED)})

    assert jobs[JobType.BACKEND].status is JobStatus.PENDING


def test_done_only_when_every_job_is_terminal():
    jobs = _tracked()

    jobs, done = advance(jobs, {JobType.BACKEND: _remote("b-1", JobType.BACKEND, JobStatus.COMPLETED)})
    assert not done

    jobs, done = advance(jobs, {JobType.FRONTEND: _remote("f-1", JobType.FRONTEND, JobStatus.FAILED)})
    assert done


def test_remote_created_at_wins_when_reported():
    reported = datetime(2025, 1, 1, 0, 5, tzinfo=timezone.utc)
    merged = merge_job(
        _tracked()[JobType.BACKEND],
        _remote("b-1", JobType.BACKEND, JobStatus.RUNNING, created_at=reported),
    )
    assert merged.created_at == reported


def test_empty_tracking_is_never_done():
    assert not all_terminal({})
