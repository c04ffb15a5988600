from unittest.mock import AsyncMock, MagicMock

import pytest

from specpilot.api.dependencies.services import get_codegen_service
from specpilot.exceptions import ConfigurationError, RemoteServiceError
from specpilot.main import app
from specpilot.models.codegen_job import (
    CodeGenJob,
    JobStatus,
    JobType,
    SubmissionResult,
    TargetError,
)
from specpilot.services.framework_catalog import BACKEND_FRAMEWORKS, FRONTEND_FRAMEWORKS

SPEC = "openapi: 3.0.0\npaths: {}"


@pytest.fixture
def codegen_service(client):
    service = MagicMock()
    service.submit = AsyncMock()
    service.check_status = AsyncMock()
    app.dependency_overrides[get_codegen_service] = lambda: service
    return service


def _submitted(*job_types):
    jobs = {
        job_type: CodeGenJob.placeholder(f"{job_type.value}-1", job_type, framework="Go Gin")
        for job_type in job_types
    }
    return SubmissionResult(
        backend_job_id=jobs[JobType.BACKEND].id if JobType.BACKEND in jobs else None,
        frontend_job_id=jobs[JobType.FRONTEND].id if JobType.FRONTEND in jobs else None,
        jobs=jobs,
    )


def test_frameworks_catalog(client):
    resp = client.get("/codegen/frameworks")

    body = resp.json()
    assert body["backend"] == list(BACKEND_FRAMEWORKS)
    assert body["frontend"] == list(FRONTEND_FRAMEWORKS)
    assert [db["value"] for db in body["databases"]] == ["postgresql", "mysql", "mariadb", "sqlite"]


def test_prompt_preview(client):
    resp = client.post("/codegen/prompt", json={
        "target": "backend",
        "framework": "Ruby on Rails",
        "swagger_spec": SPEC,
        "database": "postgresql",
        "repository": "acme/todo-api",
    })

    assert resp.status_code == 200
    prompt = resp.json()["prompt"]
    assert "PostgreSQL" in prompt
    assert "acme/todo-api" in prompt


def test_prompt_preview_unknown_framework_is_400(client):
    resp = client.post("/codegen/prompt", json={
        "target": "backend",
        "framework": "NoSuchFramework",
        "swagger_spec": SPEC,
    })

    assert resp.status_code == 400
    assert "NoSuchFramework" in resp.json()["detail"]


def test_submit_requires_a_target(client, codegen_service):
    resp = client.post("/codegen/jobs", json={"swagger_spec": SPEC})

    assert resp.status_code == 422
    codegen_service.submit.assert_not_called()


def test_submit_creates_tracking_session(client, codegen_service):
    codegen_service.submit.return_value = _submitted(JobType.BACKEND)
    codegen_service.check_status.return_value = CodeGenJob(
        id="backend-1", type=JobType.BACKEND, status=JobStatus.COMPLETED, progress=100
    )

    resp = client.post("/codegen/jobs", json={
        "swagger_spec": SPEC,
        "backend": {"framework": "Go Gin", "database": "postgresql"},
        "deployment_mode": "local",
    })

    assert resp.status_code == 201
    body = resp.json()
    assert body["backend_job_id"] == "backend-1"
    assert body["frontend_job_id"] is None
    assert body["session_id"]

    spec_arg, options_arg = codegen_service.submit.call_args.args
    assert spec_arg == SPEC
    assert options_arg.backend.framework == "Go Gin"
    assert options_arg.deployment_mode.value == "local"

    session = client.get(f"/codegen/sessions/{body['session_id']}")
    assert session.status_code == 200
    assert set(session.json()["jobs"]) == {"backend"}


def test_submit_reports_partial_failure(client, codegen_service):
    result = _submitted(JobType.FRONTEND)
    result.errors[JobType.BACKEND] = TargetError(
        kind="unsupported_framework", message="Unsupported backend framework: Nope"
    )
    codegen_service.submit.return_value = result
    codegen_service.check_status.return_value = None

    resp = client.post("/codegen/jobs", json={
        "swagger_spec": SPEC,
        "backend": {"framework": "Nope"},
        "frontend": {"framework": "React"},
    })

    assert resp.status_code == 201
    assert resp.json()["errors"]["backend"]["kind"] == "unsupported_framework"
    assert resp.json()["frontend_job_id"] == "frontend-1"

    client.delete(f"/codegen/sessions/{resp.json()['session_id']}")


def test_submit_nothing_submitted_unsupported_is_400(client, codegen_service):
    codegen_service.submit.return_value = SubmissionResult(errors={
        JobType.BACKEND: TargetError(kind="unsupported_framework", message="Unsupported backend framework: Nope"),
    })

    resp = client.post("/codegen/jobs", json={"swagger_spec": SPEC, "backend": {"framework": "Nope"}})

    assert resp.status_code == 400
    assert "Unsupported backend framework: Nope" in resp.json()["detail"]


def test_submit_nothing_submitted_remote_failure_is_502(client, codegen_service):
    codegen_service.submit.return_value = SubmissionResult(errors={
        JobType.BACKEND: TargetError(kind="remote_service", message="Backend generation API responded with status: 500"),
    })

    resp = client.post("/codegen/jobs", json={"swagger_spec": SPEC, "backend": {"framework": "Go Gin"}})

    assert resp.status_code == 502


def test_submit_missing_configuration_is_500(client, codegen_service):
    codegen_service.submit.side_effect = ConfigurationError(
        "CODEGEN_API_KEY",
        "CodeGen API key is not configured. Please add CODEGEN_API_KEY environment variable.",
    )

    resp = client.post("/codegen/jobs", json={"swagger_spec": SPEC, "backend": {"framework": "Go Gin"}})

    assert resp.status_code == 500
    assert "CODEGEN_API_KEY" in resp.json()["detail"]


def test_get_job(client, codegen_service):
    codegen_service.check_status.return_value = CodeGenJob(
        id="run-1", type=JobType.FRONTEND, status=JobStatus.RUNNING, progress=50
    )

    resp = client.get("/codegen/jobs/run-1?type=frontend")

    assert resp.status_code == 200
    assert resp.json()["status"] == "running"
    codegen_service.check_status.assert_awaited_once_with("run-1", JobType.FRONTEND)


def test_get_job_not_found(client, codegen_service):
    codegen_service.check_status.return_value = None

    assert client.get("/codegen/jobs/missing").status_code == 404


def test_get_job_remote_error_is_502(client, codegen_service):
    codegen_service.check_status.side_effect = RemoteServiceError("Job status API", 500, "boom")

    resp = client.get("/codegen/jobs/run-1")

    assert resp.status_code == 502
    assert "boom" in resp.json()["detail"]


def test_unknown_session(client):
    assert client.get("/codegen/sessions/nope").status_code == 404
    assert client.delete("/codegen/sessions/nope").status_code == 404


def test_reset_session(client, codegen_service):
    codegen_service.submit.return_value = _submitted(JobType.BACKEND)
    codegen_service.check_status.return_value = None

    session_id = client.post(
        "/codegen/jobs", json={"swagger_spec": SPEC, "backend": {"framework": "Go Gin"}}
    ).json()["session_id"]

    resp = client.delete(f"/codegen/sessions/{session_id}")

    assert resp.json() == {"session_id": session_id, "reset": True}
    assert client.get(f"/codegen/sessions/{session_id}").status_code == 404
