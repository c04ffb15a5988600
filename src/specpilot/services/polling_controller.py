# src/specpilot/services/polling_controller.py

"""
Asyncio driver for job status polling, plus the in-memory session registry.

The controller is thin: it fetches statuses and hands them to
``job_tracker.advance``, stopping itself once every tracked job is terminal.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Dict, List, Mapping, Optional

from opentelemetry import trace

from specpilot.exceptions import ConfigurationError, RemoteServiceError
from specpilot.models.codegen_job import CodeGenJob, JobType, utcnow
from specpilot.services.job_tracker import advance, all_terminal

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

StatusChecker = Callable[[str, JobType], Awaitable[Optional[CodeGenJob]]]
Sleeper = Callable[[float], Awaitable[None]]

DEFAULT_SESSION_TTL_SECONDS = 3600.0


class PollingController:
    """
    Polls every tracked job once immediately, then every ``interval`` seconds.

    Each round checks all tracked jobs concurrently; the loop ends after the
    round in which all of them became terminal.
    """

    def __init__(
        self,
        jobs: Mapping[JobType, CodeGenJob],
        check_status: StatusChecker,
        interval: float,
        sleep: Sleeper = asyncio.sleep,
    ):
        self.jobs: Dict[JobType, CodeGenJob] = dict(jobs)
        self.interval = interval
        self.rounds = 0
        self.done = all_terminal(self.jobs)
        self.last_error: Optional[str] = None
        self._check_status = check_status
        self._sleep = sleep
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> "PollingController":
        """Schedule the polling task on the running loop. No-op if nothing to poll."""
        if self._task is None and self.jobs and not self.done:
            self._task = asyncio.create_task(self._run())
        return self

    async def _run(self) -> None:
        try:
            while True:
                await self.poll_once()
                if self.done:
                    logger.info(
                        "Polling finished after %d rounds: %s",
                        self.rounds,
                        {t.value: j.status.value for t, j in self.jobs.items()},
                    )
                    return
                await self._sleep(self.interval)
        except asyncio.CancelledError:
            logger.info("Polling cancelled after %d rounds", self.rounds)
            raise
        except Exception as e:
            logger.exception("Polling stopped after %d rounds", self.rounds)
            self.last_error = str(e) or type(e).__name__

    async def poll_once(self) -> bool:
        """Run one round and return whether polling is done."""
        with tracer.start_as_current_span("polling.round") as span:
            tracked = list(self.jobs.items())
            results = await asyncio.gather(
                *(self._check(job_type, job) for job_type, job in tracked)
            )
            updates = {job_type: result for (job_type, _), result in zip(tracked, results)}

            self.jobs, self.done = advance(self.jobs, updates)
            self.rounds += 1

            span.set_attribute("polling.round", self.rounds)
            span.set_attribute("polling.done", self.done)
            return self.done

    async def _check(self, job_type: JobType, job: CodeGenJob) -> Optional[CodeGenJob]:
        try:
            return await self._check_status(job.id, job_type)
        except (RemoteServiceError, ConfigurationError) as e:
            logger.warning("Status check for %s job %s failed: %s", job_type.value, job.id, e)
            self.last_error = str(e)
            return None
        except Exception as e:
            # Malformed responses must not end polling early
            logger.exception("Status check for %s job %s raised", job_type.value, job.id)
            self.last_error = str(e) or type(e).__name__
            return None

    def stop(self) -> None:
        """Cancel the polling task if it is still live."""
        if self.running:
            self._task.cancel()

    async def wait(self) -> None:
        if self._task is None:
            return
        with contextlib.suppress(asyncio.CancelledError):
            await self._task


@dataclass
class TrackingSession:
    id: str
    controller: PollingController
    created_at: datetime = field(default_factory=utcnow)

    @property
    def jobs(self) -> Dict[JobType, CodeGenJob]:
        return self.controller.jobs

    def snapshot(self) -> dict:
        return {
            "session_id": self.id,
            "created_at": self.created_at,
            "jobs": {job_type.value: job for job_type, job in self.jobs.items()},
            "rounds": self.controller.rounds,
            "done": self.controller.done,
            "polling": self.controller.running,
            "last_error": self.controller.last_error,
        }


class PollingRegistry:
    """
    One polling controller per tracking session, held in memory.

    Finished sessions older than ``ttl_seconds`` are pruned whenever a new
    session is created.
    """

    def __init__(
        self,
        interval: float,
        sleep: Sleeper = asyncio.sleep,
        ttl_seconds: float = DEFAULT_SESSION_TTL_SECONDS,
    ):
        self.interval = interval
        self.ttl = timedelta(seconds=ttl_seconds)
        self._sleep = sleep
        self._sessions: Dict[str, TrackingSession] = {}

    def create(
        self,
        jobs: Mapping[JobType, CodeGenJob],
        check_status: StatusChecker,
    ) -> TrackingSession:
        self.prune()
        controller = PollingController(jobs, check_status, self.interval, sleep=self._sleep)
        session = TrackingSession(id=uuid.uuid4().hex, controller=controller)
        self._sessions[session.id] = session
        controller.start()
        logger.info(
            "Tracking session %s started for %s",
            session.id,
            {t.value: j.id for t, j in jobs.items()},
        )
        return session

    def prune(self, now: Optional[datetime] = None) -> int:
        """Forget finished sessions past their TTL. Returns how many were dropped."""
        cutoff = (now or utcnow()) - self.ttl
        expired = [
            session_id
            for session_id, session in self._sessions.items()
            if not session.controller.running and session.created_at < cutoff
        ]
        for session_id in expired:
            del self._sessions[session_id]
        if expired:
            logger.info("Pruned %d finished tracking sessions", len(expired))
        return len(expired)

    def get(self, session_id: str) -> Optional[TrackingSession]:
        return self._sessions.get(session_id)

    def sessions(self) -> List[TrackingSession]:
        return list(self._sessions.values())

    def reset(self, session_id: str) -> bool:
        """Cancel polling and drop the session's jobs. Returns False if unknown."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.controller.stop()
        logger.info("Tracking session %s reset", session_id)
        return True

    async def shutdown(self) -> None:
        sessions = list(self._sessions.values())
        self._sessions.clear()
        for session in sessions:
            session.controller.stop()
        for session in sessions:
            await session.controller.wait()
        if sessions:
            logger.info("Cancelled %d tracking sessions", len(sessions))
