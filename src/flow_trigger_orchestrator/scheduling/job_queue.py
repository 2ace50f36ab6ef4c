"""Recurring job registrations keyed by flow version id.

Contract shared by every implementation:

- ``add`` is an upsert: at most one live job exists per key, and adding an
  existing key replaces its data and cron expression.
- ``remove`` of an absent key is a no-op, never an error.

The file-backed queue is local-first persistence for a single process. A
deployment with several workers should put a real scheduler behind the same
protocol.
"""

from __future__ import annotations

import asyncio
import json
import logging
import threading
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from flow_trigger_orchestrator.errors import QueueOperationFailure
from flow_trigger_orchestrator.models import FlowVersionId, RepeatableJobData, ScheduledJob

logger = logging.getLogger(__name__)


class ScheduledJobQueue(Protocol):
    async def add(
        self, *, key: FlowVersionId, data: RepeatableJobData, cron_expression: str
    ) -> ScheduledJob: ...

    async def remove(self, *, key: FlowVersionId) -> None: ...

    async def get(self, key: FlowVersionId) -> ScheduledJob | None: ...

    async def list(self) -> list[ScheduledJob]: ...


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


def _upsert(
    existing: ScheduledJob | None,
    *,
    key: FlowVersionId,
    data: RepeatableJobData,
    cron_expression: str,
) -> ScheduledJob:
    now = _utc_now()
    return ScheduledJob(
        key=key,
        data=data,
        cron_expression=cron_expression,
        created_at=existing.created_at if existing is not None else now,
        updated_at=now,
    )


class InMemoryScheduledJobQueue:
    def __init__(self) -> None:
        self._jobs: dict[FlowVersionId, ScheduledJob] = {}
        self._lock = asyncio.Lock()

    async def add(
        self, *, key: FlowVersionId, data: RepeatableJobData, cron_expression: str
    ) -> ScheduledJob:
        async with self._lock:
            job = _upsert(self._jobs.get(key), key=key, data=data, cron_expression=cron_expression)
            self._jobs[key] = job
            return job

    async def remove(self, *, key: FlowVersionId) -> None:
        async with self._lock:
            self._jobs.pop(key, None)

    async def get(self, key: FlowVersionId) -> ScheduledJob | None:
        async with self._lock:
            return self._jobs.get(key)

    async def list(self) -> list[ScheduledJob]:
        async with self._lock:
            return list(self._jobs.values())


@dataclass
class FileScheduledJobQueue:
    """Persist recurring jobs to a JSON file."""

    path: Path

    def __post_init__(self) -> None:
        self._lock = threading.Lock()

    def _load_unlocked(self) -> dict[FlowVersionId, ScheduledJob]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            if not isinstance(raw, list):
                raise QueueOperationFailure(
                    f"Job store is not a JSON list: {self.path}", path=str(self.path)
                )
            jobs = [ScheduledJob.model_validate(item) for item in raw]
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            raise QueueOperationFailure(
                f"Failed to read job store {self.path}: {e}", path=str(self.path)
            ) from e
        return {job.key: job for job in jobs}

    def _save_unlocked(self, jobs: dict[FlowVersionId, ScheduledJob]) -> None:
        payload = [job.model_dump(mode="json") for job in jobs.values()]
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                json.dumps(payload, indent=2, ensure_ascii=False) + "\n", encoding="utf-8"
            )
        except OSError as e:
            raise QueueOperationFailure(
                f"Failed to write job store {self.path}: {e}", path=str(self.path)
            ) from e

    def _add_sync(
        self, key: FlowVersionId, data: RepeatableJobData, cron_expression: str
    ) -> ScheduledJob:
        with self._lock:
            jobs = self._load_unlocked()
            job = _upsert(jobs.get(key), key=key, data=data, cron_expression=cron_expression)
            jobs[key] = job
            self._save_unlocked(jobs)
        return job

    def _remove_sync(self, key: FlowVersionId) -> bool:
        with self._lock:
            jobs = self._load_unlocked()
            if jobs.pop(key, None) is None:
                return False
            self._save_unlocked(jobs)
        return True

    def _list_sync(self) -> dict[FlowVersionId, ScheduledJob]:
        with self._lock:
            return self._load_unlocked()

    # File I/O and the thread lock stay off the event loop.

    async def add(
        self, *, key: FlowVersionId, data: RepeatableJobData, cron_expression: str
    ) -> ScheduledJob:
        job = await asyncio.to_thread(self._add_sync, key, data, cron_expression)
        logger.debug("Persisted recurring job", extra={"job_key": key})
        return job

    async def remove(self, *, key: FlowVersionId) -> None:
        if await asyncio.to_thread(self._remove_sync, key):
            logger.debug("Removed recurring job", extra={"job_key": key})

    async def get(self, key: FlowVersionId) -> ScheduledJob | None:
        return (await asyncio.to_thread(self._list_sync)).get(key)

    async def list(self) -> list[ScheduledJob]:
        return list((await asyncio.to_thread(self._list_sync)).values())
