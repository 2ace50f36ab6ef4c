"""Recurring job queue adapters."""

from flow_trigger_orchestrator.scheduling.job_queue import (
    FileScheduledJobQueue,
    InMemoryScheduledJobQueue,
    ScheduledJobQueue,
)

__all__ = ["FileScheduledJobQueue", "InMemoryScheduledJobQueue", "ScheduledJobQueue"]
