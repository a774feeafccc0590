"""Presentation-gated driving of the round engine."""

from presentation.scheduler import AsyncioTaskScheduler, ScheduledTask, Scheduler, TaskScheduler
from presentation.coordinator import PresentationCoordinator

__all__ = [
    "AsyncioTaskScheduler",
    "ScheduledTask",
    "Scheduler",
    "TaskScheduler",
    "PresentationCoordinator",
]
