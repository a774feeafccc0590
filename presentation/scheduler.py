"""Delayed task scheduling for the presentation coordinator."""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, List, Optional


@dataclass(eq=False)
class ScheduledTask:
    """A callback that runs once after a delay, unless cancelled first."""

    callback: Callable[[], None]
    delay: float  # Seconds before the callback runs

    elapsed: float = field(default=0.0, init=False)
    cancelled: bool = field(default=False, init=False)
    fired: bool = field(default=False, init=False)
    timer: Optional[asyncio.TimerHandle] = field(default=None, init=False, repr=False)
    on_cancel: Optional[Callable[["ScheduledTask"], None]] = field(default=None, init=False, repr=False)

    @property
    def done(self) -> bool:
        return self.cancelled or self.fired

    def cancel(self) -> None:
        """Prevent the callback from running."""
        if self.done:
            return
        self.cancelled = True
        if self.timer is not None:
            self.timer.cancel()
        if self.on_cancel is not None:
            self.on_cancel(self)

    def run(self) -> None:
        """Run the callback now, at most once."""
        if self.done:
            return
        self.fired = True
        self.callback()

    def update(self, dt: float) -> bool:
        """Advance the task by delta time.

        Args:
            dt: Delta time in seconds

        Returns:
            True if still waiting, False once fired or cancelled
        """
        if self.done:
            return False

        self.elapsed += dt
        if self.elapsed < self.delay:
            return True

        self.run()
        return False


class Scheduler(ABC):
    """Something that can run callbacks later."""

    @abstractmethod
    def schedule(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        """Run ``callback`` after ``delay`` seconds."""
        ...

    @abstractmethod
    def cancel_all(self) -> None:
        """Cancel every task that has not run yet."""
        ...

    @property
    @abstractmethod
    def pending(self) -> int:
        """Number of tasks waiting to run."""
        ...


class TaskScheduler(Scheduler):
    """Cooperative scheduler driven by the host's frame loop.

    Call ``update(dt)`` once per frame. Tasks scheduled from inside a
    callback start counting on the next update.
    """

    def __init__(self) -> None:
        self.tasks: List[ScheduledTask] = []

    def schedule(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        task = ScheduledTask(callback=callback, delay=delay)
        self.tasks.append(task)
        return task

    def update(self, dt: float) -> None:
        """Update all tasks.

        Args:
            dt: Delta time in seconds
        """
        due, self.tasks = self.tasks, []
        waiting: List[ScheduledTask] = []
        index = 0
        try:
            while index < len(due):
                task = due[index]
                index += 1
                if task.update(dt):
                    waiting.append(task)
        finally:
            # A raising callback leaves the rest of the batch for the next update
            self.tasks = waiting + due[index:] + self.tasks

    def cancel_all(self) -> None:
        for task in self.tasks:
            task.cancel()
        self.tasks.clear()

    @property
    def pending(self) -> int:
        return sum(1 for task in self.tasks if not task.done)


class AsyncioTaskScheduler(Scheduler):
    """Scheduler backed by an asyncio event loop's timers."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop
        self._tasks: set[ScheduledTask] = set()

    def schedule(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        loop = self._loop or asyncio.get_running_loop()
        task = ScheduledTask(callback=callback, delay=delay)
        task.timer = loop.call_later(delay, self._fire, task)
        task.on_cancel = self._tasks.discard
        self._tasks.add(task)
        return task

    def _fire(self, task: ScheduledTask) -> None:
        self._tasks.discard(task)
        task.run()

    def cancel_all(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()

    @property
    def pending(self) -> int:
        return sum(1 for task in self._tasks if not task.done)
