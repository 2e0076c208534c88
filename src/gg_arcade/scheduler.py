"""Single-threaded cooperative scheduler for tick timers and frame tasks."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

import pygame

logger = logging.getLogger(__name__)


@dataclass(slots=True, eq=False)
class TimerHandle:
    """Cancellation handle for a periodic timer."""

    callback: Callable[[], None]
    interval_ms: int
    due_ms: int
    active: bool = True


@dataclass(slots=True, eq=False)
class FrameTask:
    """Cancellation handle for a per-frame callback."""

    callback: Callable[[float], None]
    active: bool = True


class Scheduler:
    """Drives periodic timers and per-frame tasks from one loop.

    Nothing here blocks or spawns threads: the host loop calls ``run_due``
    and ``run_frame`` once per frame, and every callback runs on that thread.
    """

    def __init__(self, clock: Callable[[], int] | None = None) -> None:
        self._clock = clock or pygame.time.get_ticks
        self._timers: list[TimerHandle] = []
        self._frame_tasks: list[FrameTask] = []

    def now(self) -> int:
        return int(self._clock())

    # --- Timers --------------------------------------------------------

    def set_interval(
        self, callback: Callable[[], None], interval_ms: int
    ) -> TimerHandle:
        """Fire ``callback`` every ``interval_ms``; first fire one interval from now."""
        interval = int(interval_ms)
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval_ms!r}")
        handle = TimerHandle(callback=callback, interval_ms=interval, due_ms=self.now() + interval)
        self._timers.append(handle)
        return handle

    def clear_interval(self, handle: TimerHandle | None) -> None:
        if handle is None:
            return
        handle.active = False
        if handle in self._timers:
            self._timers.remove(handle)

    @property
    def live_intervals(self) -> int:
        return len(self._timers)

    def run_due(self) -> int:
        """Fire every due timer, catching up one call per elapsed interval."""
        now = self.now()
        fired = 0
        # Timers created by a callback wait for the next call.
        for handle in list(self._timers):
            while handle.active and handle.due_ms <= now:
                handle.due_ms += handle.interval_ms
                handle.callback()
                fired += 1
        return fired

    # --- Frame tasks ---------------------------------------------------

    def add_frame_task(self, callback: Callable[[float], None]) -> FrameTask:
        task = FrameTask(callback=callback)
        self._frame_tasks.append(task)
        return task

    def cancel_frame_task(self, task: FrameTask | None) -> None:
        if task is None:
            return
        task.active = False
        if task in self._frame_tasks:
            self._frame_tasks.remove(task)

    @property
    def live_frame_tasks(self) -> int:
        return len(self._frame_tasks)

    def run_frame(self, dt: float) -> None:
        for task in list(self._frame_tasks):
            if task.active:
                task.callback(dt)

    def scope(self) -> SchedulerScope:
        return SchedulerScope(self)

    def clear(self) -> None:
        """Cancel everything; used when the host shuts down."""
        for handle in self._timers:
            handle.active = False
        for task in self._frame_tasks:
            task.active = False
        if self._timers or self._frame_tasks:
            logger.debug(
                "Cleared %d timers and %d frame tasks",
                len(self._timers),
                len(self._frame_tasks),
            )
        self._timers.clear()
        self._frame_tasks.clear()


class SchedulerScope:
    """A view of a :class:`Scheduler` that can cancel everything it scheduled.

    Each hosted frame gets its own scope, so closing the frame stops its
    timers and frame tasks even if the game never got to clean up.
    """

    def __init__(self, parent: Scheduler) -> None:
        self.parent = parent
        self._timers: list[TimerHandle] = []
        self._frame_tasks: list[FrameTask] = []
        self.closed = False

    def now(self) -> int:
        return self.parent.now()

    def set_interval(
        self, callback: Callable[[], None], interval_ms: int
    ) -> TimerHandle:
        if self.closed:
            raise RuntimeError("scheduler scope is closed")
        handle = self.parent.set_interval(callback, interval_ms)
        # Drop handles the parent already cancelled, e.g. through clear().
        self._timers = [h for h in self._timers if h.active]
        self._timers.append(handle)
        return handle

    def clear_interval(self, handle: TimerHandle | None) -> None:
        self.parent.clear_interval(handle)
        if handle in self._timers:
            self._timers.remove(handle)

    @property
    def live_intervals(self) -> int:
        return sum(1 for handle in self._timers if handle.active)

    def add_frame_task(self, callback: Callable[[float], None]) -> FrameTask:
        if self.closed:
            raise RuntimeError("scheduler scope is closed")
        task = self.parent.add_frame_task(callback)
        self._frame_tasks = [t for t in self._frame_tasks if t.active]
        self._frame_tasks.append(task)
        return task

    def cancel_frame_task(self, task: FrameTask | None) -> None:
        self.parent.cancel_frame_task(task)
        if task in self._frame_tasks:
            self._frame_tasks.remove(task)

    @property
    def live_frame_tasks(self) -> int:
        return sum(1 for task in self._frame_tasks if task.active)

    def close(self) -> None:
        for handle in list(self._timers):
            self.parent.clear_interval(handle)
        for task in list(self._frame_tasks):
            self.parent.cancel_frame_task(task)
        self._timers.clear()
        self._frame_tasks.clear()
        self.closed = True
