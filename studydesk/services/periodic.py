"""Cooperative periodic scheduler.

Nothing here runs on its own thread: the page calls ``run_pending()`` on
every rerun and each due task's callback runs synchronously.
"""

import time
from typing import Callable, List, Optional

from studydesk.utils.logging_handler import setup_logger

logger = setup_logger(__name__)


class PeriodicTask:
    """Handle for one periodic callback"""

    def __init__(self, name: str, interval: float, callback: Callable[[], None], next_run: float, catch_up: bool):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.name = name
        self.interval = interval
        self.callback = callback
        self.next_run = next_run
        self.catch_up = catch_up
        self.runs = 0
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self):
        self._cancelled = True

    def __repr__(self):
        state = "cancelled" if self._cancelled else f"next={self.next_run:.3f}"
        return f"<PeriodicTask {self.name} every {self.interval}s {state}>"


class PeriodicScheduler:
    """Runs registered tasks whose time has come.

    A catch-up task runs once for every interval that elapsed since its last
    run (the timer must not lose seconds between reruns); other tasks run at
    most once per ``run_pending`` call.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self._clock = clock or time.monotonic
        self._tasks: List[PeriodicTask] = []
        self._shut_down = False

    @property
    def tasks(self) -> List[PeriodicTask]:
        return [t for t in self._tasks if not t.cancelled]

    def every(
        self,
        interval: float,
        callback: Callable[[], None],
        *,
        name: str = "",
        catch_up: bool = False,
        run_immediately: bool = False,
    ) -> PeriodicTask:
        if self._shut_down:
            raise RuntimeError("Scheduler has been shut down")
        now = self._clock()
        first = now if run_immediately else now + interval
        task = PeriodicTask(name or getattr(callback, "__name__", "task"), interval, callback, first, catch_up)
        self._tasks.append(task)
        logger.debug("Scheduled %r", task)
        return task

    def run_pending(self) -> int:
        """Run every due task; returns the number of callback invocations"""
        now = self._clock()
        runs = 0
        for task in list(self._tasks):
            while not task.cancelled and task.next_run <= now:
                task.callback()
                task.runs += 1
                runs += 1
                if task.catch_up:
                    task.next_run += task.interval
                else:
                    task.next_run = now + task.interval
        self._tasks = [t for t in self._tasks if not t.cancelled]
        return runs

    def seconds_until_next(self) -> Optional[float]:
        pending = [t.next_run for t in self._tasks if not t.cancelled]
        if not pending:
            return None
        return max(0.0, min(pending) - self._clock())

    def shutdown(self):
        for task in self._tasks:
            task.cancel()
        self._tasks = []
        self._shut_down = True
