"""Pomodoro countdown timer.

The timer is a small state machine (idle, running, paused, completed)
advanced by one ``tick()`` per second. Reaching zero is handled once, on
the tick that crosses it: the cue plays, a focus session is recorded for
focus-type modes and the timer goes back to idle at full duration.
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

from studydesk.services.periodic import PeriodicScheduler, PeriodicTask
from studydesk.utils.constants import (
    CUSTOM_DEFAULT_MINUTES,
    CUSTOM_MAX_MINUTES,
    CUSTOM_MIN_MINUTES,
    POMODORO_LONG_BREAK_MINUTES,
    POMODORO_SHORT_BREAK_MINUTES,
    POMODORO_WORK_MINUTES,
    TIMER_TICK_SECONDS,
)
from studydesk.utils.helpers import format_clock
from studydesk.utils.logging_handler import setup_logger

logger = setup_logger(__name__)


class TimerMode(str, Enum):
    FOCUS = "focus"
    SHORT_BREAK = "short_break"
    LONG_BREAK = "long_break"
    CUSTOM = "custom"


@dataclass(frozen=True)
class ModeSpec:
    label: str
    minutes: Optional[int]  # None: uses the custom duration
    is_break: bool


MODES: Dict[TimerMode, ModeSpec] = {
    TimerMode.FOCUS: ModeSpec("Focus", POMODORO_WORK_MINUTES, False),
    TimerMode.SHORT_BREAK: ModeSpec("Short Break", POMODORO_SHORT_BREAK_MINUTES, True),
    TimerMode.LONG_BREAK: ModeSpec("Long Break", POMODORO_LONG_BREAK_MINUTES, True),
    TimerMode.CUSTOM: ModeSpec("Custom", None, False),
}


class TimerStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"


class TimerTransitionError(RuntimeError):
    pass


@dataclass(frozen=True)
class FocusSession:
    """A completed focus countdown"""

    start_time: int  # epoch ms
    duration: int  # minutes
    completed: bool = True
    id: Optional[str] = None
    user_id: Optional[int] = None

    def to_document(self) -> Dict[str, Any]:
        return {
            "startTime": self.start_time,
            "duration": self.duration,
            "completed": self.completed,
            "userId": self.user_id,
        }

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "FocusSession":
        return cls(
            id=document.get("id"),
            start_time=int(document["startTime"]),
            duration=int(document["duration"]),
            completed=bool(document.get("completed", True)),
            user_id=document.get("userId"),
        )


@dataclass(frozen=True)
class TimerState:
    mode: TimerMode
    time_left: int
    total_seconds: int
    status: TimerStatus
    custom_minutes: int

    @property
    def is_running(self) -> bool:
        return self.status == TimerStatus.RUNNING


def _epoch_ms() -> int:
    return int(time.time() * 1000)


class FocusTimer:
    def __init__(
        self,
        mode: TimerMode = TimerMode.FOCUS,
        custom_minutes: int = CUSTOM_DEFAULT_MINUTES,
        on_session: Optional[Callable[[FocusSession], None]] = None,
        on_cue: Optional[Callable[[TimerMode], None]] = None,
        clock_ms: Callable[[], int] = _epoch_ms,
    ):
        self.mode = TimerMode(mode)
        self.custom_minutes = _check_minutes(custom_minutes)
        self._on_session = on_session
        self._on_cue = on_cue
        self._clock_ms = clock_ms
        self.status = TimerStatus.IDLE
        self._run_seconds: Optional[int] = None  # length of the run in progress, fixed at start
        self.time_left = self.total_seconds
        self.completed_runs = 0
        self.last_session: Optional[FocusSession] = None

    @property
    def spec(self) -> ModeSpec:
        return MODES[self.mode]

    @property
    def total_seconds(self) -> int:
        if self._run_seconds is not None:
            return self._run_seconds
        minutes = self.spec.minutes if self.spec.minutes is not None else self.custom_minutes
        return minutes * 60

    @property
    def is_running(self) -> bool:
        return self.status == TimerStatus.RUNNING

    @property
    def has_progress(self) -> bool:
        return 0 < self.time_left < self.total_seconds

    @property
    def needs_confirmation(self) -> bool:
        """Switching mode now would throw away progress"""
        return self.is_running or self.has_progress

    def snapshot(self) -> TimerState:
        return TimerState(
            mode=self.mode,
            time_left=self.time_left,
            total_seconds=self.total_seconds,
            status=self.status,
            custom_minutes=self.custom_minutes,
        )

    def start(self):
        if self.status not in (TimerStatus.IDLE, TimerStatus.PAUSED):
            raise TimerTransitionError(f"Cannot start a {self.status.value} timer")
        if self.time_left <= 0:
            raise TimerTransitionError("No time left to count down")
        if self._run_seconds is None:
            self._run_seconds = self.total_seconds
        self.status = TimerStatus.RUNNING
        logger.debug("Timer started: %s %s left", self.mode.value, format_clock(self.time_left))

    def pause(self):
        if self.status != TimerStatus.RUNNING:
            raise TimerTransitionError(f"Cannot pause a {self.status.value} timer")
        self.status = TimerStatus.PAUSED

    def toggle(self):
        if self.is_running:
            self.pause()
        else:
            self.start()

    def reset(self):
        self.status = TimerStatus.IDLE
        self._run_seconds = None
        self.time_left = self.total_seconds

    def tick(self) -> TimerStatus:
        """Advance one second. Returns COMPLETED only on the zero-crossing tick."""
        if self.status != TimerStatus.RUNNING:
            return self.status
        self.time_left = max(0, self.time_left - 1)
        if self.time_left > 0:
            return self.status
        self.status = TimerStatus.COMPLETED
        self._complete()
        self.reset()
        return TimerStatus.COMPLETED

    def _complete(self):
        self.completed_runs += 1
        logger.info("Timer completed: %s (%d min)", self.mode.value, self.total_seconds // 60)
        if self._on_cue is not None:
            self._on_cue(self.mode)
        if self.spec.is_break:
            return
        session = FocusSession(
            start_time=self._clock_ms() - self.total_seconds * 1000,
            duration=self.total_seconds // 60,
        )
        self.last_session = session
        if self._on_session is not None:
            self._on_session(session)

    def change_mode(self, new_mode: TimerMode, confirm: Optional[Callable[[], bool]] = None) -> bool:
        """Switch modes. Discarding progress needs confirm() to return True."""
        new_mode = TimerMode(new_mode)
        if self.needs_confirmation and (confirm is None or not confirm()):
            return False
        self.mode = new_mode
        self.reset()
        return True

    def set_custom_duration(self, minutes: int):
        """Applies to the next run; a run already under way keeps its length"""
        self.custom_minutes = _check_minutes(minutes)
        if self.mode == TimerMode.CUSTOM and not self.is_running:
            self.reset()

    def progress_percent(self) -> float:
        total = self.total_seconds
        if total <= 0:
            return 0.0
        return max(0.0, min(100.0, (total - self.time_left) / total * 100))

    def display(self) -> str:
        return format_clock(self.time_left)


def _check_minutes(minutes: int) -> int:
    try:
        value = int(minutes)
    except (TypeError, ValueError):
        raise ValueError(f"Custom duration must be a whole number of minutes, got {minutes!r}") from None
    if not CUSTOM_MIN_MINUTES <= value <= CUSTOM_MAX_MINUTES:
        raise ValueError(f"Custom duration must be between {CUSTOM_MIN_MINUTES} and {CUSTOM_MAX_MINUTES} minutes")
    return value


class TimerRunner:
    """Owns the timer's one-second tick task in the periodic scheduler"""

    def __init__(self, timer: FocusTimer, scheduler: PeriodicScheduler):
        self.timer = timer
        self._scheduler = scheduler
        self._task: Optional[PeriodicTask] = None

    @property
    def ticking(self) -> bool:
        return self._task is not None and not self._task.cancelled

    def _cancel_task(self):
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def _tick(self):
        if self.timer.tick() == TimerStatus.COMPLETED:
            self._cancel_task()

    def start(self):
        self._cancel_task()
        self.timer.start()
        self._task = self._scheduler.every(TIMER_TICK_SECONDS, self._tick, name="timer-tick", catch_up=True)

    def pause(self):
        self._cancel_task()
        self.timer.pause()

    def toggle(self):
        if self.timer.is_running:
            self.pause()
        else:
            self.start()

    def reset(self):
        self._cancel_task()
        self.timer.reset()

    def change_mode(self, new_mode: TimerMode, confirm: Optional[Callable[[], bool]] = None) -> bool:
        changed = self.timer.change_mode(new_mode, confirm)
        if changed:
            self._cancel_task()
        return changed

    def set_custom_duration(self, minutes: int):
        self.timer.set_custom_duration(minutes)
