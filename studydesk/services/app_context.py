"""Process-wide application context.

One ``AppContext`` owns the event bus, periodic scheduler, retry gateway,
repositories, focus timer and reminder scheduler for a user. ``create()``
wires and starts them; ``close()`` cancels every periodic task and pending
write and closes the bus.
"""

import atexit
import time
import weakref
from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy.orm import sessionmaker

from studydesk.config import Settings
from studydesk.database.store import DocumentStore
from studydesk.services.errors import ValidationError
from studydesk.services.event_bus import AlertCenter, EventBus
from studydesk.services.focus_timer import FocusSession, FocusTimer, TimerMode, TimerRunner
from studydesk.services.notifications import Notification, NotificationPermission, NotificationScheduler
from studydesk.services.periodic import PeriodicScheduler, PeriodicTask
from studydesk.services.preferences import Preferences, load_preferences, save_preferences
from studydesk.services.repositories import FocusHistoryRepository, TimetableRepository, TodoRepository
from studydesk.services.retry_gateway import RetryRequest, RetryWriteGateway, WriteResult
from studydesk.services.schedule_status import ScheduleStatus, evaluate_schedule
from studydesk.utils.constants import (
    ENTRIES_COLLECTION,
    FOCUS_HISTORY_COLLECTION,
    RESET_CONFIRM_PHRASE,
    SCHEDULE_REFRESH_SECONDS,
    TODOS_COLLECTION,
)
from studydesk.utils.helpers import now_local
from studydesk.utils.logging_handler import setup_logger

logger = setup_logger(__name__)

RESET_ACCOUNT = "account.reset"


class AppContext:
    def __init__(
        self,
        settings: Settings,
        store: DocumentStore,
        session_factory: sessionmaker,
        user_id: int,
        now: Optional[Callable[[], datetime]] = None,
        monotonic: Optional[Callable[[], float]] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self.settings = settings
        self.store = store
        self.user_id = user_id
        self._session_factory = session_factory
        self._now = now or (lambda: now_local(settings.timezone))

        self.bus = EventBus()
        self.alerts = AlertCenter(self.bus)
        self.scheduler = PeriodicScheduler(clock=monotonic or time.monotonic)
        self.gateway = RetryWriteGateway(
            max_retries=settings.max_retries,
            base_delay_ms=settings.retry_base_delay_ms,
            alerts=self.alerts,
            sleep=sleep,
        )
        self.gateway.register(RESET_ACCOUNT, self._apply_reset)

        self.timetable = TimetableRepository(store, self.gateway, user_id)
        self.todos = TodoRepository(store, self.gateway, user_id)
        self.history = FocusHistoryRepository(store, self.gateway, user_id)

        self.preferences: Preferences = load_preferences(session_factory, user_id)

        self.timer = FocusTimer(on_session=self._save_session, on_cue=self._queue_cue)
        self.runner = TimerRunner(self.timer, self.scheduler)
        self.pending_cues: List[TimerMode] = []

        self.notifier = NotificationScheduler(
            surface=self._show_notification,
            permission=lambda: NotificationPermission(self.preferences.notification_permission),
            request_permission=self._request_permission,
            enabled=lambda: self.preferences.notifications_enabled,
        )
        self.status = ScheduleStatus(current=None, next=None, now=self._now())
        self._tasks: List[PeriodicTask] = []
        self._closed = False

    @classmethod
    def create(cls, settings: Settings, store: DocumentStore, session_factory: sessionmaker,
               user_id: int, **kwargs) -> "AppContext":
        context = cls(settings, store, session_factory, user_id, **kwargs)
        context.start()
        return context

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self):
        self.reload()
        self._tasks.append(self.scheduler.every(
            SCHEDULE_REFRESH_SECONDS, self.refresh_status, name="schedule-status", run_immediately=True,
        ))
        self._tasks.append(self.scheduler.every(
            self.settings.notification_poll_seconds, self.check_notifications, name="notifications",
        ))
        logger.info("App context started for user %s", self.user_id)

    def reload(self):
        self.timetable.load()
        self.todos.load()
        self.history.load()

    def tick(self) -> int:
        """Run every periodic task that is due"""
        return self.scheduler.run_pending()

    def seconds_until_next_tick(self, cap: float) -> float:
        """How long the page may sleep before a periodic task is due, at most cap"""
        delay = self.scheduler.seconds_until_next()
        return cap if delay is None else min(delay, cap)

    def refresh_status(self) -> ScheduleStatus:
        self.status = evaluate_schedule(self._now(), self.timetable.entries)
        return self.status

    def check_notifications(self) -> List[Notification]:
        return self.notifier.check(self._now(), self.timetable.entries)

    def _show_notification(self, notification: Notification):
        self.alerts.info(f"{notification.icon} {notification.title}: {notification.body}")

    def _request_permission(self):
        self.alerts.info("Allow class reminders in Settings to get notified before each class.")

    def _save_session(self, session: FocusSession):
        result = self.history.record(session)
        if result.ok:
            self.alerts.success(f"Focus session saved ({session.duration} min)")

    def _queue_cue(self, mode: TimerMode):
        self.pending_cues.append(mode)

    def drain_cues(self) -> List[TimerMode]:
        cues, self.pending_cues = self.pending_cues, []
        return cues

    def update_preferences(self, **changes) -> Preferences:
        self.preferences = save_preferences(self._session_factory, self.user_id, **changes)
        if "notifications_enabled" in changes or "notification_permission" in changes:
            self.notifier.reset()
        return self.preferences

    def retry_last(self) -> Optional[WriteResult]:
        return self.gateway.retry_last()

    def reset_account(self, confirm_phrase: str) -> WriteResult:
        """Delete every entry, todo and focus session of the user"""
        if confirm_phrase != RESET_CONFIRM_PHRASE:
            raise ValidationError({"confirm_phrase": "Incorrect confirmation phrase"})
        return self.gateway.execute(RetryRequest(RESET_ACCOUNT, {"userId": self.user_id}, label="Reset account"))

    def _apply_reset(self, payload) -> int:
        removed = 0
        for collection in (ENTRIES_COLLECTION, TODOS_COLLECTION, FOCUS_HISTORY_COLLECTION):
            removed += self.store.delete_where(collection, userId=payload["userId"])
        self.runner.reset()
        self.reload()
        self.refresh_status()
        logger.info("Reset account %s: %d documents removed", payload["userId"], removed)
        return removed

    def close(self):
        if self._closed:
            return
        for task in self._tasks:
            task.cancel()
        self.runner.reset()
        self.scheduler.shutdown()
        self.gateway.cancel_all()
        self.alerts.close()
        self.bus.close()
        self._closed = True
        logger.info("App context closed for user %s", self.user_id)


class ContextRegistry:
    """Weakly tracks live contexts and closes them from one interpreter-exit hook"""

    def __init__(self, register_exit: Callable[[Callable[[], None]], object] = atexit.register):
        self._contexts: "weakref.WeakSet[AppContext]" = weakref.WeakSet()
        self._register_exit = register_exit
        self._hooked = False

    def __len__(self) -> int:
        return len(self._contexts)

    @property
    def live(self) -> List[AppContext]:
        return [c for c in self._contexts if not c.closed]

    def track(self, context: AppContext) -> AppContext:
        if not self._hooked:
            self._register_exit(self.close_all)
            self._hooked = True
        self._contexts.add(context)
        return context

    def close_all(self):
        for context in list(self._contexts):
            context.close()


live_contexts = ContextRegistry()
