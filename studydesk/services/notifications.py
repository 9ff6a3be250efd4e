"""Class reminders fired shortly before an event starts"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Callable, Iterable, List, Optional, Set, Tuple

from studydesk.services.schedule_status import (
    RecurringEvent,
    events_for_day,
    minutes_until,
    weekday_name,
)
from studydesk.utils.constants import (
    NOTIFICATION_ICON,
    NOTIFICATION_LEAD_MAX_MINUTES,
    NOTIFICATION_LEAD_MIN_MINUTES,
)
from studydesk.utils.logging_handler import setup_logger

logger = setup_logger(__name__)


class NotificationPermission(str, Enum):
    GRANTED = "granted"
    DENIED = "denied"
    DEFAULT = "default"


@dataclass(frozen=True)
class Notification:
    event_id: Optional[str]
    title: str
    body: str
    icon: str = NOTIFICATION_ICON


def build_notification(event: RecurringEvent) -> Notification:
    return Notification(
        event_id=event.id,
        title=f"Upcoming: {event.subject}",
        body=f"Starts at {event.start_time} in {event.location or 'Unknown location'}",
    )


class NotificationScheduler:
    """Fires at most one reminder per (event, date) inside the lead window.

    ``surface`` shows the notification to the user. ``permission`` reports
    the host's current grant; ``request_permission`` is called once while it
    is still ``default``.
    """

    def __init__(
        self,
        surface: Callable[[Notification], None],
        permission: Callable[[], NotificationPermission],
        request_permission: Optional[Callable[[], None]] = None,
        enabled: Callable[[], bool] = lambda: True,
        lead_window: Tuple[int, int] = (NOTIFICATION_LEAD_MIN_MINUTES, NOTIFICATION_LEAD_MAX_MINUTES),
    ):
        self._surface = surface
        self._permission = permission
        self._request_permission = request_permission
        self._enabled = enabled
        self.lead_window = lead_window
        self._fired: Set[Tuple[Optional[str], date]] = set()
        self._permission_requested = False

    def already_notified(self, event: RecurringEvent, day: date) -> bool:
        return (event.id, day) in self._fired

    def _permission_granted(self) -> bool:
        permission = self._permission()
        if permission == NotificationPermission.DEFAULT and not self._permission_requested:
            self._permission_requested = True
            if self._request_permission is not None:
                self._request_permission()
                permission = self._permission()
        return permission == NotificationPermission.GRANTED

    def check(self, now: datetime, events: Iterable[RecurringEvent]) -> List[Notification]:
        """One poll: dispatch reminders for events starting within the lead window"""
        if not self._enabled():
            return []
        if not self._permission_granted():
            return []

        today = now.date()
        self._fired = {key for key in self._fired if key[1] == today}

        low, high = self.lead_window
        sent = []
        for event in events_for_day(events, weekday_name(now)):
            diff = minutes_until(event, now)
            if not low <= diff <= high:
                continue
            key = (event.id, today)
            if key in self._fired:
                continue
            notification = build_notification(event)
            self._surface(notification)
            self._fired.add(key)
            sent.append(notification)
            logger.info("Reminder sent for %s (%s) starting in %d min", event.subject, event.id, diff)
        return sent

    def reset(self):
        self._fired.clear()
        self._permission_requested = False
