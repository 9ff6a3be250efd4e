"""Recurring class entries and current / next class resolution"""

from dataclasses import dataclass, field, replace
from datetime import datetime, time
from typing import Any, Dict, FrozenSet, Iterable, List, Optional

from studydesk.services.errors import ValidationError
from studydesk.utils.constants import DEFAULT_ENTRY_COLOR, WEEKDAYS
from studydesk.utils.helpers import minutes_between, parse_hhmm


def weekday_name(moment: datetime) -> str:
    """Weekday of moment as one of WEEKDAYS (Sunday..Saturday)"""
    # date.weekday(): Monday=0 .. Sunday=6
    return WEEKDAYS[(moment.weekday() + 1) % 7]


@dataclass(frozen=True)
class RecurringEvent:
    """A class that repeats every week on the given days"""

    id: Optional[str]
    days: FrozenSet[str]
    start_time: str  # HH:MM
    end_time: str  # HH:MM
    subject: str
    location: Optional[str] = None
    color: Optional[str] = DEFAULT_ENTRY_COLOR
    user_id: Optional[int] = field(default=None, compare=False)

    @property
    def start(self) -> time:
        return parse_hhmm(self.start_time)

    @property
    def end(self) -> time:
        return parse_hhmm(self.end_time)

    @property
    def duration_minutes(self) -> int:
        return max(0, minutes_between(self.start, self.end))

    def occurs_on(self, day: str) -> bool:
        return day in self.days

    def is_active_at(self, moment: datetime) -> bool:
        """Today is one of the event's days and start <= now < end"""
        if not self.occurs_on(weekday_name(moment)):
            return False
        now = moment.time().replace(microsecond=0, tzinfo=None)
        return self.start <= now < self.end

    def starts_after(self, moment: datetime) -> bool:
        now = moment.time().replace(microsecond=0, tzinfo=None)
        return self.start > now

    def with_id(self, doc_id: str) -> "RecurringEvent":
        return replace(self, id=doc_id)

    def to_document(self) -> Dict[str, Any]:
        document = {
            "days": [d for d in WEEKDAYS if d in self.days],
            "startTime": self.start_time,
            "endTime": self.end_time,
            "subject": self.subject,
            "location": self.location or None,
            "color": self.color or None,
            "userId": self.user_id,
        }
        return document

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "RecurringEvent":
        return cls(
            id=document.get("id"),
            days=frozenset(document.get("days") or []),
            start_time=document["startTime"],
            end_time=document["endTime"],
            subject=document["subject"],
            location=document.get("location"),
            color=document.get("color"),
            user_id=document.get("userId"),
        )


def validate_event(
    subject: str,
    days: Iterable[str],
    start_time: str,
    end_time: str,
    location: Optional[str] = None,
    color: Optional[str] = DEFAULT_ENTRY_COLOR,
    event_id: Optional[str] = None,
    user_id: Optional[int] = None,
) -> RecurringEvent:
    """Build a RecurringEvent from form input or raise ValidationError"""
    errors = {}
    subject = (subject or "").strip()
    if not subject:
        errors["subject"] = "Subject is required."

    days = list(days or [])
    unknown = [d for d in days if d not in WEEKDAYS]
    if not days:
        errors["days"] = "Pick at least one day."
    elif unknown:
        errors["days"] = f"Unknown day: {', '.join(unknown)}"

    start = end = None
    try:
        start = parse_hhmm(start_time)
    except ValueError:
        errors["start_time"] = "Start time must be HH:MM."
    try:
        end = parse_hhmm(end_time)
    except ValueError:
        errors["end_time"] = "End time must be HH:MM."
    if start is not None and end is not None and end <= start:
        errors["end_time"] = "End time must be after the start time."

    if errors:
        raise ValidationError(errors)

    return RecurringEvent(
        id=event_id,
        days=frozenset(days),
        start_time=start.strftime("%H:%M"),
        end_time=end.strftime("%H:%M"),
        subject=subject,
        location=(location or "").strip() or None,
        color=color or DEFAULT_ENTRY_COLOR,
        user_id=user_id,
    )


@dataclass(frozen=True)
class ScheduleStatus:
    current: Optional[RecurringEvent]
    next: Optional[RecurringEvent]
    now: datetime


def events_for_day(events: Iterable[RecurringEvent], day: str) -> List[RecurringEvent]:
    """Events on day ordered by start time; equal starts keep input order"""
    return sorted((e for e in events if e.occurs_on(day)), key=lambda e: e.start)


def evaluate_schedule(now: datetime, events: Iterable[RecurringEvent]) -> ScheduleStatus:
    """Resolve the class in progress and the next one today.

    ``current`` uses the half-open interval [start, end); ``next`` is the
    earliest event starting strictly after now. At an event's first second
    it is current and no longer next.
    """
    today = events_for_day(events, weekday_name(now))
    current = next((e for e in today if e.is_active_at(now)), None)
    upcoming = next((e for e in today if e.starts_after(now)), None)
    return ScheduleStatus(current=current, next=upcoming, now=now)


def minutes_until(event: RecurringEvent, now: datetime) -> int:
    """Whole minutes from now until the event starts today, truncated toward zero"""
    start = datetime.combine(now.date(), event.start, tzinfo=now.tzinfo)
    seconds = (start - now.replace(microsecond=0)).total_seconds()
    return int(seconds / 60)


def scheduled_minutes(events: Iterable[RecurringEvent], day: str) -> int:
    """Total class minutes scheduled on day"""
    return sum(e.duration_minutes for e in events if e.occurs_on(day))
