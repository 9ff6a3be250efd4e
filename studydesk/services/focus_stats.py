"""Productivity statistics over focus history and the timetable"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional

import pandas as pd

from studydesk.services.focus_timer import FocusSession
from studydesk.services.schedule_status import RecurringEvent, scheduled_minutes, weekday_name
from studydesk.utils.helpers import from_epoch_ms, get_week_range

SUNDAY = 6  # date.weekday() value; weeks start on Sunday


@dataclass(frozen=True)
class FocusStats:
    today_focus_minutes: int
    today_sessions: int
    today_class_minutes: int
    week_focus_minutes: int
    week_sessions: int
    last_week_focus_minutes: int
    trend_percent: float
    streak_days: int
    best_time: str
    total_sessions: int


def time_of_day(hour: int) -> str:
    if 5 <= hour < 12:
        return "Morning"
    if 12 <= hour < 17:
        return "Afternoon"
    return "Evening"


def _session_dates(sessions: Iterable[FocusSession], tz_name: Optional[str]) -> List[tuple]:
    return [(from_epoch_ms(s.start_time, tz_name), s.duration) for s in sessions]


def focus_streak(session_days: Iterable[date], today: date) -> int:
    """Consecutive days with at least one session, counting back from today"""
    days = set(session_days)
    streak = 0
    check = today
    while check in days:
        streak += 1
        check -= timedelta(days=1)
    return streak


def best_time_of_day(started: List[tuple]) -> str:
    """Bucket of the single busiest start hour; ties go to the earliest hour"""
    if not started:
        return "No data"
    minutes_by_hour = {}
    for moment, duration in started:
        minutes_by_hour[moment.hour] = minutes_by_hour.get(moment.hour, 0) + duration
    best_hour = min(minutes_by_hour, key=lambda h: (-minutes_by_hour[h], h))
    if minutes_by_hour[best_hour] <= 0:
        return "No data"
    return time_of_day(best_hour)


def compute_focus_stats(
    sessions: Iterable[FocusSession],
    events: Iterable[RecurringEvent],
    now: datetime,
    tz_name: Optional[str] = None,
) -> FocusStats:
    sessions = list(sessions)
    started = _session_dates(sessions, tz_name)
    today = now.date()
    week_start, week_end = get_week_range(today, first_weekday=SUNDAY)
    last_week_start, last_week_end = week_start - timedelta(days=7), week_end - timedelta(days=7)

    today_items = [d for m, d in started if m.date() == today]
    week_items = [d for m, d in started if week_start <= m.date() <= week_end]
    last_week_minutes = sum(d for m, d in started if last_week_start <= m.date() <= last_week_end)
    week_minutes = sum(week_items)

    trend = 0.0
    if last_week_minutes > 0:
        trend = (week_minutes - last_week_minutes) / last_week_minutes * 100

    return FocusStats(
        today_focus_minutes=sum(today_items),
        today_sessions=len(today_items),
        today_class_minutes=scheduled_minutes(events, weekday_name(now)),
        week_focus_minutes=week_minutes,
        week_sessions=len(week_items),
        last_week_focus_minutes=last_week_minutes,
        trend_percent=round(trend, 1),
        streak_days=focus_streak((m.date() for m, _ in started), today),
        best_time=best_time_of_day(started),
        total_sessions=len(sessions),
    )


def daily_focus_frame(
    sessions: Iterable[FocusSession],
    now: datetime,
    days: int = 7,
    tz_name: Optional[str] = None,
) -> pd.DataFrame:
    """Focus minutes per day for the last ``days`` days, oldest first"""
    today = now.date()
    index = [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]
    frame = pd.DataFrame({"Date": [d.strftime("%Y-%m-%d") for d in index], "Minutes": 0})
    started = _session_dates(sessions, tz_name)
    if started:
        history = pd.DataFrame(
            {"Date": [m.date().strftime("%Y-%m-%d") for m, _ in started], "Minutes": [d for _, d in started]}
        )
        totals = history.groupby("Date")["Minutes"].sum()
        frame["Minutes"] = frame["Date"].map(totals).fillna(0).astype(int)
    return frame.set_index("Date")


def hourly_focus_frame(sessions: Iterable[FocusSession], tz_name: Optional[str] = None) -> pd.DataFrame:
    """Focus minutes by starting hour, 00:00 through 23:00"""
    minutes = [0] * 24
    for moment, duration in _session_dates(sessions, tz_name):
        minutes[moment.hour] += duration
    return pd.DataFrame({"Hour": [f"{h:02d}:00" for h in range(24)], "Minutes": minutes}).set_index("Hour")
