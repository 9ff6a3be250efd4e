"""Focus Analytics Component"""

import streamlit as st

from studydesk.services.app_context import AppContext
from studydesk.services.focus_stats import compute_focus_stats, daily_focus_frame, hourly_focus_frame
from studydesk.utils.helpers import format_duration
from studydesk.components.ui.card import card

BEST_TIME_ICONS = {
    "Morning": "🌅",
    "Afternoon": "🌇",
    "Evening": "🌙",
}


def render_focus_analytics(context: AppContext):
    """Render focus analytics dashboard"""
    st.title("📊 Focus Analytics")
    st.markdown("Track your focus time, streak and best hours.")

    sessions = context.history.sessions
    if not sessions:
        st.info("Finish a focus session to see your analytics!")
        return

    tz_name = context.settings.timezone
    now = context.status.now
    stats = compute_focus_stats(sessions, context.timetable.entries, now, tz_name)

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Today", format_duration(stats.today_focus_minutes), f"{stats.today_sessions} sessions",
                  delta_color="off")
    with col2:
        st.metric("This Week", format_duration(stats.week_focus_minutes), f"{stats.trend_percent:+.0f}% vs last week")
    with col3:
        st.metric("Streak", f"{stats.streak_days} days")
    with col4:
        st.metric("Total Sessions", stats.total_sessions)

    tabs = st.tabs(["📈 Last 7 Days", "⏰ Best Hours"])

    with tabs[0]:
        st.bar_chart(daily_focus_frame(sessions, now, days=7, tz_name=tz_name))
        st.caption(
            f"Classes scheduled today: {format_duration(stats.today_class_minutes)} · "
            f"Last week: {format_duration(stats.last_week_focus_minutes)}"
        )

    with tabs[1]:
        card(
            "Best Focus Time",
            stats.best_time,
            icon=BEST_TIME_ICONS.get(stats.best_time, "⚡"),
        )
        st.bar_chart(hourly_focus_frame(sessions, tz_name=tz_name))
