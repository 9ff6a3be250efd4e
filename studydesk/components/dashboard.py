"""Dashboard: class in progress, next class, todos and today's numbers"""

import streamlit as st
from datetime import datetime

from studydesk.services.app_context import AppContext
from studydesk.services.errors import ValidationError
from studydesk.services.focus_stats import compute_focus_stats
from studydesk.services.schedule_status import RecurringEvent, minutes_until
from studydesk.utils.helpers import calculate_percentage, format_duration, format_starts_in, minutes_between
from studydesk.components.ui.alerts import show_field_errors
from studydesk.components.ui.card import card, metric_card
from studydesk.components.ui.progress_bar import progress_bar


def _class_progress(event: RecurringEvent, now: datetime) -> float:
    elapsed = minutes_between(event.start, now.time())
    return calculate_percentage(elapsed, event.duration_minutes)


def render_schedule_status(context: AppContext):
    status = context.status
    now = status.now

    col1, col2 = st.columns(2)
    with col1:
        st.markdown("### 🟢 Now")
        if status.current:
            event = status.current
            card(
                event.subject,
                f"{event.start_time} - {event.end_time}\n{event.location or 'No location'}",
                icon="📖",
                color=event.color,
            )
            progress_bar(_class_progress(event, now), color=event.color or "#2563eb", label="Class progress")
        else:
            st.info("No class right now. Free time!")

    with col2:
        st.markdown("### ⏭️ Up next")
        if status.next:
            event = status.next
            card(
                event.subject,
                f"Starts at {event.start_time} (in {format_starts_in(minutes_until(event, now))})\n"
                f"{event.location or 'No location'}",
                icon="🕒",
                color=event.color,
            )
        else:
            st.info("No more classes today.")


def render_todos(context: AppContext):
    st.markdown("### ✅ Todo List")

    with st.form("add_todo_form", clear_on_submit=True):
        new_todo = st.text_input("Add new todo")
        submitted = st.form_submit_button("Add")
        if submitted:
            try:
                with st.spinner("Saving..."):
                    result = context.todos.add(new_todo)
            except ValidationError as e:
                show_field_errors(e)
            else:
                if result.ok:
                    st.success("Todo added")
                    st.rerun()

    if not context.todos.todos:
        st.info("No todos yet. Add one above.")
        return

    for t in list(context.todos.todos):
        cols = st.columns([8, 1])
        with cols[0]:
            # Callback fires once per click, not on every rerun
            st.checkbox(
                t.text,
                value=t.completed,
                key=f"todo_chk_{t.id}_{t.completed}",
                on_change=context.todos.set_completed,
                args=(t.id, not t.completed),
            )
        with cols[1]:
            if st.button("Delete", key=f"del_{t.id}"):
                with st.spinner("Deleting..."):
                    result = context.todos.delete(t.id)
                if result.ok:
                    st.success("Deleted")
                    st.rerun()


def render_dashboard(context: AppContext):
    """Render dashboard"""
    st.title("🏠 Dashboard")
    st.caption(context.status.now.strftime("%A, %d %B %Y · %H:%M:%S"))

    render_schedule_status(context)

    st.markdown("---")

    stats = compute_focus_stats(
        context.history.sessions, context.timetable.entries, context.status.now, context.settings.timezone
    )
    col1, col2, col3, col4 = st.columns(4)
    with col1:
        metric_card(format_duration(stats.today_focus_minutes), "Focus Today")
    with col2:
        metric_card(format_duration(stats.today_class_minutes), "Classes Today")
    with col3:
        metric_card(f"{stats.streak_days}d", "Streak")
    with col4:
        pending = len([t for t in context.todos.todos if not t.completed])
        metric_card(str(pending), "Open Todos")

    st.markdown("---")
    render_todos(context)
