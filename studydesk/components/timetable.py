"""Timetable: week view plus add / edit / delete of class entries"""

import streamlit as st
from datetime import time
from typing import Optional

from studydesk.services.app_context import AppContext
from studydesk.services.errors import ValidationError
from studydesk.services.schedule_status import RecurringEvent, events_for_day, weekday_name
from studydesk.utils.constants import DEFAULT_ENTRY_COLOR, WEEK_VIEW_DAYS
from studydesk.components.ui.alerts import show_field_errors
from studydesk.components.ui.card import card


def render_week_view(context: AppContext):
    today = weekday_name(context.status.now)
    columns = st.columns(len(WEEK_VIEW_DAYS))
    for column, day in zip(columns, WEEK_VIEW_DAYS):
        with column:
            st.markdown(f"**{day[:3]}**" + (" 📍" if day == today else ""))
            day_events = events_for_day(context.timetable.entries, day)
            if not day_events:
                st.caption("-")
            for event in day_events:
                card(
                    event.subject,
                    f"{event.start_time}-{event.end_time}\n{event.location or ''}".strip(),
                    color=event.color,
                )


def _entry_form(context: AppContext, key: str, event: Optional[RecurringEvent] = None):
    """Add form when event is None, edit form otherwise"""
    with st.form(key, clear_on_submit=event is None):
        subject = st.text_input("Subject", value=event.subject if event else "", placeholder="e.g. Mathematics")
        days = st.multiselect(
            "Days",
            WEEK_VIEW_DAYS,
            default=[d for d in WEEK_VIEW_DAYS if event and d in event.days] or ["Monday"],
        )
        col1, col2 = st.columns(2)
        with col1:
            start = st.time_input("Start", value=event.start if event else time(9, 0), step=300)
        with col2:
            end = st.time_input("End", value=event.end if event else time(10, 0), step=300)
        location = st.text_input("Location", value=(event.location or "") if event else "")
        color = st.color_picker("Color", value=(event.color or DEFAULT_ENTRY_COLOR) if event else DEFAULT_ENTRY_COLOR)

        label = "Save changes" if event else "Add class"
        submitted = st.form_submit_button(label, type="primary")
        if not submitted:
            return

        fields = dict(
            subject=subject,
            days=days,
            start_time=start.strftime("%H:%M"),
            end_time=end.strftime("%H:%M"),
            location=location,
            color=color,
        )
        try:
            with st.spinner("Saving class..."):
                if event:
                    result = context.timetable.update(event.id, **fields)
                else:
                    result = context.timetable.add(**fields)
        except ValidationError as e:
            show_field_errors(e)
            return

        if result.ok:
            context.refresh_status()
            st.success("Class saved")
            st.rerun()


def render_timetable(context: AppContext):
    """Render the weekly timetable"""
    st.title("📅 Timetable")

    entries = context.timetable.entries
    if not entries:
        st.info("No classes yet. Add your first class below.")
    else:
        render_week_view(context)

    st.markdown("---")
    tabs = st.tabs(["➕ Add Class", "✏️ Edit / Delete"])

    with tabs[0]:
        _entry_form(context, "add_entry_form")

    with tabs[1]:
        if not entries:
            st.caption("Nothing to edit yet.")
            return
        labels = {e.id: f"{e.subject} · {', '.join(d[:3] for d in WEEK_VIEW_DAYS if d in e.days)} {e.start_time}"
                  for e in entries}
        selected_id = st.selectbox("Class", list(labels), format_func=labels.get)
        event = context.timetable.get(selected_id)
        if event is None:
            return
        _entry_form(context, f"edit_entry_form_{event.id}", event)
        if st.button("🗑️ Delete class", key=f"delete_entry_{event.id}"):
            with st.spinner("Deleting class..."):
                result = context.timetable.delete(event.id)
            if result.ok:
                context.refresh_status()
                st.success("Class deleted")
                st.rerun()
