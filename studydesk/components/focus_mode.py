"""Focus Mode page with the Pomodoro timer"""

import streamlit as st

from studydesk.services.app_context import AppContext
from studydesk.services.focus_timer import MODES, TimerMode, TimerStatus
from studydesk.utils.constants import CUSTOM_MAX_MINUTES, CUSTOM_MIN_MINUTES
from studydesk.utils.helpers import format_datetime_local, format_duration, from_epoch_ms
from studydesk.components.ui.timer import timer_display
from studydesk.components.ui.card import card

MODE_COLORS = {
    TimerMode.FOCUS: "#6366f1",
    TimerMode.SHORT_BREAK: "#10b981",
    TimerMode.LONG_BREAK: "#0ea5e9",
    TimerMode.CUSTOM: "#f59e0b",
}

STATUS_LABELS = {
    TimerStatus.IDLE: "Ready",
    TimerStatus.RUNNING: "Running",
    TimerStatus.PAUSED: "Paused",
    TimerStatus.COMPLETED: "Done",
}


def _render_mode_switch(context: AppContext):
    timer = context.timer
    cols = st.columns(len(MODES))
    for col, (mode, spec) in zip(cols, MODES.items()):
        with col:
            kind = "primary" if timer.mode == mode else "secondary"
            if st.button(spec.label, key=f"mode_{mode.value}", type=kind, use_container_width=True):
                if mode == timer.mode:
                    continue
                if timer.needs_confirmation:
                    st.session_state.pending_mode = mode.value
                else:
                    context.runner.change_mode(mode)
                st.rerun()

    pending = st.session_state.get("pending_mode")
    if pending:
        st.warning("Timer is in progress! Switching modes will reset the current timer. Continue?")
        col1, col2 = st.columns(2)
        with col1:
            if st.button("Switch anyway", key="confirm_mode_switch", type="primary"):
                context.runner.change_mode(TimerMode(pending), confirm=lambda: True)
                st.session_state.pending_mode = None
                st.rerun()
        with col2:
            if st.button("Keep going", key="cancel_mode_switch"):
                st.session_state.pending_mode = None
                st.rerun()


def render_focus_mode(context: AppContext):
    """Render focus timer interface"""
    st.title("⏱️ Focus Mode")

    if "pending_mode" not in st.session_state:
        st.session_state.pending_mode = None

    timer = context.timer
    _render_mode_switch(context)

    if timer.mode == TimerMode.CUSTOM and not timer.is_running:
        minutes = st.number_input(
            "Custom duration (min)",
            min_value=CUSTOM_MIN_MINUTES,
            max_value=CUSTOM_MAX_MINUTES,
            value=timer.custom_minutes,
            step=5,
        )
        if int(minutes) != timer.custom_minutes:
            context.runner.set_custom_duration(int(minutes))
            st.rerun()

    state = timer.snapshot()
    timer_display(
        timer.display(),
        MODES[state.mode].label,
        STATUS_LABELS[state.status],
        timer.progress_percent(),
        MODE_COLORS[state.mode],
    )

    col1, col2 = st.columns(2)
    with col1:
        label = "⏸️ Pause" if timer.is_running else "▶️ Start"
        if st.button(label, type="primary", use_container_width=True):
            context.runner.toggle()
            st.rerun()
    with col2:
        if st.button("🔄 Reset", use_container_width=True):
            context.runner.reset()
            st.rerun()

    # Session history
    st.markdown("---")
    st.markdown("### 📊 Recent Sessions")
    recent_sessions = context.history.sessions[:5]
    if recent_sessions:
        for session in recent_sessions:
            started = from_epoch_ms(session.start_time, context.settings.timezone)
            card(
                f"Focus · {format_duration(session.duration)}",
                f"Started: {format_datetime_local(started, tz_name=context.settings.timezone)}",
                icon="🎯",
            )
    else:
        st.info("No focus sessions yet. Start your first one!")
