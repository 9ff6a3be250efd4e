"""StudyDesk - Main Streamlit Application"""

import time

import streamlit as st
from studydesk.components.layout import setup_custom_layout, create_custom_sidebar, apply_theme
from studydesk.components.ui.alerts import render_alerts, play_cues
from studydesk.config import Settings
from studydesk.database.database import SessionLocal, init_db
from studydesk.database.store import SqlDocumentStore
from studydesk.services.app_context import AppContext, live_contexts
from studydesk.services.errors import get_error_message, log_error
from studydesk.services.preferences import get_or_create_user
from studydesk.utils.logging_handler import setup_logger

logger = setup_logger("studydesk.app")

REFRESH_SECONDS = 1

# Initialize app
setup_custom_layout()

# Initialize database
init_db()


def get_app_context() -> AppContext:
    """One context per browser session; live ones are closed at interpreter shutdown"""
    context = st.session_state.get("app_context")
    if context is None or context.closed:
        settings = Settings.from_env()
        user_id = get_or_create_user(SessionLocal)
        context = live_contexts.track(
            AppContext.create(settings, SqlDocumentStore(SessionLocal), SessionLocal, user_id)
        )
        st.session_state.app_context = context
    return context


def main():
    """Main application"""
    try:
        context = get_app_context()
    except Exception as e:
        log_error(e, "Loading data")
        st.error(get_error_message(e))
        if st.button("Try again"):
            st.rerun()
        return

    apply_theme(context.preferences.theme)
    context.tick()

    # Sidebar navigation
    sidebar = create_custom_sidebar()
    with sidebar:
        st.markdown("### Navigation")
        page = st.radio(
            "Choose a page",
            [
                "🏠 Dashboard",
                "📅 Timetable",
                "⏱️ Focus Mode",
                "📊 Focus Analytics",
                "⚙️ Settings",
            ],
            label_visibility="collapsed"
        )
        if context.timer.is_running:
            st.markdown("---")
            st.markdown(f"⏱️ **{context.timer.display()}** left")

    # Route to appropriate page
    if page == "🏠 Dashboard":
        from studydesk.components.dashboard import render_dashboard
        render_dashboard(context)
    elif page == "📅 Timetable":
        from studydesk.components.timetable import render_timetable
        render_timetable(context)
    elif page == "⏱️ Focus Mode":
        from studydesk.components.focus_mode import render_focus_mode
        render_focus_mode(context)
    elif page == "📊 Focus Analytics":
        from studydesk.components.focus_analytics import render_focus_analytics
        render_focus_analytics(context)
    elif page == "⚙️ Settings":
        from studydesk.components.settings import render_settings
        render_settings(context)

    render_alerts(context)
    play_cues(context)

    # Drive the timer, schedule and reminder polling
    time.sleep(context.seconds_until_next_tick(REFRESH_SECONDS))
    st.rerun()


if __name__ == "__main__":
    main()
