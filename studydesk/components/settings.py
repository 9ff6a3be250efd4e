"""Settings page: theme, class reminders and account reset"""

import streamlit as st

from studydesk.services.app_context import AppContext
from studydesk.services.errors import ValidationError
from studydesk.services.notifications import NotificationPermission
from studydesk.utils.constants import RESET_CONFIRM_PHRASE, THEMES
from studydesk.components.ui.alerts import show_field_errors


def render_settings(context: AppContext):
    st.title("⚙️ Settings")
    prefs = context.preferences

    st.markdown("### Appearance")
    theme = st.radio("Theme", THEMES, index=THEMES.index(prefs.theme), horizontal=True)
    if theme != prefs.theme:
        context.update_preferences(theme=theme)
        st.rerun()

    st.markdown("### Class reminders")
    enabled = st.toggle("Remind me 5 minutes before each class", value=prefs.notifications_enabled)
    if enabled != prefs.notifications_enabled:
        context.update_preferences(notifications_enabled=enabled)
        st.rerun()

    permission = NotificationPermission(prefs.notification_permission)
    if permission == NotificationPermission.GRANTED:
        st.caption("Reminders are allowed on this device.")
        if st.button("Block reminders"):
            context.update_preferences(notification_permission=NotificationPermission.DENIED.value)
            st.rerun()
    else:
        st.caption("Reminders are blocked." if permission == NotificationPermission.DENIED
                   else "Reminders have not been allowed yet.")
        if st.button("Allow reminders", type="primary"):
            context.update_preferences(notification_permission=NotificationPermission.GRANTED.value)
            st.rerun()

    st.markdown("---")
    st.markdown("### ⚠️ Danger zone")
    st.write("Permanently delete all timetable entries, tasks, and focus history. This cannot be undone.")
    with st.form("reset_account_form", clear_on_submit=True):
        phrase = st.text_input(f"Type {RESET_CONFIRM_PHRASE} to confirm")
        really = st.checkbox("I understand this cannot be undone")
        submitted = st.form_submit_button("Delete my data", type="primary")
        if submitted:
            if not really:
                st.error("Tick the box to confirm.")
                return
            try:
                result = context.reset_account(phrase)
            except ValidationError as e:
                show_field_errors(e)
                return
            if result.ok:
                st.success(f"All data deleted ({result.value} items).")
