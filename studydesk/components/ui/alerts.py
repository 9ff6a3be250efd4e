"""Toasts for queued alerts, plus the retry control for failed saves"""

import streamlit as st

from studydesk.services.app_context import AppContext
from studydesk.services.audio import SAMPLE_RATE, chime
from studydesk.services.errors import ValidationError

TOAST_ICONS = {
    "success": "✅",
    "error": "🚨",
    "info": "ℹ️",
    "warning": "⚠️",
}


def render_alerts(context: AppContext):
    """Show pending alerts and, after a failed save, a retry button"""
    for alert in context.alerts.drain():
        st.toast(alert.message, icon=TOAST_ICONS.get(alert.level))

    if context.gateway.can_retry:
        with st.sidebar:
            st.warning(f"Last save failed: {context.gateway.last_failed_request.describe()}")
            if st.button("🔁 Retry", key="retry_last_write"):
                result = context.retry_last()
                if result is not None and result.ok:
                    st.toast("Saved", icon=TOAST_ICONS["success"])
                st.rerun()


def play_cues(context: AppContext):
    """Play the chime for every countdown that finished since the last run"""
    if context.drain_cues():
        st.audio(chime(), sample_rate=SAMPLE_RATE, autoplay=True)


def show_field_errors(error: ValidationError):
    for field, message in error.field_errors.items():
        st.error(f"{field.replace('_', ' ').capitalize()}: {message}")
