"""Layout utilities for custom Streamlit styling"""

import streamlit as st

_DARK_CSS = """
<style>
.stApp { background-color: #0b1220; color: #f8fafc; }
</style>
"""

_LIGHT_CSS = """
<style>
.stApp { background-color: #ffffff; color: #0b1220; }
</style>
"""


def setup_custom_layout():
    """Page config for the whole app"""
    st.set_page_config(
        page_title="StudyDesk - Timetable & Focus",
        page_icon="📚",
        layout="wide",
        initial_sidebar_state="expanded"
    )


def create_custom_sidebar():
    """Create styled sidebar navigation"""
    st.sidebar.markdown("## 📚 StudyDesk")
    st.sidebar.markdown("---")
    return st.sidebar


def apply_theme(theme: str = "system"):
    """Apply theme (light/dark); system keeps Streamlit's own setting"""
    if theme == "dark":
        st.markdown(_DARK_CSS, unsafe_allow_html=True)
    elif theme == "light":
        st.markdown(_LIGHT_CSS, unsafe_allow_html=True)
