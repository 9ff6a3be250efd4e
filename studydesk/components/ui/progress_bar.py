"""Custom progress bar component"""

import streamlit as st
import streamlit.components.v1 as components
from textwrap import dedent


def progress_bar(value: float, max_value: float = 100.0, color: str = "#2563eb", label: str = ""):
    """
    Display a custom styled progress bar

    Args:
        value: Current value
        max_value: Maximum value
        color: Bar color
        label: Optional label above progress bar
    """
    percentage = max(0.0, min((value / max_value) * 100, 100.0)) if max_value > 0 else 0

    label_html = f'<div class="sd-progress-label">{label}</div>' if label else ""

    progress_html = f"""
    {label_html}
    <div class="sd-progress">
        <div class="sd-progress-bar" style="width: {percentage}%; background: {color};"></div>
    </div>
    <div class="sd-progress-value">{percentage:.0f}%</div>
    """

    safe_progress = dedent(progress_html).strip()
    style_block = """
    <style>
    .sd-progress { background: #e6eef8; height: 10px; border-radius: 6px; overflow: hidden; }
    .sd-progress-bar { height: 100%; }
    .sd-progress-label, .sd-progress-value { color: #94a3b8; font-size: 0.875rem; font-family: sans-serif; margin: 4px 0; }
    .sd-progress-value { text-align: center; }
    </style>
    """
    try:
        components.html(style_block + safe_progress, height=80 if label else 60, scrolling=False)
    except Exception:
        st.progress(int(percentage), text=label or None)
