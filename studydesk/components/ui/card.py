"""Card UI component"""

import html as _html
import streamlit as st
import streamlit.components.v1 as components
from textwrap import dedent

from studydesk.utils.constants import DEFAULT_ENTRY_COLOR

_STYLE = """
<style>
.sd-card { background: rgba(255,255,255,0.08); color: #f8fafc; border-radius: 10px; padding: 12px; margin: 8px 0;
           border: 1px solid rgba(255,255,255,0.06); border-left-width: 6px; font-family: sans-serif; }
.sd-card-title { margin: 0 0 6px 0; font-size: 1.05rem; color: #ffffff; }
.sd-card-content { font-size: 0.9rem; color: #e2e8f0; }
.sd-metric { background: rgba(255,255,255,0.06); color: #f8fafc; padding: 10px; border-radius: 8px; text-align: center;
             border: 1px solid rgba(255,255,255,0.06); font-family: sans-serif; }
.sd-metric-value { font-size: 1.6rem; font-weight: 700; color: #ffffff; }
.sd-metric-label { color: #e6eef8; }
.sd-metric-trend.up { color: #10b981; }
.sd-metric-trend.down { color: #ef4444; }
</style>
"""


def _render(markup: str, height: int):
    try:
        components.html(_STYLE + markup, height=height, scrolling=False)
    except Exception:
        # components unavailable (e.g. bare mode): fall back to markdown
        st.markdown(_STYLE + markup, unsafe_allow_html=True)


def card(title: str, content: str = "", icon: str = "", color: str = DEFAULT_ENTRY_COLOR):
    """
    Render a card with a colored accent bar

    Args:
        title: Card title (escaped)
        content: Plain text; line breaks are kept
        icon: Optional emoji shown before the title
        color: Accent color for the left border
    """
    icon_html = f"{icon} " if icon else ""
    body = "<br>".join(_html.escape(line) for line in str(content).splitlines())
    markup = dedent(f"""
    <div class="sd-card" style="border-left-color: {_html.escape(color or DEFAULT_ENTRY_COLOR)};">
        <h3 class="sd-card-title">{icon_html}{_html.escape(title)}</h3>
        <div class="sd-card-content">{body}</div>
    </div>
    """).strip()
    lines = max(1, len(str(content).splitlines()))
    _render(markup, height=min(400, 70 + lines * 20))


def metric_card(value: str, label: str, trend: str = "", trend_direction: str = "neutral"):
    """
    Create a metric card component

    Args:
        value: Main metric value
        label: Metric label
        trend: Trend indicator text (optional)
        trend_direction: up, down, or neutral
    """
    trend_html = ""
    if trend:
        trend_class = "up" if trend_direction == "up" else "down" if trend_direction == "down" else ""
        trend_html = f'<div class="sd-metric-trend {trend_class}">{_html.escape(trend)}</div>'

    markup = dedent(f"""
    <div class="sd-metric">
        <div class="sd-metric-value">{_html.escape(value)}</div>
        <div class="sd-metric-label">{_html.escape(label)}</div>
        {trend_html}
    </div>
    """).strip()
    _render(markup, height=110 if trend else 90)
