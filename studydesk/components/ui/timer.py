"""Pomodoro timer component"""

import math
import streamlit as st
import streamlit.components.v1 as components
from textwrap import dedent

RING_RADIUS = 120


def ring_offset(progress: float, radius: int = RING_RADIUS) -> float:
    """SVG stroke-dashoffset for a ring filled to progress percent"""
    circumference = 2 * math.pi * radius
    progress = max(0.0, min(100.0, progress))
    return circumference - (progress / 100) * circumference


def timer_display(time_str: str, label: str = "Focus", status: str = "Paused",
                  progress: float = 0.0, color: str = "#6366f1"):
    """
    Display the countdown inside a progress ring

    Args:
        time_str: Remaining time as MM:SS
        label: Mode label (Focus, Short Break...)
        status: Running or Paused
        progress: Elapsed share of the countdown, 0-100
        color: Ring color for the mode
    """
    circumference = 2 * math.pi * RING_RADIUS
    offset = ring_offset(progress)

    timer_html = f"""
    <div class="sd-timer">
        <svg width="260" height="260" viewBox="0 0 280 280">
            <circle cx="140" cy="140" r="{RING_RADIUS}" stroke="#33415555" stroke-width="12" fill="transparent" />
            <circle cx="140" cy="140" r="{RING_RADIUS}" stroke="{color}" stroke-width="12" fill="transparent"
                    stroke-dasharray="{circumference:.2f}" stroke-dashoffset="{offset:.2f}"
                    stroke-linecap="round" transform="rotate(-90 140 140)" />
        </svg>
        <div class="sd-timer-text">
            <div class="sd-timer-display">{time_str}</div>
            <div class="sd-timer-label">{label} · {status}</div>
        </div>
    </div>
    """

    style_block = """
    <style>
    .sd-timer { position: relative; width: 260px; height: 260px; margin: 0 auto; font-family: sans-serif; }
    .sd-timer-text { position: absolute; inset: 0; display: flex; flex-direction: column; align-items: center; justify-content: center; }
    .sd-timer-display { font-family: monospace; font-size: 3rem; font-weight: 700; color: #f8fafc; }
    .sd-timer-label { text-transform: uppercase; letter-spacing: 0.1em; font-size: 0.75rem; color: #94a3b8; }
    </style>
    """
    safe_timer_html = dedent(timer_html).strip()
    try:
        components.html(style_block + safe_timer_html, height=280, scrolling=False)
    except Exception:
        st.markdown(f"## {time_str}\n{label} · {status}")
