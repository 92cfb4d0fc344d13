"""
Per-session rate limiting for LLM-backed actions.
"""

from datetime import datetime, timedelta

import streamlit as st

from config.settings import get_settings


def check_rate_limit() -> bool:
    """Check if user has exceeded rate limit. Returns True if allowed."""
    settings = get_settings()
    now = datetime.now()
    window_start = now - timedelta(seconds=settings.rate_limit_window_seconds)

    if "request_timestamps" not in st.session_state:
        st.session_state.request_timestamps = []

    # Remove timestamps outside the window
    st.session_state.request_timestamps = [
        ts for ts in st.session_state.request_timestamps if ts > window_start
    ]

    if len(st.session_state.request_timestamps) >= settings.rate_limit_max_requests:
        return False

    st.session_state.request_timestamps.append(now)
    return True
