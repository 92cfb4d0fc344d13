"""
Theme constants shared by all views.
"""

import streamlit as st

COLORS = {
    "light": {
        "text": "#000000",
        "background": "#FFFFFF",
        "tint": "#EF4444",
        "secondary": "#FACC15",
        "tertiary": "#3B82F6",
        "card_background": "#FFFFFF",
        "input_background": "#F3F4F6",
        "category_background": "#F9FAFB",
        "muted": "#6B7280",
        "border": "#E5E7EB",
    },
    "dark": {
        "text": "#FFFFFF",
        "background": "#000000",
        "tint": "#EF4444",
        "secondary": "#FACC15",
        "tertiary": "#3B82F6",
        "card_background": "#1F2937",
        "input_background": "#374151",
        "category_background": "#111827",
        "muted": "#9CA3AF",
        "border": "#374151",
    },
}

SPACING = {"xs": 4, "sm": 8, "md": 12, "lg": 16, "xl": 20, "xxl": 24, "xxxl": 32}

BORDER_RADIUS = {"sm": 6, "md": 8, "lg": 12, "xl": 16, "xxl": 20, "full": 999}

FONT_SIZES = {"xs": 11, "sm": 12, "base": 14, "md": 16, "lg": 18, "xl": 20, "xxl": 24, "xxxl": 32}

STATUS_COLORS = {
    "connected": "#10B981",
    "connecting": "#FACC15",
    "disconnected": "#6B7280",
    "error": "#EF4444",
}

LOG_LEVEL_COLORS = {
    "info": "#3B82F6",
    "warn": "#F59E0B",
    "error": "#EF4444",
    "success": "#10B981",
}


def apply_theme(mode: str = "light") -> None:
    """Inject the app's card and chip styles."""
    colors = COLORS[mode]
    st.markdown(f"""
    <style>
        .app-card {{
            background: {colors["card_background"]};
            border: 1px solid {colors["border"]};
            border-radius: {BORDER_RADIUS["lg"]}px;
            padding: {SPACING["lg"]}px;
            margin-bottom: {SPACING["md"]}px;
        }}
        .app-chip {{
            display: inline-block;
            padding: {SPACING["xs"]}px {SPACING["md"]}px;
            border-radius: {BORDER_RADIUS["full"]}px;
            background: {colors["category_background"]};
            border: 1px solid {colors["border"]};
            font-size: {FONT_SIZES["sm"]}px;
            margin-right: {SPACING["xs"]}px;
        }}
        .app-muted {{
            color: {colors["muted"]};
            font-size: {FONT_SIZES["sm"]}px;
        }}
        .app-badge {{
            background: {colors["tint"]};
            color: #FFFFFF;
            border-radius: {BORDER_RADIUS["full"]}px;
            padding: 0 {SPACING["sm"]}px;
            font-size: {FONT_SIZES["xs"]}px;
        }}
    </style>
    """, unsafe_allow_html=True)


def status_dot(status: str) -> str:
    color = STATUS_COLORS.get(status, STATUS_COLORS["disconnected"])
    return f"<span style='color:{color}; font-size:{FONT_SIZES['lg']}px;'>●</span> {status.title()}"
