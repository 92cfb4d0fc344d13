"""
Sidebar components for different views.
"""

from views.components.sidebar.chef_assistant import render_chef_assistant_sidebar

__all__ = [
    "render_chef_assistant_sidebar",
]
