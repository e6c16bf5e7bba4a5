"""
Reusable UI components for the Streamlit application.

Contains modular components for the sidebar, search bar,
results display, and chat panel.
"""

from .sidebar import render_sidebar
from .search_bar import render_search_bar
from .results_list import render_results
from .chat_panel import render_chat_panel

__all__ = [
    "render_sidebar",
    "render_search_bar",
    "render_results",
    "render_chat_panel"
]
