"""
Sidebar component for the Knowledge Assistant.

Displays knowledge base statistics, search options, and help text.
"""

import sqlite3

import streamlit as st
from typing import Dict

from ...core import DatabaseError
from ...database import DatabaseManager, get_statistics
from ...search import SearchMode
from ..state import get_state, set_state


SEARCH_MODES = {
    SearchMode.HYBRID.value: "Hybrid (recommended)",
    SearchMode.KEYWORD.value: "Keyword",
    SearchMode.SEMANTIC.value: "Semantic"
}


def render_sidebar(db: DatabaseManager) -> Dict:
    """
    Render the sidebar with stats and options.

    Args:
        db: Database to read statistics from.

    Returns:
        Dictionary of selected options.
    """
    with st.sidebar:
        st.title("Knowledge Base")

        st.subheader("Statistics")
        _render_statistics(db)

        st.divider()

        st.subheader("Search mode")
        search_mode = _render_search_mode()

        st.divider()

        st.subheader("Options")
        options = _render_options(search_mode)

        st.divider()

        _render_help()

    return options


def _render_statistics(db: DatabaseManager) -> None:
    """Display database statistics."""
    try:
        stats = get_statistics(db)
    except (sqlite3.Error, DatabaseError) as e:
        st.warning(f"Could not load statistics: {e}")
        return

    col1, col2 = st.columns(2)

    with col1:
        st.metric("Items", f"{stats['total_items']:,}")

    with col2:
        st.metric("Embedded", f"{stats['embedded_items']:,}")

    if stats["items_by_type"]:
        st.caption(", ".join(
            f"{item_type}: {count}" for item_type, count in sorted(stats["items_by_type"].items())
        ))

    st.caption(
        f"{stats['total_conversations']:,} conversations, {stats['total_messages']:,} messages"
    )

    if stats["newest_update"]:
        st.caption(f"Last update: {stats['newest_update'][:16]}")


def _render_search_mode() -> str:
    """Render search mode selector."""
    current_mode = get_state("search_mode", SearchMode.HYBRID.value)

    mode_options = list(SEARCH_MODES.keys())
    mode_labels = list(SEARCH_MODES.values())

    current_index = mode_options.index(current_mode) if current_mode in mode_options else 0

    selected_label = st.radio(
        "Select a mode",
        options=mode_labels,
        index=current_index,
        key="search_mode_radio",
        help="Hybrid lists meaning-based matches first, then exact keyword matches"
    )

    selected_mode = mode_options[mode_labels.index(selected_label)]
    set_state("search_mode", selected_mode)

    if selected_mode == SearchMode.KEYWORD.value:
        st.caption("Full-text match on title, description and content")
    elif selected_mode == SearchMode.SEMANTIC.value:
        st.caption("Embedding similarity, handles synonyms")
    else:
        st.caption("Semantic + keyword, duplicates removed")

    return selected_mode


def _render_options(search_mode: str) -> Dict:
    """Render search option controls."""
    limit = st.slider(
        "Maximum results",
        min_value=1,
        max_value=20,
        value=get_state("search_limit", 5),
        step=1,
        key="limit_slider"
    )
    set_state("search_limit", limit)

    threshold = get_state("search_threshold", 0.7)
    if search_mode != SearchMode.KEYWORD.value:
        threshold = st.slider(
            "Similarity threshold",
            min_value=0.0,
            max_value=1.0,
            value=threshold,
            step=0.05,
            key="threshold_slider",
            help="Semantic matches scoring below this are dropped"
        )
        set_state("search_threshold", threshold)

    return {
        "search_mode": search_mode,
        "limit": limit,
        "threshold": threshold
    }


def _render_help() -> None:
    """Display search help text."""
    with st.expander("Search help"):
        st.markdown("""
        **Search modes:**
        - **Hybrid**: semantic matches first, then keyword matches not already listed
        - **Keyword**: exact words in title, description or content
        - **Semantic**: meaning-based, finds related wording

        **Keyword syntax:**
        - `word1 word2` - both words must appear
        - `word1 OR word2` - either word
        - `"exact phrase"` - words in this order

        **Source indicators:**
        - [S] Found by semantic search (score is cosine similarity)
        - [K] Found by keyword search (fixed score)
        """)
