"""
Search bar component for the Knowledge Assistant.

Provides the main search input and submit functionality.
"""

import streamlit as st
from typing import Tuple

from ..state import get_state, set_state, clear_search_state


def render_search_bar() -> Tuple[str, bool]:
    """
    Render the search input bar.

    Returns:
        Tuple of (query_text, was_submitted).
    """
    col1, col2 = st.columns([5, 1])

    with col1:
        query = st.text_input(
            "Search",
            value=get_state("search_query", ""),
            placeholder="Search the knowledge base...",
            key="search_input",
            label_visibility="collapsed"
        )

    with col2:
        submitted = st.button(
            "Search",
            type="primary",
            use_container_width=True
        )

    previous_query = get_state("search_query", "")
    query_changed = query != previous_query and query.strip() != ""

    if query_changed:
        clear_search_state()
        set_state("search_query", query)

    return query, submitted or query_changed


MODE_LABELS = {
    "keyword": "Keyword",
    "semantic": "Semantic",
    "hybrid": "Hybrid"
}


def render_search_header(stats) -> None:
    """
    Render search results header with stats.

    Args:
        stats: SearchStats from the last search.
    """
    if not stats:
        return

    mode_label = f" ({MODE_LABELS.get(stats.mode.value, stats.mode.value)})"

    col1, col2, col3 = st.columns([2, 2, 1])

    with col1:
        st.markdown(f"**{stats.total_results:,}** results{mode_label}")

    with col2:
        st.caption(f"Query: \"{stats.query}\"")

    with col3:
        st.caption(f"{stats.execution_time_ms:.0f} ms")

    if stats.mode.value == "hybrid":
        st.caption(
            f"Sources: {stats.semantic_count} semantic, "
            f"{stats.keyword_count} keyword, "
            f"{stats.overlap_count} in both"
        )

    for error in stats.errors:
        st.warning(error)


def render_no_results(query: str) -> None:
    """Display no results message with suggestions."""
    st.info(f"No results for \"{query}\"")

    with st.expander("Suggestions"):
        st.markdown("""
        - Check the spelling
        - Try fewer or different words
        - Try another search mode (keyword, semantic, hybrid)
        - Lower the similarity threshold
        - Use OR to allow alternatives
        """)
