"""
Results list component for displaying search results.

Renders knowledge search hits with snippets and a full-content toggle.
"""

import re

import streamlit as st
from typing import List

from ...search import QueryParser, SearchResult
from ..state import get_state, toggle_in


SOURCE_LABELS = {
    "semantic": "[S]",
    "keyword": "[K]"
}


def render_results(results: List[SearchResult], query: str, snippet_length: int = 200) -> None:
    """
    Render the list of search results.

    Args:
        results: SearchResult objects to display.
        query: The query, used to highlight matching terms.
        snippet_length: Characters of content shown before expanding.
    """
    if not results:
        return

    terms = QueryParser().extract_terms(query)

    for idx, result in enumerate(results):
        _render_result_card(result, idx, terms, snippet_length)


def _render_result_card(
    result: SearchResult,
    idx: int,
    terms: List[str],
    snippet_length: int
) -> None:
    """Render a single result card with expander."""
    source_label = SOURCE_LABELS.get(result.source, "")
    header = f"**{result.title}** ({result.type}) {source_label}"

    with st.expander(header, expanded=idx == 0):
        st.caption(f"Score: {result.score:.4f} | Source: {result.source} | Id: {result.id}")

        if result.description:
            st.markdown(f"_{result.description}_")

        st.markdown("---")

        st.markdown(highlight_terms(result.snippet(snippet_length), terms))

        result_id = f"{result.id}_{idx}"
        if result.content and st.button("Full content", key=f"text_btn_{result_id}"):
            toggle_in("show_content", result_id)

        if get_state("show_content", {}).get(result_id, False):
            st.text_area(
                f"Content - {result.title}",
                value=result.content,
                height=300,
                key=f"content_area_{result_id}"
            )


def highlight_terms(text: str, terms: List[str]) -> str:
    """
    Wrap occurrences of the search terms in markdown bold.

    Args:
        text: Plain text.
        terms: Lowercase terms to highlight.

    Returns:
        Markdown string.
    """
    if not text or not terms:
        return text

    pattern = re.compile(
        r"\b(" + "|".join(re.escape(term) for term in sorted(terms, key=len, reverse=True)) + r")\b",
        re.IGNORECASE
    )
    return pattern.sub(r"**\1**", text)
