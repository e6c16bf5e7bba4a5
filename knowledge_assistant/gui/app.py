"""
Main Streamlit application for the Knowledge Assistant.

Entry point that assembles all components into the web interface:
knowledge search with result cards, and a chat panel.

Note: This file is run directly by Streamlit, so it needs to
set up the Python path before importing other modules.
"""

import sys
from pathlib import Path

# Add project root to path for imports when run directly by Streamlit
_project_root = Path(__file__).parent.parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import streamlit as st  # noqa: E402

from knowledge_assistant.context import AppContext  # noqa: E402
from knowledge_assistant.core import get_config, get_logger, ValidationError  # noqa: E402
from knowledge_assistant.search import SearchOptions  # noqa: E402

from knowledge_assistant.gui.state import init_state, get_state, set_state  # noqa: E402
from knowledge_assistant.gui.components import (  # noqa: E402
    render_sidebar,
    render_search_bar,
    render_results,
    render_chat_panel,
)
from knowledge_assistant.gui.components.search_bar import (  # noqa: E402
    render_search_header,
    render_no_results,
)

logger = get_logger(__name__)


@st.cache_resource
def get_app_context() -> AppContext:
    """Build the application services once per Streamlit server."""
    return AppContext.create()


def main():
    """Main application entry point."""
    config = get_config()

    st.set_page_config(
        page_title=config.gui.page_title,
        page_icon="💬",
        layout="wide",
        initial_sidebar_state="expanded"
    )

    init_state({
        "search_mode": config.search.default_mode,
        "search_limit": config.search.default_limit,
        "search_threshold": config.search.default_threshold,
    })

    context = get_app_context()

    options = render_sidebar(context.db)

    st.title(config.gui.page_title)
    st.caption(f"{config.assistant.assistant_name} knowledge base and chat")

    search_tab, chat_tab = st.tabs(["Search", "Chat"])

    with search_tab:
        query_text, submitted = render_search_bar()

        if submitted and query_text.strip():
            _execute_search(context, query_text, options)

        _render_results_section(config.search.snippet_length)

    with chat_tab:
        render_chat_panel(
            context.chat_manager,
            user_id=config.gui.default_user_id,
            company_id=config.gui.default_company_id
        )


def _execute_search(context: AppContext, query_text: str, options: dict) -> None:
    """
    Execute search and store results in state.

    Args:
        context: Application services.
        query_text: The search query string.
        options: Search options from sidebar.
    """
    search_options = SearchOptions(
        limit=options["limit"],
        threshold=options["threshold"],
        mode=options["search_mode"],
        company_id=context.config.gui.default_company_id
    )

    with st.spinner("Searching..."):
        try:
            results, stats = context.knowledge_service.search_with_stats(query_text, search_options)
        except ValidationError as e:
            st.error(f"Invalid search: {e.message}")
            return

    set_state("search_results", results)
    set_state("search_stats", stats)

    logger.info(f"Search '{query_text}': {stats.total_results} results")


def _render_results_section(snippet_length: int) -> None:
    """Render the search results section."""
    results = get_state("search_results", [])
    stats = get_state("search_stats")

    if not stats:
        _render_welcome()
        return

    render_search_header(stats)

    if not results:
        render_no_results(stats.query)
        return

    st.divider()

    render_results(results, stats.query, snippet_length)


def _render_welcome() -> None:
    """Render welcome message when no search has been performed."""
    st.markdown("""
    ### Search the knowledge base

    Use the search bar above to find documents, files and links.

    **Features:**
    - Semantic search by embedding similarity
    - Full-text keyword search
    - Hybrid mode combining both, duplicates removed
    - A chat assistant grounded in the same knowledge base

    Enter a query to get started.
    """)


if __name__ == "__main__":
    main()
