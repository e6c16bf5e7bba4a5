"""
Streamlit session state management.

Provides helpers for initializing, reading, and updating
session state values used across the application.
"""

import streamlit as st
from typing import Any, Dict


DEFAULT_STATE = {
    "search_query": "",
    "search_results": [],
    "search_stats": None,
    "show_content": {},
    "search_mode": "hybrid",
    "search_limit": 5,
    "search_threshold": 0.7,
    "conversation_id": None,
    "chat_replies": {},
    "rated_messages": {},
}


def init_state(overrides: Dict[str, Any] = None) -> None:
    """
    Initialize session state with default values.

    Only sets values that don't already exist, preserving
    state across reruns.

    Args:
        overrides: Defaults taken from configuration instead of DEFAULT_STATE.
    """
    defaults = dict(DEFAULT_STATE)
    defaults.update(overrides or {})

    for key, default_value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = default_value


def get_state(key: str, default: Any = None) -> Any:
    """
    Get a value from session state.

    Args:
        key: State key to retrieve.
        default: Default value if key doesn't exist.

    Returns:
        The stored value or default.
    """
    return st.session_state.get(key, default)


def set_state(key: str, value: Any) -> None:
    """
    Set a value in session state.

    Args:
        key: State key to set.
        value: Value to store.
    """
    st.session_state[key] = value


def toggle_in(key: str, item_id: str) -> bool:
    """
    Toggle a per-item flag stored in a dict-valued state key.

    Returns:
        The new value of the flag.
    """
    flags = dict(get_state(key, {}))
    flags[item_id] = not flags.get(item_id, False)
    set_state(key, flags)
    return flags[item_id]


def clear_search_state() -> None:
    """Reset search-related state to defaults."""
    set_state("search_results", [])
    set_state("search_stats", None)
    set_state("show_content", {})


def clear_chat_state() -> None:
    """Forget the active conversation."""
    set_state("conversation_id", None)
    set_state("chat_replies", {})
    set_state("rated_messages", {})
