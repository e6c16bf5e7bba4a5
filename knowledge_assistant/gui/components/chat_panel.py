"""
Chat panel component.

Drives a ChatManager conversation: shows the stored history, sends new
messages, and records thumbs up/down feedback on assistant replies.
"""

import streamlit as st

from ...chat import ChatManager, ChatReply
from ...core import get_logger, AssistantError
from ..state import get_state, set_state, clear_chat_state

logger = get_logger(__name__)

HISTORY_DISPLAY_LIMIT = 50


def render_chat_panel(chat_manager: ChatManager, user_id: int, company_id: int = None) -> None:
    """
    Render the chat panel.

    Args:
        chat_manager: Manager that stores and answers messages.
        user_id: Current user.
        company_id: Current tenant.
    """
    conversation_id = get_state("conversation_id")

    col1, col2 = st.columns([4, 1])
    with col1:
        conversation = chat_manager.get_conversation(conversation_id) if conversation_id else None
        if conversation:
            st.caption(f"{conversation.title} ({conversation.message_count} messages)")
        else:
            st.caption("New conversation")
    with col2:
        if st.button("New chat", use_container_width=True):
            clear_chat_state()
            st.rerun()

    if conversation:
        for message in chat_manager.get_recent_messages(conversation.id, HISTORY_DISPLAY_LIMIT):
            with st.chat_message(message.role):
                st.markdown(message.content)
                if message.role == "assistant":
                    _render_reply_extras(chat_manager, message.id, user_id)

    prompt = st.chat_input("Ask the assistant...")
    if not prompt:
        return

    with st.chat_message("user"):
        st.markdown(prompt)

    with st.chat_message("assistant"):
        with st.spinner("Thinking..."):
            try:
                reply = chat_manager.send_message(
                    prompt,
                    conversation_id=conversation_id,
                    user_id=user_id,
                    company_id=company_id
                )
            except AssistantError as e:
                logger.error(f"Chat failed: {e.message}")
                st.error(f"The assistant could not answer: {e.message}")
                return

        st.markdown(reply.content)

    set_state("conversation_id", reply.conversation_id)
    if reply.message_id:
        replies = dict(get_state("chat_replies", {}))
        replies[reply.message_id] = reply
        set_state("chat_replies", replies)

    st.rerun()


def _render_reply_extras(chat_manager: ChatManager, message_id: str, user_id: int) -> None:
    """Suggested links, detected feedback and rating buttons for one reply."""
    reply: ChatReply = get_state("chat_replies", {}).get(message_id)

    if reply and reply.suggested_links:
        st.caption("Related pages: " + ", ".join(
            f"[{link.label}]({link.path})" for link in reply.suggested_links
        ))

    if reply and reply.feedback_detection and reply.feedback_detection.is_feedback:
        st.caption(
            f"Detected {reply.feedback_detection.type.replace('_', ' ')} "
            f"({reply.feedback_detection.confidence:.0%})"
        )

    rated = get_state("rated_messages", {})
    if message_id in rated:
        st.caption(f"You rated this reply {rated[message_id]}")
        return

    col1, col2, _ = st.columns([1, 1, 6])
    rating = None
    with col1:
        if st.button("👍", key=f"up_{message_id}"):
            rating = "positive"
    with col2:
        if st.button("👎", key=f"down_{message_id}"):
            rating = "negative"

    if rating:
        try:
            chat_manager.submit_feedback(message_id, user_id, rating)
        except AssistantError as e:
            st.warning(f"Feedback not saved: {e.message}")
            return
        rated = dict(rated)
        rated[message_id] = rating
        set_state("rated_messages", rated)
        st.rerun()
