"""
Chat manager orchestrating conversations, messages and AI replies.

A send_message() call stores the user message, replies with the AI
service and stores the reply. Once the reply exists, failures to persist
it are logged and the reply is still returned to the caller.
"""

import sqlite3
from typing import List, Optional

from ..core import get_config, get_logger, ChatConfig, DatabaseError, NotFoundError, ValidationError
from ..database import (
    ConversationRepository,
    Conversation,
    MessageRepository,
    StoredMessage,
    FeedbackRepository,
    Feedback
)
from .ai_service import AIService
from .models import ChatReply

logger = get_logger(__name__)

CHAT_TITLE = "Chat Conversation"


class ChatManager:
    """
    High-level chat operations for a single process.

    Holds no conversation state of its own; every call reads from and
    writes to the repositories.
    """

    def __init__(
        self,
        ai_service: AIService,
        conversations: ConversationRepository,
        messages: MessageRepository,
        feedback: FeedbackRepository,
        config: ChatConfig = None
    ):
        self.ai_service = ai_service
        self.conversations = conversations
        self.messages = messages
        self.feedback = feedback
        self.config = config or get_config().chat

    def create_conversation(
        self,
        user_id: int,
        company_id: int = None,
        title: str = None
    ) -> Conversation:
        """Start a new conversation for a user."""
        conversation = self.conversations.save_conversation(
            Conversation(user_id=user_id, company_id=company_id, title=title or "New Conversation")
        )
        logger.info(f"Created conversation {conversation.id} for user {user_id}")
        return conversation

    def get_conversation(self, conversation_id: str) -> Optional[Conversation]:
        return self.conversations.get_conversation(conversation_id)

    def send_message(
        self,
        message: str,
        conversation_id: str = None,
        user_id: int = 0,
        company_id: int = None
    ) -> ChatReply:
        """
        Send a user message and get the assistant's reply.

        Args:
            message: User message text.
            conversation_id: Existing conversation; a new one is started
                when missing or unknown.
            user_id: Sender, used when a conversation is created.
            company_id: Tenant, used when a conversation is created.

        Returns:
            ChatReply with the reply and the ids it was stored under.

        Raises:
            ValidationError: If the message is empty.
            AIServiceError: If no reply could be generated.
        """
        if not message or not message.strip():
            raise ValidationError("Message must not be empty", field="message")

        conversation = None
        if conversation_id:
            conversation = self.get_conversation(conversation_id)
            if conversation is None:
                logger.warning(f"Conversation {conversation_id} not found, starting a new one")

        if conversation is None:
            conversation = self.create_conversation(
                user_id,
                company_id,
                CHAT_TITLE
            )

        user_message = self.messages.save_message(StoredMessage(
            conversation_id=conversation.id,
            role="user",
            content=message
        ))

        history = [
            {"role": m.role, "content": m.content}
            for m in self.get_recent_messages(conversation.id)
            if m.id != user_message.id
        ]

        response = self.ai_service.generate_response(message, history)

        reply = ChatReply(
            content=response.content,
            feedback_detection=response.feedback_detection,
            suggested_links=response.suggested_links,
            tool_results=response.tool_results,
            conversation_id=conversation.id,
            user_message_id=user_message.id
        )

        try:
            assistant_message = self.messages.save_message(StoredMessage(
                conversation_id=conversation.id,
                role="assistant",
                content=response.content,
                parent_message_id=user_message.id,
                tool_results=response.tool_results
            ))
            reply.message_id = assistant_message.id
        except (sqlite3.Error, DatabaseError, NotFoundError, ValidationError) as e:
            logger.error(f"Failed to save assistant message: {e}")

        try:
            self.conversations.increment_message_count(conversation.id, 2)
        except (sqlite3.Error, DatabaseError) as e:
            logger.error(f"Failed to update conversation {conversation.id}: {e}")

        return reply

    def get_recent_messages(self, conversation_id: str, limit: int = None) -> List[StoredMessage]:
        """Latest messages of a conversation, oldest first."""
        return self.messages.get_recent_messages(
            conversation_id,
            limit or self.config.history_limit
        )

    def get_user_conversations(self, user_id: int, company_id: int = None) -> List[Conversation]:
        return self.conversations.get_user_conversations(user_id, company_id)

    def delete_conversation(self, conversation_id: str) -> bool:
        """Soft-delete a conversation. Returns False if it did not exist."""
        return self.conversations.delete_conversation(conversation_id)

    def submit_feedback(
        self,
        message_id: str,
        user_id: int,
        rating: str,
        category: str = None,
        comment: str = None,
        suggested_improvement: str = None
    ) -> Feedback:
        """
        Record a user's rating of a message.

        Raises:
            ValidationError: If rating is not positive or negative.
            NotFoundError: If the message does not exist.
        """
        saved = self.feedback.save_feedback(Feedback(
            message_id=message_id,
            user_id=user_id,
            rating=rating,
            category=category,
            comment=comment,
            suggested_improvement=suggested_improvement
        ))
        logger.info(f"Recorded {rating} feedback on message {message_id}")
        return saved

