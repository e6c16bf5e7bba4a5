"""
Chat module.

AI reply generation with knowledge retrieval, and the manager that
stores conversations and messages around it.
"""

from .models import AIResponse, ChatReply, FeedbackDetection, FEEDBACK_TYPES
from .ai_service import AIService
from .chat_manager import ChatManager

__all__ = [
    "AIResponse",
    "ChatReply",
    "FeedbackDetection",
    "FEEDBACK_TYPES",
    "AIService",
    "ChatManager"
]
