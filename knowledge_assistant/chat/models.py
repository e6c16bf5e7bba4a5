"""
Data models for chat responses.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional

from ..core import NavigationLink

FEEDBACK_TYPES = ("bug_report", "feature_request", "general_feedback", "not_feedback")


@dataclass
class FeedbackDetection:
    """
    Classification of a user message as feedback.

    Attributes:
        type: One of FEEDBACK_TYPES.
        confidence: Model confidence between 0 and 1.
        key_points: Short summary points.
        suggested_action: What the team should do about it.
    """
    type: str
    confidence: float = 0.0
    key_points: List[str] = field(default_factory=list)
    suggested_action: Optional[str] = None

    @property
    def is_feedback(self) -> bool:
        return self.type != "not_feedback"


@dataclass
class AIResponse:
    """An assistant reply with its side information."""
    content: str
    feedback_detection: Optional[FeedbackDetection] = None
    suggested_links: List[NavigationLink] = field(default_factory=list)
    tool_results: List[Any] = field(default_factory=list)


@dataclass
class ChatReply(AIResponse):
    """
    An AIResponse tied to where it was stored.

    message_id is None when the assistant message could not be saved.
    """
    conversation_id: Optional[str] = None
    message_id: Optional[str] = None
    user_message_id: Optional[str] = None
