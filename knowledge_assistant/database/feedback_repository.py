"""
Message feedback repository.

Stores user ratings of assistant messages.
"""

import uuid
from dataclasses import dataclass
from typing import List, Optional

from ..core import get_logger, NotFoundError, ValidationError
from .connection import DatabaseManager

logger = get_logger(__name__)

FEEDBACK_RATINGS = ("positive", "negative")

_SELECT_FEEDBACK = """
    SELECT f.uuid, m.uuid AS message_uuid, f.user_id, f.rating, f.category,
           f.comment, f.suggested_improvement, f.created_at, f.updated_at
    FROM message_feedback f
    JOIN messages m ON f.message_id = m.id
"""


@dataclass
class Feedback:
    """A user's rating of one message."""
    message_id: str
    user_id: int
    rating: str
    id: Optional[str] = None
    category: Optional[str] = None
    comment: Optional[str] = None
    suggested_improvement: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class FeedbackRepository:
    """Repository for the message_feedback table."""

    def __init__(self, db: DatabaseManager):
        self.db = db

    def save_feedback(self, feedback: Feedback) -> Feedback:
        """
        Insert new feedback or update an existing entry.

        Args:
            feedback: Feedback to persist.

        Returns:
            The stored feedback as read back from the database.

        Raises:
            ValidationError: If rating is not positive or negative.
            NotFoundError: If the rated message does not exist.
        """
        if feedback.rating not in FEEDBACK_RATINGS:
            raise ValidationError(
                f"Rating must be one of {FEEDBACK_RATINGS}, got {feedback.rating!r}",
                field="rating"
            )

        if feedback.id and self.get_feedback_by_id(feedback.id) is not None:
            with self.db.cursor() as cur:
                cur.execute("""
                    UPDATE message_feedback
                    SET rating = ?, category = ?, comment = ?, suggested_improvement = ?,
                        updated_at = CURRENT_TIMESTAMP
                    WHERE uuid = ?
                """, (
                    feedback.rating,
                    feedback.category,
                    feedback.comment,
                    feedback.suggested_improvement,
                    feedback.id
                ))
            return self.get_feedback_by_id(feedback.id)

        with self.db.connection() as conn:
            row = conn.execute(
                "SELECT id FROM messages WHERE uuid = ?", (feedback.message_id,)
            ).fetchone()

        if row is None:
            raise NotFoundError(
                f"Message not found: {feedback.message_id}",
                resource="message",
                resource_id=feedback.message_id
            )

        feedback_id = feedback.id or str(uuid.uuid4())

        with self.db.cursor() as cur:
            cur.execute("""
                INSERT INTO message_feedback
                (uuid, message_id, user_id, rating, category, comment, suggested_improvement)
                VALUES (?, ?, ?, ?, ?, ?, ?)
            """, (
                feedback_id,
                row["id"],
                feedback.user_id,
                feedback.rating,
                feedback.category,
                feedback.comment,
                feedback.suggested_improvement
            ))

        logger.debug(f"Saved {feedback.rating} feedback for message {feedback.message_id}")
        return self.get_feedback_by_id(feedback_id)

    def get_feedback(self, message_id: str) -> List[Feedback]:
        """Get all feedback for a message, newest first."""
        with self.db.connection() as conn:
            rows = conn.execute(
                _SELECT_FEEDBACK + " WHERE m.uuid = ? ORDER BY f.created_at DESC, f.id DESC",
                (message_id,)
            ).fetchall()

        return [self._row_to_feedback(row) for row in rows]

    def get_feedback_by_id(self, feedback_id: str) -> Optional[Feedback]:
        with self.db.connection() as conn:
            row = conn.execute(
                _SELECT_FEEDBACK + " WHERE f.uuid = ?", (feedback_id,)
            ).fetchone()

        return self._row_to_feedback(row) if row else None

    def get_user_feedback(
        self,
        user_id: int,
        limit: int = 50,
        offset: int = 0
    ) -> List[Feedback]:
        """
        Get feedback left by a user, newest first.

        Args:
            user_id: Rating user's id.
            limit: Maximum entries.
            offset: Entries to skip.
        """
        with self.db.connection() as conn:
            rows = conn.execute(
                _SELECT_FEEDBACK
                + " WHERE f.user_id = ? ORDER BY f.created_at DESC, f.id DESC LIMIT ? OFFSET ?",
                (user_id, limit, offset)
            ).fetchall()

        return [self._row_to_feedback(row) for row in rows]

    def delete_feedback(self, feedback_id: str) -> bool:
        with self.db.cursor() as cur:
            cur.execute("DELETE FROM message_feedback WHERE uuid = ?", (feedback_id,))
            return cur.rowcount > 0

    @staticmethod
    def _row_to_feedback(row) -> Feedback:
        return Feedback(
            id=row["uuid"],
            message_id=row["message_uuid"],
            user_id=row["user_id"],
            rating=row["rating"],
            category=row["category"],
            comment=row["comment"],
            suggested_improvement=row["suggested_improvement"],
            created_at=row["created_at"],
            updated_at=row["updated_at"]
        )
