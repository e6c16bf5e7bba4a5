"""
Custom exception hierarchy for the Knowledge Assistant.

Provides specific exception types for different failure modes:
configuration errors, storage issues, invalid input, missing records,
search problems, and chat completion failures.
"""


class AssistantError(Exception):
    """Base exception for all Knowledge Assistant errors."""

    def __init__(self, message: str, details: dict = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(AssistantError):
    """Raised when configuration is invalid or missing."""
    pass


class DatabaseError(AssistantError):
    """Raised when SQLite operations fail."""
    pass


class ValidationError(AssistantError):
    """Raised when caller input is rejected before any work begins."""

    def __init__(self, message: str, field: str = None, details: dict = None):
        """
        Initialize validation error.

        Args:
            message: Error description.
            field: Name of the offending input field.
            details: Additional context.
        """
        super().__init__(message, details)
        self.field = field


class NotFoundError(AssistantError):
    """Raised when a record addressed by external id does not exist."""

    def __init__(
        self,
        message: str,
        resource: str = None,
        resource_id: str = None,
        details: dict = None
    ):
        super().__init__(message, details)
        self.resource = resource
        self.resource_id = resource_id


class AIServiceError(AssistantError):
    """Raised when a chat completion cannot be produced."""
    pass


if __name__ == "__main__":
    try:
        raise ConfigurationError("Config file not found", {"path": "/config/config.json"})
    except AssistantError as e:
        print(f"Caught: {e.__class__.__name__}: {e.message}")
        print(f"Details: {e.details}")

    try:
        raise ValidationError("query is required", field="query")
    except ValidationError as e:
        print(f"Invalid field: {e.field}")
