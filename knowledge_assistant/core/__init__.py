"""
Core module providing foundational components.

This module contains the configuration loader, centralized logging setup,
and custom exception hierarchy. It has no internal dependencies.
"""

from .config_loader import (
    get_config,
    Config,
    EmbeddingConfig,
    SearchConfig,
    ChatConfig,
    AssistantConfig,
    NavigationLink
)
from .logger import get_logger
from .exceptions import (
    AssistantError,
    ConfigurationError,
    DatabaseError,
    ValidationError,
    NotFoundError,
    AIServiceError
)

__all__ = [
    "get_config",
    "Config",
    "EmbeddingConfig",
    "SearchConfig",
    "ChatConfig",
    "AssistantConfig",
    "NavigationLink",
    "get_logger",
    "AssistantError",
    "ConfigurationError",
    "DatabaseError",
    "ValidationError",
    "NotFoundError",
    "AIServiceError"
]
