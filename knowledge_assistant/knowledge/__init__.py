"""
Knowledge base module.

Item type variants and the service that stores, embeds and searches them.
"""

from .models import (
    BaseItem,
    FolderItem,
    DocumentItem,
    FileItem,
    UrlItem,
    UrlDirectoryItem,
    KnowledgeItem,
    ITEM_TYPES,
    build_item
)
from .service import KnowledgeBaseService

__all__ = [
    "BaseItem",
    "FolderItem",
    "DocumentItem",
    "FileItem",
    "UrlItem",
    "UrlDirectoryItem",
    "KnowledgeItem",
    "ITEM_TYPES",
    "build_item",
    "KnowledgeBaseService"
]
