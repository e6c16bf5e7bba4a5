"""
Knowledge item variants.

Each item type is its own dataclass carrying the fields that type uses
and checking its required ones at construction. build_item() picks the
variant from a type string, which is how untyped input (JSON seed files,
form fields) enters the system.
"""

from dataclasses import dataclass, field, fields
from typing import Any, ClassVar, Dict, Optional, Type

from ..core import ValidationError
from ..database import KnowledgeRecord

# Stored items as returned by reads
KnowledgeItem = KnowledgeRecord


@dataclass
class BaseItem:
    """Fields shared by every item type."""
    title: str
    created_by: int
    description: Optional[str] = None
    parent_id: Optional[str] = None
    company_id: Optional[int] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    type: ClassVar[str] = ""
    embed_on_create: ClassVar[bool] = False

    def __post_init__(self):
        if not self.title or not self.title.strip():
            raise ValidationError("title is required", field="title")
        if not isinstance(self.created_by, int):
            raise ValidationError("created_by must be a user id", field="created_by")
        self.validate()

    def validate(self) -> None:
        """Check type-specific required fields."""

    @property
    def embeddable_text(self) -> Optional[str]:
        """Text to embed when the item is created, if any."""
        if not self.embed_on_create:
            return None
        content = getattr(self, "content", None)
        return content if content and content.strip() else None


@dataclass
class FolderItem(BaseItem):
    type: ClassVar[str] = "folder"


@dataclass
class DocumentItem(BaseItem):
    content: Optional[str] = None

    type: ClassVar[str] = "document"
    embed_on_create: ClassVar[bool] = True

    def validate(self) -> None:
        if not self.content or not self.content.strip():
            raise ValidationError("document items require content", field="content")


@dataclass
class FileItem(BaseItem):
    file_url: Optional[str] = None
    file_size: Optional[int] = None
    file_type: Optional[str] = None
    content: Optional[str] = None

    type: ClassVar[str] = "file"
    embed_on_create: ClassVar[bool] = True

    def validate(self) -> None:
        if not self.file_url:
            raise ValidationError("file items require file_url", field="file_url")


@dataclass
class UrlItem(BaseItem):
    file_url: Optional[str] = None
    content: Optional[str] = None

    type: ClassVar[str] = "url"

    def validate(self) -> None:
        if not self.file_url:
            raise ValidationError("url items require file_url", field="file_url")


@dataclass
class UrlDirectoryItem(BaseItem):
    file_url: Optional[str] = None

    type: ClassVar[str] = "url_directory"


ITEM_TYPES: Dict[str, Type[BaseItem]] = {
    cls.type: cls
    for cls in (FolderItem, DocumentItem, FileItem, UrlItem, UrlDirectoryItem)
}


def item_class(item_type: str) -> Type[BaseItem]:
    """
    Look up the variant class for a type string.

    Raises:
        ValidationError: If the type is unknown.
    """
    try:
        return ITEM_TYPES[item_type]
    except KeyError:
        raise ValidationError(
            f"Unknown item type: {item_type!r}. Expected one of {sorted(ITEM_TYPES)}",
            field="type"
        )


def field_names(cls: Type[BaseItem]) -> set:
    """Instance field names of a variant class."""
    return {f.name for f in fields(cls)}


def build_item(type: str, **values) -> BaseItem:
    """
    Build the variant matching a type string.

    Args:
        type: Item type discriminator.
        **values: Field values for the variant.

    Returns:
        A validated item variant.

    Raises:
        ValidationError: On an unknown type, a field the type does not
            have, or a missing required field.
    """
    cls = item_class(type)

    unexpected = set(values) - field_names(cls)
    if unexpected:
        raise ValidationError(
            f"{type} items do not accept fields: {sorted(unexpected)}",
            field=sorted(unexpected)[0]
        )

    try:
        return cls(**values)
    except TypeError as e:
        raise ValidationError(f"Invalid {type} item: {e}")


if __name__ == "__main__":
    doc = build_item("document", title="Getting started", created_by=1, content="Welcome aboard.")
    print(f"{doc.type}: {doc.title} (embed: {doc.embeddable_text is not None})")

    try:
        build_item("file", title="Handbook", created_by=1)
    except ValidationError as e:
        print(f"Rejected: {e.message} [{e.field}]")
