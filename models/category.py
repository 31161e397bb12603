"""Category model for transaction categorization."""

from dataclasses import dataclass
from typing import ClassVar, Optional

from models.types import CategoryType, DeletionPolicy


@dataclass
class Category:
    """Represents a user-defined transaction category.

    Attributes:
        id: Unique identifier (auto-generated).
        name: Category name, never empty.
        category_type: Whether the category collects income or expenses.
        color: Display hint such as "#FF6B6B"; not validated.
        icon: Optional display glyph.
        parent_id: Optional parent category ID for hierarchical categories.
        is_active: False once the category has been soft-deleted.
        created_at: ISO-8601 UTC timestamp.
        updated_at: ISO-8601 UTC timestamp, refreshed on every mutation.
    """

    deletion_policy: ClassVar[DeletionPolicy] = DeletionPolicy.SOFT

    id: int
    name: str
    category_type: CategoryType
    color: str
    icon: Optional[str] = None
    parent_id: Optional[int] = None
    is_active: bool = True
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert category to a plain dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "type": self.category_type.value,
            "color": self.color,
            "icon": self.icon,
            "parent_id": self.parent_id,
            "is_active": self.is_active,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
