"""Category models for the product category hierarchy."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass
class Category:
    """Represents one persisted row of the categories table.

    Attributes:
        id: Unique identifier (auto-generated).
        name: Category name (unique across all categories).
        description: Optional description of what belongs in this category.
        parent_id: Optional parent category ID; None for root categories.
        created_at: When the row was inserted.
        updated_at: When the row was last changed.
    """

    id: int
    name: str
    description: Optional[str]
    parent_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class CategoryNode:
    """A category inside an in-memory tree.

    Attributes:
        key: Tree-local handle used to address the node while editing.
        name: Category name; may be empty while the node is being edited.
        description: Optional description.
        id: Persisted category ID, None until the node has been saved.
        children: Child nodes, owned by this node, in display order.
    """

    key: int
    name: str = ""
    description: Optional[str] = None
    id: Optional[int] = None
    children: List["CategoryNode"] = field(default_factory=list)


@dataclass(frozen=True)
class CategoryRow:
    """One flattened node: the relational shape of a tree node.

    parent_id points at the parent's persisted ID. parent_key points at the
    parent's tree-local key so rows for unsaved parents can still be linked.
    """

    id: Optional[int]
    name: str
    description: Optional[str]
    parent_id: Optional[int] = None
    key: Optional[int] = None
    parent_key: Optional[int] = None

    @classmethod
    def from_category(cls, category: Category) -> "CategoryRow":
        """Build a row from a persisted category."""
        return cls(
            id=category.id,
            name=category.name,
            description=category.description,
            parent_id=category.parent_id,
        )
