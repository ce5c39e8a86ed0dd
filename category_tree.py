"""In-memory category forest with validated structural edits.

Nodes are addressed by integer keys handed out by the tree. A key is resolved
against the roots on every call, so a reference to a removed node simply stops
resolving. Edits either apply fully or raise and leave the tree untouched.
"""

import itertools
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from errors import CycleError, IntegrityError, NotFoundError, ValidationError
from models.category import CategoryNode, CategoryRow

MAX_NAME_LENGTH = 255


def _check_name(name: str) -> None:
    if not name or not name.strip():
        raise ValidationError("Category name is required", field="name")
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(
            f"Category name must be at most {MAX_NAME_LENGTH} characters",
            field="name",
        )


class FlattenedTree:
    """Depth-first, parent-before-children view of a tree as CategoryRow objects.

    Rows are produced lazily from the tree's current state, and every
    iteration starts over from the first root.
    """

    def __init__(self, tree: "CategoryTree"):
        self._tree = tree

    def __iter__(self) -> Iterator[CategoryRow]:
        stack = [(node, None) for node in reversed(self._tree.roots)]
        while stack:
            node, parent = stack.pop()
            yield CategoryRow(
                id=node.id,
                name=node.name,
                description=node.description,
                parent_id=parent.id if parent else None,
                key=node.key,
                parent_key=parent.key if parent else None,
            )
            stack.extend((child, node) for child in reversed(node.children))


class CategoryTree:
    """A forest of CategoryNode objects."""

    def __init__(self):
        self.roots: List[CategoryNode] = []
        self._keys = itertools.count(1)

    def __len__(self) -> int:
        return sum(1 for _ in self.walk())

    def _new_node(
        self,
        name: str,
        description: Optional[str] = None,
        category_id: Optional[int] = None,
    ) -> CategoryNode:
        return CategoryNode(
            key=next(self._keys), name=name, description=description, id=category_id
        )

    def _locate(self, ref: int) -> Tuple[CategoryNode, Optional[CategoryNode]]:
        """Find a node and its parent (None for roots) by walking from the roots."""
        stack = [(node, None) for node in self.roots]
        while stack:
            node, parent = stack.pop()
            if node.key == ref:
                return node, parent
            stack.extend((child, node) for child in node.children)
        raise NotFoundError(f"Category node {ref} not found", node_ref=ref)

    def _siblings(self, parent: Optional[CategoryNode]) -> List[CategoryNode]:
        return parent.children if parent else self.roots

    def _detach(self, node: CategoryNode, parent: Optional[CategoryNode]) -> None:
        siblings = self._siblings(parent)
        index = next(i for i, sibling in enumerate(siblings) if sibling is node)
        del siblings[index]

    def _parent_index(self) -> Dict[int, CategoryNode]:
        parents = {}
        for _, node in self.walk():
            for child in node.children:
                parents[child.key] = node
        return parents

    def add_root(self, name: str = "", description: Optional[str] = None) -> int:
        """Append a new root category.

        An empty name is accepted while editing; validate() rejects it before
        the tree can be saved.

        Returns:
            Key of the new node.
        """
        node = self._new_node(name, description)
        self.roots.append(node)
        return node.key

    def add_child(
        self, parent_ref: int, name: str = "", description: Optional[str] = None
    ) -> int:
        """Append a new child under the given parent.

        Returns:
            Key of the new node.

        Raises:
            NotFoundError: If parent_ref is not a live node of this tree.
        """
        parent, _ = self._locate(parent_ref)
        node = self._new_node(name, description)
        parent.children.append(node)
        return node.key

    def rename(self, ref: int, new_name: str) -> None:
        """Set a node's name.

        Raises:
            NotFoundError: If ref is not a live node.
            ValidationError: If new_name is empty or too long.
        """
        node, _ = self._locate(ref)
        _check_name(new_name)
        node.name = new_name

    def describe(self, ref: int, description: Optional[str]) -> None:
        """Set or clear a node's description."""
        node, _ = self._locate(ref)
        node.description = description or None

    def remove(self, ref: int) -> CategoryNode:
        """Detach a node together with its entire subtree.

        Returns:
            The removed node, still holding its children.
        """
        node, parent = self._locate(ref)
        self._detach(node, parent)
        return node

    def move(self, ref: int, new_parent_ref: Optional[int]) -> None:
        """Re-parent a node, or promote it to a root when new_parent_ref is None.

        The node is appended after the new parent's existing children. Moving
        a node under its current parent leaves the sibling order unchanged.

        Raises:
            NotFoundError: If either reference does not resolve.
            CycleError: If the new parent is the node itself or one of its
                descendants.
        """
        node, parent = self._locate(ref)

        new_parent = None
        if new_parent_ref is not None:
            new_parent, _ = self._locate(new_parent_ref)
            parents = self._parent_index()
            cursor = new_parent
            while cursor is not None:
                if cursor is node:
                    raise CycleError(
                        f"Cannot move category node {ref} under itself or its descendant",
                        {"node_ref": ref, "new_parent_ref": new_parent_ref},
                    )
                cursor = parents.get(cursor.key)

        if new_parent is parent:
            return

        self._detach(node, parent)
        self._siblings(new_parent).append(node)

    def get(self, ref: int) -> CategoryNode:
        node, _ = self._locate(ref)
        return node

    def parent_of(self, ref: int) -> Optional[CategoryNode]:
        _, parent = self._locate(ref)
        return parent

    def find_by_id(self, category_id: int) -> Optional[int]:
        """Return the key of the node with the given persisted ID, if any."""
        for _, node in self.walk():
            if node.id == category_id:
                return node.key
        return None

    def descendants(self, ref: int) -> List[CategoryNode]:
        """All nodes below ref, in depth-first order."""
        node, _ = self._locate(ref)
        result = []
        stack = list(reversed(node.children))
        while stack:
            current = stack.pop()
            result.append(current)
            stack.extend(reversed(current.children))
        return result

    def walk(self) -> Iterator[Tuple[int, CategoryNode]]:
        """Yield (depth, node) pairs depth-first, roots at depth 0."""
        stack = [(0, node) for node in reversed(self.roots)]
        while stack:
            depth, node = stack.pop()
            yield depth, node
            stack.extend((depth + 1, child) for child in reversed(node.children))

    def flatten(self) -> FlattenedTree:
        """Return a restartable parent-before-children sequence of rows."""
        return FlattenedTree(self)

    def validate(self) -> None:
        """Check the tree can be persisted.

        Raises:
            ValidationError: For empty, over-long or duplicate names.
            IntegrityError: For duplicate persisted IDs.
        """
        names = set()
        ids = set()
        for row in self.flatten():
            if not row.name or not row.name.strip():
                raise ValidationError(
                    "Category name is required", field="name", node_ref=row.key
                )
            if len(row.name) > MAX_NAME_LENGTH:
                raise ValidationError(
                    f"Category name must be at most {MAX_NAME_LENGTH} characters",
                    field="name",
                    node_ref=row.key,
                )
            if row.name in names:
                raise ValidationError(
                    f"Duplicate category name '{row.name}'",
                    field="name",
                    node_ref=row.key,
                )
            names.add(row.name)

            if row.id is not None:
                if row.id in ids:
                    raise IntegrityError(
                        f"Duplicate category id {row.id}", {"category_id": row.id}
                    )
                ids.add(row.id)

    def assign_ids(self, assigned: Dict[int, int]) -> None:
        """Record persisted IDs handed out by the store, keyed by node key."""
        for _, node in self.walk():
            if node.key in assigned:
                node.id = assigned[node.key]

    def to_dict(self) -> List[dict]:
        """Nested document form of the forest."""

        def convert(node: CategoryNode) -> dict:
            return {
                "category_id": node.id,
                "category_name": node.name,
                "category_description": node.description,
                "subcategories": [convert(child) for child in node.children],
            }

        return [convert(root) for root in self.roots]

    @classmethod
    def from_flat(cls, rows: Iterable[CategoryRow]) -> "CategoryTree":
        """Rebuild a forest from flat rows.

        Rows are linked through parent_id, or through parent_key for rows
        whose parent has not been persisted yet. Children keep the relative
        order in which they appear in rows.

        Raises:
            IntegrityError: For duplicate IDs, parent references that do not
                resolve within rows, or rows caught in a cycle.
        """
        tree = cls()
        rows = list(rows)

        by_id: Dict[int, CategoryNode] = {}
        by_key: Dict[int, CategoryNode] = {}
        nodes = []
        for row in rows:
            node = tree._new_node(row.name, row.description, row.id)
            if row.id is not None:
                if row.id in by_id:
                    raise IntegrityError(
                        f"Duplicate category id {row.id}", {"category_id": row.id}
                    )
                by_id[row.id] = node
            if row.key is not None:
                if row.key in by_key:
                    raise IntegrityError(
                        f"Duplicate node key {row.key}", {"node_ref": row.key}
                    )
                by_key[row.key] = node
            nodes.append(node)

        for row, node in zip(rows, nodes):
            if row.parent_id is not None:
                parent = by_id.get(row.parent_id)
            elif row.parent_key is not None:
                parent = by_key.get(row.parent_key)
            else:
                tree.roots.append(node)
                continue

            if parent is None:
                raise IntegrityError(
                    f"Category '{row.name}' references a missing parent",
                    {
                        "category_id": row.id,
                        "parent_id": row.parent_id,
                        "parent_key": row.parent_key,
                    },
                )
            parent.children.append(node)

        visited = {node.key for _, node in tree.walk()}
        unreached = [row for row, node in zip(rows, nodes) if node.key not in visited]
        if unreached:
            raise IntegrityError(
                "Category parent links form a cycle",
                {"category_ids": [row.id for row in unreached]},
            )

        return tree
