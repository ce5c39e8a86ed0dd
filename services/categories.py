"""Category store: loads the category forest and persists edits to it."""

from dataclasses import dataclass
from datetime import datetime
import sqlite3
from typing import Dict, Iterable, List, Optional, Set

from category_tree import CategoryTree
from errors import ConflictError
from models.category import Category, CategoryRow
from logger import get_logger

logger = get_logger()

_SELECT_COLUMNS = (
    "SELECT category_id, category_name, category_description, parent_id, "
    "created_at, updated_at FROM categories"
)


@dataclass
class SaveResult:
    """Counts of the writes issued by one save."""

    inserted: int = 0
    updated: int = 0
    deleted: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.inserted or self.updated or self.deleted)


class CategoryStore:
    """Reconciles CategoryTree snapshots with the categories table.

    The store remembers which category IDs the last load() or save() handed
    out. A later save deletes only those IDs that have disappeared from the
    tree, so rows added meanwhile by another writer are left alone.
    """

    def __init__(self, db_manager):
        """Initialize the category store.

        Args:
            db_manager: Database manager instance for database operations.
        """
        self.db_manager = db_manager
        self._known_ids: Optional[Set[int]] = None

    def find_all(self) -> List[Category]:
        """Get all categories from the database.

        Returns:
            List of Category objects, ordered by id.
        """
        rows = self.db_manager.fetch_all("categories")
        return [self._row_to_category(row) for row in rows]

    def find(self, category_id: int) -> Optional[Category]:
        """Get a single category by ID.

        Returns:
            Category object if found, None otherwise.
        """
        with self.db_manager.connect() as conn:
            cursor = self.db_manager.execute(
                conn, f"{_SELECT_COLUMNS} WHERE category_id = ?", (category_id,)
            )
            row = cursor.fetchone()

            if row:
                return self._row_to_category(row)
            return None

    def find_by_name(self, name: str) -> Optional[Category]:
        """Get a single category by its (case-sensitive) name.

        Returns:
            Category object if found, None otherwise.
        """
        with self.db_manager.connect() as conn:
            cursor = self.db_manager.execute(
                conn, f"{_SELECT_COLUMNS} WHERE category_name = ?", (name,)
            )
            row = cursor.fetchone()

            if row:
                return self._row_to_category(row)
            return None

    def load(self) -> CategoryTree:
        """Read every stored category and rebuild the forest.

        Returns:
            CategoryTree holding all persisted categories.

        Raises:
            IntegrityError: If stored parent links dangle or form a cycle.
        """
        categories = self.find_all()
        tree = CategoryTree.from_flat(
            CategoryRow.from_category(category) for category in categories
        )
        self._known_ids = {category.id for category in categories}
        logger.debug(f"Loaded {len(categories)} categories")
        return tree

    def save(self, tree: CategoryTree) -> SaveResult:
        """Persist the tree with the minimal set of writes, in one transaction.

        Removed categories are deleted children first, renamed and re-parented
        ones are updated, and new ones are inserted parents first. IDs of new
        categories are written back into the tree once the transaction has
        committed. Without a previous load() or save(), the tree is taken to
        be the whole forest and every stored row missing from it is deleted.

        Args:
            tree: The edited forest.

        Returns:
            SaveResult with the number of rows inserted, updated and deleted.

        Raises:
            ValidationError: If the tree has empty or duplicate names.
            ConflictError: If a category in the tree no longer exists, its
                name was taken by another writer, or the database rejects a
                write.
        """
        tree.validate()
        rows = list(tree.flatten())
        tree_ids = {row.id for row in rows if row.id is not None}

        result = SaveResult()
        assigned: Dict[int, int] = {}

        with self.db_manager.transaction() as conn:
            current = {
                category.id: category
                for category in (
                    self._row_to_category(row)
                    for row in self.db_manager.fetch_all("categories", conn)
                )
            }

            missing = sorted(tree_ids - current.keys())
            if missing:
                raise ConflictError(
                    f"Category {missing[0]} was deleted by another writer",
                    category_id=missing[0],
                )

            known = self._known_ids if self._known_ids is not None else current.keys()
            removed = [cid for cid in known if cid not in tree_ids and cid in current]
            renamed = [
                row.id
                for row in rows
                if row.id is not None and current[row.id].name != row.name
            ]

            # Names of rows this save neither deletes nor renames stay taken
            taken = {
                category.name: category_id
                for category_id, category in current.items()
                if category_id not in removed and category_id not in renamed
            }
            for row in rows:
                owner = taken.get(row.name)
                if owner is not None and owner != row.id:
                    raise ConflictError(
                        f"Category name '{row.name}' was taken by another writer",
                        category_id=owner,
                    )

            try:
                self._write(conn, rows, removed, renamed, current, assigned, result)
            except sqlite3.IntegrityError as e:
                raise ConflictError(f"Database rejected the save: {e}") from e

        tree.assign_ids(assigned)
        self._known_ids = tree_ids | set(assigned.values())

        logger.info(
            f"Saved categories: {result.inserted} inserted, "
            f"{result.updated} updated, {result.deleted} deleted"
        )
        return result

    def _write(self, conn, rows, removed, renamed, current, assigned, result) -> None:
        """Issue the deletes, renames, inserts and updates of one save."""
        for category_id in self._children_first(removed, current):
            self.db_manager.execute(
                conn, "DELETE FROM categories WHERE category_id = ?", (category_id,)
            )
            result.deleted += 1

        # Free the old names first so renames that swap names don't collide
        for category_id in renamed:
            self.db_manager.execute(
                conn,
                "UPDATE categories SET category_name = ? WHERE category_id = ?",
                (f"__renaming__{category_id}", category_id),
            )

        for row in rows:
            parent_id = row.parent_id
            if parent_id is None and row.parent_key is not None:
                parent_id = assigned[row.parent_key]

            if row.id is None:
                cursor = self.db_manager.execute(
                    conn,
                    """
                    INSERT INTO categories (category_name, category_description, parent_id)
                    VALUES (?, ?, ?)
                    """,
                    (row.name, row.description, parent_id),
                )
                assigned[row.key] = cursor.lastrowid
                result.inserted += 1
                continue

            stored = current[row.id]
            if (stored.name, stored.description, stored.parent_id) != (
                row.name,
                row.description,
                parent_id,
            ):
                self.db_manager.execute(
                    conn,
                    """
                    UPDATE categories
                    SET category_name = ?, category_description = ?, parent_id = ?
                    WHERE category_id = ?
                    """,
                    (row.name, row.description, parent_id, row.id),
                )
                result.updated += 1

    def _children_first(
        self, category_ids: Iterable[int], current: Dict[int, Category]
    ) -> List[int]:
        """Order IDs so that every category comes before its stored ancestors."""

        def depth(category_id: int) -> int:
            seen = set()
            level = 0
            parent_id = current[category_id].parent_id
            while parent_id in current and parent_id not in seen:
                seen.add(parent_id)
                level += 1
                parent_id = current[parent_id].parent_id
            return level

        return sorted(category_ids, key=depth, reverse=True)

    def _row_to_category(self, row: tuple) -> Category:
        """Convert a database row to a Category object.

        Args:
            row: Database row tuple.

        Returns:
            Category object.
        """
        return Category(
            id=row[0],
            name=row[1],
            description=row[2],
            parent_id=row[3],
            created_at=datetime.fromisoformat(row[4]) if row[4] else None,
            updated_at=datetime.fromisoformat(row[5]) if row[5] else None,
        )
