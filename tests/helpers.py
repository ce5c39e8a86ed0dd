"""Helper utilities for tests."""

from pathlib import Path
import sqlite3

from category_tree import CategoryTree


def run_migrations(conn: sqlite3.Connection, migrations_dir: Path) -> None:
    """Run all SQL migrations in order.

    Args:
        conn: SQLite connection to run migrations against.
        migrations_dir: Path to directory containing .sql migration files.
    """
    for migration_file in sorted(migrations_dir.glob("*.sql")):
        conn.executescript(migration_file.read_text())
    conn.commit()


def build_tree(layout):
    """Build a CategoryTree from a nested layout.

    Each entry is either a name or a (name, [children]) tuple:

        build_tree([("Electronics", ["Phones", "Laptops"]), "Books"])

    Returns:
        Tuple of (tree, dict mapping name to node key).
    """
    tree = CategoryTree()
    keys = {}

    def add(entry, parent):
        name, children = (entry, []) if isinstance(entry, str) else entry
        if parent is None:
            key = tree.add_root(name)
        else:
            key = tree.add_child(parent, name)
        keys[name] = key
        for child in children:
            add(child, key)

    for entry in layout:
        add(entry, None)

    return tree, keys


def shape(tree):
    """Nested (name, [children]) form of a tree, ignoring IDs and keys."""

    def convert(node):
        return (node.name, [convert(child) for child in node.children])

    return [convert(root) for root in tree.roots]
