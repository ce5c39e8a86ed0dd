#!/usr/bin/env python3

import sys
from pathlib import Path

from config import get_seed_file
from errors import NotFoundError
from logger import get_logger
from tools.categories import (
    dump_documents,
    import_documents,
    read_documents,
    write_documents,
)

logger = get_logger()


def _resolve(tree, category_id):
    """Map a category ID from the command line to a node key."""
    key = tree.find_by_id(category_id)
    if key is None:
        raise NotFoundError(f"Category with ID {category_id} not found")
    return key


def cmd_list(args, services):
    """Show the category tree."""
    tree = services.categories.load()

    if not tree.roots:
        logger.info("No categories found.")
        return

    logger.info("Categories:")
    logger.info("=" * 80)
    for depth, node in tree.walk():
        line = f"{'    ' * depth}{node.name} (ID: {node.id})"
        if node.description:
            line += f" - {node.description}"
        logger.info(line)
    logger.info("=" * 80)
    logger.info(f"Total categories: {len(tree)}")


def cmd_add(args, services):
    """Add a root category, or a subcategory with --parent."""
    tree = services.categories.load()

    if args.parent is None:
        key = tree.add_root(args.name, args.description)
    else:
        key = tree.add_child(_resolve(tree, args.parent), args.name, args.description)

    services.categories.save(tree)
    node = tree.get(key)
    logger.info(f"✓ Category '{node.name}' created with ID: {node.id}")


def cmd_rename(args, services):
    """Rename a category."""
    tree = services.categories.load()
    key = _resolve(tree, args.category_id)
    old_name = tree.get(key).name

    tree.rename(key, args.name)
    services.categories.save(tree)
    logger.info(f"✓ Renamed '{old_name}' to '{args.name}'")


def cmd_describe(args, services):
    """Set or clear a category's description."""
    tree = services.categories.load()
    key = _resolve(tree, args.category_id)

    tree.describe(key, args.description)
    services.categories.save(tree)
    if args.description:
        logger.info(f"✓ Updated description of '{tree.get(key).name}'")
    else:
        logger.info(f"✓ Cleared description of '{tree.get(key).name}'")


def cmd_move(args, services):
    """Move a category under a new parent, or to the top level."""
    tree = services.categories.load()
    key = _resolve(tree, args.category_id)
    new_parent = None if args.parent is None else _resolve(tree, args.parent)

    tree.move(key, new_parent)
    services.categories.save(tree)

    node = tree.get(key)
    if new_parent is None:
        logger.info(f"✓ Moved '{node.name}' to the top level")
    else:
        logger.info(f"✓ Moved '{node.name}' under '{tree.get(new_parent).name}'")


def cmd_remove(args, services):
    """Remove a category together with all of its subcategories."""
    tree = services.categories.load()
    key = _resolve(tree, args.category_id)
    node = tree.get(key)
    descendants = tree.descendants(key)

    logger.info("Category to delete:")
    logger.info(f"  ID: {node.id}")
    logger.info(f"  Name: {node.name}")
    if descendants:
        logger.info(f"  Subcategories also deleted: {len(descendants)}")
        for descendant in descendants:
            logger.info(f"    - {descendant.name} (ID: {descendant.id})")

    if not args.yes:
        confirm = (
            input("\nAre you sure you want to delete this category? (yes/no): ")
            .strip()
            .lower()
        )
        if confirm != "yes":
            logger.info("Deletion cancelled.")
            return

    tree.remove(key)
    result = services.categories.save(tree)
    logger.info(f"✓ Deleted {result.deleted} categor{'y' if result.deleted == 1 else 'ies'}")


def cmd_export(args, services):
    """Export the category tree as a nested document."""
    tree = services.categories.load()

    if args.path:
        path = Path(args.path)
        write_documents(tree, path)
        logger.info(f"✓ Exported {len(tree)} categories to {path}")
    else:
        print(dump_documents(tree, args.format))


def cmd_import(args, services):
    """Import a nested category document."""
    documents = read_documents(Path(args.path))
    tree = services.categories.load()
    parent = None if args.parent is None else _resolve(tree, args.parent)

    created = import_documents(tree, documents, parent, merge_existing=args.merge)
    result = services.categories.save(tree)
    logger.info(f"✓ Imported {len(created)} categories ({result.inserted} inserted)")


def cmd_seed(args, services):
    """Seed categories from the bundled seed file, skipping existing names."""
    seed_file = get_seed_file()
    if not seed_file.exists():
        logger.error(f"Seed file not found: {seed_file}")
        sys.exit(1)

    logger.info(f"Seeding categories from {seed_file.name}")
    logger.info("=" * 80)

    documents = read_documents(seed_file)
    tree = services.categories.load()
    created = import_documents(tree, documents, merge_existing=True)
    services.categories.save(tree)

    for key in created:
        node = tree.get(key)
        logger.info(f"✓ Created '{node.name}' (ID: {node.id})")

    logger.info("=" * 80)
    logger.info("Seeding complete!")
    logger.info(f"Created: {len(created)}")


def setup_parser(subparsers):
    """Setup categories subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "categories",
        help="Manage product categories",
        description="Create, organize and delete product categories",
    )

    categories_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available category commands",
        dest="subcommand",
        required=True,
    )

    list_parser = categories_subparsers.add_parser("list", help="Show the category tree")
    list_parser.set_defaults(func=cmd_list)

    add_parser = categories_subparsers.add_parser("add", help="Add a category")
    add_parser.add_argument("name", help="Category name (must be unique)")
    add_parser.add_argument("--parent", type=int, help="ID of the parent category")
    add_parser.add_argument("--description", help="Optional description")
    add_parser.set_defaults(func=cmd_add)

    rename_parser = categories_subparsers.add_parser("rename", help="Rename a category")
    rename_parser.add_argument("category_id", type=int, help="ID of the category")
    rename_parser.add_argument("name", help="New category name")
    rename_parser.set_defaults(func=cmd_rename)

    describe_parser = categories_subparsers.add_parser(
        "describe", help="Set or clear a category description"
    )
    describe_parser.add_argument("category_id", type=int, help="ID of the category")
    describe_parser.add_argument(
        "description", nargs="?", help="New description (omit to clear)"
    )
    describe_parser.set_defaults(func=cmd_describe)

    move_parser = categories_subparsers.add_parser(
        "move", help="Move a category under another one"
    )
    move_parser.add_argument("category_id", type=int, help="ID of the category")
    move_parser.add_argument(
        "--parent", type=int, help="ID of the new parent (omit for top level)"
    )
    move_parser.set_defaults(func=cmd_move)

    remove_parser = categories_subparsers.add_parser(
        "remove", help="Delete a category and its subcategories"
    )
    remove_parser.add_argument("category_id", type=int, help="ID of the category")
    remove_parser.add_argument(
        "--yes", action="store_true", help="Skip the confirmation prompt"
    )
    remove_parser.set_defaults(func=cmd_remove)

    export_parser = categories_subparsers.add_parser(
        "export", help="Export the category tree"
    )
    export_parser.add_argument(
        "path", nargs="?", help="Output file (.json, .yaml); prints if omitted"
    )
    export_parser.add_argument(
        "--format", choices=["json", "yaml"], default="json", help="Printed format"
    )
    export_parser.set_defaults(func=cmd_export)

    import_parser = categories_subparsers.add_parser(
        "import", help="Import categories from a .json or .yaml document"
    )
    import_parser.add_argument("path", help="Document to import")
    import_parser.add_argument(
        "--parent", type=int, help="ID of the category to import under"
    )
    import_parser.add_argument(
        "--merge",
        action="store_true",
        help="Merge into categories with the same name instead of failing",
    )
    import_parser.set_defaults(func=cmd_import)

    seed_parser = categories_subparsers.add_parser(
        "seed", help="Seed categories from the bundled seed file"
    )
    seed_parser.set_defaults(func=cmd_seed)
