#!/usr/bin/env python3
"""
Storefront CLI - command-line interface for managing the product category tree.

Usage:
    python -m cli <command> <subcommand> [options]

Commands:
    categories   Manage product categories
    migrate      Database migrations

Examples:
    python -m cli migrate apply
    python -m cli categories seed
    python -m cli categories add Phones --parent 1
    python -m cli categories move 4 --parent 2
    python -m cli categories list
"""

import sys
import argparse
from cli import categories, migrate
from config import load_config
from errors import CategoryError
from services.base import Services
from logger import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cli",
        description="Storefront - product category management",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Show debug output"
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
        required=True,
    )

    categories.setup_parser(subparsers)
    migrate.setup_parser(subparsers)

    return parser


def main(argv=None):
    """Main CLI entry point with subcommands."""
    args = build_parser().parse_args(argv)

    if not hasattr(args, "func"):
        build_parser().print_help()
        sys.exit(1)

    config = load_config()
    logger = setup_logging(config, verbose=args.verbose)
    services = Services(config)

    try:
        if args.command == "migrate":
            # Migrate commands work on the database manager directly
            args.func(args, services.db_manager)
        else:
            args.func(args, services)
    except CategoryError as e:
        logger.error(f"{e.error_code}: {e.message}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
