#!/usr/bin/env python3
"""Reset script for Storefront.

Deletes the data directory (database and logs), then runs the migrations so
an empty categories table is ready. Only runs when enable_reset = true is set
in the config file.

Usage:
    python -m scripts.reset [--yes]
"""

import argparse
import shutil
import sys

from config import get_config_path, load_config
from db.manager import DatabaseManager
from cli.migrate import apply_pending


def reset(assume_yes: bool = False):
    """Delete all Storefront data and recreate the schema."""
    config = load_config()

    if not config.enable_reset:
        print(f"Reset is disabled. Set enable_reset = true in {get_config_path()}")
        sys.exit(1)

    print(f"Data directory: {config.base_dir}")
    print(f"Database:       {config.db_path}")
    print(f"Logs:           {config.log_dir}")

    if not assume_yes:
        response = input("\nThis deletes every category. Continue? (yes/no): ")
        if response.strip().lower() != "yes":
            print("Reset cancelled.")
            return

    if config.base_dir.exists():
        shutil.rmtree(config.base_dir)
        print(f"✓ Deleted {config.base_dir}")

    applied = apply_pending(DatabaseManager(config))
    print(f"✓ Applied {len(applied)} migration(s); database ready at {config.db_path}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Reset Storefront data")
    parser.add_argument("--yes", action="store_true", help="Skip confirmation")
    reset(parser.parse_args().yes)
