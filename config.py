"""Configuration management for Storefront.

Reads configuration from ~/.config/storefront.toml (or the file named by the
STOREFRONT_CONFIG environment variable) and creates a default file if needed.

Example file:

    base_dir = "/home/me/data/storefront"
    enable_reset = false

    [database]
    filename = "storefront.db"
    slow_query_ms = 1000

    [logging]
    level = "INFO"
"""

import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional
import tomllib
import tomli_w

CONFIG_ENV_VAR = "STOREFRONT_CONFIG"


def _default_base_dir() -> Path:
    return Path.home() / "data" / "storefront"


@dataclass
class Config:
    """Application configuration."""

    base_dir: Path
    db_data_dir: Path
    db_filename: str
    log_level: str
    log_dir: Path
    slow_query_ms: int = 1000
    enable_reset: bool = False

    @property
    def db_path(self) -> Path:
        """Get the full database path (data_dir/filename)."""
        return self.db_data_dir / self.db_filename

    @classmethod
    def default(cls) -> "Config":
        """Create a Config with default values."""
        return cls.from_dict({})

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        """Build a Config from parsed TOML, filling in defaults.

        Directories not given explicitly live under base_dir.
        """
        base_dir = Path(data.get("base_dir", _default_base_dir()))
        database = data.get("database", {})
        logging_section = data.get("logging", {})

        return cls(
            base_dir=base_dir,
            db_data_dir=Path(database.get("data_dir", base_dir / "db")),
            db_filename=database.get("filename", "storefront.db"),
            log_level=logging_section.get("level", "INFO"),
            log_dir=Path(logging_section.get("log_dir", base_dir / "logs")),
            slow_query_ms=int(database.get("slow_query_ms", 1000)),
            enable_reset=bool(data.get("enable_reset", False)),
        )

    def to_dict(self) -> dict:
        """TOML structure of this config."""
        return {
            "base_dir": str(self.base_dir),
            "enable_reset": self.enable_reset,
            "database": {
                "data_dir": str(self.db_data_dir),
                "filename": self.db_filename,
                "slow_query_ms": self.slow_query_ms,
            },
            "logging": {
                "level": self.log_level,
                "log_dir": str(self.log_dir),
            },
        }


def get_config_path() -> Path:
    """Get the path to the config file."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "storefront.toml"


def get_migrations_dir() -> Path:
    """Get the path to the migrations directory.

    This is always relative to the code location, not configurable.
    """
    return Path(__file__).parent / "db" / "migrations"


def get_seed_file() -> Path:
    """Get the path to the bundled category seed file."""
    return Path(__file__).parent / "db" / "seed" / "categories.json"


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from file, creating default if it doesn't exist.

    Args:
        config_path: Optional explicit path; defaults to get_config_path().

    Returns:
        Config object with loaded or default values.
    """
    config_path = config_path or get_config_path()

    if not config_path.exists():
        config = Config.default()
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "wb") as f:
            tomli_w.dump(config.to_dict(), f)
        return config

    with open(config_path, "rb") as f:
        return Config.from_dict(tomllib.load(f))
