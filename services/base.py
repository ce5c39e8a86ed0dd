"""Base services container for dependency injection."""

from config import Config
from db.manager import DatabaseManager


class Services:
    """Container for all application services.

    The database manager is the only shared storage capability. It is built
    here (or injected for tests) and passed to each service, so no service
    reaches for module-level connection state.

    Args:
        config: Application configuration object.
        db_manager: Optional database manager for testing. If provided, it is
                    used instead of one built from config.
    """

    def __init__(self, config: Config, db_manager=None):
        self.config = config
        self.db_manager = db_manager or DatabaseManager(config)

        # Lazy import to avoid circular dependencies
        from services.categories import CategoryStore

        self.categories = CategoryStore(self.db_manager)
