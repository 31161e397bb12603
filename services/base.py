"""Base services container for dependency injection."""

from config import Config
from db.manager import DatabaseManager


class Services:
    """Container for all application services.

    This class provides a centralized way to access all services and makes
    it easy to inject a test database.

    Args:
        config: Application configuration object.
        db_manager: Optional database manager for testing. If provided, the
            database settings in config are ignored.
    """

    def __init__(self, config: Config, db_manager=None):
        self.config = config
        self.db_manager = db_manager or DatabaseManager(config)

        # Lazy import to avoid circular dependencies
        from services.categories import CategoryService
        from services.transactions import TransactionService
        from services.summary import SummaryService

        self.categories = CategoryService(self.db_manager)
        self.transactions = TransactionService(self.db_manager)
        self.summary = SummaryService(self.db_manager)
