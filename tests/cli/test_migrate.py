"""Tests for applying migrations to a file-backed database."""

from cli.migrate import available_migrations, migrate, pending_migrations
from db.manager import DatabaseManager


def test_migrate_creates_schema(test_config):
    """Test that applying migrations creates both tables."""
    db_manager = DatabaseManager(test_config)

    applied = migrate(db_manager)

    assert applied == len(available_migrations(db_manager))
    assert test_config.db_path.exists()
    with db_manager.connect() as conn:
        tables = {
            row[0]
            for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
        }
        assert {"categories", "transactions", "schema_migrations"} <= tables
        assert pending_migrations(conn, db_manager) == []


def test_migrate_is_repeatable(test_config):
    """Test that a second migrate run applies nothing."""
    db_manager = DatabaseManager(test_config)

    migrate(db_manager)

    assert migrate(db_manager) == 0


def test_connections_enforce_foreign_keys(test_config):
    """Test that every connection has foreign key checks turned on."""
    db_manager = DatabaseManager(test_config)
    migrate(db_manager)

    with db_manager.connect() as conn:
        (enabled,) = conn.execute("PRAGMA foreign_keys").fetchone()

    assert enabled == 1


def test_services_work_on_migrated_file_database(test_config):
    """Test the services against a migrated on-disk database."""
    from services.base import Services

    migrate(DatabaseManager(test_config))
    services = Services(test_config)

    salary = services.categories.create("Salary", "income", "#27AE60")
    services.transactions.create(salary.id, 1000, "income", "Pay", "2024-03-05")

    summary = services.summary.summarize_month(3, 2024)
    assert summary.total_income == 1000.0
    assert summary.category_breakdown[0].percentage == 100.0
