"""Helper utilities for tests."""

from pathlib import Path
import sqlite3


def run_migrations(conn: sqlite3.Connection, migrations_dir: Path) -> None:
    """Run all SQL migrations in order.

    Args:
        conn: SQLite connection to run migrations against.
        migrations_dir: Path to directory containing .sql migration files.
    """
    for migration_file in sorted(migrations_dir.glob("*.sql")):
        conn.executescript(migration_file.read_text())

    conn.commit()


def insert_raw_transaction(
    conn: sqlite3.Connection,
    category_id: int,
    amount: float,
    transaction_type: str,
    date: str,
    description: str = "raw",
) -> int:
    """Insert a transaction row directly, bypassing service validation.

    Used to reproduce rows written by other front ends, e.g. with an
    unknown type or a type that disagrees with the category.

    Returns:
        The new row ID.
    """
    cursor = conn.execute(
        """
        INSERT INTO transactions
            (category_id, amount, type, description, date, notes, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?, NULL, '2024-01-01T00:00:00+00:00', '2024-01-01T00:00:00+00:00')
        """,
        (category_id, amount, transaction_type, description, date),
    )
    conn.commit()
    return cursor.lastrowid
