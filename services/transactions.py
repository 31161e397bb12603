"""Transaction service for database operations."""

import math
from datetime import date, datetime
from typing import List, Optional

from errors import InvalidArgument, NoOpUpdate, NotFound, storage_errors
from logger import get_logger
from models.period import Period
from models.transaction import Transaction
from models.types import TransactionType
from services import clock
from services.updates import TransactionUpdate, compose_update

logger = get_logger()

# SQL Query Constants
_TRANSACTION_SELECT_FIELDS = """id, category_id, amount, type, description, date,
       notes, created_at, updated_at"""

_TRANSACTION_INSERT_FIELDS = """category_id, amount, type, description, date,
    notes, created_at, updated_at"""

# Automatically generate placeholders from field count
_TRANSACTION_INSERT_PLACEHOLDERS = (
    f"({', '.join(['?'] * len(_TRANSACTION_INSERT_FIELDS.split(',')))})"
)

# Fields that may never be set to None through a partial update
_REQUIRED_FIELDS = {"category_id", "amount", "transaction_type", "description", "date"}


class TransactionService:
    """Service for managing transactions.

    Every write validates that the referenced category exists, is active
    and has the same income/expense type as the transaction.
    """

    def __init__(self, db_manager):
        """Initialize the transaction service.

        Args:
            db_manager: Database manager instance for database operations.
        """
        self.db_manager = db_manager

    def create(
        self,
        category_id: int,
        amount: float,
        transaction_type,
        description: str,
        date,
        notes: Optional[str] = None,
    ) -> Transaction:
        """Create a single transaction in the database.

        Args:
            category_id: ID of an active category with the same type.
            amount: Non-negative magnitude.
            transaction_type: TransactionType or its string value.
            description: Free text; stored verbatim.
            date: date object or "YYYY-MM-DD" string.
            notes: Optional free text.

        Returns:
            The created Transaction with id and timestamps populated.

        Raises:
            InvalidArgument: If amount, type or date are malformed, or the
                category has a different type.
            NotFound: If the category does not exist or is inactive.
            StorageError: If the insert fails.
        """
        category_id = _parse_category_id(category_id)
        transaction_type = TransactionType.parse(transaction_type)
        amount = _parse_amount(amount)
        txn_date = _parse_date(date)
        description = "" if description is None else str(description)
        now = clock.now_iso()

        with storage_errors("create transaction"), self.db_manager.connect() as conn:
            self._require_category(conn, category_id, transaction_type)

            cursor = conn.execute(
                f"""
                INSERT INTO transactions ({_TRANSACTION_INSERT_FIELDS})
                VALUES {_TRANSACTION_INSERT_PLACEHOLDERS}
                """,
                (
                    category_id,
                    amount,
                    transaction_type.value,
                    description,
                    txn_date.isoformat(),
                    notes,
                    now,
                    now,
                ),
            )
            conn.commit()
            transaction_id = cursor.lastrowid

        logger.debug(f"Created transaction {transaction_id} in category {category_id}")
        return Transaction(
            id=transaction_id,
            category_id=category_id,
            amount=amount,
            type=transaction_type,
            description=description,
            date=txn_date,
            notes=notes,
            created_at=now,
            updated_at=now,
        )

    def find(self, transaction_id: int) -> Optional[Transaction]:
        """Get a single transaction by ID.

        Args:
            transaction_id: The transaction ID.

        Returns:
            Transaction object if found, None otherwise.

        Raises:
            InvalidArgument: If the stored row has an unknown type.
        """
        with storage_errors("find transaction"), self.db_manager.connect() as conn:
            return self._find(conn, transaction_id)

    def list_in_period(
        self,
        period: Period,
        *,
        category_ids: Optional[List[int]] = None,
        transaction_type=None,
        search: Optional[str] = None,
        min_amount: Optional[float] = None,
        max_amount: Optional[float] = None,
    ) -> List[Transaction]:
        """Get transactions within a period.

        Args:
            period: Half-open date range; rows dated on period.end are excluded.
            category_ids: Optional list of category IDs to filter by.
            transaction_type: Optional income/expense filter.
            search: Optional case-insensitive substring of description or notes.
            min_amount: Optional inclusive lower bound on amount.
            max_amount: Optional inclusive upper bound on amount.

        Returns:
            List of Transaction objects, newest date first, then by ID.
        """
        query = f"""
            SELECT {_TRANSACTION_SELECT_FIELDS}
            FROM transactions
            WHERE date >= ? AND date < ?
        """
        params = list(period.as_params())

        if category_ids:
            placeholders = ", ".join(["?"] * len(category_ids))
            query += f" AND category_id IN ({placeholders})"
            params.extend(category_ids)

        if transaction_type is not None:
            query += " AND type = ?"
            params.append(TransactionType.parse(transaction_type).value)

        if search:
            pattern = f"%{_escape_like(search)}%"
            query += (
                " AND (description LIKE ? ESCAPE '\\'"
                " OR COALESCE(notes, '') LIKE ? ESCAPE '\\')"
            )
            params.extend([pattern, pattern])

        if min_amount is not None:
            query += " AND amount >= ?"
            params.append(float(min_amount))

        if max_amount is not None:
            query += " AND amount <= ?"
            params.append(float(max_amount))

        query += " ORDER BY date DESC, id"

        with storage_errors("list transactions"), self.db_manager.connect() as conn:
            rows = conn.execute(query, params).fetchall()

        transactions = []
        for row in rows:
            try:
                transactions.append(self._row_to_transaction(row))
            except ValueError:
                logger.warning(
                    f"Skipping transaction {row[0]} with unknown type {row[3]!r}"
                )
        return transactions

    def update_partial(
        self, transaction_id: int, changes: TransactionUpdate
    ) -> Transaction:
        """Apply only the supplied fields of ``changes`` to a transaction.

        Fields left UNSET keep their stored value; updated_at is refreshed
        whenever a write happens. When nothing is supplied no write is
        made and the stored transaction is returned as-is.

        Args:
            transaction_id: The transaction ID to update.
            changes: TransactionUpdate with the fields to change.

        Returns:
            The transaction as stored after the update.

        Raises:
            InvalidArgument: If a supplied value is malformed or the
                resulting category/type pair does not match, or the
                stored type is unknown and no new type is supplied.
            NotFound: If the transaction, or a newly referenced category,
                does not exist.
            StorageError: If the update fails.
        """
        values = self._normalize_changes(changes.supplied())

        with storage_errors("update transaction"), self.db_manager.connect() as conn:
            row = self._find_row(conn, transaction_id)
            if row is None:
                raise NotFound(f"Transaction with ID {transaction_id} not found")

            # A row with an unknown stored type can only be repaired by
            # supplying a new transaction_type.
            stored_type = _stored_type(row)
            if stored_type is None and "transaction_type" not in values:
                raise InvalidArgument(
                    f"Transaction {transaction_id} has unknown type {row[3]!r}; "
                    "a transaction type must be supplied"
                )

            if "category_id" in values or "transaction_type" in values:
                self._require_category(
                    conn,
                    values.get("category_id", row[1]),
                    TransactionType(values.get("transaction_type", stored_type)),
                )

            try:
                sql, params = compose_update(
                    "transactions", transaction_id, values, clock.now_iso()
                )
            except NoOpUpdate:
                logger.debug(f"No fields supplied for transaction {transaction_id}")
                return self._row_to_transaction(row)

            conn.execute(sql, params)
            conn.commit()

            logger.debug(
                f"Updated transaction {transaction_id}: {', '.join(sorted(values))}"
            )
            return self._find(conn, transaction_id)

    def delete(self, transaction_id: int) -> bool:
        """Physically delete a transaction.

        Args:
            transaction_id: The transaction ID to delete.

        Returns:
            True if a row was deleted, False if no transaction had this ID.
        """
        with storage_errors("delete transaction"), self.db_manager.connect() as conn:
            cursor = conn.execute(
                "DELETE FROM transactions WHERE id = ?", (transaction_id,)
            )
            conn.commit()
            deleted = cursor.rowcount > 0

        if deleted:
            logger.debug(f"Deleted transaction {transaction_id}")
        else:
            logger.debug(f"Transaction {transaction_id} not present, nothing deleted")
        return deleted

    def _normalize_changes(self, supplied: dict) -> dict:
        """Validate supplied partial-update values and convert them for storage."""
        values = {}
        for field_name, value in supplied.items():
            if value is None and field_name in _REQUIRED_FIELDS:
                raise InvalidArgument(f"{field_name} cannot be cleared")

            if field_name == "amount":
                value = _parse_amount(value)
            elif field_name == "transaction_type":
                value = TransactionType.parse(value).value
            elif field_name == "date":
                value = _parse_date(value).isoformat()
            elif field_name == "description":
                value = str(value)
            elif field_name == "category_id":
                value = _parse_category_id(value)

            values[field_name] = value
        return values

    def _require_category(
        self, conn, category_id: int, transaction_type: TransactionType
    ) -> None:
        row = conn.execute(
            "SELECT type, is_active FROM categories WHERE id = ?", (category_id,)
        ).fetchone()

        if row is None or not row[1]:
            raise NotFound(f"Active category with ID {category_id} not found")

        if row[0] != transaction_type.value:
            raise InvalidArgument(
                f"Category {category_id} is an {row[0]} category, "
                f"cannot hold an {transaction_type.value} transaction"
            )

    def _find(self, conn, transaction_id: int) -> Optional[Transaction]:
        row = self._find_row(conn, transaction_id)
        if row is None:
            return None
        if _stored_type(row) is None:
            raise InvalidArgument(
                f"Transaction {transaction_id} has unknown type {row[3]!r}"
            )
        return self._row_to_transaction(row)

    def _find_row(self, conn, transaction_id: int) -> Optional[tuple]:
        cursor = conn.execute(
            f"""
            SELECT {_TRANSACTION_SELECT_FIELDS}
            FROM transactions
            WHERE id = ?
            """,
            (transaction_id,),
        )
        return cursor.fetchone()

    def _row_to_transaction(self, row: tuple) -> Transaction:
        """Convert a database row to a Transaction object."""
        return Transaction(
            id=row[0],
            category_id=row[1],
            amount=float(row[2]),
            type=TransactionType(row[3]),
            description=row[4],
            date=date.fromisoformat(row[5]),
            notes=row[6],
            created_at=row[7],
            updated_at=row[8],
        )


def _stored_type(row: tuple) -> Optional[TransactionType]:
    try:
        return TransactionType(row[3])
    except ValueError:
        return None


def _parse_category_id(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidArgument(f"Invalid category ID: {value!r}") from None


def _parse_amount(value) -> float:
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise InvalidArgument(f"Invalid amount: {value!r}") from None
    if math.isnan(amount) or math.isinf(amount) or amount < 0:
        raise InvalidArgument(f"Amount must be a non-negative number, got {value!r}")
    return amount


def _parse_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip(), "%Y-%m-%d").date()
    except ValueError:
        raise InvalidArgument(f"Invalid date {value!r}; expected YYYY-MM-DD") from None


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
