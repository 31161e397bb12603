"""Monthly aggregation of transactions into budget summaries."""

from errors import storage_errors
from logger import get_logger
from models.category import Category
from models.period import Period, resolve_period
from models.summary import BudgetSummary, CategoryBreakdown
from models.types import CategoryType, TransactionType

logger = get_logger()

_TOTALS_QUERY = """
    SELECT type, SUM(amount) AS total
    FROM transactions
    WHERE date >= ? AND date < ?
    GROUP BY type
"""

# Only income/expense rows are counted so that unknown types contribute
# nothing anywhere in the summary, matching the totals above.
_BREAKDOWN_QUERY = """
    SELECT
        c.id, c.name, c.type, c.color, c.icon, c.parent_id, c.is_active,
        c.created_at, c.updated_at,
        SUM(t.amount) AS total,
        COUNT(t.id) AS transaction_count
    FROM transactions t
    JOIN categories c ON t.category_id = c.id
    WHERE t.date >= ? AND t.date < ?
      AND t.type IN (?, ?)
    GROUP BY c.id
    ORDER BY total DESC, c.id
"""


class SummaryService:
    """Service computing income, expense and per-category totals."""

    def __init__(self, db_manager):
        """Initialize the summary service.

        Args:
            db_manager: Database manager instance for database operations.
        """
        self.db_manager = db_manager

    def summarize_month(self, month: int, year: int) -> BudgetSummary:
        """Summarize a calendar month. See ``summarize``."""
        return self.summarize(resolve_period(month, year))

    def summarize(self, period: Period) -> BudgetSummary:
        """Compute the budget summary for a period.

        Totals are summed per transaction type; rows whose type is neither
        income nor expense are ignored. Each category's percentage is its
        share of total income plus total expenses, or 0.0 for every
        category when that grand total is zero. Percentages are not
        normalized, so they only add up to 100 when every transaction's
        type matches its category's type.

        Both queries run in one read transaction and so see the same
        snapshot of the database.

        Args:
            period: Half-open date range to summarize.

        Returns:
            BudgetSummary with the breakdown ordered by total (descending),
            then category ID.
        """
        start, end = period.as_params()

        with storage_errors("summarize period"), self.db_manager.connect() as conn:
            conn.execute("BEGIN")
            try:
                totals = conn.execute(_TOTALS_QUERY, (start, end)).fetchall()
                breakdown_rows = conn.execute(
                    _BREAKDOWN_QUERY,
                    (
                        start,
                        end,
                        TransactionType.INCOME.value,
                        TransactionType.EXPENSE.value,
                    ),
                ).fetchall()
            finally:
                # Read-only, nothing to keep
                conn.rollback()

        total_income = 0.0
        total_expenses = 0.0
        for transaction_type, total in totals:
            if transaction_type == TransactionType.INCOME.value:
                total_income = float(total)
            elif transaction_type == TransactionType.EXPENSE.value:
                total_expenses = float(total)
            else:
                logger.debug(
                    f"Ignoring {total} of unknown transaction type {transaction_type!r}"
                )

        grand_total = total_income + total_expenses

        category_breakdown = []
        for row in breakdown_rows:
            total = float(row[9])
            percentage = (total / grand_total) * 100 if grand_total > 0 else 0.0
            category_breakdown.append(
                CategoryBreakdown(
                    category=Category(
                        id=row[0],
                        name=row[1],
                        category_type=CategoryType(row[2]),
                        color=row[3],
                        icon=row[4],
                        parent_id=row[5],
                        is_active=bool(row[6]),
                        created_at=row[7],
                        updated_at=row[8],
                    ),
                    total=total,
                    transaction_count=row[10],
                    percentage=percentage,
                )
            )

        return BudgetSummary(
            total_income=total_income,
            total_expenses=total_expenses,
            balance=total_income - total_expenses,
            category_breakdown=category_breakdown,
        )
