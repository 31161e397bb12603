"""Transaction analysis and export tools."""

import csv
import re
from typing import Dict, Iterable, List, TextIO

from models.category import Category
from models.period import resolve_period
from models.transaction import Transaction

CSV_COLUMNS = ["date", "type", "category", "description", "amount", "notes"]

_FORMULA_TRIGGERS = ("=", "+", "-", "@", "\t", "\r")
_DANGEROUS_PATTERNS = [
    r"^cmd\s*",
    r"^powershell\s*",
    r"^http[s]?://",
]


def get_year_overview(services, year: int) -> Dict[str, Dict]:
    """Summarize every month of a year.

    Args:
        services: Services container with the summary service.
        year: Year to summarize.

    Returns:
        Dictionary with:
        - "months": month keys ("YYYY/MM") mapped to BudgetSummary objects,
          January first
        - "total_income": Sum of monthly income
        - "total_expenses": Sum of monthly expenses
        - "balance": total_income - total_expenses

    Example:
        {
            "months": {
                "2024/01": BudgetSummary(total_income=1000.0, ...),
                ...
                "2024/12": BudgetSummary(...),
            },
            "total_income": 12000.0,
            "total_expenses": 8000.0,
            "balance": 4000.0,
        }
    """
    months = {}
    for month in range(1, 13):
        period = resolve_period(month, year)
        months[period.key] = services.summary.summarize(period)

    total_income = sum(s.total_income for s in months.values())
    total_expenses = sum(s.total_expenses for s in months.values())

    return {
        "months": months,
        "total_income": total_income,
        "total_expenses": total_expenses,
        "balance": total_income - total_expenses,
    }


def sanitize_csv_value(value: str) -> str:
    """Prefix values that a spreadsheet would evaluate as formulas with a tab."""
    if not value or value.strip() == "":
        return ""

    value = value.strip()

    if value.startswith(_FORMULA_TRIGGERS):
        return "\t" + value

    for pattern in _DANGEROUS_PATTERNS:
        if re.match(pattern, value, re.IGNORECASE):
            return "\t" + value

    return value


def write_transactions_csv(
    transactions: Iterable[Transaction],
    categories: List[Category],
    fh: TextIO,
) -> int:
    """Write transactions as CSV rows.

    Args:
        transactions: Transactions to export, written in the given order.
        categories: Categories used to resolve category names. Transactions
            whose category is missing are labelled with the raw ID.
        fh: Text file handle opened with newline="".

    Returns:
        Number of transaction rows written (header excluded).
    """
    names = {c.id: c.name for c in categories}
    writer = csv.writer(fh)
    writer.writerow(CSV_COLUMNS)

    count = 0
    for t in transactions:
        writer.writerow(
            [
                t.date.isoformat(),
                t.type.value,
                sanitize_csv_value(names.get(t.category_id, f"#{t.category_id}")),
                sanitize_csv_value(t.description),
                f"{t.amount:.2f}",
                sanitize_csv_value(t.notes or ""),
            ]
        )
        count += 1

    return count
