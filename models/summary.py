"""Derived, non-persisted summary records."""

from dataclasses import dataclass, field
from typing import List

from models.category import Category


@dataclass
class CategoryBreakdown:
    """Aggregate of one category's transactions within a period.

    Attributes:
        category: Snapshot of the category as it was when summarized.
        total: Sum of transaction amounts.
        transaction_count: Number of transactions.
        percentage: Share of (total income + total expenses), 0-100.
    """

    category: Category
    total: float
    transaction_count: int
    percentage: float

    def to_dict(self) -> dict:
        return {
            "category": self.category.to_dict(),
            "total": self.total,
            "transaction_count": self.transaction_count,
            "percentage": self.percentage,
        }


@dataclass
class BudgetSummary:
    total_income: float = 0.0
    total_expenses: float = 0.0
    balance: float = 0.0
    category_breakdown: List[CategoryBreakdown] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "total_income": self.total_income,
            "total_expenses": self.total_expenses,
            "balance": self.balance,
            "category_breakdown": [b.to_dict() for b in self.category_breakdown],
        }
