"""Closed value types shared by categories and transactions."""

from enum import Enum

from errors import InvalidArgument


class TransactionType(str, Enum):
    """Whether money came in or went out. Amounts are always magnitudes."""

    INCOME = "income"
    EXPENSE = "expense"

    @classmethod
    def parse(cls, value) -> "TransactionType":
        """Coerce a string (or an existing member) into a TransactionType.

        Raises:
            InvalidArgument: If value is not "income" or "expense".
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidArgument(
                f"Unknown type {value!r}; expected 'income' or 'expense'"
            ) from None


# Categories use the same income/expense split as transactions.
CategoryType = TransactionType


class DeletionPolicy(Enum):
    """How an entity is removed from the store."""

    SOFT = "soft"  # flip is_active, keep the row
    HARD = "hard"  # physical DELETE
