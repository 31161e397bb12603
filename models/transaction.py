from dataclasses import dataclass
from datetime import date
from typing import ClassVar, Optional

from models.types import DeletionPolicy, TransactionType


@dataclass
class Transaction:
    deletion_policy: ClassVar[DeletionPolicy] = DeletionPolicy.HARD

    id: int
    category_id: int
    amount: float  # always positive, meaning comes from type
    type: TransactionType
    description: str
    date: date
    notes: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert transaction to a plain dictionary (dates as ISO strings)."""
        return {
            "id": self.id,
            "category_id": self.category_id,
            "amount": self.amount,
            "type": self.type.value,
            "description": self.description,
            "date": self.date.isoformat(),
            "notes": self.notes,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
