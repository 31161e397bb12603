"""Partial update composition.

A partial update changes only the fields a caller explicitly supplied.
``UNSET`` marks a field as absent, which is different from supplying
``None`` (for example to clear a transaction's notes).

Column names are taken from a fixed whitelist and every value is bound
as a query parameter, so no caller-provided text ever becomes SQL.
"""

from dataclasses import dataclass, fields
from typing import Any, Dict, List, Tuple

from errors import InvalidArgument, NoOpUpdate


class _Unset:
    """Sentinel type for fields that were not supplied."""

    def __repr__(self):
        return "UNSET"

    def __bool__(self):
        return False


UNSET = _Unset()

# field name -> column name, per table
_UPDATABLE_COLUMNS = {
    "transactions": {
        "category_id": "category_id",
        "amount": "amount",
        "transaction_type": "type",
        "description": "description",
        "date": "date",
        "notes": "notes",
    },
}


@dataclass
class TransactionUpdate:
    """Optional new values for a transaction; anything left UNSET is kept."""

    category_id: Any = UNSET
    amount: Any = UNSET
    transaction_type: Any = UNSET
    description: Any = UNSET
    date: Any = UNSET
    notes: Any = UNSET

    def supplied(self) -> Dict[str, Any]:
        """Return only the fields that were explicitly supplied."""
        result = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not UNSET:
                result[f.name] = value
        return result


def compose_update(
    table: str, record_id: int, supplied: Dict[str, Any], updated_at: str
) -> Tuple[str, List[Any]]:
    """Build a parameterized UPDATE for the supplied fields.

    Args:
        table: Table to update; must have a whitelist entry.
        record_id: Primary key of the row to update.
        supplied: Field name to already-normalized value.
        updated_at: Timestamp written to updated_at alongside the fields.

    Returns:
        Tuple of (sql, params). The SQL only ever contains whitelisted
        column names and ``?`` placeholders.

    Raises:
        NoOpUpdate: If no fields were supplied.
        InvalidArgument: If a field is not updatable for this table.
    """
    if table not in _UPDATABLE_COLUMNS:
        raise InvalidArgument(f"Table {table!r} does not support partial updates")
    if not supplied:
        raise NoOpUpdate(f"No fields supplied for {table} {record_id}")

    columns = _UPDATABLE_COLUMNS[table]
    unknown = set(supplied) - set(columns)
    if unknown:
        raise InvalidArgument(f"Unsupported field names: {sorted(unknown)}")

    assignments = []
    params = []
    # Iterate the whitelist, not the input, for a stable column order
    for field_name, column in columns.items():
        if field_name in supplied:
            assignments.append(f"{column} = ?")
            params.append(supplied[field_name])

    assignments.append("updated_at = ?")
    params.append(updated_at)
    params.append(record_id)

    sql = f"UPDATE {table} SET {', '.join(assignments)} WHERE id = ?"
    return sql, params
