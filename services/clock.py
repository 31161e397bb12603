"""Timestamp source for created_at/updated_at columns."""

from datetime import datetime, timezone


def now_iso() -> str:
    """Current instant as an ISO-8601 UTC string."""
    return datetime.now(timezone.utc).isoformat()
