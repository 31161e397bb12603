"""Calendar month periods used to scope queries."""

from dataclasses import dataclass
from datetime import date
from typing import Tuple

from errors import InvalidArgument

# Years whose December still rolls over into a representable date
MIN_YEAR = 1
MAX_YEAR = 9998


@dataclass(frozen=True)
class Period:
    """A half-open date interval ``[start, end)``."""

    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day < self.end

    def as_params(self) -> Tuple[str, str]:
        """ISO bounds for binding into ``date >= ? AND date < ?``."""
        return self.start.isoformat(), self.end.isoformat()

    @property
    def key(self) -> str:
        """Month label in "YYYY/MM" form."""
        return f"{self.start.year:04d}/{self.start.month:02d}"

    def next(self) -> "Period":
        """The following month. Raises InvalidArgument past December of MAX_YEAR."""
        if self.end.year > MAX_YEAR:
            raise InvalidArgument(f"No month after {self.key}")
        return resolve_period(self.end.month, self.end.year)

    def previous(self) -> "Period":
        """The preceding month. Raises InvalidArgument before January of MIN_YEAR."""
        if self.start.month == 1:
            if self.start.year <= MIN_YEAR:
                raise InvalidArgument(f"No month before {self.key}")
            return resolve_period(12, self.start.year - 1)
        return resolve_period(self.start.month - 1, self.start.year)


def resolve_period(month: int, year: int) -> Period:
    """Resolve a calendar month into its half-open date range.

    December rolls over into January 1st of the following year; every
    other month ends on the first of the next month, so month lengths and
    leap years need no special handling.

    Args:
        month: Month number, 1-12.
        year: Four digit year.

    Returns:
        Period whose start is the first of the month and whose end is the
        first of the following month.

    Raises:
        InvalidArgument: If month is outside 1-12 or year cannot roll over.
    """
    if isinstance(month, bool) or not isinstance(month, int):
        raise InvalidArgument(f"Month must be an integer, got {month!r}")
    if isinstance(year, bool) or not isinstance(year, int):
        raise InvalidArgument(f"Year must be an integer, got {year!r}")
    if not 1 <= month <= 12:
        raise InvalidArgument(f"Month must be between 1 and 12, got {month}")
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise InvalidArgument(f"Year out of range: {year}")

    start = date(year, month, 1)
    if month == 12:
        end = date(year + 1, 1, 1)
    else:
        end = date(year, month + 1, 1)

    return Period(start=start, end=end)
