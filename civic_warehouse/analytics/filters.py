"""Date-window filters for analytics queries.

Bounds become bound-parameter predicates on a column; user input never
reaches the SQL text.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timezone

from sqlalchemy import ColumnElement, Select

from civic_warehouse.errors import InvalidDateWindow


def _parse_bound(value: str, end_of_day: bool) -> datetime:
    value = value.strip()
    try:
        day = date.fromisoformat(value)
    except ValueError:
        # Not date-only; parse as a full timestamp below
        day = None
    if day is not None:
        if end_of_day:
            return datetime.combine(day, time.max, tzinfo=timezone.utc)
        return datetime.combine(day, time.min, tzinfo=timezone.utc)

    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        raise InvalidDateWindow(f"Invalid date {value!r}: expected ISO-8601") from e

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


@dataclass(frozen=True)
class DateWindow:
    """Inclusive window on report creation time; None means unbounded."""

    start: datetime | None = None
    end: datetime | None = None

    def __post_init__(self):
        if self.start and self.end and self.start > self.end:
            raise InvalidDateWindow("startDate must not be after endDate")

    @classmethod
    def from_params(cls, start_date: str | None = None, end_date: str | None = None) -> "DateWindow":
        """Build from ISO date/datetime strings. A date-only end covers the whole day."""
        return cls(
            start=_parse_bound(start_date, end_of_day=False) if start_date else None,
            end=_parse_bound(end_date, end_of_day=True) if end_date else None,
        )

    def predicates(self, column) -> list[ColumnElement[bool]]:
        conditions = []
        if self.start is not None:
            conditions.append(column >= self.start)
        if self.end is not None:
            conditions.append(column <= self.end)
        return conditions

    def apply(self, query: Select, column) -> Select:
        conditions = self.predicates(column)
        return query.where(*conditions) if conditions else query
