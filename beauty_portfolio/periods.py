"""Date and period helpers shared by scheduling, analytics and the HTTP layer.

All datetimes handled here are naive salon-local wall-clock values, matching
how appointment times are stored.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

DAILY = "daily"
WEEKLY = "weekly"
MONTHLY = "monthly"
PERIODS = (DAILY, WEEKLY, MONTHLY)


@dataclass(frozen=True)
class DateRange:
    """Inclusive interval ``[start, end]``."""

    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end

    def length_in_days(self) -> int:
        """Whole days between the bounds, partial days dropped."""
        return (self.end - self.start).days

    def previous(self) -> "DateRange":
        """Range of the same length ending the day before ``start``."""
        previous_end = self.start - timedelta(days=1)
        previous_start = previous_end - timedelta(days=self.length_in_days())
        return DateRange(previous_start, previous_end)


def day_bounds(day: date) -> tuple[datetime, datetime]:
    return datetime.combine(day, time.min), datetime.combine(day, time.max)


def month_bounds(moment: datetime) -> tuple[datetime, datetime]:
    first = datetime.combine(moment.date().replace(day=1), time.min)
    next_month = (first + timedelta(days=32)).replace(day=1)
    return first, next_month - timedelta(microseconds=1)


def week_start(day: date) -> date:
    # ISO weeks start on Monday
    return day - timedelta(days=day.weekday())


def bucket_key(moment: datetime, period: str = DAILY) -> str:
    if period == WEEKLY:
        return week_start(moment.date()).isoformat()
    if period == MONTHLY:
        return moment.strftime("%Y-%m-01")
    return moment.date().isoformat()


def parse_date(value: str | None) -> date | None:
    """Parse ``YYYY-MM-DD`` (or a full ISO datetime) into a date; None when invalid."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.strip()).date()
    except (ValueError, TypeError):
        return None


def parse_datetime(value: str | None) -> datetime | None:
    """Parse an ISO datetime into a naive salon-local datetime; None when invalid."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except (ValueError, TypeError, AttributeError):
        return None
    # Clients send wall-clock time; any offset is dropped, not converted
    return parsed.replace(tzinfo=None)


def parse_range(start_value: str | None, end_value: str | None) -> DateRange | None:
    """Build a DateRange from two ISO strings.

    A bare date as the end bound is widened to the end of that day so the
    whole day is included. Returns None if either bound is missing or invalid.
    """
    start = parse_datetime(start_value)
    end = parse_datetime(end_value)
    if start is None or end is None:
        return None
    if len(end_value.strip()) == 10:
        end = datetime.combine(end.date(), time.max)
    return DateRange(start, end)
