# stockpos/services/periods.py
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple

from stockpos.exceptions import ValidationInputError

PERIODS = ("today", "week", "month", "custom")


def day_bounds(start: date, end: date) -> Tuple[datetime, datetime]:
    """[start 00:00, end+1 00:00) in UTC."""
    if end < start:
        raise ValidationInputError("date_to", "End date is before start date")
    lower = datetime.combine(start, time.min, tzinfo=timezone.utc)
    upper = datetime.combine(end + timedelta(days=1), time.min, tzinfo=timezone.utc)
    return lower, upper


def period_range(
    period: str,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    today: Optional[date] = None,
) -> Tuple[datetime, datetime]:
    """Half-open UTC datetime range for a named period.

    ``week`` covers the last seven days plus today, ``month`` starts on the
    first day of the current month and ``custom`` needs both dates.
    """
    today = today or datetime.now(timezone.utc).date()
    if period == "today":
        return day_bounds(today, today)
    if period == "week":
        return day_bounds(today - timedelta(days=7), today)
    if period == "month":
        return day_bounds(today.replace(day=1), today)
    if period == "custom":
        if date_from is None or date_to is None:
            raise ValidationInputError("date_from", "A custom period needs date_from and date_to")
        return day_bounds(date_from, date_to)
    raise ValidationInputError("period", f"Unknown period '{period}'")
