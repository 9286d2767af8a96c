"""Current-date injection and calendar helpers."""

import calendar
from datetime import date
from typing import Callable

from insurance_backoffice.errors import InvalidArgumentError

# Every date-dependent rule takes its "today" from a clock instead of the wall clock
Clock = Callable[[], date]


def system_today() -> date:
    return date.today()


def fixed_clock(today: date) -> Clock:
    """Clock that always returns the given date."""
    return lambda: today


def add_months(start: date, months: int) -> date:
    """Add calendar months, clamping the day to the end of the target month.

    >>> add_months(date(2025, 1, 15), 12)
    datetime.date(2026, 1, 15)
    >>> add_months(date(2025, 1, 31), 1)
    datetime.date(2025, 2, 28)
    """
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def parse_date(value: date | str | None, field: str) -> date | None:
    """Accept a date or an ISO ``YYYY-MM-DD`` string; None passes through."""
    if value is None or isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise InvalidArgumentError(
            f"Valid {field.replace('_', ' ')} required (YYYY-MM-DD)",
            details={"field": field, "value": value},
        ) from None
