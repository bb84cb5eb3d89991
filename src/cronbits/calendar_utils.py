"""Calendar arithmetic used by the occurrence search.

Weekdays use the cron numbering: 0 is Sunday, 6 is Saturday.
"""

from __future__ import annotations

import calendar
from datetime import date

SUNDAY = 0
SATURDAY = 6


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def day_of_week(year: int, month: int, day: int) -> int:
    """Return the cron weekday (0 = Sunday) of a date."""
    # Python weekday: Monday=0, Sunday=6
    return (date(year, month, day).weekday() + 1) % 7


def is_last_day_of_week(day: int, last_day_of_month: int) -> bool:
    """Check that no later day of the month shares this day's weekday."""
    return day + 7 > last_day_of_month


def is_nth_day_of_week(day: int, nth: int) -> bool:
    """Check that ``day`` is the ``nth`` occurrence of its weekday in the month."""
    return (day - 1) // 7 + 1 == nth


def move_to_nearest_weekday(year: int, month: int, day: int, last_day_of_month: int) -> int:
    """Move a weekend day to the closest Monday-Friday in the same month.

    Saturday moves back to Friday unless it is the 1st (then forward to
    Monday the 3rd). Sunday moves forward to Monday unless it is the last
    day of the month (then back to Friday).
    """
    weekday = day_of_week(year, month, day)

    if weekday == SATURDAY:
        return day + 2 if day == 1 else day - 1

    if weekday == SUNDAY:
        return day - 2 if day == last_day_of_month else day + 1

    return day
