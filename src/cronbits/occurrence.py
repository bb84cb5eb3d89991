"""Earliest-occurrence search over naive wall-clock datetimes.

The search moves second -> minute -> hour -> day with bit scans against the
start value of each field. A field with no allowed value at or after its
current value carries into the next coarser field, and every finer field
restarts from its smallest allowed value. Days and months are then walked
with explicit month and day loops that account for month lengths, leap
years and the day-of-month/day-of-week special forms.

Day-of-month and day-of-week restrictions are combined with AND: a date
must satisfy both.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from cronbits.bitmask import ALL_BITS, find_first_set, get_bit
from cronbits.calendar_utils import (
    day_of_week,
    days_in_month,
    is_last_day_of_week,
    is_nth_day_of_week,
    move_to_nearest_weekday,
)
from cronbits.fields import FIELD_SPECS, CronField
from cronbits.parser import ExpressionFlag, ParsedExpression

logger = logging.getLogger(__name__)

TICK = timedelta(microseconds=1)

_SECONDS = FIELD_SPECS[CronField.SECONDS]
_MINUTES = FIELD_SPECS[CronField.MINUTES]
_HOURS = FIELD_SPECS[CronField.HOURS]
_DAYS_OF_MONTH = FIELD_SPECS[CronField.DAYS_OF_MONTH]
_MONTHS = FIELD_SPECS[CronField.MONTHS]


def _ceil_to_second(value: datetime) -> datetime:
    if value.microsecond == 0:
        return value
    return value.replace(microsecond=0) + timedelta(seconds=1)


def day_of_week_matches(
    expression: ParsedExpression,
    year: int,
    month: int,
    day: int,
    last_day_of_month: int,
) -> bool:
    """Check a date against the day-of-week mask and its ``L``/``#`` forms."""
    if expression.day_of_week == ALL_BITS:
        return True

    if not get_bit(expression.day_of_week, day_of_week(year, month, day)):
        return False

    if expression.has_flag(ExpressionFlag.DAY_OF_WEEK_LAST) and not is_last_day_of_week(
        day, last_day_of_month
    ):
        return False

    if expression.has_flag(ExpressionFlag.NTH_DAY_OF_WEEK) and not is_nth_day_of_week(
        day, expression.nth_day_of_week
    ):
        return False

    return True


def find_occurrence(
    expression: ParsedExpression,
    start: datetime,
    end: datetime,
    start_inclusive: bool,
) -> datetime | None:
    """Find the earliest matching wall-clock time in ``[start, end]``.

    Args:
        expression: Parsed expression to match.
        start: Naive lower bound.
        end: Naive inclusive upper bound. Years after ``end.year`` are never
            examined, which bounds the search for unsatisfiable expressions.
        start_inclusive: Whether ``start`` itself may be returned.

    Returns:
        The matching naive datetime, or None if there is none within bounds.
    """
    if start > end or (start == end and not start_inclusive):
        return None

    # start is at most end here, so neither step below can overflow.
    if not start_inclusive:
        start += TICK

    # Occurrences fall on whole seconds.
    start = _ceil_to_second(start)

    if start > end:
        return None

    end_year = end.year

    min_second = find_first_set(expression.second, _SECONDS.first, _SECONDS.last)
    min_minute = find_first_set(expression.minute, _MINUTES.first, _MINUTES.last)
    min_hour = find_first_set(expression.hour, _HOURS.first, _HOURS.last)
    min_day = find_first_set(expression.day_of_month, _DAYS_OF_MONTH.first, _DAYS_OF_MONTH.last)
    min_month = find_first_set(expression.month, _MONTHS.first, _MONTHS.last)

    nearest_weekday = expression.has_flag(ExpressionFlag.NEAREST_WEEKDAY)
    last_day_form = expression.has_flag(ExpressionFlag.DAY_OF_MONTH_LAST)

    year, month = start.year, start.month

    # Time of day on the start date; None means the field rolled over.
    second = find_first_set(expression.second, start.second, _SECONDS.last)
    minute = start.minute if second is not None else start.minute + 1
    minute = find_first_set(expression.minute, minute, _MINUTES.last)
    hour = start.hour if minute is not None else start.hour + 1
    hour = find_first_set(expression.hour, hour, _HOURS.last)
    day = start.day if hour is not None else start.day + 1

    # The nearest weekday may lie before the target day, so scan the whole month.
    if nearest_weekday:
        day = _DAYS_OF_MONTH.first

    day = find_first_set(expression.day_of_month, day, _DAYS_OF_MONTH.last)
    next_month = month if day is not None else month + 1

    while True:
        # Month phase: stay in the current month or roll to the next allowed one.
        candidate_month = find_first_set(expression.month, next_month, _MONTHS.last)
        if candidate_month != month:
            day = min_day
            if candidate_month is None:
                year += 1
                candidate_month = min_month
            month = candidate_month

        next_month = month + 1

        if year > end_year:
            logger.debug("No occurrence before %s", end)
            return None

        last_day_of_month = days_in_month(year, month)

        # Day phase: a break retries from the next allowed month.
        while day is not None and day <= last_day_of_month:
            if last_day_form:
                last_day = last_day_of_month - expression.last_month_offset
                if last_day < day:
                    break
                day = last_day

            if nearest_weekday:
                day = move_to_nearest_weekday(year, month, day, last_day_of_month)
                if not day_of_week_matches(expression, year, month, day, last_day_of_month):
                    break

            elif not day_of_week_matches(expression, year, month, day, last_day_of_month):
                day = find_first_set(expression.day_of_month, day + 1, _DAYS_OF_MONTH.last)
                continue

            # Time phase: later days start from the smallest allowed time.
            if hour is None or datetime(year, month, day) > start:
                hour, minute, second = min_hour, min_minute, min_second
            elif hour > start.hour:
                minute, second = min_minute, min_second
            elif minute > start.minute:
                second = min_second

            found = datetime(year, month, day, hour, minute, second)

            # A nearest-weekday shift can move the date before the start.
            if found < start:
                break

            return found if found <= end else None
