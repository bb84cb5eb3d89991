"""DST-aware occurrence search in a named timezone."""

from __future__ import annotations

import logging
from datetime import datetime, tzinfo

from cronbits.occurrence import TICK, find_occurrence
from cronbits.parser import ExpressionFlag, ParsedExpression
from cronbits.timezones import (
    get_ambiguous_end,
    get_daylight_end,
    get_daylight_start,
    get_standard_offset,
    get_standard_start,
    is_ambiguous_time,
    is_invalid_time,
)

logger = logging.getLogger(__name__)


class TimezoneScheduler:
    """Finds occurrences of an expression on the wall clock of a zone.

    The wall-clock search itself is timezone-free; this class picks the
    bounds for it around DST transitions and turns its result back into an
    aware datetime:

    - Inside a fall-back ambiguous interval the daylight part is searched
      first. The standard part is searched only when the expression recurs
      within an hour (``INTERVAL``), so a daily job does not fire twice.
    - A result inside a spring-forward gap moves to the start of daylight time.
    - A result inside an ambiguous interval takes the earlier, daylight offset.

    Example:
        >>> scheduler = TimezoneScheduler(parse_expression("0 2 * * *"), ceiling)
        >>> scheduler.next_occurrence(start, ZoneInfo("America/New_York"))
    """

    def __init__(self, expression: ParsedExpression, ceiling: datetime) -> None:
        self._expression = expression
        self._ceiling = ceiling

    def next_occurrence(
        self,
        zoned_start: datetime,
        zone: tzinfo,
        inclusive: bool = False,
    ) -> datetime | None:
        """Return the next occurrence as an aware datetime in ``zone``.

        Args:
            zoned_start: Aware start already expressed in ``zone``.
            zone: Zone whose wall clock the expression is evaluated on.
            inclusive: Whether ``zoned_start`` itself may be returned.
        """
        start = zoned_start.replace(tzinfo=None, fold=0)

        if is_ambiguous_time(zone, start):
            late_offset = get_standard_offset(zone, start)

            if zoned_start.utcoffset() != late_offset:
                early_end = get_daylight_end(zone, start)

                found = find_occurrence(self._expression, start, early_end, inclusive)
                if found is not None:
                    logger.debug("Occurrence %s in daylight part of ambiguous interval", found)
                    return found.replace(tzinfo=zone, fold=0)

                start = get_standard_start(zone, start)
                inclusive = True

            ambiguous_end = get_ambiguous_end(zone, start)

            if self._expression.has_flag(ExpressionFlag.INTERVAL):
                found = find_occurrence(self._expression, start, ambiguous_end - TICK, inclusive)
                if found is not None:
                    logger.debug("Occurrence %s in standard part of ambiguous interval", found)
                    return found.replace(tzinfo=zone, fold=1)

            start = ambiguous_end
            inclusive = True

        occurrence = find_occurrence(self._expression, start, self._ceiling, inclusive)
        if occurrence is None:
            return None

        if is_invalid_time(zone, occurrence):
            daylight_start = get_daylight_start(zone, occurrence)
            logger.debug("Occurrence %s is skipped by DST, using %s", occurrence, daylight_start)
            return daylight_start

        # fold=0 picks the earlier instant of an ambiguous wall-clock time.
        return occurrence.replace(tzinfo=zone, fold=0)
