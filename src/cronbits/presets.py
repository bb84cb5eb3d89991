"""Predefined cron expressions and the ``@`` macro table.

Each macro is parsed once, when this module is first imported, and the
same immutable instance is shared by every expression that names it.

Usage:
    >>> from cronbits.presets import DAILY
    >>> DAILY.get_next_occurrence(start)
    >>> CronExpression.parse("@daily").parsed is DAILY.parsed
    True
"""

from __future__ import annotations

from cronbits.expression import CronExpression
from cronbits.parser import ParsedExpression

# Every year on January 1st at midnight
YEARLY = CronExpression.parse("0 0 1 1 *")
ANNUALLY = YEARLY

# First day of every month at midnight
MONTHLY = CronExpression.parse("0 0 1 * *")

# Every Sunday at midnight
WEEKLY = CronExpression.parse("0 0 * * 0")

# Every day at midnight
DAILY = CronExpression.parse("0 0 * * *")
MIDNIGHT = DAILY

# Every hour at minute 0
HOURLY = CronExpression.parse("0 * * * *")

# Every minute
EVERY_MINUTE = CronExpression.parse("* * * * *")

# Every second (6-field cron)
EVERY_SECOND = CronExpression.parse("* * * * * *", include_seconds=True)


MACROS: dict[str, CronExpression] = {
    "@yearly": YEARLY,
    "@annually": ANNUALLY,
    "@monthly": MONTHLY,
    "@weekly": WEEKLY,
    "@daily": DAILY,
    "@midnight": MIDNIGHT,
    "@hourly": HOURLY,
    "@every_minute": EVERY_MINUTE,
    "@every_second": EVERY_SECOND,
}


def lookup_macro(keyword: str) -> ParsedExpression | None:
    """Return the parsed expression of a macro keyword (case-insensitive)."""
    expression = MACROS.get(keyword.lower())
    return expression.parsed if expression is not None else None
