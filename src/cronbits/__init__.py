"""Cron expression parsing and DST-aware next-occurrence calculation.

Features:
    - Standard 5-field cron (minute, hour, day, month, weekday)
    - Extended 6-field cron with seconds
    - Special characters: *, /, -, ,, L, W, #, ?
    - Named months and weekdays
    - Predefined expressions (@yearly, @monthly, @weekly, etc.)
    - Bitmask-based next-occurrence search
    - Timezone support across DST transitions

Syntax Reference:
    Field         Values          Special Characters
    ─────────────────────────────────────────────────
    Second        0-59            * / , -
    Minute        0-59            * / , -
    Hour          0-23            * / , -
    Day of Month  1-31            * / , - ? L W
    Month         1-12 or JAN-DEC * / , -
    Day of Week   0-7 or SUN-SAT  * / , - ? L #

Special Characters:
    *   Any value
    ,   List separator (1,3,5)
    -   Range (1-5, wraps around: 55-10)
    /   Step (*/15 = every 15)
    L   Last (L or L-3 in day-of-month, 5L in day-of-week)
    W   Nearest weekday (15W = nearest weekday to 15th)
    #   Nth weekday (MON#2 = second Monday)
    ?   No specific value (day-of-month or day-of-week)

Day-of-month and day-of-week restrictions must both hold.

Usage:
    >>> from datetime import datetime, timezone
    >>> from cronbits import CronExpression
    >>>
    >>> expr = CronExpression.parse("0 9 * * MON-FRI")
    >>> expr.get_next_occurrence(datetime.now(timezone.utc))
    >>> expr.get_next_occurrence_zoned(datetime.now(timezone.utc), "America/New_York")
    >>> expr.next_n(5, datetime.now(timezone.utc))
"""

from cronbits.config import CronConfig, get_config, reset_config, set_config
from cronbits.exceptions import CronError, CronFormatError, PreconditionError
from cronbits.expression import (
    CronExpression,
    OccurrenceIterator,
    is_valid_expression,
    validate_expression,
)
from cronbits.fields import CronField, FieldSpec
from cronbits.parser import ExpressionFlag, ParsedExpression, parse_expression
from cronbits.presets import (
    ANNUALLY,
    DAILY,
    EVERY_MINUTE,
    EVERY_SECOND,
    HOURLY,
    MIDNIGHT,
    MONTHLY,
    WEEKLY,
    YEARLY,
)

__version__ = "0.1.0"

__all__ = [
    # Core
    "CronExpression",
    "OccurrenceIterator",
    "ParsedExpression",
    "ExpressionFlag",
    "CronField",
    "FieldSpec",
    "parse_expression",
    # Errors
    "CronError",
    "CronFormatError",
    "PreconditionError",
    # Validation
    "validate_expression",
    "is_valid_expression",
    # Configuration
    "CronConfig",
    "get_config",
    "set_config",
    "reset_config",
    # Presets
    "YEARLY",
    "ANNUALLY",
    "MONTHLY",
    "WEEKLY",
    "DAILY",
    "MIDNIGHT",
    "HOURLY",
    "EVERY_MINUTE",
    "EVERY_SECOND",
]
