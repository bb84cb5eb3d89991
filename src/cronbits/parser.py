"""Cron expression parser.

The parser walks the expression text once with a cursor and a single
character of lookahead, producing a :class:`ParsedExpression`: one 64-bit
mask per field plus a flag set describing the special forms (``L``, ``W``,
``#``, ``?``) that cannot be expressed as plain bits.

Grammar (fields are separated by spaces or tabs)::

    field := '*' ['/' step]
           | '?'                      day-of-month and day-of-week only
           | term (',' term)*
    term  := value
           | value '-' value ['/' step]
           | value '/' step
           | 'L' ['-' offset]         day-of-month only

Day-of-month may end with ``W`` (nearest weekday) after a single value.
Day-of-week may end with ``L`` (last in month) and/or ``#N`` (Nth in month).
An expression starting with ``@`` is a macro such as ``@daily``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntFlag, auto

from cronbits.bitmask import iter_bits, rotate_right, set_all, set_bit, set_range
from cronbits.exceptions import CronFormatError
from cronbits.fields import FIELD_SPECS, CronField

logger = logging.getLogger(__name__)

MIN_DAYS_IN_MONTH = 28
MIN_NTH_DAY_OF_WEEK = 1
MAX_NTH_DAY_OF_WEEK = 5

# Sunday is both bit 0 and bit 7.
SUNDAY_BITS = 0b1000_0001

# The 28th, 29th, 30th and 31st: every possible last day of a month.
LAST_DAYS_OF_MONTH = 0b1111 << MIN_DAYS_IN_MONTH

_DIGITS = "0123456789"


class ExpressionFlag(IntFlag):
    """Special forms recorded alongside the field masks."""

    INTERVAL = auto()
    DAY_OF_MONTH_LAST = auto()
    NEAREST_WEEKDAY = auto()
    DAY_OF_WEEK_LAST = auto()
    NTH_DAY_OF_WEEK = auto()
    DAY_OF_MONTH_QUESTION = auto()


@dataclass(frozen=True)
class ParsedExpression:
    """Immutable compiled form of a cron expression.

    Attributes:
        second: Mask of allowed seconds (bits 0-59).
        minute: Mask of allowed minutes (bits 0-59).
        hour: Mask of allowed hours (bits 0-23).
        day_of_month: Mask of allowed days (bits 1-31). With
            ``DAY_OF_MONTH_LAST`` set, bits 28-31 shifted right by
            ``last_month_offset`` stand for the possible last days.
        month: Mask of allowed months (bits 1-12).
        day_of_week: Mask of allowed weekdays (bits 0-7, Sunday is 0 and 7).
        flags: Special forms present in the expression.
        nth_day_of_week: Ordinal for ``#N``, meaningful with ``NTH_DAY_OF_WEEK``.
        last_month_offset: ``N`` of ``L-N``, meaningful with ``DAY_OF_MONTH_LAST``.
    """

    second: int
    minute: int
    hour: int
    day_of_month: int
    month: int
    day_of_week: int
    flags: ExpressionFlag = ExpressionFlag(0)
    nth_day_of_week: int = 0
    last_month_offset: int = 0

    def has_flag(self, flag: ExpressionFlag) -> bool:
        return bool(self.flags & flag)

    def mask(self, field: CronField) -> int:
        """Return the mask of a field."""
        return {
            CronField.SECONDS: self.second,
            CronField.MINUTES: self.minute,
            CronField.HOURS: self.hour,
            CronField.DAYS_OF_MONTH: self.day_of_month,
            CronField.MONTHS: self.month,
            CronField.DAYS_OF_WEEK: self.day_of_week,
        }[field]

    def values(self, field: CronField) -> list[int]:
        """Return the allowed values of a field within its range."""
        spec = FIELD_SPECS[field]
        return list(iter_bits(self.mask(field), spec.first, spec.last))


class ExpressionParser:
    """Single-use parser turning expression text into a ParsedExpression.

    Example:
        >>> parsed = ExpressionParser("*/15 9-17 * * MON-FRI").parse()
        >>> parsed.values(CronField.MINUTES)
        [0, 15, 30, 45]
    """

    def __init__(self, expression: str, include_seconds: bool = False) -> None:
        if not expression:
            raise CronFormatError("Cron expression must not be empty.", expression="")
        self._text = expression
        self._pos = 0
        self._include_seconds = include_seconds
        self._flags = ExpressionFlag(0)
        self._nth_day_of_week = 0
        self._last_month_offset = 0

    # -------------------------------------------------------------------------
    # Cursor
    # -------------------------------------------------------------------------

    def _peek(self) -> str:
        """Return the current character, or "" at end of text."""
        if self._pos < len(self._text):
            return self._text[self._pos]
        return ""

    def _advance(self) -> None:
        self._pos += 1

    def _at_end(self) -> bool:
        return self._pos >= len(self._text)

    def _at_whitespace(self) -> bool:
        return self._peek() in (" ", "\t")

    def _at_field_end(self) -> bool:
        return self._at_end() or self._at_whitespace()

    def _at_digit(self) -> bool:
        return not self._at_end() and self._peek() in _DIGITS

    def _at_letter(self) -> bool:
        char = self._peek()
        return char.isascii() and char.isalpha()

    def _skip_whitespace(self) -> None:
        while self._at_whitespace():
            self._advance()

    # -------------------------------------------------------------------------
    # Errors
    # -------------------------------------------------------------------------

    def _error(self, message: str, field: CronField | None = None) -> CronFormatError:
        return CronFormatError(
            message,
            field=field,
            expression=self._text,
            position=self._pos,
            character=self._peek() or None,
        )

    def _unexpected(self, field: CronField | None = None, suffix: str = "") -> CronFormatError:
        message = f"Unexpected character '{self._peek()}' on position {self._pos}."
        if suffix:
            message = f"{message[:-1]}, {suffix}"
        return self._error(message, field)

    # -------------------------------------------------------------------------
    # Expression
    # -------------------------------------------------------------------------

    def parse(self) -> ParsedExpression:
        """Parse the whole expression.

        Raises:
            CronFormatError: If the expression is malformed.
        """
        self._skip_whitespace()

        if self._peek() == "@":
            return self._parse_macro()

        if self._include_seconds:
            second = self._parse_field(CronField.SECONDS)
        else:
            second = set_bit(0, 0)

        minute = self._parse_field(CronField.MINUTES)
        hour = self._parse_field(CronField.HOURS)
        day_of_month = self._parse_field(CronField.DAYS_OF_MONTH)
        month = self._parse_field(CronField.MONTHS)

        if self._peek() == "?" and self._flags & ExpressionFlag.DAY_OF_MONTH_QUESTION:
            raise self._error("'?' is not supported.", CronField.DAYS_OF_WEEK)

        day_of_week = self._parse_field(CronField.DAYS_OF_WEEK)

        if not self._at_end():
            raise self._unexpected(
                suffix=(
                    "end of string expected. Please use the 'include_seconds' "
                    "argument to specify non-standard CRON fields."
                ),
            )

        if day_of_week & SUNDAY_BITS:
            day_of_week |= SUNDAY_BITS

        parsed = ParsedExpression(
            second=second,
            minute=minute,
            hour=hour,
            day_of_month=day_of_month,
            month=month,
            day_of_week=day_of_week,
            flags=self._flags,
            nth_day_of_week=self._nth_day_of_week,
            last_month_offset=self._last_month_offset,
        )
        logger.debug("Parsed cron expression %r: %r", self._text, parsed)
        return parsed

    def _parse_macro(self) -> ParsedExpression:
        # Imported here: the macro constants are themselves parsed expressions.
        from cronbits.presets import MACROS, lookup_macro

        token_start = self._pos
        while not self._at_field_end():
            self._advance()
        token = self._text[token_start:self._pos]

        parsed = lookup_macro(token)
        if parsed is None:
            # Point at the first character that no macro keyword accepts.
            lowered = token.lower()
            matched = 1
            for keyword in MACROS:
                common = 0
                for left, right in zip(lowered, keyword):
                    if left != right:
                        break
                    common += 1
                matched = max(matched, common)
            self._pos = token_start + min(matched, len(token))
            raise self._unexpected()

        self._skip_whitespace()
        if not self._at_end():
            raise self._unexpected(suffix="end of string expected.")

        logger.debug("Resolved cron macro %r", token)
        return parsed

    # -------------------------------------------------------------------------
    # Fields
    # -------------------------------------------------------------------------

    def _parse_field(self, field: CronField) -> int:
        spec = FIELD_SPECS[field]

        if self._at_end():
            raise self._error("Value is missing.", field)

        char = self._peek()

        if char == "*":
            self._advance()

            if spec.supports_interval:
                self._flags |= ExpressionFlag.INTERVAL

            if self._peek() != "/":
                if not self._at_field_end():
                    raise self._error(f"'{self._peek()}' is not supported after '*'.", field)
                self._skip_whitespace()
                return set_all()

            bits = self._parse_range(field, star=True)

        elif char == "?":
            if field not in (CronField.DAYS_OF_MONTH, CronField.DAYS_OF_WEEK):
                raise self._error("'?' is not supported.", field)

            self._advance()

            if field is CronField.DAYS_OF_MONTH:
                self._flags |= ExpressionFlag.DAY_OF_MONTH_QUESTION

            if self._peek() == "/":
                raise self._error("'/' is not allowed after '?'.", field)
            if not self._at_field_end():
                raise self._unexpected(field)

            self._skip_whitespace()
            return set_all()

        else:
            bits = self._parse_list(field)

        if field is CronField.DAYS_OF_MONTH:
            if self._peek() == "W":
                self._advance()
                self._flags |= ExpressionFlag.NEAREST_WEEKDAY

        elif field is CronField.DAYS_OF_WEEK:
            if self._peek() == "L":
                self._advance()
                self._flags |= ExpressionFlag.DAY_OF_WEEK_LAST

            if self._peek() == "#":
                self._advance()
                self._flags |= ExpressionFlag.NTH_DAY_OF_WEEK

                nth = self._parse_number(field, allow_names=False)
                if nth is None or not MIN_NTH_DAY_OF_WEEK <= nth <= MAX_NTH_DAY_OF_WEEK:
                    raise self._error(
                        f"'#' must be followed by a number between "
                        f"{MIN_NTH_DAY_OF_WEEK} and {MAX_NTH_DAY_OF_WEEK}.",
                        field,
                    )
                self._nth_day_of_week = nth

        if not self._at_field_end():
            raise self._unexpected(field)

        self._skip_whitespace()
        return bits

    def _parse_list(self, field: CronField) -> int:
        bits = 0
        single_value = True

        while True:
            bits |= self._parse_range(field, star=False)

            if self._peek() != ",":
                break

            single_value = False
            self._advance()

        if self._peek() == "W" and not single_value:
            raise self._error("Using some numbers with 'W' is not supported.", field)

        return bits

    def _parse_range(self, field: CronField, star: bool) -> int:
        """Parse one list term and return its bits."""
        spec = FIELD_SPECS[field]
        low, high = spec.first, spec.last

        if star:
            start, stop = low, high

        elif self._peek() == "L":
            if field is not CronField.DAYS_OF_MONTH:
                raise self._error("'L' is not supported.", field)

            self._advance()
            self._flags |= ExpressionFlag.DAY_OF_MONTH_LAST
            bits = LAST_DAYS_OF_MONTH

            if self._peek() == "-":
                self._advance()

                offset = self._parse_number(field, allow_names=False)
                if offset is None or not 0 <= offset < high:
                    raise self._error(
                        f"Last month offset must be a number between 0 and {high - 1} "
                        "(all inclusive).",
                        field,
                    )

                bits >>= offset
                self._last_month_offset = offset

            return bits

        else:
            start = self._parse_number(field)
            if start is None or not low <= start <= high:
                raise self._error(
                    f"Value must be a number between {low} and {high} (all inclusive).",
                    field,
                )

            if self._peek() == "-":
                if spec.supports_interval:
                    self._flags |= ExpressionFlag.INTERVAL

                self._advance()

                stop = self._parse_number(field)
                if stop is None or not low <= stop <= high:
                    raise self._error(
                        f"Range must contain numbers between {low} and {high} "
                        "(all inclusive).",
                        field,
                    )

                if self._peek() == "W":
                    raise self._error("'W' is not allowed after '-'.", field)

            elif self._peek() == "/":
                if spec.supports_interval:
                    self._flags |= ExpressionFlag.INTERVAL

                # '10/2' means every second value from 10 up to the field maximum.
                stop = high

            else:
                return set_bit(0, start)

        if self._peek() == "/":
            self._advance()

            step = self._parse_number(field, allow_names=False)
            if step is None or not 0 < step <= high:
                raise self._error(
                    f"Step must be a number between 1 and {high} (all inclusive).",
                    field,
                )

            if self._peek() == "W":
                raise self._error("'W' is not allowed after '/'.", field)
        else:
            step = 1

        # A range like 55-10 is laid out as 0-15 and rotated right by 5.
        shift = 0
        period_high = high
        if stop < start:
            # Count Sunday once when wrapping across the week.
            if field is CronField.DAYS_OF_WEEK:
                period_high -= 1

            shift = period_high - start + 1
            stop += shift
            start = low

        bits = set_range(0, start, stop, step)

        if shift:
            bits = rotate_right(bits, shift, period_high - low + 1)
            bits &= set_range(0, low, high)

        return bits

    def _parse_number(self, field: CronField, allow_names: bool = True) -> int | None:
        """Read a one or two digit number, or a three-letter name.

        Returns None when no valid number or name starts at the cursor.
        """
        if self._at_digit():
            number = int(self._peek())
            self._advance()

            if not self._at_digit():
                return number

            number = number * 10 + int(self._peek())
            self._advance()

            if not self._at_digit():
                return number

            return None

        spec = FIELD_SPECS[field]
        if not allow_names or spec.names is None:
            return None

        name_start = self._pos
        for _ in range(3):
            if not self._at_letter():
                return None
            self._advance()

        if self._at_letter():
            return None

        return spec.resolve_name(self._text[name_start:self._pos])


def parse_expression(expression: str, include_seconds: bool = False) -> ParsedExpression:
    """Parse cron expression text.

    Args:
        expression: Five-field expression, six-field expression when
            ``include_seconds`` is set, or a macro such as ``@daily``.
        include_seconds: Expect a leading seconds field.

    Returns:
        The parsed expression.

    Raises:
        CronFormatError: If the expression is malformed.
    """
    return ExpressionParser(expression, include_seconds).parse()

