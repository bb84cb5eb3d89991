"""Public cron expression API.

Design Principles:
    1. Immutable expressions: parse once, query from any thread
    2. Aware datetimes only: naive input is rejected, never guessed at
    3. Bounded search: every query terminates, "no occurrence" is ``None``
"""

from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Iterator

from cronbits.bitmask import set_bit
from cronbits.config import get_config
from cronbits.exceptions import CronFormatError, PreconditionError
from cronbits.fields import CronField
from cronbits.occurrence import find_occurrence
from cronbits.parser import ExpressionFlag, ParsedExpression, parse_expression
from cronbits.scheduler import TimezoneScheduler
from cronbits.timezones import UTC, is_utc, resolve_zone
from cronbits.timezones import local_zone as resolve_local_zone


def _require_aware(value: datetime, parameter: str) -> None:
    if value.tzinfo is None or value.utcoffset() is None:
        raise PreconditionError(
            f"The supplied datetime '{parameter}' must be timezone-aware (UTC or local).",
            parameter,
        )


def _naive_utc(value: datetime) -> datetime:
    return value.astimezone(UTC).replace(tzinfo=None)


class CronExpression:
    """Parsed cron expression with next-occurrence calculation.

    CronExpression is immutable and thread-safe. Two expressions are equal
    when they match the same schedule, whatever their source text.

    Example:
        >>> expr = CronExpression.parse("0 9 * * MON-FRI")
        >>> expr.get_next_occurrence(datetime(2024, 1, 15, tzinfo=timezone.utc))
        datetime.datetime(2024, 1, 15, 9, 0, tzinfo=datetime.timezone.utc)
        >>> expr.get_next_occurrence_zoned(start, "Europe/London")
    """

    __slots__ = ("_expression", "_parsed", "_include_seconds")

    def __init__(
        self,
        expression: str,
        parsed: ParsedExpression,
        include_seconds: bool = False,
    ) -> None:
        self._expression = expression
        self._parsed = parsed
        self._include_seconds = include_seconds

    @classmethod
    def parse(cls, expression: str, include_seconds: bool = False) -> "CronExpression":
        """Parse a cron expression.

        Args:
            expression: Cron expression string or macro (``@daily``).
            include_seconds: Expect six fields, starting with seconds.

        Returns:
            Parsed CronExpression.

        Raises:
            CronFormatError: If expression is invalid.
        """
        if expression is None:
            raise CronFormatError("Cron expression must not be empty.")
        return cls(expression, parse_expression(expression, include_seconds), include_seconds)

    # Predefined expression factories
    @classmethod
    def yearly(cls) -> "CronExpression":
        return cls.parse("@yearly")

    @classmethod
    def monthly(cls) -> "CronExpression":
        return cls.parse("@monthly")

    @classmethod
    def weekly(cls) -> "CronExpression":
        return cls.parse("@weekly")

    @classmethod
    def daily(cls) -> "CronExpression":
        return cls.parse("@daily")

    @classmethod
    def hourly(cls) -> "CronExpression":
        return cls.parse("@hourly")

    @property
    def expression(self) -> str:
        """Get original expression string."""
        return self._expression

    @property
    def parsed(self) -> ParsedExpression:
        return self._parsed

    @property
    def has_seconds(self) -> bool:
        """Check if expression has a seconds field.

        True when parsed with ``include_seconds`` or when a macro such as
        ``@every_second`` fires on seconds other than 0.
        """
        return self._include_seconds or self._parsed.second != set_bit(0, 0)

    def values(self, field: CronField) -> list[int]:
        """Return the allowed values of a field."""
        return self._parsed.values(field)

    def has_flag(self, flag: ExpressionFlag) -> bool:
        return self._parsed.has_flag(flag)

    # -------------------------------------------------------------------------
    # Next occurrence
    # -------------------------------------------------------------------------

    def get_next_occurrence(
        self,
        from_: datetime,
        inclusive: bool = False,
        *,
        local_zone: tzinfo | str | None = None,
    ) -> datetime | None:
        """Get the next occurrence after a UTC or local datetime.

        A datetime tagged with a UTC zone is searched in UTC and the result
        is UTC. Any other aware datetime is treated as local time: it is
        searched on the wall clock of the local zone and the result is in
        that zone.

        The local zone is ``local_zone``, else ``CronConfig.local_timezone``,
        else the operating system zone. The tzinfo carried by ``from_`` is
        only used to find its instant, so a start tagged with
        ``ZoneInfo("Asia/Tokyo")`` is still evaluated in the local zone. Use
        :meth:`get_next_occurrence_zoned` to evaluate in an explicit zone.

        Args:
            from_: Aware start of the search.
            inclusive: Whether ``from_`` itself may be returned.
            local_zone: Zone standing for "local", defaults to the configured
                or operating system zone.

        Returns:
            Next occurrence, or None if none exists before the search ceiling.

        Raises:
            PreconditionError: If ``from_`` is naive.
        """
        _require_aware(from_, "from_")

        if is_utc(from_.tzinfo):
            return self._next_utc(from_, inclusive)

        zone = resolve_local_zone(local_zone)
        return self._next_zoned(from_.astimezone(zone), zone, inclusive)

    def get_next_occurrence_utc(
        self,
        from_utc: datetime,
        zone: tzinfo | str,
        inclusive: bool = False,
    ) -> datetime | None:
        """Get the next occurrence in ``zone`` after a UTC datetime.

        Returns:
            Next occurrence as a UTC datetime, or None.

        Raises:
            PreconditionError: If ``from_utc`` is not tagged with a UTC zone.
        """
        if from_utc.tzinfo is None or not is_utc(from_utc.tzinfo):
            raise PreconditionError(
                "The supplied datetime 'from_utc' must be tagged with a UTC zone.",
                "from_utc",
            )

        zone = resolve_zone(zone)
        if is_utc(zone):
            return self._next_utc(from_utc, inclusive)

        occurrence = self._next_zoned(from_utc.astimezone(zone), zone, inclusive)
        return occurrence.astimezone(UTC) if occurrence is not None else None

    def get_next_occurrence_zoned(
        self,
        from_: datetime,
        zone: tzinfo | str,
        inclusive: bool = False,
    ) -> datetime | None:
        """Get the next occurrence in ``zone`` after any aware datetime.

        Returns:
            Next occurrence as an aware datetime in ``zone``, or None.

        Raises:
            PreconditionError: If ``from_`` is naive.
        """
        _require_aware(from_, "from_")

        zone = resolve_zone(zone)
        if is_utc(zone):
            occurrence = self._next_utc(from_, inclusive)
            return occurrence.astimezone(zone) if occurrence is not None else None

        return self._next_zoned(from_.astimezone(zone), zone, inclusive)

    def _next_utc(self, from_: datetime, inclusive: bool) -> datetime | None:
        found = find_occurrence(
            self._parsed, _naive_utc(from_), get_config().search_ceiling, inclusive
        )
        return found.replace(tzinfo=UTC) if found is not None else None

    def _next_zoned(self, zoned_start: datetime, zone: tzinfo, inclusive: bool) -> datetime | None:
        scheduler = TimezoneScheduler(self._parsed, get_config().search_ceiling)
        return scheduler.next_occurrence(zoned_start, zone, inclusive)

    # -------------------------------------------------------------------------
    # Enumeration
    # -------------------------------------------------------------------------

    def get_occurrences(
        self,
        from_: datetime,
        to: datetime,
        zone: tzinfo | str | None = None,
        *,
        from_inclusive: bool = True,
        to_inclusive: bool = False,
    ) -> Iterator[datetime]:
        """Iterate over occurrences between two aware datetimes.

        Args:
            from_: Start of the range.
            to: End of the range.
            zone: Zone to evaluate in; defaults to UTC.
            from_inclusive: Whether ``from_`` itself may be yielded.
            to_inclusive: Whether ``to`` itself may be yielded.

        Raises:
            PreconditionError: If either bound is naive.
            ValueError: If ``from_`` is later than ``to``.
        """
        _require_aware(from_, "from_")
        _require_aware(to, "to")
        if from_.astimezone(UTC) > to.astimezone(UTC):
            raise ValueError("'from_' must not be later than 'to'.")

        end = to.astimezone(UTC)
        for occurrence in self.iter(from_, zone, inclusive=from_inclusive):
            instant = occurrence.astimezone(UTC)
            if instant > end or (instant == end and not to_inclusive):
                return
            yield occurrence

    def next_n(
        self,
        n: int,
        from_: datetime,
        zone: tzinfo | str | None = None,
    ) -> list[datetime]:
        """Get the next n occurrences after ``from_``."""
        return list(self.iter(from_, zone, limit=n))

    def iter(
        self,
        from_: datetime,
        zone: tzinfo | str | None = None,
        limit: int | None = None,
        inclusive: bool = False,
    ) -> "OccurrenceIterator":
        """Create an iterator over occurrences after ``from_``."""
        return OccurrenceIterator(self, from_, zone, limit, inclusive)

    def __repr__(self) -> str:
        return f"CronExpression({self._expression!r})"

    def __str__(self) -> str:
        return self._expression

    def __eq__(self, other: object) -> bool:
        if isinstance(other, CronExpression):
            return self._parsed == other._parsed
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._parsed)


class OccurrenceIterator(Iterator[datetime]):
    """Lazy iterator over successive occurrences.

    Each step searches from the previous occurrence, so memory use does
    not depend on how many occurrences are consumed.
    """

    def __init__(
        self,
        expression: CronExpression,
        from_: datetime,
        zone: tzinfo | str | None = None,
        limit: int | None = None,
        inclusive: bool = False,
    ) -> None:
        _require_aware(from_, "from_")
        self._expression = expression
        self._zone = resolve_zone(zone) if zone is not None else UTC
        self._current = from_
        self._inclusive = inclusive
        self._limit = limit
        self._count = 0

    def __iter__(self) -> "OccurrenceIterator":
        return self

    def __next__(self) -> datetime:
        if self._limit is not None and self._count >= self._limit:
            raise StopIteration

        next_dt = self._expression.get_next_occurrence_zoned(
            self._current, self._zone, self._inclusive
        )
        if next_dt is None:
            raise StopIteration

        self._current = next_dt
        self._inclusive = False
        self._count += 1

        return next_dt


def validate_expression(expression: str, include_seconds: bool = False) -> list[str]:
    """Validate a cron expression.

    Args:
        expression: Cron expression to validate.
        include_seconds: Expect a seconds field.

    Returns:
        List of validation errors (empty if valid).
    """
    errors = []

    try:
        CronExpression.parse(expression, include_seconds)
    except CronFormatError as e:
        errors.append(str(e))

    return errors


def is_valid_expression(expression: str, include_seconds: bool = False) -> bool:
    """Check if a cron expression is valid."""
    try:
        CronExpression.parse(expression, include_seconds)
        return True
    except CronFormatError:
        return False
