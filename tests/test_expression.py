"""Tests for the public CronExpression API."""

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest
from dateutil import tz

from cronbits import (
    CronConfig,
    CronExpression,
    CronField,
    CronFormatError,
    ExpressionFlag,
    OccurrenceIterator,
    PreconditionError,
    is_valid_expression,
    set_config,
    validate_expression,
)

UTC = timezone.utc


# =============================================================================
# Construction
# =============================================================================


class TestCronExpressionParse:
    """Tests for parsing and value semantics."""

    def test_parse(self):
        """Test basic parse."""
        expr = CronExpression.parse("0 9 * * MON-FRI")
        assert expr.expression == "0 9 * * MON-FRI"
        assert expr.values(CronField.DAYS_OF_WEEK) == [1, 2, 3, 4, 5]
        assert not expr.has_seconds

    def test_parse_with_seconds(self):
        """Test six-field parse."""
        expr = CronExpression.parse("30 0 9 * * *", include_seconds=True)
        assert expr.has_seconds
        assert expr.values(CronField.SECONDS) == [30]

    def test_has_seconds_from_macro(self):
        """Test a macro firing on seconds reports a seconds field."""
        assert CronExpression.parse("@every_second").has_seconds
        assert not CronExpression.parse("@every_minute").has_seconds
        assert not CronExpression.parse("@daily").has_seconds

    def test_parse_none(self):
        """Test None is rejected."""
        with pytest.raises(CronFormatError):
            CronExpression.parse(None)

    def test_has_flag(self):
        """Test flag passthrough."""
        assert CronExpression.parse("0 0 L * *").has_flag(ExpressionFlag.DAY_OF_MONTH_LAST)

    def test_factories(self):
        """Test predefined factories."""
        assert CronExpression.daily() == CronExpression.parse("0 0 * * *")
        assert CronExpression.hourly() == CronExpression.parse("0 * * * *")
        assert CronExpression.weekly() == CronExpression.parse("0 0 * * 0")
        assert CronExpression.monthly() == CronExpression.parse("0 0 1 * *")
        assert CronExpression.yearly() == CronExpression.parse("0 0 1 1 *")

    def test_equality_by_content(self):
        """Test equivalent spellings compare equal."""
        assert CronExpression.parse("0 0 * * 0") == CronExpression.parse("0 0 * * SUN")
        assert CronExpression.parse("0 0 * * 7") == CronExpression.parse("0 0 * * sun")
        assert CronExpression.parse("0 0 * * *") == CronExpression.parse("@daily")

    def test_inequality(self):
        """Test different schedules."""
        assert CronExpression.parse("0 0 * * *") != CronExpression.parse("0 1 * * *")
        assert CronExpression.parse("0 0 * * *") != "0 0 * * *"

    def test_hash(self):
        """Test equal expressions hash equally."""
        expressions = {
            CronExpression.parse("0 0 * * 0"),
            CronExpression.parse("0 0 * * SUN"),
            CronExpression.parse("0 0 * * 7"),
        }
        assert len(expressions) == 1

    def test_repr_and_str(self):
        """Test string forms."""
        expr = CronExpression.parse("*/5 * * * *")
        assert repr(expr) == "CronExpression('*/5 * * * *')"
        assert str(expr) == "*/5 * * * *"


# =============================================================================
# Next occurrence
# =============================================================================


class TestGetNextOccurrence:
    """Tests for get_next_occurrence."""

    def test_utc(self):
        """Test a UTC start gives a UTC result."""
        expr = CronExpression.parse("0 9 * * MON-FRI")
        result = expr.get_next_occurrence(datetime(2024, 1, 15, tzinfo=UTC))
        assert result == datetime(2024, 1, 15, 9, 0, tzinfo=UTC)
        assert result.tzinfo is UTC

    def test_dateutil_utc(self):
        """Test dateutil's UTC is recognised."""
        expr = CronExpression.parse("0 0 1 1 *")
        result = expr.get_next_occurrence(datetime(2020, 6, 15, tzinfo=tz.tzutc()))
        assert result == datetime(2021, 1, 1, tzinfo=UTC)

    def test_inclusive(self):
        """Test inclusive start."""
        expr = CronExpression.parse("0 0 * * *")
        start = datetime(2021, 1, 1, tzinfo=UTC)
        assert expr.get_next_occurrence(start, inclusive=True) == start
        assert expr.get_next_occurrence(start) == datetime(2021, 1, 2, tzinfo=UTC)

    def test_local_with_override(self, new_york):
        """Test a local start evaluated on the local wall clock."""
        expr = CronExpression.parse("0 2 * * *")
        start = datetime(2021, 3, 14, 0, 0, tzinfo=new_york)
        result = expr.get_next_occurrence(start, local_zone=new_york)
        assert result.astimezone(UTC) == datetime(2021, 3, 14, 7, 0, tzinfo=UTC)

    def test_local_from_config(self, new_york):
        """Test the configured local zone."""
        set_config(CronConfig(local_timezone="America/New_York"))
        expr = CronExpression.parse("30 1 * * *")
        start = datetime(2021, 11, 7, 0, 0, tzinfo=new_york)
        result = expr.get_next_occurrence(start)
        assert result.astimezone(UTC) == datetime(2021, 11, 7, 5, 30, tzinfo=UTC)
        assert result.tzinfo == new_york

    def test_local_converted_into_local_zone(self):
        """Test a fixed-offset start is converted into the local zone."""
        expr = CronExpression.parse("0 12 * * *")
        start = datetime(2021, 6, 1, 3, 0, tzinfo=timezone(timedelta(hours=2)))
        result = expr.get_next_occurrence(start, local_zone="Asia/Tokyo")
        assert result == datetime(2021, 6, 1, 12, 0, tzinfo=ZoneInfo("Asia/Tokyo"))

    def test_named_zone_start_uses_local_zone(self, new_york):
        """Test a start carrying a ZoneInfo is still evaluated in the local zone."""
        expr = CronExpression.parse("0 12 * * *")
        tokyo = ZoneInfo("Asia/Tokyo")
        start = datetime(2021, 6, 1, 12, 0, tzinfo=tokyo)

        result = expr.get_next_occurrence(start, local_zone=new_york)
        assert result.tzinfo == new_york
        assert result.astimezone(UTC) == datetime(2021, 6, 1, 16, 0, tzinfo=UTC)

        zoned = expr.get_next_occurrence_zoned(start, tokyo)
        assert zoned == datetime(2021, 6, 2, 12, 0, tzinfo=tokyo)

    def test_naive_rejected(self):
        """Test naive datetimes raise PreconditionError."""
        with pytest.raises(PreconditionError) as exc_info:
            CronExpression.parse("* * * * *").get_next_occurrence(datetime(2021, 1, 1))
        assert exc_info.value.parameter == "from_"

    def test_none_before_ceiling(self):
        """Test unsatisfiable expression."""
        expr = CronExpression.parse("0 0 30 2 *")
        assert expr.get_next_occurrence(datetime(2021, 1, 1, tzinfo=UTC)) is None

    def test_max_year_config(self):
        """Test the configurable search ceiling."""
        expr = CronExpression.parse("0 0 29 2 *")
        start = datetime(2021, 3, 1, tzinfo=UTC)
        assert expr.get_next_occurrence(start) == datetime(2024, 2, 29, tzinfo=UTC)

        set_config(CronConfig(max_year=2022))
        assert expr.get_next_occurrence(start) is None

    def test_past_default_ceiling(self):
        """Test nothing is returned at or after 2100."""
        expr = CronExpression.parse("* * * * *")
        assert expr.get_next_occurrence(datetime(2100, 1, 1, tzinfo=UTC)) is None

    @pytest.mark.parametrize("max_year", [2100, 9999])
    def test_start_near_datetime_max(self, max_year):
        """Test the largest aware start returns None for any ceiling."""
        set_config(CronConfig(max_year=max_year))
        expr = CronExpression.parse("* * * * *")
        start = datetime(9999, 12, 31, 23, 59, 59, 999999, tzinfo=UTC)
        assert expr.get_next_occurrence(start) is None
        assert expr.get_next_occurrence(start, inclusive=True) is None
        assert expr.get_next_occurrence_utc(start, "UTC") is None


class TestGetNextOccurrenceUtc:
    """Tests for get_next_occurrence_utc."""

    def test_zone_evaluation(self, new_york):
        """Test a UTC start evaluated in New York."""
        expr = CronExpression.parse("0 2 * * *")
        result = expr.get_next_occurrence_utc(datetime(2021, 3, 14, 5, 0, tzinfo=UTC), new_york)
        assert result == datetime(2021, 3, 14, 7, 0, tzinfo=UTC)
        assert result.tzinfo is UTC

    def test_zone_name(self):
        """Test an IANA zone name."""
        expr = CronExpression.parse("0 9 * * *")
        result = expr.get_next_occurrence_utc(datetime(2021, 6, 1, tzinfo=UTC), "Europe/London")
        assert result == datetime(2021, 6, 1, 8, 0, tzinfo=UTC)

    def test_utc_zone(self):
        """Test UTC as the evaluation zone."""
        expr = CronExpression.parse("0 9 * * *")
        result = expr.get_next_occurrence_utc(datetime(2021, 6, 1, tzinfo=UTC), "UTC")
        assert result == datetime(2021, 6, 1, 9, 0, tzinfo=UTC)

    def test_non_utc_start_rejected(self, new_york):
        """Test that only UTC-tagged starts are accepted."""
        expr = CronExpression.parse("0 9 * * *")
        with pytest.raises(PreconditionError) as exc_info:
            expr.get_next_occurrence_utc(datetime(2021, 6, 1, tzinfo=new_york), new_york)
        assert exc_info.value.parameter == "from_utc"

    def test_naive_start_rejected(self, new_york):
        """Test naive start."""
        expr = CronExpression.parse("0 9 * * *")
        with pytest.raises(PreconditionError):
            expr.get_next_occurrence_utc(datetime(2021, 6, 1), new_york)


class TestGetNextOccurrenceZoned:
    """Tests for get_next_occurrence_zoned."""

    def test_result_in_zone(self, new_york):
        """Test the result carries the requested zone."""
        expr = CronExpression.parse("30 1 * * *")
        start = datetime(2021, 11, 7, 4, 0, tzinfo=UTC)
        result = expr.get_next_occurrence_zoned(start, new_york)
        assert result.tzinfo == new_york
        assert result.astimezone(UTC) == datetime(2021, 11, 7, 5, 30, tzinfo=UTC)

    def test_utc_zone_with_other_start(self, new_york):
        """Test evaluation in UTC from a zoned start."""
        expr = CronExpression.parse("0 12 * * *")
        start = datetime(2021, 6, 1, 10, 0, tzinfo=new_york)
        result = expr.get_next_occurrence_zoned(start, UTC)
        assert result == datetime(2021, 6, 2, 12, 0, tzinfo=UTC)

    def test_naive_rejected(self, new_york):
        """Test naive start."""
        with pytest.raises(PreconditionError):
            CronExpression.parse("* * * * *").get_next_occurrence_zoned(
                datetime(2021, 1, 1), new_york
            )


# =============================================================================
# Enumeration
# =============================================================================


class TestEnumeration:
    """Tests for get_occurrences, next_n and iteration."""

    def test_get_occurrences(self):
        """Test a half-open range."""
        expr = CronExpression.parse("0 * * * *")
        result = list(
            expr.get_occurrences(
                datetime(2021, 1, 1, 0, 0, tzinfo=UTC),
                datetime(2021, 1, 1, 3, 0, tzinfo=UTC),
            )
        )
        assert result == [
            datetime(2021, 1, 1, 0, 0, tzinfo=UTC),
            datetime(2021, 1, 1, 1, 0, tzinfo=UTC),
            datetime(2021, 1, 1, 2, 0, tzinfo=UTC),
        ]

    def test_get_occurrences_bounds(self):
        """Test bound inclusivity flags."""
        expr = CronExpression.parse("0 * * * *")
        result = list(
            expr.get_occurrences(
                datetime(2021, 1, 1, 0, 0, tzinfo=UTC),
                datetime(2021, 1, 1, 3, 0, tzinfo=UTC),
                from_inclusive=False,
                to_inclusive=True,
            )
        )
        assert [r.hour for r in result] == [1, 2, 3]

    def test_get_occurrences_in_zone(self, new_york):
        """Test zoned enumeration across fall-back."""
        expr = CronExpression.parse("0 * * * *")
        result = list(
            expr.get_occurrences(
                datetime(2021, 11, 7, 0, 0, tzinfo=new_york),
                datetime(2021, 11, 7, 3, 0, tzinfo=new_york),
                new_york,
            )
        )
        assert [r.astimezone(UTC).hour for r in result] == [4, 5, 6, 7]

    def test_get_occurrences_reversed(self):
        """Test from_ later than to."""
        expr = CronExpression.parse("0 * * * *")
        with pytest.raises(ValueError):
            list(
                expr.get_occurrences(
                    datetime(2021, 1, 2, tzinfo=UTC),
                    datetime(2021, 1, 1, tzinfo=UTC),
                )
            )

    def test_next_n(self):
        """Test next_n."""
        expr = CronExpression.parse("0 0 * * *")
        result = expr.next_n(3, datetime(2021, 1, 1, tzinfo=UTC))
        assert result == [
            datetime(2021, 1, 2, tzinfo=UTC),
            datetime(2021, 1, 3, tzinfo=UTC),
            datetime(2021, 1, 4, tzinfo=UTC),
        ]

    def test_next_n_stops_at_ceiling(self):
        """Test next_n returns fewer results near the ceiling, which is inclusive."""
        expr = CronExpression.parse("0 0 1 1 *")
        result = expr.next_n(5, datetime(2097, 6, 1, tzinfo=UTC))
        assert [r.year for r in result] == [2098, 2099, 2100]

    def test_iter(self):
        """Test the lazy iterator."""
        expr = CronExpression.parse("*/15 * * * *")
        iterator = expr.iter(datetime(2021, 1, 1, tzinfo=UTC), limit=2)
        assert isinstance(iterator, OccurrenceIterator)
        assert list(iterator) == [
            datetime(2021, 1, 1, 0, 15, tzinfo=UTC),
            datetime(2021, 1, 1, 0, 30, tzinfo=UTC),
        ]

    def test_iter_inclusive(self):
        """Test inclusive iteration yields the start once."""
        expr = CronExpression.parse("*/15 * * * *")
        start = datetime(2021, 1, 1, tzinfo=UTC)
        result = list(expr.iter(start, limit=2, inclusive=True))
        assert result == [start, datetime(2021, 1, 1, 0, 15, tzinfo=UTC)]

    def test_iter_naive_rejected(self):
        """Test naive start."""
        with pytest.raises(PreconditionError):
            CronExpression.parse("* * * * *").iter(datetime(2021, 1, 1))


# =============================================================================
# Validation
# =============================================================================


class TestValidation:
    """Tests for validation helpers."""

    def test_validate_valid(self):
        """Test a valid expression has no errors."""
        assert validate_expression("0 9 * * MON-FRI") == []

    def test_validate_invalid(self):
        """Test an invalid expression reports one error."""
        errors = validate_expression("0 25 * * *")
        assert len(errors) == 1
        assert "Hours" in errors[0]

    def test_validate_seconds(self):
        """Test validation with seconds."""
        assert validate_expression("0 0 9 * * *", include_seconds=True) == []
        assert validate_expression("0 0 9 * * *") != []

    def test_is_valid(self):
        """Test boolean validation."""
        assert is_valid_expression("@daily")
        assert not is_valid_expression("")
        assert not is_valid_expression("* * * *")
