"""Static metadata for the six cron fields."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class CronField(Enum):
    """Fields of a cron expression, in the order they appear."""

    SECONDS = "Seconds"
    MINUTES = "Minutes"
    HOURS = "Hours"
    DAYS_OF_MONTH = "Days of month"
    MONTHS = "Months"
    DAYS_OF_WEEK = "Days of week"

    @property
    def display_name(self) -> str:
        return self.value


@dataclass(frozen=True)
class FieldSpec:
    """Valid range and syntax support of a cron field.

    Attributes:
        first: Smallest value of the field.
        last: Largest value of the field.
        supports_interval: Ranges and steps on this field make the schedule
            recur more than once within a DST ambiguous interval.
        names: Three-letter symbolic names; ``names[i]`` denotes ``i + first``.
    """

    first: int
    last: int
    supports_interval: bool = False
    names: tuple[str, ...] | None = None

    def resolve_name(self, name: str) -> int | None:
        """Return the value for a symbolic name, or None if unknown."""
        if self.names is None:
            return None
        try:
            return self.names.index(name.upper()) + self.first
        except ValueError:
            return None


MONTH_NAMES = (
    "JAN", "FEB", "MAR", "APR", "MAY", "JUN",
    "JUL", "AUG", "SEP", "OCT", "NOV", "DEC",
)

# Index 0 and 7 are both Sunday.
DAY_OF_WEEK_NAMES = ("SUN", "MON", "TUE", "WED", "THU", "FRI", "SAT")


FIELD_SPECS: dict[CronField, FieldSpec] = {
    CronField.SECONDS: FieldSpec(0, 59, supports_interval=True),
    CronField.MINUTES: FieldSpec(0, 59, supports_interval=True),
    CronField.HOURS: FieldSpec(0, 23, supports_interval=True),
    CronField.DAYS_OF_MONTH: FieldSpec(1, 31),
    CronField.MONTHS: FieldSpec(1, 12, names=MONTH_NAMES),
    CronField.DAYS_OF_WEEK: FieldSpec(0, 7, names=DAY_OF_WEEK_NAMES),
}
