"""Timezone helpers for DST transitions.

All "local" values here are naive wall-clock datetimes interpreted in a
zone. A fall-back transition makes an *ambiguous* interval of wall-clock
values that occur twice (daylight offset first, then standard offset); a
spring-forward transition makes an *invalid* interval of wall-clock values
that never occur.

Zones are any ``tzinfo`` honoring PEP 495 ``fold``: ``zoneinfo.ZoneInfo``,
``datetime.timezone`` or ``dateutil.tz`` zones.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo

from dateutil import tz

from cronbits.config import get_config

UTC = timezone.utc

_UTC_KEYS = frozenset({"UTC", "Etc/UTC", "Etc/Universal", "Universal", "Zulu", "Etc/Zulu"})

_RESOLUTION = timedelta(microseconds=1)


def resolve_zone(zone: tzinfo | str) -> tzinfo:
    """Return a tzinfo for a tzinfo or an IANA zone name."""
    if isinstance(zone, str):
        if zone.upper() in ("UTC", "Z"):
            return UTC
        return ZoneInfo(zone)
    return zone


def is_utc(zone: tzinfo | None) -> bool:
    """Check whether a tzinfo is a UTC zone."""
    if zone is None:
        return False
    if zone is UTC or isinstance(zone, tz.tzutc):
        return True
    return isinstance(zone, ZoneInfo) and zone.key in _UTC_KEYS


def local_zone(override: tzinfo | str | None = None) -> tzinfo:
    """Return the zone "local" datetimes are resolved against.

    Precedence: ``override``, then the configured ``local_timezone``, then
    the operating system zone.
    """
    if override is not None:
        return resolve_zone(override)

    configured = get_config().local_timezone
    if configured:
        return resolve_zone(configured)

    return tz.tzlocal()


def utc_offset(zone: tzinfo, local: datetime, fold: int = 0) -> timedelta:
    """Return the UTC offset of a wall-clock time under the given fold."""
    offset = local.replace(tzinfo=zone, fold=fold).utcoffset()
    return offset if offset is not None else timedelta(0)


def is_invalid_time(zone: tzinfo, local: datetime) -> bool:
    """Check whether a wall-clock time is skipped by a spring-forward transition."""
    return not tz.datetime_exists(local, zone)


def is_ambiguous_time(zone: tzinfo, local: datetime) -> bool:
    """Check whether a wall-clock time occurs twice due to a fall-back transition."""
    return tz.datetime_exists(local, zone) and tz.datetime_ambiguous(local, zone)


def get_daylight_offset(zone: tzinfo, ambiguous_local: datetime) -> timedelta:
    """Return the offset of the earlier (daylight) occurrence."""
    return utc_offset(zone, ambiguous_local, fold=0)


def get_standard_offset(zone: tzinfo, ambiguous_local: datetime) -> timedelta:
    """Return the offset of the later (standard) occurrence."""
    return utc_offset(zone, ambiguous_local, fold=1)


def _offset_at(zone: tzinfo, instant: datetime) -> timedelta:
    offset = instant.replace(tzinfo=UTC).astimezone(zone).utcoffset()
    return offset if offset is not None else timedelta(0)


def transition_instant(zone: tzinfo, local: datetime) -> datetime:
    """Return the naive UTC instant of the transition around a wall-clock time.

    ``local`` must be ambiguous or invalid in ``zone``. The two fold readings
    of ``local`` bracket the transition; a binary search narrows the bracket
    down to the first instant carrying the post-transition offset.
    """
    low = local - utc_offset(zone, local, fold=0)
    high = local - utc_offset(zone, local, fold=1)
    if high < low:
        low, high = high, low

    target = _offset_at(zone, high)
    while high - low > _RESOLUTION:
        middle = low + (high - low) // 2
        if _offset_at(zone, middle) == target:
            high = middle
        else:
            low = middle

    return high


def get_daylight_end(zone: tzinfo, ambiguous_local: datetime) -> datetime:
    """Return the last wall-clock value of the daylight part of an ambiguous interval."""
    instant = transition_instant(zone, ambiguous_local)
    return instant + get_daylight_offset(zone, ambiguous_local) - _RESOLUTION


def get_standard_start(zone: tzinfo, ambiguous_local: datetime) -> datetime:
    """Return the first wall-clock value of the standard part of an ambiguous interval."""
    instant = transition_instant(zone, ambiguous_local)
    return instant + get_standard_offset(zone, ambiguous_local)


def get_ambiguous_end(zone: tzinfo, ambiguous_local: datetime) -> datetime:
    """Return the first wall-clock value after an ambiguous interval."""
    instant = transition_instant(zone, ambiguous_local)
    return instant + get_daylight_offset(zone, ambiguous_local)


def get_daylight_start(zone: tzinfo, invalid_local: datetime) -> datetime:
    """Return the first valid zoned instant after an invalid wall-clock time."""
    instant = transition_instant(zone, invalid_local)
    return instant.replace(tzinfo=UTC).astimezone(zone)
