"""Temporal Value Utilities

Comparison and merging helpers used to reconcile independently parsed
temporal values of different granularity.
"""

from datetime import date, datetime, time
from typing import Iterable, Optional

from dateutil import tz
from dateutil.relativedelta import relativedelta

from .models import TemporalShape, TemporalValue


def resolution(value: Optional[TemporalValue]) -> int:
    """Date-level resolution: 1 for a year, 2 for a year-month, 3 for a full date."""
    if value is None:
        return 0
    return value.date_resolution


def same_or_contained(first: Optional[TemporalValue], second: Optional[TemporalValue]) -> bool:
    """True when both values are equal at date level, or one is a coarser prefix of the other."""
    if first is None or second is None:
        return False

    if first.day is not None and second.day is not None:
        return (first.year, first.month, first.day) == (second.year, second.month, second.day)

    if first.year != second.year:
        return False
    if first.month is None or second.month is None:
        return True
    if first.month != second.month:
        return False
    if first.day is None or second.day is None:
        return True
    return first.day == second.day


def same_or_contained_or_null(first: Optional[TemporalValue], second: Optional[TemporalValue]) -> bool:
    if first is None or second is None:
        return True
    return same_or_contained(first, second)


def same_date(first: Optional[TemporalValue], second: Optional[TemporalValue]) -> bool:
    """True only for two complete dates on the same day."""
    if first is None or second is None:
        return False
    if first.day is None or second.day is None:
        return False
    return (first.year, first.month, first.day) == (second.year, second.month, second.day)


def resolve_ambiguous_dates(reliable: Optional[TemporalValue],
                            candidates: Iterable[TemporalValue]) -> Optional[TemporalValue]:
    """Pick the candidate falling on the same day as a reliable value, e.g. for 5/4/2014."""
    for candidate in candidates:
        if same_date(reliable, candidate):
            return candidate
    return None


_COMPARED_FIELDS = ("year", "month", "day", "hour", "minute", "second", "microsecond")


def best_resolution(first: Optional[TemporalValue],
                    second: Optional[TemporalValue]) -> Optional[TemporalValue]:
    """The finer of two values, or None when any field both supply disagrees."""
    if first is None:
        return second
    if second is None:
        return first

    for name in _COMPARED_FIELDS:
        first_part = getattr(first, name)
        second_part = getattr(second, name)
        if first_part is not None and second_part is not None and first_part != second_part:
            return None

    if first.resolution > second.resolution:
        return first
    return second


def non_conflicting_date_parts(first: Optional[TemporalValue],
                               second: Optional[TemporalValue],
                               third: Optional[TemporalValue]) -> Optional[TemporalValue]:
    """Merge up to three values, keeping only the date parts they all agree on.

    Years must agree or there is no merge. A field missing from one value but
    present in another counts as disagreement, so 1984-03 and 1984-03-22 merge
    to 1984-03.
    """
    values = [value for value in (first, second, third) if value is not None]
    if not values:
        return None
    if len(values) == 1:
        return values[0]

    years = {value.year for value in values}
    if len(years) != 1:
        return None
    year = years.pop()

    months = {value.month for value in values}
    if len(months) != 1:
        return TemporalValue.of(year)
    month = months.pop()

    days = {value.day for value in values}
    if len(days) == 1:
        return best_resolution(first, best_resolution(second, third))

    if month is None:
        return TemporalValue.of(year)
    return TemporalValue.of(year, month)


def _first_day(value: TemporalValue) -> date:
    return date(value.year, value.month or 1, value.day or 1)


def _last_day(value: TemporalValue) -> date:
    if value.day is not None:
        return date(value.year, value.month, value.day)
    if value.month is not None:
        return date(value.year, value.month, 1) + relativedelta(day=31)
    return date(value.year, 12, 31)


def within_range(begin: TemporalValue, end: TemporalValue, value: TemporalValue) -> bool:
    """True when the whole period of ``value`` lies between ``begin`` and ``end``, compared by date."""
    return _first_day(begin) <= _first_day(value) and _last_day(value) <= _last_day(end)


def limit_to_resolution(value: Optional[TemporalValue], shape: TemporalShape) -> Optional[TemporalValue]:
    """Truncate a value to at most the given granularity."""
    if value is None:
        return None
    return value.truncate(shape)


def _to_utc_naive(value: TemporalValue) -> datetime:
    return value.to_datetime().astimezone(tz.UTC).replace(tzinfo=None)


def to_earliest_datetime(value: Optional[TemporalValue], ignore_offset: bool = False) -> Optional[datetime]:
    """First instant of the value's period as a naive datetime.

    Values with an offset are converted to UTC unless ``ignore_offset`` is set.
    """
    if value is None:
        return None
    if value.hour is not None:
        if value.has_offset and not ignore_offset:
            return _to_utc_naive(value)
        return value.without_offset().to_datetime()
    return datetime.combine(_first_day(value), time.min)


def to_latest_datetime(value: Optional[TemporalValue], ignore_offset: bool = False) -> Optional[datetime]:
    """Last second of the value's period as a naive datetime."""
    if value is None:
        return None
    if value.hour is not None:
        if value.has_offset and not ignore_offset:
            return _to_utc_naive(value)
        return value.without_offset().to_datetime()
    return datetime.combine(_last_day(value), time(23, 59, 59))
