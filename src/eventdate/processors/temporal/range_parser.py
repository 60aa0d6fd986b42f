"""Temporal Range Reconciler

Interprets an event date recorded as an interval, together with any
discrete year/month/day and start/end day-of-year values, into a start and
end of equal granularity in chronological order.
"""

from datetime import date
from typing import Optional, Set

from dateutil.relativedelta import relativedelta

from ...core.logging_manager import LoggingManager
from . import temporal_utils
from .delimiter_utils import split_period
from .models import EventRange, IssueFlag, TemporalShape, TemporalValue
from .multiinput_parser import MultiinputTemporalParser
from .text_parser import PartValue


def _is_blank(value: PartValue) -> bool:
    return value is None or not str(value).strip()


def shape_difference(start: TemporalValue, end: TemporalValue) -> int:
    """Signed distance from ``start`` to ``end`` in the unit of their shared shape.

    Years for years, months for year-months, days for dates and seconds for
    date-times. Both values must have the same shape.
    """
    shape = start.shape
    if shape == TemporalShape.YEAR:
        return relativedelta(date(end.year, 1, 1), date(start.year, 1, 1)).years
    if shape == TemporalShape.YEAR_MONTH:
        delta = relativedelta(date(end.year, end.month, 1), date(start.year, start.month, 1))
        return delta.years * 12 + delta.months
    if shape == TemporalShape.DATE:
        return (end.to_date() - start.to_date()).days
    return int((end.to_datetime() - start.to_datetime()).total_seconds())


class TemporalRangeParser:
    """Reconciles a recorded date range with the discrete date fields of the same event."""

    def __init__(self, temporal_parser: Optional[MultiinputTemporalParser] = None):
        self.logger = LoggingManager.get_logger(__name__)
        self.temporal_parser = temporal_parser or MultiinputTemporalParser()

    def parse_range(self, date_range: Optional[str]) -> EventRange:
        """Interpret a range recorded only as free text."""
        return self.parse(None, None, None, date_range)

    def parse(self, year: PartValue, month: PartValue, day: PartValue,
              date_range: Optional[str], start_day_of_year: PartValue = None,
              end_day_of_year: PartValue = None) -> EventRange:
        """Interpret the recorded range of an event.

        Args:
            year: Recorded year
            month: Recorded month
            day: Recorded day of month
            date_range: Free-text date or interval such as ``1930-01-02/15``
            start_day_of_year: Ordinal day of the start, used with ``year``
            end_day_of_year: Ordinal day of the end, used with ``year``

        Returns:
            The reconciled range; unresolvable input yields empty endpoints with issues
        """
        try:
            return self._parse(year, month, day, date_range, start_day_of_year, end_day_of_year)
        except Exception as e:
            self.logger.error(f"Failed to interpret range {date_range!r} for {year}-{month}-{day}: {e}",
                              exc_info=True)
            return EventRange(None, None, frozenset({IssueFlag.RECORDED_DATE_INVALID,
                                                     IssueFlag.INTERPRETATION_ERROR}))

    def _parse(self, year: PartValue, month: PartValue, day: PartValue, date_range: Optional[str],
               start_day_of_year: PartValue, end_day_of_year: PartValue) -> EventRange:
        raw_start, raw_end = split_period(date_range)
        issues: Set[IssueFlag] = set()

        if not _is_blank(date_range) and not _is_blank(year):
            accepted = self._accept_range_endpoints(year, month, day, raw_start, raw_end)
            if accepted:
                start = self._parse_and_set(None, None, None, raw_start, start_day_of_year, issues)
                end = self._parse_and_set(None, None, None, raw_end, end_day_of_year, issues)
                return self.final_checks(start, end, issues)

        start = self._parse_and_set(year, month, day, raw_start, start_day_of_year, issues)
        end = self._parse_and_set(year, month, day, raw_end, end_day_of_year, issues)

        if start is None and end is None:
            return EventRange(None, None, frozenset(issues))
        if start is None or end is None:
            issues.add(IssueFlag.RECORDED_DATE_MISMATCH)
            return EventRange(None, None, frozenset(issues))

        return self.final_checks(start, end, issues)

    def _accept_range_endpoints(self, year: PartValue, month: PartValue, day: PartValue,
                                raw_start: str, raw_end: str) -> bool:
        """Whether the discrete date agrees with the range so the endpoints can be taken as recorded.

        The discrete date must lie within the endpoints, in either order, at a
        comparable granularity; or the endpoints must merge to exactly the
        discrete date.
        """
        start = self.temporal_parser.parse_recorded_date(None, None, None, raw_start, None)
        end = self.temporal_parser.parse_recorded_date(None, None, None, raw_end, None)
        ymd = self.temporal_parser.parse_recorded_date(year, month, day, None, None)
        if not (start.is_successful and end.is_successful and ymd.is_successful):
            return False

        start_value, end_value, ymd_value = start.payload, end.payload, ymd.payload
        within = (temporal_utils.within_range(start_value, end_value, ymd_value)
                  or temporal_utils.within_range(end_value, start_value, ymd_value))
        same_tier = ymd_value.shape.tier == start_value.shape.tier == end_value.shape.tier
        all_days = min(ymd_value.shape.tier, start_value.shape.tier, end_value.shape.tier) >= TemporalShape.DATE.tier
        if within and (same_tier or all_days):
            return True

        return temporal_utils.non_conflicting_date_parts(start_value, end_value, None) == ymd_value

    def _parse_and_set(self, year: PartValue, month: PartValue, day: PartValue,
                       date_string: Optional[str], day_of_year: PartValue,
                       issues: Set[IssueFlag]) -> Optional[TemporalValue]:
        result = self.temporal_parser.parse_recorded_date(year, month, day, date_string, day_of_year)
        issues.update(result.issues)
        return result.payload

    def final_checks(self, start: Optional[TemporalValue], end: Optional[TemporalValue],
                     issues: Set[IssueFlag]) -> EventRange:
        """Align granularity and order of the two endpoints.

        Endpoints of different granularity are truncated to the coarser one, a
        lone UTC offset is dropped, and a reversed range is swapped with an
        invalid issue.
        """
        issues = set(issues)
        if start is None or end is None:
            return EventRange(start, end, frozenset(issues))

        if start.shape.tier != end.shape.tier:
            coarser = start.shape if start.shape.tier < end.shape.tier else end.shape
            self.logger.debug(f"Range endpoints {start} and {end} differ in granularity, limiting to {coarser.name}")
            start = temporal_utils.limit_to_resolution(start, coarser)
            end = temporal_utils.limit_to_resolution(end, coarser)
            issues.add(IssueFlag.RECORDED_DATE_MISMATCH)

        if start.has_offset != end.has_offset:
            start = start.without_offset()
            end = end.without_offset()

        if start.shape == end.shape:
            if shape_difference(start, end) < 0:
                self.logger.debug(f"Range {start}/{end} is reversed")
                start, end = end, start
                issues.add(IssueFlag.RECORDED_DATE_INVALID)
        else:
            issues.add(IssueFlag.RECORDED_DATE_UNLIKELY)

        return EventRange(start, end, frozenset(issues))
