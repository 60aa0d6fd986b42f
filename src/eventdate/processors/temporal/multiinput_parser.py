"""Multi-Input Temporal Reconciler

Interprets an event date recorded up to three ways at once: separate year,
month and day fields, a free-text date string, and a year with a day of
year. Each source is parsed on its own, disagreements are recorded as issue
flags and the parts all sources agree on are merged into a single value.
"""

from datetime import date, timedelta
from typing import Optional, Sequence, Tuple

from ...core.logging_manager import LoggingManager
from . import temporal_utils
from .models import Confidence, IssueFlag, InterpretationResult, ParseOutcome, TemporalValue
from .numerical_parser import NumericalDateParser
from .ordering import DateComponentOrdering
from .text_parser import PartValue, TextDateParser


DEFAULT_MIN_DATE = date(1500, 1, 1)
DEFAULT_FUTURE_TOLERANCE_DAYS = 1

DateRange = Tuple[date, date]


def _is_blank(value: PartValue) -> bool:
    return value is None or not str(value).strip()


def _earliest_date(value: TemporalValue) -> Optional[date]:
    if value.year < date.min.year:
        return None
    return date(value.year, value.month or 1, value.day or 1)


class MultiinputTemporalParser:
    """Reconciles separately recorded year/month/day, date string and day-of-year values."""

    def __init__(self, text_parser: Optional[TextDateParser] = None,
                 min_date: date = DEFAULT_MIN_DATE,
                 future_tolerance_days: int = DEFAULT_FUTURE_TOLERANCE_DAYS):
        """Initialize the reconciler.

        Args:
            text_parser: Parser used for every source; a default one if omitted
            min_date: Earliest plausible event date
            future_tolerance_days: Days past today still accepted as plausible
        """
        self.logger = LoggingManager.get_logger(__name__)
        self.text_parser = text_parser or TextDateParser()
        self.min_date = min_date
        self.future_tolerance_days = future_tolerance_days

    @classmethod
    def create(cls, orderings: Sequence[DateComponentOrdering] = (),
               base_year: Optional[int] = None, **kwargs) -> "MultiinputTemporalParser":
        """Build a reconciler whose free-text parsing prefers the given orderings."""
        numerical_parser = (NumericalDateParser.with_base_year(base_year)
                            if base_year is not None else NumericalDateParser())
        return cls(TextDateParser(numerical_parser, orderings=orderings), **kwargs)

    def likely_range(self) -> DateRange:
        """Plausible window for event dates, ending shortly after today."""
        return self.min_date, date.today() + timedelta(days=self.future_tolerance_days)

    def is_valid_date(self, value: Optional[TemporalValue],
                      likely_range: Optional[DateRange] = None) -> bool:
        """Whether a value falls in the plausible window; partial dates count from their first day."""
        if value is None:
            return False
        lower, upper = likely_range or self.likely_range()
        earliest = _earliest_date(value)
        return earliest is not None and lower <= earliest <= upper

    def parse_recorded_date_string(self, date_string: Optional[str]) -> InterpretationResult[TemporalValue]:
        """Interpret a date recorded only as free text."""
        return self.parse_recorded_date(None, None, None, date_string, None)

    def parse_recorded_date(self, year: PartValue, month: PartValue, day: PartValue,
                            date_string: Optional[str],
                            day_of_year: PartValue) -> InterpretationResult[TemporalValue]:
        """Reconcile every recorded representation of one event date.

        Args:
            year: Recorded year
            month: Recorded month, numeric or a month name
            day: Recorded day of month
            date_string: Free-text date
            day_of_year: Recorded ordinal day, used with ``year``

        Returns:
            The merged value with its issues, or a failure carrying the issues
        """
        ymd_provided = not (_is_blank(year) and _is_blank(month) and _is_blank(day))
        date_string_provided = not _is_blank(date_string)
        y_doy_provided = not _is_blank(year) and not _is_blank(day_of_year)

        # A year only corroborates the day of year, it is not a separate source
        if y_doy_provided and _is_blank(month) and _is_blank(day):
            ymd_provided = False

        provided = (ymd_provided, date_string_provided, y_doy_provided)
        if not any(provided):
            return InterpretationResult.fail()
        two_or_more_provided = sum(provided) >= 2

        issues = set()

        ymd_result: Optional[ParseOutcome[TemporalValue]] = None
        ymd_value = None
        if ymd_provided:
            ymd_result = self.text_parser.parse_parts(year, month, day)
            ymd_value = ymd_result.payload
            if not ymd_result.is_successful:
                issues.add(IssueFlag.RECORDED_DATE_INVALID)

        date_result: Optional[ParseOutcome[TemporalValue]] = None
        date_value = None
        if date_string_provided:
            date_result = self.text_parser.parse(date_string)
            date_value = date_result.payload
            if not date_result.is_successful:
                issues.add(IssueFlag.RECORDED_DATE_INVALID)

        y_doy_result: Optional[ParseOutcome[TemporalValue]] = None
        y_doy_value = None
        if y_doy_provided:
            y_doy_result = self.text_parser.parse_year_day_of_year(year, day_of_year)
            y_doy_value = y_doy_result.payload
            if not y_doy_result.is_successful:
                issues.add(IssueFlag.RECORDED_DATE_INVALID)

        ymd_resolution = temporal_utils.resolution(ymd_value) if ymd_result and ymd_result.is_successful else -1
        date_resolution = temporal_utils.resolution(date_value) if date_result and date_result.is_successful else -1

        # An ambiguous date string can be settled by a source that agrees with one alternative
        date_alternatives = date_result.alternatives if date_result is not None else ()
        if (ymd_provided and date_string_provided and date_alternatives
                and not temporal_utils.same_or_contained(ymd_value, date_value)):
            resolved = temporal_utils.resolve_ambiguous_dates(ymd_value, date_alternatives)
            if resolved is not None:
                date_value = resolved
                self.logger.debug(f"Ambiguous date {date_string!r} resolved to {resolved} using year, month and day")
            else:
                issues.add(IssueFlag.RECORDED_DATE_INVALID)
                if ymd_value is not None:
                    # A parsed source agreeing with none of the readings conflicts with the date
                    issues.add(IssueFlag.RECORDED_DATE_MISMATCH)
        elif (ymd_provided and y_doy_provided and date_alternatives
              and not temporal_utils.same_or_contained(y_doy_value, date_value)):
            resolved = temporal_utils.resolve_ambiguous_dates(y_doy_value, date_alternatives)
            if resolved is not None:
                date_value = resolved
                self.logger.debug(f"Ambiguous date {date_string!r} resolved to {resolved} using day of year")
            else:
                issues.add(IssueFlag.RECORDED_DATE_INVALID)
                if y_doy_value is not None:
                    issues.add(IssueFlag.RECORDED_DATE_MISMATCH)

        if (temporal_utils.same_or_contained_or_null(ymd_value, date_value)
                and temporal_utils.same_or_contained_or_null(ymd_value, y_doy_value)
                and temporal_utils.same_or_contained_or_null(date_value, y_doy_value)):
            if date_value is not None:
                confidence = date_result.confidence
            elif ymd_value is not None:
                confidence = ymd_result.confidence
            elif y_doy_value is not None:
                confidence = y_doy_result.confidence
            else:
                confidence = None
        else:
            self.logger.debug(f"Conflicting sources: ymd={ymd_value}, date={date_value}, doy={y_doy_value}")
            issues.add(IssueFlag.RECORDED_DATE_MISMATCH)
            confidence = Confidence.PROBABLE

        if ymd_resolution > 0 and date_resolution > 0 and ymd_resolution != date_resolution:
            issues.add(IssueFlag.RECORDED_DATE_MISMATCH)

        merged = temporal_utils.non_conflicting_date_parts(ymd_value, date_value, y_doy_value)
        if merged is None:
            if two_or_more_provided:
                issues.add(IssueFlag.RECORDED_DATE_MISMATCH)
            return InterpretationResult.fail(issues)

        any_source_failed = ((ymd_provided and ymd_value is None)
                             or (date_string_provided and date_value is None)
                             or (y_doy_provided and y_doy_value is None))
        if any_source_failed:
            confidence = Confidence.PROBABLE

        if not self.is_valid_date(merged):
            issues.add(IssueFlag.RECORDED_DATE_UNLIKELY)
            return InterpretationResult.fail(issues)

        return InterpretationResult.success(merged, confidence or Confidence.DEFINITE, issues)

    def parse_local_date(self, date_string: Optional[str],
                         likely_range: Optional[DateRange],
                         unlikely_issue: IssueFlag,
                         fail_issue: Optional[IssueFlag] = None) -> InterpretationResult[TemporalValue]:
        """Parse a single date string, flagging values outside a caller-supplied window.

        Args:
            date_string: Free-text date
            likely_range: Plausible window; the event date window if omitted
            unlikely_issue: Issue raised for a value outside the window
            fail_issue: Issue raised when the text does not parse, if any
        """
        if _is_blank(date_string):
            return InterpretationResult.fail()

        outcome = self.text_parser.parse(date_string)
        if not outcome.is_successful:
            return InterpretationResult.fail(() if fail_issue is None else (fail_issue,))

        result = InterpretationResult(outcome)
        if not self.is_valid_date(outcome.payload, likely_range):
            result = result.with_issue(unlikely_issue)
        return result
