"""Numeric Temporal Engine

Parses purely numeric or punctuated date strings against the format
catalogue. Base patterns are tried first and the first match is definite;
otherwise every ambiguity group is run and the combined results are reduced
to a single outcome by ``AmbiguityTally``.
"""

from dataclasses import dataclass, replace
from datetime import date, timedelta
from typing import Iterable, Optional, Sequence, Tuple

from ...core.logging_manager import LoggingManager
from .format_catalogue import AmbiguityGroup, FormatCatalogue, FormatPattern, GroupMatch, HYPHEN
from .models import Confidence, Fail, ParseOutcome, Success, TemporalShape, TemporalValue
from .ordering import DateComponentOrdering


# Year of 2 to 4 digits, optionally followed by month and day of 1 or 2 digits
ISO_PARTIAL_PATTERN = FormatPattern(
    "u[-M[-d]]",
    DateComponentOrdering.YMD,
    (TemporalShape.DATE, TemporalShape.YEAR_MONTH, TemporalShape.YEAR),
)


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


@dataclass(frozen=True)
class AmbiguityTally:
    """Running state while reducing ambiguity-group results into one outcome.

    Each group contributes its number of matches unless its leading result was
    already produced by an earlier group, since overlapping families such as
    ``d/M/uuuu`` with and without a time can yield the same value twice.
    """
    number_parsed: int = 0
    last_result: Optional[TemporalValue] = None
    preferred: Optional[TemporalValue] = None
    others_equal: bool = False
    seen: Tuple[TemporalValue, ...] = ()
    alternatives: Tuple[TemporalValue, ...] = ()
    warnings: Tuple[str, ...] = ()

    def add(self, match: GroupMatch) -> "AmbiguityTally":
        """Fold one group's results into the tally."""
        if match.number_parsed == 0:
            return self

        result = match.result
        number_parsed = self.number_parsed
        seen = self.seen
        if result not in seen:
            number_parsed += match.number_parsed
            seen = seen + (result,)

        warnings = self.warnings
        if self.others_equal:
            warnings = warnings + ("more results found after all previous results were equal",)

        preferred = self.preferred
        others_equal = False
        alternatives = self.alternatives
        if match.preferred is not None:
            if preferred is not None:
                warnings = warnings + ("two preferred results",)
            preferred = match.preferred
            others_equal = bool(match.others) and all(other == match.preferred for other in match.others)
        elif len(match.others) > 1:
            others_equal = all(other == match.others[0] for other in match.others)
            alternatives = alternatives + tuple(other for other in match.others if other not in alternatives)

        return replace(
            self,
            number_parsed=number_parsed,
            last_result=result,
            preferred=preferred,
            others_equal=others_equal,
            seen=seen,
            alternatives=alternatives,
            warnings=warnings,
        )

    def outcome(self) -> ParseOutcome[TemporalValue]:
        """Apply the confidence policy to the accumulated results."""
        if self.number_parsed == 1:
            return Success(self.last_result, Confidence.DEFINITE)
        if self.number_parsed > 1:
            # Different patterns, same value: the ambiguity was cosmetic
            if self.others_equal:
                return Success(self.last_result, Confidence.DEFINITE)
            if self.preferred is not None:
                return Success(self.preferred, Confidence.PROBABLE)
            return Fail.ambiguous(self.alternatives)
        return Fail()


def reduce_group_matches(matches: Iterable[GroupMatch]) -> AmbiguityTally:
    """Fold a sequence of group results, starting from an empty tally."""
    tally = AmbiguityTally()
    for match in matches:
        tally = tally.add(match)
    return tally


class NumericalDateParser:
    """Parser for numeric dates backed by an immutable format catalogue."""

    def __init__(self, catalogue: Optional[FormatCatalogue] = None):
        """Initialize the parser.

        Args:
            catalogue: Format catalogue; the default four digit year catalogue if omitted
        """
        self.logger = LoggingManager.get_logger(__name__)
        self.catalogue = catalogue or FormatCatalogue.default()

    @classmethod
    def with_base_year(cls, base_year: int) -> "NumericalDateParser":
        """Parser that also accepts two digit years."""
        return cls(FormatCatalogue.with_base_year(base_year))

    @property
    def groups(self) -> Tuple[AmbiguityGroup, ...]:
        return self.catalogue.groups

    def parse(self, text: Optional[str],
              ordering: Optional[DateComponentOrdering] = None) -> ParseOutcome[TemporalValue]:
        """Parse a numeric date string.

        Args:
            text: Input such as ``2014-05-04`` or ``4/5/2014``
            ordering: Binding hint restricting the search to one ordering family

        Returns:
            Success, or Fail carrying alternatives when the input stayed ambiguous
        """
        if _is_blank(text):
            return Fail()

        if ordering is None:
            ordering = DateComponentOrdering.ISO_ETC

        for pattern in self.catalogue.patterns_for(ordering):
            value = pattern.match(text)
            if value is not None:
                return Success(value, Confidence.DEFINITE)

        # A hint is binding; its patterns are exhausted
        if ordering != DateComponentOrdering.ISO_ETC:
            return Fail()

        tally = reduce_group_matches(group.resolve(text) for group in self.catalogue.groups)
        for warning in tally.warnings:
            self.logger.warning(f"Ambiguity group configuration issue for input {text!r}: {warning}")

        self.logger.debug(f"Number of matches for {text!r}: {tally.number_parsed}")
        return tally.outcome()

    def parse_with_orderings(self, text: Optional[str],
                             orderings: Sequence[DateComponentOrdering]) -> ParseOutcome[TemporalValue]:
        """Parse without a hint and, only if that stays ambiguous, retry with each ordering in turn."""
        outcome = self.parse(text)
        if (not outcome.is_successful
                and outcome.confidence == Confidence.POSSIBLE
                and len(outcome.alternatives) > 1):
            for ordering in orderings:
                outcome = self.parse(text, ordering)
                if outcome.is_successful:
                    return outcome
        return outcome

    def parse_parts(self, year: Optional[str], month: Optional[str],
                    day: Optional[str]) -> ParseOutcome[TemporalValue]:
        """Parse year, month and day strings as a strict partial ISO date.

        A day without a month is rejected rather than guessed.
        """
        if _is_blank(month) and not _is_blank(day):
            return Fail()

        text = HYPHEN.join(str(part).strip() for part in (year, month, day) if not _is_blank(part))
        value = ISO_PARTIAL_PATTERN.match(text)
        if value is not None:
            return Success(value, Confidence.DEFINITE)
        return Fail()

    def parse_ints(self, year: Optional[int], month: Optional[int],
                   day: Optional[int]) -> ParseOutcome[TemporalValue]:
        """Integer counterpart of ``parse_parts``."""
        if month is None and day is not None:
            return Fail()
        return self.parse_parts(
            None if year is None else str(year),
            None if month is None else str(month),
            None if day is None else str(day),
        )

    def parse_year_day_of_year(self, year: Optional[int],
                               day_of_year: Optional[int]) -> ParseOutcome[TemporalValue]:
        """Parse a year and ordinal day into a date; both are required."""
        if year is None or day_of_year is None:
            return Fail()
        if year < 1 or year > 9999:
            return Fail()

        days_in_year = (date(year + 1, 1, 1) - date(year, 1, 1)).days if year < 9999 else 365
        if not 1 <= day_of_year <= days_in_year:
            return Fail()
        return Success(TemporalValue.from_date(date(year, 1, 1) + timedelta(days=day_of_year - 1)),
                       Confidence.DEFINITE)
