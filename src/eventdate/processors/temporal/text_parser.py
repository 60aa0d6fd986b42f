"""Textual-Month Tokenizer, Date Parts Normalizer and Text Date Parser

Free text with a letter-based month name ("12th Jan. 1999", "März 3 2001")
is split into year, month and day candidates; purely numeric input is handed
to the numeric engine. Year, month and day fields supplied separately are
cleaned up (float exports, month names) before strict parsing.
"""

import re
from dataclasses import dataclass
from enum import Enum
from importlib import resources
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple, Union

from ...core.error_handler import ConfigurationError, TemporalParseError
from ...core.logging_manager import LoggingManager
from .models import Confidence, Error, Fail, ParseOutcome, Success, TemporalValue
from .numerical_parser import NumericalDateParser
from .ordering import DateComponentOrdering


MONTH_RESOURCE = "month.tsv"

MONTH_KEYS = (
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
)

PartValue = Union[str, int, None]


class TokenType(Enum):
    """Kinds of date token found in free text."""
    INT_2 = "possible-day"
    INT_4 = "possible-year"
    TEXT = "possible-text-month"


@dataclass(frozen=True)
class DateToken:
    token: str
    token_type: TokenType


@dataclass(frozen=True)
class DateTokens:
    """At most one token per type; repeated types push the earlier token to ``discarded``."""
    tokens: Tuple[DateToken, ...] = ()
    discarded: Tuple[DateToken, ...] = ()

    @property
    def size(self) -> int:
        return len(self.tokens)

    @property
    def contains_discarded_tokens(self) -> bool:
        return bool(self.discarded)

    def get_token(self, token_type: TokenType) -> Optional[DateToken]:
        for token in self.tokens:
            if token.token_type == token_type:
                return token
        return None


class TextualMonthDateTokenizer:
    """Splits free text into possible year, month-name and day tokens."""

    SEPARATOR_PATTERN = re.compile(r"(?:[^\w.]|_)+")
    DAY_SUFFIXES_PATTERN = re.compile(r"(?<=[0-9])(st|nd|rd|th|\.)", re.IGNORECASE)
    PATTERNS_BY_TYPE = (
        (TokenType.INT_2, re.compile(r"[0-9]{1,2}")),
        (TokenType.INT_4, re.compile(r"[0-9]{4}")),
        (TokenType.TEXT, re.compile(r"(?:[^\W\d_]|\.){1,10}")),
    )

    def tokenize(self, text: Optional[str]) -> Optional[DateTokens]:
        """Tokenize free text; None for blank input."""
        if text is None or not text.strip():
            return None

        text = self.DAY_SUFFIXES_PATTERN.sub("", text)
        by_type: Dict[TokenType, DateToken] = {}
        discarded: List[DateToken] = []

        for part in self.SEPARATOR_PATTERN.split(text):
            for token_type, pattern in self.PATTERNS_BY_TYPE:
                if pattern.fullmatch(part):
                    previous = by_type.pop(token_type, None)
                    if previous is not None:
                        discarded.append(previous)
                    by_type[token_type] = DateToken(part, token_type)
                    break

        return DateTokens(tuple(by_type.values()), tuple(discarded))


def load_month_names(resource: str = MONTH_RESOURCE) -> Tuple[FrozenSet[str], ...]:
    """Load month names and alternatives from the bundled dictionary.

    Returns:
        Twelve sets of lower-cased names, January first

    Raises:
        ConfigurationError: If the dictionary resource is missing
    """
    logger = LoggingManager.get_logger(__name__)
    names: Dict[str, set] = {key: {key} for key in MONTH_KEYS}

    try:
        content = resources.files(__package__).joinpath("resources").joinpath(resource).read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ConfigurationError(f"Month dictionary not found: {resource}") from e

    for line in content.splitlines():
        if not line.strip() or line.startswith("#"):
            continue
        columns = line.split("\t")
        key = columns[0].strip().lower()
        if key not in names:
            logger.error(f"Unknown month '{key}' found in {resource}")
            continue
        if len(columns) > 1:
            names[key].update(alt.strip().lower() for alt in columns[1].split(",") if alt.strip())

    return tuple(frozenset(names[key]) for key in MONTH_KEYS)


@dataclass(frozen=True)
class NormalizedYearMonthDay:
    """Result of normalizing year, month and day fields."""
    year: Optional[int]
    month: Optional[int]
    day: Optional[int]
    year_discarded: bool = False
    month_discarded: bool = False
    day_discarded: bool = False

    @property
    def contains_discarded_part(self) -> bool:
        return self.year_discarded or self.month_discarded or self.day_discarded


@dataclass(frozen=True)
class NormalizedYearDayOfYear:
    """Result of normalizing year and day-of-year fields."""
    year: Optional[int]
    day_of_year: Optional[int]
    year_discarded: bool = False
    day_of_year_discarded: bool = False

    @property
    def contains_discarded_part(self) -> bool:
        return self.year_discarded or self.day_of_year_discarded


class DatePartsNormalizer:
    """Cleans raw year, month and day fields before strict parsing."""

    STRING_NULL = "\\N"
    INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")

    def __init__(self, month_names: Optional[Sequence[FrozenSet[str]]] = None):
        self.month_names = tuple(month_names) if month_names is not None else load_month_names()

    def normalize(self, year: PartValue, month: PartValue, day: PartValue) -> NormalizedYearMonthDay:
        year = self.normalize_float(year)
        month = self.normalize_float(month)
        day = self.normalize_float(day)

        month_number = self._parse_or_none(month)
        if month_number is None:
            month_number = self.month_name_to_numerical(month)

        year_number = self._parse_or_none(year)
        day_number = self._parse_or_none(day)

        return NormalizedYearMonthDay(
            year=year_number,
            month=month_number,
            day=day_number,
            year_discarded=self._was_discarded(year, year_number),
            month_discarded=self._was_discarded(month, month_number),
            day_discarded=self._was_discarded(day, day_number),
        )

    def normalize_year_day_of_year(self, year: PartValue, day_of_year: PartValue) -> NormalizedYearDayOfYear:
        year = self.normalize_float(year)
        day_of_year = self.normalize_float(day_of_year)

        year_number = self._parse_or_none(year)
        day_number = self._parse_or_none(day_of_year)
        return NormalizedYearDayOfYear(
            year=year_number,
            day_of_year=day_number,
            year_discarded=self._was_discarded(year, year_number),
            day_of_year_discarded=self._was_discarded(day_of_year, day_number),
        )

    def month_name_to_numerical(self, month: Optional[str]) -> Optional[int]:
        """Map a month name such as "Sept." or "janvier" to 1..12."""
        if month is None or not month.strip():
            return None

        lowered = month.strip().lower()
        for number, names in enumerate(self.month_names, start=1):
            if lowered in names or (lowered.endswith(".") and lowered[:-1] in names):
                return number
        return None

    def normalize_float(self, value: PartValue) -> Optional[str]:
        """Turn database-export floats such as "1978.0" into "1978"."""
        if value is None:
            return None
        value = str(value)
        if ".0" in value:
            try:
                number = float(value)
            except ValueError:
                return value
            if number.is_integer():
                return str(int(number))
        return value

    def _parse_or_none(self, value: Optional[str]) -> Optional[int]:
        if value is None:
            return None
        value = value.strip()
        if not self.INTEGER_PATTERN.fullmatch(value):
            return None
        return int(value)

    def _was_discarded(self, raw: Optional[str], parsed: Optional[int]) -> bool:
        if raw is None or not raw.strip() or raw == self.STRING_NULL:
            return False
        return parsed is None


class TextDateParser:
    """Parses free-text dates, delegating numeric input to the numeric engine.

    When created with preferred orderings, inputs that remain ambiguous are
    retried with each ordering in turn.
    """

    ISO_YEAR_RANGE_PATTERN = re.compile(r"([12][0-9]{3})/([P12]\d[^/]+)")
    ISO_DATE_RANGE_PATTERN = re.compile(r"([12][0-9]{3}[^/]+)/([^/]{2,})")
    # Only digits and punctuation, plus the ISO 'T' and 'W' markers and a trailing 'Z'
    NUMERICAL_DATE_PATTERN = re.compile(r"[^a-zA-VX-Z]+[\dT]?[^a-zA-Z]+Z?")

    def __init__(self, numerical_parser: Optional[NumericalDateParser] = None,
                 normalizer: Optional[DatePartsNormalizer] = None,
                 orderings: Sequence[DateComponentOrdering] = ()):
        """Initialize the text date parser.

        Args:
            numerical_parser: Numeric engine; a default one if omitted
            normalizer: Date parts normalizer; one backed by the bundled month dictionary if omitted
            orderings: Preferred orderings for disambiguating numeric dates
        """
        self.logger = LoggingManager.get_logger(__name__)
        self.numerical_parser = numerical_parser or NumericalDateParser()
        self.normalizer = normalizer or DatePartsNormalizer()
        self.tokenizer = TextualMonthDateTokenizer()
        self.orderings = tuple(orderings)

    def parse(self, text: Optional[str]) -> ParseOutcome[TemporalValue]:
        """Parse a free-text date, applying preferred orderings when configured.

        Input that does not parse is a Fail; only an unexpected failure of the
        parser itself is reported as an Error.
        """
        try:
            if self.orderings:
                return self.parse_with_orderings(text, self.orderings)
            return self.parse_text(text)
        except Exception as e:
            self.logger.error(f"Unexpected failure parsing date {text!r}: {e}", exc_info=True)
            error = TemporalParseError(f"Unexpected failure parsing date {text!r}: {e}")
            error.__cause__ = e
            return Error(error)

    def parse_text(self, text: Optional[str]) -> ParseOutcome[TemporalValue]:
        if text is None or not text.strip():
            return Fail()

        # Only the start of an ISO interval is taken
        found = self.ISO_YEAR_RANGE_PATTERN.fullmatch(text) or self.ISO_DATE_RANGE_PATTERN.fullmatch(text)
        if found:
            return self.numerical_parser.parse(found.group(1), DateComponentOrdering.ISO_ETC)

        if self.NUMERICAL_DATE_PATTERN.fullmatch(text):
            return self.numerical_parser.parse(text, DateComponentOrdering.ISO_ETC)

        tokens = self.tokenizer.tokenize(text)
        # Textual-month partial dates are not supported
        if tokens is not None and not tokens.contains_discarded_tokens and tokens.size == 3:
            normalized = self.normalizer.normalize(
                tokens.get_token(TokenType.INT_4).token,
                tokens.get_token(TokenType.TEXT).token,
                tokens.get_token(TokenType.INT_2).token,
            )
            if None not in (normalized.year, normalized.month, normalized.day):
                try:
                    return Success(TemporalValue.of(normalized.year, normalized.month, normalized.day),
                                   Confidence.DEFINITE)
                except ValueError:
                    self.logger.debug(f"Textual date {text!r} does not form a valid date")
        return Fail()

    def parse_with_hint(self, text: Optional[str],
                        ordering: Optional[DateComponentOrdering]) -> ParseOutcome[TemporalValue]:
        """Parse restricted to one ordering family."""
        return self.numerical_parser.parse(text, ordering)

    def parse_with_orderings(self, text: Optional[str],
                             orderings: Sequence[DateComponentOrdering]) -> ParseOutcome[TemporalValue]:
        outcome = self.parse_text(text)
        if outcome.is_successful:
            return outcome
        return self.numerical_parser.parse_with_orderings(text, orderings)

    def parse_parts(self, year: PartValue, month: PartValue, day: PartValue) -> ParseOutcome[TemporalValue]:
        """Parse separately supplied year, month and day after normalization.

        A successful parse that had to discard an unreadable part is only PROBABLE.
        """
        normalized = self.normalizer.normalize(year, month, day)
        outcome = self.numerical_parser.parse_ints(normalized.year, normalized.month, normalized.day)
        if outcome.is_successful and normalized.contains_discarded_part:
            return Success(outcome.payload, Confidence.PROBABLE)
        return outcome

    def parse_ints(self, year: Optional[int], month: Optional[int],
                   day: Optional[int]) -> ParseOutcome[TemporalValue]:
        return self.numerical_parser.parse_ints(year, month, day)

    def parse_year_day_of_year(self, year: PartValue, day_of_year: PartValue) -> ParseOutcome[TemporalValue]:
        """Parse a year and ordinal day after normalization."""
        normalized = self.normalizer.normalize_year_day_of_year(year, day_of_year)
        outcome = self.numerical_parser.parse_year_day_of_year(normalized.year, normalized.day_of_year)
        if outcome.is_successful and normalized.contains_discarded_part:
            return Success(outcome.payload, Confidence.PROBABLE)
        return outcome
