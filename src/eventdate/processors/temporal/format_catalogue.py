"""Format Catalogue for Numeric Event Dates

Immutable registry of date/time format patterns grouped by component
ordering. Templates use LDML style pattern letters and are compiled once to
regular expressions with named groups; matching is strict, so out-of-range
fields fail instead of rolling over.

Pattern letters:
    uuuu / yyyy   four digit year
    u / y         year of two to four digits
    uu / yy       two digit year, expanded against the catalogue base year
    M, d, H, m, s one or two digits; doubled letters require exactly two
    S...S         fraction of a second with exactly that many digits
    DDD           day of year, three digits
    YYYY, ww      ISO week-based year and week number
    X             offset as Z, +HH or +HHmm; XXX as Z or +HH:MM
    xxx           offset as +HH:MM
    'text'        literal text
    [ ... ]       optional section
"""

import re
from dataclasses import dataclass, field
from datetime import date, timedelta
from types import MappingProxyType
from typing import Dict, FrozenSet, List, Mapping, Optional, Pattern, Tuple

from ...core.error_handler import ConfigurationError, PatternConfigurationError
from ...core.logging_manager import LoggingManager
from .models import TemporalShape, TemporalValue
from .ordering import DateComponentOrdering


HYPHEN = "-"
MINUS = "−"

# Pattern letter -> {run length: (group name, regex)}
_FIELD_TOKENS: Dict[str, Dict[int, Tuple[str, str]]] = {
    "u": {1: ("year", r"\d{2,4}"), 2: ("reduced_year", r"\d{2}"), 4: ("year", r"\d{4}")},
    "y": {1: ("year", r"\d{2,4}"), 2: ("reduced_year", r"\d{2}"), 4: ("year", r"\d{4}")},
    "M": {1: ("month", r"\d{1,2}"), 2: ("month", r"\d{2}")},
    "d": {1: ("day", r"\d{1,2}"), 2: ("day", r"\d{2}")},
    "D": {1: ("day_of_year", r"\d{1,3}"), 3: ("day_of_year", r"\d{3}")},
    "H": {1: ("hour", r"\d{1,2}"), 2: ("hour", r"\d{2}")},
    "m": {1: ("minute", r"\d{1,2}"), 2: ("minute", r"\d{2}")},
    "s": {1: ("second", r"\d{1,2}"), 2: ("second", r"\d{2}")},
    "Y": {4: ("week_year", r"\d{4}")},
    "w": {1: ("week", r"\d{1,2}"), 2: ("week", r"\d{2}")},
    "X": {1: ("offset", r"Z|[+-]\d{2}(?:\d{2})?"), 2: ("offset", r"Z|[+-]\d{4}"),
          3: ("offset", r"Z|[+-]\d{2}:\d{2}")},
    "x": {1: ("offset", r"[+-]\d{2}(?:\d{2})?"), 2: ("offset", r"[+-]\d{4}"),
          3: ("offset", r"[+-]\d{2}:\d{2}")},
}

_MAX_FRACTION_DIGITS = 9


@dataclass(frozen=True)
class CompiledTemplate:
    """Regular expression and metadata compiled from a format template."""
    regex: Pattern
    fields: FrozenSet[str]
    min_length: int


def _field_token(letter: str, count: int, template: str) -> Tuple[str, str]:
    if letter == "S":
        if count > _MAX_FRACTION_DIGITS:
            raise PatternConfigurationError(f"Fraction of {count} digits is not supported", template)
        return "fraction", rf"\d{{{count}}}"

    by_count = _FIELD_TOKENS.get(letter)
    if by_count is None:
        raise PatternConfigurationError(f"Unknown pattern letter '{letter}'", template)
    if count not in by_count:
        raise PatternConfigurationError(f"Unsupported width {count} for pattern letter '{letter}'", template)
    return by_count[count]


def minimum_length(template: str) -> int:
    """Shortest input a template can match: optional sections and quotes removed."""
    depth = 0
    in_literal = False
    length = 0
    for char in template:
        if char == "'":
            in_literal = not in_literal
        elif in_literal:
            if depth == 0:
                length += 1
        elif char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
        elif depth == 0:
            length += 1
    return length


def compile_template(template: str) -> CompiledTemplate:
    """Compile a format template into a regular expression with named groups.

    Args:
        template: Pattern template such as ``uuuu-M-d'T'HH[:mm]``

    Returns:
        Compiled template

    Raises:
        PatternConfigurationError: If the template is malformed
    """
    if not template:
        raise PatternConfigurationError("Empty format template", template)

    parts: List[str] = []
    fields = set()
    depth = 0
    index = 0
    while index < len(template):
        char = template[index]
        if char == "'":
            end = template.find("'", index + 1)
            if end == -1:
                raise PatternConfigurationError("Unterminated literal", template)
            literal = template[index + 1:end]
            parts.append(re.escape(literal) if literal else "'")
            index = end + 1
        elif char == "[":
            depth += 1
            parts.append("(?:")
            index += 1
        elif char == "]":
            if depth == 0:
                raise PatternConfigurationError("Unbalanced optional section", template)
            depth -= 1
            parts.append(")?")
            index += 1
        elif char.isascii() and char.isalpha():
            end = index
            while end < len(template) and template[end] == char:
                end += 1
            name, regex = _field_token(char, end - index, template)
            if name in fields:
                raise PatternConfigurationError(f"Field '{name}' appears twice", template)
            fields.add(name)
            parts.append(f"(?P<{name}>{regex})")
            index = end
        else:
            parts.append(re.escape(char))
            index += 1

    if depth != 0:
        raise PatternConfigurationError("Unbalanced optional section", template)

    return CompiledTemplate(
        regex=re.compile("".join(parts), re.ASCII),
        fields=frozenset(fields),
        min_length=minimum_length(template),
    )


def parse_offset(text: str) -> timedelta:
    """Convert Z, +HH, +HHmm or +HH:MM to a timedelta."""
    if text == "Z":
        return timedelta(0)
    sign = -1 if text[0] == "-" else 1
    digits = text[1:].replace(":", "")
    hours = int(digits[:2])
    minutes = int(digits[2:4]) if len(digits) > 2 else 0
    if minutes > 59:
        raise ValueError(f"Invalid offset minutes: {text}")
    return sign * timedelta(hours=hours, minutes=minutes)


def _captured_shape(captured: Dict[str, str]) -> TemporalShape:
    if "offset" in captured:
        return TemporalShape.OFFSET_DATE_TIME
    if "hour" in captured:
        return TemporalShape.DATE_TIME
    if "day" in captured or "day_of_year" in captured or "week" in captured:
        return TemporalShape.DATE
    if "month" in captured:
        return TemporalShape.YEAR_MONTH
    return TemporalShape.YEAR


@dataclass(frozen=True)
class SeparatorNormalizer:
    """Rewrites alternative field separators to the canonical one."""
    separator: str
    alternatives: str
    _table: Dict[int, str] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if not self.separator or not self.alternatives:
            raise PatternConfigurationError("Separator and alternatives must not be blank")
        object.__setattr__(self, "_table", str.maketrans({char: self.separator for char in self.alternatives}))

    def normalize(self, text: str) -> str:
        return text.translate(self._table)


@dataclass(frozen=True)
class FormatPattern:
    """One format template tagged with its ordering family.

    Result shapes are tried from most to least specific; a shape is accepted
    only when it accounts for exactly the fields the input supplied, so an
    optional time section is never silently dropped.
    """
    template: str
    ordering: DateComponentOrdering
    shapes: Tuple[TemporalShape, ...]
    normalizer: Optional[SeparatorNormalizer] = None
    base_year: Optional[int] = None
    _compiled: CompiledTemplate = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if not self.shapes:
            raise PatternConfigurationError("At least one result shape is required", self.template)

        compiled = compile_template(self.template)
        if "reduced_year" in compiled.fields and self.base_year is None:
            raise PatternConfigurationError("Two digit year patterns require a base year", self.template)

        object.__setattr__(self, "shapes", tuple(sorted(self.shapes, key=lambda shape: -shape.value)))
        object.__setattr__(self, "_compiled", compiled)

    @property
    def min_length(self) -> int:
        return self._compiled.min_length

    @property
    def fields(self) -> FrozenSet[str]:
        return self._compiled.fields

    def match(self, text: Optional[str]) -> Optional[TemporalValue]:
        """Match the whole input against this pattern; None when it does not fit."""
        if text is None or len(text) < self.min_length:
            return None

        if self.normalizer is not None:
            text = self.normalizer.normalize(text)

        found = self._compiled.regex.fullmatch(text)
        if found is None:
            return None

        captured = {name: value for name, value in found.groupdict().items() if value is not None}
        captured_shape = _captured_shape(captured)
        for shape in self.shapes:
            if shape != captured_shape:
                continue
            try:
                return self._resolve(captured)
            except ValueError:
                return None
        return None

    def expand_reduced_year(self, two_digits: int) -> int:
        """Place a two digit year in the century of the base year, never after it."""
        century = self.base_year - self.base_year % 100
        year = century + two_digits
        if year > self.base_year:
            year -= 100
        return year

    def _resolve(self, captured: Dict[str, str]) -> TemporalValue:
        if "week" in captured:
            monday = date.fromisocalendar(int(captured["week_year"]), int(captured["week"]), 1)
            return TemporalValue.from_date(monday)

        if "reduced_year" in captured:
            year = self.expand_reduced_year(int(captured["reduced_year"]))
        else:
            year = int(captured["year"])

        if "day_of_year" in captured:
            day_of_year = int(captured["day_of_year"])
            days_in_year = (date(year + 1, 1, 1) - date(year, 1, 1)).days
            if not 1 <= day_of_year <= days_in_year:
                raise ValueError(f"Day of year out of range: {day_of_year}")
            return TemporalValue.from_date(date(year, 1, 1) + timedelta(days=day_of_year - 1))

        month = int(captured["month"]) if "month" in captured else None
        day = int(captured["day"]) if "day" in captured else None
        if "hour" not in captured:
            return TemporalValue(year, month, day)

        fraction = captured.get("fraction", "")
        return TemporalValue(
            year=year,
            month=month,
            day=day,
            hour=int(captured["hour"]),
            minute=int(captured.get("minute", 0)),
            second=int(captured.get("second", 0)),
            microsecond=int(fraction[:6].ljust(6, "0")),
            utc_offset=parse_offset(captured["offset"]) if "offset" in captured else None,
        )


def match(pattern: FormatPattern, text: Optional[str]) -> Optional[TemporalValue]:
    """Attempt one pattern against one input string."""
    return pattern.match(text)


@dataclass(frozen=True)
class GroupMatch:
    """Results of running every pattern of one ambiguity group."""
    number_parsed: int = 0
    preferred: Optional[TemporalValue] = None
    others: Tuple[TemporalValue, ...] = ()

    @property
    def result(self) -> Optional[TemporalValue]:
        if self.preferred is not None:
            return self.preferred
        return self.others[0] if self.others else None


@dataclass(frozen=True)
class AmbiguityGroup:
    """Patterns sharing one literal shape but assigning different meanings to its fields."""
    others: Tuple[FormatPattern, ...]
    preferred: Optional[FormatPattern] = None

    def __post_init__(self):
        if not self.others:
            raise PatternConfigurationError("An ambiguity group needs at least one non-preferred pattern")
        if self.preferred is None and len(self.others) < 2:
            raise PatternConfigurationError(
                "Without a preferred pattern an ambiguity group needs at least two patterns",
                self.others[0].template,
            )

        orderings = set()
        for pattern in self.patterns:
            if pattern.ordering in orderings:
                raise PatternConfigurationError(
                    f"Ordering {pattern.ordering.name} used twice in one ambiguity group", pattern.template
                )
            orderings.add(pattern.ordering)

    @property
    def patterns(self) -> Tuple[FormatPattern, ...]:
        """All patterns, preferred first."""
        if self.preferred is None:
            return self.others
        return (self.preferred,) + self.others

    def resolve(self, text: str) -> GroupMatch:
        """Run every pattern of the group without short-circuiting."""
        others = []
        for pattern in self.others:
            value = pattern.match(text)
            if value is not None:
                others.append(value)

        preferred = self.preferred.match(text) if self.preferred is not None else None
        number_parsed = len(others) + (1 if preferred is not None else 0)
        return GroupMatch(number_parsed=number_parsed, preferred=preferred, others=tuple(others))


class AmbiguityGroupBuilder:
    """Fluent builder for ambiguity groups."""

    def __init__(self, base_year: Optional[int] = None):
        self.base_year = base_year
        self._preferred: Optional[FormatPattern] = None
        self._others: List[FormatPattern] = []

    def _pattern(self, template: str, ordering: DateComponentOrdering, shape: TemporalShape,
                 separator: Optional[str], alternatives: Optional[str]) -> FormatPattern:
        normalizer = SeparatorNormalizer(separator, alternatives) if separator is not None else None
        return FormatPattern(template, ordering, (shape,), normalizer, self.base_year)

    def preferred(self, template: str, ordering: DateComponentOrdering, shape: TemporalShape,
                  separator: Optional[str] = None, alternatives: Optional[str] = None) -> "AmbiguityGroupBuilder":
        self._preferred = self._pattern(template, ordering, shape, separator, alternatives)
        return self

    def append(self, template: str, ordering: DateComponentOrdering, shape: TemporalShape,
               separator: Optional[str] = None, alternatives: Optional[str] = None) -> "AmbiguityGroupBuilder":
        self._others.append(self._pattern(template, ordering, shape, separator, alternatives))
        return self

    def build(self) -> AmbiguityGroup:
        return AmbiguityGroup(others=tuple(self._others), preferred=self._preferred)


def _pattern(template: str, ordering: DateComponentOrdering, *shapes: TemporalShape,
             separator: Optional[str] = None, alternatives: Optional[str] = None) -> FormatPattern:
    normalizer = SeparatorNormalizer(separator, alternatives) if separator is not None else None
    return FormatPattern(template, ordering, shapes, normalizer)


def _build_base_patterns() -> Tuple[FormatPattern, ...]:
    """Unambiguous patterns, ISO forms before localized ones."""
    O = DateComponentOrdering
    DATE = TemporalShape.DATE
    DATE_TIME = TemporalShape.DATE_TIME
    ZONED = TemporalShape.OFFSET_DATE_TIME

    patterns = [
        _pattern("uuuuMMdd", O.YMD, DATE),
        _pattern("uuuu-M-d", O.YMD, DATE, separator=HYPHEN, alternatives=MINUS + "."),
    ]

    # Space or T before the time; no fraction, or 1, 2, 3, 6 or 7 fraction digits
    for marker in ("' '", "'T'"):
        patterns.extend([
            _pattern(f"uuuu-M-d{marker}HH[[:]mm[[:]ss[.S]]]", O.YMDT, DATE_TIME,
                     separator=HYPHEN, alternatives=MINUS),
            _pattern(f"uuuu-M-d{marker}HH[:]mm[[:]ss.SS]", O.YMDT, DATE_TIME),
            _pattern(f"uuuu-M-d{marker}HH[:]mm[[:]ss.SSS]", O.YMDT, DATE_TIME),
            _pattern(f"uuuu-M-d{marker}HH[:]mm[[:]ss.SSSSSS]", O.YMDT, DATE_TIME),
            _pattern(f"uuuu-M-d{marker}HH[:]mm[[:]ss.SSSSSSS]", O.YMDT, DATE_TIME),
        ])
        if marker == "' '":
            patterns.append(_pattern("uuuu-M-d' 'HH[:]mm[[:]ss[.SSS]]X", O.YMDTZ, ZONED,
                                     separator=HYPHEN, alternatives=MINUS))

    # Accepts Z, +00, +0000 and +00:00, with - or the unicode minus for negative offsets
    patterns.extend([
        _pattern("uuuu-M-d'T'HH[:]mm[[:]ss[.SSS]]X", O.YMDTZ, ZONED, separator=HYPHEN, alternatives=MINUS),
        _pattern("uuuu-M-d'T'HH[:]mm[:]ss.SSSSSSX", O.YMDTZ, ZONED, separator=HYPHEN, alternatives=MINUS),
        _pattern("uuuu-M-d'T'HH[:]mm[[:]ss[.SSS]]xxx", O.YMDTZ, ZONED, separator=HYPHEN, alternatives=MINUS),
        _pattern("uuuu-M-d'T'HH[:]mm[:]ss.SSSSSSxxx", O.YMDTZ, ZONED, separator=HYPHEN, alternatives=MINUS),
    ])

    patterns.extend([
        _pattern("uuuu-M", O.YM, TemporalShape.YEAR_MONTH),
        _pattern("uuuu", O.Y, TemporalShape.YEAR),
        _pattern("uuuu/MM/dd", O.YMD, DATE),
        _pattern("uuuu/M/d", O.YMD, DATE),
        _pattern("uuuu年MM月dd日", O.HAN, DATE),
        _pattern("uuuu年M月d日", O.HAN, DATE),
        _pattern("YYYY-'W'ww", O.YW, DATE),
        _pattern("uuuu-DDD", O.YD, DATE),
    ])
    return tuple(patterns)


def _build_ambiguity_groups() -> Tuple[AmbiguityGroup, ...]:
    """Day-month-year versus month-day-year groups with four digit years."""
    O = DateComponentOrdering
    DATE = TemporalShape.DATE
    DATE_TIME = TemporalShape.DATE_TIME
    ZONED = TemporalShape.OFFSET_DATE_TIME
    slash_alternatives = HYPHEN + MINUS

    groups = [
        # Dot formats are common in continental Europe but not in the USA
        AmbiguityGroupBuilder()
        .preferred("d.M.uuuu", O.DMY, DATE)
        .append("M.d.uuuu", O.MDY, DATE)
        .build(),
    ]

    for marker in ("'T'", "' '"):
        groups.append(
            AmbiguityGroupBuilder()
            .append(f"d/M/uuuu{marker}HH[[:]mm[[:]ss[.SSS]]]", O.DMYT, DATE_TIME, "/", slash_alternatives)
            .append(f"M/d/uuuu{marker}HH[[:]mm[[:]ss[.SSS]]]", O.MDYT, DATE_TIME, "/", slash_alternatives)
            .build()
        )
        groups.append(
            AmbiguityGroupBuilder()
            .append(f"d/M/uuuu{marker}HH[[:]mm[[:]ss[.SSS]]][X]", O.DMYT, ZONED, "/", slash_alternatives)
            .append(f"M/d/uuuu{marker}HH[[:]mm[[:]ss[.SSS]]][X]", O.MDYT, ZONED, "/", slash_alternatives)
            .build()
        )

    groups.extend([
        AmbiguityGroupBuilder()
        .append("d/M/uuuu", O.DMY, DATE, "/", slash_alternatives)
        .append("M/d/uuuu", O.MDY, DATE, "/", slash_alternatives)
        .build(),
        # No separator
        AmbiguityGroupBuilder()
        .append("ddMMuuuu", O.DMY, DATE)
        .append("MMdduuuu", O.MDY, DATE)
        .build(),
        # Backslashes and underscores are not an official convention anywhere but do occur
        AmbiguityGroupBuilder()
        .append("d\\M\\uuuu", O.DMY, DATE, "\\", "_")
        .append("M\\d\\uuuu", O.MDY, DATE, "\\", "_")
        .build(),
    ])
    return tuple(groups)


def _build_two_digit_year_groups(base_year: int) -> Tuple[AmbiguityGroup, ...]:
    """Day-month-year versus month-day-year groups with two digit years."""
    O = DateComponentOrdering
    DATE = TemporalShape.DATE
    slash_alternatives = HYPHEN + MINUS

    return (
        AmbiguityGroupBuilder(base_year)
        .preferred("d.M.uu", O.DMY, DATE)
        .append("M.d.uu", O.MDY, DATE)
        .build(),
        AmbiguityGroupBuilder(base_year)
        .append("d/M/uu", O.DMY, DATE, "/", slash_alternatives)
        .append("M/d/uu", O.MDY, DATE, "/", slash_alternatives)
        .build(),
        AmbiguityGroupBuilder(base_year)
        .append("ddMMuu", O.DMY, DATE)
        .append("MMdduu", O.MDY, DATE)
        .build(),
        AmbiguityGroupBuilder(base_year)
        .append("d\\M\\uu", O.DMY, DATE, "\\", "_")
        .append("M\\d\\uu", O.MDY, DATE, "\\", "_")
        .build(),
    )


@dataclass(frozen=True)
class FormatCatalogue:
    """Immutable registry of base patterns and ambiguity groups."""
    base_patterns: Tuple[FormatPattern, ...]
    groups: Tuple[AmbiguityGroup, ...]
    base_year: Optional[int] = None
    patterns_by_ordering: Mapping[DateComponentOrdering, Tuple[FormatPattern, ...]] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self):
        by_ordering: Dict[DateComponentOrdering, List[FormatPattern]] = {}
        for pattern in self.base_patterns:
            by_ordering.setdefault(pattern.ordering, []).append(pattern)
        for group in self.groups:
            for pattern in group.patterns:
                by_ordering.setdefault(pattern.ordering, []).append(pattern)

        object.__setattr__(self, "patterns_by_ordering", MappingProxyType(
            {ordering: tuple(patterns) for ordering, patterns in by_ordering.items()}
        ))

    @classmethod
    def default(cls) -> "FormatCatalogue":
        """Catalogue with four digit year patterns only."""
        return cls(_build_base_patterns(), _build_ambiguity_groups())

    @classmethod
    def with_base_year(cls, base_year: int) -> "FormatCatalogue":
        """Catalogue that also accepts two digit years, expanded against ``base_year``.

        Raises:
            ConfigurationError: If the base year lies in the future
        """
        current_year = date.today().year
        if base_year > current_year:
            raise ConfigurationError(f"Base year {base_year} is after the current year {current_year}")

        logger = LoggingManager.get_logger(__name__)
        logger.debug(f"Building format catalogue with base year {base_year}")
        return cls(
            _build_base_patterns(),
            _build_ambiguity_groups() + _build_two_digit_year_groups(base_year),
            base_year,
        )

    def patterns_for(self, ordering: DateComponentOrdering) -> Tuple[FormatPattern, ...]:
        """Patterns of one ordering family; the base patterns when there is no hint.

        A family the catalogue has no patterns for yields none.
        """
        if ordering == DateComponentOrdering.ISO_ETC:
            return self.base_patterns
        return self.patterns_by_ordering.get(ordering, ())
