"""Temporal Data Model

Immutable value types shared by every stage of event-date interpretation:
partially populated calendar values, parse outcomes expressed as a tagged
union, data-quality issue flags and reconciled date ranges.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import FrozenSet, Generic, Iterable, Optional, Tuple, TypeVar

from dateutil import tz

from ...core.error_handler import TemporalParseError


T = TypeVar("T")

# Largest offset accepted by ISO 8601 style zone designators
MAX_OFFSET = timedelta(hours=18)


class TemporalShape(Enum):
    """Granularity tiers of a temporal value, coarsest first."""
    YEAR = 1
    YEAR_MONTH = 2
    DATE = 3
    DATE_TIME = 4
    OFFSET_DATE_TIME = 5

    @property
    def tier(self) -> int:
        """Comparison tier; offset and local date-times share one tier."""
        return min(self.value, TemporalShape.DATE_TIME.value)


class ParseStatus(Enum):
    """Outcome status of a parse attempt."""
    SUCCESS = "success"
    FAIL = "fail"
    ERROR = "error"


class Confidence(Enum):
    """Confidence attached to a parsed value, strongest first."""
    DEFINITE = 1
    PROBABLE = 2
    POSSIBLE = 3

    @classmethod
    def lower_of(cls, first: "Confidence", second: "Confidence") -> "Confidence":
        """Return the weaker of two confidence levels."""
        return first if first.value >= second.value else second


class IssueFlag(Enum):
    """Data-quality issues raised while interpreting recorded dates."""
    RECORDED_DATE_INVALID = "RECORDED_DATE_INVALID"
    RECORDED_DATE_MISMATCH = "RECORDED_DATE_MISMATCH"
    RECORDED_DATE_UNLIKELY = "RECORDED_DATE_UNLIKELY"
    INTERPRETATION_ERROR = "INTERPRETATION_ERROR"


@dataclass(frozen=True)
class TemporalValue:
    """A calendar value populated from the year downwards.

    Date-times always carry hour, minute, second and microsecond together, so
    any two date-times share the same resolution.
    """
    year: int
    month: Optional[int] = None
    day: Optional[int] = None
    hour: Optional[int] = None
    minute: Optional[int] = None
    second: Optional[int] = None
    microsecond: Optional[int] = None
    utc_offset: Optional[timedelta] = None

    def __post_init__(self):
        chain = (self.year, self.month, self.day, self.hour, self.minute, self.second, self.microsecond)
        seen_gap = False
        for part in chain:
            if part is None:
                seen_gap = True
            elif seen_gap:
                raise ValueError(f"Temporal fields must be populated from the year down: {chain}")

        if self.hour is not None and self.microsecond is None:
            raise ValueError("A time of day needs hour, minute, second and microsecond")
        if self.utc_offset is not None and self.hour is None:
            raise ValueError("A UTC offset requires a time of day")
        if self.utc_offset is not None and abs(self.utc_offset) > MAX_OFFSET:
            raise ValueError(f"UTC offset out of range: {self.utc_offset}")

        # Calendar validation; raises ValueError on overflow such as 30 February
        if self.hour is not None:
            datetime(self.year, self.month, self.day, self.hour, self.minute, self.second, self.microsecond)
        elif self.day is not None:
            date(self.year, self.month, self.day)
        elif self.month is not None:
            date(self.year, self.month, 1)
        else:
            date(self.year, 1, 1)

    @classmethod
    def of(cls, year: int, month: Optional[int] = None, day: Optional[int] = None) -> "TemporalValue":
        """Build a year, year-month or date value."""
        return cls(year=year, month=month, day=day)

    @classmethod
    def from_date(cls, value: date) -> "TemporalValue":
        return cls(year=value.year, month=value.month, day=value.day)

    @classmethod
    def from_datetime(cls, value: datetime) -> "TemporalValue":
        """Build a date-time value, keeping the UTC offset of aware datetimes."""
        return cls(
            year=value.year, month=value.month, day=value.day,
            hour=value.hour, minute=value.minute, second=value.second,
            microsecond=value.microsecond, utc_offset=value.utcoffset(),
        )

    @property
    def shape(self) -> TemporalShape:
        if self.hour is not None:
            return TemporalShape.OFFSET_DATE_TIME if self.utc_offset is not None else TemporalShape.DATE_TIME
        if self.day is not None:
            return TemporalShape.DATE
        if self.month is not None:
            return TemporalShape.YEAR_MONTH
        return TemporalShape.YEAR

    @property
    def resolution(self) -> int:
        """Number of populated fields from year to fractional second."""
        return sum(1 for part in (self.year, self.month, self.day, self.hour,
                                  self.minute, self.second, self.microsecond)
                   if part is not None)

    @property
    def date_resolution(self) -> int:
        """Number of populated date fields (1 to 3), ignoring time of day."""
        return min(self.resolution, 3)

    @property
    def has_offset(self) -> bool:
        return self.utc_offset is not None

    def to_date(self) -> Optional[date]:
        """Return the calendar date, or None for partial dates."""
        if self.day is None:
            return None
        return date(self.year, self.month, self.day)

    def to_datetime(self) -> Optional[datetime]:
        """Return a datetime, aware when an offset is present, or None for date-only values."""
        if self.hour is None:
            return None
        tzinfo = None
        if self.utc_offset is not None:
            tzinfo = tz.tzoffset(None, int(self.utc_offset.total_seconds()))
        return datetime(self.year, self.month, self.day, self.hour, self.minute,
                        self.second, self.microsecond, tzinfo=tzinfo)

    def truncate(self, shape: TemporalShape) -> "TemporalValue":
        """Discard every field finer than the given shape."""
        if shape.tier >= self.shape.tier:
            return self
        if shape == TemporalShape.DATE:
            return TemporalValue(self.year, self.month, self.day)
        if shape == TemporalShape.YEAR_MONTH:
            return TemporalValue(self.year, self.month)
        return TemporalValue(self.year)

    def without_offset(self) -> "TemporalValue":
        """Drop the UTC offset, keeping the local wall-clock fields."""
        if self.utc_offset is None:
            return self
        return TemporalValue(self.year, self.month, self.day, self.hour,
                             self.minute, self.second, self.microsecond)

    def isoformat(self) -> str:
        text = f"{self.year:04d}" if self.year >= 0 else f"-{abs(self.year):04d}"
        if self.month is None:
            return text
        text += f"-{self.month:02d}"
        if self.day is None:
            return text
        text += f"-{self.day:02d}"
        if self.hour is None:
            return text

        text += f"T{self.hour:02d}:{self.minute:02d}"
        if self.second or self.microsecond:
            text += f":{self.second:02d}"
            if self.microsecond:
                if self.microsecond % 1000 == 0:
                    text += f".{self.microsecond // 1000:03d}"
                else:
                    text += f".{self.microsecond:06d}"

        if self.utc_offset is not None:
            text += _format_offset(self.utc_offset)
        return text

    def __str__(self) -> str:
        return self.isoformat()


def _format_offset(offset: timedelta) -> str:
    total = int(offset.total_seconds())
    if total == 0:
        return "Z"
    sign = "+" if total > 0 else "-"
    hours, remainder = divmod(abs(total), 3600)
    minutes = remainder // 60
    return f"{sign}{hours:02d}:{minutes:02d}"


class ParseOutcome(Generic[T]):
    """Common surface of the Success, Fail and Error outcomes."""

    status: ParseStatus

    @property
    def is_successful(self) -> bool:
        return self.status == ParseStatus.SUCCESS

    @property
    def payload(self) -> Optional[T]:
        return None

    @property
    def confidence(self) -> Optional[Confidence]:
        return None

    @property
    def alternatives(self) -> Tuple[T, ...]:
        return ()


@dataclass(frozen=True)
class Success(ParseOutcome[T]):
    """A resolved value with its confidence."""
    value: T
    level: Confidence = Confidence.DEFINITE
    status: ParseStatus = field(default=ParseStatus.SUCCESS, init=False)

    @property
    def payload(self) -> Optional[T]:
        return self.value

    @property
    def confidence(self) -> Optional[Confidence]:
        return self.level


@dataclass(frozen=True)
class Fail(ParseOutcome[T]):
    """No value; ambiguous failures carry POSSIBLE confidence and alternative values."""
    candidates: Tuple[T, ...] = ()
    level: Optional[Confidence] = None
    status: ParseStatus = field(default=ParseStatus.FAIL, init=False)

    @property
    def confidence(self) -> Optional[Confidence]:
        return self.level

    @property
    def alternatives(self) -> Tuple[T, ...]:
        return self.candidates

    @classmethod
    def ambiguous(cls, candidates: Iterable[T]) -> "Fail[T]":
        return cls(candidates=tuple(candidates), level=Confidence.POSSIBLE)


@dataclass(frozen=True)
class Error(ParseOutcome[T]):
    """An unexpected failure, distinct from input that did not parse."""
    cause: TemporalParseError
    status: ParseStatus = field(default=ParseStatus.ERROR, init=False)


@dataclass(frozen=True)
class EventRange:
    """Reconciled start and end of an event, with accumulated issues."""
    from_value: Optional[TemporalValue]
    to_value: Optional[TemporalValue]
    issues: FrozenSet[IssueFlag] = frozenset()

    @property
    def is_single_date(self) -> bool:
        return self.from_value is not None and self.from_value == self.to_value

    def __str__(self) -> str:
        start = self.from_value.isoformat() if self.from_value else ""
        end = self.to_value.isoformat() if self.to_value else ""
        return f"{start}/{end}"


@dataclass(frozen=True)
class InterpretationResult(Generic[T]):
    """A parse outcome together with the issues raised while interpreting it."""
    outcome: ParseOutcome[T]
    issues: FrozenSet[IssueFlag] = frozenset()

    @property
    def is_successful(self) -> bool:
        return self.outcome.is_successful

    @property
    def payload(self) -> Optional[T]:
        return self.outcome.payload

    @property
    def confidence(self) -> Optional[Confidence]:
        return self.outcome.confidence

    @property
    def status(self) -> ParseStatus:
        return self.outcome.status

    @classmethod
    def success(cls, value: T, confidence: Confidence,
                issues: Iterable[IssueFlag] = ()) -> "InterpretationResult[T]":
        return cls(Success(value, confidence), frozenset(issues))

    @classmethod
    def fail(cls, issues: Iterable[IssueFlag] = ()) -> "InterpretationResult[T]":
        return cls(Fail(), frozenset(issues))

    def with_issue(self, issue: Optional[IssueFlag]) -> "InterpretationResult[T]":
        if issue is None:
            return self
        return InterpretationResult(self.outcome, self.issues | {issue})
