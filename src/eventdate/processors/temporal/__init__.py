"""Temporal Interpretation

Format catalogue, numeric and textual date parsers, and the reconcilers for
event dates recorded as several fields or as ranges.
"""

from .models import (
    Confidence,
    EventRange,
    Error,
    Fail,
    InterpretationResult,
    IssueFlag,
    ParseOutcome,
    ParseStatus,
    Success,
    TemporalShape,
    TemporalValue
)
from .ordering import DateComponentOrdering, DMY_FORMATS, ISO_FORMATS, MDY_FORMATS
from .format_catalogue import AmbiguityGroup, FormatCatalogue, FormatPattern, SeparatorNormalizer
from .numerical_parser import NumericalDateParser
from .text_parser import DatePartsNormalizer, TextDateParser, TextualMonthDateTokenizer
from .multiinput_parser import MultiinputTemporalParser
from .range_parser import TemporalRangeParser
from .parsers import get_multiinput_parser, get_numerical_parser, get_range_parser, get_text_date_parser

__all__ = [
    "Confidence",
    "EventRange",
    "Error",
    "Fail",
    "InterpretationResult",
    "IssueFlag",
    "ParseOutcome",
    "ParseStatus",
    "Success",
    "TemporalShape",
    "TemporalValue",
    "DateComponentOrdering",
    "DMY_FORMATS",
    "ISO_FORMATS",
    "MDY_FORMATS",
    "AmbiguityGroup",
    "FormatCatalogue",
    "FormatPattern",
    "SeparatorNormalizer",
    "NumericalDateParser",
    "DatePartsNormalizer",
    "TextDateParser",
    "TextualMonthDateTokenizer",
    "MultiinputTemporalParser",
    "TemporalRangeParser",
    "get_multiinput_parser",
    "get_numerical_parser",
    "get_range_parser",
    "get_text_date_parser"
]
