"""Shared parser instances.

Parsers are immutable once built, so one instance per configuration is
created on first use and shared by every caller.
"""

import threading
from typing import Dict, Hashable, Optional, Sequence, Tuple

from ...core.logging_manager import LoggingManager
from .format_catalogue import FormatCatalogue
from .multiinput_parser import MultiinputTemporalParser
from .numerical_parser import NumericalDateParser
from .ordering import DateComponentOrdering
from .range_parser import TemporalRangeParser
from .text_parser import DatePartsNormalizer, TextDateParser


# Reentrant: factories build the parsers they depend on
_lock = threading.RLock()
_instances: Dict[Hashable, object] = {}

logger = LoggingManager.get_logger(__name__)


def _get_or_create(key: Hashable, factory):
    instance = _instances.get(key)
    if instance is None:
        with _lock:
            instance = _instances.get(key)
            if instance is None:
                logger.debug(f"Building shared parser {key}")
                instance = factory()
                _instances[key] = instance
    return instance


def _ordering_key(orderings: Sequence[DateComponentOrdering]) -> Tuple[DateComponentOrdering, ...]:
    return tuple(orderings)


def get_numerical_parser(base_year: Optional[int] = None) -> NumericalDateParser:
    """Numeric engine, accepting two digit years when a base year is given."""
    def factory():
        if base_year is None:
            return NumericalDateParser(FormatCatalogue.default())
        return NumericalDateParser.with_base_year(base_year)
    return _get_or_create(("numerical", base_year), factory)


def get_date_parts_normalizer() -> DatePartsNormalizer:
    return _get_or_create(("normalizer",), DatePartsNormalizer)


def get_text_date_parser(orderings: Sequence[DateComponentOrdering] = (),
                         base_year: Optional[int] = None) -> TextDateParser:
    """Text parser preferring the given orderings for ambiguous numeric dates."""
    key = ("text", _ordering_key(orderings), base_year)
    return _get_or_create(key, lambda: TextDateParser(get_numerical_parser(base_year),
                                                      get_date_parts_normalizer(),
                                                      orderings))


def get_multiinput_parser(orderings: Sequence[DateComponentOrdering] = (),
                          base_year: Optional[int] = None) -> MultiinputTemporalParser:
    key = ("multiinput", _ordering_key(orderings), base_year)
    return _get_or_create(key, lambda: MultiinputTemporalParser(get_text_date_parser(orderings, base_year)))


def get_range_parser(orderings: Sequence[DateComponentOrdering] = (),
                     base_year: Optional[int] = None) -> TemporalRangeParser:
    key = ("range", _ordering_key(orderings), base_year)
    return _get_or_create(key, lambda: TemporalRangeParser(get_multiinput_parser(orderings, base_year)))


def clear_cache():
    """Forget every shared parser; mainly for tests."""
    with _lock:
        _instances.clear()
