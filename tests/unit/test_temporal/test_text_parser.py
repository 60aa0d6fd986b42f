"""
Unit tests for the textual-month tokenizer, the date parts normalizer and
the text date parser.
"""

from unittest.mock import Mock

import pytest

from eventdate.core.error_handler import TemporalParseError
from eventdate.processors.temporal.models import Confidence, IssueFlag, ParseStatus, TemporalValue
from eventdate.processors.temporal.multiinput_parser import MultiinputTemporalParser
from eventdate.processors.temporal.numerical_parser import NumericalDateParser
from eventdate.processors.temporal.ordering import DMY_FORMATS, MDY_FORMATS
from eventdate.processors.temporal.text_parser import (
    DatePartsNormalizer,
    TextDateParser,
    TextualMonthDateTokenizer,
    TokenType,
    load_month_names,
)
from tests.fixtures.sample_data import TEXTUAL_DATES


class TestTextualMonthDateTokenizer:
    """Test suite for TextualMonthDateTokenizer"""

    @pytest.fixture
    def tokenizer(self):
        return TextualMonthDateTokenizer()

    @pytest.mark.unit
    def test_tokenize(self, tokenizer):
        """Test tokens are typed and suffixes stripped"""
        tokens = tokenizer.tokenize("July 19th, 1999")
        assert tokens.size == 3
        assert not tokens.contains_discarded_tokens
        assert tokens.get_token(TokenType.INT_2).token == "19"
        assert tokens.get_token(TokenType.INT_4).token == "1999"
        assert tokens.get_token(TokenType.TEXT).token == "July"

    @pytest.mark.unit
    def test_duplicate_tokens_discarded(self, tokenizer):
        """Test a second token of one type discards the first"""
        tokens = tokenizer.tokenize("12 Jan 13 1999")
        assert tokens.contains_discarded_tokens
        assert tokens.get_token(TokenType.INT_2).token == "13"

    @pytest.mark.unit
    def test_blank(self, tokenizer):
        """Test blank input yields no tokens"""
        assert tokenizer.tokenize(None) is None
        assert tokenizer.tokenize("  ") is None


class TestDatePartsNormalizer:
    """Test suite for DatePartsNormalizer"""

    @pytest.fixture(scope="class")
    def normalizer(self):
        return DatePartsNormalizer()

    @pytest.mark.unit
    def test_month_dictionary(self):
        """Test the bundled dictionary has twelve months with their English names"""
        names = load_month_names()
        assert len(names) == 12
        assert "january" in names[0]
        assert "xii" in names[11]

    @pytest.mark.unit
    def test_month_names(self, normalizer):
        """Test month names map to numbers"""
        assert normalizer.month_name_to_numerical("Sept.") == 9
        assert normalizer.month_name_to_numerical("janvier") == 1
        assert normalizer.month_name_to_numerical("MÄRZ") == 3
        assert normalizer.month_name_to_numerical("xi") == 11
        assert normalizer.month_name_to_numerical("Smarch") is None
        assert normalizer.month_name_to_numerical(None) is None

    @pytest.mark.unit
    def test_normalize_float(self, normalizer):
        """Test exported floats become integers"""
        assert normalizer.normalize_float("1978.0") == "1978"
        assert normalizer.normalize_float("12.5") == "12.5"
        assert normalizer.normalize_float(7) == "7"
        assert normalizer.normalize_float(None) is None

    @pytest.mark.unit
    def test_normalize(self, normalizer):
        """Test parts are parsed and unreadable parts flagged"""
        normalized = normalizer.normalize(" 1999 ", "Jul", "19.0")
        assert (normalized.year, normalized.month, normalized.day) == (1999, 7, 19)
        assert not normalized.contains_discarded_part

        discarded = normalizer.normalize("1999", "7", "?")
        assert discarded.day is None
        assert discarded.contains_discarded_part

        # Database nulls are treated as missing
        assert not normalizer.normalize("1999", "\\N", None).contains_discarded_part

    @pytest.mark.unit
    def test_normalize_year_day_of_year(self, normalizer):
        """Test year and ordinal day normalization"""
        normalized = normalizer.normalize_year_day_of_year("2023.0", " 50 ")
        assert (normalized.year, normalized.day_of_year) == (2023, 50)
        assert not normalized.contains_discarded_part


class TestTextDateParser:
    """Test suite for TextDateParser"""

    @pytest.mark.unit
    def test_textual_dates(self, text_parser):
        """Test textual month dates resolve definitely"""
        for text, expected in TEXTUAL_DATES:
            outcome = text_parser.parse(text)
            assert outcome.payload == expected, text
            assert outcome.confidence == Confidence.DEFINITE, text

    @pytest.mark.unit
    def test_textual_partial_dates_unsupported(self, text_parser):
        """Test textual month inputs need a year, a month and a day"""
        for text in ["July 1999", "19 July", "31 February 1999", "19 Smarch 1999", "19 July 20 1999"]:
            assert not text_parser.parse(text).is_successful, text

    @pytest.mark.unit
    def test_numeric_delegation(self, text_parser):
        """Test numeric input goes to the numeric engine"""
        assert text_parser.parse("1999-07-19").payload == TemporalValue.of(1999, 7, 19)
        assert text_parser.parse("1999-W29").payload == TemporalValue.of(1999, 7, 19)
        assert str(text_parser.parse("1996-01-26T01:00Z").payload) == "1996-01-26T01:00Z"
        assert text_parser.parse("1/2/1996").confidence == Confidence.POSSIBLE

    @pytest.mark.unit
    def test_iso_intervals_give_start(self, text_parser):
        """Test only the start of an ISO interval is taken"""
        assert text_parser.parse("1999/2000").payload == TemporalValue.of(1999)
        assert text_parser.parse("1999-01/1999-12").payload == TemporalValue.of(1999, 1)

    @pytest.mark.unit
    def test_preferred_orderings(self, numerical_parser):
        """Test orderings settle ambiguous numeric dates"""
        dmy = TextDateParser(numerical_parser, orderings=DMY_FORMATS)
        mdy = TextDateParser(numerical_parser, orderings=MDY_FORMATS)
        assert dmy.parse("5/4/2014").payload == TemporalValue.of(2014, 4, 5)
        assert mdy.parse("5/4/2014").payload == TemporalValue.of(2014, 5, 4)
        assert dmy.parse("19 July 1999").payload == TemporalValue.of(1999, 7, 19)

    @pytest.mark.unit
    def test_parse_parts(self, text_parser):
        """Test separately supplied fields with names and floats"""
        assert text_parser.parse_parts("1999", "July", "19").payload == TemporalValue.of(1999, 7, 19)
        assert text_parser.parse_parts("1978.0", "12.0", None).payload == TemporalValue.of(1978, 12)
        assert text_parser.parse_ints(1999, 7, None).payload == TemporalValue.of(1999, 7)

        # An unreadable day is dropped with reduced confidence
        outcome = text_parser.parse_parts("1999", "7", "?")
        assert outcome.payload == TemporalValue.of(1999, 7)
        assert outcome.confidence == Confidence.PROBABLE

    @pytest.mark.unit
    def test_parse_year_day_of_year(self, text_parser):
        """Test year and ordinal day strings"""
        assert text_parser.parse_year_day_of_year("2023", "12").payload == TemporalValue.of(2023, 1, 12)
        assert not text_parser.parse_year_day_of_year("2023", "400").is_successful

    @pytest.mark.unit
    def test_unexpected_failure_is_error(self):
        """Test a failing engine gives an Error outcome instead of raising"""
        engine = Mock(spec=NumericalDateParser)
        engine.parse.side_effect = RuntimeError("boom")
        parser = TextDateParser(engine, DatePartsNormalizer())

        outcome = parser.parse("1999-07-19")
        assert outcome.status == ParseStatus.ERROR
        assert outcome.payload is None
        assert isinstance(outcome.cause, TemporalParseError)
        assert isinstance(outcome.cause.__cause__, RuntimeError)

        # Reconciliation treats the error as an invalid source
        result = MultiinputTemporalParser(parser).parse_recorded_date_string("1999-07-19")
        assert not result.is_successful
        assert result.issues == {IssueFlag.RECORDED_DATE_INVALID}
