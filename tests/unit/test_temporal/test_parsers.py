"""
Unit tests for the shared parser factories.
"""

import pytest

from eventdate.processors.temporal import parsers
from eventdate.processors.temporal.models import TemporalValue
from eventdate.processors.temporal.ordering import DateComponentOrdering, DMY_FORMATS


class TestParserFactories:
    """Test suite for the shared parser instances"""

    @pytest.mark.unit
    def test_instances_shared(self, reset_parser_cache):
        """Test repeated calls return the same instance"""
        assert parsers.get_numerical_parser() is parsers.get_numerical_parser()
        assert parsers.get_date_parts_normalizer() is parsers.get_date_parts_normalizer()
        assert parsers.get_text_date_parser() is parsers.get_text_date_parser()
        assert parsers.get_range_parser() is parsers.get_range_parser()

    @pytest.mark.unit
    def test_dependencies_shared(self, reset_parser_cache):
        """Test composed parsers reuse the shared parsers they depend on"""
        range_parser = parsers.get_range_parser(DMY_FORMATS)
        multiinput_parser = parsers.get_multiinput_parser(DMY_FORMATS)
        assert range_parser.temporal_parser is multiinput_parser
        assert multiinput_parser.text_parser is parsers.get_text_date_parser(DMY_FORMATS)

    @pytest.mark.unit
    def test_keyed_by_configuration(self, reset_parser_cache):
        """Test different orderings and base years get different parsers"""
        assert parsers.get_text_date_parser() is not parsers.get_text_date_parser(DMY_FORMATS)
        assert parsers.get_numerical_parser() is not parsers.get_numerical_parser(2000)
        assert (parsers.get_text_date_parser([DateComponentOrdering.DMY])
                is parsers.get_text_date_parser((DateComponentOrdering.DMY,)))

    @pytest.mark.unit
    def test_base_year(self, reset_parser_cache):
        """Test a base year enables two digit years"""
        assert not parsers.get_multiinput_parser().parse_recorded_date_string("12/21/78").is_successful

        result = parsers.get_multiinput_parser(base_year=2000).parse_recorded_date_string("12/21/78")
        assert result.payload == TemporalValue.of(1978, 12, 21)

    @pytest.mark.unit
    def test_clear_cache(self, reset_parser_cache):
        """Test clearing forgets the shared instances"""
        first = parsers.get_range_parser()
        parsers.clear_cache()
        assert parsers.get_range_parser() is not first
