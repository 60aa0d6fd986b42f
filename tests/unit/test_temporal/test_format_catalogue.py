"""
Unit tests for the format catalogue.

Tests template compilation, strict single-pattern matching, separator
normalization, ambiguity groups and catalogue construction.
"""

from datetime import date, timedelta

import pytest

from eventdate.core.error_handler import ConfigurationError, PatternConfigurationError
from eventdate.processors.temporal.format_catalogue import (
    AmbiguityGroup,
    AmbiguityGroupBuilder,
    FormatCatalogue,
    FormatPattern,
    SeparatorNormalizer,
    compile_template,
    match,
    minimum_length,
    parse_offset,
)
from eventdate.processors.temporal.models import TemporalShape, TemporalValue
from eventdate.processors.temporal.numerical_parser import NumericalDateParser
from eventdate.processors.temporal.ordering import DateComponentOrdering


O = DateComponentOrdering


class TestTemplateCompilation:
    """Test suite for format template compilation"""

    @pytest.mark.unit
    def test_minimum_length(self):
        """Test optional sections and quotes do not count"""
        assert minimum_length("uuuu-M-d") == 8
        assert minimum_length("uuuuMMdd") == 8
        assert minimum_length("uuuu-M-d'T'HH[:mm]") == 11
        assert minimum_length("YYYY-'W'ww") == 8

    @pytest.mark.unit
    def test_fields(self):
        """Test compiled fields follow pattern letters"""
        compiled = compile_template("uuuu-M-d'T'HH[:]mm[[:]ss[.SSS]]X")
        assert compiled.fields == {"year", "month", "day", "hour", "minute", "second", "fraction", "offset"}

    @pytest.mark.unit
    def test_malformed_templates(self):
        """Test malformed templates fail at construction"""
        malformed = ["", "uuuu-'M", "uuuu[-M", "uuuu]-M", "uuuu-Q", "uuu-M", "uuuu-M-d-M"]
        for template in malformed:
            with pytest.raises(PatternConfigurationError):
                compile_template(template)

    @pytest.mark.unit
    def test_parse_offset(self):
        """Test all supported offset spellings"""
        assert parse_offset("Z") == timedelta(0)
        assert parse_offset("+12") == timedelta(hours=12)
        assert parse_offset("-0530") == -timedelta(hours=5, minutes=30)
        assert parse_offset("+05:30") == timedelta(hours=5, minutes=30)


class TestFormatPattern:
    """Test suite for single-pattern matching"""

    @pytest.fixture
    def iso_date(self):
        """ISO date pattern accepting the unicode minus and dots"""
        return FormatPattern("uuuu-M-d", O.YMD, (TemporalShape.DATE,),
                             SeparatorNormalizer("-", "−."))

    @pytest.mark.unit
    def test_match(self, iso_date):
        """Test matching returns the value and nothing on mismatch"""
        assert match(iso_date, "1999-7-19") == TemporalValue.of(1999, 7, 19)
        assert match(iso_date, "1999−07−19") == TemporalValue.of(1999, 7, 19)
        assert match(iso_date, "1999.07.19") == TemporalValue.of(1999, 7, 19)
        assert match(iso_date, "19-07-1999") is None
        assert match(iso_date, "1999-7") is None
        assert match(iso_date, None) is None

    @pytest.mark.unit
    def test_strict_fields(self, iso_date):
        """Test out-of-range fields fail rather than roll over"""
        assert iso_date.match("1978-02-30") is None
        assert iso_date.match("1999-13-01") is None
        assert iso_date.match("1999-02-29") is None
        assert iso_date.match("2000-02-29") == TemporalValue.of(2000, 2, 29)

    @pytest.mark.unit
    def test_shapes_most_specific_first(self):
        """Test an optional time section is never dropped"""
        pattern = FormatPattern("uuuu-M-d['T'HH[:]mm]", O.YMDT,
                                (TemporalShape.DATE, TemporalShape.DATE_TIME))
        assert pattern.shapes == (TemporalShape.DATE_TIME, TemporalShape.DATE)
        assert pattern.match("1999-07-19T10:30") == TemporalValue(1999, 7, 19, 10, 30, 0, 0)
        assert pattern.match("1999-07-19") == TemporalValue.of(1999, 7, 19)

    @pytest.mark.unit
    def test_shape_must_account_for_fields(self):
        """Test a date-only pattern does not accept a captured time"""
        pattern = FormatPattern("uuuu-M-d['T'HH[:]mm]", O.YMD, (TemporalShape.DATE,))
        assert pattern.match("1999-07-19T10:30") is None

    @pytest.mark.unit
    def test_fraction_truncated_to_microseconds(self):
        """Test seven fraction digits are truncated"""
        pattern = FormatPattern("uuuu-M-d'T'HH:mm:ss.SSSSSSS", O.YMDT, (TemporalShape.DATE_TIME,))
        assert pattern.match("2002-03-10T11:12:13.1234567").microsecond == 123456

    @pytest.mark.unit
    def test_week_and_ordinal_dates(self):
        """Test ISO weeks resolve to their Monday and ordinal days to dates"""
        week = FormatPattern("YYYY-'W'ww", O.YW, (TemporalShape.DATE,))
        ordinal = FormatPattern("uuuu-DDD", O.YD, (TemporalShape.DATE,))
        assert week.match("1999-W29") == TemporalValue.of(1999, 7, 19)
        assert week.match("1999-W54") is None
        assert ordinal.match("2000-366") == TemporalValue.of(2000, 12, 31)
        assert ordinal.match("1999-366") is None

    @pytest.mark.unit
    def test_reduced_year(self):
        """Test two digit years never land after the base year"""
        pattern = FormatPattern("d.M.uu", O.DMY, (TemporalShape.DATE,), base_year=2000)
        assert pattern.expand_reduced_year(78) == 1978
        assert pattern.expand_reduced_year(0) == 2000
        assert pattern.match("21.12.78") == TemporalValue.of(1978, 12, 21)

        with pytest.raises(PatternConfigurationError):
            FormatPattern("d.M.uu", O.DMY, (TemporalShape.DATE,))

    @pytest.mark.unit
    def test_requires_a_shape(self):
        """Test construction without result shapes fails"""
        with pytest.raises(PatternConfigurationError):
            FormatPattern("uuuu", O.Y, ())


class TestAmbiguityGroup:
    """Test suite for ambiguity groups"""

    @pytest.fixture
    def slash_group(self):
        """Day-month-year versus month-day-year with slashes"""
        return (AmbiguityGroupBuilder()
                .append("d/M/uuuu", O.DMY, TemporalShape.DATE, "/", "-")
                .append("M/d/uuuu", O.MDY, TemporalShape.DATE, "/", "-")
                .build())

    @pytest.mark.unit
    def test_resolve_runs_every_pattern(self, slash_group):
        """Test both interpretations are collected"""
        result = slash_group.resolve("5/4/2014")
        assert result.number_parsed == 2
        assert result.others == (TemporalValue.of(2014, 4, 5), TemporalValue.of(2014, 5, 4))
        assert result.preferred is None

        single = slash_group.resolve("31-1-1996")
        assert single.number_parsed == 1
        assert single.result == TemporalValue.of(1996, 1, 31)

    @pytest.mark.unit
    def test_preferred_pattern(self):
        """Test the preferred pattern is reported separately"""
        group = (AmbiguityGroupBuilder()
                 .preferred("d.M.uuuu", O.DMY, TemporalShape.DATE)
                 .append("M.d.uuuu", O.MDY, TemporalShape.DATE)
                 .build())
        result = group.resolve("4.5.1996")
        assert result.preferred == TemporalValue.of(1996, 5, 4)
        assert result.others == (TemporalValue.of(1996, 4, 5),)
        assert result.result == TemporalValue.of(1996, 5, 4)
        assert group.patterns[0].ordering == O.DMY

    @pytest.mark.unit
    def test_invalid_groups(self):
        """Test group invariants are enforced at construction"""
        with pytest.raises(PatternConfigurationError):
            AmbiguityGroup(others=())
        with pytest.raises(PatternConfigurationError):
            AmbiguityGroupBuilder().append("d/M/uuuu", O.DMY, TemporalShape.DATE).build()
        with pytest.raises(PatternConfigurationError):
            (AmbiguityGroupBuilder()
             .append("d/M/uuuu", O.DMY, TemporalShape.DATE)
             .append("d-M-uuuu", O.DMY, TemporalShape.DATE)
             .build())


class TestFormatCatalogue:
    """Test suite for catalogue construction"""

    @pytest.mark.unit
    def test_default_catalogue(self):
        """Test default catalogue has four digit groups only"""
        catalogue = FormatCatalogue.default()
        assert catalogue.base_year is None
        assert catalogue.base_patterns[0].template == "uuuuMMdd"
        assert all("reduced_year" not in pattern.fields
                   for group in catalogue.groups for pattern in group.patterns)

    @pytest.mark.unit
    def test_patterns_by_ordering(self):
        """Test hints select ordering families"""
        catalogue = FormatCatalogue.default()
        dmy = catalogue.patterns_for(O.DMY)
        assert dmy and all(pattern.ordering == O.DMY for pattern in dmy)
        assert catalogue.patterns_for(O.ISO_ETC) == catalogue.base_patterns

        with pytest.raises(TypeError):
            catalogue.patterns_by_ordering[O.DMY] = ()

    @pytest.mark.unit
    def test_hint_without_patterns_is_binding(self):
        """Test a hint the catalogue cannot serve matches nothing"""
        base_only = FormatCatalogue(FormatCatalogue.default().base_patterns, ())
        assert base_only.patterns_for(O.DMY) == ()
        assert base_only.patterns_for(O.ISO_ETC) == base_only.base_patterns

        parser = NumericalDateParser(base_only)
        assert parser.parse("2014-04-05").payload == TemporalValue.of(2014, 4, 5)
        assert not parser.parse("2014-04-05", O.DMY).is_successful

    @pytest.mark.unit
    def test_base_year_catalogue(self):
        """Test two digit groups are added with a base year"""
        catalogue = FormatCatalogue.with_base_year(2000)
        default = FormatCatalogue.default()
        assert len(catalogue.groups) == len(default.groups) + 4
        assert catalogue.base_year == 2000

    @pytest.mark.unit
    def test_future_base_year_rejected(self):
        """Test a base year after the current year fails"""
        with pytest.raises(ConfigurationError):
            FormatCatalogue.with_base_year(date.today().year + 1)
