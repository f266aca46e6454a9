import json
import os

import pytest
from dateutil.parser import isoparse
from humps import decamelize
from pydantic import BaseModel, ValidationError

from temporal_iso8601 import (
    ABNFParsedDateString,
    ISO8601Parser,
    MalformedTemporalString,
    ParseResult,
    Production,
    TemporalDateStr,
    TemporalDateString,
    UnknownProduction,
    parse_iso8601,
    parse_temporal_date_string,
)
from temporal_iso8601.parsed import CAPTURE_FIELDS

BASE_TESTS = os.path.join(os.path.dirname(__file__), "fixtures")
with open(os.path.join(BASE_TESTS, "parsing_positive.json"), "r") as f:
    parsing_positive = decamelize(json.load(fp=f))
with open(os.path.join(BASE_TESTS, "parsing_negative.json"), "r") as f:
    parsing_negative = decamelize(json.load(fp=f))

TEMPORAL_DATE_STRING = Production.temporal_date_string


def expected_texts(test):
    return {name: test["fields"].get(name) for name in CAPTURE_FIELDS}


class TestParsing:
    @pytest.mark.parametrize(
        "test_name,test",
        [(test_name, test) for test_name, test in parsing_positive.items()],
    )
    def test_valid_string(self, test_name, test):
        result = parse_iso8601(TEMPORAL_DATE_STRING, test["input"])
        assert result is not None
        assert result.texts() == expected_texts(test)

    @pytest.mark.parametrize(
        "test_name,test",
        [(test_name, test) for test_name, test in parsing_negative.items()],
    )
    def test_invalid_string(self, test_name, test):
        assert parse_iso8601(TEMPORAL_DATE_STRING, test) is None

    @pytest.mark.parametrize("suffix", ["x", "Z", "-", "]", " "])
    @pytest.mark.parametrize(
        "test_name,test",
        [(test_name, test) for test_name, test in parsing_positive.items()],
    )
    def test_trailing_input(self, test_name, test, suffix):
        assert parse_iso8601(TEMPORAL_DATE_STRING, test["input"] + suffix) is None

    @pytest.mark.parametrize(
        "test_name,test",
        [
            (test_name, test)
            for test_name, test in parsing_positive.items()
            if test["isoparse"]
        ],
    )
    def test_agrees_with_dateutil(self, test_name, test):
        result = parse_iso8601(TEMPORAL_DATE_STRING, test["input"])
        parsed = isoparse(test["input"])
        for name, attribute in [
            ("date_year", "year"),
            ("date_month", "month"),
            ("date_day", "day"),
            ("time_hour", "hour"),
            ("time_minute", "minute"),
            ("time_second", "second"),
        ]:
            span = getattr(result, name)
            if span is not None:
                assert int(span.text) == getattr(parsed, attribute)

    def test_spans_point_into_input(self):
        text = "2021-04-01T12:30:15.25[u-ca=iso8601]"
        result = parse_iso8601(TEMPORAL_DATE_STRING, text)
        assert (result.date_month.start, result.date_month.end) == (5, 7)
        assert result.time_fractional_part.start == 20
        assert result.time_fractional_part.length == 2
        assert result.calendar_name.source == text
        assert str(result.calendar_name) == "iso8601"

    def test_extended_year(self):
        extended = parse_iso8601(TEMPORAL_DATE_STRING, "+002021-04-01")
        assert extended.is_extended_year
        assert extended.date_year.length == 7
        plain = parse_iso8601(TEMPORAL_DATE_STRING, "2021-04-01")
        assert not plain.is_extended_year
        assert plain.sign is None

    def test_minus_sign_is_one_character(self):
        result = parse_iso8601(TEMPORAL_DATE_STRING, "−000001-12-31")
        assert (result.sign.start, result.sign.end) == (0, 1)
        assert result.date_month.start == 8

    def test_parse_after_failure(self):
        assert parse_iso8601(TEMPORAL_DATE_STRING, "2021-04-01T12:3015") is None
        result = parse_iso8601(TEMPORAL_DATE_STRING, "2021-04-01T12:30:15")
        assert result.time_second.text == "15"


class TestRollback:
    @pytest.mark.parametrize(
        "production,text",
        [
            ("parse_sign", "x"),
            ("parse_hour", "24"),
            ("parse_minute_second", "6"),
            ("parse_date_year", "+2021-04"),
            ("parse_date_month", "13"),
            ("parse_date_day", "32"),
            ("parse_date", "2021-0401"),
            ("parse_date", "202104-01"),
            ("parse_time_second", "61"),
            ("parse_fraction", ".x"),
            ("parse_time_spec", "12:"),
            ("parse_time_spec", "12:30:6"),
            ("parse_time_spec_separator", "T24"),
            ("parse_time_spec_separator", "T12:30:"),
            ("parse_calendar_name", "ab"),
            ("parse_calendar", "[u-ca=iso-ab]"),
            ("parse_calendar", "[u-ca=iso8601-ab]"),
            ("parse_calendar_name_component", "ab-"),
            ("parse_calendar", "[u-ca=iso8601"),
            ("parse_time_zone", "+01:00"),
            ("parse_temporal_date_string", "2021-13-01"),
        ],
    )
    def test_failed_production_has_no_effect(self, production, text):
        parser = ISO8601Parser(text)
        assert getattr(parser, production)() is False
        assert parser.lexer.tell() == 0
        assert parser.parse_result == ParseResult()

    def test_failure_keeps_earlier_captures(self):
        parser = ISO8601Parser("20210401T12:30:")
        assert parser.parse_date()
        before = parser.parse_result.model_copy()
        assert parser.parse_time_spec_separator() is False
        assert parser.lexer.tell() == 8
        assert parser.parse_result == before
        assert parser.parse_result.time_hour is None

    def test_optional_time_rolls_back_as_a_unit(self):
        parser = ISO8601Parser("2021-04-01T25")
        assert parser.parse_date_time()
        assert parser.lexer.tell() == 10
        assert parser.parse_result.time_hour is None

    def test_outer_rollback_discards_inner_commit(self):
        parser = ISO8601Parser("+002021")
        with parser.transaction():
            with parser.transaction() as inner:
                assert parser.parse_sign()
                inner.commit()
            assert parser.parse_result.sign.text == "+"
        assert parser.lexer.tell() == 0
        assert parser.parse_result.sign is None

    def test_inner_rollback_keeps_outer_state(self):
        parser = ISO8601Parser("+002021")
        with parser.transaction() as outer:
            assert parser.parse_sign()
            with parser.transaction():
                assert parser.parse_decimal_digit()
            assert parser.lexer.tell() == 1
            assert outer.parsed_text().text == "+"
            outer.commit()
        assert parser.lexer.tell() == 1
        assert parser.parse_result.sign.text == "+"

    def test_calendar_name_component_stops_at_eight(self):
        parser = ISO8601Parser("abcdefghi")
        assert parser.parse_calendar_name_component()
        assert parser.lexer.tell() == 8

    def test_time_zone_is_never_recognized(self):
        parser = ISO8601Parser("2021-04-01T12:30Z")
        assert parser.parse_temporal_date_string()
        assert parser.lexer.tell() == len("2021-04-01T12:30")
        assert not parser.lexer.is_eof()


class TestDispatcher:
    def test_production_by_name(self):
        result = parse_iso8601("TemporalDateString", "2021-04-01")
        assert result.date_day.text == "01"

    @pytest.mark.parametrize("production", ["TemporalTimeString", "", None, 1])
    def test_unknown_production(self, production):
        with pytest.raises(UnknownProduction) as e:
            parse_iso8601(production, "2021-04-01")
        assert e.value.production == production

    def test_unknown_production_is_lookup_error(self):
        with pytest.raises(LookupError):
            parse_iso8601("DateTime", "2021-04-01")

    def test_production_str(self):
        assert str(TEMPORAL_DATE_STRING) == "TemporalDateString"


class TestReferenceGrammar:
    @pytest.mark.parametrize(
        "test_name,test",
        [(test_name, test) for test_name, test in parsing_positive.items()],
    )
    def test_valid_string(self, test_name, test):
        parsed = ABNFParsedDateString(test["input"])
        assert parsed.texts() == expected_texts(test)

    @pytest.mark.parametrize(
        "test_name,test",
        [(test_name, test) for test_name, test in parsing_negative.items()],
    )
    def test_invalid_string(self, test_name, test):
        with pytest.raises(ValueError):
            ABNFParsedDateString(test)


class TestTemporalDateString:
    @pytest.mark.parametrize("abnf", [True, False])
    @pytest.mark.parametrize(
        "test_name,test",
        [(test_name, test) for test_name, test in parsing_positive.items()],
    )
    def test_valid_string(self, abnf, test_name, test):
        texts = parse_temporal_date_string(test["input"], abnf=abnf)
        assert texts == expected_texts(test)

    @pytest.mark.parametrize("abnf", [True, False])
    @pytest.mark.parametrize(
        "test_name,test",
        [(test_name, test) for test_name, test in parsing_negative.items()],
    )
    def test_invalid_string(self, abnf, test_name, test):
        with pytest.raises(MalformedTemporalString) as e:
            parse_temporal_date_string(test, abnf=abnf)
        assert e.value.text == test

    def test_string_type(self):
        value = TemporalDateString("2021-04-01T09:00")
        assert value == "2021-04-01T09:00"
        assert value.parse_result.time_hour.text == "09"
        with pytest.raises(ValueError):
            TemporalDateString("2021-04-01T09:00Z")

    def test_pydantic_field(self):
        class Event(BaseModel):
            starts: TemporalDateString
            ends: TemporalDateStr

        event = Event(starts="2021-04-01", ends="2021-04-02[u-ca=iso8601]")
        assert isinstance(event.starts, TemporalDateString)
        assert type(event.ends) is str
        assert event.starts.parse_result.date_day.text == "01"

        with pytest.raises(ValidationError):
            Event(starts="2021-04-31T24:00", ends="2021-04-02")
        with pytest.raises(ValidationError):
            Event(starts="2021-04-01", ends="2021-04-02[u-ca=ab]")
