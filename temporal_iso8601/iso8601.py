"""Recursive descent parser for Temporal ISO 8601 strings.

Each `parse_*` method of `ISO8601Parser` recognizes one production of the
Temporal ISO 8601 grammar and returns whether it matched. A production that
fails leaves the cursor and the captures exactly as it found them.
"""

import logging
from enum import Enum
from typing import Dict, Optional

from pydantic import AfterValidator
from pydantic_core import core_schema
from typing_extensions import Annotated

from .lexer import Lexer, is_ascii_alphanumeric, is_ascii_digit
from .parsed import ABNFParsedDateString, ParseResult, Span

logger = logging.getLogger(__name__)

MINUS_SIGN = "\N{MINUS SIGN}"
CALENDAR_NAME_COMPONENT_LENGTH = (3, 8)
FRACTIONAL_PART_MAX_DIGITS = 9


class ISO8601Error(Exception):
    """Top-level exception for misuse of the parser API."""

    pass


class UnknownProduction(ISO8601Error, LookupError):
    """The requested production is not an entry point of the grammar."""

    def __init__(self, production):
        """Construct the exception with the rejected identifier."""
        super().__init__(f"Unknown ISO 8601 production: {production!r}")
        self.production = production


class MalformedTemporalString(ISO8601Error, ValueError):
    """The text is not a valid TemporalDateString."""

    def __init__(self, text: str):
        """Construct the exception with the rejected text."""
        super().__init__(f"Not a valid Temporal date string: {text!r}")
        self.text = text


class Production(str, Enum):
    """Entry points accepted by `parse_iso8601`."""

    temporal_date_string = "TemporalDateString"

    def __str__(self):
        """Grammar name of the production."""
        return self.value


class StateTransaction:
    """Scope guard over the parser's cursor and captures.

    Leaving the `with` block without calling `commit()` restores the cursor
    position and every capture field to their values on entry.
    """

    def __init__(self, parser: "ISO8601Parser"):
        self._parser = parser
        self._committed = False

    def __enter__(self) -> "StateTransaction":
        self._position = self._parser.lexer.tell()
        self._captures = dict(self._parser.parse_result)
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> bool:
        if not self._committed:
            self._parser.lexer.seek(self._position)
            for name, value in self._captures.items():
                setattr(self._parser.parse_result, name, value)
        return False

    def parsed_text(self) -> Span:
        """Span consumed since the transaction was opened."""
        return Span(
            source=self._parser.lexer.source,
            start=self._position,
            end=self._parser.lexer.tell(),
        )

    def commit(self) -> None:
        """Keep the consumed input and captures when the scope ends."""
        self._committed = True


class ISO8601Parser:
    """Productions of the Temporal ISO 8601 grammar."""

    def __init__(self, text: str):
        self.lexer = Lexer(text)
        self.parse_result = ParseResult()

    def transaction(self) -> StateTransaction:
        """Open a transaction over this parser."""
        return StateTransaction(self)

    def parse_decimal_digit(self) -> bool:
        """DecimalDigit: one of 0-9."""
        return self.lexer.consume_specific(is_ascii_digit)

    def parse_non_zero_digit(self) -> bool:
        """NonZeroDigit: one of 1-9."""
        if self.lexer.next_is("0"):
            return False
        return self.lexer.consume_specific(is_ascii_digit)

    def parse_ascii_sign(self) -> bool:
        """ASCIISign: `+` or `-`."""
        return self.lexer.consume_specific("+") or self.lexer.consume_specific("-")

    def parse_sign(self) -> bool:
        """Sign: ASCIISign or U+2212."""
        with self.transaction() as transaction:
            success = self.parse_ascii_sign() or self.lexer.consume_specific(
                MINUS_SIGN
            )
            if not success:
                return False
            self.parse_result.sign = transaction.parsed_text()
            transaction.commit()
            return True

    def parse_hour(self) -> bool:
        """Hour: 00 to 23."""
        with self.transaction() as transaction:
            if self.lexer.consume_specific("0") or self.lexer.consume_specific("1"):
                if not self.parse_decimal_digit():
                    return False
            else:
                success = (
                    self.lexer.consume_specific("20")
                    or self.lexer.consume_specific("21")
                    or self.lexer.consume_specific("22")
                    or self.lexer.consume_specific("23")
                )
                if not success:
                    return False
            transaction.commit()
            return True

    def parse_minute_second(self) -> bool:
        """MinuteSecond: 00 to 59. Leap seconds are handled by TimeSecond."""
        with self.transaction() as transaction:
            if not any(self.lexer.consume_specific(digit) for digit in "012345"):
                return False
            if not self.parse_decimal_digit():
                return False
            transaction.commit()
            return True

    def parse_decimal_separator(self) -> bool:
        """DecimalSeparator: `.` or `,`."""
        return self.lexer.consume_specific(".") or self.lexer.consume_specific(",")

    def parse_date_time_separator(self) -> bool:
        """DateTimeSeparator: space, `T` or `t`."""
        return (
            self.lexer.consume_specific(" ")
            or self.lexer.consume_specific("T")
            or self.lexer.consume_specific("t")
        )

    def parse_date_year(self) -> bool:
        """DateYear: four digits, or Sign and six digits.

        The sign decides the form, so `+2021` is not a year.
        """
        with self.transaction() as transaction:
            digits = 6 if self.parse_sign() else 4
            for _ in range(digits):
                if not self.parse_decimal_digit():
                    return False
            self.parse_result.date_year = transaction.parsed_text()
            transaction.commit()
            return True

    def parse_date_month(self) -> bool:
        """DateMonth: 01 to 12."""
        with self.transaction() as transaction:
            if self.lexer.consume_specific("0"):
                if not self.parse_non_zero_digit():
                    return False
            else:
                success = (
                    self.lexer.consume_specific("10")
                    or self.lexer.consume_specific("11")
                    or self.lexer.consume_specific("12")
                )
                if not success:
                    return False
            self.parse_result.date_month = transaction.parsed_text()
            transaction.commit()
            return True

    def parse_date_day(self) -> bool:
        """DateDay: 01 to 31, whatever the month."""
        with self.transaction() as transaction:
            if self.lexer.consume_specific("0"):
                if not self.parse_non_zero_digit():
                    return False
            elif self.lexer.consume_specific("1") or self.lexer.consume_specific("2"):
                if not self.parse_decimal_digit():
                    return False
            else:
                success = (
                    self.lexer.consume_specific("30")
                    or self.lexer.consume_specific("31")
                )
                if not success:
                    return False
            self.parse_result.date_day = transaction.parsed_text()
            transaction.commit()
            return True

    def parse_date(self) -> bool:
        """Date: DateYear - DateMonth - DateDay, or without both dashes."""
        with self.transaction() as transaction:
            if not self.parse_date_year():
                return False
            with_dashes = self.lexer.consume_specific("-")
            if not self.parse_date_month():
                return False
            if with_dashes and not self.lexer.consume_specific("-"):
                return False
            if not self.parse_date_day():
                return False
            transaction.commit()
            return True

    def parse_time_hour(self) -> bool:
        """TimeHour: Hour, captured."""
        with self.transaction() as transaction:
            if not self.parse_hour():
                return False
            self.parse_result.time_hour = transaction.parsed_text()
            transaction.commit()
            return True

    def parse_time_minute(self) -> bool:
        """TimeMinute: MinuteSecond, captured."""
        with self.transaction() as transaction:
            if not self.parse_minute_second():
                return False
            self.parse_result.time_minute = transaction.parsed_text()
            transaction.commit()
            return True

    def parse_time_second(self) -> bool:
        """TimeSecond: MinuteSecond, or 60 for a leap second."""
        with self.transaction() as transaction:
            success = self.parse_minute_second() or self.lexer.consume_specific("60")
            if not success:
                return False
            self.parse_result.time_second = transaction.parsed_text()
            transaction.commit()
            return True

    def parse_fractional_part(self) -> bool:
        """FractionalPart: one to nine digits, as many as available."""
        if not self.parse_decimal_digit():
            return False
        for _ in range(FRACTIONAL_PART_MAX_DIGITS - 1):
            if not self.parse_decimal_digit():
                break
        return True

    def parse_time_fractional_part(self) -> bool:
        """TimeFractionalPart: FractionalPart, captured."""
        with self.transaction() as transaction:
            if not self.parse_fractional_part():
                return False
            self.parse_result.time_fractional_part = transaction.parsed_text()
            transaction.commit()
            return True

    def parse_fraction(self) -> bool:
        """Fraction: DecimalSeparator TimeFractionalPart."""
        with self.transaction() as transaction:
            if not self.parse_decimal_separator():
                return False
            if not self.parse_time_fractional_part():
                return False
            transaction.commit()
            return True

    def parse_time_fraction(self) -> bool:
        """TimeFraction: Fraction."""
        return self.parse_fraction()

    def parse_time_zone_offset_required(self) -> bool:
        """TimeZoneOffsetRequired: a UTC offset, then an optional bracketed name.

        Not recognized yet.
        """
        return False

    def parse_time_zone_name_required(self) -> bool:
        """TimeZoneNameRequired: an optional UTC offset, then a bracketed name.

        Not recognized yet.
        """
        return False

    def parse_time_zone(self) -> bool:
        """TimeZone: offset required or name required."""
        return (
            self.parse_time_zone_offset_required()
            or self.parse_time_zone_name_required()
        )

    def parse_calendar_name_component(self) -> bool:
        """CalendarNameComponent: three to eight alphanumeric characters."""
        minimum, maximum = CALENDAR_NAME_COMPONENT_LENGTH
        with self.transaction() as transaction:
            for count in range(maximum):
                if not self.lexer.next_is(is_ascii_alphanumeric):
                    if count < minimum:
                        return False
                    break
                self.lexer.consume()
            transaction.commit()
            return True

    def parse_calendar_name(self) -> bool:
        """CalendarName: components joined by `-`."""
        with self.transaction() as transaction:
            if not self.parse_calendar_name_component():
                return False
            while self.lexer.consume_specific("-"):
                if not self.parse_calendar_name_component():
                    return False
            self.parse_result.calendar_name = transaction.parsed_text()
            transaction.commit()
            return True

    def parse_calendar(self) -> bool:
        """Calendar: [u-ca= CalendarName ]."""
        with self.transaction() as transaction:
            if not self.lexer.consume_specific("[u-ca="):
                return False
            if not self.parse_calendar_name():
                return False
            if not self.lexer.consume_specific("]"):
                return False
            transaction.commit()
            return True

    def parse_time_spec(self) -> bool:
        """TimeSpec: hour, then optional minute and second.

        A colon after the hour makes colons mandatory for the rest; without
        one the components are written back to back.
        """
        with self.transaction() as transaction:
            if not self.parse_time_hour():
                return False
            if self.lexer.consume_specific(":"):
                if not self.parse_time_minute():
                    return False
                if self.lexer.consume_specific(":"):
                    if not self.parse_time_second():
                        return False
                    self.parse_time_fraction()
            elif self.parse_time_minute():
                if self.parse_time_second():
                    self.parse_time_fraction()
            transaction.commit()
            return True

    def parse_time_spec_separator(self) -> bool:
        """TimeSpecSeparator: DateTimeSeparator TimeSpec, matched as one unit."""
        with self.transaction() as transaction:
            if not self.parse_date_time_separator():
                return False
            if not self.parse_time_spec():
                return False
            transaction.commit()
            return True

    def parse_date_time(self) -> bool:
        """DateTime: Date TimeSpecSeparator[opt] TimeZone[opt]."""
        if not self.parse_date():
            return False
        self.parse_time_spec_separator()
        self.parse_time_zone()
        return True

    def parse_calendar_date_time(self) -> bool:
        """CalendarDateTime: DateTime Calendar[opt]."""
        if not self.parse_date_time():
            return False
        self.parse_calendar()
        return True

    def parse_temporal_date_string(self) -> bool:
        """TemporalDateString: CalendarDateTime."""
        return self.parse_calendar_date_time()


_PRODUCTION_PARSERS = {
    Production.temporal_date_string: ISO8601Parser.parse_temporal_date_string,
}


def parse_iso8601(production: Production, text: str) -> Optional[ParseResult]:
    """Match the whole of `text` against an entry production.

    :param production: Entry point, a `Production` or its grammar name.
    :param text: Input string.
    :return: The captures, or None if `text` is not an instance of the production.
    :raises UnknownProduction: If `production` is not an entry point.
    """
    try:
        parse_production = _PRODUCTION_PARSERS[Production(production)]
    except (KeyError, ValueError):
        raise UnknownProduction(production) from None

    parser = ISO8601Parser(text)
    if not parse_production(parser):
        logger.debug("%s did not match %r", production, text)
        return None

    # A matching prefix is not enough, the production has to cover the input.
    if not parser.lexer.is_eof():
        logger.debug(
            "%s matched %r up to offset %d only",
            production,
            text,
            parser.lexer.tell(),
        )
        return None

    return parser.parse_result


def parse_temporal_date_string(
    text: str, abnf: bool = False
) -> Dict[str, Optional[str]]:
    """Parse a TemporalDateString into the text of each component.

    :param text: Input string.
    :param abnf: Use the ABNF reference grammar instead of the recursive
    descent parser.
    :return: Capture name to matched text, None for absent components.
    :raises MalformedTemporalString: If `text` does not match.
    """
    if abnf:
        try:
            return ABNFParsedDateString(text).texts()
        except ValueError as e:
            raise MalformedTemporalString(text) from e

    result = parse_iso8601(Production.temporal_date_string, text)
    if result is None:
        raise MalformedTemporalString(text)
    return result.texts()


# NOTE: Keeps the original string, validation only
class TemporalDateString(str):
    """A string field that must be a valid TemporalDateString."""

    def __init__(self, val: str):
        """Validate the string."""
        parse_temporal_date_string(val)

    @classmethod
    def __get_pydantic_core_schema__(cls, source, handler):
        """Create valid pydantic schema object for this type."""
        return core_schema.no_info_after_validator_function(
            cls, core_schema.str_schema()
        )

    @property
    def parse_result(self) -> ParseResult:
        """Captures of this string."""
        return parse_iso8601(Production.temporal_date_string, self)


TemporalDateStr = Annotated[
    str,
    AfterValidator(lambda value: TemporalDateString(value) and value),
]
