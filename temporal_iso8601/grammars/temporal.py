"""Temporal ISO 8601 ABNF definition.

Time zone rules are omitted: they never match, so a time zone suffix is left
over and rejected by `parse_all`.
"""

from typing import ClassVar, List

from abnf.grammars.misc import load_grammar_rules
from abnf.parser import Rule as _Rule


@load_grammar_rules()
class Rule(_Rule):
    """Rules from the Temporal ISO 8601 grammar."""

    grammar: ClassVar[List] = [
        "decimal-digit = %x30-39",
        "non-zero-digit = %x31-39",
        "cal-alpha = %x41-5A / %x61-7A",
        'ascii-sign = "+" / "-"',
        "sign = ascii-sign / %x2212",
        'hour = ( "0" / "1" ) decimal-digit / "2" %x30-33',
        "minute-second = %x30-35 decimal-digit",
        'decimal-separator = "." / ","',
        'date-time-separator = %x20 / %s"T" / %s"t"',
        "date-four-digit-year = 4decimal-digit",
        "date-extended-year = sign 6decimal-digit",
        "date-year = date-extended-year / date-four-digit-year",
        'date-month = "0" non-zero-digit / "1" %x30-32',
        'date-day = "0" non-zero-digit / ( "1" / "2" ) decimal-digit / "3" %x30-31',
        'date = date-year "-" date-month "-" date-day / date-year date-month date-day',
        "time-hour = hour",
        "time-minute = minute-second",
        'time-second = minute-second / "60"',
        "fractional-part = 1*9decimal-digit",
        "time-fractional-part = fractional-part",
        "fraction = decimal-separator time-fractional-part",
        "time-fraction = fraction",
        "cal-char = cal-alpha / decimal-digit",
        "calendar-name-component = 3*8cal-char",
        'calendar-name = calendar-name-component *( "-" calendar-name-component )',
        'calendar = %s"[u-ca=" calendar-name "]"',
        'time-spec = time-hour [ ":" time-minute [ ":" time-second [ time-fraction ] ]'
        " / time-minute [ time-second [ time-fraction ] ] ]",
        "time-spec-separator = date-time-separator time-spec",
        "date-time = date [ time-spec-separator ]",
        "calendar-date-time = date-time [ calendar ]",
        "temporal-date-string = calendar-date-time",
    ]
