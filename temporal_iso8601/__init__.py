"""Parser for Temporal ISO 8601 date strings."""

# flake8: noqa: F401
from .iso8601 import (
    ISO8601Error,
    ISO8601Parser,
    MalformedTemporalString,
    Production,
    TemporalDateStr,
    TemporalDateString,
    UnknownProduction,
    parse_iso8601,
    parse_temporal_date_string,
)
from .parsed import ABNFParsedDateString, ParseResult, Span
