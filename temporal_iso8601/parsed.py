"""Capture results for Temporal ISO 8601 strings."""

from typing import Dict, Iterator, Optional

import abnf
from pydantic import BaseModel, ConfigDict, Field

from .grammars import temporal


class Span(BaseModel):
    """A range of the original input, sliced only when `text` is read."""

    model_config = ConfigDict(frozen=True)

    source: str = Field(repr=False)
    start: int
    end: int

    @property
    def text(self) -> str:
        """Matched text."""
        return self.source[self.start : self.end]

    @property
    def length(self) -> int:
        """Number of characters matched."""
        return self.end - self.start

    def __str__(self):
        """Matched text."""
        return self.text


class ParseResult(BaseModel):
    """Named captures of a successful parse.

    A field is `None` when the input did not contain that component. Values
    are raw text; turning them into numbers is left to the caller.
    """

    sign: Optional[Span] = None
    """Sign of an extended year, one of `+`, `-` or U+2212."""
    date_year: Optional[Span] = None
    """Four digits, or a sign followed by six digits."""
    date_month: Optional[Span] = None
    date_day: Optional[Span] = None
    time_hour: Optional[Span] = None
    time_minute: Optional[Span] = None
    time_second: Optional[Span] = None
    """Two digits, `60` included."""
    time_fractional_part: Optional[Span] = None
    """Fraction digits without the decimal separator."""
    calendar_name: Optional[Span] = None
    """Calendar identifier from a `[u-ca=...]` annotation."""

    def texts(self) -> Dict[str, Optional[str]]:
        """Map each capture to its matched text."""
        return {
            name: None if span is None else span.text for name, span in self
        }

    @property
    def is_extended_year(self) -> bool:
        """Whether the year was written with a sign and six digits."""
        return self.sign is not None


CAPTURE_FIELDS = tuple(ParseResult.model_fields)


def _walk(node) -> Iterator:
    yield node
    for child in getattr(node, "children", ()):
        yield from _walk(child)


class ABNFParsedDateString:
    """ABNF parsed Temporal date string."""

    def __init__(self, text: str):
        """Parse a TemporalDateString with the reference grammar."""
        parser = temporal.Rule("temporal-date-string")
        try:
            node = parser.parse_all(text)
        except abnf.ParseError as e:
            raise ValueError from e

        for name in CAPTURE_FIELDS:
            setattr(self, name, None)

        for child in _walk(node):
            name = child.name.replace("-", "_")
            if name in CAPTURE_FIELDS:
                setattr(self, name, child.value)

    def texts(self) -> Dict[str, Optional[str]]:
        """Map each capture to its matched text."""
        return {name: getattr(self, name) for name in CAPTURE_FIELDS}
