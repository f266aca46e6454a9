"""Character cursor used by the grammar productions."""

from typing import Callable, Union

Predicate = Callable[[str], bool]
Matcher = Union[str, Predicate]


def is_ascii_digit(char: str) -> bool:
    """Match 0-9 only, unlike `str.isdigit`."""
    return "0" <= char <= "9"


def is_ascii_alpha(char: str) -> bool:
    """Match A-Z and a-z only."""
    return "a" <= char <= "z" or "A" <= char <= "Z"


def is_ascii_alphanumeric(char: str) -> bool:
    """Match an ASCII letter or digit."""
    return is_ascii_digit(char) or is_ascii_alpha(char)


class Lexer:
    """Read-only view of the input with a movable position.

    Positions are code point offsets into `source`. A literal advances the
    cursor by its own length, a predicate by one character.
    """

    def __init__(self, source: str):
        self.source = source
        self.position = 0

    def is_eof(self) -> bool:
        """Whether the whole input has been consumed."""
        return self.position >= len(self.source)

    def tell(self) -> int:
        """Current position."""
        return self.position

    def seek(self, position: int) -> None:
        """Move to `position`, used to roll back."""
        self.position = position

    def next_is(self, matcher: Matcher) -> bool:
        """Test the text at the current position without consuming it."""
        if isinstance(matcher, str):
            return self.source.startswith(matcher, self.position)
        if self.is_eof():
            return False
        return matcher(self.source[self.position])

    def consume(self) -> str:
        """Take one character unconditionally."""
        char = self.source[self.position]
        self.position += 1
        return char

    def consume_specific(self, matcher: Matcher) -> bool:
        """Consume `matcher` if it is next, otherwise leave the position alone."""
        if not self.next_is(matcher):
            return False
        self.position += len(matcher) if isinstance(matcher, str) else 1
        return True
