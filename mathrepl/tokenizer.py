import enum
import re
from dataclasses import dataclass
from typing import Iterator

from mathrepl.utils import PrintableEnum

MAX_IDENTIFIER_LENGTH = 64


class TokenType(PrintableEnum):
    START_OF_LINE = enum.auto()
    END_OF_LINE = enum.auto()
    ERROR = enum.auto()
    BRACKET_OPEN = enum.auto()
    BRACKET_CLOSE = enum.auto()
    IDENTIFIER = enum.auto()
    NUMBER = enum.auto()
    UNARY_MINUS = enum.auto()
    PLUS = enum.auto()
    MINUS = enum.auto()
    STAR = enum.auto()
    SLASH = enum.auto()
    CARET = enum.auto()
    BANG = enum.auto()


@dataclass
class Token:
    type: TokenType
    position: int
    lexeme: str = ""
    number: float = 0.0
    errmsg: str = ""

    def __str__(self) -> str:
        if self.type is TokenType.NUMBER:
            return f"<{self.type}>{self.number!r}"
        elif self.type is TokenType.ERROR:
            return f"<{self.type}>{self.errmsg}"
        return f"<{self.type}>{self.lexeme}"


SINGLE_CHAR_TOKENS = {
    "(": TokenType.BRACKET_OPEN,
    ")": TokenType.BRACKET_CLOSE,
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
    "^": TokenType.CARET,
    "!": TokenType.BANG,
}

# longest prefix a C strtod would accept for a literal starting with a decimal digit;
# strtod hex forms (0x10) are left out, literals are decimal only
NUMBER_PATT = re.compile(r"[0-9]+(?:\.[0-9]*)?(?:[eE][+-]?[0-9]+)?")


def _is_blank(s: str) -> bool:
    return s == " " or s == "\t"


def _is_valid_identifier_start(s: str) -> bool:
    return s.isascii() and s.isalpha()


def _is_valid_in_identifier(s: str) -> bool:
    return s.isascii() and s.isalnum()


def next_token(line: str, cursor: int) -> tuple[Token, int]:
    """Reads a single token from ``line`` starting at ``cursor``.

    Returns the token together with the cursor advanced past everything consumed,
    including any blanks skipped before the token. The end of the string, a newline
    and a NUL character all produce END_OF_LINE.
    """
    while cursor < len(line) and _is_blank(line[cursor]):
        cursor += 1
    start = cursor

    if cursor >= len(line) or line[cursor] in ("\n", "\0"):
        return Token(type=TokenType.END_OF_LINE, position=start), cursor + 1

    char = line[cursor]
    if char.isascii() and char.isdigit():
        match = NUMBER_PATT.match(line, cursor)
        assert match is not None
        lexeme = match.group()
        return Token(type=TokenType.NUMBER, position=start, lexeme=lexeme, number=float(lexeme)), match.end()
    elif char in SINGLE_CHAR_TOKENS:
        return Token(type=SINGLE_CHAR_TOKENS[char], position=start, lexeme=char), cursor + 1
    elif _is_valid_identifier_start(char):
        ident_end_idx = cursor + 1
        while ident_end_idx < len(line) and _is_valid_in_identifier(line[ident_end_idx]):
            ident_end_idx += 1
        if ident_end_idx - start > MAX_IDENTIFIER_LENGTH:
            return Token(type=TokenType.ERROR, position=start, errmsg="identifier name too long"), ident_end_idx
        return Token(type=TokenType.IDENTIFIER, position=start, lexeme=line[start:ident_end_idx]), ident_end_idx
    else:
        return Token(type=TokenType.ERROR, position=start, errmsg="unrecognized token"), cursor + 1


def iter_tokens(line: str) -> Iterator[Token]:
    """Yields tokens up to and including END_OF_LINE or the first ERROR"""
    cursor = 0
    while True:
        token, cursor = next_token(line, cursor)
        yield token
        if token.type in (TokenType.END_OF_LINE, TokenType.ERROR):
            return
