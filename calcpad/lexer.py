"""Tokenizer for raw calculator expressions.

Produces NUMBER, IDENTIFIER, OPERATOR and PAREN tokens left to right.
'-' is always an operator; negative literals are handled by the parser.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from calcpad.converter import first_invalid_digit, is_valid_digits
from calcpad.errors import LexError
from calcpad.modes import NumberBase
from calcpad.nodes import CONSTANTS, FUNCTIONS, KEYWORDS


class TokenKind:
    """Token categories."""
    NUMBER = 'NUMBER'
    IDENTIFIER = 'IDENTIFIER'
    OPERATOR = 'OPERATOR'
    PAREN = 'PAREN'


@dataclass(frozen=True)
class Token:
    """A token with its source text and character position."""
    kind: str
    text: str
    position: int

    def __repr__(self) -> str:
        return f"Token({self.kind}, {self.text!r}, pos={self.position})"


_MULTI_OPS = ('<<', '>>')
_DIGITS = '0123456789'
_SINGLE_OPS = set('+-*/^%~,')


def _is_digit(ch: str) -> bool:
    # ASCII only; str.isdigit() also accepts '²' and other Unicode digits.
    return ch != '' and ch in _DIGITS


def _is_known_name(word: str) -> bool:
    return word in FUNCTIONS or word in CONSTANTS or word.upper() in KEYWORDS


class Lexer:
    """Scans ``text`` written with digits of ``base``.

    In HEX, an alphanumeric run made only of hex digits is a number unless it
    is a known function, constant or keyword ('e' stays Euler's number, 'E'
    is fourteen). Outside DEC, fractional literals are rejected.
    """

    def __init__(self, text: str, base: NumberBase = NumberBase.DEC):
        self.text = text
        self.base = base
        self.pos = 0
        self.len = len(text)

    def _peek(self, n: int = 0) -> str:
        i = self.pos + n
        return self.text[i] if i < self.len else ''

    def _advance(self, n: int = 1) -> None:
        self.pos += n

    def _skip_whitespace(self) -> None:
        while self._peek() and self._peek().isspace():
            self._advance()

    def _read_decimal(self) -> Token:
        start = self.pos
        has_dot = False
        while True:
            ch = self._peek()
            if _is_digit(ch):
                self._advance()
            elif ch == '.':
                if has_dot:
                    raise LexError(f"Malformed number: second decimal point at pos {self.pos}", self.pos)
                has_dot = True
                self._advance()
            else:
                break
        # Exponent only when digits follow, so '2e' still lexes as 2 then e.
        if self._peek() in ('e', 'E'):
            nxt = self._peek(1)
            if _is_digit(nxt) or (nxt in ('+', '-') and _is_digit(self._peek(2))):
                self._advance(2)
                while _is_digit(self._peek()):
                    self._advance()
        return Token(TokenKind.NUMBER, self.text[start:self.pos], start)

    def _read_based(self) -> Token:
        start = self.pos
        while self._peek().isalnum():
            self._advance()
        raw = self.text[start:self.pos]
        bad = first_invalid_digit(raw, self.base)
        if bad >= 0:
            pos = start + bad
            raise LexError(f"Digit {raw[bad]!r} is not valid in base {self.base.radix} at pos {pos}", pos)
        if self._peek() == '.':
            raise LexError(
                f"Fractional numbers are not allowed in base {self.base.radix} at pos {self.pos}", self.pos
            )
        return Token(TokenKind.NUMBER, raw, start)

    def _read_word(self) -> Token:
        start = self.pos
        while True:
            ch = self._peek()
            if ch.isalnum() or ch == '_':
                self._advance()
            else:
                break
        raw = self.text[start:self.pos]
        if self.base is NumberBase.HEX and not _is_known_name(raw) and is_valid_digits(raw, NumberBase.HEX):
            return Token(TokenKind.NUMBER, raw, start)
        return Token(TokenKind.IDENTIFIER, raw, start)

    def __iter__(self) -> Iterator[Token]:
        while True:
            self._skip_whitespace()
            ch = self._peek()
            if ch == '':
                return
            if _is_digit(ch) or (ch == '.' and _is_digit(self._peek(1))):
                if self.base is NumberBase.DEC:
                    yield self._read_decimal()
                else:
                    yield self._read_based()
            elif ch.isalpha() or ch == '_':
                yield self._read_word()
            elif ch in '()':
                yield Token(TokenKind.PAREN, ch, self.pos)
                self._advance()
            elif self.text.startswith(_MULTI_OPS, self.pos):
                yield Token(TokenKind.OPERATOR, self.text[self.pos:self.pos + 2], self.pos)
                self._advance(2)
            elif ch in _SINGLE_OPS:
                yield Token(TokenKind.OPERATOR, ch, self.pos)
                self._advance()
            else:
                raise LexError(f"Unexpected character {ch!r} at pos {self.pos}", self.pos)


def tokenize(text: str, base: NumberBase = NumberBase.DEC) -> Iterator[Token]:
    """Lazily tokenize ``text``; a LexError surfaces when iteration reaches it."""
    return iter(Lexer(text, base))
