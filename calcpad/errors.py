"""Exception types raised by the lexer, parser, evaluator and session layer."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Category of a failed evaluation, as reported to the presentation layer."""
    LEX_ERROR = 'lex_error'
    PARSE_ERROR = 'parse_error'
    DOMAIN_ERROR = 'domain_error'
    DIVIDE_BY_ZERO = 'divide_by_zero'
    OVERFLOW = 'overflow'
    INTERNAL = 'internal'


class CalculatorError(Exception):
    """Base class for calculator errors."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str, position: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.position = position


class LexError(CalculatorError):
    """Raised when the input contains a character the lexer cannot scan."""

    kind = ErrorKind.LEX_ERROR


class ParseError(CalculatorError):
    """Raised for structurally invalid expressions.

    ``reason`` is the short description without the position suffix.
    """

    kind = ErrorKind.PARSE_ERROR

    def __init__(self, reason: str, position: Optional[int] = None):
        message = reason if position is None else f"{reason} at pos {position}"
        super().__init__(message, position)
        self.reason = reason


class EvalError(CalculatorError):
    """Raised during evaluation: domain errors, division by zero, overflow."""

    def __init__(self, kind: ErrorKind, message: str, position: Optional[int] = None):
        super().__init__(message, position)
        self.kind = kind


class UnknownHistoryEntry(KeyError):
    """Raised when a history entry id does not exist."""

    def __init__(self, entry_id: int):
        super().__init__(entry_id)
        self.entry_id = entry_id

    def __str__(self) -> str:
        return f"No history entry with id {self.entry_id}"
