"""calcpad: a standard, scientific and programmer calculator engine."""

__version__ = "0.1.0"

from calcpad.errors import (  # noqa: E402
    CalculatorError, ErrorKind, EvalError, LexError, ParseError, UnknownHistoryEntry,
)
from calcpad.history import HistoryEntry  # noqa: E402
from calcpad.modes import Mode, NumberBase  # noqa: E402
from calcpad.session import Calculator, SessionState, Status  # noqa: E402

__all__ = [
    "Calculator",
    "CalculatorError",
    "ErrorKind",
    "EvalError",
    "HistoryEntry",
    "LexError",
    "Mode",
    "NumberBase",
    "ParseError",
    "SessionState",
    "Status",
    "UnknownHistoryEntry",
    "__version__",
]
