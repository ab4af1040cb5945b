"""Keypad label vocabulary.

Every value label maps to a ``Piece``: the text it adds to the display and the
canonical text it adds to the raw expression (``×`` shows as ``×`` and
evaluates as ``*``). Keeping the two side by side is what lets delete remove
the last key from both strings at once.
"""

from __future__ import annotations

import math
from typing import Dict, List, NamedTuple, Tuple

from calcpad.errors import LexError
from calcpad.modes import Mode, NumberBase
from calcpad.nodes import KEYWORDS


class PieceKind:
    DIGIT = 'digit'
    POINT = 'point'
    CONSTANT = 'constant'
    FUNCTION = 'function'
    OPEN = 'open'
    CLOSE = 'close'
    PREFIX = 'prefix'
    OPERATOR = 'operator'
    POSTFIX = 'postfix'
    SIGN = 'sign'


class Piece(NamedTuple):
    display: str
    raw: str
    kind: str


class UnknownLabel(ValueError):
    """Raised for a label outside the keypad vocabulary."""


# Kinds that begin an operand; everything else needs a left operand.
OPERAND_START_KINDS = frozenset({
    PieceKind.DIGIT, PieceKind.POINT, PieceKind.CONSTANT,
    PieceKind.FUNCTION, PieceKind.OPEN, PieceKind.PREFIX,
})

# Kinds after which another operand means multiplication.
_ENDS_OPERAND = frozenset({
    PieceKind.DIGIT, PieceKind.POINT, PieceKind.CONSTANT, PieceKind.POSTFIX, PieceKind.CLOSE,
})
# An operand may directly follow a plain number only for these kinds.
_NUMBER_ENDS = frozenset({PieceKind.DIGIT, PieceKind.POINT})

DIGIT_LABELS = tuple('0123456789')
HEX_DIGIT_LABELS = tuple('ABCDEF')

BINARY_OPERATORS: Dict[str, Tuple[str, str]] = {
    '+': ('+', '+'),
    '-': ('-', '-'),
    '×': ('×', '*'),
    '*': ('×', '*'),
    '÷': ('÷', '/'),
    '/': ('÷', '/'),
    '^': ('^', '^'),
    'xʸ': ('^', '^'),
    '%': ('%', '%'),
    # Word operators are padded so hex digits never run into them.
    'MOD': (' MOD ', ' MOD '),
    'AND': (' AND ', ' AND '),
    'OR': (' OR ', ' OR '),
    'XOR': (' XOR ', ' XOR '),
    '<<': (' << ', ' << '),
    '>>': (' >> ', ' >> '),
}

POSTFIX_OPERATORS: Dict[str, Tuple[str, str]] = {
    'x²': ('²', '^2'),
    'x³': ('³', '^3'),
}

CONSTANT_LABELS: Dict[str, Tuple[str, str]] = {
    'π': ('π', repr(math.pi)),
    'pi': ('π', repr(math.pi)),
    'e': ('e', repr(math.e)),
}

FUNCTION_LABELS = ('sin', 'cos', 'tan', 'ln', 'log', 'sqrt')

# Function a label stands for after the inv key.
INVERSE_FUNCTIONS: Dict[str, str] = {
    'sin': 'asin',
    'cos': 'acos',
    'tan': 'atan',
    'ln': 'exp',
}

SIGN_LABELS = frozenset({'±', 'NEG'})
RECIPROCAL_LABEL = '1/x'
INVERSE_LABEL = 'inv'

SIGN_PIECE = Piece('-', '-', PieceKind.SIGN)
ZERO_PIECE = Piece('0', '0', PieceKind.DIGIT)
RECIPROCAL_OPEN = Piece('1/(', '1/(', PieceKind.OPEN)
CLOSE_PIECE = Piece(')', ')', PieceKind.CLOSE)

VALUE_LABELS = frozenset(
    DIGIT_LABELS + HEX_DIGIT_LABELS + FUNCTION_LABELS
    + ('.', '(', ')', '√', RECIPROCAL_LABEL, INVERSE_LABEL, 'NOT')
    + tuple(BINARY_OPERATORS) + tuple(POSTFIX_OPERATORS) + tuple(CONSTANT_LABELS)
    + tuple(SIGN_LABELS)
)


def piece_for(label: str, inverse: bool = False) -> Piece:
    """The piece a single-key label contributes.

    ``1/x``, ``±``/``NEG`` and ``inv`` act on the whole expression and are
    handled by the session, not here.
    """
    if label in DIGIT_LABELS or label in HEX_DIGIT_LABELS:
        return Piece(label, label, PieceKind.DIGIT)
    if label == '.':
        return Piece('.', '.', PieceKind.POINT)
    if label in BINARY_OPERATORS:
        display, raw = BINARY_OPERATORS[label]
        return Piece(display, raw, PieceKind.OPERATOR)
    if label in POSTFIX_OPERATORS:
        display, raw = POSTFIX_OPERATORS[label]
        return Piece(display, raw, PieceKind.POSTFIX)
    if label in CONSTANT_LABELS:
        display, raw = CONSTANT_LABELS[label]
        return Piece(display, raw, PieceKind.CONSTANT)
    if label in FUNCTION_LABELS:
        name = INVERSE_FUNCTIONS.get(label, label) if inverse else label
        return Piece(name + '(', name + '(', PieceKind.FUNCTION)
    if label == '√':
        return Piece('√(', 'sqrt(', PieceKind.FUNCTION)
    if label == '(':
        return Piece('(', '(', PieceKind.OPEN)
    if label == ')':
        return CLOSE_PIECE
    if label == 'NOT':
        return Piece('NOT ', 'NOT ', PieceKind.PREFIX)
    raise UnknownLabel(f"Unknown label: {label!r}")


def needs_multiply(previous: Piece, piece: Piece) -> bool:
    """Whether ``piece`` directly after ``previous`` is an implicit product."""
    if previous.kind not in _ENDS_OPERAND:
        return False
    if piece.kind in (PieceKind.CONSTANT, PieceKind.FUNCTION, PieceKind.OPEN):
        return True
    if piece.kind in _NUMBER_ENDS:
        return previous.kind not in _NUMBER_ENDS
    return False


def result_pieces(text: str) -> Tuple[Piece, ...]:
    """Pieces for a result shown on the display, one per character."""
    pieces = [Piece(ch, ch, PieceKind.DIGIT) for ch in text]
    if pieces and text.startswith('-'):
        pieces[0] = SIGN_PIECE
    return tuple(pieces)


# --------------------------
# Typed input
# --------------------------

_SYMBOLS: Dict[str, str] = {
    '+': '+', '-': '-', '*': '×', '×': '×', '/': '÷', '÷': '÷',
    '^': '^', '%': '%', '(': '(', ')': ')', '.': '.',
    '²': 'x²', '³': 'x³', '√': '√', '~': 'NOT', '±': '±',
}


def _skip_open_paren(text: str, i: int) -> int:
    j = i
    while j < len(text) and text[j].isspace():
        j += 1
    if j < len(text) and text[j] == '(':
        return j + 1
    return i


def labels_from_text(text: str, mode: Mode = Mode.STANDARD, base: NumberBase = NumberBase.DEC) -> List[str]:
    """Split typed text into keypad labels.

    Function names swallow the '(' that follows them because their label
    already opens the call. A trailing '=' is ignored.
    """
    hex_input = mode is Mode.PROGRAMMER and base is NumberBase.HEX
    labels: List[str] = []
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch.isspace():
            i += 1
            continue
        if ch in '0123456789':
            labels.append(ch)
            i += 1
            continue
        if text.startswith(('<<', '>>'), i):
            labels.append(text[i:i + 2])
            i += 2
            continue
        if ch in _SYMBOLS:
            labels.append(_SYMBOLS[ch])
            i += 1
            if ch == '√':
                i = _skip_open_paren(text, i)
            continue
        if ch == '=' and not text[i + 1:].strip():
            break
        if ch.isalpha():
            j = i
            while j < n and text[j].isalpha():
                j += 1
            word = text[i:j]
            if word.upper() in KEYWORDS:
                labels.append(word.upper())
            elif word in FUNCTION_LABELS:
                labels.append(word)
                j = _skip_open_paren(text, j)
            elif hex_input and all(c in 'abcdefABCDEF' for c in word):
                labels.extend(c.upper() for c in word)
            elif word in CONSTANT_LABELS:
                labels.append('π' if word == 'pi' else word)
            else:
                raise LexError(f"Unknown input {word!r} at pos {i}", i)
            i = j
            continue
        raise LexError(f"Unexpected character {ch!r} at pos {i}", i)
    return labels
