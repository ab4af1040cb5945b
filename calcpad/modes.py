"""Calculator modes, programmer-mode number bases and the keypad of each mode.

The keypads decide which labels a mode offers. A label missing from the
active keypad, or a digit that is not valid in the active base, is disabled:
the session ignores it instead of raising.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Tuple


class Mode(str, Enum):
    STANDARD = 'standard'
    SCIENTIFIC = 'scientific'
    PROGRAMMER = 'programmer'


class NumberBase(Enum):
    """Radix used for digit input and result display in programmer mode."""
    HEX = 16
    DEC = 10
    OCT = 8
    BIN = 2

    @property
    def radix(self) -> int:
        return self.value

    @classmethod
    def parse(cls, text: str) -> 'NumberBase':
        """Accept a base by name (``hex``) or radix (``16``)."""
        key = text.strip().upper()
        if key.isdigit():
            return cls(int(key))
        try:
            return cls[key]
        except KeyError:
            raise ValueError(f"Unknown number base: {text!r}") from None


def parse_mode(text: str) -> Mode:
    try:
        return Mode(text.strip().lower())
    except ValueError:
        raise ValueError(f"Unknown mode: {text!r}") from None


# Rows as laid out on each keypad. Control keys (C, CE, CLR, ⌫, =) are routed
# by Calculator.handle_key and never reach the label expansion.
KEYPADS: Dict[Mode, Tuple[Tuple[str, ...], ...]] = {
    Mode.STANDARD: (
        ('%', 'CE', 'C', '⌫'),
        ('1/x', 'x²', '√', '÷'),
        ('7', '8', '9', '×'),
        ('4', '5', '6', '-'),
        ('1', '2', '3', '+'),
        ('±', '0', '.', '='),
    ),
    Mode.SCIENTIFIC: (
        ('(', ')', '%', 'CE', 'C', '⌫'),
        ('inv', 'sin', 'ln', '7', '8', '9', '÷'),
        ('π', 'cos', 'log', '4', '5', '6', '×'),
        ('e', 'tan', '√', '1', '2', '3', '-'),
        ('x²', 'x³', 'xʸ', '0', '.', '=', '+'),
    ),
    Mode.PROGRAMMER: (
        ('A', 'B', 'C', 'D', 'E', 'F'),
        ('CE', 'CLR', '⌫', '÷', '×', '-'),
        ('7', '8', '9', 'OR', 'XOR', 'AND'),
        ('4', '5', '6', '<<', '>>', 'NOT'),
        ('1', '2', '3', 'MOD', '(', ')'),
        ('0', '.', '=', '+', 'NEG', 'CLR'),
    ),
}

# Labels that stand for a key printed differently on some keypads.
KEY_ALIASES: Dict[str, str] = {
    '*': '×',
    '/': '÷',
    'pi': 'π',
    'sqrt': '√',
    '^': 'xʸ',
    'NEG': '±',
    '±': 'NEG',
}

CONTROL_LABELS = frozenset({'C', 'CE', 'CLR', '⌫', '='})
HEX_LETTERS = frozenset('ABCDEF')
DECIMAL_DIGITS = frozenset('0123456789')


def keypad_labels(mode: Mode) -> List[str]:
    """Labels on the keypad of ``mode`` in row order, without duplicates."""
    seen: List[str] = []
    for row in KEYPADS[mode]:
        for label in row:
            if label not in seen:
                seen.append(label)
    return seen


def is_digit_valid(label: str, base: NumberBase) -> bool:
    """Whether a single digit label can be entered in ``base``."""
    return int(label, 16) < base.radix


def is_label_enabled(label: str, mode: Mode, base: NumberBase = NumberBase.DEC) -> bool:
    """Mirror of the keypad's disabled-button rules."""
    keypad = keypad_labels(mode)
    if label not in keypad and KEY_ALIASES.get(label) not in keypad:
        return False
    if mode is not Mode.PROGRAMMER:
        return True
    if label == 'C':
        # In programmer mode 'C' is a hex digit, 'CLR' clears.
        return base is NumberBase.HEX
    if label in HEX_LETTERS or label in DECIMAL_DIGITS:
        return is_digit_valid(label, base)
    if label == '.':
        return base is NumberBase.DEC
    return True


def enabled_labels(mode: Mode, base: NumberBase = NumberBase.DEC) -> List[str]:
    return [label for label in keypad_labels(mode) if is_label_enabled(label, mode, base)]
