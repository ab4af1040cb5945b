"""Integer conversion between the programmer-mode number bases."""

from __future__ import annotations

import string
from typing import Dict

from calcpad.modes import NumberBase

_DIGITS = string.digits + string.ascii_uppercase[:6]


def is_valid_digits(text: str, base: NumberBase) -> bool:
    """True when ``text`` is a non-empty run of digits valid in ``base`` (no sign)."""
    if not text:
        return False
    allowed = _DIGITS[:base.radix]
    return all(ch in allowed for ch in text.upper())


def first_invalid_digit(text: str, base: NumberBase) -> int:
    """Index of the first character of ``text`` not valid in ``base``, or -1."""
    allowed = _DIGITS[:base.radix]
    for i, ch in enumerate(text.upper()):
        if ch not in allowed:
            return i
    return -1


def from_base(text: str, base: NumberBase) -> int:
    """Parse an optionally signed digit string written in ``base``."""
    raw = text.strip()
    sign = 1
    if raw.startswith('-'):
        sign = -1
        raw = raw[1:]
    if not is_valid_digits(raw, base):
        raise ValueError(f"Invalid {base.name} number: {text!r}")
    return sign * int(raw, base.radix)


def to_base(value: int, base: NumberBase) -> str:
    """Render ``value`` in ``base`` with uppercase digits and no radix prefix."""
    if value == 0:
        return '0'
    if value < 0:
        return '-' + to_base(-value, base)
    digits = []
    while value:
        value, rem = divmod(value, base.radix)
        digits.append(_DIGITS[rem])
    return ''.join(reversed(digits))


def all_bases(value: int) -> Dict[NumberBase, str]:
    """The value rendered in every supported base."""
    return {base: to_base(value, base) for base in NumberBase}
