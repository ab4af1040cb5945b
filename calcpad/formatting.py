"""Text rendering of evaluation results.

Floats use the rules of ECMAScript Number-to-String: shortest round-trip
digits, no trailing ``.0``, plain notation for ``1e-7 <= |x| < 1e21`` and
exponent notation (``1e+21``, ``1.5e-7``) outside it. The lexer reads all of
these back, so a result can be used as the start of the next expression.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Union

from calcpad.converter import to_base
from calcpad.modes import NumberBase


def format_float(value: float) -> str:
    if value == 0:
        return '0'
    sign = '-' if value < 0 else ''
    digits_tuple, exponent = Decimal(repr(abs(value))).normalize().as_tuple()[1:]
    digits = ''.join(str(d) for d in digits_tuple)
    k = len(digits)
    # n is the position of the decimal point relative to the first digit
    n = exponent + k
    if k <= n <= 21:
        body = digits + '0' * (n - k)
    elif 0 < n <= 21:
        body = digits[:n] + '.' + digits[n:]
    elif -6 < n <= 0:
        body = '0.' + '0' * (-n) + digits
    else:
        e = n - 1
        mantissa = digits[0] + ('.' + digits[1:] if k > 1 else '')
        body = f"{mantissa}e{'+' if e > 0 else '-'}{abs(e)}"
    return sign + body


def format_result(value: Union[int, float], base: NumberBase = NumberBase.DEC) -> str:
    """Integers render in ``base``; floats render in decimal."""
    if isinstance(value, int):
        return to_base(value, base)
    return format_float(value)
