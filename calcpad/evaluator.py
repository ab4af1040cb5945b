"""Expression tree evaluator.

Standard and scientific modes evaluate over floats. Programmer mode evaluates
over ints: every intermediate value must fit a signed 64-bit integer and '/'
truncates toward zero. Bitwise operators, shifts and MOD use 32-bit signed
wrap-around in every mode, like C operators on 32-bit ints.

Evaluation is pure: the same tree and context always give the same result.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Union

from calcpad.errors import ErrorKind, EvalError
from calcpad.modes import Mode, NumberBase
from calcpad.nodes import CONSTANTS, BinaryOp, Call, Constant, Node, NumberLiteral, UnaryOp

Number = Union[int, float]

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1


@dataclass(frozen=True)
class EvalContext:
    """Mode and number base an expression is evaluated in."""
    mode: Mode = Mode.STANDARD
    base: NumberBase = NumberBase.DEC

    @property
    def integer(self) -> bool:
        return self.mode is Mode.PROGRAMMER


# --------------------------
# Numeric helpers
# --------------------------

def _wrap32(n: int) -> int:
    n &= 0xFFFFFFFF
    return n - 0x100000000 if n & 0x80000000 else n


def to_int32(x: Number) -> int:
    """Truncate and wrap ``x`` to a signed 32-bit integer."""
    if isinstance(x, float):
        if not math.isfinite(x):
            raise EvalError(ErrorKind.OVERFLOW, "Bitwise operand is not a finite number")
        x = math.trunc(x)
    return _wrap32(x)


def _trunc_div(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


def _trunc_rem(a: int, b: int) -> int:
    return a - b * _trunc_div(a, b)


def _checked_float(value: float, what: str) -> float:
    if not math.isfinite(value):
        raise EvalError(ErrorKind.OVERFLOW, f"Result of {what} is out of range")
    return value


def _checked_int(value: int, what: str) -> int:
    if value < INT64_MIN or value > INT64_MAX:
        raise EvalError(ErrorKind.OVERFLOW, f"Result of {what} does not fit in 64 bits")
    return value


def _bitwise(op: str, left: Number, right: Number) -> int:
    a = to_int32(left)
    b = to_int32(right)
    if op == 'AND':
        return a & b
    if op == 'OR':
        return a | b
    if op == 'XOR':
        return a ^ b
    if op == '<<':
        return _wrap32(a << (b & 31))
    if op == '>>':
        return a >> (b & 31)
    if op == 'MOD':
        if b == 0:
            raise EvalError(ErrorKind.DIVIDE_BY_ZERO, "Modulo by zero")
        return _trunc_rem(a, b)
    raise EvalError(ErrorKind.INTERNAL, f"Unknown bitwise operator: {op}")


_BITWISE_OPS = frozenset({'AND', 'OR', 'XOR', '<<', '>>', 'MOD'})


def _domain(name: str, reason: str) -> EvalError:
    return EvalError(ErrorKind.DOMAIN_ERROR, f"Domain error in function '{name}': {reason}")


def _sqrt(x: float) -> float:
    if x < 0:
        raise _domain('sqrt', "negative argument")
    return math.sqrt(x)


def _ln(x: float) -> float:
    if x <= 0:
        raise _domain('ln', "argument must be positive")
    return math.log(x)


def _log(x: float) -> float:
    if x <= 0:
        raise _domain('log', "argument must be positive")
    return math.log10(x)


def _asin(x: float) -> float:
    if not -1.0 <= x <= 1.0:
        raise _domain('asin', "argument outside [-1, 1]")
    return math.asin(x)


def _acos(x: float) -> float:
    if not -1.0 <= x <= 1.0:
        raise _domain('acos', "argument outside [-1, 1]")
    return math.acos(x)


def _exp(x: float) -> float:
    try:
        return math.exp(x)
    except OverflowError:
        raise EvalError(ErrorKind.OVERFLOW, "Result of exp is out of range")


# Function registry: name -> callable over floats.
_FUNCTIONS: Dict[str, Callable[[float], float]] = {
    'sin': math.sin,
    'cos': math.cos,
    'tan': math.tan,
    'asin': _asin,
    'acos': _acos,
    'atan': math.atan,
    'ln': _ln,
    'log': _log,
    'sqrt': _sqrt,
    'exp': _exp,
}


def _float_power(base: float, exponent: float) -> float:
    if base == 0 and exponent < 0:
        raise EvalError(ErrorKind.DIVIDE_BY_ZERO, "Zero raised to a negative power")
    try:
        return math.pow(base, exponent)
    except ValueError:
        raise EvalError(ErrorKind.DOMAIN_ERROR, "Fractional power of a negative number")
    except OverflowError:
        raise EvalError(ErrorKind.OVERFLOW, "Result of ^ is out of range")


def _int_power(base: int, exponent: int) -> int:
    if exponent < 0:
        if base == 0:
            raise EvalError(ErrorKind.DIVIDE_BY_ZERO, "Zero raised to a negative power")
        if base in (1, -1):
            return base ** -exponent
        return 0
    if abs(base) >= 2 and exponent >= 64:
        raise EvalError(ErrorKind.OVERFLOW, "Result of ^ does not fit in 64 bits")
    return _checked_int(base ** exponent, '^')


# --------------------------
# Evaluator
# --------------------------

class Evaluator:
    """Evaluates expression trees in a fixed context."""

    def __init__(self, context: Optional[EvalContext] = None):
        self.context = context or EvalContext()

    def eval(self, node: Node) -> Number:
        """Evaluate ``node`` and return the result or raise EvalError."""
        if self.context.integer:
            return self._eval_int(node)
        return _checked_float(self._eval_float(node), 'expression')

    # Float semantics (standard, scientific)

    def _eval_float(self, node: Node) -> float:
        if isinstance(node, NumberLiteral):
            try:
                return _checked_float(float(node.value), 'literal')
            except OverflowError:
                raise EvalError(ErrorKind.OVERFLOW, "Literal is out of range")
        if isinstance(node, Constant):
            return self._constant(node.name)
        if isinstance(node, UnaryOp):
            val = self._eval_float(node.operand)
            if node.op == '-':
                return -val
            if node.op == '+':
                return val
            if node.op == 'NOT':
                return float(~to_int32(val))
            raise EvalError(ErrorKind.INTERNAL, f"Unknown unary operator: {node.op}")
        if isinstance(node, BinaryOp):
            left = self._eval_float(node.left)
            right = self._eval_float(node.right)
            op = node.op
            if op in _BITWISE_OPS:
                return float(_bitwise(op, left, right))
            if op == '+':
                return _checked_float(left + right, op)
            if op == '-':
                return _checked_float(left - right, op)
            if op == '*':
                return _checked_float(left * right, op)
            if op == '/':
                if right == 0:
                    raise EvalError(ErrorKind.DIVIDE_BY_ZERO, "Division by zero")
                return _checked_float(left / right, op)
            if op == '%':
                if right == 0:
                    raise EvalError(ErrorKind.DIVIDE_BY_ZERO, "Modulo by zero")
                return math.fmod(left, right)
            if op == '^':
                return _checked_float(_float_power(left, right), op)
            raise EvalError(ErrorKind.INTERNAL, f"Unknown binary operator: {op}")
        if isinstance(node, Call):
            return _checked_float(self._call(node.function, self._eval_float(node.argument)), node.function)
        raise EvalError(ErrorKind.INTERNAL, f"Unsupported node: {type(node).__name__}")

    # Integer semantics (programmer)

    def _eval_int(self, node: Node) -> int:
        if isinstance(node, NumberLiteral):
            value = node.value
            if isinstance(value, float):
                _checked_float(value, 'literal')
                if not value.is_integer():
                    raise EvalError(ErrorKind.DOMAIN_ERROR, f"Fractional value {value} in programmer mode")
                value = int(value)
            return _checked_int(value, 'literal')
        if isinstance(node, Constant):
            return math.trunc(self._constant(node.name))
        if isinstance(node, UnaryOp):
            val = self._eval_int(node.operand)
            if node.op == '-':
                return _checked_int(-val, 'negation')
            if node.op == '+':
                return val
            if node.op == 'NOT':
                return ~to_int32(val)
            raise EvalError(ErrorKind.INTERNAL, f"Unknown unary operator: {node.op}")
        if isinstance(node, BinaryOp):
            left = self._eval_int(node.left)
            right = self._eval_int(node.right)
            op = node.op
            if op in _BITWISE_OPS:
                return _bitwise(op, left, right)
            if op == '+':
                return _checked_int(left + right, op)
            if op == '-':
                return _checked_int(left - right, op)
            if op == '*':
                return _checked_int(left * right, op)
            if op in ('/', '%'):
                if right == 0:
                    raise EvalError(ErrorKind.DIVIDE_BY_ZERO, "Division by zero" if op == '/' else "Modulo by zero")
                if op == '/':
                    return _checked_int(_trunc_div(left, right), op)
                return _trunc_rem(left, right)
            if op == '^':
                return _int_power(left, right)
            raise EvalError(ErrorKind.INTERNAL, f"Unknown binary operator: {op}")
        if isinstance(node, Call):
            value = self._call(node.function, float(self._eval_int(node.argument)))
            return _checked_int(math.trunc(_checked_float(value, node.function)), node.function)
        raise EvalError(ErrorKind.INTERNAL, f"Unsupported node: {type(node).__name__}")

    # Shared

    def _constant(self, name: str) -> float:
        if name not in CONSTANTS:
            raise EvalError(ErrorKind.INTERNAL, f"Unknown constant: {name}")
        return CONSTANTS[name]

    def _call(self, name: str, argument: float) -> float:
        func = _FUNCTIONS.get(name)
        if func is None:
            raise EvalError(ErrorKind.INTERNAL, f"Unknown function: {name}")
        try:
            return func(argument)
        except EvalError:
            raise
        except ValueError as e:
            raise _domain(name, str(e))
        except OverflowError:
            raise EvalError(ErrorKind.OVERFLOW, f"Result of {name} is out of range")


def evaluate(node: Node, context: Optional[EvalContext] = None) -> Number:
    return Evaluator(context).eval(node)
