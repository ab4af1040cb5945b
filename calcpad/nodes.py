"""Expression tree nodes and the names the grammar knows about."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, FrozenSet, Union

# One-argument functions accepted by the parser.
FUNCTIONS: FrozenSet[str] = frozenset({
    'sin', 'cos', 'tan', 'asin', 'acos', 'atan', 'ln', 'log', 'sqrt', 'exp',
})

CONSTANTS: Dict[str, float] = {
    'π': math.pi,
    'pi': math.pi,
    'e': math.e,
}

# Word operators, matched case-insensitively.
KEYWORDS: FrozenSet[str] = frozenset({'OR', 'XOR', 'AND', 'NOT', 'MOD'})


@dataclass(frozen=True)
class Node:
    """Base expression node."""


@dataclass(frozen=True)
class NumberLiteral(Node):
    value: Union[int, float]


@dataclass(frozen=True)
class Constant(Node):
    name: str


@dataclass(frozen=True)
class UnaryOp(Node):
    op: str
    operand: Node


@dataclass(frozen=True)
class BinaryOp(Node):
    op: str
    left: Node
    right: Node


@dataclass(frozen=True)
class Call(Node):
    function: str
    argument: Node
