"""Top-down operator precedence (Pratt) parser producing an expression tree.

Precedence, lowest to highest:

    OR XOR  <  AND  <  + -  <  * / % MOD << >>  <  prefix - + NOT ~  <  ^

'^' is exponentiation and right-associative, so ``-2^2`` is ``-(2^2)`` and
``2^-1`` parses its exponent as a prefix expression. Functions take exactly
one parenthesized argument.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

from calcpad.errors import ParseError
from calcpad.lexer import Token, TokenKind, tokenize
from calcpad.modes import NumberBase
from calcpad.nodes import (
    CONSTANTS, FUNCTIONS, BinaryOp, Call, Constant, Node, NumberLiteral, UnaryOp,
)

_EOF = 'EOF'

# Deepest nesting of groups and prefix operators.
MAX_DEPTH = 200
# Most operators and calls in one expression; bounds the height of the tree.
MAX_OPERATORS = 400

# Infix operators: map to (binding_power, right_assoc)
INFIX_BP: Dict[str, Tuple[int, bool]] = {
    'OR': (10, False),
    'XOR': (10, False),
    'AND': (20, False),
    '+': (30, False),
    '-': (30, False),
    '*': (40, False),
    '/': (40, False),
    '%': (40, False),
    'MOD': (40, False),
    '<<': (40, False),
    '>>': (40, False),
    '^': (60, True),
}

# Prefix operators: bp used to parse the operand
PREFIX_BP: Dict[str, int] = {
    '-': 50,
    '+': 50,
    'NOT': 50,
}


def _op_name(tok: Token) -> Optional[str]:
    """Normalized operator spelling of ``tok``, or None if it is not an operator."""
    if tok.kind == TokenKind.OPERATOR:
        return 'NOT' if tok.text == '~' else tok.text
    if tok.kind == TokenKind.IDENTIFIER and tok.text.upper() in ('OR', 'XOR', 'AND', 'NOT', 'MOD'):
        return tok.text.upper()
    return None


class Parser:
    """Pratt parser over a token sequence.

    ``base`` controls how number tokens are read: DEC literals become int or
    float, other bases become ints in that radix.
    """

    def __init__(self, tokens: Iterable[Token], base: NumberBase = NumberBase.DEC):
        self.tokens: List[Token] = list(tokens)
        end = self.tokens[-1].position + len(self.tokens[-1].text) if self.tokens else 0
        self.tokens.append(Token(_EOF, '', end))
        self.base = base
        self.pos = 0
        self.depth = 0
        self.operators = 0

    def _current(self) -> Token:
        return self.tokens[self.pos]

    def _advance(self) -> Token:
        tok = self.tokens[self.pos]
        self.pos += 1
        return tok

    def _expect_close(self, open_tok: Token) -> None:
        tok = self._current()
        if tok.kind == TokenKind.PAREN and tok.text == ')':
            self._advance()
            return
        if tok.kind == _EOF:
            raise ParseError("Unmatched '('", open_tok.position)
        raise ParseError(f"Expected ')' but found {tok.text!r}", tok.position)

    def parse(self) -> Node:
        if self._current().kind == _EOF:
            raise ParseError("Empty expression", 0)
        node = self.parse_expression(0)
        tok = self._current()
        if tok.kind != _EOF:
            if tok.kind == TokenKind.PAREN and tok.text == ')':
                raise ParseError("Unmatched ')'", tok.position)
            raise ParseError(f"Unexpected token {tok.text!r}", tok.position)
        return node

    def parse_expression(self, rbp: int = 0) -> Node:
        if self.depth >= MAX_DEPTH:
            raise ParseError("Expression nested too deeply", self._current().position)
        self.depth += 1
        try:
            return self._parse_expression(rbp)
        finally:
            self.depth -= 1

    def _parse_expression(self, rbp: int) -> Node:
        left = self.nud(self._advance())
        while True:
            op = _op_name(self._current())
            if op is None or op not in INFIX_BP:
                break
            bp, right_assoc = INFIX_BP[op]
            if bp <= rbp:
                break
            self._count_operator(self._advance())
            rhs_rbp = bp - 1 if right_assoc else bp
            right = self.parse_expression(rhs_rbp)
            left = BinaryOp(op, left, right)
        return left

    def _count_operator(self, tok: Token) -> None:
        self.operators += 1
        if self.operators > MAX_OPERATORS:
            raise ParseError("Expression too long", tok.position)

    def nud(self, tok: Token) -> Node:
        """Null denotation (prefix/primary)."""
        if tok.kind == TokenKind.NUMBER:
            return NumberLiteral(self._number_value(tok))
        if tok.kind == TokenKind.PAREN and tok.text == '(':
            expr = self.parse_expression(0)
            self._expect_close(tok)
            return expr
        if tok.kind == _EOF:
            raise ParseError("Missing operand at end of expression", tok.position)
        op = _op_name(tok)
        if op is not None:
            if op in PREFIX_BP:
                self._count_operator(tok)
                operand = self.parse_expression(PREFIX_BP[op])
                return UnaryOp(op, operand)
            raise ParseError(f"Missing operand before {tok.text!r}", tok.position)
        if tok.kind == TokenKind.IDENTIFIER:
            if tok.text in FUNCTIONS:
                return self._parse_call(tok)
            if tok.text in CONSTANTS:
                return Constant('π' if tok.text == 'pi' else tok.text)
            raise ParseError(f"Unknown name {tok.text!r}", tok.position)
        raise ParseError(f"Unexpected {tok.text!r}", tok.position)

    def _parse_call(self, name_tok: Token) -> Call:
        self._count_operator(name_tok)
        open_tok = self._current()
        if not (open_tok.kind == TokenKind.PAREN and open_tok.text == '('):
            raise ParseError(f"Function '{name_tok.text}' requires a parenthesized argument", open_tok.position)
        self._advance()
        cur = self._current()
        if cur.kind == TokenKind.PAREN and cur.text == ')':
            raise ParseError(f"Function '{name_tok.text}' takes exactly one argument", cur.position)
        argument = self.parse_expression(0)
        cur = self._current()
        if cur.kind == TokenKind.OPERATOR and cur.text == ',':
            raise ParseError(f"Function '{name_tok.text}' takes exactly one argument", cur.position)
        self._expect_close(open_tok)
        return Call(name_tok.text, argument)

    def _number_value(self, tok: Token):
        if self.base is not NumberBase.DEC:
            return int(tok.text, self.base.radix)
        if any(ch in tok.text for ch in '.eE'):
            return float(tok.text)
        return int(tok.text)


def parse(text: str, base: NumberBase = NumberBase.DEC) -> Node:
    """Tokenize and parse ``text`` in one step."""
    return Parser(tokenize(text, base), base).parse()
