"""Session state and the transitions driven by keypad events.

``SessionState`` is an immutable value. Each transition function takes a state
and returns a new one; ``Calculator`` holds the current state and exposes the
entry points a front end calls.

The display text and raw expression are derived from the same sequence of
pieces, so every edit changes both together. An empty sequence shows ``0``.

States: ENTERING while keys are typed, RESULT right after a successful equals,
ERROR right after a failed one. In RESULT, a key that starts an operand begins
a new expression and an operator continues from the result. In ERROR the
display shows the error indicator until the next key, which starts from an
empty expression.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Tuple, Union

from calcpad import history as hist
from calcpad.errors import CalculatorError, ErrorKind
from calcpad.evaluator import EvalContext, Evaluator
from calcpad.formatting import format_result
from calcpad.history import DEFAULT_HISTORY_LIMIT, HistoryEntry
from calcpad.labels import (
    CLOSE_PIECE, INVERSE_LABEL, OPERAND_START_KINDS, RECIPROCAL_LABEL, RECIPROCAL_OPEN,
    SIGN_LABELS, SIGN_PIECE, VALUE_LABELS, ZERO_PIECE, Piece, PieceKind, UnknownLabel,
    labels_from_text, needs_multiply, piece_for, result_pieces,
)
from calcpad.lexer import tokenize
from calcpad.modes import CONTROL_LABELS, Mode, NumberBase, is_label_enabled
from calcpad.parser import Parser

logger = logging.getLogger(__name__)

ERROR_TEXT = 'Error'


class Status(str, Enum):
    ENTERING = 'entering'
    RESULT = 'result'
    ERROR = 'error'


@dataclass(frozen=True)
class SessionState:
    """The whole state of one calculator session."""
    pieces: Tuple[Piece, ...] = ()
    status: Status = Status.ENTERING
    mode: Mode = Mode.STANDARD
    number_base: NumberBase = NumberBase.DEC
    history: Tuple[HistoryEntry, ...] = ()
    inverse: bool = False
    next_entry_id: int = 1
    history_limit: int = DEFAULT_HISTORY_LIMIT

    @property
    def display_text(self) -> str:
        if self.status is Status.ERROR:
            return ERROR_TEXT
        return ''.join(p.display for p in self.pieces) or '0'

    @property
    def raw_expression(self) -> str:
        return ''.join(p.raw for p in self.pieces)


@dataclass(frozen=True)
class EvaluationOutcome:
    """Result of an equals: the new history entry, or the error kind."""
    entry: Optional[HistoryEntry] = None
    error: Optional[ErrorKind] = None
    message: str = field(default='')

    @property
    def ok(self) -> bool:
        return self.entry is not None


# --------------------------
# Evaluation
# --------------------------

def evaluate_expression(raw: str, mode: Mode = Mode.STANDARD,
                        base: NumberBase = NumberBase.DEC) -> Union[int, float]:
    """Tokenize, parse and evaluate a raw expression."""
    tree = Parser(tokenize(raw, base), base).parse()
    return Evaluator(EvalContext(mode, base)).eval(tree)


# --------------------------
# Transitions
# --------------------------

def _accepts(state: SessionState, label: str) -> bool:
    if label in CONTROL_LABELS and not (label == 'C' and state.mode is Mode.PROGRAMMER):
        return False
    return is_label_enabled(label, state.mode, state.number_base)


def press(state: SessionState, label: str) -> SessionState:
    """Apply one value key. Disabled keys leave the state unchanged."""
    if label not in VALUE_LABELS:
        raise UnknownLabel(f"Unknown label: {label!r}")
    if not _accepts(state, label):
        logger.warning(f"Ignoring key {label!r}: not available in {state.mode.value} mode "
                       f"(base {state.number_base.name})")
        return state
    if label == INVERSE_LABEL:
        return replace(state, inverse=not state.inverse)

    pieces = () if state.status is Status.ERROR else state.pieces

    if label in SIGN_LABELS:
        if not pieces:
            return replace(state, pieces=(), status=Status.ENTERING)
        if pieces[0].kind == PieceKind.SIGN:
            toggled = pieces[1:]
        else:
            toggled = (SIGN_PIECE,) + pieces
        return replace(state, pieces=toggled, status=Status.ENTERING)

    if label == RECIPROCAL_LABEL:
        body = pieces or (ZERO_PIECE,)
        return replace(state, pieces=(RECIPROCAL_OPEN,) + body + (CLOSE_PIECE,), status=Status.ENTERING)

    piece = piece_for(label, inverse=state.inverse)
    if piece.kind in OPERAND_START_KINDS:
        if state.status is Status.RESULT:
            pieces = ()
        elif pieces == (ZERO_PIECE,) and piece.kind != PieceKind.POINT:
            # A lone zero is replaced, not extended.
            pieces = ()
        if not pieces and piece.kind == PieceKind.POINT:
            pieces = (ZERO_PIECE,)
    elif not pieces:
        pieces = (ZERO_PIECE,)

    if pieces and needs_multiply(pieces[-1], piece):
        piece = piece._replace(raw='*' + piece.raw)

    inverse = False if piece.kind == PieceKind.FUNCTION else state.inverse
    return replace(state, pieces=pieces + (piece,), status=Status.ENTERING, inverse=inverse)


def clear(state: SessionState) -> SessionState:
    return replace(state, pieces=(), status=Status.ENTERING, inverse=False)


def delete(state: SessionState) -> SessionState:
    """Remove the last key; with one key (or none) left this is ``clear``."""
    if state.status is Status.ERROR or len(state.pieces) <= 1:
        return clear(state)
    return replace(state, pieces=state.pieces[:-1], status=Status.ENTERING)


def _close_groups(pieces: Tuple[Piece, ...]) -> Tuple[Piece, ...]:
    """Append the closing parens still owed by function and '(' keys."""
    depth = 0
    for piece in pieces:
        if piece.kind in (PieceKind.OPEN, PieceKind.FUNCTION):
            depth += 1
        elif piece.kind == PieceKind.CLOSE and depth:
            depth -= 1
    return pieces + (CLOSE_PIECE,) * depth


def equals(state: SessionState, now: Optional[datetime] = None) -> Tuple[SessionState, EvaluationOutcome]:
    """Evaluate the pending expression.

    Groups left open are closed first, so ``√9`` entered on a keypad without
    parens still evaluates. Errors leave the ERROR state with an empty
    expression; success records a history entry.
    """
    if state.status is not Status.ERROR:
        state = replace(state, pieces=_close_groups(state.pieces))
    display = state.display_text
    raw = state.raw_expression
    try:
        value = evaluate_expression(raw, state.mode, state.number_base)
    except CalculatorError as e:
        failed = replace(state, pieces=(), status=Status.ERROR, inverse=False)
        return failed, EvaluationOutcome(error=e.kind, message=str(e))

    base = state.number_base if state.mode is Mode.PROGRAMMER else NumberBase.DEC
    result_text = format_result(value, base)
    entry = HistoryEntry(
        id=state.next_entry_id,
        expression=display,
        result=result_text,
        mode=state.mode,
        timestamp=now or datetime.now(timezone.utc),
    )
    new_state = replace(
        state,
        pieces=result_pieces(result_text),
        status=Status.RESULT,
        history=hist.record(state.history, entry, state.history_limit),
        next_entry_id=state.next_entry_id + 1,
        inverse=False,
    )
    return new_state, EvaluationOutcome(entry=entry)


def select_mode(state: SessionState, mode: Mode) -> SessionState:
    """Switch mode; the base returns to DEC. Same mode is a no-op."""
    if state.mode is mode:
        return state
    return replace(state, mode=mode, number_base=NumberBase.DEC, inverse=False)


def select_base(state: SessionState, base: NumberBase) -> SessionState:
    """Change the programmer-mode base without touching entered digits."""
    if state.mode is not Mode.PROGRAMMER:
        raise ValueError("Number base can only be selected in programmer mode")
    if state.number_base is base:
        return state
    return replace(state, number_base=base)


def clear_history(state: SessionState) -> SessionState:
    if not state.history:
        return state
    return replace(state, history=())


def select_history_entry(state: SessionState, entry_id: int) -> SessionState:
    entry = hist.find(state.history, entry_id)
    return replace(state, pieces=result_pieces(entry.result), status=Status.RESULT, inverse=False)


# --------------------------
# Controller
# --------------------------

class Calculator:
    """Single-owner holder of a session's state.

    Front ends call these methods for discrete user events; each call replaces
    ``state`` with the result of the matching transition.
    """

    def __init__(self, mode: Mode = Mode.STANDARD, history_limit: int = DEFAULT_HISTORY_LIMIT):
        self.state = SessionState(mode=mode, history_limit=history_limit)

    @property
    def display_text(self) -> str:
        return self.state.display_text

    @property
    def raw_expression(self) -> str:
        return self.state.raw_expression

    def on_button_press(self, label: str) -> None:
        self.state = press(self.state, label)
        logger.debug(f"press {label!r} -> display={self.display_text!r} raw={self.raw_expression!r}")

    def on_clear(self) -> None:
        self.state = clear(self.state)
        logger.debug("clear")

    def on_delete(self) -> None:
        self.state = delete(self.state)
        logger.debug(f"delete -> display={self.display_text!r}")

    def on_equals(self) -> EvaluationOutcome:
        raw = self.raw_expression
        self.state, outcome = equals(self.state)
        if outcome.ok:
            logger.info(f"Evaluated {outcome.entry.expression!r} = {outcome.entry.result}")
        elif outcome.error is ErrorKind.INTERNAL:
            logger.error(f"Internal evaluation error for {raw!r}: {outcome.message}")
        else:
            logger.warning(f"Evaluation of {raw!r} failed ({outcome.error.value}): {outcome.message}")
        return outcome

    def select_mode(self, mode: Mode) -> None:
        self.state = select_mode(self.state, mode)
        logger.debug(f"mode -> {self.state.mode.value}")

    def select_base(self, base: NumberBase) -> None:
        self.state = select_base(self.state, base)
        logger.debug(f"base -> {self.state.number_base.name}")

    def list_history(self) -> List[HistoryEntry]:
        return list(self.state.history)

    def clear_history(self) -> None:
        self.state = clear_history(self.state)
        logger.info("History cleared")

    def select_history_entry(self, entry_id: int) -> None:
        self.state = select_history_entry(self.state, entry_id)
        logger.debug(f"recalled history entry {entry_id}")

    def is_enabled(self, label: str) -> bool:
        return label in VALUE_LABELS and _accepts(self.state, label)

    def handle_key(self, label: str) -> Optional[EvaluationOutcome]:
        """Route any keypad key, control keys included."""
        if label in ('CE', 'CLR') or (label == 'C' and self.state.mode is not Mode.PROGRAMMER):
            self.on_clear()
        elif label == '⌫':
            self.on_delete()
        elif label == '=':
            return self.on_equals()
        else:
            self.on_button_press(label)
        return None

    def enter(self, text: str) -> List[str]:
        """Press the keys spelled by typed ``text``; return the keys that were disabled."""
        labels = labels_from_text(text, self.state.mode, self.state.number_base)
        rejected = [label for label in labels if not self.is_enabled(label)]
        if rejected:
            return rejected
        for label in labels:
            self.on_button_press(label)
        return []
