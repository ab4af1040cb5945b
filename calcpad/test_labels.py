import math

import pytest

from calcpad.errors import LexError
from calcpad.labels import (
    SIGN_PIECE, Piece, PieceKind, UnknownLabel, labels_from_text, needs_multiply, piece_for,
    result_pieces,
)
from calcpad.modes import Mode, NumberBase


@pytest.mark.parametrize("text, labels", [
    ("5+3", ['5', '+', '3']),
    ("2*3/4", ['2', '×', '3', '÷', '4']),
    ("sqrt(-1)", ['sqrt', '-', '1', ')']),
    ("√(9)", ['√', '9', ')']),
    ("3²", ['3', 'x²']),
    ("2^10", ['2', '^', '1', '0']),
    ("pi", ['π']),
    ("1 << 2", ['1', '<<', '2']),
    ("5 mod 2", ['5', 'MOD', '2']),
    ("5+3=", ['5', '+', '3']),
    ("~1", ['NOT', '1']),
])
def test_labels_from_text(text, labels):
    assert labels_from_text(text) == labels


def test_labels_from_text_hex_letters_are_digits():
    assert labels_from_text("FF and 0f", Mode.PROGRAMMER, NumberBase.HEX) == ['F', 'F', 'AND', '0', 'F']
    assert labels_from_text("e", Mode.PROGRAMMER, NumberBase.HEX) == ['E']
    assert labels_from_text("e", Mode.SCIENTIFIC) == ['e']


@pytest.mark.parametrize("text", ["2 $ 3", "foo", "1 = 2"])
def test_labels_from_text_rejects_unknown_input(text):
    with pytest.raises(LexError):
        labels_from_text(text)


def test_piece_for_maps_display_and_raw():
    assert piece_for('×') == Piece('×', '*', PieceKind.OPERATOR)
    assert piece_for('÷') == Piece('÷', '/', PieceKind.OPERATOR)
    assert piece_for('x²') == Piece('²', '^2', PieceKind.POSTFIX)
    assert piece_for('√') == Piece('√(', 'sqrt(', PieceKind.FUNCTION)
    assert piece_for('π') == Piece('π', repr(math.pi), PieceKind.CONSTANT)
    assert piece_for('AND').raw == ' AND '


def test_piece_for_inverse_functions():
    assert piece_for('sin', inverse=True).raw == 'asin('
    assert piece_for('ln', inverse=True).raw == 'exp('
    # log has no inverse key
    assert piece_for('log', inverse=True).raw == 'log('


def test_piece_for_unknown_label():
    with pytest.raises(UnknownLabel):
        piece_for('±')


def test_needs_multiply():
    digit = piece_for('2')
    assert needs_multiply(digit, piece_for('π'))
    assert needs_multiply(digit, piece_for('('))
    assert needs_multiply(piece_for(')'), digit)
    assert needs_multiply(piece_for('x²'), digit)
    assert not needs_multiply(digit, piece_for('3'))
    assert not needs_multiply(piece_for('+'), piece_for('π'))


def test_result_pieces_keeps_sign_separate():
    pieces = result_pieces("-12")
    assert pieces[0] == SIGN_PIECE
    assert ''.join(p.raw for p in pieces) == "-12"
