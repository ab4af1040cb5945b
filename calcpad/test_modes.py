import pytest

from calcpad.modes import (
    Mode, NumberBase, enabled_labels, is_label_enabled, keypad_labels, parse_mode,
)


def test_parse_mode_and_base():
    assert parse_mode(" Scientific ") is Mode.SCIENTIFIC
    assert NumberBase.parse("hex") is NumberBase.HEX
    assert NumberBase.parse("2") is NumberBase.BIN
    with pytest.raises(ValueError):
        parse_mode("engineering")
    with pytest.raises(ValueError):
        NumberBase.parse("base64")


def test_keypad_labels_have_no_duplicates():
    labels = keypad_labels(Mode.PROGRAMMER)
    assert len(labels) == len(set(labels))
    assert labels.count('CLR') == 1


@pytest.mark.parametrize("label, mode, base, enabled", [
    ('sin', Mode.STANDARD, NumberBase.DEC, False),
    ('sin', Mode.SCIENTIFIC, NumberBase.DEC, True),
    ('*', Mode.STANDARD, NumberBase.DEC, True),
    ('NEG', Mode.STANDARD, NumberBase.DEC, True),
    ('±', Mode.PROGRAMMER, NumberBase.DEC, True),
    ('^', Mode.STANDARD, NumberBase.DEC, False),
    ('^', Mode.SCIENTIFIC, NumberBase.DEC, True),
    ('A', Mode.STANDARD, NumberBase.DEC, False),
    ('A', Mode.PROGRAMMER, NumberBase.DEC, False),
    ('A', Mode.PROGRAMMER, NumberBase.HEX, True),
    ('C', Mode.PROGRAMMER, NumberBase.DEC, False),
    ('C', Mode.PROGRAMMER, NumberBase.HEX, True),
    ('8', Mode.PROGRAMMER, NumberBase.OCT, False),
    ('7', Mode.PROGRAMMER, NumberBase.OCT, True),
    ('2', Mode.PROGRAMMER, NumberBase.BIN, False),
    ('.', Mode.PROGRAMMER, NumberBase.DEC, True),
    ('.', Mode.PROGRAMMER, NumberBase.HEX, False),
    ('AND', Mode.SCIENTIFIC, NumberBase.DEC, False),
])
def test_is_label_enabled(label, mode, base, enabled):
    assert is_label_enabled(label, mode, base) is enabled


def test_enabled_labels_in_binary():
    labels = enabled_labels(Mode.PROGRAMMER, NumberBase.BIN)
    assert '0' in labels and '1' in labels
    assert '2' not in labels and 'F' not in labels
