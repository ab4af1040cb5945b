import math
from datetime import datetime, timezone

import pytest

from calcpad import session
from calcpad.errors import ErrorKind, UnknownHistoryEntry
from calcpad.labels import UnknownLabel
from calcpad.modes import Mode, NumberBase
from calcpad.session import ERROR_TEXT, Calculator, SessionState, Status


def run_keys(calculator, text):
    """Type ``text`` and press equals."""
    rejected = calculator.enter(text)
    assert rejected == [], f"keys rejected: {rejected}"
    return calculator.on_equals()


# ---------------------------
# Entry and equals
# ---------------------------

def test_basic_addition_records_history(calc):
    outcome = run_keys(calc, "5+3")
    assert outcome.ok
    assert calc.display_text == "8"
    assert calc.state.status is Status.RESULT
    [entry] = calc.list_history()
    assert (entry.id, entry.expression, entry.result, entry.mode) == (1, "5+3", "8", Mode.STANDARD)


def test_display_and_raw_stay_in_sync(calc):
    calc.enter("5×3÷2")
    assert calc.display_text == "5×3÷2"
    assert calc.raw_expression == "5*3/2"


def test_divide_by_zero_enters_error_state(calc):
    calc.enter("5/0")
    assert calc.display_text == "5÷0"
    outcome = calc.on_equals()
    assert not outcome.ok
    assert outcome.error is ErrorKind.DIVIDE_BY_ZERO
    assert calc.display_text == ERROR_TEXT
    assert calc.raw_expression == ""
    assert calc.list_history() == []


def test_next_key_after_error_starts_fresh(calc):
    calc.enter("5/0")
    calc.on_equals()
    calc.on_button_press('7')
    assert calc.display_text == "7"
    assert calc.state.status is Status.ENTERING


def test_operator_after_result_chains(calc):
    run_keys(calc, "5+3")
    outcome = run_keys(calc, "+2")
    assert outcome.entry.expression == "8+2"
    assert calc.display_text == "10"


def test_digit_after_result_starts_new_expression(calc):
    run_keys(calc, "5+3")
    calc.on_button_press('4')
    assert calc.display_text == "4"


def test_negative_result_chains(calc):
    run_keys(calc, "2-5")
    assert run_keys(calc, "×2").entry.result == "-6"


def test_leading_zero_is_replaced(calc):
    calc.on_button_press('0')
    calc.on_button_press('0')
    assert calc.display_text == "0"
    calc.on_button_press('5')
    assert calc.display_text == "5"


def test_point_keeps_leading_zero(calc):
    calc.on_button_press('.')
    assert calc.display_text == "0."
    calc.on_button_press('5')
    assert run_keys(calc, "").entry.result == "0.5"


def test_operator_on_empty_display_uses_zero(calc):
    calc.on_button_press('-')
    calc.on_button_press('4')
    assert calc.display_text == "0-4"


def test_sign_toggle(calc):
    calc.on_button_press('5')
    calc.on_button_press('±')
    assert calc.display_text == "-5"
    calc.on_button_press('±')
    assert calc.display_text == "5"
    calc.on_button_press('±')
    assert run_keys(calc, "").entry.result == "-5"


def test_reciprocal_wraps_expression(calc):
    calc.enter("4")
    calc.on_button_press('1/x')
    assert calc.display_text == "1/(4)"
    assert run_keys(calc, "").entry.result == "0.25"


def test_square_and_root_keys(calc):
    assert run_keys(calc, "3²").entry.result == "9"
    outcome = run_keys(calc, "√9")
    assert outcome.entry.expression == "√(9)"
    assert outcome.entry.result == "3"


def test_implicit_multiplication_with_constants(sci):
    sci.enter("2π")
    assert sci.display_text == "2π"
    assert sci.raw_expression == "2*" + repr(math.pi)
    assert sci.on_equals().entry.result == "6.283185307179586"


def test_inverse_toggle_selects_inverse_function(sci):
    sci.on_button_press('inv')
    sci.on_button_press('sin')
    assert sci.display_text == "asin("
    assert sci.state.inverse is False
    sci.enter("1)")
    assert math.isclose(float(sci.on_equals().entry.result), math.pi / 2)


@pytest.mark.parametrize("text, kind", [
    ("sqrt(-1)", ErrorKind.DOMAIN_ERROR),
    ("ln(0)", ErrorKind.DOMAIN_ERROR),
    ("10^400", ErrorKind.OVERFLOW),
    ("(1+2", None),
    ("1+", ErrorKind.PARSE_ERROR),
])
def test_scientific_errors(sci, text, kind):
    sci.enter(text)
    outcome = sci.on_equals()
    if kind is None:
        # open groups are closed on equals
        assert outcome.entry.result == "3"
    else:
        assert outcome.error is kind
        assert sci.display_text == ERROR_TEXT


def test_equals_uses_given_timestamp():
    state = session.press(SessionState(), '7')
    now = datetime(2024, 5, 6, 7, 8, 9, tzinfo=timezone.utc)
    new_state, outcome = session.equals(state, now=now)
    assert outcome.entry.timestamp == now
    assert new_state.next_entry_id == 2


def test_state_transitions_do_not_mutate():
    state = SessionState()
    pressed = session.press(state, '1')
    assert state.pieces == ()
    assert pressed.display_text == "1"


# ---------------------------
# Delete and clear
# ---------------------------

def test_delete_single_key_equals_clear(calc):
    calc.on_button_press('7')
    deleted = session.delete(calc.state)
    assert deleted == session.clear(calc.state)
    assert deleted.display_text == "0"
    assert deleted.raw_expression == ""


def test_delete_removes_whole_key_unit(sci):
    sci.enter("2+sin(")
    sci.on_delete()
    assert sci.display_text == "2+"
    assert sci.raw_expression == "2+"


def test_delete_after_error_clears(calc):
    calc.enter("1/0")
    calc.on_equals()
    calc.on_delete()
    assert calc.display_text == "0"
    assert calc.state.status is Status.ENTERING


# ---------------------------
# Modes and keys
# ---------------------------

def test_select_same_mode_is_identity():
    state = SessionState(mode=Mode.SCIENTIFIC)
    assert session.select_mode(state, Mode.SCIENTIFIC) is state


def test_select_mode_resets_base(prog):
    prog.select_base(NumberBase.HEX)
    prog.select_mode(Mode.STANDARD)
    prog.select_mode(Mode.PROGRAMMER)
    assert prog.state.number_base is NumberBase.DEC


def test_select_base_outside_programmer_mode(calc):
    with pytest.raises(ValueError):
        calc.select_base(NumberBase.HEX)


def test_disabled_key_is_ignored(calc):
    calc.on_button_press('1')
    before = calc.state
    calc.on_button_press('A')
    calc.on_button_press('sin')
    assert calc.state is before


def test_unknown_label_raises(calc):
    with pytest.raises(UnknownLabel):
        calc.on_button_press('sinh')


def test_enter_reports_rejected_keys_and_presses_nothing(calc):
    assert calc.enter("sin(1)") == ['sin', ')']
    assert calc.display_text == "0"


def test_is_enabled(prog):
    assert prog.is_enabled('9')
    assert not prog.is_enabled('A')
    prog.select_base(NumberBase.HEX)
    assert prog.is_enabled('A')
    assert not prog.is_enabled('.')
    assert not prog.is_enabled('=')


# ---------------------------
# Programmer mode
# ---------------------------

@pytest.mark.parametrize("text, result", [
    ("5 AND 3", "1"),
    ("5 XOR 3", "6"),
    ("5 OR 3", "7"),
    ("1 << 3", "8"),
    ("7/2", "3"),
    ("NOT 0", "-1"),
    ("7 MOD 4", "3"),
])
def test_programmer_operations(prog, text, result):
    assert run_keys(prog, text).entry.result == result


def test_programmer_hex_entry_and_display(prog):
    prog.select_base(NumberBase.HEX)
    outcome = run_keys(prog, "FF AND 0F")
    assert outcome.entry.expression == "FF AND 0F"
    assert outcome.entry.result == "F"
    assert run_keys(prog, "+1").entry.result == "10"


def test_programmer_c_key_is_a_hex_digit(prog):
    prog.select_base(NumberBase.HEX)
    prog.handle_key('C')
    assert prog.display_text == "C"
    prog.handle_key('CLR')
    assert prog.display_text == "0"


def test_programmer_fraction_is_domain_error(prog):
    prog.enter("1.5")
    assert prog.on_equals().error is ErrorKind.DOMAIN_ERROR


def test_programmer_sign_key(prog):
    prog.on_button_press('6')
    prog.on_button_press('NEG')
    assert run_keys(prog, "").entry.result == "-6"


# ---------------------------
# History
# ---------------------------

def test_history_most_recent_first(calc):
    run_keys(calc, "1+1")
    run_keys(calc, "2+2")
    assert [e.id for e in calc.list_history()] == [2, 1]
    assert [e.result for e in calc.list_history()] == ["4", "2"]


def test_clear_history_is_idempotent(calc):
    run_keys(calc, "1+1")
    calc.clear_history()
    cleared = calc.state
    calc.clear_history()
    assert calc.state is cleared
    assert calc.list_history() == []


def test_history_limit():
    calc = Calculator(history_limit=2)
    for text in ("1+1", "2+2", "3+3"):
        run_keys(calc, text)
    assert [e.id for e in calc.list_history()] == [3, 2]


def test_select_history_entry(calc):
    run_keys(calc, "1+1")
    run_keys(calc, "5×5")
    calc.select_history_entry(1)
    assert calc.display_text == "2"
    assert calc.state.status is Status.RESULT
    assert run_keys(calc, "+3").entry.result == "5"
    with pytest.raises(UnknownHistoryEntry):
        calc.select_history_entry(42)


# ---------------------------
# Key router
# ---------------------------

def test_handle_key_routes_control_keys(calc):
    for key in ('1', '+', '2'):
        assert calc.handle_key(key) is None
    calc.handle_key('⌫')
    assert calc.display_text == "1+"
    calc.handle_key('2')
    outcome = calc.handle_key('=')
    assert outcome.entry.result == "3"
    calc.handle_key('C')
    assert calc.display_text == "0"
    calc.handle_key('9')
    calc.handle_key('CE')
    assert calc.display_text == "0"


@pytest.mark.parametrize("text", [
    "5" + "-" * 600 + "3",
    "(" * 600 + "1" + ")" * 600,
])
def test_deeply_nested_input_is_a_parse_error(sci, text):
    sci.enter(text)
    outcome = sci.on_equals()
    assert outcome.error is ErrorKind.PARSE_ERROR
    assert sci.display_text == ERROR_TEXT
    assert run_keys(sci, "1+1").entry.result == "2"
