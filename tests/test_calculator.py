"""Tests del reductor de la calculadora y de la sesión Calculator."""

import math
from datetime import timezone

import pytest

from core.calculator import (AllClear, Backspace, Calculator, CalculatorError,
                             CalculatorState, Clear, Decimal, Digit, DivisionByZero,
                             Equals, Operator, ERROR_DISPLAY, ERROR_STATE, INITIAL_STATE,
                             MAX_INPUT_DIGITS, PHASE_ERROR, PHASE_IDLE, PHASE_OPERAND,
                             PHASE_OPERATOR_PENDING, PHASE_RESULT, apply,
                             describe_pending, evaluate, format_number, phase,
                             transition)
from storage.history import MemoryHistoryStore


def run(*events, state=INITIAL_STATE):
    """Aplica una secuencia de eventos desde el estado dado."""
    for event in events:
        state = apply(state, event)
    return state


def digits(text):
    """Eventos para teclear un número ("12.5" → Digit, Digit, Decimal, Digit)."""
    return [Decimal() if ch == "." else Digit(int(ch)) for ch in text]


# --- Entrada de dígitos ---

def test_initial_state():
    assert INITIAL_STATE == CalculatorState("0", None, None, False)


def test_digits_concatenate():
    assert run(*digits("123")).display == "123"


def test_leading_zero_collapsed():
    assert run(Digit(0), Digit(5)).display == "5"


def test_repeated_zero_stays_single():
    assert run(Digit(0), Digit(0), Digit(0)).display == "0"


def test_zero_after_decimal_is_kept():
    assert run(Digit(0), Decimal(), Digit(0), Digit(7)).display == "0.07"


def test_digit_entry_is_capped():
    state = run(*[Digit(9)] * 400)
    assert state.display == "9" * MAX_INPUT_DIGITS

    state = apply(state, Operator("+"))
    assert math.isfinite(state.previous_value)
    assert state.previous_value == float("9" * MAX_INPUT_DIGITS)


def test_digit_cap_counts_decimals():
    state = run(*digits("1." + "2" * 20))
    assert state.display == "1." + "2" * (MAX_INPUT_DIGITS - 1)
    assert apply(state, Backspace()).display == "1." + "2" * (MAX_INPUT_DIGITS - 2)


def test_digit_cap_resets_for_next_operand():
    state = run(*[Digit(1)] * 20, Operator("×"), *[Digit(2)] * 20)
    assert state.display == "2" * MAX_INPUT_DIGITS


# --- Punto decimal ---

def test_decimal_appends_point():
    assert run(Digit(1), Decimal(), Digit(5)).display == "1.5"


def test_decimal_on_initial_display():
    assert run(Decimal(), Digit(5)).display == "0.5"


def test_decimal_is_idempotent_per_operand():
    state = run(Digit(1), Decimal(), Decimal(), Digit(2), Decimal())
    assert state.display == "1.2"
    assert state.display.count(".") == 1


def test_decimal_after_operator_starts_new_operand():
    state = run(Digit(5), Operator("+"), Decimal(), Digit(5), Equals())
    assert state.display == "5.5"


# --- Operadores y encadenado ---

def test_first_operator_stores_left_operand():
    state = run(Digit(5), Operator("+"))
    assert state.previous_value == 5.0
    assert state.operation == "+"
    assert state.waiting_for_operand is True
    assert state.display == "5"


def test_chaining_evaluates_left_to_right():
    """(5 + 3) × 2 = 16, sin precedencia de operadores."""
    state = run(Digit(5), Operator("+"), Digit(3), Operator("×"))
    assert state.display == "8"
    assert state.previous_value == 8.0
    assert state.operation == "×"

    state = run(Digit(2), Equals(), state=state)
    assert state.display == "16"


def test_operator_twice_replaces_pending_operator():
    state = run(Digit(5), Operator("+"), Operator("-"))
    assert state.operation == "-"
    assert state.previous_value == 5.0

    state = run(Digit(2), Equals(), state=state)
    assert state.display == "3"


def test_operator_after_result_continues_from_result():
    state = run(Digit(2), Operator("+"), Digit(3), Equals(),
                Operator("×"), Digit(4), Equals())
    assert state.display == "20"


def test_digit_after_result_starts_fresh():
    state = run(Digit(2), Operator("+"), Digit(3), Equals(), Digit(7))
    assert state.display == "7"
    assert state.previous_value is None
    assert state.waiting_for_operand is False


def test_ascii_operator_aliases():
    assert Operator("*").symbol == "×"
    assert Operator("/").symbol == "÷"
    assert run(Digit(6), Operator("/"), Digit(4), Equals()).display == "1.5"


# --- Igual ---

def test_equals_without_pending_operator_is_noop():
    state = run(Digit(4), Digit(2))
    new_state, calculation = transition(state, Equals())
    assert new_state == state
    assert calculation is None


def test_equals_twice_is_noop():
    state = run(Digit(9), Operator("-"), Digit(4), Equals())
    assert apply(state, Equals()) == state


def test_equals_clears_pending_operation():
    state = run(Digit(9), Operator("-"), Digit(4), Equals())
    assert state == CalculatorState("5", None, None, True)


def test_equals_right_after_operator_reuses_display():
    assert run(Digit(5), Operator("+"), Equals()).display == "10"


def test_equals_produces_calculation():
    state = run(Digit(1), Digit(2), Operator("÷"), Digit(4))
    _, calculation = transition(state, Equals())
    assert calculation.expression == "12 ÷ 4"
    assert calculation.result == evaluate(12.0, "÷", 4.0) == 3.0


def reevaluate(expression):
    """Vuelve a calcular una expresión "a op b" del historial."""
    a, op, b = expression.split(" ")
    return evaluate(float(a), op, float(b))


def test_expression_keeps_long_operand_as_typed():
    state = run(Digit(1), Operator("-"), *digits("1.0000000000001"))
    _, calculation = transition(state, Equals())
    assert calculation.expression == "1 - 1.0000000000001"
    assert reevaluate(calculation.expression) == calculation.result
    assert calculation.result != 0


def test_expression_drops_trailing_point():
    state = run(Digit(8), Operator("÷"), Digit(2), Decimal())
    _, calculation = transition(state, Equals())
    assert calculation.expression == "8 ÷ 2"


def test_expression_keeps_exact_chained_left_operand():
    state = run(*digits("0.1"), Operator("+"), *digits("0.2"), Operator("+"), Digit(1))
    _, calculation = transition(state, Equals())
    assert calculation.expression == "0.30000000000000004 + 1"
    assert reevaluate(calculation.expression) == calculation.result


def test_expression_after_reusing_display():
    _, calculation = transition(run(Digit(5), Operator("+")), Equals())
    assert calculation.expression == "5 + 5"


def test_expression_left_operand_uses_display_precision():
    state = run(Digit(1), Operator("÷"), Digit(4), Equals(), Operator("×"), Digit(2))
    _, calculation = transition(state, Equals())
    assert calculation.expression == "0.25 × 2"


def test_floating_point_artifacts_hidden():
    state = run(*digits("0.1"), Operator("+"), *digits("0.2"), Equals())
    assert state.display == "0.3"


# --- División entre cero y errores ---

@pytest.mark.parametrize("a", [0.0, 7.0, -3.5, 1e10])
def test_evaluate_division_by_zero_raises(a):
    with pytest.raises(DivisionByZero):
        evaluate(a, "÷", 0.0)


def test_division_by_zero_is_also_zero_division_error():
    with pytest.raises(ZeroDivisionError):
        evaluate(1.0, "÷", 0.0)


def test_division_by_zero_enters_error_state():
    state = run(Digit(7), Operator("÷"), Digit(0), Equals())
    assert state == ERROR_STATE
    assert state.display == ERROR_DISPLAY
    assert state.previous_value is None
    assert state.operation is None


def test_division_by_zero_while_chaining():
    state = run(Digit(5), Operator("÷"), Digit(0), Operator("+"))
    assert state == ERROR_STATE


def test_division_by_zero_produces_no_calculation():
    state = run(Digit(7), Operator("÷"), Digit(0))
    _, calculation = transition(state, Equals())
    assert calculation is None


def test_all_clear_after_error_restores_initial_state():
    state = run(Digit(7), Operator("÷"), Digit(0), Equals(), AllClear())
    assert state == INITIAL_STATE
    assert state.display == "0"


def test_overflow_enters_error_state():
    with pytest.raises(CalculatorError):
        evaluate(1e308, "×", 10.0)
    state = CalculatorState("10", 1e308, "×", False)
    assert apply(state, Equals()) == ERROR_STATE


def test_digit_after_error_starts_new_operand():
    state = run(Digit(1), Operator("÷"), Digit(0), Equals(), Digit(4))
    assert state == CalculatorState("4", None, None, False)


def test_decimal_after_error_starts_new_operand():
    state = run(Digit(1), Operator("÷"), Digit(0), Equals(), Decimal())
    assert state.display == "0."


@pytest.mark.parametrize("event", [Operator("+"), Equals(), Backspace()])
def test_error_state_ignores_operators_equals_and_backspace(event):
    assert apply(ERROR_STATE, event) == ERROR_STATE


# --- Borrado ---

def test_clear_keeps_pending_operation():
    state = run(Digit(5), Operator("+"), Digit(3), Clear())
    assert state.display == "0"
    assert state.previous_value == 5.0
    assert state.operation == "+"

    state = run(Digit(4), Equals(), state=state)
    assert state.display == "9"


def test_clear_after_error_shows_zero():
    assert apply(ERROR_STATE, Clear()).display == "0"


@pytest.mark.parametrize("events", [
    [],
    digits("12.5"),
    [Digit(5), Operator("+")],
    [Digit(5), Operator("+"), Digit(3)],
    [Digit(5), Operator("+"), Digit(3), Equals()],
    [Digit(5), Operator("÷"), Digit(0), Equals()],
])
def test_all_clear_always_returns_initial_state(events):
    assert apply(run(*events), AllClear()) == INITIAL_STATE


def test_backspace_trims_last_character():
    assert run(*digits("123"), Backspace()).display == "12"
    assert run(*digits("1.5"), Backspace()).display == "1."


def test_backspace_on_single_digit_shows_zero():
    assert run(Digit(5), Backspace()).display == "0"
    assert run(Backspace()).display == "0"


def test_backspace_ignored_after_result():
    state = run(Digit(2), Operator("+"), Digit(3), Equals())
    assert apply(state, Backspace()) == state


def test_backspace_ignored_after_operator():
    state = run(Digit(2), Operator("+"))
    assert apply(state, Backspace()) == state


# --- Formato ---

@pytest.mark.parametrize("value, expected", [
    (42.0, "42"),
    (2.5, "2.5"),
    (0.1 + 0.2, "0.3"),
    (1 / 3, "0.333333333333"),
    (-0.0, "0"),
    (-7.25, "-7.25"),
    (1e20, "1e+20"),
])
def test_format_number(value, expected):
    assert format_number(value) == expected


def test_format_number_precision():
    assert format_number(1 / 3, precision=4) == "0.3333"
    assert format_number(2 / 3, precision=3) == "0.667"


def test_results_stay_parseable():
    state = run(Digit(1), Operator("÷"), Digit(3), Equals())
    assert math.isclose(float(state.display), 1 / 3, rel_tol=1e-11)


# --- Eventos inválidos ---

@pytest.mark.parametrize("value", [10, -1, "a", "12", True, 1.5])
def test_invalid_digit_rejected(value):
    with pytest.raises(ValueError):
        Digit(value)


def test_digit_accepts_single_character():
    assert Digit("7") == Digit(7)


@pytest.mark.parametrize("symbol", ["%", "^", "", "x"])
def test_invalid_operator_rejected(symbol):
    with pytest.raises(ValueError):
        Operator(symbol)


def test_events_of_different_kinds_are_not_equal():
    assert Decimal() != Equals()
    assert Clear() != AllClear()


# --- Fases ---

def test_phases():
    assert phase(INITIAL_STATE) == PHASE_IDLE
    assert phase(run(Digit(3))) == PHASE_OPERAND
    assert phase(run(Digit(3), Operator("+"))) == PHASE_OPERATOR_PENDING
    assert phase(run(Digit(3), Operator("+"), Digit(1))) == PHASE_OPERAND
    assert phase(run(Digit(3), Operator("+"), Digit(1), Equals())) == PHASE_RESULT
    assert phase(ERROR_STATE) == PHASE_ERROR


def test_describe_pending():
    assert describe_pending(INITIAL_STATE) == ""
    assert describe_pending(run(Digit(5), Operator("×"))) == "5 ×"
    assert describe_pending(run(Digit(5), Operator("×"), Digit(2))) == "5 ×"


# --- Sesión Calculator ---

def test_calculator_appends_history_entry():
    store = MemoryHistoryStore()
    calc = Calculator(store)

    for event in [Digit(5), Operator("+"), Digit(3)]:
        assert calc.press(event) is None
    entry = calc.press(Equals())

    assert calc.get_display() == "8"
    assert store.load_all() == [entry]
    assert entry.expression == "5 + 3"
    assert entry.result == 8.0
    assert len(entry.id) == 32
    assert entry.timestamp.tzinfo == timezone.utc


def test_calculator_entries_have_unique_ids():
    store = MemoryHistoryStore()
    calc = Calculator(store)
    for _ in range(3):
        for event in [Digit(1), Operator("+"), Digit(1), Equals()]:
            calc.press(event)
    ids = [entry.id for entry in store.load_all()]
    assert len(ids) == 3
    assert len(set(ids)) == 3


def test_calculator_without_history():
    calc = Calculator()
    for event in [Digit(6), Operator("×"), Digit(7)]:
        calc.press(event)
    entry = calc.press(Equals())
    assert entry.result == 42.0
    assert calc.get_display() == "42"


def test_calculator_skips_history_on_error():
    store = MemoryHistoryStore()
    calc = Calculator(store)
    for event in [Digit(6), Operator("÷"), Digit(0)]:
        calc.press(event)
    assert calc.press(Equals()) is None
    assert calc.phase == PHASE_ERROR
    assert store.load_all() == []


def test_calculator_expression_and_reset():
    calc = Calculator()
    calc.press(Digit(1))
    calc.press(Digit(2))
    calc.press(Operator("*"))
    assert calc.get_expression() == "12 ×"
    calc.reset()
    assert calc.state == INITIAL_STATE
    assert calc.get_expression() == ""


def test_calculator_precision():
    calc = Calculator(precision=4)
    for event in [Digit(2), Operator("÷"), Digit(3), Equals()]:
        calc.press(event)
    assert calc.get_display() == "0.6667"
