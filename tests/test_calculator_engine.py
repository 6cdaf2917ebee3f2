"""Tests for the calculator state machine."""

import math

import pytest
from loguru import logger

from calculator_engine import (
    CalculatorEngine,
    EmptyVariableError,
    InvalidVariableError,
    MissingModifierError,
)
from calculator_events import Key, KeyEvent, parse_sequence


def press(engine: CalculatorEngine, keys: str) -> CalculatorEngine:
    for event in parse_sequence(keys):
        engine.handle(event)
    return engine


@pytest.fixture
def engine():
    return CalculatorEngine()


class TestEntry:
    @pytest.mark.parametrize("literal", ["7", "123", "0.5", "3.25", "10.0", "900"])
    def test_digits_accumulate_literal(self, engine, literal):
        press(engine, literal)
        assert engine.state.current.text == literal
        assert engine.render().result_text == literal

    def test_second_decimal_point_is_rejected(self, engine):
        press(engine, "1 . 2 . 3")
        assert engine.state.current.text == "1.23"

    def test_leading_zero_is_replaced(self, engine):
        press(engine, "0 0 7")
        assert engine.state.current.text == "7"

    def test_zero_then_decimal_point_appends(self, engine):
        press(engine, "0 . 5")
        assert engine.state.current.text == "0.5"

    def test_delete_removes_last_character(self, engine):
        press(engine, "123 del")
        assert engine.state.current.text == "12"
        press(engine, "del del")
        assert engine.state.current is None
        press(engine, "del")
        assert engine.state.current is None

    def test_delete_trims_computed_entry(self, engine):
        press(engine, "2 sqrt")
        assert engine.render().result_text == "1.4142135623731"
        press(engine, "del")
        assert engine.state.current.typed
        assert engine.render().result_text == "1.414213562373"

    def test_delete_clears_entry_outside_digit_grammar(self, engine):
        press(engine, "9 m- mr del")
        assert engine.state.current is None
        press(engine, "12500 eng del")
        assert engine.state.current is None
        press(engine, "0 recip del")
        assert engine.state.current is None

    def test_pi_and_ans(self, engine):
        press(engine, "pi")
        assert engine.state.current.value == math.pi
        press(engine, "ac 6 × 7 = ans")
        assert engine.render().result_text == "42"

    def test_ans_defaults_to_zero(self, engine):
        press(engine, "ans")
        assert engine.render().result_text == "0"

    def test_digit_appends_to_computed_result(self, engine):
        press(engine, "9 sqrt 5")
        assert engine.render().result_text == "35"
        press(engine, "ac 4 m+ ac mr 2")
        assert engine.render().result_text == "42"
        press(engine, "+ 8 =")
        assert engine.state.last_ans == 50

    def test_decimal_point_after_integer_result(self, engine):
        press(engine, "16 sqrt . 5")
        assert engine.render().result_text == "4.5"

    @pytest.mark.parametrize("keys", ["8 ÷ 0 = 7", "9 m- mr 7", "12500 eng 7"])
    def test_digit_after_text_outside_grammar_starts_fresh(self, engine, keys):
        press(engine, keys)
        assert engine.state.current.text == "7"

    def test_invalid_digit_payload(self, engine):
        with pytest.raises(ValueError):
            engine.handle(KeyEvent(Key.DIGIT, "x"))


class TestBinaryOperations:
    def test_chain_is_left_to_right(self, engine):
        press(engine, "5 + 3 + 2 =")
        assert engine.state.last_ans == 10
        press(engine, "2 + 3 × 4 =")
        assert engine.state.last_ans == 20

    def test_pending_operation_is_shown(self, engine):
        press(engine, "12 ×")
        view = engine.render()
        assert view.expression_text == "12 ×"
        assert view.result_text == "0"

    def test_operator_replaces_pending_operator(self, engine):
        press(engine, "9 + −")
        assert engine.state.pending_op == "−"
        press(engine, "4 =")
        assert engine.state.last_ans == 5

    def test_missing_right_operand_uses_last_answer(self, engine):
        press(engine, "2 + 3 = × =")
        assert engine.state.last_ans == 25

    def test_equals_without_pending_commits_entry(self, engine):
        press(engine, "8 =")
        assert engine.state.last_ans == 8
        assert engine.state.acc == 8
        assert engine.state.current is None

    def test_remainder_sign_follows_dividend(self, engine):
        press(engine, "7 mod 3 =")
        assert engine.state.last_ans == 1
        engine.state.last_ans = -7.0
        press(engine, "ans mod 3 =")
        assert engine.state.last_ans == -1

    def test_floating_noise_is_hidden(self, engine):
        press(engine, ".1 + .2 =")
        assert engine.render().result_text == "0.3"

    def test_ascii_aliases(self, engine):
        for event in (KeyEvent.digit("9"), KeyEvent.operator("-"),
                      KeyEvent.digit("4"), KeyEvent(Key.EQUALS)):
            engine.handle(event)
        assert engine.state.last_ans == 5

    def test_unknown_operator(self, engine):
        with pytest.raises(ValueError):
            engine.handle(KeyEvent(Key.OPERATOR, "^"))


class TestComputationErrors:
    def test_division_by_zero(self, engine):
        press(engine, "8 ÷ 0 =")
        assert engine.render().result_text == "Error"
        assert engine.state.acc == 0
        assert engine.state.pending_op is None

    def test_division_by_zero_keeps_last_answer(self, engine):
        press(engine, "4 = 8 ÷ 0 =")
        assert engine.state.last_ans == 4

    def test_remainder_by_zero(self, engine):
        press(engine, "5 mod 0 =")
        assert engine.render().result_text == "Error"

    def test_overflow(self, engine):
        engine.state.last_ans = 1e308
        press(engine, "ans × ans =")
        assert engine.render().result_text == "Error"

    def test_unary_error_keeps_pending_operation(self, engine):
        press(engine, "5 + 0 log")
        assert engine.render().result_text == "Error"
        assert engine.state.pending_op == "+"
        assert engine.state.acc == 5

    def test_operator_on_error_entry(self, engine):
        press(engine, "0 recip +")
        assert engine.render().result_text == "Error"
        assert engine.state.acc == 0
        assert engine.state.pending_op == "+"

    def test_recovery_by_new_entry(self, engine):
        press(engine, "8 ÷ 0 = 3 + 4 =")
        assert engine.state.last_ans == 7

    def test_recovery_by_all_clear(self, engine):
        press(engine, "8 ÷ 0 = ac")
        assert engine.render().result_text == "0"


class TestUnaryFunctions:
    @pytest.mark.parametrize("keys,expected", [
        ("50 %", "0.5"),
        ("16 sqrt", "4"),
        ("4 recip", "0.25"),
        ("12 x2", "144"),
        ("3 x3", "27"),
        ("1000 log", "3"),
        ("1 ln", "0"),
        ("shift 3 log", "1000"),
        ("shift 0 ln", "1"),
        ("5 x!", "120"),
        ("5.7 x!", "120"),
        ("0 x!", "1"),
    ])
    def test_results(self, engine, keys, expected):
        press(engine, keys)
        assert engine.render().result_text == expected

    @pytest.mark.parametrize("keys", [
        "0 recip", "0 log", "0 ln", "171 x!",
    ])
    def test_domain_errors(self, engine, keys):
        press(engine, keys)
        assert engine.render().result_text == "Error"

    def test_negative_operands_are_errors(self, engine):
        engine.state.last_ans = -4.0
        press(engine, "sqrt")
        assert engine.render().result_text == "Error"
        press(engine, "ac")
        engine.state.last_ans = -1.0
        press(engine, "x!")
        assert engine.render().result_text == "Error"

    def test_reads_last_answer_without_entry(self, engine):
        press(engine, "3 + 6 = sqrt")
        assert engine.render().result_text == "3"

    def test_result_does_not_touch_accumulator(self, engine):
        press(engine, "2 + 9 sqrt =")
        assert engine.state.last_ans == 5


class TestTrig:
    def test_sine_of_ninety_degrees(self, engine):
        press(engine, "90 sin")
        assert float(engine.render().result_text) == pytest.approx(1.0)

    def test_inverse_sine_in_degrees(self, engine):
        press(engine, "shift 1 sin")
        assert float(engine.render().result_text) == pytest.approx(90.0)

    def test_radian_mode(self):
        engine = CalculatorEngine(angle_mode="RAD")
        press(engine, "pi ÷ 2 = sin")
        assert float(engine.render().result_text) == pytest.approx(1.0)
        press(engine, "ac shift 1 cos")
        assert float(engine.render().result_text) == pytest.approx(0.0)

    def test_mode_toggle(self, engine):
        press(engine, "mode")
        assert engine.render().mode == "RAD"
        press(engine, "drg")
        assert engine.render().mode == "DEG"

    def test_hyperbolic_uses_angle_conversion(self, engine):
        press(engine, "hyp 30 sin")
        expected = math.sinh(math.radians(30))
        assert float(engine.render().result_text) == pytest.approx(expected)

    def test_inverse_hyperbolic_uses_raw_value(self, engine):
        press(engine, "hyp shift 2 sin")
        assert float(engine.render().result_text) == pytest.approx(math.asinh(2))

    def test_inverse_hyperbolic_domain(self, engine):
        press(engine, "hyp shift 1 tan")
        assert engine.render().result_text == "Error"

    def test_inverse_sine_domain(self, engine):
        press(engine, "shift 2 sin")
        assert engine.render().result_text == "Error"

    def test_hyp_is_persistent(self, engine):
        press(engine, "hyp 0 cos")
        assert engine.state.hyp
        press(engine, "ac 0 cos")
        assert engine.render().result_text == "1"
        press(engine, "hyp ac 60 cos")
        assert not engine.state.hyp
        assert float(engine.render().result_text) == pytest.approx(0.5)


class TestModifiers:
    def test_shift_and_alpha_are_exclusive(self, engine):
        press(engine, "shift alpha")
        assert engine.state.alpha and not engine.state.shift
        press(engine, "shift")
        assert engine.state.shift and not engine.state.alpha

    def test_toggle_off(self, engine):
        press(engine, "shift shift")
        assert not engine.state.shift

    @pytest.mark.parametrize("keys", [
        "sqrt", "=", "m+", "mr", "mc", "ans", "pi", "del", "eng", "x!", "sin",
    ])
    def test_function_keys_consume_modifiers(self, engine, keys):
        engine.state.hyp = True
        for modifier in ("shift", "alpha"):
            press(engine, f"4 {modifier} {keys}")
            assert not engine.state.shift
            assert not engine.state.alpha
            assert engine.state.hyp

    def test_entry_keys_keep_modifiers_armed(self, engine):
        press(engine, "shift 1 . 5 +")
        assert engine.state.shift

    def test_toggles_do_not_consume(self, engine):
        press(engine, "shift hyp mode")
        assert engine.state.shift


class TestMemory:
    def test_accumulates(self, engine):
        press(engine, "7 m+ ac 3 m+ ac 2 m- mr")
        assert engine.state.memory == 8
        assert engine.render().result_text == "8"

    def test_independent_of_calculation(self, engine):
        press(engine, "5 + 3")
        press(engine, "m+")
        assert engine.state.acc == 5
        assert engine.state.pending_op == "+"
        assert engine.state.current.text == "3"
        assert engine.state.last_ans == 0

    def test_clear(self, engine):
        press(engine, "9 m+ mc mr")
        assert engine.state.memory == 0
        assert engine.render().result_text == "0"

    def test_error_entry_leaves_memory(self, engine):
        press(engine, "4 m+ ac 0 recip m+")
        assert engine.state.memory == 4


class TestVariables:
    def test_store_and_recall(self, engine):
        engine.handle(KeyEvent.digit("6"))
        engine.handle(KeyEvent(Key.ALPHA))
        engine.handle(KeyEvent.store("b"))
        assert engine.state.vars == {"B": 6}
        press(engine, "ac alpha rcl:B")
        assert engine.render().result_text == "6"

    def test_store_reads_last_answer(self, engine):
        press(engine, "2 + 2 = alpha sto:C")
        assert engine.state.vars["C"] == 4

    def test_missing_alpha(self, engine):
        press(engine, "6")
        with pytest.raises(MissingModifierError):
            engine.handle(KeyEvent.store("A"))
        assert engine.state.vars == {}
        assert engine.state.current.text == "6"

    def test_invalid_letter(self, engine):
        press(engine, "6 alpha")
        with pytest.raises(InvalidVariableError):
            engine.handle(KeyEvent.store("G"))
        assert engine.state.vars == {}
        assert not engine.state.alpha

    def test_recall_empty(self, engine):
        press(engine, "6 alpha")
        with pytest.raises(EmptyVariableError):
            engine.handle(KeyEvent.recall("D"))
        assert engine.state.current.text == "6"


class TestEngineeringNotation:
    @pytest.mark.parametrize("keys,expected", [
        ("12500 eng", "12.5e3"),
        ("1 eng", "1e0"),
        ("999 eng", "999e0"),
        ("1000 eng", "1e3"),
        ("0.00042 eng", "420e-6"),
        ("0 eng", "0"),
    ])
    def test_format(self, engine, keys, expected):
        press(engine, keys)
        assert engine.render().result_text == expected

    def test_chained_arithmetic_uses_value(self, engine):
        press(engine, "12500 eng + 500 =")
        assert engine.state.last_ans == 13000


class TestPower:
    def test_shift_all_clear_powers_off(self, engine):
        press(engine, "hyp 3 m+ alpha sto:A 5 + 2 shift ac")
        st = engine.state
        assert not st.power
        assert not st.shift and not st.alpha
        assert st.hyp
        assert st.memory == 3
        assert st.vars == {"A": 3}
        assert st.acc == 0 and st.pending_op is None and st.last_ans == 0

    def test_keys_ignored_while_off(self, engine):
        press(engine, "shift ac 5 shift hyp mode m+")
        st = engine.state
        assert st.current is None
        assert not st.shift and not st.hyp
        assert st.memory == 0
        assert engine.render().mode == "DEG"
        assert not engine.render().power_on

    def test_power_on(self, engine):
        press(engine, "shift ac on")
        assert engine.render().power_on
        assert engine.state.current is None

    def test_soft_clear(self, engine):
        press(engine, "9 m+ 5 + 2 = 3 ac")
        st = engine.state
        assert st.power
        assert st.current is None and st.pending_op is None
        assert st.acc == 0 and st.last_ans == 0
        assert st.memory == 9


class TestRender:
    def test_initial_display(self, engine):
        view = engine.render()
        assert view.expression_text == ""
        assert view.result_text == "0"
        assert view.mode == "DEG"
        assert view.power_on
        assert not (view.shift_on or view.alpha_on or view.hyp_on)

    def test_indicators(self, engine):
        press(engine, "hyp shift")
        view = engine.render()
        assert view.shift_on and view.hyp_on and not view.alpha_on

    def test_invalid_angle_mode(self):
        with pytest.raises(ValueError):
            CalculatorEngine(angle_mode="GRAD")


class TestLogging:
    def test_warning_level_hides_key_trace(self, engine):
        messages = []
        sink_id = logger.add(messages.append, level="WARNING", format="{message}")
        try:
            press(engine, "1 2 + 3 4 = 8 ÷ 0 =")
        finally:
            logger.remove(sink_id)
        assert len(messages) == 1
        assert messages[0].startswith("Error de cálculo")
