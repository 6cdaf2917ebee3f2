"""
Motor de la calculadora científica de ejecución inmediata.

Este módulo provee la clase CalculatorEngine, la máquina de estados que
emula una calculadora de bolsillo: entrada de dígitos, un único operador
binario pendiente evaluado de izquierda a derecha, funciones de una
variable moduladas por SHIFT, ALPHA e HYP, modo angular, memoria
independiente y variables A–F.

Contrato de interfaz:
    - handle(event: KeyEvent) -> None
    - render() -> Display
    - angle_mode: propiedad 'DEG' | 'RAD'
"""

import math
import re
from dataclasses import dataclass, field

from loguru import logger

from calculator_events import BINARY_OPERATORS, ENTRY_KEYS, MODIFIER_KEYS, TRIG_KEYS, Key, KeyEvent
from scientific_functions import (
    ERROR_TEXT,
    ComputationError,
    ScientificFunctions,
    apply_binary,
    engineering_notation,
    format_number,
)


VARIABLE_NAMES = "ABCDEF"
_ENTRY_RE = re.compile(r"\d*\.?\d*")


class VariableError(ValueError):
    """Uso incorrecto de STO/RCL; no modifica la entrada."""


class MissingModifierError(VariableError):
    pass


class InvalidVariableError(VariableError):
    pass


class EmptyVariableError(VariableError):
    pass


@dataclass(frozen=True)
class Entry:
    """Contenido de la línea de resultado antes de confirmarse.

    Una entrada tecleada (``value`` es None) sigue la gramática de dígitos y
    se interpreta desde ``text``. Una entrada calculada guarda su valor; si
    su texto cumple la misma gramática se puede seguir editando como tecleado.
    """

    text: str
    value: float | None = None

    @property
    def typed(self) -> bool:
        return self.value is None

    def number(self) -> float:
        if self.value is not None:
            return self.value
        if self.text in ("", "."):
            return 0.0
        return float(self.text)

    def editable_text(self) -> str | None:
        """Texto sobre el que se puede seguir tecleando, si lo hay."""
        if self.typed or _ENTRY_RE.fullmatch(self.text):
            return self.text
        return None


ERROR_ENTRY = Entry(ERROR_TEXT, math.nan)


@dataclass
class CalculatorState:
    power: bool = True
    shift: bool = False
    alpha: bool = False
    hyp: bool = False
    acc: float = 0.0
    pending_op: str | None = None
    current: Entry | None = None
    last_ans: float = 0.0
    memory: float = 0.0
    vars: dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class Display:
    """Lo que la interfaz pinta después de cada tecla."""

    expression_text: str
    result_text: str
    shift_on: bool
    alpha_on: bool
    hyp_on: bool
    mode: str
    power_on: bool


class CalculatorEngine:
    """Procesa eventos de tecla sobre un único estado."""

    def __init__(self, angle_mode: str = "DEG"):
        self._functions = ScientificFunctions(angle_mode)
        self.state = CalculatorState()

    # ── Propiedad: modo angular ──────────────────────────────────

    @property
    def angle_mode(self) -> str:
        return self._functions.angle_mode

    @angle_mode.setter
    def angle_mode(self, mode: str):
        self._functions.angle_mode = mode

    # ── Entrada principal ────────────────────────────────────────

    def handle(self, event: KeyEvent) -> None:
        """Aplica una pulsación al estado.

        Raises:
            VariableError: STO/RCL sin ALPHA, letra inválida o variable vacía.
            ValueError: evento desconocido o carga inválida.
        """
        st = self.state
        if not st.power and event.key is not Key.ON:
            logger.debug("Tecla {} ignorada: calculadora apagada", event.key.value)
            return

        logger.debug("Tecla {} {}", event.key.value, event.value or "")
        handler = self._HANDLERS.get(event.key)
        if handler is None:
            raise ValueError(f"Tecla desconocida: {event.key}")
        try:
            handler(self, event)
        finally:
            if event.key not in MODIFIER_KEYS and event.key not in ENTRY_KEYS:
                self._clear_shifts()

    def render(self) -> Display:
        st = self.state
        expression = ""
        if st.pending_op is not None:
            expression = f"{format_number(st.acc)} {st.pending_op}"
        if st.current is not None:
            result = st.current.text
        else:
            result = format_number(st.last_ans)
        return Display(
            expression_text=expression,
            result_text=result,
            shift_on=st.shift,
            alpha_on=st.alpha,
            hyp_on=st.hyp,
            mode=self.angle_mode,
            power_on=st.power,
        )

    # ── Utilidades ───────────────────────────────────────────────

    def _clear_shifts(self):
        # HYP permanece hasta pulsarla de nuevo
        self.state.shift = False
        self.state.alpha = False

    def _read_value(self) -> float:
        st = self.state
        if st.current is None:
            return st.last_ans
        try:
            return st.current.number()
        except ValueError:
            return math.nan

    def _set_result(self, value: float, text: str | None = None):
        self.state.current = Entry(format_number(value) if text is None else text, value)

    def _set_error(self, exc: Exception):
        logger.warning("Error de cálculo: {}", exc)
        self.state.current = ERROR_ENTRY

    def _reset_pending(self):
        self.state.acc = 0.0
        self.state.pending_op = None

    # ── Encendido y modificadores ────────────────────────────────

    def _on_power_on(self, _event):
        if not self.state.power:
            logger.info("Calculadora encendida")
        self.state.power = True
        self.state.current = None

    def _on_shift(self, _event):
        st = self.state
        st.shift = not st.shift
        if st.shift:
            st.alpha = False

    def _on_alpha(self, _event):
        st = self.state
        st.alpha = not st.alpha
        if st.alpha:
            st.shift = False

    def _on_hyp(self, _event):
        self.state.hyp = not self.state.hyp

    def _on_mode(self, _event):
        mode = self._functions.toggle_angle_mode()
        logger.debug("Modo angular {}", mode)

    def _on_all_clear(self, _event):
        st = self.state
        if st.shift:
            st.power = False
            logger.info("Calculadora apagada")
        st.current = None
        st.last_ans = 0.0
        self._reset_pending()

    # ── Entrada de dígitos ───────────────────────────────────────

    def _on_digit(self, event):
        d = event.value
        if d is None or len(d) != 1 or d not in "0123456789":
            raise ValueError(f"Dígito inválido: {d!r}")
        self._append(d)

    def _on_decimal(self, _event):
        self._append(".")

    def _append(self, ch: str):
        st = self.state
        text = st.current.editable_text() if st.current is not None else None
        text = text or ""
        if ch == "." and "." in text:
            return
        if text == "0" and ch != ".":
            text = ch
        else:
            text += ch
        st.current = Entry(text)

    def _on_delete(self, _event):
        st = self.state
        if st.current is None:
            return
        text = st.current.editable_text()
        if text is None:
            st.current = None
            return
        text = text[:-1]
        st.current = Entry(text) if text else None

    def _on_ans(self, _event):
        self._set_result(self.state.last_ans)

    def _on_pi(self, _event):
        self._set_result(math.pi)

    # ── Operaciones binarias ─────────────────────────────────────

    def _on_operator(self, event):
        op = event.value
        if op not in BINARY_OPERATORS:
            raise ValueError(f"Operador desconocido: {op!r}")
        st = self.state
        if st.pending_op is not None and st.current is not None:
            self._execute_pending()
        elif st.current is not None:
            self._commit_current()
        st.pending_op = op

    def _commit_current(self) -> bool:
        st = self.state
        value = self._read_value()
        if not math.isfinite(value):
            self._set_error(ComputationError("Entrada no numérica"))
            self._reset_pending()
            return False
        st.acc = value
        st.current = None
        return True

    def _execute_pending(self) -> bool:
        st = self.state
        if st.pending_op is None:
            return self._commit_current()

        b = self._read_value()
        try:
            r = apply_binary(st.pending_op, st.acc, b)
        except ComputationError as exc:
            self._set_error(exc)
            self._reset_pending()
            return False
        st.acc = r
        st.last_ans = r
        st.current = None
        return True

    def _on_equals(self, _event):
        st = self.state
        ok = self._execute_pending()
        st.pending_op = None
        if ok:
            st.last_ans = st.acc
            st.current = None

    # ── Funciones de una variable ────────────────────────────────

    _UNARY_NAMES = {
        Key.PERCENT: "percent",
        Key.SQRT: "sqrt",
        Key.RECIPROCAL: "recip",
        Key.SQUARE: "x2",
        Key.CUBE: "x3",
        Key.LOG: "log",
        Key.LN: "ln",
        Key.FACTORIAL: "x!",
    }

    def _apply(self, fn):
        try:
            self._set_result(self._functions.evaluate(fn, self._read_value()))
        except ComputationError as exc:
            self._set_error(exc)

    def _on_unary(self, event):
        fn = self._functions.unary(self._UNARY_NAMES[event.key], shift=self.state.shift)
        self._apply(fn)

    def _on_trig(self, event):
        st = self.state
        fn = self._functions.trig(event.key.value, inverse=st.shift, hyperbolic=st.hyp)
        self._apply(fn)

    # ── Memoria ──────────────────────────────────────────────────

    def _update_memory(self, sign: int):
        total = self.state.memory + sign * self._read_value()
        if not math.isfinite(total):
            logger.warning("Memoria sin cambios: valor no finito")
            return
        self.state.memory = total

    def _on_mem_add(self, _event):
        self._update_memory(1)

    def _on_mem_sub(self, _event):
        self._update_memory(-1)

    def _on_mem_recall(self, _event):
        self._set_result(self.state.memory)

    def _on_mem_clear(self, _event):
        self.state.memory = 0.0

    # ── Variables A–F ────────────────────────────────────────────

    def _variable_name(self, event) -> str:
        if not self.state.alpha:
            logger.info("STO/RCL sin ALPHA")
            raise MissingModifierError("Pulsa ALPHA antes de STO/RCL")
        letter = (event.value or "").strip().upper()
        if len(letter) != 1 or letter not in VARIABLE_NAMES:
            logger.info("Variable inválida: {!r}", event.value)
            raise InvalidVariableError("Usa una variable de A a F")
        return letter

    def _on_store(self, event):
        name = self._variable_name(event)
        value = self._read_value()
        if not math.isfinite(value):
            self._set_error(ComputationError(f"No se puede guardar en {name}"))
            return
        self.state.vars[name] = value

    def _on_recall(self, event):
        name = self._variable_name(event)
        if name not in self.state.vars:
            logger.info("Variable {} vacía", name)
            raise EmptyVariableError(f"La variable {name} está vacía")
        self._set_result(self.state.vars[name])

    # ── Notación de ingeniería ───────────────────────────────────

    def _on_eng(self, _event):
        value = self._read_value()
        try:
            self._set_result(value, engineering_notation(value))
        except ComputationError as exc:
            self._set_error(exc)

    _HANDLERS = {
        Key.ON: _on_power_on,
        Key.SHIFT: _on_shift,
        Key.ALPHA: _on_alpha,
        Key.HYP: _on_hyp,
        Key.MODE: _on_mode,
        Key.DRG: _on_mode,
        Key.AC: _on_all_clear,
        Key.DIGIT: _on_digit,
        Key.DECIMAL: _on_decimal,
        Key.DELETE: _on_delete,
        Key.ANS: _on_ans,
        Key.PI: _on_pi,
        Key.OPERATOR: _on_operator,
        Key.EQUALS: _on_equals,
        **dict.fromkeys(_UNARY_NAMES, _on_unary),
        **dict.fromkeys(TRIG_KEYS, _on_trig),
        Key.MEM_ADD: _on_mem_add,
        Key.MEM_SUB: _on_mem_sub,
        Key.MEM_RECALL: _on_mem_recall,
        Key.MEM_CLEAR: _on_mem_clear,
        Key.STORE: _on_store,
        Key.RECALL: _on_recall,
        Key.ENG: _on_eng,
    }
