"""Eventos de tecla que la interfaz entrega al motor de la calculadora."""

from dataclasses import dataclass
from enum import Enum


class Key(Enum):
    ON = "on"
    SHIFT = "shift"
    ALPHA = "alpha"
    HYP = "hyp"
    MODE = "mode"
    DRG = "drg"
    AC = "ac"

    DIGIT = "digit"
    DECIMAL = "."
    DELETE = "del"
    ANS = "ans"
    PI = "pi"

    OPERATOR = "op"
    EQUALS = "="

    PERCENT = "%"
    SQRT = "sqrt"
    RECIPROCAL = "recip"
    SQUARE = "x2"
    CUBE = "x3"
    LOG = "log"
    LN = "ln"
    FACTORIAL = "x!"
    SIN = "sin"
    COS = "cos"
    TAN = "tan"

    MEM_ADD = "m+"
    MEM_SUB = "m-"
    MEM_RECALL = "mr"
    MEM_CLEAR = "mc"

    STORE = "sto"
    RECALL = "rcl"
    ENG = "eng"


MODIFIER_KEYS = frozenset({Key.SHIFT, Key.ALPHA, Key.HYP, Key.MODE, Key.DRG})
# Teclas que dejan SHIFT/ALPHA armados para la función siguiente
ENTRY_KEYS = frozenset({Key.DIGIT, Key.DECIMAL, Key.OPERATOR})
TRIG_KEYS = frozenset({Key.SIN, Key.COS, Key.TAN})

BINARY_OPERATORS = ("+", "−", "×", "÷", "%")
OPERATOR_ALIASES = {"-": "−", "*": "×", "/": "÷"}


@dataclass(frozen=True)
class KeyEvent:
    """Una pulsación. ``value`` lleva el dígito, el operador o la letra."""

    key: Key
    value: str | None = None

    @classmethod
    def digit(cls, d: str) -> "KeyEvent":
        if len(d) != 1 or d not in "0123456789":
            raise ValueError(f"Dígito inválido: {d!r}")
        return cls(Key.DIGIT, d)

    @classmethod
    def operator(cls, op: str) -> "KeyEvent":
        op = OPERATOR_ALIASES.get(op, op)
        if op not in BINARY_OPERATORS:
            raise ValueError(f"Operador desconocido: {op!r}")
        return cls(Key.OPERATOR, op)

    @classmethod
    def store(cls, letter: str | None) -> "KeyEvent":
        return cls(Key.STORE, letter)

    @classmethod
    def recall(cls, letter: str | None) -> "KeyEvent":
        return cls(Key.RECALL, letter)


_TOKEN_OPERATORS = {"+": "+", "-": "−", "−": "−", "*": "×", "×": "×",
                    "/": "÷", "÷": "÷", "mod": "%"}


def parse_sequence(text: str) -> list[KeyEvent]:
    """Convierte una secuencia de teclas escrita en eventos.

    Los tokens se separan por espacios. Un número (``12.5``) se expande a
    una pulsación por carácter; ``mod`` es el operador resto y ``%`` la
    tecla de porcentaje; ``sto:A`` / ``rcl:A`` llevan la letra.

    >>> [e.key.name for e in parse_sequence("1.5 + 2 =")]
    ['DIGIT', 'DECIMAL', 'DIGIT', 'OPERATOR', 'DIGIT', 'EQUALS']
    """
    events = []
    for token in text.split():
        lowered = token.lower()
        if all(ch.isdigit() or ch == "." for ch in token):
            for ch in token:
                events.append(KeyEvent(Key.DECIMAL) if ch == "." else KeyEvent.digit(ch))
        elif lowered in _TOKEN_OPERATORS:
            events.append(KeyEvent.operator(_TOKEN_OPERATORS[lowered]))
        elif lowered.startswith(("sto:", "rcl:")):
            name, _, letter = token.partition(":")
            key = Key.STORE if name.lower() == "sto" else Key.RECALL
            events.append(KeyEvent(key, letter))
        else:
            try:
                events.append(KeyEvent(Key(lowered)))
            except ValueError:
                raise ValueError(f"Tecla desconocida: {token!r}") from None
    return events
