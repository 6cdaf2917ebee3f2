"""Funciones científicas de la calculadora de ejecución inmediata."""

import math


ERROR_TEXT = "Error"
ANGLE_MODES = ("DEG", "RAD")


class ComputationError(ArithmeticError):
    """División por cero, dominio inválido o resultado no finito."""


def _checked(fn, *args) -> float:
    try:
        result = fn(*args)
    except (ValueError, OverflowError, ZeroDivisionError) as exc:
        raise ComputationError(str(exc) or type(exc).__name__) from exc
    if not math.isfinite(result):
        raise ComputationError("Resultado no finito")
    return result


def format_number(value: float) -> str:
    """Forma de cadena de un número para la pantalla."""
    if value == int(value) and abs(value) < 1e15:
        return str(int(value))
    return f"{value:.15g}"


def engineering_notation(value: float) -> str:
    """Mantisa en [1, 1000) por 10 elevado a un múltiplo de 3."""
    if not math.isfinite(value):
        raise ComputationError("Resultado no finito")
    if value == 0:
        return "0"

    power = math.floor(math.log10(abs(value)) / 3)
    mantissa = float(f"{value / 10 ** (power * 3):.15g}")
    if abs(mantissa) >= 1000:
        power += 1
        mantissa = float(f"{value / 10 ** (power * 3):.15g}")
    elif abs(mantissa) < 1:
        power -= 1
        mantissa = float(f"{value / 10 ** (power * 3):.15g}")
    return f"{format_number(mantissa)}e{power * 3}"


def _factorial(x: float) -> float:
    n = math.floor(x)
    if n < 0:
        raise ValueError("factorial requiere un entero no negativo")

    result = 1.0
    for i in range(2, n + 1):
        result *= i
        if math.isinf(result):
            break
    return result


def _remainder(a: float, b: float) -> float:
    # signo del dividendo
    return math.fmod(a, b)


def _divide(a: float, b: float) -> float:
    if b == 0:
        raise ZeroDivisionError("División por cero")
    return a / b


BINARY_FUNCTIONS = {
    "+": lambda a, b: a + b,
    "−": lambda a, b: a - b,
    "×": lambda a, b: a * b,
    "÷": _divide,
    "%": _remainder,
}


def apply_binary(op: str, a: float, b: float) -> float:
    """Evalúa ``a op b``; lanza ComputationError si no es válido."""
    try:
        fn = BINARY_FUNCTIONS[op]
    except KeyError:
        raise ValueError(f"Operador desconocido: {op}") from None
    return _checked(fn, a, b)


class ScientificFunctions:
    """Provee las funciones de tecla según el modo angular y los modificadores.

    El modo angular solo afecta a las funciones trigonométricas directas
    (entrada en grados) y a las inversas (salida en grados). Las hiperbólicas
    inversas trabajan siempre sobre el valor tal cual.
    """

    def __init__(self, angle_mode: str = "DEG"):
        self.angle_mode = angle_mode

    @property
    def angle_mode(self) -> str:
        return self._angle_mode

    @angle_mode.setter
    def angle_mode(self, mode: str):
        if mode not in ANGLE_MODES:
            raise ValueError("El modo debe ser 'DEG' o 'RAD'")
        self._angle_mode = mode

    def toggle_angle_mode(self) -> str:
        self._angle_mode = "RAD" if self._angle_mode == "DEG" else "DEG"
        return self._angle_mode

    # ── Trigonometría ────────────────────────────────────────────

    def _trig(self, fn):
        mode = self._angle_mode

        def wrapped(x):
            return fn(math.radians(x) if mode == "DEG" else x)

        return wrapped

    def _inv_trig(self, fn):
        mode = self._angle_mode

        def wrapped(x):
            r = fn(x)
            return math.degrees(r) if mode == "DEG" else r

        return wrapped

    def trig(self, kind: str, *, inverse: bool = False, hyperbolic: bool = False):
        """Función para sin/cos/tan combinando SHIFT (inversa) e HYP."""
        if kind not in ("sin", "cos", "tan"):
            raise ValueError(f"Función trigonométrica desconocida: {kind}")

        if hyperbolic and inverse:
            return getattr(math, f"a{kind}h")
        if hyperbolic:
            return self._trig(getattr(math, f"{kind}h"))
        if inverse:
            return self._inv_trig(getattr(math, f"a{kind}"))
        return self._trig(getattr(math, kind))

    # ── Funciones de una variable ────────────────────────────────

    def unary(self, name: str, *, shift: bool = False):
        """Función de una variable para la tecla ``name``.

        SHIFT solo cambia ``log`` (10ˣ) y ``ln`` (eˣ).
        """
        if name == "log":
            return (lambda v: 10 ** v) if shift else math.log10
        if name == "ln":
            return math.exp if shift else math.log

        functions = {
            "percent": lambda v: v / 100,
            "sqrt": math.sqrt,
            "recip": lambda v: _divide(1, v),
            "x2": lambda v: v * v,
            "x3": lambda v: v * v * v,
            "x!": _factorial,
        }
        try:
            return functions[name]
        except KeyError:
            raise ValueError(f"Función desconocida: {name}") from None

    @staticmethod
    def evaluate(fn, value: float) -> float:
        """Aplica ``fn``; lanza ComputationError si el resultado no es válido."""
        return _checked(fn, value)
