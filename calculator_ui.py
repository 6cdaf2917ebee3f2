"""
Interfaz gráfica de la calculadora científica.

Usa tkinter. Traduce botones y teclado a eventos del motor y pinta
la pantalla a partir de CalculatorEngine.render() después de cada tecla.
"""

import tkinter as tk
from tkinter import font as tkfont
from tkinter import messagebox, simpledialog

from loguru import logger

from calculator_engine import CalculatorEngine, VariableError
from calculator_events import Key, KeyEvent


# ═════════════════════════════════════════════════════════════════
#  Aplicación principal
# ═════════════════════════════════════════════════════════════════

class CalculatorApp:
    """Ventana principal de la calculadora científica."""

    # ── Paleta de colores ────────────────────────────────────────
    C = {
        "bg":         "#1E1E2E",
        "display_bg": "#181825",
        "num":        "#313244",
        "num_fg":     "#CDD6F4",
        "op":         "#F38BA8",
        "op_fg":      "#1E1E2E",
        "func":       "#45475A",
        "func_fg":    "#CDD6F4",
        "special":    "#585B70",
        "special_fg": "#CDD6F4",
        "shift":      "#F9E2AF",
        "shift_fg":   "#1E1E2E",
        "alpha":      "#F38BA8",
        "alpha_fg":   "#1E1E2E",
        "equals":     "#89B4FA",
        "equals_fg":  "#1E1E2E",
        "expr_fg":    "#BAC2DE",
        "result_fg":  "#A6E3A1",
        "ind_fg":     "#F9E2AF",
    }

    # ── Definiciones del teclado ─────────────────────────────────
    #  Cada fila es una lista de (texto, acción, tipo_color)
    #  acción: "key:<tecla>", "digit:<d>", "op:<símbolo>"
    #  tipo_color: "num", "op", "func", "special", "shift", "alpha", "equals"

    KEYPAD = [
        [("SHIFT", "key:shift", "shift"), ("ALPHA", "key:alpha", "alpha"),
         ("MODE",  "key:mode",  "special"), ("DRG", "key:drg", "special"),
         ("ON",    "key:on",    "special")],

        [("hyp", "key:hyp", "func"), ("sin", "key:sin", "func"),
         ("cos", "key:cos", "func"), ("tan", "key:tan", "func"),
         ("x!",  "key:x!",  "func"), ("ENG", "key:eng", "func")],

        [("x⁻¹", "key:recip", "func"), ("x²", "key:x2", "func"),
         ("x³", "key:x3", "func"), ("√", "key:sqrt", "func"),
         ("log", "key:log", "func"), ("ln", "key:ln", "func")],

        [("STO", "key:sto", "func"), ("RCL", "key:rcl", "func"),
         ("M+",  "key:m+",  "func"), ("M−", "key:m-", "func"),
         ("MR",  "key:mr",  "func"), ("MC", "key:mc", "func")],

        [("7", "digit:7", "num"), ("8", "digit:8", "num"),
         ("9", "digit:9", "num"), ("DEL", "key:del", "special"),
         ("AC", "key:ac", "special")],

        [("4", "digit:4", "num"), ("5", "digit:5", "num"),
         ("6", "digit:6", "num"), ("×", "op:×", "op"),
         ("÷", "op:÷", "op")],

        [("1", "digit:1", "num"), ("2", "digit:2", "num"),
         ("3", "digit:3", "num"), ("+", "op:+", "op"),
         ("−", "op:−", "op")],

        [("0", "digit:0", "num"), (".", "key:.", "num"),
         ("π", "key:pi", "func"), ("%", "key:%", "func"),
         ("mod", "op:%", "op"), ("Ans", "key:ans", "func"),
         ("=", "key:=", "equals")],
    ]

    # Atajos de teclado → acción
    SHORTCUTS = {
        "+": "op:+",
        "-": "op:−",
        "*": "op:×",
        "/": "op:÷",
        "=": "key:=",
        "Return": "key:=",
        "KP_Enter": "key:=",
        "BackSpace": "key:del",
        "c": "key:ac",
        "C": "key:ac",
        "o": "key:on",
        "O": "key:on",
        ".": "key:.",
    }

    # ────────────────────────────────────────────────────────────

    def __init__(self, root: tk.Tk, engine=None):
        self.root = root
        self.root.title("Calculadora Científica")
        self.root.configure(bg=self.C["bg"])
        self.root.resizable(False, False)

        self.engine = engine if engine is not None else CalculatorEngine()

        self._init_fonts()
        self._create_display()
        self._create_keypad()
        self._bind_keyboard()
        self._refresh()

    # ── Fuentes ──────────────────────────────────────────────────

    def _init_fonts(self):
        self._f_expr   = tkfont.Font(family="Consolas", size=14)
        self._f_result = tkfont.Font(family="Consolas", size=22, weight="bold")
        self._f_btn    = tkfont.Font(family="Segoe UI", size=14)
        self._f_small  = tkfont.Font(family="Segoe UI", size=10)

    # ── Pantalla ─────────────────────────────────────────────────

    def _create_display(self):
        frame = tk.Frame(self.root, bg=self.C["display_bg"], padx=12, pady=8)
        frame.pack(fill="x", padx=6, pady=(6, 2))

        # Indicadores: S · A · HYP · DEG/RAD · ON/OFF
        bar = tk.Frame(frame, bg=self.C["display_bg"])
        bar.pack(fill="x")
        self._indicators = {}
        for name, width in (("shift", 2), ("alpha", 2), ("hyp", 4),
                            ("mode", 4), ("power", 4)):
            var = tk.StringVar()
            tk.Label(
                bar, textvariable=var, width=width, font=self._f_small,
                bg=self.C["display_bg"], fg=self.C["ind_fg"], anchor="w",
            ).pack(side="left", padx=(0, 4))
            self._indicators[name] = var

        self.expr_var = tk.StringVar()
        tk.Label(
            frame, textvariable=self.expr_var, font=self._f_expr,
            bg=self.C["display_bg"], fg=self.C["expr_fg"], anchor="e",
        ).pack(fill="x", pady=(4, 0))

        self.result_var = tk.StringVar(value="0")
        tk.Label(
            frame, textvariable=self.result_var, font=self._f_result,
            bg=self.C["display_bg"], fg=self.C["result_fg"], anchor="e",
        ).pack(fill="x", pady=(2, 4))

    # ── Teclado ──────────────────────────────────────────────────

    def _create_keypad(self):
        keypad = tk.Frame(self.root, bg=self.C["bg"])
        keypad.pack(fill="both", expand=True, padx=6, pady=(2, 6))

        # Una franja por fila; las filas cortas reparten el ancho entre menos teclas
        for row_def in self.KEYPAD:
            row = tk.Frame(keypad, bg=self.C["bg"])
            row.pack(fill="both", expand=True)
            for text, action, kind in row_def:
                tk.Button(
                    row, text=text, font=self._f_btn, width=1,
                    bg=self.C[kind], fg=self.C[f"{kind}_fg"],
                    activebackground=self.C["special"], relief="flat",
                    command=lambda a=action: self._on_action(a),
                ).pack(side="left", fill="both", expand=True, padx=2, pady=2, ipady=6)

    # ── Atajos de teclado ────────────────────────────────────────

    def _bind_keyboard(self):
        self.root.bind("<Key>", self._on_keypress)

    def _on_keypress(self, event):
        if event.char and event.char.isdigit():
            action = f"digit:{event.char}"
        else:
            action = self.SHORTCUTS.get(event.char) or self.SHORTCUTS.get(event.keysym)
        if action is None:
            return
        # Apagada solo responde a ON
        if not self.engine.state.power and action != "key:on":
            return
        self._on_action(action)

    # ── Acciones ─────────────────────────────────────────────────

    def _on_action(self, action: str):
        kind, _, value = action.partition(":")
        if kind == "digit":
            event = KeyEvent.digit(value)
        elif kind == "op":
            event = KeyEvent.operator(value)
        else:
            key = Key(value)
            if key in (Key.STORE, Key.RECALL):
                event = self._variable_event(key)
                if event is None:
                    return
            else:
                event = KeyEvent(key)

        try:
            self.engine.handle(event)
        except VariableError as exc:
            messagebox.showwarning("STO/RCL", str(exc), parent=self.root)
        finally:
            self._refresh()

    def _variable_event(self, key: Key):
        # Sin ALPHA el motor ya rechaza la tecla; no hace falta preguntar
        if not self.engine.state.alpha or not self.engine.state.power:
            return KeyEvent(key)
        letter = simpledialog.askstring(
            "Variable", "Variable (A-F):", parent=self.root,
        )
        if letter is None:
            logger.debug("Selección de variable cancelada")
            return None
        return KeyEvent(key, letter)

    # ── Pintado ──────────────────────────────────────────────────

    def _refresh(self):
        view = self.engine.render()
        self.expr_var.set(view.expression_text)
        self.result_var.set(view.result_text if view.power_on else "")
        self._indicators["shift"].set("S" if view.shift_on else "")
        self._indicators["alpha"].set("A" if view.alpha_on else "")
        self._indicators["hyp"].set("HYP" if view.hyp_on else "")
        self._indicators["mode"].set(view.mode)
        self._indicators["power"].set("ON" if view.power_on else "OFF")
