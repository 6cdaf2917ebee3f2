"""Punto de entrada de la calculadora científica."""

import sys
import tkinter as tk

from loguru import logger

from calculator_engine import CalculatorEngine
from calculator_ui import CalculatorApp


WINDOW_GEOMETRY = "460x640"
START_ANGLE_MODE = "DEG"
LOG_LEVEL = "INFO"
LOG_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | <level>{level:<8}</level> | "
    "<cyan>{name}:{function}:{line}</cyan> - {message}"
)


def configure_logging(level: str = LOG_LEVEL):
    logger.remove()
    logger.add(sys.stderr, level=level, format=LOG_FORMAT)


def main():
    configure_logging()
    root = tk.Tk()
    root.geometry(WINDOW_GEOMETRY)
    engine = CalculatorEngine(angle_mode=START_ANGLE_MODE)
    CalculatorApp(root, engine=engine)
    root.mainloop()


if __name__ == "__main__":
    main()
