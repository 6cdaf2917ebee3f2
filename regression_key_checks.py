from calculator_engine import CalculatorEngine, VariableError
from calculator_events import parse_sequence
from loguru import logger
import math
import sys


LOG_LEVEL = "WARNING"


def _run(keys: str, *, angle_mode: str = "DEG"):
	engine = CalculatorEngine(angle_mode=angle_mode)
	states = []

	for event in parse_sequence(keys):
		try:
			engine.handle(event)
		except VariableError as exc:
			states.append(("!", str(exc)))
			continue
		view = engine.render()
		states.append((view.expression_text, view.result_text))

	return engine, states


def _result(keys: str, **kw) -> str:
	engine, _ = _run(keys, **kw)
	return engine.render().result_text


def _close(text: str, expected: float, tol: float = 1e-9) -> bool:
	try:
		return math.isclose(float(text), expected, abs_tol=tol)
	except ValueError:
		return False


def inspect_key_sequence(keys: str, *, angle_mode: str = "DEG") -> None:
	"""Imprime la pantalla después de cada tecla."""
	engine, states = _run(keys, angle_mode=angle_mode)
	tokens = [event.key.value if event.value is None else event.value
			  for event in parse_sequence(keys)]

	print("Key inspection")
	print(f"keys:       {keys}")
	print(f"angle mode: {angle_mode}")
	for i, (token, (expr, result)) in enumerate(zip(tokens, states), start=1):
		print(f"  {i:>2}. {token:<6} | {expr:<20} | {result}")

	st = engine.state
	print(f"acc:        {st.acc}")
	print(f"pending:    {st.pending_op}")
	print(f"last ans:   {st.last_ans}")
	print(f"memory:     {st.memory}")
	print(f"vars:       {st.vars}")


def run_regressions() -> None:
	checks: list[tuple[str, bool]] = []
	expected_actual: list[tuple[str, str, str]] = []

	engine_chain, _ = _run("5 + 3 + 2 =")
	checks.append(("chained + evaluates left to right", engine_chain.state.last_ans == 10))
	expected_actual.append(("2 + 3 × 4 =", "20", _result("2 + 3 × 4 =")))

	engine_div, _ = _run("8 ÷ 0 =")
	checks.append(("8 ÷ 0 shows Error", engine_div.render().result_text == "Error"))
	checks.append(("8 ÷ 0 resets accumulator", engine_div.state.acc == 0))
	checks.append(("8 ÷ 0 clears pending operator", engine_div.state.pending_op is None))
	checks.append(("digit after Error starts fresh", _result("8 ÷ 0 = 7") == "7"))

	checks.append(("sin 90 in DEG is 1", _close(_result("90 sin"), 1.0)))
	checks.append(("shift sin 1 in DEG is 90", _close(_result("shift 1 sin"), 90.0)))
	checks.append(("sin pi/2 in RAD is 1", _close(_result("pi ÷ 2 = sin", angle_mode="RAD"), 1.0)))
	checks.append(("hyp shift sin uses raw value", _close(_result("hyp shift 1 sin"), math.asinh(1))))
	checks.append(("hyp cos 0 is 1", _result("hyp 0 cos") == "1"))
	checks.append(("acosh below 1 is Error", _result("hyp shift 0.5 cos") == "Error"))

	expected_actual.append(("10 mod 3 =", "1", _result("10 mod 3 =")))
	expected_actual.append(("0.1 + 0.2 =", "0.3", _result(".1 + .2 =")))
	expected_actual.append(("50 %", "0.5", _result("50 %")))
	expected_actual.append(("5 x!", "120", _result("5 x!")))
	expected_actual.append(("171 x!", "Error", _result("171 x!")))
	expected_actual.append(("12500 eng", "12.5e3", _result("12500 eng")))
	expected_actual.append(("0.00042 eng", "420e-6", _result("0.00042 eng")))
	expected_actual.append(("shift 2 log", "100", _result("shift 2 log")))

	checks.append(("sqrt of negative is Error", _result("9 m- mr sqrt") == "Error"))
	checks.append(("log of 0 is Error", _result("0 log") == "Error"))
	checks.append(("reciprocal of 0 is Error", _result("0 recip") == "Error"))

	engine_mem, _ = _run("7 m+ ac 3 m+ ac 2 m-")
	checks.append(("memory accumulates M+ and M-", engine_mem.state.memory == 8))
	checks.append(("memory keys leave accumulator alone", engine_mem.state.acc == 0))

	engine_var, _ = _run("42 alpha sto:A ac alpha rcl:A")
	checks.append(("alpha sto/rcl round trip", engine_var.render().result_text == "42"))
	_, states_no_alpha = _run("42 sto:A")
	checks.append(("sto without alpha is refused", states_no_alpha[-1][0] == "!"))
	_, states_bad_letter = _run("42 alpha sto:Z")
	checks.append(("sto with letter outside A-F is refused", states_bad_letter[-1][0] == "!"))

	engine_off, _ = _run("hyp 9 shift ac 5")
	checks.append(("shift ac powers off", not engine_off.state.power))
	checks.append(("keys ignored while off", engine_off.render().result_text == "0"))
	engine_off.handle(parse_sequence("on")[0])
	checks.append(("on restores power", engine_off.state.power))
	checks.append(("hyp survives power off", engine_off.state.hyp))

	engine_shift, _ = _run("shift 5")
	checks.append(("digit keeps shift armed", engine_shift.state.shift))
	engine_consumed, _ = _run("shift 5 x2")
	checks.append(("function key consumes shift", not engine_consumed.state.shift))
	engine_hyp, _ = _run("hyp 30 sin")
	checks.append(("hyp persists after trig", engine_hyp.state.hyp))

	failed = [name for name, ok in checks if not ok]
	for name, ok in checks:
		print(f"{name}: {'OK' if ok else 'FAIL'}")

	print("\nExpected vs Actual:")
	for label, expected, actual in expected_actual:
		status = "OK" if expected == actual else "FAIL"
		if status == "FAIL":
			failed.append(label)
		print(f"- {label}: {status}")
		print(f"  expected: {expected}")
		print(f"  actual:   {actual}")

	if failed:
		print("\nFAILED CHECKS:")
		for name in failed:
			print(f"- {name}")
		raise SystemExit(1)

	print("\nAll regression checks passed.")


if __name__ == "__main__":
	# Uso rápido:
	#   python regression_key_checks.py
	#   python regression_key_checks.py --inspect "5 + 3 + 2 ="
	#   python regression_key_checks.py --inspect "pi ÷ 2 = sin" --mode RAD
	logger.remove()
	logger.add(sys.stderr, level=LOG_LEVEL)

	if "--inspect" in sys.argv:
		try:
			keys = sys.argv[sys.argv.index("--inspect") + 1]
		except (ValueError, IndexError):
			raise SystemExit("Missing key sequence after --inspect")

		mode = "DEG"
		if "--mode" in sys.argv:
			try:
				mode = sys.argv[sys.argv.index("--mode") + 1].upper()
			except IndexError:
				raise SystemExit("Invalid value for --mode")

		inspect_key_sequence(keys, angle_mode=mode)
	else:
		run_regressions()
