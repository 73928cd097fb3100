from __future__ import annotations

import threading

import pytest

from pystarlark import ErrorKind, ExecutionOptions, Interpreter, to_python


def test_break_and_continue(run_interpreter):
    source = """
out = []
for i in range(10):
    if i == 1:
        continue
    if i == 4:
        break
    out.append(i)

nested = []
for i in range(3):
    for j in range(3):
        if j == 1:
            break
        nested.append((i, j))
"""
    env = run_interpreter(source)
    assert to_python(env["out"]) == [0, 2, 3]
    assert to_python(env["nested"]) == [(0, 0), (1, 0), (2, 0)]


def test_return_from_inside_loop(run_interpreter):
    source = """
def first_even(xs):
    for x in xs:
        if x % 2 == 0:
            return x
    return None

RESULT = (first_even([1, 3, 4, 6]), first_even([1]))
"""
    env = run_interpreter(source)
    assert env["RESULT"] == (4, None)


def test_function_without_return_yields_none(run_interpreter):
    env = run_interpreter("def f():\n    x = 1\nRESULT = f()")
    assert env["RESULT"] is None


def test_elif_chain(run_interpreter):
    source = """
def grade(n):
    if n >= 90:
        return "A"
    elif n >= 80:
        return "B"
    elif n >= 70:
        return "C"
    else:
        return "F"

RESULT = [grade(95), grade(85), grade(75), grade(10)]
"""
    env = run_interpreter(source)
    assert to_python(env["RESULT"]) == ["A", "B", "C", "F"]


@pytest.mark.parametrize(
    ("source", "message"),
    [
        ("return 1", "return statement outside function"),
        ("break", "break statement outside loop"),
        ("continue", "continue statement outside loop"),
        ("if True:\n    break", "break statement outside loop"),
        ("def f():\n    break\nf()", "break statement outside loop"),
        ("def f():\n    continue\nf()", "continue statement outside loop"),
    ],
)
def test_control_flow_misuse(source, message, run_error):
    err = run_error(source)
    assert err.kind is ErrorKind.CONTROL_FLOW_MISUSE
    assert err.message == message


def test_direct_recursion_is_rejected(run_error):
    source = """
def f(n):
    return f(n - 1) if n > 0 else 0

f(3)
"""
    err = run_error(source)
    assert err.kind is ErrorKind.RECURSION_LIMIT
    assert "f" in err.message


def test_mutual_recursion_is_rejected(run_error):
    source = """
def a(n):
    return b(n)

def b(n):
    return a(n)

a(1)
"""
    assert run_error(source).kind is ErrorKind.RECURSION_LIMIT


def test_same_function_may_be_called_repeatedly(run_interpreter):
    source = """
def square(n):
    return n * n

RESULT = [square(square(2)), square(3)]
"""
    env = run_interpreter(source)
    assert to_python(env["RESULT"]) == [16, 9]


def test_call_stack_is_released_after_an_error():
    interpreter = Interpreter()
    env = interpreter.make_default_env()
    source = "def f(x):\n    return 1 // x\n"
    assert interpreter.run(source + "f(0)", env).exception.kind is ErrorKind.ZERO_DIVISION
    result = interpreter.run("f(1)", env)
    assert result.ok
    assert result.value == 1


def test_deep_host_recursion_is_reported_as_recursion_limit(run_error):
    depth = 3000
    lines = [f"def f{i}():\n    return f{i + 1}()\n" for i in range(depth)]
    lines.append(f"def f{depth}():\n    return 0\n")
    lines.append("x = f0()\n")
    assert run_error("".join(lines)).kind is ErrorKind.RECURSION_LIMIT


def test_step_budget_stops_long_loops(run_error):
    source = "for i in range(100):\n    x = i"
    err = run_error(source, options=ExecutionOptions(step_budget=5))
    assert err.kind is ErrorKind.CANCELLED_OR_BUDGET_EXCEEDED
    assert err.message == "Execution step budget exceeded."


def test_step_budget_covers_comprehensions(run_error):
    source = "x = [i for i in range(1000)]"
    err = run_error(source, options=ExecutionOptions(step_budget=10))
    assert err.kind is ErrorKind.CANCELLED_OR_BUDGET_EXCEEDED


def test_sufficient_budget_runs_to_completion(run_interpreter):
    env = run_interpreter("x = 1\ny = 2", options=ExecutionOptions(step_budget=100))
    assert env["y"] == 2


def test_cancellation_event_stops_execution(run_error):
    cancel = threading.Event()
    cancel.set()
    err = run_error("x = 1", options=ExecutionOptions(cancel_event=cancel))
    assert err.kind is ErrorKind.CANCELLED_OR_BUDGET_EXCEEDED
    assert err.message == "Execution cancelled."


def test_cancellation_from_host_function(run_error):
    cancel = threading.Event()

    def stop(args, kwargs):
        cancel.set()

    source = "stop()\nx = 1"
    err = run_error(source, predeclared={"stop": stop}, options=ExecutionOptions(cancel_event=cancel))
    assert err.kind is ErrorKind.CANCELLED_OR_BUDGET_EXCEEDED


def test_budget_is_per_run():
    interpreter = Interpreter()
    env = interpreter.make_default_env()
    options = ExecutionOptions(step_budget=3)
    assert interpreter.run("a = 1\nb = 2", env, options=options).ok
    assert interpreter.run("c = 3\nd = 4", env, options=options).ok


@pytest.mark.parametrize("budget", [-1, 1.5, "10"])
def test_invalid_budget_is_rejected(budget):
    with pytest.raises(ValueError):
        ExecutionOptions(step_budget=budget)


def test_zero_budget_stops_before_the_first_statement(run_error):
    err = run_error("x = 1", options=ExecutionOptions(step_budget=0))
    assert err.kind is ErrorKind.CANCELLED_OR_BUDGET_EXCEEDED
