from __future__ import annotations

import pytest

from pystarlark import ErrorKind, to_python

SIGNATURE = """
def f(a, b = 2, *args, **kwargs):
    return (a, b, args, kwargs)
"""


@pytest.mark.parametrize(
    ("call_expr", "expected"),
    [
        ("f(1)", (1, 2, (), {})),
        ("f(1, 3, 4, 5, x = 6)", (1, 3, (4, 5), {"x": 6})),
        ("f(b = 5, a = 1)", (1, 5, (), {})),
        ('f(1, *[7, 8], **{"k": 9})', (1, 7, (8,), {"k": 9})),
        ("f(*(1, 2))", (1, 2, (), {})),
    ],
)
def test_argument_binding(call_expr, expected, run_interpreter):
    env = run_interpreter(SIGNATURE + f"RESULT = {call_expr}")
    assert to_python(env["RESULT"]) == expected


def test_keyword_only_bucket_preserves_call_order(run_interpreter):
    env = run_interpreter(SIGNATURE + "RESULT = f(1, z = 1, y = 2, x = 3)[3]")
    assert list(to_python(env["RESULT"])) == ["z", "y", "x"]


@pytest.mark.parametrize(
    ("call_expr", "kind"),
    [
        ("f(1, a = 2)", ErrorKind.TYPE_MISMATCH),
        ('f(1, **{"a": 2})', ErrorKind.TYPE_MISMATCH),
        ('f(1, x = 1, **{"x": 2})', ErrorKind.TYPE_MISMATCH),
        ("f(1, **{1: 2})", ErrorKind.TYPE_MISMATCH),
        ("f(1, **[1])", ErrorKind.TYPE_MISMATCH),
        ("f(*1)", ErrorKind.TYPE_MISMATCH),
        ("f()", ErrorKind.INVALID_ARGUMENT_COUNT),
        ("f(*[1], 2)", ErrorKind.INVALID_ARGUMENT_COUNT),
        ('f(**{"a": 1}, b = 2)', ErrorKind.INVALID_ARGUMENT_COUNT),
        ("f(*[1], b = 2)", ErrorKind.INVALID_ARGUMENT_COUNT),
        ("f(a = 1, *[2])", ErrorKind.TYPE_MISMATCH),
        ("f(*[1], *[2])", ErrorKind.INVALID_ARGUMENT_COUNT),
        ('f(**{"a": 1}, **{"b": 2})', ErrorKind.INVALID_ARGUMENT_COUNT),
    ],
)
def test_argument_errors(call_expr, kind, run_error):
    assert run_error(SIGNATURE + f"x = {call_expr}").kind is kind


def test_fixed_arity_function_errors(run_error):
    source = """
def g(a):
    return a
"""
    err = run_error(source + "x = g(1, 2)")
    assert err.kind is ErrorKind.INVALID_ARGUMENT_COUNT
    assert "accepts 1 positional arguments (2 given)" in err.message

    err = run_error(source + "x = g()")
    assert err.kind is ErrorKind.INVALID_ARGUMENT_COUNT
    assert "missing 1 argument(s): a" in err.message

    err = run_error(source + "x = g(b = 1)")
    assert err.kind is ErrorKind.TYPE_MISMATCH
    assert "unexpected keyword argument 'b'" in err.message


def test_keyword_before_positional_is_a_syntax_error(run_result):
    with pytest.raises(SyntaxError):
        run_result(SIGNATURE + "x = f(a = 1, 2)")


def test_lambda_parameters(run_interpreter):
    source = """
add = lambda x, y = 10: x + y
RESULT = (add(1), add(1, 2), add(y = 3, x = 4))
"""
    env = run_interpreter(source)
    assert env["RESULT"] == (11, 3, 7)


def test_builtin_keyword_arguments(run_interpreter, run_error):
    source = """
A = sorted([3, 1, 2], reverse = True)
B = sorted(["bb", "a", "ccc"], key = len)
C = int("ff", base = 16)
D = dict([("a", 1)], b = 2)
"""
    env = run_interpreter(source)
    assert to_python(env["A"]) == [3, 2, 1]
    assert to_python(env["B"]) == ["a", "bb", "ccc"]
    assert env["C"] == 255
    assert to_python(env["D"]) == {"a": 1, "b": 2}

    assert run_error("x = len([1], x = 1)").kind is ErrorKind.TYPE_MISMATCH
    assert run_error("x = len()").kind is ErrorKind.INVALID_ARGUMENT_COUNT


def test_user_function_as_sort_key(run_interpreter):
    source = """
def last(pair):
    return pair[1]

RESULT = sorted([("a", 3), ("b", 1), ("c", 2)], key = last)
"""
    env = run_interpreter(source)
    assert to_python(env["RESULT"]) == [("b", 1), ("c", 2), ("a", 3)]


def test_sort_is_stable(run_interpreter):
    source = """
RESULT = sorted([("x", 1), ("y", 0), ("z", 1)], key = lambda p: p[1])
"""
    env = run_interpreter(source)
    assert to_python(env["RESULT"]) == [("y", 0), ("x", 1), ("z", 1)]
