from __future__ import annotations

import pytest

from pystarlark import ErrorKind


@pytest.mark.parametrize(
    ("expr", "expected"),
    [
        ('"%(x)s" % {"x": "v"}', "v"),
        ('"%%d %d" % 1', "%d 1"),
        ('"%s and %r" % ("a", "b")', 'a and "b"'),
        ('"%5.2f|%-4d|%x|%X|%o" % (3.14159, 7, 255, 255, 8)', " 3.14|7   |ff|FF|10"),
        ('"%c%c" % (72, "i")', "Hi"),
        ('"%s-%s" % [1, 2]', "1-2"),
        ('"%s" % ([1, 2],)', "[1, 2]"),
        ('"%s" % ((1, 2),)', "(1, 2)"),
        ('"%d" % 3.9', "3"),
    ],
)
def test_percent_format(expr, expected, run_interpreter):
    env = run_interpreter(f"RESULT = {expr}")
    assert env["RESULT"] == expected


@pytest.mark.parametrize(
    ("expr", "kind"),
    [
        ('"%d" % (1, 2)', ErrorKind.INVALID_ARGUMENT_COUNT),
        ('"%d %d" % 1', ErrorKind.INVALID_ARGUMENT_COUNT),
        ('"%s" % [1, 2]', ErrorKind.INVALID_ARGUMENT_COUNT),
        ('"%d" % "a"', ErrorKind.TYPE_MISMATCH),
        ('"%q" % 1', ErrorKind.INVALID_LITERAL),
        ('"%(x)s" % (1,)', ErrorKind.TYPE_MISMATCH),
        ('"%(x)s" % {}', ErrorKind.INDEX_OUT_OF_RANGE),
    ],
)
def test_percent_format_errors(expr, kind, run_error):
    assert run_error(f"x = {expr}").kind is kind


@pytest.mark.parametrize(
    ("expr", "expected"),
    [
        ('"{}-{}".format(1, "a")', "1-a"),
        ('"{1}{0}".format("a", "b")', "ba"),
        ('"{0}{name}".format(1, name = "a")', "1a"),
        ('"{{}}{}".format(5)', "{}5"),
        ('"{}".format([1, "a"])', '[1, "a"]'),
        ('"{}".format(None)', "None"),
    ],
)
def test_brace_format(expr, expected, run_interpreter):
    env = run_interpreter(f"RESULT = {expr}")
    assert env["RESULT"] == expected


@pytest.mark.parametrize(
    ("expr", "kind"),
    [
        ('"{}{0}".format(1, 2)', ErrorKind.INVALID_LITERAL),
        ('"{0}{}".format(1, 2)', ErrorKind.INVALID_LITERAL),
        ('"{x!r}".format(x = 1)', ErrorKind.INVALID_LITERAL),
        ('"{:>5}".format(1)', ErrorKind.INVALID_LITERAL),
        ('"{3}".format(1)', ErrorKind.INDEX_OUT_OF_RANGE),
        ('"{}{}".format(1)', ErrorKind.INDEX_OUT_OF_RANGE),
        ('"{missing}".format()', ErrorKind.UNDEFINED_NAME),
        ('"{".format()', ErrorKind.INVALID_LITERAL),
        ('"}".format()', ErrorKind.INVALID_LITERAL),
    ],
)
def test_brace_format_errors(expr, kind, run_error):
    assert run_error(f"x = {expr}").kind is kind


@pytest.mark.parametrize(
    ("expr", "expected"),
    [
        ('repr("a\\nb")', '"a\\nb"'),
        ('str([1, "a", None, True])', '[1, "a", None, True]'),
        ("str((1,))", "(1,)"),
        ('str({"a": (1, 2)})', '{"a": (1, 2)}'),
        ("str(set([1, 2]))", "set([1, 2])"),
        ("str(range(3))", "range(0, 3)"),
        ("str(range(1, 9, 2))", "range(1, 9, 2)"),
        ('repr(b"a\\x00")', 'b"a\\x00"'),
        ("str(1.0)", "1.0"),
        ('str(float("inf"))', "+inf"),
        ('str(float("-inf"))', "-inf"),
        ('str(float("nan"))', "nan"),
        ('str("plain")', "plain"),
        ('repr("q\\"uote")', '"q\\"uote"'),
        ('str("ab".elems())', '"ab".elems()'),
    ],
)
def test_str_and_repr(expr, expected, run_interpreter):
    env = run_interpreter(f"RESULT = {expr}")
    assert env["RESULT"] == expected


def test_function_reprs(run_interpreter):
    source = """
def f():
    pass

RESULT = [str(f), str(len), str("".upper), str(lambda: 1)]
"""
    env = run_interpreter(source)
    assert env["RESULT"].items == [
        "<function f>",
        "<built-in function len>",
        "<built-in method upper of string value>",
        "<function lambda>",
    ]


def test_self_referential_values_fail_to_format(run_error):
    assert run_error("x = [1]\nx.append(x)\ns = repr(x)").kind is ErrorKind.RECURSION_LIMIT
    assert run_error('d = {}\nd["self"] = d\ns = str(d)').kind is ErrorKind.RECURSION_LIMIT


def test_self_referential_values_fail_to_compare(run_error):
    source = """
a = [1]
a.append(a)
b = [1]
b.append(b)
c = a == b
"""
    assert run_error(source).kind is ErrorKind.RECURSION_LIMIT


def test_shared_but_acyclic_values_format_normally(run_interpreter):
    env = run_interpreter("x = [1]\ny = [x, x]\ns = str(y)")
    assert env["s"] == "[[1], [1]]"
