from __future__ import annotations

import pytest

from pystarlark import syntax as S
from pystarlark.code import ModuleCode, parse_expression, parse_module


@pytest.mark.parametrize(
    "source",
    [
        "while True:\n    pass",
        "class A:\n    pass",
        "import os",
        "from os import path",
        "x = 2 ** 3",
        "x = 1 < 2 < 3",
        "x = a is None",
        'x = f"{a}"',
        "x = {1, 2}",
        "try:\n    pass\nexcept E:\n    pass",
        "def f(*, a):\n    pass",
        "def f(a, /):\n    pass",
        "def f(a: int):\n    pass",
        "@d\ndef f():\n    pass",
        "x: int = 1",
        "del x",
        "global x",
        "(y := 1)",
        "for x in []:\n    pass\nelse:\n    pass",
        "x = [*a]",
        "x = {**a}",
        "a = b = 1",
        "x = [1][0:1] = 2",
        "with f():\n    pass",
        "x = yield 1",
        "async def f():\n    pass",
        "x = a @ b",
        "assert x",
        "raise x",
        'def f():\n    load("m", "x")',
        'load(name, "x")',
        'load("m")',
        'x = load("m", "x")',
        'load("m", name)',
    ],
)
def test_unsupported_constructs_are_syntax_errors(source):
    with pytest.raises(SyntaxError):
        parse_module(source)


def test_syntax_error_points_at_the_construct():
    with pytest.raises(SyntaxError) as excinfo:
        parse_module("x = 1\nwhile x:\n    pass", filename="build.star")
    err = excinfo.value
    assert err.filename == "build.star"
    assert err.lineno == 2
    assert "not supported" in err.msg


def test_host_parse_errors_are_syntax_errors():
    with pytest.raises(SyntaxError):
        parse_module("def f(:\n")


def test_module_lowering():
    module = parse_module("x = 1\nif x:\n    y = 2\nelif x > 3:\n    y = 3\nelse:\n    y = 4")
    assert isinstance(module, S.Module)
    assign, conditional = module.statements
    assert isinstance(assign, S.Assign)
    assert isinstance(assign.target, S.Identifier)
    assert isinstance(conditional, S.If)
    assert len(conditional.branches) == 2
    assert len(conditional.else_body) == 1


def test_negative_int_literal_is_folded():
    node = parse_expression("-9223372036854775808")
    assert isinstance(node, S.Literal)
    assert node.value == -(2**63)


def test_boolean_chains_nest_to_the_left():
    node = parse_expression("a and b and c")
    assert isinstance(node, S.Binary)
    assert node.op == "and"
    assert isinstance(node.left, S.Binary)
    assert isinstance(node.right, S.Identifier)


def test_call_arguments_keep_source_order():
    node = parse_expression("f(1, *a, k = 2, **kw)")
    kinds = [argument.kind for argument in node.arguments]
    assert kinds == [
        S.ArgumentKind.POSITIONAL,
        S.ArgumentKind.STAR,
        S.ArgumentKind.KEYWORD,
        S.ArgumentKind.STAR_STAR,
    ]


def test_load_statement_lowering():
    module = parse_module('load("lib", "a", b = "c")')
    (load,) = module.statements
    assert isinstance(load, S.Load)
    assert load.module == "lib"
    assert list(load.symbols) == [("a", "a"), ("b", "c")]


def test_module_code_keeps_source_and_tree():
    code = ModuleCode("x = 1", "demo.star")
    assert code.source == "x = 1"
    assert code.filename == "demo.star"
    assert code.expression is None
    assert len(code.module.statements) == 1
