from __future__ import annotations

import pytest

from pystarlark import (
    Environment,
    ErrorKind,
    ExecutionGuard,
    Interpreter,
    NativeFunction,
    StarlarkError,
    StarlarkList,
    to_python,
)
from pystarlark import syntax as S


def test_run_requires_an_environment():
    interpreter = Interpreter()
    with pytest.raises(TypeError):
        interpreter.run("RESULT = 1", env=None)
    with pytest.raises(TypeError):
        interpreter.run("RESULT = 1", env={})


def test_bare_environment_has_no_builtins():
    interpreter = Interpreter()
    result = interpreter.run("x = len([])", Environment())
    assert result.exception.kind is ErrorKind.UNDEFINED_NAME


def test_default_env_provides_builtins_but_no_globals():
    interpreter = Interpreter()
    env = interpreter.make_default_env()
    assert env.globals == {}
    assert "len" in env.builtins
    assert "fail" in env.builtins
    assert isinstance(env.builtins["len"], NativeFunction)


def test_environments_do_not_share_state():
    interpreter = Interpreter()
    first = interpreter.make_default_env(predeclared={"answer": 42})
    second = interpreter.make_default_env()
    interpreter.run("x = answer", first).raise_for_exception()
    result = interpreter.run("y = answer", second)
    assert result.exception.kind is ErrorKind.UNDEFINED_NAME
    assert "x" not in second.globals


def test_globals_shadow_builtins_per_environment(run_interpreter):
    env = run_interpreter("def len(x):\n    return -1\nRESULT = len([1, 2])")
    assert env["RESULT"] == -1
    assert run_interpreter("RESULT = len([1, 2])")["RESULT"] == 2


def test_predeclared_host_function(run_interpreter):
    def double(args, kwargs):
        return args[0] * 2

    env = run_interpreter("RESULT = double(21)", predeclared={"double": double})
    assert env["RESULT"] == 42


def test_host_function_can_raise_language_errors(run_error):
    def check(args, kwargs):
        raise StarlarkError(ErrorKind.TYPE_MISMATCH, "bad input")

    err = run_error("check()", predeclared={"check": check})
    assert str(err) == "TypeMismatch: bad input"


def test_host_bugs_propagate_to_the_host(run_result):
    def boom(args, kwargs):
        raise RuntimeError("host bug")

    with pytest.raises(RuntimeError, match="host bug"):
        run_result("boom()", predeclared={"boom": boom})


def test_load_binds_module_symbols(run_interpreter):
    modules = {
        "lib": {
            "VERSION": "1.2",
            "flags": StarlarkList(["-O2"]),
            "shout": lambda args, kwargs: args[0].upper(),
        }
    }
    source = """
load("lib", "VERSION", "shout", opts = "flags")
RESULT = (VERSION, shout("hi"), opts[0])
"""
    env = run_interpreter(source, modules=modules)
    assert env["RESULT"] == ("1.2", "HI", "-O2")
    assert "flags" not in env


def test_plain_python_containers_become_runtime_values(run_interpreter):
    source = """
load("lib", "defaults")
items.append(4)
RESULT = (
    [x * 2 for x in items],
    items[0],
    options["mode"],
    sorted(options.keys()),
    pair == (1, [2]),
    2 in tags,
    defaults["flags"] + ["-g"],
    type(items),
    type(options),
)
"""
    env = run_interpreter(
        source,
        predeclared={
            "items": [1, 2, 3],
            "options": {"mode": "fast", "level": 2},
            "pair": (1, [2]),
            "tags": {1, 2},
        },
        modules={"lib": {"defaults": {"flags": ["-O2"]}}},
    )
    assert to_python(env["RESULT"]) == (
        [2, 4, 6, 8],
        1,
        "fast",
        ["level", "mode"],
        True,
        True,
        ["-O2", "-g"],
        "list",
        "dict",
    )


@pytest.mark.parametrize(
    "source",
    ['load("missing", "x")', 'load("lib", "nope")'],
)
def test_load_failures(source, run_error):
    err = run_error(source, modules={"lib": {"x": 1}})
    assert err.kind is ErrorKind.UNDEFINED_MODULE_OR_SYMBOL


def test_print_goes_to_the_host_callback(run_interpreter):
    lines = []
    run_interpreter(
        'print("a", 1, [2], None)\nprint("x", "y", sep = "-")', print_fn=lines.append
    )
    assert lines == ["a 1 [2] None", "x-y"]


def test_print_defaults_to_stdout(run_interpreter, capsys):
    run_interpreter('print("hello")')
    assert capsys.readouterr().out == "hello\n"


def test_eval_expression_uses_environment():
    interpreter = Interpreter()
    env = interpreter.make_default_env()
    interpreter.run("base = [1, 2]", env).raise_for_exception()
    assert interpreter.eval_expression("len(base) + 1", env) == 3
    with pytest.raises(StarlarkError) as excinfo:
        interpreter.eval_expression("missing", env)
    assert excinfo.value.kind is ErrorKind.UNDEFINED_NAME
    with pytest.raises(SyntaxError):
        interpreter.eval_expression("x = 1", env)


def test_exec_module_runs_a_prebuilt_tree():
    interpreter = Interpreter()
    env = interpreter.make_default_env()
    module = S.Module(
        [
            S.Assign(S.Identifier("x"), S.Binary("+", S.Literal(1), S.Literal(2))),
            S.ExprStmt(S.Identifier("x")),
        ]
    )
    assert interpreter.exec_module(module, env, ExecutionGuard()) == 3
    assert env.globals["x"] == 3


def test_raise_for_exception():
    interpreter = Interpreter()
    result = interpreter.run("x = 1 // 0", interpreter.make_default_env())
    assert not result.ok
    with pytest.raises(StarlarkError) as excinfo:
        result.raise_for_exception()
    assert excinfo.value.kind is ErrorKind.ZERO_DIVISION


def test_globals_assigned_before_an_error_are_kept(run_result):
    result = run_result("a = 1\nb = fail('stop')\nc = 3")
    assert result.exception.kind is ErrorKind.FAIL
    assert result.globals == {"a": 1}


def test_to_python_converts_nested_values(run_interpreter):
    env = run_interpreter('RESULT = {"a": [1, (2, set([3]))], "r": range(2)}')
    assert to_python(env["RESULT"]) == {"a": [1, (2, {3})], "r": range(0, 2)}
