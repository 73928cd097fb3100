from __future__ import annotations

import sys
from pathlib import Path

# Allow importing the package when running plain `pytest` without an editable install.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if SRC.exists():
    sys.path.insert(0, str(SRC))

import pytest

from pystarlark import Interpreter


@pytest.fixture
def run_result():
    def _run(
        source: str,
        *,
        predeclared=None,
        modules=None,
        print_fn=None,
        options=None,
        filename: str = "<test>",
    ):
        interpreter = Interpreter()
        env = interpreter.make_default_env(
            predeclared=predeclared, modules=modules, print_fn=print_fn
        )
        return interpreter.run(source, env, filename=filename, options=options)

    return _run


@pytest.fixture
def run_interpreter(run_result):
    def _run(source: str, **kwargs):
        result = run_result(source, **kwargs)
        result.raise_for_exception()
        return result.globals

    return _run


@pytest.fixture
def run_error(run_result):
    """Run a script that must fail and return the captured error."""

    def _run(source: str, **kwargs):
        result = run_result(source, **kwargs)
        assert result.exception is not None, "expected the script to fail"
        return result.exception

    return _run
