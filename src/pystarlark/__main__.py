import argparse
import sys
from pathlib import Path

from .main import Interpreter


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m pystarlark",
        usage="python -m pystarlark <script.star>",
    )
    parser.add_argument("script")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args_list = sys.argv[1:] if argv is None else argv
    try:
        args = parser.parse_args(args_list)
    except SystemExit as exc:
        return int(exc.code)

    script_path = Path(args.script).resolve()
    if not script_path.is_file():
        print(f"pystarlark: script not found: {script_path}", file=sys.stderr)
        return 2

    source = script_path.read_text()
    interpreter = Interpreter()
    env = interpreter.make_default_env()
    try:
        result = interpreter.run(source, env, filename=str(script_path))
    except SyntaxError as exc:
        print(f"SyntaxError: {exc.msg} ({exc.filename}, line {exc.lineno})", file=sys.stderr)
        return 1
    if result.exception is not None:
        print(str(result.exception), file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
