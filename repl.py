import argparse
import logging
import sys
from typing import Iterable, TextIO

from mathrepl.evaluator import evaluate_line
from mathrepl.symbols import SymbolTable, SymbolTableFull, default_symbols
from mathrepl.tokenizer import TokenType, next_token
from mathrepl.value import Error, Real, Value

__version__ = "0.1.0"


def format_value(value: Value) -> str:
    if isinstance(value, Real):
        return f"= {value.v:f}"
    elif isinstance(value, Error):
        return value.render()
    else:
        return ""


def _definition(s: str) -> tuple[str, float]:
    name, sep, number = s.partition("=")
    name = name.strip()
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"expected NAME=VALUE, got {s!r}")
    token, end = next_token(name, 0)
    if token.type is not TokenType.IDENTIFIER or end != len(name):
        raise argparse.ArgumentTypeError(f"not a valid identifier: {name!r}")
    try:
        return name, float(number)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {number!r}")


def _read_lines(stream: TextIO) -> Iterable[str]:
    if stream.isatty():
        while True:
            try:
                yield input("> ")
            except EOFError:
                return
    else:
        yield from stream


def run(lines: Iterable[str], symbols: SymbolTable, out: TextIO) -> bool:
    """Evaluates and prints every non-blank line; returns False if any of them failed"""
    ok = True
    for line in lines:
        if not line.strip():
            continue
        result = evaluate_line(symbols, line)
        if isinstance(result, Error):
            ok = False
        print(format_value(result), file=out)
    return ok


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="mathrepl", description="line-at-a-time arithmetic evaluator")
    parser.add_argument(
        "-e", "--expression", action="append", default=[], help="evaluate EXPRESSION instead of reading stdin"
    )
    parser.add_argument(
        "-D",
        "--define",
        action="append",
        default=[],
        type=_definition,
        metavar="NAME=VALUE",
        help="add a named constant",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="log evaluation steps to stderr")
    parser.add_argument("--version", action="version", version=f"mathrepl {__version__}")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    symbols = default_symbols()
    for name, number in args.define:
        try:
            symbols.set(name, Real(number))
        except SymbolTableFull as e:
            parser.error(str(e))

    if args.expression:
        return 0 if run(args.expression, symbols, sys.stdout) else 1

    run(_read_lines(sys.stdin), symbols, sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
