#!/usr/bin/env python
# engine.py: declarations + serialization + duplication, and the akin CLI

"""
Top-level driver.

  run(tokens)     token sequence -> expanded text
  expand(source)  source text -> tokens -> expanded text

Example:

    let &ty = [u8, u16];
    impl Zero for *ty { fn zero() -> Self { 0 } }

expands to one impl per type.
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Iterable, Mapping, Sequence

from . import config
from .declarations import parse_declarations
from .duplicate import duplicate
from .errors import AkinError
from .lexer import tokenize
from .serializer import serialize
from .tokens import Token, dump

log = logging.getLogger(__name__)

__all__ = [
    "run",
    "expand",
    "main",
]


def run(tokens: Iterable[Token], prelude: Mapping[str, Sequence[str]] | None = None) -> str:
    """
    Expand a token sequence.

    Leading `let &...;` declarations build the variable table (on top of
    prelude, if given); the remaining tokens are serialized and duplicated
    once per slot. Empty input gives empty output.
    """
    tokens = list(tokens)
    if not tokens:
        return ""
    table, rest = parse_declarations(tokens, prelude)
    template = serialize(rest)
    log.debug("run: %d variables, template of %d chars", len(table), len(template))
    return duplicate(template, table)


def expand(source: str, prelude: Mapping[str, Sequence[str]] | None = None) -> str:
    """Tokenize source text, then run()."""
    return run(tokenize(source), prelude)


# ============================================================
# Selftest
# ============================================================

def _selftest() -> None:
    assert expand("") == ""
    assert expand("let &var = [1, 2, 3]; x += *var;") == "x += 1 ;x += 2 ;x += 3 ;"
    assert expand("let &a = [1, 2, 3, 4]; let &b = [3, 2]; *a+*b,") == (
        "1 +3 ,2 +2 ,3 +2 ,4 +2 ,"
    )
    assert expand("let &v = [x, NONE]; [*v]") == "[x][]"
    assert expand("let &foo = [wrong]; let &foobar = [correct]; *foobar") == "correct"
    assert expand("let &n = 0..3; *n") == "012"
    assert expand("let &n = 0..=3; *n") == "0123"
    assert expand("let &a = [1, 2]; let &b = { f(*a); }; *b") == "f (1) ;f (2) ;"
    assert expand("fn main() {}") == "fn main () {}"
    assert expand("let &t = [u8]; x_~*t") == "x_u8"
    print("selftest: OK")


# ============================================================
# CLI
# ============================================================

def _read_source(args, ap: argparse.ArgumentParser) -> str:
    if args.src is not None:
        return args.src
    if args.path is None:
        ap.error("a source path (or -) is required unless --src or --selftest is given")
    if args.path == "-":
        return sys.stdin.read()
    with open(args.path, "r", encoding="utf-8") as f:
        return f.read()


def _build_prelude(args) -> dict[str, tuple[str, ...]]:
    table = config.load_prelude(args.prelude) if args.prelude else {}
    entries = dict(config.parse_let(kv) for kv in args.let)
    # --let entries may refer to prelude file entries
    return config.build_prelude(entries, base=table)


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(
        description="Duplicate a code template once per value of its `let &name = [...]` variables."
    )
    ap.add_argument("path", nargs="?", help="Source file, or - for stdin")
    ap.add_argument("--src", help="Inline source text instead of a file")
    ap.add_argument("--prelude", help="YAML file of predeclared variables (name: [values])")
    ap.add_argument(
        "--let",
        action="append",
        default=[],
        metavar="NAME=EXPR",
        help="Predeclare a variable; EXPR is a list, range(...) or scalar. Repeatable.",
    )
    ap.add_argument("--tokens", action="store_true", help="Print the token tree and exit")
    ap.add_argument("--serialize", action="store_true", help="Print serialized text, no duplication")
    ap.add_argument("--table", action="store_true", help="Print the parsed variable table")
    ap.add_argument("--selftest", action="store_true", help="Run selftest and exit")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging to stderr")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.selftest:
        _selftest()
        return 0

    source = _read_source(args, ap)

    try:
        prelude = _build_prelude(args)
        tokens = tokenize(source)

        if args.tokens:
            for line in dump(tokens):
                print(line)
            return 0

        if args.serialize:
            print(serialize(tokens))
            return 0

        if args.table:
            table, _ = parse_declarations(tokens, prelude)
            for name, variants in table.items():
                print(f"{name}: {list(variants)}")
            return 0

        print(run(tokens, prelude))
    except AkinError as e:
        print(f"akin error: {e}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
