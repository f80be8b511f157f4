# -------------------------------------
# akin shared configuration
# -------------------------------------
"""
Shared configuration for the duplication engine:
- sentinel vocabulary (let, &, *, NONE, ~)
- prelude variables: a table that exists before the first `let`,
  loaded from YAML or from NAME=EXPR strings
"""
from __future__ import annotations

import ast
import logging
import operator as op
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import yaml
from simpleeval import EvalWithCompoundTypes

from .duplicate import VariableTable, resolve
from .errors import PreludeError

log = logging.getLogger(__name__)


# ============================================================
# Sentinel vocabulary
# ============================================================

LET_KEYWORD = "let"
DECL_SIGIL = "&"
SIGIL = "*"
NONE_KEYWORD = "NONE"
JOINT_MODIFIER = "~"

U64_MAX = 2**64 - 1


def key(name: str) -> str:
    """Table key for a variable name: the name with its reference sigil."""
    return name if name.startswith(SIGIL) else f"{SIGIL}{name}"


# ============================================================
# Prelude values
# ============================================================

def _to_variants(v: Any) -> list[str]:
    if v is None:
        return [""]
    if isinstance(v, bytes):
        return [v.decode()]
    if isinstance(v, str):
        return [v]
    if isinstance(v, bool):
        return [str(v).lower()]
    if isinstance(v, (int, float)):
        return [str(v)]
    if isinstance(v, Mapping):
        raise PreludeError(f"mapping is not a valid variable value: {v!r}")
    if isinstance(v, Iterable):
        out: list[str] = []
        for x in v:
            if isinstance(x, (list, tuple, Mapping)):
                raise PreludeError(f"nested value is not a valid variant: {x!r}")
            out.extend(_to_variants(x))
        return out
    return [str(v)]


def build_prelude(
    entries: Mapping[str, Any], base: Mapping[str, tuple[str, ...]] | None = None
) -> VariableTable:
    """
    Turn name -> value(s) into a resolved variable table.

    Entries are resolved in order, each against the ones before it,
    the same way `let` declarations are. Entries of base come first.
    """
    table: VariableTable = dict(base or {})
    for name, value in entries.items():
        name = str(name).strip()
        if not name.lstrip(SIGIL).isidentifier():
            raise PreludeError(f"invalid variable name: {name!r}")
        variants = _to_variants(value)
        if not variants:
            raise PreludeError(f"variable {name!r} has no values")
        table[key(name)] = tuple(resolve(v, table) for v in variants)
        log.debug("prelude %s: %d variants", key(name), len(variants))
    return table


# ============================================================
# YAML prelude files
# ============================================================

_PRELUDE_CACHE: dict[str, VariableTable] = {}


def load_prelude(path: str | Path) -> VariableTable:
    """
    Load a YAML prelude file: a mapping of name -> list | scalar.

    Results are cached per resolved path.
    """
    path = Path(path)
    path_str = str(path.resolve())
    if path_str in _PRELUDE_CACHE:
        return dict(_PRELUDE_CACHE[path_str])

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise PreludeError(f"invalid YAML in prelude '{path}': {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise PreludeError(f"prelude '{path}' must be a mapping of name -> values")

    table = build_prelude(data)
    _PRELUDE_CACHE[path_str] = table
    return dict(table)


def clear_cache() -> None:
    """Clear the prelude cache."""
    _PRELUDE_CACHE.clear()


# ============================================================
# NAME=EXPR prelude entries (simpleeval)
# ============================================================

ALLOWED_OPS = {
    ast.Add: op.add,
    ast.Sub: op.sub,
    ast.Mult: op.mul,
    ast.FloorDiv: op.floordiv,
    ast.Mod: op.mod,
    ast.USub: op.neg,
}

FUNCS: dict[str, object] = {
    "range": range,
    "str": str,
    "len": len,
}


def parse_let(text: str) -> tuple[str, list[str]]:
    """
    Parse NAME=EXPR into (name, variants).

      ty=["u8","u16"]   -> ("ty", ["u8", "u16"])
      n=range(3)        -> ("n", ["0", "1", "2"])
      x=2*21            -> ("x", ["42"])
    """
    if "=" not in text:
        raise PreludeError(f"expected NAME=EXPR, got {text!r}")
    name, expr = text.split("=", 1)
    name = name.strip()
    if not name.isidentifier():
        raise PreludeError(f"invalid variable name: {name!r}")
    se = EvalWithCompoundTypes(names={}, functions=FUNCS, operators=ALLOWED_OPS)
    try:
        value = se.eval(expr.strip())
    except Exception as e:
        raise PreludeError(f"cannot evaluate {expr.strip()!r}: {e}") from e
    return name, _to_variants(value)
