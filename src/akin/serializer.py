# -------------------------------------
# token sequence -> text
# -------------------------------------
"""
Serializer: flattens a (nested) token sequence into text.

Spacing policy:
  - first token of a stream: no leading space
  - token after a joint Punct, after the sigil "*" or after the joint
    modifier "~": no leading space
  - every other token: exactly one leading space
  - "~" itself emits nothing

Visible groups start a fresh stream for their children; NONE groups are
invisible and continue the enclosing one.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List

from . import config
from .tokens import Delimiter, Group, Ident, Literal, Punct, Token


@dataclass
class Cursor:
    """Previous-token state threaded through serialization."""
    started: bool = False
    adjacent: bool = False

    def separator(self) -> str:
        sep = " " if self.started and not self.adjacent else ""
        self.started = True
        self.adjacent = False
        return sep


def _serialize_into(tokens: Iterable[Token], cursor: Cursor, out: List[str]) -> None:
    for tok in tokens:
        if isinstance(tok, Group):
            if tok.delimiter is Delimiter.NONE:
                _serialize_into(tok.children, cursor, out)
                continue
            out.append(cursor.separator())
            out.append(tok.delimiter.open)
            _serialize_into(tok.children, Cursor(), out)
            out.append(tok.delimiter.close)
        elif isinstance(tok, Punct):
            if tok.char == config.JOINT_MODIFIER:
                cursor.adjacent = True
                continue
            out.append(cursor.separator())
            out.append(tok.char)
            cursor.adjacent = tok.joint or tok.char == config.SIGIL
        elif isinstance(tok, (Ident, Literal)):
            out.append(cursor.separator())
            out.append(tok.text)
        else:
            raise TypeError(f"not a token: {tok!r}")


def serialize(tokens: Iterable[Token], cursor: Cursor | None = None) -> str:
    """Serialize tokens to flat text; pass a cursor to continue a stream."""
    out: List[str] = []
    _serialize_into(tokens, Cursor() if cursor is None else cursor, out)
    return "".join(out)
