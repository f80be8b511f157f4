# -------------------------------------
# token model
# -------------------------------------
"""
Token model consumed by the engine.

  - Ident(text)
  - Literal(text)          numeric or quoted constant, verbatim
  - Punct(char, joint)     joint=True: no space before the next token
  - Group(delimiter, children)

Spans are diagnostics only and never take part in equality.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence, Union


@dataclass(frozen=True)
class Span:
    line: int
    column: int


class Delimiter(Enum):
    PAREN = ("(", ")")
    BRACE = ("{", "}")
    BRACKET = ("[", "]")
    NONE = ("", "")

    @property
    def open(self) -> str:
        return self.value[0]

    @property
    def close(self) -> str:
        return self.value[1]


@dataclass(frozen=True)
class Ident:
    text: str
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Literal:
    text: str
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Punct:
    char: str
    joint: bool = False
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Group:
    delimiter: Delimiter
    children: tuple = ()
    span: Span | None = field(default=None, compare=False, repr=False)


Token = Union[Ident, Literal, Punct, Group]


def is_ident(tok, text: str | None = None) -> bool:
    return isinstance(tok, Ident) and (text is None or tok.text == text)


def is_punct(tok, char: str | None = None) -> bool:
    return isinstance(tok, Punct) and (char is None or tok.char == char)


def is_group(tok, delimiter: Delimiter | None = None) -> bool:
    return isinstance(tok, Group) and (delimiter is None or tok.delimiter == delimiter)


def group(delimiter: Delimiter, *children: Token) -> Group:
    """Convenience constructor: group(Delimiter.BRACKET, Literal("1"), ...)."""
    return Group(delimiter, tuple(children))


def dump(tokens: Sequence[Token], indent: int = 0) -> list[str]:
    """Render a token tree one token per line, groups indented."""
    pad = "  " * indent
    out: list[str] = []
    for tok in tokens:
        if isinstance(tok, Group):
            out.append(f"{pad}GROUP {tok.delimiter.name}")
            out.extend(dump(tok.children, indent + 1))
        elif isinstance(tok, Punct):
            out.append(f"{pad}PUNCT {tok.char!r}{' joint' if tok.joint else ''}")
        elif isinstance(tok, Ident):
            out.append(f"{pad}IDENT {tok.text!r}")
        else:
            out.append(f"{pad}LIT   {tok.text!r}")
    return out
