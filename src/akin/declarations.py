# -------------------------------------
# let &name = <value-source>;
# -------------------------------------
"""
Declaration parser.

Consumes leading declarations of the form

    let &name = [v1, v2, ...];     one variant per list item
    let &name = { ... };           the block body as the only variant
    let &name = A..B;              A, A+1, ..., B-1
    let &name = A..=B;             A, A+1, ..., B

and builds the variable table, keyed by "*name". Every value is resolved
against the variables declared before it, so later declarations may use
earlier ones. A value that still mentions its own name or a later one is a
StructuralError.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Mapping, Optional, Sequence, Tuple

from . import config
from .duplicate import VariableTable, VariantList, references, resolve
from .errors import RangeSyntaxError, StructuralError
from .serializer import serialize
from .tokens import Delimiter, Group, Literal, Span, Token, is_group, is_ident, is_punct

log = logging.getLogger(__name__)

__all__ = [
    "Declaration",
    "TokenStream",
    "at_declaration",
    "parse_declaration",
    "parse_declarations",
    "parse_uint",
    "resolve",
]


_UINT_RE = re.compile(
    r"""
    ^(?:
        0x(?P<hex>[0-9A-Fa-f_]+)
      | 0o(?P<oct>[0-7_]+)
      | 0b(?P<bin>[01_]+)
      | (?P<dec>[0-9][0-9_]*)
    )
    (?:[ui](?:8|16|32|64|128|size))?$
    """,
    re.VERBOSE,
)


@dataclass(frozen=True)
class Declaration:
    key: str
    variants: VariantList
    span: Span | None = None


# ============================================================
# Token stream
# ============================================================

class TokenStream:
    """Forward-only cursor over a token sequence."""

    def __init__(self, tokens: Sequence[Token]):
        self.tokens = list(tokens)
        self.position = 0
        self.last_span: Span | None = None

    def peek(self, offset: int = 0) -> Optional[Token]:
        pos = self.position + offset
        return self.tokens[pos] if pos < len(self.tokens) else None

    def next(self) -> Optional[Token]:
        tok = self.peek()
        if tok is not None:
            self.position += 1
            if tok.span is not None:
                self.last_span = tok.span
        return tok

    def rest(self) -> List[Token]:
        return self.tokens[self.position:]

    def span_of(self, tok: Optional[Token]) -> Span | None:
        """Span of tok, or of the last consumed token when tok is missing."""
        if tok is not None and tok.span is not None:
            return tok.span
        return self.last_span


# ============================================================
# Value sources
# ============================================================

def _split_items(children: Sequence[Token]) -> List[List[Token]]:
    items: List[List[Token]] = [[]]
    for tok in children:
        if is_punct(tok, ","):
            items.append([])
        else:
            items[-1].append(tok)
    return items


def _list_values(grp: Group, table: VariableTable) -> VariantList:
    items = _split_items(grp.children)
    if items and not items[-1] and len(items) > 1:
        items.pop()  # trailing comma
    if len(items) == 1 and not items[0]:
        raise StructuralError("empty value list", grp.span)

    out: List[str] = []
    for run in items:
        if not run:
            raise StructuralError("empty item in value list", grp.span)
        if len(run) == 1 and is_group(run[0], Delimiter.BRACE):
            text = serialize(run[0].children)
        else:
            text = serialize(run)
        if text == config.NONE_KEYWORD:
            out.append("")
        else:
            out.append(resolve(text, table))
    return tuple(out)


def parse_uint(tok: Optional[Token], stream: TokenStream) -> int:
    """Unsigned 64-bit integer literal, or RangeSyntaxError."""
    span = stream.span_of(tok)
    if is_punct(tok, "-"):
        raise RangeSyntaxError("range bounds must not be negative", span)
    if not isinstance(tok, Literal):
        raise RangeSyntaxError("expected an unsigned integer range bound", span)
    m = _UINT_RE.match(tok.text)
    if not m:
        raise RangeSyntaxError(
            f"range bound {tok.text!r} is not an unsigned integer literal", span
        )
    try:
        if m.group("hex") is not None:
            value = int(m.group("hex").replace("_", ""), 16)
        elif m.group("oct") is not None:
            value = int(m.group("oct").replace("_", ""), 8)
        elif m.group("bin") is not None:
            value = int(m.group("bin").replace("_", ""), 2)
        else:
            value = int(m.group("dec").replace("_", ""), 10)
    except ValueError:
        raise RangeSyntaxError(f"range bound {tok.text!r} has no digits", span)
    if value > config.U64_MAX:
        raise RangeSyntaxError(f"range bound {tok.text!r} does not fit in 64 bits", span)
    return value


def _range_values(stream: TokenStream) -> VariantList:
    start = parse_uint(stream.next(), stream)

    dot1 = stream.next()
    if not is_punct(dot1, "."):
        raise RangeSyntaxError("expected `..` or `..=` after range start", stream.span_of(dot1))
    dot2 = stream.next()
    if not dot1.joint or not is_punct(dot2, "."):
        raise RangeSyntaxError("expected `..` or `..=` after range start", stream.span_of(dot2))
    inclusive = False
    if dot2.joint:
        eq = stream.next()
        if not is_punct(eq, "="):
            raise RangeSyntaxError("malformed range operator", stream.span_of(eq))
        inclusive = True

    end_tok = stream.next()
    end = parse_uint(end_tok, stream)
    stop = end + 1 if inclusive else end
    if stop <= start:
        raise RangeSyntaxError(f"empty range {start}..{'=' if inclusive else ''}{end}",
                               stream.span_of(end_tok))
    return tuple(str(i) for i in range(start, stop))


# ============================================================
# Declarations
# ============================================================

def at_declaration(stream: TokenStream) -> bool:
    return is_ident(stream.peek(0), config.LET_KEYWORD) and is_punct(
        stream.peek(1), config.DECL_SIGIL
    )


def parse_declaration(stream: TokenStream, table: VariableTable) -> Optional[Declaration]:
    """
    Parse one declaration at the stream's cursor and insert it into table.

    Returns None, consuming nothing, when the stream does not start with `let &`.
    """
    if not at_declaration(stream):
        return None
    stream.next()
    stream.next()

    name = stream.next()
    if not is_ident(name):
        raise StructuralError("expected variable name after `let &`", stream.span_of(name))
    eq = stream.next()
    if not is_punct(eq, "="):
        raise StructuralError(f"expected `=` after `let &{name.text}`", stream.span_of(eq))

    head = stream.peek()
    if is_group(head, Delimiter.BRACKET):
        stream.next()
        variants = _list_values(head, table)
    elif isinstance(head, Group):
        stream.next()
        variants = (resolve(serialize(head.children), table),)
    elif isinstance(head, Literal) or is_punct(head, "-"):
        variants = _range_values(stream)
    else:
        raise StructuralError(
            "expected `[...]`, a `{...}` block or an integer range", stream.span_of(head)
        )

    semi = stream.next()
    if not is_punct(semi, ";"):
        raise StructuralError("expected `;` after declaration", stream.span_of(semi))

    decl = Declaration(config.key(name.text), variants, name.span)
    table[decl.key] = decl.variants
    log.debug("declared %s: %d variants", decl.key, len(decl.variants))
    return decl


def _check_forward_references(decls: Sequence[Declaration]) -> None:
    for k, decl in enumerate(decls):
        later = {d.key: ("",) for d in decls[k:]}
        for variant in decl.variants:
            refs = references(variant, later)
            if refs:
                raise StructuralError(
                    f"`{decl.key}` refers to `{refs[0]}`, which is not declared before it",
                    decl.span,
                )


def parse_declarations(
    tokens: Sequence[Token], prelude: Mapping[str, Sequence[str]] | None = None
) -> Tuple[VariableTable, List[Token]]:
    """
    Parse every leading declaration.

    Returns the final variable table (prelude entries first) and the
    remaining template tokens.
    """
    table: VariableTable = {k: tuple(v) for k, v in (prelude or {}).items()}
    stream = TokenStream(tokens)
    decls: List[Declaration] = []
    while True:
        decl = parse_declaration(stream, table)
        if decl is None:
            break
        decls.append(decl)
    _check_forward_references(decls)
    return table, stream.rest()
