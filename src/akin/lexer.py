# -------------------------------------
# source text -> token tree
# -------------------------------------
"""
Lexer for C/Rust-like source text.

Produces the token model the engine consumes:
  - identifiers (and raw identifiers r#name)
  - literals: numbers, strings, raw/byte strings, chars
  - punctuation, one character per Punct, joint when the next character
    is punctuation too
  - (), [], {} groups, nested

Lifetimes ('a) become Punct("'", joint=True) followed by Ident("a").
"""
from __future__ import annotations

import re
from typing import List, Optional, Tuple

from .errors import LexError
from .tokens import Delimiter, Group, Ident, Literal, Punct, Span, Token

PUNCT_CHARS = set("=<>!~+-*/%^&|@.,;:#$?")

_OPENERS = {"(": Delimiter.PAREN, "[": Delimiter.BRACKET, "{": Delimiter.BRACE}
_CLOSERS = {")": Delimiter.PAREN, "]": Delimiter.BRACKET, "}": Delimiter.BRACE}

_IDENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_NUMBER_RE = re.compile(
    r"""
    0x[0-9A-Fa-f_]+[A-Za-z0-9_]*       # hex (suffix allowed)
  | 0o[0-7_]+[A-Za-z0-9_]*             # octal
  | 0b[01_]+[A-Za-z0-9_]*              # binary
  | [0-9][0-9_]*
    (?:\.(?![.A-Za-z_])[0-9_]*)?       # fraction, but not `..` or `1.method`
    (?:[eE][+-]?[0-9_]+)?              # exponent
    (?:[A-Za-z_][A-Za-z0-9_]*)?        # type suffix
    """,
    re.VERBOSE,
)
_RAW_STR_RE = re.compile(r'(b?r)(#*)"')


class Lexer:
    """Single-pass scanner with line/column tracking."""

    def __init__(self, source: str):
        self.source = source
        self.position = 0
        self.line = 1
        self.column = 1

    # --- low-level cursor ---

    def peek(self, offset: int = 0) -> Optional[str]:
        pos = self.position + offset
        if pos >= len(self.source):
            return None
        return self.source[pos]

    def advance(self, count: int = 1) -> str:
        text = self.source[self.position:self.position + count]
        for ch in text:
            if ch == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
        self.position += len(text)
        return text

    def span(self) -> Span:
        return Span(self.line, self.column)

    def error(self, message: str, span: Span | None = None) -> LexError:
        return LexError(message, span or self.span())

    # --- skipping ---

    def skip_trivia(self) -> None:
        while True:
            ch = self.peek()
            if ch is None:
                return
            if ch.isspace():
                self.advance()
            elif ch == "/" and self.peek(1) == "/":
                while self.peek() is not None and self.peek() != "\n":
                    self.advance()
            elif ch == "/" and self.peek(1) == "*":
                self.skip_block_comment()
            else:
                return

    def skip_block_comment(self) -> None:
        start = self.span()
        self.advance(2)
        depth = 1
        while depth:
            if self.peek() is None:
                raise self.error("unterminated block comment", start)
            if self.peek() == "/" and self.peek(1) == "*":
                self.advance(2)
                depth += 1
            elif self.peek() == "*" and self.peek(1) == "/":
                self.advance(2)
                depth -= 1
            else:
                self.advance()

    # --- literal readers ---

    def read_quoted(self, quote: str, start: Span, prefix: str = "") -> Literal:
        """Read "..." or '...' with backslash escapes, verbatim."""
        buf = [prefix, self.advance()]
        while True:
            ch = self.peek()
            if ch is None:
                raise self.error("unterminated string literal", start)
            if ch == "\\":
                buf.append(self.advance(2))
                continue
            buf.append(self.advance())
            if ch == quote:
                return Literal("".join(buf), start)

    def read_raw_string(self, start: Span) -> Optional[Literal]:
        m = _RAW_STR_RE.match(self.source, self.position)
        if not m:
            return None
        hashes = m.group(2)
        close = '"' + hashes
        end = self.source.find(close, m.end())
        if end < 0:
            raise self.error("unterminated raw string literal", start)
        text = self.advance(end + len(close) - self.position)
        return Literal(text, start)

    def read_char_or_lifetime(self, start: Span) -> List[Token]:
        # 'a' / '\n' are chars, 'a followed by anything else is a lifetime
        if self.peek(1) == "\\":
            return [self.read_quoted("'", start)]
        if self.peek(1) is not None and self.peek(2) == "'":
            return [Literal(self.advance(3), start)]
        m = _IDENT_RE.match(self.source, self.position + 1)
        if m:
            self.advance()
            tick = Punct("'", True, start)
            name_span = self.span()
            return [tick, Ident(self.advance(m.end() - m.start()), name_span)]
        raise self.error("unterminated character literal", start)

    # --- main loop ---

    def next_tokens(self) -> List[Token]:
        """Read the next non-group token(s) at the cursor."""
        start = self.span()
        ch = self.peek()

        if ch in ("r", "b"):
            raw = self.read_raw_string(start)
            if raw is not None:
                return [raw]
            if ch == "b" and self.peek(1) in ('"', "'"):
                self.advance()
                return [self.read_quoted(self.peek(), start, prefix="b")]
            if ch == "r" and self.peek(1) == "#":
                m = _IDENT_RE.match(self.source, self.position + 2)
                if m:
                    return [Ident(self.advance(m.end() - self.position), start)]

        m = _IDENT_RE.match(self.source, self.position)
        if m:
            return [Ident(self.advance(m.end() - m.start()), start)]

        m = _NUMBER_RE.match(self.source, self.position)
        if m:
            return [Literal(self.advance(m.end() - m.start()), start)]

        if ch == '"':
            return [self.read_quoted('"', start)]

        if ch == "'":
            return self.read_char_or_lifetime(start)

        if ch in PUNCT_CHARS:
            self.advance()
            nxt = self.peek()
            joint = nxt is not None and (nxt in PUNCT_CHARS or nxt == "'")
            return [Punct(ch, joint, start)]

        raise self.error(f"unexpected character {ch!r}")

    def tokenize(self) -> List[Token]:
        # stack of (delimiter, open span, children collected so far)
        stack: List[Tuple[Delimiter, Span, List[Token]]] = []
        current: List[Token] = []

        while True:
            self.skip_trivia()
            ch = self.peek()
            if ch is None:
                break
            if ch in _OPENERS:
                stack.append((_OPENERS[ch], self.span(), current))
                current = []
                self.advance()
                continue
            if ch in _CLOSERS:
                if not stack:
                    raise self.error(f"unexpected closing delimiter {ch!r}")
                delim, open_span, parent = stack.pop()
                if _CLOSERS[ch] is not delim:
                    raise self.error(
                        f"mismatched closing delimiter {ch!r}, expected {delim.close!r}"
                    )
                self.advance()
                parent.append(Group(delim, tuple(current), open_span))
                current = parent
                continue
            current.extend(self.next_tokens())

        if stack:
            delim, open_span, _ = stack[-1]
            raise LexError(f"unclosed delimiter {delim.open!r}", open_span)
        return current


def tokenize(source: str) -> List[Token]:
    """Tokenize source text into a token tree."""
    return Lexer(source).tokenize()
