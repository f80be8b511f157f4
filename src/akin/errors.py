# -------------------------------------
# akin errors
# -------------------------------------
"""
Error classes shared by the lexer, the declaration parser and the prelude
loader. Every error is fatal for the call that raised it.
"""
from __future__ import annotations

from .tokens import Span


class AkinError(ValueError):
    """Base class for all akin errors."""

    def __init__(self, message: str, span: Span | None = None):
        super().__init__(message)
        self.message = message
        self.span = span

    def __str__(self):
        if self.span is None:
            return self.message
        return f"line {self.span.line}, column {self.span.column}: {self.message}"


class LexError(AkinError):
    pass


class StructuralError(AkinError):
    """An expected construct is missing from a declaration."""
    pass


class RangeSyntaxError(AkinError):
    """A range value source has a bad bound or operator."""
    pass


class PreludeError(AkinError):
    pass
