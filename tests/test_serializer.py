"""Tests for akin.serializer."""

from akin.lexer import tokenize
from akin.serializer import Cursor, serialize
from akin.tokens import Delimiter, Group, Ident, Literal, Punct, group


class TestSpacing:
    """Tests for the whitespace-joining policy."""

    def test_empty(self):
        assert serialize([]) == ""

    def test_single_space_between_tokens(self):
        assert serialize([Ident("a"), Ident("b"), Literal("1")]) == "a b 1"

    def test_joint_punct(self):
        assert serialize([Ident("x"), Punct("+", True), Punct("="), Literal("1")]) == "x += 1"

    def test_sigil_is_adjacent_to_next(self):
        assert serialize([Ident("res"), Punct("*"), Ident("var")]) == "res *var"

    def test_joint_modifier_emits_nothing(self):
        toks = [Ident("x_"), Punct("~", True), Punct("*"), Ident("t")]
        assert serialize(toks) == "x_*t"

    def test_joint_modifier_before_ident(self):
        assert serialize([Ident("a"), Punct("~"), Ident("b")]) == "ab"

    def test_lexed_statement(self):
        assert serialize(tokenize("res += *var;")) == "res += *var ;"


class TestGroups:
    """Tests for delimiter emission."""

    def test_visible_groups(self):
        toks = [Ident("f"), group(Delimiter.PAREN, Ident("a"), Punct(","), Ident("b"))]
        assert serialize(toks) == "f (a , b)"

    def test_nested(self):
        assert serialize(tokenize("[[1], {x}]")) == "[[1] , {x}]"

    def test_empty_group(self):
        assert serialize([Group(Delimiter.BRACE, ())]) == "{}"

    def test_none_group_is_invisible(self):
        toks = [Ident("a"), group(Delimiter.NONE, Ident("b"), Ident("c")), Ident("d")]
        assert serialize(toks) == "a b c d"

    def test_group_after_sigil(self):
        assert serialize([Punct("*"), group(Delimiter.PAREN, Ident("p"))]) == "*(p)"


class TestCursor:
    def test_cursor_continues_stream(self):
        cur = Cursor()
        first = serialize([Ident("a")], cur)
        second = serialize([Ident("b")], cur)
        assert first + second == "a b"

    def test_cursor_carries_joint(self):
        cur = Cursor()
        first = serialize([Ident("a"), Punct(":", True)], cur)
        second = serialize([Punct(":"), Ident("b")], cur)
        assert first + second == "a :: b"
