"""Tests for akin.declarations."""

import pytest

from akin.declarations import (
    TokenStream,
    at_declaration,
    parse_declaration,
    parse_declarations,
    parse_uint,
)
from akin.errors import RangeSyntaxError, StructuralError
from akin.lexer import tokenize
from akin.tokens import Ident, Literal, Punct, Span


def _table(source: str):
    table, _ = parse_declarations(tokenize(source))
    return table


class TestListValues:
    """Tests for [v1, v2, ...] value sources."""

    def test_simple_list(self):
        assert _table("let &var = [1, 2, 3];") == {"*var": ("1", "2", "3")}

    def test_operators_as_values(self):
        assert _table("let &op = [+, -, *, /];") == {"*op": ("+", "-", "*", "/")}

    def test_multi_token_items(self):
        assert _table("let &t = [Vec<u8>, &str];") == {"*t": ("Vec < u8 >", "& str")}

    def test_nested_brackets_kept(self):
        assert _table("let &v = [['a', 'b'], ['e']];") == {"*v": ("['a' , 'b']", "['e']")}

    def test_brace_item_is_unwrapped(self):
        assert _table("let &code = [{ a(); b(); }, { c(); }];") == {
            "*code": ("a () ; b () ;", "c () ;")
        }

    def test_none_is_empty_variant(self):
        assert _table("let &v = [x, NONE];") == {"*v": ("x", "")}

    def test_trailing_comma(self):
        assert _table("let &v = [1, 2,];") == {"*v": ("1", "2")}

    def test_empty_list(self):
        with pytest.raises(StructuralError):
            _table("let &v = [];")

    def test_empty_item(self):
        with pytest.raises(StructuralError):
            _table("let &v = [1,, 2];")


class TestGroupValues:
    def test_brace_block_single_variant(self):
        assert _table("let &body = { x + 1 };") == {"*body": ("x + 1",)}

    def test_paren_group(self):
        assert _table("let &p = (a, b);") == {"*p": ("a , b",)}


class TestRangeValues:
    """Tests for A..B and A..=B value sources."""

    def test_exclusive(self):
        assert _table("let &n = 0..3;") == {"*n": ("0", "1", "2")}

    def test_inclusive(self):
        assert _table("let &n = 0..=3;") == {"*n": ("0", "1", "2", "3")}

    def test_radix_and_suffix(self):
        assert _table("let &n = 0x0a..12usize;") == {"*n": ("10", "11")}

    def test_negative_bound(self):
        with pytest.raises(RangeSyntaxError):
            _table("let &n = -1..3;")

    def test_float_bound(self):
        with pytest.raises(RangeSyntaxError):
            _table("let &n = 0.5..3;")

    def test_char_bound(self):
        with pytest.raises(RangeSyntaxError):
            _table("let &n = 'a'..'c';")

    def test_missing_operator(self):
        with pytest.raises(RangeSyntaxError):
            _table("let &n = 5;")

    def test_spaced_operator(self):
        with pytest.raises(RangeSyntaxError):
            _table("let &n = 0. .3;")

    def test_malformed_operator(self):
        with pytest.raises(RangeSyntaxError):
            _table("let &n = 0..<3;")

    def test_empty_range(self):
        with pytest.raises(RangeSyntaxError):
            _table("let &n = 3..3;")

    def test_u64_limit(self):
        assert parse_uint(Literal("18446744073709551615"), TokenStream([])) == 2**64 - 1
        with pytest.raises(RangeSyntaxError):
            parse_uint(Literal("18446744073709551616"), TokenStream([]))


class TestStructuralErrors:
    """Tests for malformed declarations."""

    def test_missing_name(self):
        with pytest.raises(StructuralError) as exc:
            _table("let & = [1];")
        assert exc.value.span == Span(1, 7)

    def test_missing_equals(self):
        with pytest.raises(StructuralError):
            _table("let &x [1];")

    def test_missing_value(self):
        with pytest.raises(StructuralError):
            _table("let &x = foo;")

    def test_missing_semicolon(self):
        with pytest.raises(StructuralError) as exc:
            _table("let &x = [1] y")
        assert exc.value.span == Span(1, 14)

    def test_truncated_input(self):
        with pytest.raises(StructuralError):
            _table("let &x =")


class TestResolution:
    """Tests for declaration-order resolution."""

    def test_earlier_variable_resolved(self):
        table = _table("let &a = [1, 2]; let &b = { f(*a); };")
        assert table["*b"] == ("f (1) ;f (2) ;",)

    def test_list_item_resolved(self):
        table = _table("let &ty = [u8]; let &v = [Vec<*ty>];")
        assert table["*v"] == ("Vec <u8 >",)

    def test_forward_reference(self):
        with pytest.raises(StructuralError) as exc:
            _table("let &a = [*b]; let &b = [1];")
        assert "*b" in str(exc.value)

    def test_self_reference(self):
        with pytest.raises(StructuralError):
            _table("let &a = [x *a];")

    def test_redeclaration_uses_previous(self):
        assert _table("let &a = [1]; let &a = [*a 2];") == {"*a": ("1 2",)}

    def test_unrelated_deref_left_alone(self):
        assert _table("let &x = { *ptr };") == {"*x": ("*ptr",)}

    def test_prelude_entries_visible(self):
        table, _ = parse_declarations(tokenize("let &b = [*a];"), {"*a": ("p",)})
        assert table == {"*a": ("p",), "*b": ("p",)}


class TestStream:
    def test_stops_at_non_declaration(self):
        table, rest = parse_declarations(tokenize("let &a = [1]; let b = 2;"))
        assert table == {"*a": ("1",)}
        assert rest[:2] == [Ident("let"), Ident("b")]

    def test_parse_declaration_without_let(self):
        stream = TokenStream(tokenize("x;"))
        assert parse_declaration(stream, {}) is None
        assert stream.position == 0

    def test_at_declaration(self):
        assert at_declaration(TokenStream([Ident("let"), Punct("&")]))
        assert not at_declaration(TokenStream([Ident("let"), Ident("x")]))
