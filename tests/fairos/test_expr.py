"""Tests for document filter expressions."""

import pytest

from fairos import (
    All,
    And,
    Eq,
    Gt,
    Gte,
    Lt,
    Lte,
    Map,
    Number,
    Or,
    Str,
    compile_expr,
)
from fairos.expr import compile_value
from fairos_core.errors import UnsupportedExpressionError


class TestCompileValue:

    def test_string_is_quoted(self):
        assert compile_value(Str("alice")) == "%22alice%22"

    def test_number(self):
        assert compile_value(Number(42)) == "42"

    def test_map_unsupported(self):
        with pytest.raises(UnsupportedExpressionError):
            compile_value(Map())

    def test_foreign_value(self):
        with pytest.raises(TypeError):
            compile_value("raw")


class TestNumber:

    def test_bounds(self):
        assert Number(0).value == 0
        assert Number(2**32 - 1).value == 2**32 - 1

    @pytest.mark.parametrize("bad", [-1, 2**32])
    def test_out_of_range(self, bad):
        with pytest.raises(ValueError):
            Number(bad)

    @pytest.mark.parametrize("bad", [1.5, "1", True])
    def test_not_an_int(self, bad):
        with pytest.raises(TypeError):
            Number(bad)


class TestCompileExpr:

    @pytest.mark.parametrize(
        "expr,expected",
        [
            (All(), ""),
            (Eq("s", Str("a")), "s=%22a%22"),
            (Eq("n", Number(7)), "n=7"),
            (Gt("n", Number(9)), "n%3e9"),
            (Gte("n", Number(9)), "n%3e=9"),
            (Gt("name", Str("m")), "name%3e%22m%22"),
        ],
    )
    def test_forms(self, expr, expected):
        assert compile_expr(expr) == expected

    def test_less_than_puts_value_first(self):
        assert compile_expr(Lt("age", Number(5))) == "5%3eage"

    def test_less_or_equal_puts_value_first(self):
        assert compile_expr(Lte("age", Number(5))) == "5%3e=age"

    def test_str_compiles(self):
        assert str(Gte("n", Number(3))) == "n%3e=3"
        assert str(All()) == ""
        assert str(Str("x")) == "%22x%22"

    @pytest.mark.parametrize("node", [And, Or])
    def test_boolean_combinators_unsupported(self, node):
        expr = node(Eq("a", Number(1)), Eq("b", Number(2)))
        with pytest.raises(UnsupportedExpressionError, match=node.__name__):
            compile_expr(expr)

    def test_map_operand_unsupported(self):
        with pytest.raises(UnsupportedExpressionError):
            compile_expr(Eq("m", Map()))

    def test_not_an_expression(self):
        with pytest.raises(TypeError):
            compile_expr("n>9")

    def test_expressions_are_values(self):
        assert Eq("s", Str("a")) == Eq("s", Str("a"))
        assert hash(Gt("n", Number(1))) == hash(Gt("n", Number(1)))
        assert Gt("n", Number(1)) != Gte("n", Number(1))
