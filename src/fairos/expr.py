"""
Document filter expressions and their query-string compiler.

An expression is a small immutable tree built by the caller and compiled
once into the value of the `expr` query parameter of /doc/find and
/doc/count. The document endpoints take a pre-encoded string, so the
compiler writes percent-escapes itself ('"' as %22, '>' as %3e) and the
transport layer passes the result through untouched.

Supported forms:
    All()               ""
    Eq(f, Str(s))       f=%22s%22
    Eq(f, Number(n))    f=n
    Gt(f, v)            f%3ev
    Gte(f, v)           f%3e=v
    Lt(f, v)            v%3ef
    Lte(f, v)           v%3e=f

Lt and Lte put the value before the field. The document service parses
comparisons in that shape, so the order must not be "corrected".

And, Or and Map values have no wire form and raise
UnsupportedExpressionError.
"""

from dataclasses import dataclass
from typing import Union

from fairos_core.errors import UnsupportedExpressionError

U32_MAX = 2**32 - 1


# =============================================================================
# Values
# =============================================================================


@dataclass(frozen=True)
class Str:
    value: str

    def __str__(self) -> str:
        return compile_value(self)


@dataclass(frozen=True)
class Number:
    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError(f"Number value must be an int, got {type(self.value).__name__}")
        if not 0 <= self.value <= U32_MAX:
            raise ValueError(f"Number value out of u32 range: {self.value}")

    def __str__(self) -> str:
        return compile_value(self)


@dataclass(frozen=True)
class Map:
    """Map-typed value. Has no comparison semantics on the wire."""

    def __str__(self) -> str:
        return compile_value(self)


Value = Union[Str, Number, Map]


# =============================================================================
# Expressions
# =============================================================================


class Expr:
    """Base class for filter expression nodes. str() compiles the node."""

    __slots__ = ()

    def __str__(self) -> str:
        return compile_expr(self)


@dataclass(frozen=True)
class All(Expr):
    """Matches every document."""


@dataclass(frozen=True)
class Eq(Expr):
    field: str
    value: Value


@dataclass(frozen=True)
class Gt(Expr):
    field: str
    value: Value


@dataclass(frozen=True)
class Gte(Expr):
    field: str
    value: Value


@dataclass(frozen=True)
class Lt(Expr):
    field: str
    value: Value


@dataclass(frozen=True)
class Lte(Expr):
    field: str
    value: Value


@dataclass(frozen=True)
class And(Expr):
    left: Expr
    right: Expr


@dataclass(frozen=True)
class Or(Expr):
    left: Expr
    right: Expr


# =============================================================================
# Compiler
# =============================================================================


def compile_value(value: Value) -> str:
    """
    Compile a comparison operand.

    Raises:
        UnsupportedExpressionError: For Map values
        TypeError: If value is not a Str, Number or Map
    """
    if isinstance(value, Str):
        return f"%22{value.value}%22"
    if isinstance(value, Number):
        return str(value.value)
    if isinstance(value, Map):
        raise UnsupportedExpressionError(
            "Map values cannot be used in document filter expressions",
            context={"expression_node": "Map"},
        )
    raise TypeError(f"Unsupported expression value type: {type(value).__name__}")


def compile_expr(expr: Expr) -> str:
    """
    Compile an expression into the pre-encoded `expr` query value.

    Args:
        expr: Expression tree

    Returns:
        Encoded expression string ("" for All)

    Raises:
        UnsupportedExpressionError: For And, Or, or any Map operand
        TypeError: If expr is not an expression node

    Example:
        >>> compile_expr(Gt("n", Number(9)))
        'n%3e9'
        >>> compile_expr(Eq("s", Str("a")))
        's=%22a%22'
    """
    if isinstance(expr, All):
        return ""
    if isinstance(expr, Eq):
        return f"{expr.field}={compile_value(expr.value)}"
    if isinstance(expr, Gt):
        return f"{expr.field}%3e{compile_value(expr.value)}"
    if isinstance(expr, Gte):
        return f"{expr.field}%3e={compile_value(expr.value)}"
    if isinstance(expr, Lt):
        return f"{compile_value(expr.value)}%3e{expr.field}"
    if isinstance(expr, Lte):
        return f"{compile_value(expr.value)}%3e={expr.field}"
    if isinstance(expr, (And, Or)):
        raise UnsupportedExpressionError(
            f"{type(expr).__name__} expressions are not supported by the document service",
            context={"expression_node": type(expr).__name__},
        )
    raise TypeError(f"Unsupported expression type: {type(expr).__name__}")


__all__ = [
    "Str",
    "Number",
    "Map",
    "Value",
    "Expr",
    "All",
    "Eq",
    "Gt",
    "Gte",
    "Lt",
    "Lte",
    "And",
    "Or",
    "compile_expr",
    "compile_value",
]
