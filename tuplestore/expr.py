"""Boolean and comparison expressions evaluated against records."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from .errors import ComparisonTypeError, NotBooleanError
from .records import DataType, Record, Schema, Value


class Operator(Enum):
    """Operators an expression node can apply."""

    BOOL_AND = 0
    BOOL_OR = 1
    BOOL_NOT = 2
    COMP_EQUAL = 3
    COMP_SMALLER = 4

    @property
    def arity(self) -> int:
        return 1 if self is Operator.BOOL_NOT else 2


@dataclass(frozen=True)
class Constant:
    """An expression that always yields the same value."""

    value: Value


@dataclass(frozen=True)
class AttrRef:
    """An expression that yields one attribute of the record."""

    attr_num: int


@dataclass(frozen=True)
class OpExpr:
    """An operator applied to one or two sub-expressions."""

    op: Operator
    args: tuple["Expr", ...]

    def __post_init__(self):
        object.__setattr__(self, "op", Operator(self.op))
        object.__setattr__(self, "args", tuple(self.args))
        if len(self.args) != self.op.arity:
            raise ValueError(
                f"{self.op.name} takes {self.op.arity} argument(s), got {len(self.args)}"
            )


Expr = Union[Constant, AttrRef, OpExpr]


def _bool(result: bool) -> Value:
    return Value(DataType.BOOL, bool(result))


def _same_type(left: Value, right: Value, what: str) -> None:
    if left.dt is not right.dt:
        raise ComparisonTypeError(
            f"{what} only supported for values of the same datatype"
        )


def _require_bool(*values: Value, what: str) -> None:
    if any(value.dt is not DataType.BOOL for value in values):
        raise NotBooleanError(f"boolean {what} requires boolean input")


def value_equals(left: Value, right: Value) -> Value:
    """Whether two values of the same type are equal, as a boolean value."""
    _same_type(left, right, "equality comparison")
    return _bool(left.v == right.v)


def value_smaller(left: Value, right: Value) -> Value:
    """Whether the left value is smaller than the right one, as a boolean value."""
    _same_type(left, right, "comparison")
    return _bool(left.v < right.v)


def bool_not(value: Value) -> Value:
    """Logical negation of a boolean value."""
    _require_bool(value, what="NOT")
    return _bool(not value.v)


def bool_and(left: Value, right: Value) -> Value:
    """Logical conjunction of two boolean values."""
    _require_bool(left, right, what="AND")
    return _bool(left.v and right.v)


def bool_or(left: Value, right: Value) -> Value:
    """Logical disjunction of two boolean values."""
    _require_bool(left, right, what="OR")
    return _bool(left.v or right.v)


_BINARY = {
    Operator.BOOL_AND: bool_and,
    Operator.BOOL_OR: bool_or,
    Operator.COMP_EQUAL: value_equals,
    Operator.COMP_SMALLER: value_smaller,
}


def eval_expr(record: Record, schema: Schema, expr: Expr) -> Value:
    """Evaluate an expression against a record of the given schema."""
    if isinstance(expr, Constant):
        return expr.value
    if isinstance(expr, AttrRef):
        return record.get_attr(schema, expr.attr_num)
    if isinstance(expr, OpExpr):
        args = [eval_expr(record, schema, arg) for arg in expr.args]
        if expr.op is Operator.BOOL_NOT:
            return bool_not(args[0])
        return _BINARY[expr.op](*args)
    raise TypeError(f"not an expression: {expr!r}")