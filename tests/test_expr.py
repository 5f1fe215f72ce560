import pytest

from tuplestore.errors import ComparisonTypeError, NotBooleanError
from tuplestore.expr import (
    AttrRef,
    Constant,
    OpExpr,
    Operator,
    bool_and,
    bool_not,
    bool_or,
    eval_expr,
    value_equals,
    value_smaller,
)
from tuplestore.records import DataType, Schema, Value, create_record


@pytest.fixture
def schema():
    return Schema(
        ("a", "b", "c"),
        (DataType.INT, DataType.STRING, DataType.INT),
        (0, 4, 0),
        (0,),
    )


def make_record(schema, a, b, c):
    record = create_record(schema)
    record.set_attr(schema, 0, Value(DataType.INT, a))
    record.set_attr(schema, 1, Value(DataType.STRING, b))
    record.set_attr(schema, 2, Value(DataType.INT, c))
    return record


TRUE = Value(DataType.BOOL, True)
FALSE = Value(DataType.BOOL, False)


def test_value_equals_same_values():
    assert value_equals(Value.parse("i1"), Value.parse("i1")) == TRUE
    assert value_equals(Value.parse("saaaa"), Value.parse("saaaa")) == TRUE
    assert value_equals(Value.parse("i3"), Value.parse("i4")) == FALSE


def test_value_equals_different_types_raises():
    with pytest.raises(ComparisonTypeError):
        value_equals(Value.parse("i1"), Value.parse("s1"))


def test_value_smaller():
    assert value_smaller(Value.parse("i3"), Value.parse("i4")) == TRUE
    assert value_smaller(Value.parse("i4"), Value.parse("i4")) == FALSE
    assert value_smaller(Value.parse("saaaa"), Value.parse("sbbbb")) == TRUE
    assert value_smaller(FALSE, TRUE) == TRUE


def test_value_smaller_different_types_raises():
    with pytest.raises(ComparisonTypeError):
        value_smaller(Value.parse("f1.5"), Value.parse("i1"))


@pytest.mark.parametrize("left", [True, False])
@pytest.mark.parametrize("right", [True, False])
def test_boolean_operators_follow_python_logic(left, right):
    lv, rv = Value(DataType.BOOL, left), Value(DataType.BOOL, right)
    assert bool_and(lv, rv).v == (left and right)
    assert bool_or(lv, rv).v == (left or right)
    assert bool_not(lv).v == (not left)
    assert bool_not(bool_not(lv)) == lv


def test_boolean_operators_reject_non_booleans():
    with pytest.raises(NotBooleanError):
        bool_not(Value.parse("i1"))
    with pytest.raises(NotBooleanError):
        bool_and(TRUE, Value.parse("i1"))
    with pytest.raises(NotBooleanError):
        bool_or(Value.parse("sx"), TRUE)


def test_eval_constant_and_attr_ref(schema):
    record = make_record(schema, 1, "aaaa", 3)
    assert eval_expr(record, schema, Constant(Value.parse("i3"))) == Value.parse("i3")
    assert eval_expr(record, schema, AttrRef(1)) == Value.parse("saaaa")
    assert eval_expr(record, schema, AttrRef(2)) == Value.parse("i3")


def test_eval_equality_condition(schema):
    cond = OpExpr(Operator.COMP_EQUAL, (Constant(Value.parse("i1")), AttrRef(2)))
    assert eval_expr(make_record(schema, 3, "cccc", 1), schema, cond) == TRUE
    assert eval_expr(make_record(schema, 1, "aaaa", 3), schema, cond) == FALSE


def test_eval_string_condition(schema):
    cond = OpExpr(Operator.COMP_EQUAL, (Constant(Value.parse("sffff")), AttrRef(1)))
    assert eval_expr(make_record(schema, 6, "ffff", 1), schema, cond) == TRUE
    assert eval_expr(make_record(schema, 5, "eeee", 5), schema, cond) == FALSE


def test_eval_not_smaller_condition(schema):
    first = OpExpr(Operator.COMP_SMALLER, (AttrRef(2), Constant(Value.parse("i4"))))
    cond = OpExpr(Operator.BOOL_NOT, (first,))
    assert eval_expr(make_record(schema, 1, "aaaa", 3), schema, cond) == FALSE
    assert eval_expr(make_record(schema, 5, "eeee", 5), schema, cond) == TRUE
    assert eval_expr(make_record(schema, 10, "jjjj", 5), schema, cond) == TRUE


def test_eval_nested_and_or(schema):
    record = make_record(schema, 2, "bbbb", 2)
    a_is_2 = OpExpr(Operator.COMP_EQUAL, (AttrRef(0), Constant(Value.parse("i2"))))
    c_is_3 = OpExpr(Operator.COMP_EQUAL, (AttrRef(2), Constant(Value.parse("i3"))))
    assert eval_expr(record, schema, OpExpr(Operator.BOOL_AND, (a_is_2, c_is_3))) == FALSE
    assert eval_expr(record, schema, OpExpr(Operator.BOOL_OR, (a_is_2, c_is_3))) == TRUE


def test_eval_type_errors_propagate(schema):
    record = make_record(schema, 1, "aaaa", 3)
    mixed = OpExpr(Operator.COMP_EQUAL, (AttrRef(0), AttrRef(1)))
    with pytest.raises(ComparisonTypeError):
        eval_expr(record, schema, mixed)
    not_int = OpExpr(Operator.BOOL_NOT, (AttrRef(0),))
    with pytest.raises(NotBooleanError):
        eval_expr(record, schema, not_int)


def test_op_expr_checks_argument_count():
    with pytest.raises(ValueError):
        OpExpr(Operator.BOOL_NOT, (Constant(TRUE), Constant(FALSE)))
    with pytest.raises(ValueError):
        OpExpr(Operator.BOOL_AND, (Constant(TRUE),))


def test_eval_rejects_non_expression(schema):
    with pytest.raises(TypeError):
        eval_expr(make_record(schema, 1, "aaaa", 3), schema, "a = 1")