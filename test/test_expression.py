import pyarrow as pa
import pyarrow.compute as pc
import pytest

from arrowframe.compute.base import ColumnRef, Literal
from arrowframe.compute.expressions import (
    DiffExpression,
    ExpressionError,
    FillNullExpression,
    FunctionCallExpression,
    ReduceExpression,
    ReplaceExpression,
    ShiftExpression,
)


@pytest.fixture
def sample_batch():
    return pa.RecordBatch.from_arrays(
        [pa.array([1, 2, 3, 4, 5]), pa.array(["a", "b", "c", "d", "e"])],
        names=["numbers", "letters"],
    )


def test_function_call_expression_init():
    expr = FunctionCallExpression(pc.add, ColumnRef("numbers"), 1)
    assert expr.func == pc.add
    assert len(expr.args) == 2
    assert isinstance(expr.args[0], ColumnRef)
    assert expr.args[1] == 1


def test_function_call_expression_str():
    expr = FunctionCallExpression(pc.add, ColumnRef("numbers"), 1)
    assert str(expr) == "pyarrow.compute.add(ColumnRef(numbers),1)"


def test_function_call_expression_apply_nested(sample_batch):
    inner_expr = FunctionCallExpression(pc.multiply, ColumnRef("numbers"), 2)
    outer_expr = FunctionCallExpression(pc.add, inner_expr, 1)
    result = outer_expr.apply(sample_batch)
    assert result.equals(pa.array([3, 5, 7, 9, 11]))


def test_function_call_expression_apply_literal(sample_batch):
    expr = FunctionCallExpression(pc.greater, ColumnRef("numbers"), Literal(3))
    result = expr.apply(sample_batch)
    assert result.equals(pa.array([False, False, False, True, True]))


def test_function_call_expression_apply_multiple_args(sample_batch):
    expr = FunctionCallExpression(
        pc.if_else,
        FunctionCallExpression(pc.greater, ColumnRef("numbers"), 3),
        ColumnRef("letters"),
        "x",
    )
    result = expr.apply(sample_batch)
    assert result.equals(pa.array(["x", "x", "x", "d", "e"]))


def test_function_call_expression_apply_invalid_column():
    batch = pa.RecordBatch.from_arrays([pa.array([1, 2, 3])], names=["numbers"])
    expr = FunctionCallExpression(pc.add, ColumnRef("non_existent"), 1)
    with pytest.raises(KeyError):
        expr.apply(batch)


def test_function_call_expression_apply_type_mismatch():
    batch = pa.RecordBatch.from_arrays([pa.array(["a", "b", "c"])], names=["letters"])
    expr = FunctionCallExpression(pc.add, ColumnRef("letters"), 1)
    with pytest.raises(pa.ArrowNotImplementedError):
        expr.apply(batch)


def test_spans_rows():
    assert not ColumnRef("numbers").spans_rows
    assert not Literal(1).spans_rows
    assert not FunctionCallExpression(pc.add, ColumnRef("numbers"), 1).spans_rows
    assert DiffExpression(ColumnRef("numbers")).spans_rows
    assert FunctionCallExpression(pc.sign, DiffExpression(ColumnRef("numbers"))).spans_rows
    assert ShiftExpression(ColumnRef("numbers")).spans_rows
    assert ReduceExpression(pc.sum, ColumnRef("numbers")).spans_rows
    assert FillNullExpression(ColumnRef("numbers"), strategy="forward").spans_rows
    assert not FillNullExpression(ColumnRef("numbers"), value=0).spans_rows
    assert not ReplaceExpression(ColumnRef("numbers"), 0, None).spans_rows


def test_diff():
    batch = pa.record_batch({"v": [1, 4, 2, 2, 7]})
    assert DiffExpression(ColumnRef("v")).apply(batch).to_pylist() == [None, 3, -2, 0, 5]
    assert DiffExpression(ColumnRef("v"), n=2).apply(batch).to_pylist() == [
        None,
        None,
        1,
        -2,
        5,
    ]


@pytest.mark.parametrize("dtype", [pa.uint8(), pa.uint64()])
def test_diff_unsigned(dtype):
    batch = pa.record_batch({"v": pa.array([3, 1, 2, 2, 0], dtype)})
    result = DiffExpression(ColumnRef("v")).apply(batch)
    assert result.type == pa.int64()
    assert result.to_pylist() == [None, -2, 1, 0, -2]


def test_diff_invalid_period():
    with pytest.raises(ExpressionError):
        DiffExpression(ColumnRef("v"), n=0)


def test_diff_str():
    assert str(DiffExpression(ColumnRef("v"))) == "DiffExpression(ColumnRef(v), n=1)"


@pytest.mark.parametrize(
    "n, expected",
    [
        (0, [1, 2, 3]),
        (1, [None, 1, 2]),
        (2, [None, None, 1]),
        (-1, [2, 3, None]),
        (3, [None, None, None]),
        (-5, [None, None, None]),
    ],
)
def test_shift(n, expected):
    batch = pa.record_batch({"v": [1, 2, 3]})
    assert ShiftExpression(ColumnRef("v"), n).apply(batch).to_pylist() == expected


def test_fill_null():
    batch = pa.record_batch({"v": pa.array([None, 1, None, None, 4, None], pa.int64())})
    forward = FillNullExpression(ColumnRef("v"), strategy="forward").apply(batch)
    backward = FillNullExpression(ColumnRef("v"), strategy="backward").apply(batch)
    constant = FillNullExpression(ColumnRef("v"), value=0).apply(batch)
    assert forward.to_pylist() == [None, 1, 1, 1, 4, 4]
    assert backward.to_pylist() == [1, 1, 4, 4, 4, None]
    assert constant.to_pylist() == [0, 1, 0, 0, 4, 0]


@pytest.mark.parametrize(
    "kwargs",
    [{}, {"value": 0, "strategy": "forward"}, {"strategy": "sideways"}],
)
def test_fill_null_invalid_arguments(kwargs):
    with pytest.raises(ExpressionError):
        FillNullExpression(ColumnRef("v"), **kwargs)


def test_replace_keeps_type():
    batch = pa.record_batch({"v": pa.array([1, 0, -1, None], pa.int8())})
    result = ReplaceExpression(ColumnRef("v"), 0, None).apply(batch)
    assert result.type == pa.int8()
    assert result.to_pylist() == [1, None, -1, None]


def test_replace_with_value():
    batch = pa.record_batch({"v": ["a", "b", "a"]})
    result = ReplaceExpression(ColumnRef("v"), "a", "z").apply(batch)
    assert result.to_pylist() == ["z", "b", "z"]


def test_reduce():
    batch = pa.record_batch({"v": [1, 2, 3]})
    expr = ReduceExpression(pc.sum, ColumnRef("v"))
    assert expr.apply(batch).as_py() == 6
    assert str(expr) == "pyarrow.compute.sum(ColumnRef(v))"


def test_reduce_options():
    batch = pa.record_batch({"v": pa.array([None, None], pa.int64())})
    assert ReduceExpression(pc.sum, ColumnRef("v")).apply(batch).as_py() is None
    assert ReduceExpression(pc.sum, ColumnRef("v"), min_count=0).apply(batch).as_py() == 0


def test_sign_change_chain():
    batch = pa.record_batch({"v": [3, 1, 1, 2, 0]})
    expr = DiffExpression(
        FillNullExpression(
            ReplaceExpression(
                FunctionCallExpression(pc.sign, DiffExpression(ColumnRef("v"))), 0, None
            ),
            strategy="forward",
        )
    )
    assert expr.apply(batch).to_pylist() == [None, None, 0, 2, -2]
