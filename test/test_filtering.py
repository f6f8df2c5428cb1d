import pyarrow as pa
import pyarrow.compute as pc
import pytest

from arrowframe.compute import FunctionCallExpression, PyArrowTableDataSource, col, lit
from arrowframe.compute.filtering import FilterNode


@pytest.fixture
def mock_data():
    return pa.table(
        {"sensor": ["a", "a", "b", "b"], "value": pa.array([1, None, 5, 2], pa.int64())}
    )


def test_str(mock_data):
    node = FilterNode(
        FunctionCallExpression(pc.greater, col("value"), lit(1)),
        PyArrowTableDataSource(mock_data),
    )
    assert str(node) == (
        "FilterNode(filter=pyarrow.compute.greater(ColumnRef(value),Literal(<pyarrow.Int64Scalar: 1>)), "
        "child=PyArrowTableDataSource(columns=['sensor', 'value'], rows=4))"
    )


def test_filter(mock_data):
    node = FilterNode(
        FunctionCallExpression(pc.greater, col("value"), lit(1)),
        PyArrowTableDataSource(mock_data),
    )
    result = pa.Table.from_batches(list(node.batches()))
    assert result.to_pydict() == {"sensor": ["b", "b"], "value": [5, 2]}


def test_null_predicate_discards_row(mock_data):
    node = FilterNode(
        FunctionCallExpression(pc.less, col("value"), 10),
        PyArrowTableDataSource(mock_data),
    )
    result = pa.Table.from_batches(list(node.batches()))
    assert result.column("value").to_pylist() == [1, 5, 2]


def test_filter_each_batch(mock_data):
    table = pa.Table.from_batches(mock_data.to_batches(max_chunksize=2))
    node = FilterNode(
        FunctionCallExpression(pc.equal, col("sensor"), "b"),
        PyArrowTableDataSource(table),
    )
    batches = list(node.batches())
    assert [b.num_rows for b in batches] == [0, 2]
