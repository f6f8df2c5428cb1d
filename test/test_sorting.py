import pyarrow as pa
import pytest

from arrowframe.compute import PyArrowTableDataSource
from arrowframe.compute.sorting import SortNode


@pytest.fixture
def mock_data():
    return pa.table(
        {
            "sensor": ["b", "a", "b", "a", "c"],
            "day": [2, 2, 1, 1, 1],
            "value": [5.0, 3.0, 2.0, 4.0, 1.0],
        }
    )


def test_init_and_str(mock_data):
    node = SortNode(["sensor", "day"], [False, True], PyArrowTableDataSource(mock_data))
    assert str(node) == (
        "SortNode(sorting=[('sensor', 'ascending'), ('day', 'descending')], "
        "PyArrowTableDataSource(columns=['sensor', 'day', 'value'], rows=5))"
    )


def test_mismatching_directions(mock_data):
    with pytest.raises(ValueError):
        SortNode(["sensor", "day"], [False], PyArrowTableDataSource(mock_data))


def test_sort_single_batch(mock_data):
    node = SortNode(["sensor", "day"], [False, False], PyArrowTableDataSource(mock_data))
    batches = list(node.batches())
    assert len(batches) == 1
    assert batches[0].to_pydict() == {
        "sensor": ["a", "a", "b", "b", "c"],
        "day": [1, 2, 1, 2, 1],
        "value": [4.0, 3.0, 2.0, 5.0, 1.0],
    }


def test_sort_descending(mock_data):
    node = SortNode(["value"], [True], PyArrowTableDataSource(mock_data))
    result = pa.Table.from_batches(list(node.batches()))
    assert result.column("value").to_pylist() == [5.0, 4.0, 3.0, 2.0, 1.0]


def test_sort_multiple_batches(mock_data):
    table = pa.Table.from_batches(mock_data.to_batches(max_chunksize=2))
    node = SortNode(["day", "sensor"], [False, False], PyArrowTableDataSource(table))
    result = pa.Table.from_batches(list(node.batches()))
    assert result.column("sensor").to_pylist() == ["a", "b", "c", "a", "b"]
    assert result.column("day").to_pylist() == [1, 1, 1, 2, 2]


def test_sort_is_stable(mock_data):
    node = SortNode(["day"], [False], PyArrowTableDataSource(mock_data))
    result = pa.Table.from_batches(list(node.batches()))
    assert result.column("sensor").to_pylist() == ["b", "a", "c", "b", "a"]


def test_sort_no_data():
    class EmptyNode(PyArrowTableDataSource):
        def batches(self):
            return iter(())

    node = SortNode(["value"], [False], EmptyNode(pa.table({"value": []})))
    assert list(node.batches()) == []
