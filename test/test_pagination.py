import pyarrow as pa
import pytest

from arrowframe.compute import PyArrowTableDataSource
from arrowframe.compute.pagination import PaginateNode


@pytest.fixture
def batched_data():
    """Ten rows split in batches of three rows."""
    table = pa.table({"value": list(range(10))})
    return pa.Table.from_batches(table.to_batches(max_chunksize=3))


def paginate(data, offset, length):
    node = PaginateNode(offset, length, PyArrowTableDataSource(data))
    return [v for batch in node.batches() for v in batch.column("value").to_pylist()]


def test_str(batched_data):
    node = PaginateNode(2, 3, PyArrowTableDataSource(batched_data))
    assert str(node) == (
        "PaginateNode(2:5, PyArrowTableDataSource(columns=['value'], rows=10))"
    )


@pytest.mark.parametrize(
    "offset, length, expected",
    [
        (0, 2, [0, 1]),
        (0, 3, [0, 1, 2]),
        (1, 1, [1]),
        (2, 3, [2, 3, 4]),
        (4, 1, [4]),
        (4, 5, [4, 5, 6, 7, 8]),
        (3, 3, [3, 4, 5]),
        (8, 10, [8, 9]),
        (10, 2, []),
        (0, 0, []),
    ],
)
def test_pagination(batched_data, offset, length, expected):
    assert paginate(batched_data, offset, length) == expected


def test_negative_arguments(batched_data):
    with pytest.raises(ValueError):
        PaginateNode(-1, 2, PyArrowTableDataSource(batched_data))
    with pytest.raises(ValueError):
        PaginateNode(0, -2, PyArrowTableDataSource(batched_data))


def test_stops_consuming_child(batched_data):
    consumed = []

    class TrackingSource(PyArrowTableDataSource):
        def batches(self):
            for batch in super().batches():
                consumed.append(batch.num_rows)
                yield batch

    node = PaginateNode(0, 2, TrackingSource(batched_data))
    list(node.batches())
    assert consumed == [3]


@pytest.mark.parametrize("offset, length", [(0, 0), (10, 2), (50, 5)])
def test_empty_window_keeps_schema(batched_data, offset, length):
    node = PaginateNode(offset, length, PyArrowTableDataSource(batched_data))
    batches = list(node.batches())
    assert len(batches) == 1
    assert batches[0].num_rows == 0
    assert batches[0].schema.names == ["value"]


def test_window_across_batches(batched_data):
    node = PaginateNode(4, 3, PyArrowTableDataSource(batched_data))
    assert [b.column("value").to_pylist() for b in node.batches()] == [[4, 5], [6]]
