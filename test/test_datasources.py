import json
import os
import tempfile

import pyarrow as pa
import pyarrow.csv as csv
import pyarrow.parquet as pq
import pytest

from arrowframe.compute.datasources import (
    CSVDataSource,
    JSONDataSource,
    ParquetDataSource,
    PyArrowTableDataSource,
)

# Mock data for testing
MOCK_PYARROW_TABLE = pa.table(
    {"group": [1, 1, 2], "day": [1, 2, 1], "value": [3, 6, 9]}
)

MOCK_CSV_FILE = tempfile.NamedTemporaryFile(delete=False, mode="w+", suffix=".csv")
MOCK_PARQUET_FILE = tempfile.NamedTemporaryFile(
    delete=False, mode="w+", suffix=".parquet"
)
MOCK_JSON_FILE = tempfile.NamedTemporaryFile(delete=False, mode="w+", suffix=".jsonl")


def setup_module():
    csv.write_csv(MOCK_PYARROW_TABLE, MOCK_CSV_FILE.name)
    MOCK_CSV_FILE.close()
    pq.write_table(MOCK_PYARROW_TABLE, MOCK_PARQUET_FILE.name)
    MOCK_PARQUET_FILE.close()
    for row in MOCK_PYARROW_TABLE.to_pylist():
        MOCK_JSON_FILE.write(json.dumps(row) + "\n")
    MOCK_JSON_FILE.close()


def teardown_module():
    os.unlink(MOCK_CSV_FILE.name)
    os.unlink(MOCK_PARQUET_FILE.name)
    os.unlink(MOCK_JSON_FILE.name)


@pytest.mark.parametrize(
    "data_source_class, init_args, expected_str",
    [
        (
            CSVDataSource,
            (MOCK_CSV_FILE.name, None),
            f"CSVDataSource({MOCK_CSV_FILE.name}, block_size=None)",
        ),
        (
            ParquetDataSource,
            (MOCK_PARQUET_FILE.name, None),
            f"ParquetDataSource({MOCK_PARQUET_FILE.name}, batch_size=65536)",
        ),
        (
            JSONDataSource,
            (MOCK_JSON_FILE.name, None),
            f"JSONDataSource({MOCK_JSON_FILE.name}, block_size=None)",
        ),
        (
            PyArrowTableDataSource,
            (MOCK_PYARROW_TABLE,),
            "PyArrowTableDataSource(columns=['group', 'day', 'value'], rows=3)",
        ),
        (
            PyArrowTableDataSource,
            (MOCK_PYARROW_TABLE.to_batches()[0],),
            "PyArrowTableDataSource(columns=['group', 'day', 'value'], rows=3)",
        ),
    ],
)
def test_init_and_str(data_source_class, init_args, expected_str):
    data_source = data_source_class(*init_args)
    assert str(data_source) == expected_str


@pytest.mark.parametrize(
    "data_source_class, init_args",
    [
        (CSVDataSource, (MOCK_CSV_FILE.name, None)),
        (ParquetDataSource, (MOCK_PARQUET_FILE.name, None)),
        (JSONDataSource, (MOCK_JSON_FILE.name, None)),
        (PyArrowTableDataSource, (MOCK_PYARROW_TABLE,)),
        (PyArrowTableDataSource, (MOCK_PYARROW_TABLE.to_batches()[0],)),
    ],
)
def test_batches(data_source_class, init_args):
    data_source = data_source_class(*init_args)
    result = pa.Table.from_batches(list(data_source.batches()))
    assert result.to_pydict() == MOCK_PYARROW_TABLE.to_pydict()


@pytest.mark.parametrize(
    "data_source_class, filename",
    [
        (CSVDataSource, MOCK_CSV_FILE.name),
        (ParquetDataSource, MOCK_PARQUET_FILE.name),
        (JSONDataSource, MOCK_JSON_FILE.name),
    ],
)
def test_poll_schema(data_source_class, filename):
    schema = data_source_class(filename).poll_schema()
    assert schema.names == ["group", "day", "value"]
    assert schema.field("value").type == pa.int64()


def test_parquet_batch_size():
    batches = list(ParquetDataSource(MOCK_PARQUET_FILE.name, batch_size=2).batches())
    assert [b.num_rows for b in batches] == [2, 1]


def test_missing_file():
    with pytest.raises(FileNotFoundError):
        list(CSVDataSource("/nonexistent/readings.csv").batches())


def test_opening_is_lazy():
    # Nothing is read until the batches are consumed.
    source = CSVDataSource("/nonexistent/readings.csv")
    source.batches()
