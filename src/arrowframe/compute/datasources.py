"""Query Plan nodes that load data

The datasource nodes are expected to fetch the data from some source,
convert it into the format accepted by the compute engine and forward it
to the next node in the plan.

They are used to do things like loading
data from CSV, Parquet or JSON files, or to
query data that is already in memory.

Opening a file doesn't read it, the content is only
read when the batches of the node are consumed, which
is what allows the Dataframe API to be lazy.
"""

import logging
from abc import abstractmethod

import pyarrow as pa
import pyarrow.csv
import pyarrow.json
import pyarrow.parquet

from ..config import CONFIG
from .base import QueryPlanNode

logger = logging.getLogger(__name__)


class DataSourceNode(QueryPlanNode):
    """Base class for nodes that load data from a source."""

    @abstractmethod
    def poll_schema(self) -> pa.Schema:
        """Poll the schema of the data source without loading its content."""
        ...


class CSVDataSource(DataSourceNode):
    """Load data from a CSV file.

    Given a local CSV file path, load the content,
    convert it into Arrow format, and emit it
    for the next nodes of the query plan to consume.
    """

    def __init__(self, filename: str, block_size: int | None = None) -> None:
        """
        :param filename: The path of the local CSV file.
        :param block_size: How big to make batches of data,
                           Influences how many batches will be produced
        """
        self.filename = filename
        self.block_size = block_size or CONFIG["read_block_size"]

    def __str__(self) -> str:
        return f"CSVDataSource({self.filename}, block_size={self.block_size})"

    def batches(self) -> QueryPlanNode.RecordBatchesGenerator:
        """Open CSV file and emit the batches."""
        logger.debug("opening csv file: %s", self.filename)
        with pa.csv.open_csv(
            self.filename, read_options=pa.csv.ReadOptions(block_size=self.block_size)
        ) as reader:
            for batch in reader:
                yield batch

    def poll_schema(self) -> pa.Schema:
        """Poll the schema of the CSV file."""
        with pa.csv.open_csv(self.filename) as reader:
            return reader.schema


class ParquetDataSource(DataSourceNode):
    """Load data from a Parquet file.

    Given a local parquet file path, load the content,
    convert it into Arrow format, and emit it
    for the next nodes of the query plan to consume.
    """

    def __init__(self, filename: str, batch_size: int | None = None) -> None:
        """
        :param filename: The path of the local parquet file.
        :param batch_size: How big to make batches of data,
                           Influences how many batches will be produced
        """
        self.filename = filename
        self.batch_size = batch_size or CONFIG["parquet_batch_size"]

    def __str__(self) -> str:
        return f"ParquetDataSource({self.filename}, batch_size={self.batch_size})"

    def batches(self) -> QueryPlanNode.RecordBatchesGenerator:
        """Open Parquet file and emit the batches."""
        logger.debug("opening parquet file: %s", self.filename)
        with pa.parquet.ParquetFile(self.filename) as reader:
            yield from reader.iter_batches(batch_size=self.batch_size)

    def poll_schema(self) -> pa.Schema:
        """Poll the schema of the Parquet file."""
        with pa.parquet.ParquetFile(self.filename) as reader:
            return reader.schema_arrow


class JSONDataSource(DataSourceNode):
    """Load data from a newline delimited JSON file.

    Each line of the file is expected to contain
    a JSON object, the keys of the objects
    become the columns of the data::

        {"sensor": "a", "value": 1}
        {"sensor": "a", "value": 3}

    PyArrow doesn't provide a streaming reader for JSON,
    so the whole file is parsed and then emitted
    in batches.
    """

    def __init__(self, filename: str, block_size: int | None = None) -> None:
        """
        :param filename: The path of the local JSON file.
        :param block_size: How big to make the parsed blocks of data,
                           Influences how many batches will be produced
        """
        self.filename = filename
        self.block_size = block_size or CONFIG["read_block_size"]

    def __str__(self) -> str:
        return f"JSONDataSource({self.filename}, block_size={self.block_size})"

    def _read(self) -> pa.Table:
        read_options = pa.json.ReadOptions()
        if self.block_size is not None:
            read_options.block_size = self.block_size
        return pa.json.read_json(self.filename, read_options=read_options)

    def batches(self) -> QueryPlanNode.RecordBatchesGenerator:
        """Parse the JSON file and emit the batches."""
        logger.debug("opening json file: %s", self.filename)
        yield from self._read().to_batches()

    def poll_schema(self) -> pa.Schema:
        """Poll the schema of the JSON file.

        JSON has no header, so this requires parsing the file.
        """
        return self._read().schema


class PyArrowTableDataSource(DataSourceNode):
    """Load data from an in-memory pyarrow.Table or pyarrow.RecordBatch.

    Given a :class:`pyarrow.Table` or `pyarrow.RecordBatch` object,
    allow to use its data in a query plan.
    """

    def __init__(self, table: pa.Table | pa.RecordBatch) -> None:
        """
        :param table: The table or recordbatch with the data to read.
        """
        self.table = table
        self.is_recordbatch = isinstance(table, pa.RecordBatch)

    def __str__(self) -> str:
        return f"PyArrowTableDataSource(columns={self.table.column_names}, rows={self.table.num_rows})"

    def batches(self) -> QueryPlanNode.RecordBatchesGenerator:
        """Emit the data contained in the Table for consumption by other node."""
        if self.is_recordbatch:
            yield self.table
        else:
            yield from self.table.to_batches()

    def poll_schema(self) -> pa.Schema:
        """Poll the schema of the Table."""
        return self.table.schema
