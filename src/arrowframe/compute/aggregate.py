"""Query plan nodes that aggregations.

Frequently when analysing data is necessary
to compute statistics like the min, max, average, etc...
of the data stored in datasets.

The aggregate node is in charge of computing
those aggregations and projecting them as new
columns in a query pipeline.

Typically the aggregate node will group the data
by a set of columns and then compute the aggregations

For example, given the following data::

    sensor, day, value
    a, 1, 1
    a, 2, 2
    a, 3, 3
    b, 1, 4
    b, 2, 5
    b, 3, 6

We could group by sensor and compute the sum of the values
to get::

    sensor, total
    a, 6
    b, 15

Aggregations can also be computed on expressions instead of
plain columns, which allows to count how many rows in each group
satisfy a condition, like how many times the value of each
sensor reached a local minimum.
"""

import abc
import logging
from typing import Any

import pyarrow as pa
import pyarrow.compute as pc

from .base import Expression, QueryPlanNode

__all__ = (
    "AggregateNode",
    "SumAggregation",
    "MinAggregation",
    "MaxAggregation",
    "CountAggregation",
    "MeanAggregation",
)

logger = logging.getLogger(__name__)


class AggregateNode(QueryPlanNode):
    """Group data and compute aggregations.

    >>> import pyarrow as pa
    >>> import pyarrow.compute as pc
    >>> from arrowframe.compute import SumAggregation, PyArrowTableDataSource
    >>> data = pa.record_batch({
    ...    'sensor': pa.array(['a', 'a', 'a', 'b', 'b', 'b']),
    ...    'value': pa.array([1, 2, 3, 4, 5, 6])
    ... })
    >>> aggregate = AggregateNode(["sensor"], {"total": SumAggregation("value")}, PyArrowTableDataSource(data))
    >>> next(aggregate.batches()).to_pydict()
    {'sensor': ['a', 'b'], 'total': [6, 15]}

    The order of the resulting groups depends on the number of keys:

    * With a single key, groups are emitted in the order the keys
      were first seen and rows with a null key are discarded.
    * With multiple keys, groups are emitted sorted by the keys.
    * With no keys at all, a single row aggregating all the data is emitted.
    """

    def __init__(
        self,
        keys: list[str],
        aggregations: dict[str, "Aggregation"],
        child: QueryPlanNode,
    ) -> None:
        """
        :param keys: The columns to group by.
        :param aggregations: The aggregations to compute in the form of {"new_col_name": Aggregation}.
        :param child: The child node that will provide the data to aggregate.
        """
        self.keys = keys
        self.aggregations = aggregations
        self.child = child

    def __str__(self) -> str:
        return f"AggregateNode(keys={self.keys}, aggregations={self.aggregations}, {self.child})"

    def batches(self) -> QueryPlanNode.RecordBatchesGenerator:
        """Group the data of the child node and aggregate each group.

        Depending on the number of keys, a different
        grouping strategy is used. All of them produce
        the partial aggregation results for each batch
        which are then reduced to the final result.
        """
        if not self.keys:
            yield from self.global_aggregation()
        elif len(self.keys) == 1:
            yield from self.single_key_aggregation()
        else:
            yield from self.multi_key_aggregation()

    def global_aggregation(self) -> QueryPlanNode.RecordBatchesGenerator:
        """Compute the aggregations over all the rows.

        All the data is treated as a single group identified by the empty key.
        When the child emits no data at all, the single row
        holds the aggregations of nothing, like a sum of 0.
        """
        chunks_data: dict[tuple, dict[str, list[Any]]] = {}
        for batch in self.child.batches():
            self._aggregate_chunk(chunks_data, (), batch)
        if not chunks_data:
            chunks_data[()] = {name: [] for name in self.aggregations}
        yield self.reduce_aggregations(chunks_data)

    def single_key_aggregation(self) -> QueryPlanNode.RecordBatchesGenerator:
        """Compute the aggregation for a single key.

        This is an optimized path where we can rely on dictionary encoding
        to find the unique values of the key column and then filter the rows.
        """
        # Compute separate aggregation results for each batch.
        # This makes so that we need to keep in memory only one batch
        # at the time, and the aggregation results, which are far smaller
        #   chunks_data = {key_value: {aggr_name: [aggr_value1, aggr_value2, ...]}}
        chunks_data: dict[pa.Scalar, dict[str, list[Any]]] = {}
        for batch in self.child.batches():
            # Dictinary Encode the key variable,
            # so we can get the unique values
            # and we can know at which rows each value is.
            key_column = batch.column(self.keys[0])
            key_column = pc.dictionary_encode(key_column)
            key_values = key_column.dictionary
            key_indices = key_column.indices

            # For each unique value, we lookup the rows that have that value
            # Then for the resulting batch of rows filtered by the unique key value
            # we compute the aggregation and add it to the aggregation results for
            # that key value in the current batch.
            # Filtering preserves the order of the rows, so expressions that
            # depend on the previous rows see the group as it was in the data.
            for idx, keyval in enumerate(key_values):
                mask = pc.equal(key_indices, idx)
                self._aggregate_chunk(chunks_data, keyval, batch.filter(mask))

        logger.debug("aggregated %d groups by %s", len(chunks_data), self.keys[0])
        yield self.reduce_aggregations(chunks_data)

    def multi_key_aggregation(self) -> QueryPlanNode.RecordBatchesGenerator:
        """Compute the aggregation for multiple keys.

        In this case we will have to manually implement the grouping
        as we can't rely on dictionary encoding to find the unique values
        """
        # Dictionary encoding is not supported for StructArray or ListArray,
        # so we can't combine the keys and encode them.
        # Instead we sort the rows by the keys and walk them in python,
        # it's much slower, but it shows how aggregation can be implemented.
        sorting_key = [(k, "ascending") for k in self.keys]
        chunks_data: dict[tuple[pa.Scalar, ...], dict[str, list[Any]]] = {}
        for batch in self.child.batches():
            # First sort the data by the aggregation keys,
            # this makes sure that we can compute the aggregation in a single pass.
            # All the values for the same grouping key will be sequential
            # and, as the sort is stable, in the same order they had in the data.
            # For example:
            #    a, 1, 1
            #    a, 1, 3
            #    b, 2, 5
            # so until the key changes we can compute the aggregation.
            sorted_batch = batch.sort_by(sorting_key)
            current_key = None
            chunk_start = 0
            for row_index in range(sorted_batch.num_rows):
                row_key = tuple(sorted_batch.column(k)[row_index] for k in self.keys)
                if current_key is None:
                    current_key = row_key
                if row_key != current_key:
                    # the key has changed, this means we finished a chunk of
                    # rows with the same key, we can compute the aggregation for this chunk.
                    chunk = sorted_batch.slice(chunk_start, row_index - chunk_start)
                    self._aggregate_chunk(chunks_data, current_key, chunk)
                    current_key = row_key
                    chunk_start = row_index

            # Compute the aggregation for the last chunk
            if current_key is not None:
                chunk = sorted_batch.slice(chunk_start, batch.num_rows - chunk_start)
                self._aggregate_chunk(chunks_data, current_key, chunk)

        logger.debug("aggregated %d groups by %s", len(chunks_data), self.keys)
        yield self.reduce_aggregations(chunks_data)

    def _aggregate_chunk(
        self, chunks_data: dict[Any, dict[str, list[Any]]], key: Any, chunk: pa.RecordBatch
    ) -> None:
        """Compute the partial results of every aggregation for a chunk of a group."""
        group_data = chunks_data.setdefault(key, {})
        for name, aggregation in self.aggregations.items():
            group_data.setdefault(name, []).append(aggregation.compute_chunk(chunk))

    def reduce_aggregations(
        self, chunks_data: dict[Any, dict[str, list[Any]]]
    ) -> pa.RecordBatch:
        """Reduce the partial aggregation results to the final aggregation results.

        All the grouping strategies end up computing the aggregations
        for each chunk separately, this method will reduce the partial aggregation
        results to the final aggregation results.

        For example if we had 3 chunks and the chunks_data is::

            {"a": {"total": [1, 2, 3]}}

        The result will be::

            {"a": {"total": 6}}
        """
        # Prepare one column for each key and aggregation
        result_batch_data: dict[str, list[Any]] = {
            **{k: [] for k in self.keys},
            **{k: [] for k in self.aggregations.keys()},
        }
        # For each key value, invoke the reduce method of the aggregation.
        # In case of a single key
        #   keyvalue is "a"
        # In case of multiple keys
        #   keyvalue is ("a", 1)
        # In case of no keys
        #   keyvalue is ()
        for keyvalue, aggregated_values in chunks_data.items():
            if isinstance(keyvalue, tuple):
                for i, key in enumerate(self.keys):
                    result_batch_data[key].append(keyvalue[i])
            else:
                result_batch_data[self.keys[0]].append(keyvalue)
            for aggrname, aggregation in self.aggregations.items():
                chunks = aggregated_values[aggrname]
                result_batch_data[aggrname].append(
                    aggregation.reduce(chunks) if chunks else aggregation.reduce_empty()
                )

        # The result_batch_data is already formed in a way understood by pyarrow to create batches.
        # For example it could look like {"sensor": ["a", "b"], "total": [6, 15]}
        return pa.record_batch(result_batch_data)


class Aggregation(abc.ABC):
    """Base class for aggregations.

    Every aggregation is expected to implement
    a method to compute any needed intermediate results
    on a single chunk of data and then provide a reduce method
    to combine the intermediate results into a final result.

    The aggregated data can be a column, identified by its name,
    or an :class:`arrowframe.compute.base.Expression` that is
    evaluated on the rows of each chunk.
    """

    def __init__(self, column: str | Expression) -> None:
        self.column = column

    def __str__(self) -> str:
        return f"{self.__class__.__name__}({self.column})"

    __repr__ = __str__

    def values(self, batch: pa.RecordBatch) -> pa.Array:
        """Get the data to aggregate out of a chunk."""
        if isinstance(self.column, Expression):
            return self.column.apply(batch)
        return batch.column(self.column)

    @abc.abstractmethod
    def compute_chunk(self, batch: pa.RecordBatch) -> Any: ...

    @abc.abstractmethod
    def reduce(self, chunks: list[Any]) -> pa.Scalar: ...

    def reduce_empty(self) -> pa.Scalar:
        """The result of the aggregation when there was no data at all."""
        return pa.scalar(None)


class SimpleAggregation(Aggregation):
    """Provide a base implementation for simple aggregations like min,max,sum.

    Simple aggregations are those where the function applied to compute
    intermediate results for a single chunk of data is the same as the function
    applied to combine the intermediate results into the final.

    For example ``sum([1, 2, 3])`` is the same as ``sum([sum([1, 2]), 3])``.
    """

    @abc.abstractmethod
    def _aggregate(self, data: Any) -> Any: ...

    def compute_chunk(self, batch: pa.RecordBatch) -> Any:
        return self._aggregate(self.values(batch))

    def reduce(self, chunks: list[Any]) -> pa.Scalar:
        return self._aggregate(chunks)


class SumAggregation(SimpleAggregation):
    """Compute the sum of an aggregated column.

    The sum of no values, or only null values, is ``0``,
    which makes summing booleans a way to count the rows
    where a condition is true.
    """

    def _aggregate(self, data: Any) -> Any:
        return pc.sum(data, min_count=0)

    def reduce_empty(self) -> pa.Scalar:
        return pa.scalar(0, pa.int64())


class MinAggregation(SimpleAggregation):
    """Compute the min of an aggregated column."""

    def _aggregate(self, data: Any) -> Any:
        return pc.min(data)


class MaxAggregation(SimpleAggregation):
    """Compute the max of an aggregated column."""

    def _aggregate(self, data: Any) -> Any:
        return pc.max(data)


class CountAggregation(Aggregation):
    """Compute the count of an aggregated column.

    Only non-null values are counted.
    This is based on computing the counts for each intermediate batch
    and then sum them to compute the final result.
    """

    def compute_chunk(self, batch: pa.RecordBatch) -> Any:
        """Compute the count of the column in a single batch."""
        return pc.count(self.values(batch))

    def reduce(self, chunks: list[Any]) -> pa.Scalar:
        """Sum the counts of all intermediate results to the final count."""
        return pc.sum(chunks, min_count=0)

    def reduce_empty(self) -> pa.Scalar:
        return pa.scalar(0, pa.int64())


class MeanAggregation(Aggregation):
    """Compute the mean of an aggregated column.

    This is based by computing count and sum of the column
    for each intermediate batch and then dividing
    the sum of all intermediate results by the count
    of all intermediate results.
    """

    def compute_chunk(self, batch: pa.RecordBatch) -> Any:
        """Compute the count and sum of the column in a single batch."""
        values = self.values(batch)
        return (pc.count(values), pc.sum(values))

    def reduce(self, chunks: list[Any]) -> pa.Scalar:
        """Compute the mean of the column from the intermediate sums and counts."""
        count = pc.sum([chunk[0] for chunk in chunks])
        total = pc.sum([chunk[1] for chunk in chunks])
        return pc.divide(pc.cast(total, pa.float64()), count)

    def reduce_empty(self) -> pa.Scalar:
        return pa.scalar(None, pa.float64())
