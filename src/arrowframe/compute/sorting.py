"""Query plan nodes that perform sorting of data.

When looking at time series it's often necessary to sort
the data by time before computing differences between
successive values. Sorting is also needed when computing
ranks or looking for the most significant values.

Sorted data can also benefit aggregations which
will be able to run faster as all the values that
constitute a group are in succession.

This module implements the sorting capabilities.
"""

import pyarrow as pa

from .base import QueryPlanNode


class SortNode(QueryPlanNode):
    """Sort data in-memory based on one or more columns.

    The node expects a list of columns and a list of
    sort directions. The data will be sorted based on
    the columns in the order they are provided.

    The sort directions are used to specify if the
    sorting should be ascending or descending.

    The sort is stable, rows with the same values
    for the sorting columns preserve their relative order.

    >>> import pyarrow as pa
    >>> from arrowframe.compute import PyArrowTableDataSource
    >>> data = pa.record_batch({"values": [1, 2, 3, 4, 5]})
    >>> # Sort the data in descending order
    >>> sort = SortNode(["values"], [True], PyArrowTableDataSource(data))
    >>> next(sort.batches()).to_pydict()
    {'values': [5, 4, 3, 2, 1]}
    """

    def __init__(
        self, keys: list[str], descending: list[bool], child: QueryPlanNode
    ) -> None:
        """
        :param keys: The columns to sort by in the order they should be sorted.
        :param descending: If each columns should be sorted in a descending order.
        :param child: The node emitting the data to be sorted.
        """
        if len(keys) != len(descending):
            raise ValueError("Keys and descending must have the same length")

        self.sorting = list(
            zip(keys, ("descending" if desc else "ascending" for desc in descending))
        )
        self.child = child

    def __str__(self) -> str:
        return f"SortNode(sorting={self.sorting}, {self.child})"

    def batches(self) -> QueryPlanNode.RecordBatchesGenerator:
        """The sorting to the child node.

        Batches provided by child node are accumulated
        until they are all loaded in memory, than they
        are merged and sorted as an unique table.

        This is usually faster but requires more memory
        and might oom for large datasets.
        """
        batches = list(self.child.batches())
        if not batches:
            return
        if len(batches) == 1:
            yield batches[0].sort_by(self.sorting)
            return

        # The process converts the batches to tables
        # as converting to and from tables is a zero-copy
        # operation and tables can be concatenated at no cost
        # when promote_options is set to none as they are based on ChunkedArrays.
        table = pa.concat_tables(
            [pa.Table.from_batches([batch]) for batch in batches],
            promote_options="none",
        )
        table = table.sort_by(self.sorting)
        # to_batches is a zero-copy operation when maximum chunk size is None
        for batch in table.to_batches():
            try:
                yield batch
            except GeneratorExit:
                break
