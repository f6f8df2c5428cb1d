"""Query plan node that merges the data in a single batch.

Most nodes of the compute engine work one batch at the time,
which keeps the memory usage low, but some expressions
need to look at all the rows at once. Computing the difference
between a row and the previous one would give a wrong result
for the first row of every batch if the batches were
processed independently.

The :class:`CoalesceNode` accumulates all the batches emitted
by its child and emits them as one single batch, so that the
nodes consuming it can safely evaluate those expressions.
"""

import logging

import pyarrow as pa

from .base import QueryPlanNode

logger = logging.getLogger(__name__)


class CoalesceNode(QueryPlanNode):
    """Merge all the batches of the child node in a single batch.

    >>> import pyarrow as pa
    >>> from arrowframe.compute import PyArrowTableDataSource
    >>> table = pa.Table.from_batches([
    ...     pa.record_batch({"v": [1, 2]}), pa.record_batch({"v": [3]})
    ... ])
    >>> [b.num_rows for b in CoalesceNode(PyArrowTableDataSource(table)).batches()]
    [3]
    """

    def __init__(self, child: QueryPlanNode) -> None:
        """
        :param child: The node emitting the data to be merged.
        """
        self.child = child

    def __str__(self) -> str:
        return f"CoalesceNode({self.child})"

    def batches(self) -> QueryPlanNode.RecordBatchesGenerator:
        """Load all the data of the child and emit it as one batch.

        This requires all the data to fit in memory.
        When the child emits no batches at all,
        nothing is emitted.
        """
        batches = list(self.child.batches())
        logger.debug("coalescing %d batches", len(batches))
        if not batches:
            return
        if len(batches) == 1:
            yield batches[0]
            return

        table = pa.Table.from_batches(batches).combine_chunks()
        if table.num_rows == 0:
            # No chunks left to convert, keep the schema with an empty batch.
            yield batches[0]
            return
        # combine_chunks leaves a single chunk per column,
        # so to_batches provides exactly one batch.
        yield from table.to_batches()
