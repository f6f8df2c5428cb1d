"""Take a window of rows out of a query plan.

``Dataframe.head()`` and ``Dataframe.slice()`` are built on
:class:`PaginateNode`, which is how a quick look at the first
readings of a huge file only reads the first few batches of it.
"""

from .base import QueryPlanNode


class PaginateNode(QueryPlanNode):
    """Emit ``length`` rows starting from the row at ``offset``.

    Rows are counted across all the batches of the child,
    so with batches of three rows, ``offset=4`` and ``length=3``
    the node emits the last two rows of the second batch and
    the first row of the third one::

        batch 0: 0 1 2
        batch 1: 3 [4 5]
        batch 2: [6] 7 8

    When the window contains no rows at all, an empty batch
    is still emitted, so that the schema of the data is preserved.

    >>> import pyarrow as pa
    >>> from arrowframe.compute import PyArrowTableDataSource
    >>> data = pa.record_batch({"value": [10, 20, 30, 40]})
    >>> [b.to_pydict() for b in PaginateNode(1, 2, PyArrowTableDataSource(data)).batches()]
    [{'value': [20, 30]}]
    """

    def __init__(self, offset: int, length: int, child: QueryPlanNode) -> None:
        """
        :param offset: Index of the first row to emit, the first row is 0.
        :param length: How many rows to emit at most.
        :param child: The node providing the rows.
        """
        if offset < 0 or length < 0:
            raise ValueError("Offset and length must not be negative")
        self.offset = offset
        self.length = length
        self.end = offset + length
        self.child = child

    def __str__(self) -> str:
        return f"PaginateNode({self.offset}:{self.end}, {self.child})"

    def batches(self) -> QueryPlanNode.RecordBatchesGenerator:
        """Emit the rows of the window, batch by batch.

        Batches entirely before ``offset`` are skipped,
        the batches overlapping the window are sliced.
        Once ``end`` is reached the child is closed,
        so files it was reading get released without
        reading the rest of them.
        """
        seen_rows = 0
        first_batch = None
        emitted = False

        child_batches = self.child.batches()
        for batch in child_batches:
            if first_batch is None:
                first_batch = batch

            batch_start = seen_rows
            seen_rows += batch.num_rows
            if seen_rows <= self.offset:
                continue

            start = max(0, self.offset - batch_start)
            stop = min(batch.num_rows, self.end - batch_start)
            if stop > start:
                yield batch.slice(start, stop - start)
                emitted = True

            if seen_rows >= self.end:
                child_batches.close()
                break

        if not emitted and first_batch is not None:
            yield first_batch.slice(0, 0)
