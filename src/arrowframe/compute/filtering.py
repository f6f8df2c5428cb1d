"""Keep only the rows matching a condition.

Filtering is what ``Dataframe.filter()`` compiles to,
for example to discard the invalid readings of a sensor
before looking for the minima of its series::

    df.filter(col("value").is_not_null())

Filters are evaluated independently on each batch,
so they stream through files without loading them.
"""

from .base import Expression, QueryPlanNode


class FilterNode(QueryPlanNode):
    """Emit the rows for which a predicate is true.

    The predicate is an expression evaluating to a boolean
    column. Rows where it's false, or null because
    the row is missing the data to decide, are discarded.

    >>> import pyarrow as pa
    >>> import pyarrow.compute as pc
    >>> from arrowframe.compute import col, FunctionCallExpression, PyArrowTableDataSource
    >>> readings = pa.record_batch({"sensor": ["a", "b", "a"], "value": [4, None, 1]})
    >>> positive = FunctionCallExpression(pc.greater, col("value"), 2)
    >>> next(FilterNode(positive, PyArrowTableDataSource(readings)).batches()).to_pydict()
    {'sensor': ['a'], 'value': [4]}
    """

    def __init__(self, expression: Expression, child: QueryPlanNode) -> None:
        """
        :param expression: The predicate deciding which rows to keep.
        :param child: The node providing the rows.
        """
        self.expression = expression
        self.child = child

    def __str__(self) -> str:
        return f"FilterNode(filter={self.expression}, child={self.child})"

    def batches(self) -> QueryPlanNode.RecordBatchesGenerator:
        """Evaluate the predicate on each batch and keep the matching rows.

        Batches with no matching rows are still emitted,
        empty, which keeps the schema known downstream.
        """
        for batch in self.child.batches():
            yield batch.filter(self.expression.apply(batch))
