"""The ArrowFrame Compute Engine

The compute engine defines the in-memory
format for query plans and the plan nodes
supported.

The compute engine is tightly bound to Apache Arrow,
thus the engine will expect to always deal with
:class:`pyarrow.RecordBatch` and emit a new RecordBatch
as the result of the node execution.

This allows to easily build compute pipelines like::

    (RecordBatch)-->Node1--(RecordBatch)-->Node2--(RecordBatch)-->...

The query plan nodes themselves are in charge of their execution,
this keeps the behavior near to the node and thus makes easy to
know how a Node is actually executed without having to look around too much.

Building a query plan requires to combine the nodes that we want
to be executed starting with one ``DataSource`` node as the
leaf node of a query:

>>> import pyarrow as pa
>>> data = pa.table({
...    "sensor": pa.array(["a", "a", "a", "b", "b", "b"]),
...    "value": pa.array([1, 2, 3, 4, 5, 6])
... })
>>>
>>> import pyarrow.compute as pc
>>> from arrowframe.compute import col, PyArrowTableDataSource
>>> from arrowframe.compute import FilterNode, FunctionCallExpression
>>> # SELECT * FROM data WHERE value >= 5
>>> query = FilterNode(
...     FunctionCallExpression(pc.greater_equal, col("value"), 5),
...     child=PyArrowTableDataSource(
...         data
...     )
... )
>>> for data in query.batches():
...     print(data.to_pydict())
{'sensor': ['b', 'b'], 'value': [5, 6]}

Nothing is executed until the batches of the last node
are consumed, the plan is just a description of
the work that has to be done.
"""

from .aggregate import (
    AggregateNode,
    CountAggregation,
    MaxAggregation,
    MeanAggregation,
    MinAggregation,
    SumAggregation,
)
from .base import ColumnRef, Literal, col, lit
from .coalesce import CoalesceNode
from .datasources import (
    CSVDataSource,
    JSONDataSource,
    ParquetDataSource,
    PyArrowTableDataSource,
)
from .expressions import (
    DiffExpression,
    ExpressionError,
    FillNullExpression,
    FunctionCallExpression,
    ReduceExpression,
    ReplaceExpression,
    ShiftExpression,
    WindowExpression,
)
from .filtering import FilterNode
from .pagination import PaginateNode
from .selection import ProjectNode
from .sorting import SortNode

__all__ = (
    "CSVDataSource",
    "JSONDataSource",
    "ParquetDataSource",
    "PyArrowTableDataSource",
    "FilterNode",
    "FunctionCallExpression",
    "DiffExpression",
    "ShiftExpression",
    "FillNullExpression",
    "ReplaceExpression",
    "ReduceExpression",
    "WindowExpression",
    "ExpressionError",
    "col",
    "lit",
    "ColumnRef",
    "Literal",
    "CoalesceNode",
    "PaginateNode",
    "SortNode",
    "ProjectNode",
    "AggregateNode",
    "CountAggregation",
    "MaxAggregation",
    "MeanAggregation",
    "MinAggregation",
    "SumAggregation",
)
