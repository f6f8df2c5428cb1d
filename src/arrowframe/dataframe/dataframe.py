"""The Dataframe object itself."""

import logging
import os
from typing import Any, Self

import pyarrow as pa

from ..compute import (
    CoalesceNode,
    CSVDataSource,
    FilterNode,
    JSONDataSource,
    PaginateNode,
    ParquetDataSource,
    ProjectNode,
    PyArrowTableDataSource,
    SortNode,
)
from ..compute.base import Expression, QueryPlanNode
from ..utils import tabulate
from .expr import Expr, named_exprs, to_expr
from .groupby import GroupBy

logger = logging.getLogger(__name__)


class Dataframe:
    """Data structure that handles data in rows and columns.

    The Dataframe object allows to represent in-memory data
    and perform transformations over it.

    The arrowframe dataframe object is lazy, which means that
    any transformation or analysis will be applied only when the
    ``.collect()`` method will be invoked and no data is kept
    in memory until that moment (unless it already was).

    >>> from arrowframe.dataframe import col
    >>> df = Dataframe.from_pydict({"group": [1, 1, 1, 2, 2, 2], "value": [1, 2, 3, 4, 5, 6]})
    >>> df.filter(col("value") > 2).group_by("group").agg(col("value").sum()).to_pydict()
    {'group': [1, 2], 'value': [3, 15]}
    """

    EXTENSIONS = {
        ".csv": "open_csv",
        ".parquet": "open_parquet",
        ".pq": "open_parquet",
        ".json": "open_json",
        ".jsonl": "open_json",
        ".ndjson": "open_json",
    }

    def __init__(self, node_or_table: QueryPlanNode | pa.Table | pa.RecordBatch) -> None:
        """
        :param node_or_table: A compute engine node expected to emit
                              the data for the dataframe or a `pyarrow.Table`.
        """
        if isinstance(node_or_table, (pa.Table, pa.RecordBatch)):
            node_or_table = PyArrowTableDataSource(node_or_table)

        if not isinstance(node_or_table, QueryPlanNode):
            raise ValueError("Invalid input, expected a QueryPlanNode or a PyArrow Table")

        self.node = node_or_table

    @classmethod
    def from_pydict(cls, data: dict[str, list[Any]]) -> Self:
        """Create a Dataframe out of a dictionary of columns.

        :param data: The dictionary ``{column_name: values}``.
        """
        return cls(pa.table(data))

    @classmethod
    def open(cls, filename: str) -> Self:
        """Open a file guessing its format from the extension.

        :param filename: The path to a local CSV, Parquet or JSON file.
        """
        extension = os.path.splitext(filename)[1].lower()
        try:
            opener = cls.EXTENSIONS[extension]
        except KeyError:
            raise ValueError(
                f"Unsupported file extension {extension!r}, "
                f"expected one of {sorted(cls.EXTENSIONS)}"
            ) from None
        return getattr(cls, opener)(filename)

    @classmethod
    def open_csv(cls, filename: str, block_size: int | None = None) -> Self:
        """Open a CSV file and create a Dataframe out of its data.

        :param filename: The path to a local CSV file.
        :param block_size: How many bytes to read for each batch.
        """
        return cls(CSVDataSource(filename, block_size=block_size))

    @classmethod
    def open_parquet(cls, filename: str, batch_size: int | None = None) -> Self:
        """Open a Parquet file and create a Dataframe out of its data.

        :param filename: The path to a local Parquet file.
        :param batch_size: How many rows to read for each batch.
        """
        return cls(ParquetDataSource(filename, batch_size=batch_size))

    @classmethod
    def open_json(cls, filename: str, block_size: int | None = None) -> Self:
        """Open a newline delimited JSON file and create a Dataframe out of its data.

        :param filename: The path to a local JSON file.
        :param block_size: How many bytes to parse for each batch.
        """
        return cls(JSONDataSource(filename, block_size=block_size))

    def filter(self, predicate: Expr | Expression) -> Self:
        """Apply a filter to the data and return a new Dataframe.

        The returned dataframe will only contain the data that
        matches the filter predicate.

        :param predicate: The expression representing the predicate.
                          for example ``col("A") > col("B")``.
        """
        expression = to_expr(predicate).expression
        return self.__class__(FilterNode(expression, self._child_for(expression)))

    def select(self, *columns: str | Expr, **named: Expr) -> Self:
        """Keep only the given columns and expressions.

        The resulting Dataframe has one column for each
        provided column name or expression, in the same order.

        :param columns: Column names or expressions named after their column.
        :param named: Expressions named after the keyword.
        """
        return self.__class__(self._project([], columns, named))

    def with_columns(self, *exprs: Expr, **named: Expr) -> Self:
        """Add new columns, or replace existing ones, computed from expressions.

        Expressions are evaluated in the order they are provided,
        so they can refer to the columns added before them.

        :param exprs: Expressions named after their column.
        :param named: Expressions named after the keyword.
        """
        return self.__class__(self._project(None, exprs, named))

    def sort(self, *by: str, descending: bool | list[bool] = False) -> Self:
        """Sort the rows by one or more columns.

        :param by: The columns to sort by, in order of priority.
        :param descending: If the sort should be descending,
                           either for all columns or for each one.
        """
        if isinstance(descending, bool):
            descending = [descending] * len(by)
        return self.__class__(SortNode(list(by), list(descending), self.node))

    def head(self, n: int = 5) -> Self:
        """Keep only the first ``n`` rows."""
        return self.slice(0, n)

    def slice(self, offset: int, length: int) -> Self:
        """Keep ``length`` rows starting from the row at ``offset``."""
        return self.__class__(PaginateNode(offset, length, self.node))

    def group_by(self, *keys: str) -> GroupBy:
        """Group the rows by the values of the given columns.

        Use :meth:`GroupBy.agg` on the result to compute
        the aggregations for each group.
        """
        if not keys:
            raise ValueError("At least one column to group by must be provided")
        return GroupBy(self, list(keys))

    def agg(self, *exprs: Expr, **named: Expr) -> Self:
        """Aggregate all the rows into a single one."""
        return GroupBy(self, []).agg(*exprs, **named)

    def explain(self) -> str:
        """Describe the query plan that will compute the data."""
        return str(self.node)

    def collect(self) -> Self:
        """Collect all data of the dataframe in memory.

        Returns a new Dataframe that has all data from the
        previous dataframe eagerly loaded in memory.
        """
        return self.__class__(self.to_arrow())

    def to_arrow(self) -> pa.Table:
        """Collect all the data and return a pyarrow.Table

        When the query plan emits no data at all,
        an empty table with no columns is returned.
        """
        logger.debug("collecting %s", self.node)
        batches = list(self.node.batches())
        if not batches:
            return pa.table({})
        return pa.Table.from_batches(batches)

    def to_pydict(self) -> dict[str, list[Any]]:
        """Collect all the data as a dictionary of columns."""
        return self.to_arrow().to_pydict()

    def __str__(self) -> str:
        return tabulate.tabulate(self.to_arrow())

    def _child_for(self, *expressions: Expression) -> QueryPlanNode:
        """The node that has to provide the data to the given expressions.

        Expressions that look at the other rows need all the data in one batch.
        """
        if any(expression.spans_rows for expression in expressions):
            return CoalesceNode(self.node)
        return self.node

    def _project(
        self,
        select: list[str] | None,
        exprs: tuple[str | Expr, ...],
        named: dict[str, Expr],
    ) -> ProjectNode:
        projections = {
            name: expr.expression for name, expr in named_exprs(exprs, named).items()
        }
        return ProjectNode(
            select, projections, self._child_for(*projections.values())
        )
