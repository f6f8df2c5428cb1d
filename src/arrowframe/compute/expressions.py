"""Expressions executed by compute engine nodes.

The Compute Engine will sometimes need to filter data
or emit new data. This will be performed by nodes that
need to know how the data must be filtered or emitted.

Filters will need a ``predicate``, so an expression that
returns ``true`` or ``false`` for each row that has to be
filtered.

Projections will need an expression that computes the rows
for the projection, for example ``A + B``.

Beyond the element-wise expressions, this module implements
the expressions that look at the neighbours of a row,
like differences, shifts and fills, and the expressions that
reduce a column to a single value. Combined with
:class:`WindowExpression`, which evaluates an expression
independently for each group of rows, they allow to answer
questions like *"how many times did the value of each sensor
stop decreasing and start increasing?"*::

    DiffExpression(
        FillNullExpression(
            ReplaceExpression(
                FunctionCallExpression(pc.sign, DiffExpression(col("value"))),
                0, None
            ),
            strategy="forward"
        )
    )

which emits ``2`` each time the direction of the series
flipped from descending to ascending.
"""

import logging
from typing import Any, Callable

import pyarrow as pa
import pyarrow.compute as pc

from .. import utils
from .base import Expression

logger = logging.getLogger(__name__)


class ExpressionError(ValueError):
    """An expression was built with invalid arguments."""


def apply_expression_if_needed(batch: pa.RecordBatch, o: Expression | Any) -> Any:
    """Invoke Apply on expressions when needed

    If the provided object is an Expression,
    it will be applied to the target batch.

    Otherwise it will treat it as if it's
    already the result of an expression
    or a literal value.

    This allows us to apply all arguments
    we receive without having to care if
    they are the data we need or if they
    are the expression resulting in that data.
    """
    if isinstance(o, Expression):
        o = o.apply(batch)
    return o


def as_array(data: pa.Array | pa.ChunkedArray) -> pa.Array:
    """Make sure we are dealing with a contiguous array."""
    if isinstance(data, pa.ChunkedArray):
        return data.combine_chunks()
    return data


class FunctionCallExpression(Expression):
    """Call a compute function on its arguments.

    Given a compute function, and a set of arguments
    (other expressions, literals or data), execute
    the function on the provided arguments and return
    the resulting data.

    For example to add two columns this would be used as::

        FunctionCallExpression(pyarrow.compute.add, ColumnRef("A"), ColumnRef("B"))

    """

    def __init__(self, func: Callable, *args: Expression | Any) -> None:
        """
        :param func: The function accepting the arguments.
        :param *args: The arguments for the function.
        """
        self.func = func
        self.args = args

    def __str__(self) -> str:
        func_qualname = utils.inspect.get_qualname(self.func)
        return f"{func_qualname}({','.join(map(str, self.args))})"

    @property
    def spans_rows(self) -> bool:
        return any(
            isinstance(arg, Expression) and arg.spans_rows for arg in self.args
        )

    def apply(self, batch: pa.RecordBatch) -> pa.Array | pa.Scalar:
        """Invoke the function resolving all argumnets on the recordbatch.

        When the function arguments are expressions themselves,
        this will apply the expressions on the provided recordbatch
        and the resulting data will be used as the arguments for the
        function.
        """
        args = tuple(apply_expression_if_needed(batch, arg) for arg in self.args)
        return self.func(*args)


class DiffExpression(Expression):
    """Difference between each value and the one ``n`` rows before.

    The first ``n`` rows have no previous value, so they will be null.
    Unsigned integers are differenced as ``int64``, so that a
    decreasing series gets negative differences instead of wrapping around.

    >>> import pyarrow as pa
    >>> from arrowframe.compute import col
    >>> DiffExpression(col("v")).apply(pa.record_batch({"v": [1, 4, 2]})).to_pylist()
    [None, 3, -2]
    """

    def __init__(self, expression: Expression, n: int = 1) -> None:
        """
        :param expression: The expression providing the values.
        :param n: How many rows back to look for the value to subtract.
        """
        if n < 1:
            raise ExpressionError(f"Diff period must be a positive integer, got {n}")
        self.expression = expression
        self.n = n

    def __str__(self) -> str:
        return f"DiffExpression({self.expression}, n={self.n})"

    @property
    def spans_rows(self) -> bool:
        return True

    def apply(self, batch: pa.RecordBatch) -> pa.Array:
        values = as_array(self.expression.apply(batch))
        if pa.types.is_unsigned_integer(values.type):
            values = pc.cast(values, pa.int64())
        return pc.pairwise_diff(values, period=self.n)


class ShiftExpression(Expression):
    """Shift the values by ``n`` rows, filling the gap with nulls.

    Positive values move data forward (each row gets the value
    of a previous row), negative values move it backward.

    >>> import pyarrow as pa
    >>> from arrowframe.compute import col
    >>> batch = pa.record_batch({"v": [1, 2, 3]})
    >>> ShiftExpression(col("v"), 1).apply(batch).to_pylist()
    [None, 1, 2]
    >>> ShiftExpression(col("v"), -1).apply(batch).to_pylist()
    [2, 3, None]
    """

    def __init__(self, expression: Expression, n: int = 1) -> None:
        """
        :param expression: The expression providing the values.
        :param n: How many rows to shift the values by.
        """
        self.expression = expression
        self.n = n

    def __str__(self) -> str:
        return f"ShiftExpression({self.expression}, n={self.n})"

    @property
    def spans_rows(self) -> bool:
        return True

    def apply(self, batch: pa.RecordBatch) -> pa.Array:
        values = as_array(self.expression.apply(batch))
        length = len(values)
        if abs(self.n) >= length:
            return pa.nulls(length, type=values.type)
        if self.n >= 0:
            return pa.concat_arrays(
                [pa.nulls(self.n, type=values.type), values.slice(0, length - self.n)]
            )
        return pa.concat_arrays(
            [values.slice(-self.n), pa.nulls(-self.n, type=values.type)]
        )


class FillNullExpression(Expression):
    """Replace null values.

    Nulls can be replaced by a constant ``value``
    or by the nearest non-null value, looking backward
    in the rows (``strategy="forward"``, which propagates
    the last seen value forward) or looking forward in the
    rows (``strategy="backward"``).

    >>> import pyarrow as pa
    >>> from arrowframe.compute import col
    >>> batch = pa.record_batch({"v": [None, 1, None, 3, None]})
    >>> FillNullExpression(col("v"), strategy="forward").apply(batch).to_pylist()
    [None, 1, 1, 3, 3]
    >>> FillNullExpression(col("v"), strategy="backward").apply(batch).to_pylist()
    [1, 1, 3, 3, None]
    >>> FillNullExpression(col("v"), value=0).apply(batch).to_pylist()
    [0, 1, 0, 3, 0]
    """

    STRATEGIES = {
        "forward": pc.fill_null_forward,
        "backward": pc.fill_null_backward,
    }

    def __init__(
        self, expression: Expression, value: Any = None, strategy: str | None = None
    ) -> None:
        """
        :param expression: The expression providing the values.
        :param value: The value that replaces nulls.
        :param strategy: ``"forward"`` or ``"backward"``,
                         used when no value is provided.
        """
        if (value is None) == (strategy is None):
            raise ExpressionError("Exactly one of value or strategy must be provided")
        if strategy is not None and strategy not in self.STRATEGIES:
            raise ExpressionError(
                f"Unsupported fill strategy {strategy!r}, "
                f"expected one of {sorted(self.STRATEGIES)}"
            )
        self.expression = expression
        self.value = value
        self.strategy = strategy

    def __str__(self) -> str:
        if self.strategy is not None:
            return f"FillNullExpression({self.expression}, strategy={self.strategy})"
        return f"FillNullExpression({self.expression}, value={self.value!r})"

    @property
    def spans_rows(self) -> bool:
        return self.strategy is not None or self.expression.spans_rows

    def apply(self, batch: pa.RecordBatch) -> pa.Array:
        values = as_array(self.expression.apply(batch))
        if self.strategy is not None:
            return self.STRATEGIES[self.strategy](values)
        return pc.fill_null(values, pa.scalar(self.value, type=values.type))


class ReplaceExpression(Expression):
    """Replace all occurrences of a value with another one.

    Replacing with ``None`` turns the matching values into nulls,
    which is the common first step for filling them from
    their neighbours via :class:`FillNullExpression`.

    >>> import pyarrow as pa
    >>> from arrowframe.compute import col
    >>> batch = pa.record_batch({"v": [1, 0, -1]})
    >>> ReplaceExpression(col("v"), 0, None).apply(batch).to_pylist()
    [1, None, -1]
    """

    def __init__(self, expression: Expression, old: Any, new: Any) -> None:
        """
        :param expression: The expression providing the values.
        :param old: The value to look for.
        :param new: The value to replace it with, ``None`` for null.
        """
        self.expression = expression
        self.old = old
        self.new = new

    def __str__(self) -> str:
        return f"ReplaceExpression({self.expression}, {self.old!r} -> {self.new!r})"

    @property
    def spans_rows(self) -> bool:
        return self.expression.spans_rows

    def apply(self, batch: pa.RecordBatch) -> pa.Array:
        values = as_array(self.expression.apply(batch))
        replacement = pa.scalar(self.new, type=values.type)
        # Nulls compare as null, if_else propagates them untouched.
        return pc.if_else(pc.equal(values, self.old), replacement, values)


class ReduceExpression(Expression):
    """Reduce the values of an expression to a single value.

    The reduction is performed by an aggregate compute function
    like :func:`pyarrow.compute.sum` or :func:`pyarrow.compute.max`,
    any additional option is forwarded to the function.

    When used in a projection the resulting scalar is
    repeated for all the rows, when used inside a
    :class:`WindowExpression` it's repeated for all
    the rows of the group.
    """

    def __init__(self, func: Callable, expression: Expression, **options: Any) -> None:
        """
        :param func: The aggregate function to call.
        :param expression: The expression providing the values.
        :param options: Keyword arguments for the aggregate function.
        """
        self.func = func
        self.expression = expression
        self.options = options

    def __str__(self) -> str:
        func_qualname = utils.inspect.get_qualname(self.func)
        return f"{func_qualname}({self.expression})"

    @property
    def spans_rows(self) -> bool:
        return True

    def apply(self, batch: pa.RecordBatch) -> pa.Scalar:
        return self.func(self.expression.apply(batch), **self.options)


class WindowExpression(Expression):
    """Evaluate an expression separately for each group of rows.

    The rows are partitioned by the values of the ``partition_by``
    columns, the expression is then applied to the rows of each
    partition as if they were the only rows in the data,
    and the results are put back in the position of the rows
    they were computed for. The emitted array has thus
    the same length and order of the input batch.

    This is what allows to compute differences or running values
    per group without one group leaking in the next one::

        g | v  | DiffExpression(v) | WindowExpression(DiffExpression(v), ["g"])
        a | 1  | null              | null
        b | 10 | 9                 | null
        a | 3  | -7                | 2
        b | 5  | 2                 | -5

    When the expression is a reduction, its value is
    repeated for all the rows of the group.
    """

    _ROW_INDEX_COLUMN = "__arrowframe_row_index"

    def __init__(self, expression: Expression, partition_by: list[str]) -> None:
        """
        :param expression: The expression to evaluate for each group.
        :param partition_by: The columns whose values identify the groups.
        """
        if not partition_by:
            raise ExpressionError("A window expression requires at least one column")
        self.expression = expression
        self.partition_by = list(partition_by)

    def __str__(self) -> str:
        return f"WindowExpression({self.expression}, partition_by={self.partition_by})"

    @property
    def spans_rows(self) -> bool:
        return True

    def apply(self, batch: pa.RecordBatch) -> pa.Array:
        """Apply the expression group by group and reassemble the result.

        The row indices of each group are gathered through an
        hash aggregation that collects them in a list, as the
        aggregation is run without threads the indices in each
        list preserve the original order of the rows.

        The results of each group are then concatenated and
        sorted back by the row indices they were computed for.
        """
        if batch.num_rows == 0:
            return self._evaluate(batch)

        groups = self.group_indices(batch)
        logger.debug("window over %s found %d groups", self.partition_by, len(groups))

        results = [self._evaluate(batch.take(indices)) for indices in groups]
        values = pa.concat_arrays(results)
        positions = pa.concat_arrays(groups)
        return values.take(pc.sort_indices(positions))

    def group_indices(self, batch: pa.RecordBatch) -> list[pa.Array]:
        """Get the indices of the rows belonging to each group."""
        keys = pa.Table.from_batches([batch.select(self.partition_by)])
        keys = keys.append_column(
            self._ROW_INDEX_COLUMN, pa.array(range(batch.num_rows), type=pa.int64())
        )
        grouped = keys.group_by(self.partition_by, use_threads=False).aggregate(
            [(self._ROW_INDEX_COLUMN, "list")]
        )
        lists = as_array(grouped.column(f"{self._ROW_INDEX_COLUMN}_list"))
        return [lists[i].values for i in range(len(lists))]

    def _evaluate(self, batch: pa.RecordBatch) -> pa.Array:
        result = self.expression.apply(batch)
        if isinstance(result, pa.Scalar):
            return pa.repeat(result, batch.num_rows)
        return as_array(result)
