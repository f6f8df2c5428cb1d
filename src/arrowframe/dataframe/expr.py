"""Expressions of the Dataframe API.

The compute engine expressions are powerful but verbose,
computing the sign of the difference between each value
and the previous one requires writing::

    FunctionCallExpression(pc.sign, DiffExpression(ColumnRef("value")))

The :class:`Expr` object wraps a compute engine expression
and allows to build new ones by chaining methods
and using the python operators::

    col("value").diff().sign()
    (col("value") > 3) & col("value").is_not_null()

Each method returns a new :class:`Expr`, leaving
the original one untouched, so expressions can be
stored and reused to build other expressions.

Every expression also carries the name of the
column it will produce, which by default is the
name of the first column the expression refers to,
and can be changed with :meth:`Expr.alias`.
"""

from typing import Any, Callable

import pyarrow as pa
import pyarrow.compute as pc

from ..compute import aggregate
from ..compute.base import ColumnRef, Expression, Literal
from ..compute.expressions import (
    DiffExpression,
    FillNullExpression,
    FunctionCallExpression,
    ReduceExpression,
    ReplaceExpression,
    ShiftExpression,
    WindowExpression,
)


class Expr:
    """An expression that computes a column of a Dataframe.

    >>> import pyarrow as pa
    >>> expr = col("value").diff().sign()
    >>> expr.name
    'value'
    >>> expr.expression.apply(pa.record_batch({"value": [3, 1, 2]})).to_pylist()
    [None, -1, 1]
    """

    def __init__(
        self,
        expression: Expression,
        name: str,
        aggregation: type[aggregate.Aggregation] | None = None,
        aggregated: Expression | None = None,
    ) -> None:
        """
        :param expression: The compute engine expression.
        :param name: The name of the column the expression produces.
        :param aggregation: For reductions, the aggregation that computes
                            the same reduction in a group by.
        :param aggregated: For reductions, the expression being reduced.
        """
        self.expression = expression
        self.name = name
        self.aggregation = aggregation
        self.aggregated = aggregated

    def __str__(self) -> str:
        return f"{self.expression} AS {self.name}"

    __repr__ = __str__

    @property
    def is_reduction(self) -> bool:
        """If the expression reduces the data to a single value."""
        return self.aggregation is not None

    def to_aggregation(self) -> aggregate.Aggregation:
        """Get the engine aggregation that computes this reduction per group."""
        if not self.is_reduction:
            raise ValueError(
                f"Expression {self.name!r} is not an aggregation, "
                "use one like col('value').sum()"
            )
        aggregated = self.aggregated
        if isinstance(aggregated, ColumnRef):
            # Plain columns are aggregated by name.
            aggregated = aggregated.name
        return self.aggregation(aggregated)

    def alias(self, name: str) -> "Expr":
        """Rename the column produced by the expression."""
        return Expr(self.expression, name, self.aggregation, self.aggregated)

    def _derive(self, expression: Expression) -> "Expr":
        return Expr(expression, self.name)

    def _call(self, func: Callable, *args: Any) -> "Expr":
        return self._derive(
            FunctionCallExpression(func, self.expression, *map(_unwrap, args))
        )

    def _rcall(self, func: Callable, other: Any) -> "Expr":
        return self._derive(FunctionCallExpression(func, _unwrap(other), self.expression))

    # Arithmetic

    def __add__(self, other: Any) -> "Expr":
        return self._call(pc.add, other)

    def __radd__(self, other: Any) -> "Expr":
        return self._rcall(pc.add, other)

    def __sub__(self, other: Any) -> "Expr":
        return self._call(pc.subtract, other)

    def __rsub__(self, other: Any) -> "Expr":
        return self._rcall(pc.subtract, other)

    def __mul__(self, other: Any) -> "Expr":
        return self._call(pc.multiply, other)

    def __rmul__(self, other: Any) -> "Expr":
        return self._rcall(pc.multiply, other)

    def __truediv__(self, other: Any) -> "Expr":
        return self._call(pc.divide, other)

    def __rtruediv__(self, other: Any) -> "Expr":
        return self._rcall(pc.divide, other)

    def __neg__(self) -> "Expr":
        return self._call(pc.negate)

    # Comparison

    def eq(self, other: Any) -> "Expr":
        """Values equal to ``other``."""
        return self._call(pc.equal, other)

    def ne(self, other: Any) -> "Expr":
        """Values not equal to ``other``."""
        return self._call(pc.not_equal, other)

    def gt(self, other: Any) -> "Expr":
        return self._call(pc.greater, other)

    def ge(self, other: Any) -> "Expr":
        return self._call(pc.greater_equal, other)

    def lt(self, other: Any) -> "Expr":
        return self._call(pc.less, other)

    def le(self, other: Any) -> "Expr":
        return self._call(pc.less_equal, other)

    __eq__ = eq  # type: ignore[assignment]
    __ne__ = ne  # type: ignore[assignment]
    __gt__ = gt
    __ge__ = ge
    __lt__ = lt
    __le__ = le
    __hash__ = None  # type: ignore[assignment]

    # Logic

    def __and__(self, other: Any) -> "Expr":
        return self._call(pc.and_kleene, other)

    def __or__(self, other: Any) -> "Expr":
        return self._call(pc.or_kleene, other)

    def __invert__(self) -> "Expr":
        return self._call(pc.invert)

    # Element-wise functions

    def sign(self) -> "Expr":
        """``-1``, ``0`` or ``1`` depending on the sign of each value."""
        return self._call(pc.sign)

    def abs(self) -> "Expr":
        return self._call(pc.abs)

    def is_null(self) -> "Expr":
        return self._call(pc.is_null)

    def is_not_null(self) -> "Expr":
        return self._call(pc.is_valid)

    def cast(self, dtype: pa.DataType) -> "Expr":
        """Convert the values to another type."""
        return self._call(pc.cast, dtype)

    def replace(self, old: Any, new: Any) -> "Expr":
        """Replace every ``old`` value with ``new``, ``None`` meaning null."""
        return self._derive(ReplaceExpression(self.expression, old, new))

    def fill_null(self, value: Any = None, strategy: str | None = None) -> "Expr":
        """Replace nulls with a value or with their neighbours.

        :param value: The value to use in place of nulls.
        :param strategy: ``"forward"`` to use the last non-null value,
                         ``"backward"`` to use the next non-null value.
        """
        return self._derive(FillNullExpression(self.expression, value, strategy))

    def forward_fill(self) -> "Expr":
        """Replace nulls with the last non-null value."""
        return self.fill_null(strategy="forward")

    def backward_fill(self) -> "Expr":
        """Replace nulls with the next non-null value."""
        return self.fill_null(strategy="backward")

    # Functions looking at the other rows

    def diff(self, n: int = 1) -> "Expr":
        """Difference between each value and the one ``n`` rows before."""
        return self._derive(DiffExpression(self.expression, n))

    def shift(self, n: int = 1) -> "Expr":
        """Move the values ``n`` rows forward, or backward if negative."""
        return self._derive(ShiftExpression(self.expression, n))

    def over(self, *partition_by: str) -> "Expr":
        """Compute the expression independently for each group of rows.

        The result has one value per row, reductions are
        repeated for all the rows of each group::

            col("value").sum().over("sensor")
        """
        return self._derive(WindowExpression(self.expression, list(partition_by)))

    # Reductions

    def _reduce(
        self, func: Callable, aggregation: type[aggregate.Aggregation], **options: Any
    ) -> "Expr":
        return Expr(
            ReduceExpression(func, self.expression, **options),
            self.name,
            aggregation=aggregation,
            aggregated=self.expression,
        )

    def sum(self) -> "Expr":
        """Sum of the values, ``0`` when there are none."""
        return self._reduce(pc.sum, aggregate.SumAggregation, min_count=0)

    def count(self) -> "Expr":
        """Number of non-null values."""
        return self._reduce(pc.count, aggregate.CountAggregation)

    def mean(self) -> "Expr":
        return self._reduce(pc.mean, aggregate.MeanAggregation)

    def min(self) -> "Expr":
        return self._reduce(pc.min, aggregate.MinAggregation)

    def max(self) -> "Expr":
        return self._reduce(pc.max, aggregate.MaxAggregation)


def _unwrap(value: Any) -> Any:
    if isinstance(value, Expr):
        return value.expression
    return value


def col(name: str) -> Expr:
    """Refer to a column of the Dataframe by its name."""
    return Expr(ColumnRef(name), name)


def lit(value: Any) -> Expr:
    """A constant value, named ``literal`` by default."""
    return Expr(Literal(value), "literal")


def to_expr(value: str | Expr | Expression) -> Expr:
    """Accept column names and engine expressions wherever an Expr is expected."""
    if isinstance(value, Expr):
        return value
    if isinstance(value, str):
        return col(value)
    if isinstance(value, Expression):
        name = value.name if isinstance(value, ColumnRef) else str(value)
        return Expr(value, name)
    raise ValueError(f"Invalid expression {value!r}, expected a column name or Expr")


def named_exprs(exprs: tuple[str | Expr, ...], named: dict[str, Expr]) -> dict[str, Expr]:
    """Collect expressions by the name of the column they produce.

    Two expressions producing the same column would overwrite
    each other, so duplicate names are rejected.
    """
    result: dict[str, Expr] = {}
    candidates = [to_expr(expr) for expr in exprs]
    candidates += [to_expr(expr).alias(name) for name, expr in named.items()]
    for expr in candidates:
        if expr.name in result:
            raise ValueError(
                f"Multiple expressions produce the column {expr.name!r}, "
                "use alias() to give them different names"
            )
        result[expr.name] = expr
    return result
