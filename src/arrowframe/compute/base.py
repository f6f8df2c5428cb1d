"""Base classes and interfaces for Compute Engine

This module defines the base components that are
necessary to represent a query plan and execute it.
"""

import abc
from typing import Any, Iterator

import pyarrow as pa


class QueryPlanNode(abc.ABC):
    """A node of a query execution plan.

    The Query plan is represented as a tree
    of nodes. Each node is a step in the execution
    and all previous steps are children of the
    last one.

    For example a simple plan might involve
    loading data and filtering it::

        LoadDataNode -> FilterDataNode(filter)

    That would be a plan where the last step
    is filtering, and the LoadDataNode is a child
    of the filter node.

    Each Node accepts :class:`pyarrow.RecordBatch`
    data as its input and emits a new
    :class:`pyarrow.RecordBatch` as its output.

    The base `QueryPlanNode` class does nothing
    and purely acts as the interface that all nodes
    must implement. Actual work will be done
    in the subclasses.

    For example a simple node that takes data
    and just forwards it as is after printing
    its content can be implemented as::

        class DebugDataNode(QueryPlanNode):
            def __init__(self, child):
                self.child = child

            def batches(self):
                for b in self.child.batches():
                    print(b)
                    yield b

            def __str__(self):
                return f"DebugDataNode()"
    """

    RecordBatchesGenerator = Iterator[pa.RecordBatch]

    @abc.abstractmethod
    def batches(self) -> RecordBatchesGenerator:
        """Emits the batches for the next node.

        Each QueryPlan node is expected to be able to
        generate data that has to be provided to the next
        node in the plan.

        Usually this happens by consuming data from its
        child nodes, transforming it somehow, and yielding
        it back to the next consumer.
        """
        ...

    @abc.abstractmethod
    def __str__(self) -> str:
        """Human readable representation of the node."""
        ...


class Expression(abc.ABC):
    """Expression to apply to a RecordBatch.

    Expressions are some form of operation that
    has to be applied to the data of a :class:`pyarrow.RecordBatch`
    to create new data.

    Typical example of expressions are: A + B
    which is expected to sum column A of the RecordBatch
    to column B of the RecordBatch and return the result.

    As our engine is Column Major, applying an expression
    usually results in a new column, thus in a
    :class:`pyarrow.Array` that contains the data
    for that column. Reductions, like the sum of a column,
    will instead result in a single :class:`pyarrow.Scalar`.

    Some expressions compute the value of a row looking
    at the other rows, for example the difference between
    a value and the previous one. Those expressions are
    marked by :attr:`spans_rows` and they only produce
    correct results when the whole data they have to
    look at is provided in a single batch.
    """

    @abc.abstractmethod
    def apply(self, batch: pa.RecordBatch) -> pa.Array | pa.Scalar:
        """Apply the expression to a RecordBatch.

        Expression classes must implement this method
        to dictate what will happen when an expression
        is applied.

        Suppose want to implement a ``SumExpression`` class
        that might look like::

            class SumExpression(Expression):
                def __init__(self, leftcol, rightcol):
                    self.lcol = lcol  # left column name
                    self.rcol = rcol  # right column name

                def apply(self, batch):
                    return pyarrow.compute.add(
                        batch[self.lcol],
                        batch[self.rcol]
                    )
        """
        ...

    @abc.abstractmethod
    def __str__(self) -> str:
        """Human readable representation of the expression."""
        ...

    def __repr__(self) -> str:
        return str(self)

    @property
    def spans_rows(self) -> bool:
        """If the result for a row depends on the other rows."""
        return False


class ColumnRef(Expression):
    """References a column in a record batch.

    When another expression or the engine need
    to operate on a specific column, we will
    need a way to reference that column and its data.

    This expression is aware of the column and when
    applied to a record batch returns the data for
    that column.
    """

    def __init__(self, name: str) -> None:
        """
        :param name: The name of the column being referenced.
        """
        self.name = name

    def apply(self, batch: pa.RecordBatch) -> pa.Array:
        """Get the data for the column."""
        if self.name not in batch.schema.names:
            raise KeyError(f"Column {self.name!r} not found in {batch.schema.names}")
        return batch.column(self.name)

    def __str__(self) -> str:
        return f"ColumnRef({self.name})"


class Literal(Expression):
    """A constant value.

    Applying a literal to a batch always returns
    the same :class:`pyarrow.Scalar`, the compute
    functions will take care of broadcasting it
    against the columns it is combined with.
    """

    def __init__(self, value: Any) -> None:
        """
        :param value: The python value, or pyarrow scalar, of the literal.
        """
        self.value = value if isinstance(value, pa.Scalar) else pa.scalar(value)

    def apply(self, batch: pa.RecordBatch) -> pa.Scalar:
        """Return the literal value."""
        return self.value

    def __str__(self) -> str:
        return f"Literal({self.value!r})"


col = ColumnRef
lit = Literal
