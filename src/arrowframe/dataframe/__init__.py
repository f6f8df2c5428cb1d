"""Dataframe library built on top of the arrowframe compute engine.

A dataframe library is a tool designed to handle and manipulate structured data,
typically in the form of tables (i.e., rows and columns).
It allows users to load data from various sources (like CSV files or databases),
explore it, apply transformations, and analyze it.

Dataframes provide an efficient way to perform operations such as filtering,
aggregation, and merging of datasets.

The arrowframe Dataframe is lazy: every transformation only
extends a query plan, which is executed by the compute engine
when the data is actually requested::

    df = (
        Dataframe.open("readings.csv")
        .filter(col("value").is_not_null())
        .group_by("sensor")
        .agg(col("value").mean())
    )
    print(df.explain())  # Nothing was read yet
    print(df)            # Now the file is read and the plan executed

Expressions are built by chaining methods on :func:`col`,
the :class:`Expr` objects they produce are translated to
compute engine expressions and nodes.
"""

from .dataframe import Dataframe
from .expr import Expr, col, lit
from .groupby import GroupBy

__all__ = ("Dataframe", "Expr", "GroupBy", "col", "lit")
