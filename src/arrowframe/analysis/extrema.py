"""Detect local minima and maxima through sign changes.

A series reaches a local minimum when it stops decreasing
and starts increasing, so the local minima can be found
by looking at how the sign of the difference between
successive values changes:

1. Compute the difference between each value and the previous one.
2. Reduce each difference to its sign: ``-1`` when the series
   goes down, ``1`` when it goes up, ``0`` when it stays flat.
3. Flat steps don't change the direction of the series,
   so zero signs are replaced with nulls and forward-filled
   with the most recent nonzero sign.
4. Compute the difference of the signs again. A flip from ``-1``
   to ``1`` produces ``2`` (a minimum), a flip from ``1``
   to ``-1`` produces ``-2`` (a maximum).

For example::

    value        | 3    | 1  | 1    | 2 | 0
    diff         | null | -2 | 0    | 1 | -2
    sign         | null | -1 | 0    | 1 | -1
    forward fill | null | -1 | -1   | 1 | -1
    diff         | null | null | 0  | 2 | -2

The flip is detected on the row where the series
starts moving in the new direction, which is the row
right after the minimum (or after the last row of a flat minimum).

The first and last values of a series are never reported
as extrema, as there is no value on one of their sides.
A strictly increasing series, like ``[1, 2, 3]``,
has no local minima at all.
"""

import pyarrow as pa

from ..dataframe import Dataframe, Expr, col

MINIMUM_FLIP = 2
MAXIMUM_FLIP = -2


def sign_changes(value: str | Expr) -> Expr:
    """How the direction of the series changes on each row.

    The resulting expression is ``2`` where the series
    turned from descending to ascending, ``-2`` where it turned
    from ascending to descending, ``0`` where it kept its
    direction and null where the direction isn't known yet.

    >>> import pyarrow as pa
    >>> sign_changes("v").expression.apply(pa.record_batch({"v": [3, 1, 1, 2, 0]})).to_pylist()
    [None, None, 0, 2, -2]
    """
    if isinstance(value, str):
        value = col(value)
    return value.diff().sign().replace(0, None).forward_fill().diff()


def local_minima(value: str | Expr) -> Expr:
    """True on the rows where the series starts rising after a minimum.

    Use ``.over(...)`` on the result to detect the minima
    of each group separately.
    """
    return sign_changes(value).eq(MINIMUM_FLIP)


def local_maxima(value: str | Expr) -> Expr:
    """True on the rows where the series starts falling after a maximum."""
    return sign_changes(value).eq(MAXIMUM_FLIP)


def count_local_minima(
    df: Dataframe,
    value: str | Expr,
    by: tuple[str, ...] | list[str] = (),
    name: str = "local_minima",
) -> Dataframe:
    """Count the local minima of ``value`` for each group.

    The rows of each group are considered in the order
    they have in the Dataframe, so time series should be
    sorted by time before counting their minima.

    >>> df = Dataframe.from_pydict({"group": [1, 1, 1, 2, 2, 2], "value": [1, 2, 3, 4, 5, 6]})
    >>> count_local_minima(df, "value", by=["group"]).to_pydict()
    {'group': [1, 2], 'local_minima': [0, 0]}

    :param df: The Dataframe with the series.
    :param value: The column, or expression, providing the values of the series.
    :param by: The columns identifying the groups,
               when empty the whole Dataframe is a single series.
    :param name: The name of the column with the counts.
    """
    return _count_flags(df, local_minima(value), by, name)


def count_local_maxima(
    df: Dataframe,
    value: str | Expr,
    by: tuple[str, ...] | list[str] = (),
    name: str = "local_maxima",
) -> Dataframe:
    """Count the local maxima of ``value`` for each group.

    See :func:`count_local_minima` for the details.
    """
    return _count_flags(df, local_maxima(value), by, name)


def _count_flags(
    df: Dataframe, flags: Expr, by: tuple[str, ...] | list[str], name: str
) -> Dataframe:
    # Summing booleans counts the true values, nulls count as zero.
    counts = flags.sum().alias(name)
    counted = df.group_by(*by).agg(counts) if by else df.agg(counts)
    return counted.with_columns(col(name).cast(pa.int64()))
