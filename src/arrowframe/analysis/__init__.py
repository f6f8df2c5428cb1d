"""Analyses built by chaining Dataframe expressions.

The Dataframe API is expressive enough that many questions
can be answered by combining a few expressions, without
writing any new compute engine code.

The :mod:`arrowframe.analysis.extrema` module shows how
to find the local minima and maxima of series of values,
and how to count them for each group of the data.
"""

from .extrema import (
    count_local_maxima,
    count_local_minima,
    local_maxima,
    local_minima,
    sign_changes,
)

__all__ = (
    "sign_changes",
    "local_minima",
    "local_maxima",
    "count_local_minima",
    "count_local_maxima",
)
