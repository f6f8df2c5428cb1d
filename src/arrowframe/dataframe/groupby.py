"""Grouping of Dataframe rows.

Grouping is done in two steps, first the columns
identifying the groups are chosen, then the aggregations
to compute for each group are provided::

    df.group_by("sensor").agg(col("value").mean(), readings=col("value").count())

Only reductions, like ``.sum()`` or ``.max()``, can be
aggregated. The reduced expression can be as complex as needed,
it will be evaluated on the rows of each group in the order they
appear in the data.
"""

import logging
from typing import TYPE_CHECKING

from ..compute import AggregateNode, CoalesceNode
from .expr import Expr, named_exprs

if TYPE_CHECKING:
    from .dataframe import Dataframe

logger = logging.getLogger(__name__)


class GroupBy:
    """Rows of a Dataframe grouped by one or more columns.

    Created by :meth:`arrowframe.dataframe.Dataframe.group_by`.
    """

    def __init__(self, dataframe: "Dataframe", keys: list[str]) -> None:
        """
        :param dataframe: The Dataframe whose rows are grouped.
        :param keys: The columns identifying the groups,
                     no columns means all rows are one group.
        """
        self.dataframe = dataframe
        self.keys = keys

    def __str__(self) -> str:
        return f"GroupBy(keys={self.keys}, {self.dataframe.node})"

    def agg(self, *exprs: Expr, **named: Expr) -> "Dataframe":
        """Compute aggregations for each group.

        Returns a new Dataframe with the key columns followed by
        one column for each aggregation.

        :param exprs: Reductions named after the column they reduce.
        :param named: Reductions named after the keyword.
        """
        aggregations = named_exprs(exprs, named)
        if not aggregations:
            raise ValueError("At least one aggregation must be provided")

        clashing = set(aggregations) & set(self.keys)
        if clashing:
            raise ValueError(
                f"Aggregations {sorted(clashing)} clash with the group keys, use alias()"
            )

        engine_aggregations = {
            name: expr.to_aggregation() for name, expr in aggregations.items()
        }

        node = self.dataframe.node
        if any(expr.aggregated.spans_rows for expr in aggregations.values()):
            # Each group must be seen as a whole by the aggregations.
            logger.debug("aggregations over %s require coalescing the data", self.keys)
            node = CoalesceNode(node)

        return self.dataframe.__class__(
            AggregateNode(list(self.keys), engine_aggregations, node)
        )
