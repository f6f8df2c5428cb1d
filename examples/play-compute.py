import pyarrow.compute as pc

from arrowframe.compute import (
    AggregateNode,
    CoalesceNode,
    CSVDataSource,
    DiffExpression,
    FillNullExpression,
    FunctionCallExpression,
    ReplaceExpression,
    SortNode,
    SumAggregation,
    col,
)

# The local minima of each sensor, built directly with the compute engine.
sign_changes = DiffExpression(
    FillNullExpression(
        ReplaceExpression(
            FunctionCallExpression(pc.sign, DiffExpression(col("value"))), 0, None
        ),
        strategy="forward",
    )
)
query = AggregateNode(
    ["sensor"],
    {"local_minima": SumAggregation(FunctionCallExpression(pc.equal, sign_changes, 2))},
    CoalesceNode(SortNode(["day"], [False], CSVDataSource("data/readings.csv"))),
)
print(query)
for batch in query.batches():
    print("---")
    print(batch)
