from arrowframe.analysis import count_local_maxima, count_local_minima, local_minima
from arrowframe.dataframe import Dataframe, col

df = Dataframe.open("data/readings.csv").sort("day")

print(df.filter(col("sensor") == "north").head(10))
print()
print(df.group_by("sensor").agg(col("value").mean(), days=col("day").count()))
print()
print(count_local_minima(df, "value", by=["sensor"]))
print()
print(count_local_maxima(df, "value", by=["sensor"]))
print()
print(
  df.with_columns(rising=local_minima("value").over("sensor"))
  .filter(col("rising"))
  .head(10)
)
