"""ArrowFrame

A lazy, columnar dataframe library built on top of Apache Arrow.

ArrowFrame was written as the companion code of the
"Getting started with lazy dataframes" tutorial, so that
every example shown in the tutorial can be run and checked.
Like the tutorial, it is meant for learning purposes, and each
component is self documented in literate programming style.

The primary components are:

* The Compute Engine, in charge of executing query plans on the data.
* The Dataframe API, which provides an high level, expression
  based API for the compute engine.
* The Analysis helpers, which show how expressions can be chained
  to answer real questions, like counting the local minima
  of a time series for each group of data.

For the user guide and code documentation of each component, refer to the
component itself.
"""

from . import compute
from .dataframe import Dataframe, col, lit

__all__ = ("compute", "Dataframe", "col", "lit")
