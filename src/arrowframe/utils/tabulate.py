"""Format tabular data into a text table for print.

the `tabulate` function takes a `pyarrow.RecordBatch` or `pyarrow.Table`
and formats it into a text table. It will truncate long strings,
format floats to 2 decimal places, show nulls as ``null``
and limit the number of rows to display.
It's used to print Dataframes and the results of the shell commands.

Example:

    >>> import pyarrow as pa
    >>> data = {
    ...     "group": [1, 1, 2],
    ...     "value": [1, None, 4],
    ...     "ratio": [0.5, 1.25, 2.0],
    ... }
    >>> print(tabulate(pa.table(data)))
    group | value | ratio
    ----- | ----- | -----
    1     | 1     | 0.50
    1     | null  | 1.25
    2     | 4     | 2.00
"""

from typing import Any

import pyarrow as pa

from ..config import CONFIG


def tabulate(data: pa.RecordBatch | pa.Table, max_rows: int | None = None) -> str:
    """Format a RecordBatch or Table into a text table.

    Will produce a string like::

        group | local_minima
        ----- | ------------
        1     | 0
        2     | 0

    :param data: The data to format.
    :param max_rows: How many rows to print at most,
                     defaults to the ``tabulate_max_rows`` config option.
    """
    if max_rows is None:
        max_rows = CONFIG["tabulate_max_rows"]

    cols = data.column_names
    rows = [
        [format_value(row[c]) for c in cols]
        for row in data.slice(0, max_rows).to_pylist()
    ]

    colsizes = compute_max_colsize(cols, rows)
    header = [maketablerow(cols, colsizes=colsizes)]
    separator = [maketablerow(["-"] * len(cols), colsizes=colsizes, fillvalue="-")]
    textrows = [maketablerow(row, colsizes=colsizes) for row in rows]

    table = "\n".join(header + separator + textrows)
    if data.num_rows > max_rows:
        table += f"\n... and {data.num_rows - max_rows} more rows"
    return table


def compute_max_colsize(cols: list[str], rows: list[list[str]]) -> list[int]:
    """Compute the maximum size of each column in a table."""
    return [
        max([len(row[colidx]) for row in rows] + [len(cols[colidx])])
        for colidx, _ in enumerate(cols)
    ]


def maketablerow(cols: list[str], colsizes: list[int], fillvalue: str = " ") -> str:
    """Make a table row with the given column sizes."""
    return " | ".join(
        [col.ljust(colsizes[idx], fillvalue) for idx, col in enumerate(cols)]
    ).rstrip()


def format_value(v: Any) -> str:
    """Format a value to be printed in the table.

    This function will format floats to 2 decimal places,
    and truncate long strings.
    """
    if v is None:
        return "null"
    elif isinstance(v, bool):
        return "true" if v else "false"
    elif isinstance(v, float):
        return f"{v:.2f}"

    v = str(v)
    max_width = CONFIG["tabulate_max_width"]
    if len(v) > max_width:
        v = v[: max_width - 3] + "..."
    return v
