"""Command line interface for counting local extrema in files.

This module provides a command line interface to the
:func:`arrowframe.analysis.count_local_minima` and
:func:`arrowframe.analysis.count_local_maxima` analyses.

The file is opened with :meth:`arrowframe.dataframe.Dataframe.open`,
so its format is guessed from the extension, and the results are
printed to the console in a tabular format using
the :mod:`arrowframe.utils.tabulate` module.
"""

import argparse
import logging

import pyarrow as pa

from arrowframe.analysis import count_local_maxima, count_local_minima
from arrowframe.config import CONFIG
from arrowframe.dataframe import Dataframe
from arrowframe.utils import tabulate

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the parser for the command line arguments."""
    parser = argparse.ArgumentParser(
        description="Count the local minima or maxima of a column in a file."
    )
    parser.add_argument("file", type=str, help="CSV, Parquet or JSON file to read.")
    parser.add_argument(
        "--value", required=True, help="The column with the values of the series."
    )
    parser.add_argument(
        "--by",
        action="append",
        default=[],
        help="Column identifying the groups. Can be provided multiple times.",
    )
    parser.add_argument(
        "--order-by",
        action="append",
        default=[],
        help="Sort the rows by this column before looking for extrema. "
        "Can be provided multiple times.",
    )
    parser.add_argument(
        "--maxima",
        action="store_true",
        help="Count the local maxima instead of the local minima.",
    )
    parser.add_argument(
        "--max-rows",
        type=int,
        default=CONFIG["tabulate_max_rows"],
        help="Maximum number of rows to print.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Verbosity of the logs.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Parse the command line arguments and count the extrema."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level, format=CONFIG["log_format"])

    try:
        df = Dataframe.open(args.file)
    except ValueError as e:
        print(f"Invalid file, {e}")
        return 1

    if args.order_by:
        df = df.sort(*args.order_by)

    count = count_local_maxima if args.maxima else count_local_minima
    result = count(df, args.value, by=args.by)
    logger.info("query plan: %s", result.node)

    try:
        table = result.to_arrow()
    except (OSError, KeyError, pa.ArrowException) as e:
        print(f"Unable to count extrema, {e}")
        return 1

    print(tabulate.tabulate(table, max_rows=args.max_rows))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
