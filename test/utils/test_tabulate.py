import pyarrow as pa

from arrowframe.config import CONFIG
from arrowframe.utils.tabulate import format_value, tabulate


def test_tabulate():
    data = pa.table({"sensor": ["a", "bb"], "value": [1.5, None]})
    assert tabulate(data) == (
        "sensor | value\n"
        "------ | -----\n"
        "a      | 1.50\n"
        "bb     | null"
    )


def test_tabulate_recordbatch():
    data = pa.record_batch({"flag": [True, False]})
    assert tabulate(data) == "flag\n-----\ntrue\nfalse"


def test_tabulate_max_rows():
    data = pa.table({"value": list(range(5))})
    assert tabulate(data, max_rows=2) == "value\n-----\n0\n1\n... and 3 more rows"


def test_tabulate_default_max_rows():
    data = pa.table({"value": list(range(CONFIG["tabulate_max_rows"] + 1))})
    assert tabulate(data).endswith("... and 1 more rows")


def test_format_value():
    assert format_value(None) == "null"
    assert format_value(2.0) == "2.00"
    assert format_value(3) == "3"
    assert format_value("x" * 40) == "x" * 27 + "..."
