"""Defaults shared by the components of ArrowFrame.

All tunable values live in the ``CONFIG`` dictionary,
the components read them when they need a default,
and explicit arguments always take precedence.
"""

from typing import Any

CONFIG: dict[str, Any] = {
    # Rows per batch when reading parquet files.
    "parquet_batch_size": 65536,
    # Bytes per block when reading CSV and JSON files, None lets pyarrow decide.
    "read_block_size": None,
    # Rows printed by tabulate before truncating the output.
    "tabulate_max_rows": 20,
    # Strings longer than this are truncated by tabulate.
    "tabulate_max_width": 30,
    "log_format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
}
