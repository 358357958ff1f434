"""
Export Formatter

Aggregation result -> wide-format CSV (one row per response, one column
per question).

Version: export_v1
"""

from .csv_export import (
    ExportFile,
    BASE_COLUMNS,
    CSV_MIME_TYPE,
    format_csv,
    parse_csv,
    join_multi_value,
    split_multi_value,
    slugify,
)

__all__ = [
    "ExportFile",
    "BASE_COLUMNS",
    "CSV_MIME_TYPE",
    "format_csv",
    "parse_csv",
    "join_multi_value",
    "split_multi_value",
    "slugify",
]

__version__ = "export_v1"
