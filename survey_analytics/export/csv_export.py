"""
Export Formatter: wide CSV

Layout: one row per eligible response, one column per question.

    Response ID, Respondent ID, Respondent Name, Submitted At, <question 1>, ...

- Question columns follow order_index; header is the question text.
- Multi-value answers (multiple choice, file refs) are joined with the
  multi-value delimiter ("|" by default). Inside an item, "\\" is written
  as "\\\\" and the delimiter as "\\|".
- Scale/rating numbers: integral values without ".0".
- Missing or malformed answers: empty cell.
- Field quoting per RFC 4180 (csv module, QUOTE_MINIMAL, CRLF rows).

Version: export_v1
"""

import csv
import io
import re
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel

from survey_analytics import config
from survey_analytics.aggregation.aggregate import format_number
from survey_analytics.aggregation.models import AggregationResult

BASE_COLUMNS = ["Response ID", "Respondent ID", "Respondent Name", "Submitted At"]
CSV_MIME_TYPE = "text/csv"
ESCAPE_CHAR = "\\"


class ExportFile(BaseModel):
    content: bytes
    mime_type: str
    filename: str


def slugify(title: str) -> str:
    slug = re.sub(r"[^A-Za-z0-9]+", "-", title).strip("-").lower()
    return slug or "form"


def escape_item(item: str, delimiter: str) -> str:
    return item.replace(ESCAPE_CHAR, ESCAPE_CHAR * 2).replace(delimiter, ESCAPE_CHAR + delimiter)


def join_multi_value(items: List[str], delimiter: Optional[str] = None) -> str:
    delimiter = delimiter or config.EXPORT_MULTI_VALUE_DELIMITER
    return delimiter.join(escape_item(str(item), delimiter) for item in items)


def split_multi_value(cell: str, delimiter: Optional[str] = None) -> List[str]:
    """Inverse of join_multi_value. An empty cell is an empty list."""
    delimiter = delimiter or config.EXPORT_MULTI_VALUE_DELIMITER
    if cell == "":
        return []
    items: List[str] = []
    current: List[str] = []
    i = 0
    while i < len(cell):
        ch = cell[i]
        if ch == ESCAPE_CHAR and i + 1 < len(cell):
            current.append(cell[i + 1])
            i += 2
            continue
        if cell.startswith(delimiter, i):
            items.append("".join(current))
            current = []
            i += len(delimiter)
            continue
        current.append(ch)
        i += 1
    items.append("".join(current))
    return items


def render_cell(value: Any, delimiter: str) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return join_multi_value(list(value), delimiter)
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (int, float)):
        return format_number(value)
    return str(value)


def format_csv(result: AggregationResult, delimiter: Optional[str] = None) -> ExportFile:
    """
    Render an aggregation result as a wide CSV file.

    Args:
        result: Output of aggregate_form
        delimiter: Multi-value delimiter; must differ from the field delimiter

    Returns:
        ExportFile with UTF-8 content, text/csv mime type and a filename
        derived from the form title
    """
    delimiter = delimiter or config.EXPORT_MULTI_VALUE_DELIMITER
    if delimiter in (",", "\r", "\n", '"') or ESCAPE_CHAR in delimiter:
        raise ValueError(f"Invalid multi-value delimiter {delimiter!r}")

    question_ids = [q.question_id for q in result.per_question]
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\r\n", quoting=csv.QUOTE_MINIMAL)
    writer.writerow(BASE_COLUMNS + [q.text for q in result.per_question])
    for row in result.rows:
        writer.writerow([
            row.response_id,
            row.respondent_id,
            row.respondent_name or "",
            row.submitted_at.isoformat() if row.submitted_at else "",
        ] + [render_cell(row.values.get(qid), delimiter) for qid in question_ids])

    return ExportFile(
        content=buffer.getvalue().encode("utf-8"),
        mime_type=CSV_MIME_TYPE,
        filename=f"{slugify(result.form.title)}-responses.csv",
    )


def parse_csv(content: bytes) -> Tuple[List[str], List[List[str]]]:
    """Read an exported file back as (header, rows)."""
    reader = csv.reader(io.StringIO(content.decode("utf-8"), newline=""))
    lines = list(reader)
    if not lines:
        return [], []
    return lines[0], lines[1:]
