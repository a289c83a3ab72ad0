"""
csv_parser.py - Lenient CSV reading and writing for lesson exports

Lesson CSVs come out of spreadsheet edits: quoted fields hold commas,
doubled quotes and whole Markdown bodies spanning many lines. Reading is
best-effort; a file that ends inside an open quote yields its last field
as-is instead of raising.
"""

import csv
import io
import sys
from pathlib import Path
from typing import Dict, List, Sequence, Tuple


def _lift_field_size_limit() -> None:
    """Allow fields of any size; whole lesson bodies can exceed the 128 KiB default."""
    limit = sys.maxsize
    while True:
        try:
            csv.field_size_limit(limit)
            return
        except OverflowError:
            # C long is narrower than sys.maxsize on some platforms
            limit //= 2


def parse_csv(text: str) -> List[List[str]]:
    """
    Split CSV text into rows of fields.

    CRLF, LF and lone CR all end a row when outside quotes. Blank rows are
    dropped, which includes the one a trailing newline would produce.
    """
    if text.startswith("\ufeff"):
        text = text[1:]

    _lift_field_size_limit()

    # newline="" keeps line breaks inside quoted fields intact
    reader = csv.reader(io.StringIO(text, newline=""), strict=False)
    rows = []
    for row in reader:
        if not row or row == [""]:
            continue
        rows.append(row)
    return rows


def rows_to_records(rows: Sequence[Sequence[str]]) -> Tuple[List[str], List[Dict[str, str]]]:
    """
    Turn parsed rows into header-keyed records.

    The first row is the header. Cells missing from a short row read as "".
    When a header name repeats, the first column with that name wins.
    """
    if not rows:
        return [], []

    headers = [h.strip() for h in rows[0]]
    index: Dict[str, int] = {}
    for i, name in enumerate(headers):
        index.setdefault(name, i)

    records = []
    for row in rows[1:]:
        record = {}
        for name, i in index.items():
            record[name] = row[i] if i < len(row) else ""
        records.append(record)
    return headers, records


def write_csv(path: Path, rows: Sequence[Sequence[str]]) -> None:
    """Write rows with minimal quoting and \\n line endings."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f, lineterminator="\n")
        for row in rows:
            writer.writerow(row)
