# tests/helpers.py
"""
Helpers shared by coursemend tests
"""
import csv
import io
from typing import Dict, List

from coursemend.lessons import csv_header

REVIEW_LABEL = "經文回顧及測試"


def make_lesson_csv(records: List[Dict[str, str]], slot_count: int = 8) -> str:
    """Render records as lesson CSV text with the full header"""
    header = csv_header(slot_count)
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(header)
    for record in records:
        writer.writerow([record.get(column, "") for column in header])
    return buf.getvalue()
