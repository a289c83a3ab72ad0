"""
lessons.py - Build lesson records from an edited lesson CSV

Each data row becomes one lesson. Rows without an id or unitId are skipped
whole; their unit_name still counts towards the unit names.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from coursemend.config_utils import ReconcileRules
from coursemend.csv_parser import parse_csv, rows_to_records
from coursemend.errors import empty_csv_error, missing_csv_columns_error
from coursemend.reading_links import link_columns, prepend_reading_section, read_link_slots

logger = logging.getLogger(__name__)

LESSON_COLUMNS = ["id", "unitId", "name", "video-title", "video-url", "quizId", "content"]
UNIT_NAME_COLUMN = "unit_name"
REQUIRED_COLUMNS = ["id", "unitId"]


def csv_header(slot_count: int) -> List[str]:
    """Full lesson CSV header for the given number of link slots."""
    return LESSON_COLUMNS + link_columns(slot_count) + [UNIT_NAME_COLUMN]


def lesson_from_record(record: Dict[str, str], rules: ReconcileRules) -> Optional[Dict[str, Any]]:
    """
    Build one lesson from a CSV record, or None when id/unitId is missing.

    Empty video fields are left out; an empty quizId becomes None.
    """
    lesson_id = record.get("id", "")
    unit_id = record.get("unitId", "")
    if not lesson_id or not unit_id:
        return None

    slots = read_link_slots(record, rules.link_slots)
    content = prepend_reading_section(record.get("content", ""), slots, rules.reading_heading)

    lesson: Dict[str, Any] = {
        "id": lesson_id,
        "unitId": unit_id,
        "name": record.get("name", ""),
        "content": content,
    }
    if record.get("video-title"):
        lesson["video-title"] = record["video-title"]
    if record.get("video-url"):
        lesson["video-url"] = record["video-url"]
    lesson["quizId"] = record.get("quizId") or None
    return lesson


def parse_lessons(
    csv_text: str,
    rules: ReconcileRules,
    source: str = "<csv>",
) -> Tuple[Dict[str, Dict[str, Any]], Dict[str, str]]:
    """
    Parse a lesson CSV.

    Returns (lessons by id, unit names by unit id). Later rows win when an
    id repeats.

    Raises:
        CsvLayoutError: no data rows, or no id/unitId column
    """
    rows = parse_csv(csv_text)
    if len(rows) < 2:
        raise empty_csv_error(source)

    headers, records = rows_to_records(rows)
    missing = [c for c in REQUIRED_COLUMNS if c not in headers]
    if missing:
        raise missing_csv_columns_error(source, missing)

    absent = [c for c in csv_header(rules.link_slots) if c not in headers and c not in REQUIRED_COLUMNS]
    if absent:
        logger.warning(f"[csv:warn] {source} has no column(s) {', '.join(absent)}; reading them as empty")

    lessons: Dict[str, Dict[str, Any]] = {}
    unit_names: Dict[str, str] = {}
    skipped = 0

    # Row numbers count the header as row 1
    for row_number, record in enumerate(records, start=2):
        unit_id = record.get("unitId", "")
        unit_name = record.get(UNIT_NAME_COLUMN, "")
        if unit_id and unit_name:
            unit_names[unit_id] = unit_name

        lesson = lesson_from_record(record, rules)
        if lesson is None:
            logger.debug(f"[csv] Row {row_number}: missing id or unitId, skipped")
            skipped += 1
            continue
        if lesson["id"] in lessons:
            logger.debug(f"[csv] Row {row_number}: {lesson['id']} repeats an earlier row; later row wins")
        lessons[lesson["id"]] = lesson

    logger.info(f"[csv] Processed {len(lessons)} lessons from {source} ({skipped} rows skipped)")
    return lessons, unit_names
