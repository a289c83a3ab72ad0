"""
export_csv.py - Flatten a course snapshot into the editable lesson CSV

The output is the same layout that reconstruct reads back: lesson columns,
the reading links split out into link slot columns, and the unit name.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List

from coursemend.config_utils import ReconcileRules
from coursemend.csv_parser import write_csv
from coursemend.lessons import csv_header
from coursemend.reading_links import extract_reading_section, place_links
from coursemend.snapshot import load_snapshot

logger = logging.getLogger(__name__)


def lesson_row(lesson: Dict[str, Any], unit_name: str, rules: ReconcileRules) -> List[str]:
    content, links = extract_reading_section(lesson.get("content") or "", rules.reading_heading)
    if len(links) > rules.link_slots:
        logger.warning(
            f"[export:warn] {lesson.get('id')}: {len(links)} reading links, "
            f"only {rules.link_slots} fit in the CSV"
        )
    slots = place_links(links, rules.link_slots)

    row = [
        lesson.get("id") or "",
        lesson.get("unitId") or "",
        lesson.get("name") or "",
        lesson.get("video-title") or "",
        lesson.get("video-url") or "",
        lesson.get("quizId") or "",
        content,
    ]
    for slot in slots:
        row.extend([slot.text, slot.url] if slot else ["", ""])
    row.append(unit_name)
    return row


def build_export_rows(snapshot: Dict[str, Any], rules: ReconcileRules) -> List[List[str]]:
    """Header row plus one row per lesson, in lesson-map order."""
    units = snapshot.get("units", {})
    rows = [csv_header(rules.link_slots)]
    for lesson in snapshot.get("lessons", {}).values():
        unit = units.get(lesson.get("unitId"), {})
        rows.append(lesson_row(lesson, unit.get("name") or "", rules))
    return rows


def export_csv(json_path: Path, csv_path: Path, rules: ReconcileRules) -> int:
    """
    Write the lesson CSV for a snapshot file.

    Returns the number of lesson rows written.
    """
    snapshot = load_snapshot(json_path)
    rows = build_export_rows(snapshot, rules)
    write_csv(Path(csv_path), rows)
    logger.info(f"[export] Wrote {len(rows) - 1} lesson(s) to {csv_path}")
    return len(rows) - 1
