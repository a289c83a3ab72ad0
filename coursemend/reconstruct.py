"""
reconstruct.py - Rebuild a course snapshot from an edited lesson export

Pipeline, run once over one in-memory snapshot:

1. canonicalize unit ids (unit map and course unit arrays), applying unit
   names from the import
2. drop superseded daily lessons, merge in the imported lessons
3. reattach lessons whose unit is gone to the fallback unit
4. rebuild unit lesson summaries and course lesson counts

Both inputs are read before anything is written; the output is written
once, whole.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from coursemend.config_utils import ReconcileRules
from coursemend.errors import ConfigurationError
from coursemend.lessons import parse_lessons
from coursemend.markdown_files import load_markdown_lessons
from coursemend.reconcile import merge_lessons, recompute_aggregates, repair_unit_refs
from coursemend.snapshot import load_snapshot, read_input_text, write_snapshot
from coursemend.unit_ids import normalize_unit_ids

logger = logging.getLogger(__name__)

Lessons = Dict[str, Dict[str, Any]]


def reconstruct_course(
    snapshot: Dict[str, Any],
    lessons: Lessons,
    unit_names: Dict[str, str],
    rules: ReconcileRules,
) -> Dict[str, Any]:
    """Apply the imported lessons to the snapshot in place and return it."""
    mapping = normalize_unit_ids(snapshot, unit_names, rules)

    merged = merge_lessons(snapshot["lessons"], lessons, rules, mapping)
    snapshot["lessons"] = merged

    repair_unit_refs(merged, snapshot["units"], rules, imported_ids=lessons.keys())
    recompute_aggregates(snapshot, rules)

    logger.info(
        f"[reconstruct] {len(merged)} lesson(s) across {len(snapshot['units'])} unit(s)"
    )
    return snapshot


def load_lesson_source(
    rules: ReconcileRules,
    csv_path: Optional[Path] = None,
    markdown_dir: Optional[Path] = None,
) -> Tuple[Lessons, Dict[str, str]]:
    """Read imported lessons from exactly one of a CSV file or a Markdown folder."""
    if (csv_path is None) == (markdown_dir is None):
        raise ConfigurationError(
            message="Give exactly one lesson source",
            suggestion="Use either --csv PATH or --markdown DIR",
            context={"csv": csv_path, "markdown": markdown_dir},
        )
    if csv_path is not None:
        csv_path = Path(csv_path)
        return parse_lessons(read_input_text(csv_path), rules, source=csv_path.name)
    return load_markdown_lessons(Path(markdown_dir))


def run_reconstruct(
    json_path: Path,
    output_path: Path,
    rules: ReconcileRules,
    csv_path: Optional[Path] = None,
    markdown_dir: Optional[Path] = None,
) -> Dict[str, Any]:
    """
    Read the snapshot and the lesson source, reconstruct, write the result.

    Any read or parse failure raises before the output file is touched.
    """
    snapshot = load_snapshot(Path(json_path))
    lessons, unit_names = load_lesson_source(rules, csv_path=csv_path, markdown_dir=markdown_dir)

    reconstruct_course(snapshot, lessons, unit_names, rules)
    write_snapshot(Path(output_path), snapshot)
    return snapshot


def run_normalize(json_path: Path, output_path: Path, rules: ReconcileRules) -> Dict[str, str]:
    """Only canonicalize unit ids, without touching lessons or summaries."""
    snapshot = load_snapshot(Path(json_path))
    mapping = normalize_unit_ids(snapshot, None, rules)
    for lesson in snapshot["lessons"].values():
        if lesson.get("unitId") in mapping:
            lesson["unitId"] = mapping[lesson["unitId"]]
    write_snapshot(Path(output_path), snapshot)
    return mapping
