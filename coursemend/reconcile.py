"""
reconcile.py - Merge imported lessons into a snapshot and rebuild unit summaries

Lessons are the source of truth. Each unit's "lessons" summary and each
course unit reference's "lessonCount" are derived from the lesson map and
rewritten wholesale, never patched.
"""

import logging
import re
from typing import Any, Dict, Iterable, List, Optional

from coursemend.config_utils import ReconcileRules

logger = logging.getLogger(__name__)

Lesson = Dict[str, Any]

DAY_SUFFIX = re.compile(r"day(\d+)$")


def merge_lessons(
    existing: Dict[str, Lesson],
    parsed: Dict[str, Lesson],
    rules: ReconcileRules,
    unit_mapping: Optional[Dict[str, str]] = None,
) -> Dict[str, Lesson]:
    """
    Drop superseded daily lessons and union in the parsed ones.

    The bootstrap lesson is always kept. Kept lessons follow any unit
    renames in unit_mapping. A parsed lesson replaces an existing lesson
    with the same id entirely.
    """
    legacy = rules.lesson_regex()
    unit_mapping = unit_mapping or {}

    merged: Dict[str, Lesson] = {}
    dropped = []
    for lesson_id, lesson in existing.items():
        if lesson_id != rules.bootstrap_lesson_id and legacy.match(lesson_id):
            dropped.append(lesson_id)
            continue
        if lesson.get("unitId") in unit_mapping:
            lesson["unitId"] = unit_mapping[lesson["unitId"]]
        merged[lesson_id] = lesson

    not_replaced = [lesson_id for lesson_id in dropped if lesson_id not in parsed]
    if not_replaced:
        logger.info(
            f"[lessons] Dropped {len(not_replaced)} legacy lesson(s) with no replacement in the import"
        )
        for lesson_id in not_replaced:
            logger.debug(f"[lessons] dropped {lesson_id}")

    merged.update(parsed)
    return merged


def repair_unit_refs(
    lessons: Dict[str, Lesson],
    units: Dict[str, Any],
    rules: ReconcileRules,
    imported_ids: Iterable[str] = (),
) -> List[str]:
    """
    Point lessons whose unit no longer exists at the fallback unit.

    Only done when the fallback unit exists. Imported lessons keep the
    unit they were given (except the bootstrap lesson); a missing unit
    there is reported, not guessed at.

    Returns the ids of the reassigned lessons.
    """
    imported = set(imported_ids)
    fallback = rules.fallback_unit_id
    repaired = []

    for lesson_id, lesson in lessons.items():
        unit_id = lesson.get("unitId")
        if unit_id in units:
            continue
        if lesson_id in imported and lesson_id != rules.bootstrap_lesson_id:
            logger.warning(f"[lessons:warn] {lesson_id} belongs to unknown unit {unit_id}")
            continue
        if fallback not in units:
            logger.warning(
                f"[lessons:warn] {lesson_id} belongs to missing unit {unit_id} "
                f"and fallback {fallback} does not exist; left unchanged"
            )
            continue
        logger.info(f"[lessons] {lesson_id}: unit {unit_id} -> {fallback}")
        lesson["unitId"] = fallback
        repaired.append(lesson_id)

    return repaired


def day_number(lesson_id: str) -> int:
    """Trailing day<N> of a lesson id, 0 when there is none."""
    match = DAY_SUFFIX.search(lesson_id)
    return int(match.group(1)) if match else 0


def partition_lessons(
    lessons: Dict[str, Lesson],
    units: Dict[str, Any],
    rules: ReconcileRules,
) -> Dict[str, List[Lesson]]:
    """
    Group lessons by unitId, bootstrap lesson first then by day number.

    Every known unit gets an entry, empty or not. Lessons with equal keys
    keep their lesson-map order.
    """
    partitions: Dict[str, List[Lesson]] = {unit_id: [] for unit_id in units}
    for lesson in lessons.values():
        unit_id = lesson.get("unitId")
        if unit_id:
            partitions.setdefault(unit_id, []).append(lesson)

    def sort_key(lesson: Lesson):
        is_bootstrap = lesson.get("id") == rules.bootstrap_lesson_id
        return (0 if is_bootstrap else 1, day_number(lesson.get("id", "")))

    for members in partitions.values():
        members.sort(key=sort_key)
    return partitions


def rename_review_lessons(partitions: Dict[str, List[Lesson]], rules: ReconcileRules) -> int:
    """Rename the last lesson of every unit to the review label."""
    renamed = 0
    for members in partitions.values():
        if not members:
            continue
        last = members[-1]
        if last.get("id") == rules.bootstrap_lesson_id:
            continue
        last["name"] = rules.review_label
        renamed += 1
    return renamed


def lesson_summary(lesson: Lesson) -> Dict[str, Any]:
    return {
        "id": lesson.get("id"),
        "name": lesson.get("name"),
        "hasQuiz": bool(lesson.get("quizId")),
    }


def recompute_aggregates(snapshot: Dict[str, Any], rules: ReconcileRules) -> Dict[str, List[Lesson]]:
    """
    Rewrite every unit's lesson summary and every course unit's lessonCount.

    Returns the partitions the summaries were built from.
    """
    units = snapshot["units"]
    partitions = partition_lessons(snapshot["lessons"], units, rules)
    renamed = rename_review_lessons(partitions, rules)
    logger.debug(f"[aggregate] Renamed {renamed} closing lesson(s) to '{rules.review_label}'")

    for unit_id, unit in units.items():
        unit["lessons"] = [lesson_summary(lesson) for lesson in partitions.get(unit_id, [])]

    for course in snapshot.get("courses", {}).values():
        refs = course.get("units")
        if not isinstance(refs, list):
            continue
        for ref in refs:
            if isinstance(ref, dict):
                ref["lessonCount"] = len(partitions.get(ref.get("id"), []))

    return partitions
