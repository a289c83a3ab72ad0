"""
unit_ids.py - Rewrite legacy unit identifiers to the canonical form

A unit id appears in two places in a snapshot: as a key of the top-level
"units" map and inside every course's embedded "units" array. Both are
rewritten from one old-id -> new-id table by the same function, so they
cannot drift apart.
"""

import logging
from typing import Any, Dict, Iterator, Optional, Tuple

from coursemend.config_utils import ReconcileRules

logger = logging.getLogger(__name__)


def canonical_unit_id(unit_id: str, rules: ReconcileRules) -> str:
    """
    unit_qlzx_week1_2728 -> unit_qlzx_2728_week1

    Ids that do not match the legacy pattern (including ids already in
    canonical form) come back unchanged. So do ids whose rewrite would
    still match it, since a second pass would rewrite them again.
    """
    legacy = rules.unit_regex()
    match = legacy.match(unit_id)
    if not match:
        return unit_id
    new_id = rules.canonical_unit_template.format(**match.groupdict())
    if legacy.match(new_id):
        logger.warning(f"[units:warn] {unit_id} would still look legacy as {new_id}; left unchanged")
        return unit_id
    return new_id


def _course_unit_refs(snapshot: Dict[str, Any]) -> Iterator[Dict[str, Any]]:
    for course in snapshot.get("courses", {}).values():
        units = course.get("units")
        if isinstance(units, list):
            for ref in units:
                if isinstance(ref, dict):
                    yield ref


def build_unit_id_mapping(snapshot: Dict[str, Any], rules: ReconcileRules) -> Dict[str, str]:
    """Old id -> new id for every legacy unit id found anywhere in the snapshot."""
    seen = list(snapshot.get("units", {}).keys())
    seen.extend(ref["id"] for ref in _course_unit_refs(snapshot) if ref.get("id"))

    mapping: Dict[str, str] = {}
    for unit_id in seen:
        if unit_id in mapping:
            continue
        new_id = canonical_unit_id(unit_id, rules)
        if new_id != unit_id:
            mapping[unit_id] = new_id
    return mapping


def _rewrite_unit(
    unit: Dict[str, Any],
    unit_id: str,
    mapping: Dict[str, str],
    unit_names: Dict[str, str],
) -> Tuple[str, Dict[str, Any]]:
    new_id = mapping.get(unit_id, unit_id)
    rewritten = dict(unit)
    rewritten["id"] = new_id
    if unit_names.get(new_id):
        rewritten["name"] = unit_names[new_id]
    return new_id, rewritten


def apply_unit_mapping(
    snapshot: Dict[str, Any],
    mapping: Dict[str, str],
    unit_names: Optional[Dict[str, str]] = None,
) -> None:
    """
    Rename units in place, in the unit map and in every course's unit array.

    Names from unit_names (keyed by the new id) replace the display name in
    both places.
    """
    unit_names = unit_names or {}

    new_units: Dict[str, Any] = {}
    for key, unit in snapshot.get("units", {}).items():
        new_key, rewritten = _rewrite_unit(unit, key, mapping, unit_names)
        if new_key in new_units:
            logger.warning(f"[units:warn] {key} collides with existing unit {new_key}; keeping {key}")
        new_units[new_key] = rewritten
    snapshot["units"] = new_units

    for course in snapshot.get("courses", {}).values():
        refs = course.get("units")
        if not isinstance(refs, list):
            continue
        rewritten_refs = []
        for ref in refs:
            if isinstance(ref, dict) and ref.get("id"):
                _, ref = _rewrite_unit(ref, ref["id"], mapping, unit_names)
            rewritten_refs.append(ref)
        course["units"] = rewritten_refs


def normalize_unit_ids(
    snapshot: Dict[str, Any],
    unit_names: Optional[Dict[str, str]] = None,
    rules: Optional[ReconcileRules] = None,
) -> Dict[str, str]:
    """
    Canonicalize every unit id in the snapshot. Running it again is a no-op.

    Returns the mapping that was applied.
    """
    rules = rules or ReconcileRules()
    mapping = build_unit_id_mapping(snapshot, rules)
    apply_unit_mapping(snapshot, mapping, unit_names)
    for old, new in mapping.items():
        logger.debug(f"[units] {old} -> {new}")
    logger.info(f"[units] Renamed {len(mapping)} legacy unit id(s)")
    return mapping
