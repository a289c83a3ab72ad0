"""
snapshot.py - Read and write course snapshot JSON

A snapshot is one JSON object with "courses", "units" and "lessons" maps.
It is read whole and written whole; the output file is replaced atomically
so a failed run never leaves a half-written snapshot behind.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict

from coursemend.errors import invalid_snapshot_error, unreadable_input_error

logger = logging.getLogger(__name__)

REQUIRED_KEYS = ("courses", "units", "lessons")


def read_input_text(path: Path) -> str:
    """Read a UTF-8 input file, accepting a leading BOM."""
    try:
        return path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise unreadable_input_error(path, e)


def validate_snapshot(data: Any, path: Path) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise invalid_snapshot_error(path, missing_keys=list(REQUIRED_KEYS))
    missing = [key for key in REQUIRED_KEYS if not isinstance(data.get(key), dict)]
    if missing:
        raise invalid_snapshot_error(path, missing_keys=missing)
    return data


def load_snapshot(path: Path) -> Dict[str, Any]:
    """
    Load and check a course snapshot.

    Raises:
        InputFileError: the file cannot be read
        SnapshotError: the file is not JSON, or lacks courses/units/lessons
    """
    path = Path(path)
    text = read_input_text(path)
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise invalid_snapshot_error(path, cause=e)

    snapshot = validate_snapshot(data, path)
    logger.info(
        f"[snapshot] Loaded {path.name}: {len(snapshot['courses'])} course(s), "
        f"{len(snapshot['units'])} unit(s), {len(snapshot['lessons'])} lesson(s)"
    )
    return snapshot


def dump_snapshot(snapshot: Dict[str, Any]) -> str:
    return json.dumps(snapshot, indent=2, ensure_ascii=False)


def write_snapshot(path: Path, snapshot: Dict[str, Any]) -> None:
    """Write the snapshot pretty-printed, replacing any existing file."""
    path = Path(path)
    text = dump_snapshot(snapshot)

    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(path.name + ".tmp")
    try:
        tmp_path.write_text(text, encoding="utf-8")
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()
    logger.info(f"[snapshot] Wrote {path}")
