"""
markdown_files.py - Lessons as Markdown files with YAML front matter

Layout, one folder per unit:

    <out_dir>/<unit id>/<lesson id>.md

    ---
    id: lesson_qlzx2728_day1
    unitId: unit_qlzx_2728_week1
    name: 創世記 1-3
    quizId: null
    unit_name: 第1週 創世記 1-11
    ---

    ### 讀經
    ...

A folder of these files can stand in for the lesson CSV when
reconstructing a snapshot.
"""

import logging
import re
from pathlib import Path
from typing import Any, Dict, Tuple

import frontmatter
import yaml

from coursemend.errors import unreadable_input_error

logger = logging.getLogger(__name__)

UNASSIGNED_DIR = "_unassigned"
LESSON_META_KEYS = ["id", "unitId", "name", "video-title", "video-url", "quizId"]


def _safe_name(name: str) -> str:
    """Filesystem-safe form of an id; keeps word chars, dots and hyphens."""
    safe = re.sub(r"[^\w.-]", "_", name).lstrip(".")
    return safe or "_"


def lesson_path(out_dir: Path, lesson: Dict[str, Any]) -> Path:
    unit_dir = _safe_name(lesson["unitId"]) if lesson.get("unitId") else UNASSIGNED_DIR
    return out_dir / unit_dir / f"{_safe_name(lesson['id'])}.md"


def lesson_to_post(lesson: Dict[str, Any], unit_name: str = "") -> frontmatter.Post:
    meta = {}
    for key in LESSON_META_KEYS:
        if key in ("video-title", "video-url") and not lesson.get(key):
            continue
        meta[key] = lesson.get(key)
    if unit_name:
        meta["unit_name"] = unit_name
    return frontmatter.Post(lesson.get("content") or "", **meta)


def export_markdown(snapshot: Dict[str, Any], out_dir: Path) -> int:
    """
    Write every lesson of the snapshot as a Markdown file.

    Returns the number of files written.
    """
    out_dir = Path(out_dir)
    units = snapshot.get("units", {})
    written = 0

    for lesson_id, lesson in snapshot.get("lessons", {}).items():
        lesson = dict(lesson)
        lesson.setdefault("id", lesson_id)
        unit = units.get(lesson.get("unitId"), {})
        post = lesson_to_post(lesson, unit.get("name", ""))

        path = lesson_path(out_dir, lesson)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(frontmatter.dumps(post) + "\n", encoding="utf-8")
        written += 1

    logger.info(f"[markdown] Wrote {written} lesson file(s) to {out_dir}")
    return written


def load_markdown_lessons(src_dir: Path) -> Tuple[Dict[str, Dict[str, Any]], Dict[str, str]]:
    """
    Read lesson files back into (lessons by id, unit names by unit id).

    Files without id or unitId, or with broken front matter, are skipped
    with a warning.
    """
    src_dir = Path(src_dir)
    if not src_dir.is_dir():
        raise unreadable_input_error(src_dir)

    lessons: Dict[str, Dict[str, Any]] = {}
    unit_names: Dict[str, str] = {}

    for path in sorted(src_dir.rglob("*.md")):
        try:
            post = frontmatter.load(path)
        except (yaml.YAMLError, ValueError) as e:
            logger.warning(f"[markdown:warn] Failed to parse {path}: {e}")
            continue
        except OSError as e:
            raise unreadable_input_error(path, e)

        meta = dict(post.metadata)
        lesson_id = str(meta.get("id") or "")
        unit_id = str(meta.get("unitId") or "")
        if meta.get("unit_name") and unit_id:
            unit_names[unit_id] = str(meta["unit_name"])
        if not lesson_id or not unit_id:
            logger.warning(f"[markdown:warn] Skipping {path.name}: no id or unitId in front matter")
            continue

        lesson: Dict[str, Any] = {
            "id": lesson_id,
            "unitId": unit_id,
            "name": str(meta.get("name") or ""),
            "content": post.content.strip(),
        }
        for key in ("video-title", "video-url"):
            if meta.get(key):
                lesson[key] = str(meta[key])
        lesson["quizId"] = str(meta["quizId"]) if meta.get("quizId") else None
        lessons[lesson_id] = lesson

    logger.info(f"[markdown] Loaded {len(lessons)} lesson(s) from {src_dir}")
    return lessons, unit_names
