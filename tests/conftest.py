# tests/conftest.py
"""
Pytest configuration and shared fixtures for coursemend tests
"""
import json
import logging
from pathlib import Path
from typing import Dict, List

import pytest

from coursemend.config_utils import ReconcileRules
from helpers import make_lesson_csv


@pytest.fixture(autouse=True)
def isolated_env(tmp_path_factory, monkeypatch):
    """Keep the user's global config and COURSEMEND_* variables out of tests"""
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("HOME", str(home))
    for name in ("COURSEMEND_JSON_INPUT", "COURSEMEND_CSV_INPUT",
                 "COURSEMEND_OUTPUT", "COURSEMEND_REVIEW_LABEL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def restore_root_logger():
    """The CLI replaces root handlers; put pytest's back after each test"""
    root = logging.getLogger()
    saved_level, saved_handlers = root.level, list(root.handlers)
    yield
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


@pytest.fixture
def rules() -> ReconcileRules:
    return ReconcileRules()


@pytest.fixture
def sample_snapshot() -> Dict:
    """A snapshot still using legacy unit ids and legacy daily lessons"""
    return {
        "courses": {
            "course_qlzx": {
                "id": "course_qlzx",
                "name": "千里之行",
                "units": [
                    {"id": "unit_0_2728", "name": "開始", "lessonCount": 1},
                    {"id": "unit_qlzx_week1_2728", "name": "第1週", "lessonCount": 2},
                    {"id": "unit_qlzx_week2_2728", "name": "第2週", "lessonCount": 1},
                ],
            }
        },
        "units": {
            "unit_0_2728": {"id": "unit_0_2728", "name": "開始", "lessons": []},
            "unit_qlzx_week1_2728": {
                "id": "unit_qlzx_week1_2728",
                "name": "第1週",
                "lessons": [
                    {"id": "lesson_qlzx_day1", "name": "Day 1", "hasQuiz": False},
                    {"id": "lesson_qlzx_day2", "name": "Day 2", "hasQuiz": False},
                ],
            },
            "unit_qlzx_week2_2728": {
                "id": "unit_qlzx_week2_2728",
                "name": "第2週",
                "lessons": [],
            },
        },
        "lessons": {
            "lesson_0": {
                "id": "lesson_0",
                "unitId": "unit_0",
                "name": "課程介紹",
                "content": "Welcome",
                "quizId": None,
            },
            "lesson_qlzx_day1": {
                "id": "lesson_qlzx_day1",
                "unitId": "unit_qlzx_week1_2728",
                "name": "Day 1",
                "content": "old day 1",
                "quizId": None,
            },
            "lesson_qlzx_day2": {
                "id": "lesson_qlzx_day2",
                "unitId": "unit_qlzx_week1_2728",
                "name": "Day 2",
                "content": "old day 2",
                "quizId": None,
            },
            "lesson_notes": {
                "id": "lesson_notes",
                "unitId": "unit_qlzx_week2_2728",
                "name": "Notes",
                "content": "kept as is",
                "quizId": "quiz_notes",
            },
        },
    }


@pytest.fixture
def sample_records() -> List[Dict[str, str]]:
    """Three week-1 lessons, deliberately out of day order"""
    unit = "unit_qlzx_2728_week1"
    unit_name = "第1週 創世記 1-11"
    return [
        {
            "id": "lesson_qlzx2728_day1", "unitId": unit, "name": "創世記 1-3",
            "content": "Day one body", "unit_name": unit_name,
            "link_1_text": "創世記 1-3", "link_1_url": "https://bible.example/gen1",
            "link_2_text": "NIV", "link_2_url": "https://bible.example/niv/gen1",
        },
        {
            "id": "lesson_qlzx2728_day3", "unitId": unit, "name": "創世記 8-11",
            "content": "Day three body", "quizId": "quiz_week1", "unit_name": unit_name,
        },
        {
            "id": "lesson_qlzx2728_day2", "unitId": unit, "name": "創世記 4-7",
            "content": "Day two body", "video-title": "Overview",
            "video-url": "https://video.example/2", "unit_name": unit_name,
        },
    ]


@pytest.fixture
def sample_csv_text(sample_records) -> str:
    return make_lesson_csv(sample_records)


@pytest.fixture
def snapshot_file(tmp_path: Path, sample_snapshot) -> Path:
    path = tmp_path / "course.json"
    path.write_text(json.dumps(sample_snapshot, ensure_ascii=False), encoding="utf-8")
    return path


@pytest.fixture
def csv_file(tmp_path: Path, sample_csv_text) -> Path:
    path = tmp_path / "course.csv"
    path.write_text(sample_csv_text, encoding="utf-8")
    return path
