# tests/test_snapshot.py
"""
Tests for snapshot.py - reading and writing course JSON
"""
import json

import pytest

from coursemend.errors import InputFileError, SnapshotError
from coursemend.snapshot import load_snapshot, read_input_text, write_snapshot


class TestLoadSnapshot:
    """Tests for loading and checking a snapshot"""

    def test_load_valid(self, snapshot_file):
        snapshot = load_snapshot(snapshot_file)
        assert set(snapshot) == {"courses", "units", "lessons"}
        assert "lesson_0" in snapshot["lessons"]

    def test_missing_file(self, tmp_path):
        """A missing file is an input error"""
        with pytest.raises(InputFileError):
            load_snapshot(tmp_path / "nope.json")

    def test_not_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(SnapshotError) as exc_info:
            load_snapshot(path)
        assert exc_info.value.cause is not None

    @pytest.mark.parametrize("data, missing", [
        ({"courses": {}, "units": {}}, ["lessons"]),
        ({"courses": {}, "units": [], "lessons": {}}, ["units"]),
        ([], ["courses", "units", "lessons"]),
    ])
    def test_wrong_shape(self, tmp_path, data, missing):
        """Each of courses, units and lessons must be an object"""
        path = tmp_path / "shape.json"
        path.write_text(json.dumps(data), encoding="utf-8")

        with pytest.raises(SnapshotError) as exc_info:
            load_snapshot(path)
        assert exc_info.value.context["missing_keys"] == missing

    def test_bom_accepted(self, tmp_path):
        path = tmp_path / "bom.json"
        path.write_text("\ufeff" + json.dumps({"courses": {}, "units": {}, "lessons": {}}), encoding="utf-8")
        assert load_snapshot(path)["lessons"] == {}


class TestWriteSnapshot:
    """Tests for writing a snapshot"""

    def test_pretty_and_unescaped(self, tmp_path):
        """Two-space indent and non-ASCII text kept as is"""
        path = tmp_path / "out" / "course.json"
        write_snapshot(path, {"courses": {}, "units": {}, "lessons": {"l": {"name": "讀經"}}})

        text = path.read_text(encoding="utf-8")
        assert "讀經" in text
        assert '\n  "courses": {}' in text
        assert not (tmp_path / "out" / "course.json.tmp").exists()

    def test_replaces_existing(self, tmp_path):
        path = tmp_path / "course.json"
        path.write_text("old", encoding="utf-8")

        write_snapshot(path, {"courses": {}, "units": {}, "lessons": {}})

        assert json.loads(path.read_text(encoding="utf-8"))["lessons"] == {}

    def test_read_input_text_missing(self, tmp_path):
        with pytest.raises(InputFileError) as exc_info:
            read_input_text(tmp_path / "missing.csv")
        assert "missing.csv" in exc_info.value.message

    def test_failed_replace_keeps_old_file(self, tmp_path, mocker):
        """If the final move fails the old file stays and no temp file is left"""
        path = tmp_path / "course.json"
        path.write_text("previous", encoding="utf-8")
        mocker.patch("coursemend.snapshot.os.replace", side_effect=OSError("disk full"))

        with pytest.raises(OSError):
            write_snapshot(path, {"courses": {}, "units": {}, "lessons": {}})

        assert path.read_text(encoding="utf-8") == "previous"
        assert not (tmp_path / "course.json.tmp").exists()
