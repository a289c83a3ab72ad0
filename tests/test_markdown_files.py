# tests/test_markdown_files.py
"""
Tests for markdown_files.py - lessons as Markdown with front matter
"""
import frontmatter
import pytest

from coursemend.errors import InputFileError
from coursemend.markdown_files import (
    UNASSIGNED_DIR,
    export_markdown,
    lesson_path,
    load_markdown_lessons,
)


class TestExportMarkdown:
    """Tests for writing lesson files"""

    def test_one_folder_per_unit(self, sample_snapshot, tmp_path):
        count = export_markdown(sample_snapshot, tmp_path)

        assert count == len(sample_snapshot["lessons"])
        assert (tmp_path / "unit_qlzx_week2_2728" / "lesson_notes.md").exists()
        assert (tmp_path / "unit_0" / "lesson_0.md").exists()

    def test_front_matter(self, sample_snapshot, tmp_path):
        """Metadata holds the lesson fields and the unit name"""
        export_markdown(sample_snapshot, tmp_path)
        post = frontmatter.load(tmp_path / "unit_qlzx_week2_2728" / "lesson_notes.md")

        assert post["id"] == "lesson_notes"
        assert post["quizId"] == "quiz_notes"
        assert post["unit_name"] == "第2週"
        assert "video-url" not in post.metadata
        assert post.content.strip() == "kept as is"

    def test_unsafe_ids_sanitized(self, tmp_path):
        path = lesson_path(tmp_path, {"id": "../x/y", "unitId": "u 1"})
        assert path.parent == tmp_path / "u_1"
        assert path.name == "_x_y.md"

    def test_no_unit_goes_to_unassigned(self, tmp_path):
        path = lesson_path(tmp_path, {"id": "l1", "unitId": ""})
        assert path.parent.name == UNASSIGNED_DIR


class TestLoadMarkdownLessons:
    """Tests for reading lesson files back"""

    def test_round_trip(self, sample_snapshot, tmp_path):
        export_markdown(sample_snapshot, tmp_path)
        lessons, unit_names = load_markdown_lessons(tmp_path)

        assert set(lessons) == set(sample_snapshot["lessons"])
        notes = lessons["lesson_notes"]
        assert notes == {
            "id": "lesson_notes",
            "unitId": "unit_qlzx_week2_2728",
            "name": "Notes",
            "content": "kept as is",
            "quizId": "quiz_notes",
        }
        assert lessons["lesson_0"]["quizId"] is None
        assert unit_names["unit_qlzx_week1_2728"] == "第1週"

    def test_files_without_ids_skipped(self, tmp_path):
        (tmp_path / "u1").mkdir()
        (tmp_path / "u1" / "a.md").write_text(
            "---\nname: No id\nunitId: u1\n---\nBody\n", encoding="utf-8"
        )
        (tmp_path / "u1" / "b.md").write_text(
            "---\nid: l2\nunitId: u1\nname: Two\n---\n\nBody two\n", encoding="utf-8"
        )
        lessons, _ = load_markdown_lessons(tmp_path)

        assert list(lessons) == ["l2"]
        assert lessons["l2"]["content"] == "Body two"

    def test_broken_front_matter_skipped(self, tmp_path):
        (tmp_path / "bad.md").write_text("---\nid: [unclosed\n---\nBody\n", encoding="utf-8")
        lessons, _ = load_markdown_lessons(tmp_path)
        assert lessons == {}

    def test_missing_folder(self, tmp_path):
        with pytest.raises(InputFileError):
            load_markdown_lessons(tmp_path / "nowhere")
