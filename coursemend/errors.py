# errors.py
"""
Custom exception classes for coursemend

All exceptions include:
- Clear error description
- Actionable suggestions
- Relevant context
"""
from pathlib import Path
from typing import Optional, Dict, Any, List


class CoursemendError(Exception):
    """Base exception for all coursemend errors"""

    def __init__(
        self,
        message: str,
        suggestion: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        self.message = message
        self.suggestion = suggestion
        self.context = context or {}
        self.cause = cause
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format error with all details"""
        lines = [
            "",
            "=" * 70,
            f"❌ {self.__class__.__name__}",
            "=" * 70,
            "",
            self.message,
        ]

        if self.context:
            lines.append("")
            lines.append("Context:")
            for key, value in self.context.items():
                lines.append(f"  {key}: {value}")

        if self.suggestion:
            lines.append("")
            lines.append("💡 Suggestion:")
            lines.append(f"  {self.suggestion}")

        if self.cause:
            lines.append("")
            lines.append(f"Caused by: {type(self.cause).__name__}: {self.cause}")

        lines.append("")
        lines.append("=" * 70)
        lines.append("")

        return "\n".join(lines)


class ConfigurationError(CoursemendError):
    """Configuration is missing or invalid"""
    pass


class InputFileError(CoursemendError):
    """An input file could not be read"""
    pass


class SnapshotError(CoursemendError):
    """Course snapshot JSON is unparseable or has the wrong shape"""
    pass


class CsvLayoutError(CoursemendError):
    """Lesson CSV is empty or lacks required columns"""
    pass


# Specific error factory functions

def unreadable_input_error(path: Path, cause: Optional[Exception] = None) -> InputFileError:
    """Create error for an input file that cannot be read"""
    return InputFileError(
        message=f"Could not read input file: {path.name}",
        suggestion=(
            "Check the path and permissions, or point coursemend at the file:\n"
            "  coursemend reconstruct --json PATH --csv PATH\n\n"
            "Paths can also be set in coursemend.yaml"
        ),
        context={"path": str(path)},
        cause=cause,
    )


def invalid_snapshot_error(
    path: Path,
    missing_keys: Optional[List[str]] = None,
    cause: Optional[Exception] = None
) -> SnapshotError:
    """Create error for a snapshot that is not valid course JSON"""
    if missing_keys:
        message = f"Snapshot {path.name} is missing top-level keys: {', '.join(missing_keys)}"
    else:
        message = f"Snapshot {path.name} is not valid JSON"
    return SnapshotError(
        message=message,
        suggestion=(
            "A course snapshot must be a JSON object with these keys:\n"
            '  {"courses": {...}, "units": {...}, "lessons": {...}}'
        ),
        context={
            "path": str(path),
            "missing_keys": missing_keys or [],
        },
        cause=cause,
    )


def missing_csv_columns_error(source: str, missing: List[str]) -> CsvLayoutError:
    """Create error for a lesson CSV without its key columns"""
    return CsvLayoutError(
        message=f"Lesson CSV {source} is missing required columns: {', '.join(missing)}",
        suggestion=(
            "The header row must include at least:\n"
            "  id,unitId,name,video-title,video-url,quizId,content,unit_name,\n"
            "  link_1_text,link_1_url ... link_8_text,link_8_url\n\n"
            "Generate a fresh template with: coursemend export-csv"
        ),
        context={
            "source": source,
            "missing_columns": missing,
        },
    )


def empty_csv_error(source: str) -> CsvLayoutError:
    """Create error for a CSV with no data rows"""
    return CsvLayoutError(
        message=f"Lesson CSV {source} is empty or missing header",
        suggestion="Export the course with 'coursemend export-csv' and edit that file",
        context={"source": source},
    )
