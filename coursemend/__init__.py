"""
coursemend - Course snapshot reconciliation tools

Merges edited lesson content (CSV or Markdown files) back into a course
JSON snapshot, canonicalizes legacy unit ids, and rebuilds the
denormalized per-unit lesson summaries.
"""

__version__ = "1.0.0"

from .errors import CoursemendError, ConfigurationError, SnapshotError, CsvLayoutError

__all__ = [
    "__version__",
    "CoursemendError",
    "ConfigurationError",
    "SnapshotError",
    "CsvLayoutError",
]
