# config_utils.py - YAML Configuration System for coursemend
"""
coursemend configuration utilities with YAML file support.

Configuration Resolution Order (highest to lowest priority):
1. Command-line options (applied by the CLI after loading)
2. Environment variables (COURSEMEND_JSON_INPUT, COURSEMEND_CSV_INPUT, ...)
3. coursemend.yaml (or coursemend.yml) in the working directory
4. ~/.coursemend/config.yaml (global defaults)

Usage:
    from coursemend.config_utils import get_config

    config = get_config()
    print(config.json_input)
    print(config.rules.review_label)
"""

import logging
import os
import re
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional, Dict, Any, List

import yaml

from coursemend.errors import ConfigurationError
from coursemend.reading_links import LINK_SLOT_COUNT

logger = logging.getLogger(__name__)

CONFIG_FILENAMES = ("coursemend.yaml", "coursemend.yml")


@dataclass
class ReconcileRules:
    """Naming rules the reconciliation routine applies to a course snapshot"""
    # unit_qlzx_week1_2728 -> unit_qlzx_2728_week1
    legacy_unit_pattern: str = r"^(?P<head>unit_.+?)_(?P<week>week\d+)_(?P<tail>(?!week\d+$)[^_]+)$"
    canonical_unit_template: str = "{head}_{tail}_{week}"

    # Old per-day lessons that a CSV import supersedes
    legacy_lesson_pattern: str = r"^lesson_[a-z]+_day\d+$"

    bootstrap_lesson_id: str = "lesson_0"
    fallback_unit_id: str = "unit_0_2728"
    review_label: str = "經文回顧及測試"
    reading_heading: str = "### 讀經"
    link_slots: int = LINK_SLOT_COUNT

    def unit_regex(self) -> "re.Pattern[str]":
        return re.compile(self.legacy_unit_pattern)

    def lesson_regex(self) -> "re.Pattern[str]":
        return re.compile(self.legacy_lesson_pattern)

    def validate(self) -> List[str]:
        """Return a list of problems; empty when the rules are usable"""
        issues = []
        unit_re = None
        try:
            unit_re = self.unit_regex()
        except re.error as e:
            issues.append(f"legacy_unit_pattern is not a valid regex: {e}")
        try:
            self.lesson_regex()
        except re.error as e:
            issues.append(f"legacy_lesson_pattern is not a valid regex: {e}")

        if unit_re is not None:
            sample = {name: name for name in unit_re.groupindex}
            try:
                self.canonical_unit_template.format(**sample)
            except (KeyError, IndexError, ValueError) as e:
                issues.append(
                    f"canonical_unit_template uses a group the pattern does not define: {e}"
                )

        if self.link_slots < 1:
            issues.append("link_slots must be at least 1")
        if not self.bootstrap_lesson_id:
            issues.append("bootstrap_lesson_id is empty")
        return issues


@dataclass
class CoursemendConfig:
    """Complete coursemend configuration"""
    # Input / output files
    json_input: Optional[Path] = None
    csv_input: Optional[Path] = None
    output: Optional[Path] = None
    csv_export: Optional[Path] = None
    markdown_dir: Optional[Path] = None

    rules: ReconcileRules = field(default_factory=ReconcileRules)

    # Paths (resolved at load time)
    course_root: Optional[Path] = None

    # Extra settings from config file
    extra: Dict[str, Any] = field(default_factory=dict)

    # Track where values came from (for debugging)
    _sources: Dict[str, str] = field(default_factory=dict)


DEFAULT_PATHS = {
    "json_input": "data/backups/course.json",
    "csv_input": "data/backups/course.csv",
    "output": "data/backups/course-reconstructed.json",
    "csv_export": "data/backups/course-export.csv",
    "markdown_dir": "data/lessons_md",
}

ENV_PATHS = {
    "COURSEMEND_JSON_INPUT": "json_input",
    "COURSEMEND_CSV_INPUT": "csv_input",
    "COURSEMEND_OUTPUT": "output",
}


class ConfigLoader:
    """Load configuration from multiple sources"""

    def __init__(self, course_dir: Optional[Path] = None):
        self.course_dir = Path(course_dir) if course_dir else Path.cwd()
        self.config = CoursemendConfig(course_root=self.course_dir)

    def load(self) -> CoursemendConfig:
        """Load configuration from all sources in priority order"""
        self._load_defaults()
        # Load in reverse priority (lowest first, higher overwrites)
        self._load_global_config()
        self._load_yaml_config()
        self._load_env_vars()

        issues = self.config.rules.validate()
        if issues:
            raise ConfigurationError(
                message="Invalid reconciliation rules",
                suggestion="Fix the 'rules' section of coursemend.yaml:\n" +
                           "\n".join(f"  - {issue}" for issue in issues),
                context={"sources": dict(self.config._sources)},
            )
        return self.config

    def _resolve(self, value: Any) -> Path:
        path = Path(str(value)).expanduser()
        if not path.is_absolute():
            path = self.course_dir / path
        return path

    def _load_defaults(self):
        for attr, rel in DEFAULT_PATHS.items():
            setattr(self.config, attr, self.course_dir / rel)
            self.config._sources[attr] = "default"

    def _load_global_config(self):
        """Load ~/.coursemend/config.yaml if it exists"""
        global_config = Path.home() / ".coursemend" / "config.yaml"
        if global_config.exists():
            self._load_yaml_file(global_config, "global")

    def _load_yaml_config(self):
        """Load coursemend.yaml from the working directory"""
        for name in CONFIG_FILENAMES:
            yaml_path = self.course_dir / name
            if yaml_path.exists():
                self._load_yaml_file(yaml_path, name)
                return

    def _load_yaml_file(self, path: Path, source_name: str):
        """Load settings from a YAML file"""
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                message=f"Failed to parse {path.name}",
                suggestion="Check the YAML syntax (indentation, quoting)",
                context={"path": str(path)},
                cause=e,
            )
        if not isinstance(data, dict):
            raise ConfigurationError(
                message=f"{path.name} must be a mapping at top level",
                context={"path": str(path)},
            )

        paths = data.get("paths") or {}
        if not isinstance(paths, dict):
            raise ConfigurationError(
                message=f"'paths' in {path.name} must be a mapping",
                context={"path": str(path)},
            )
        for key, value in paths.items():
            if key not in DEFAULT_PATHS:
                logger.warning(f"[config:warn] Unknown path key '{key}' in {path.name}")
                continue
            setattr(self.config, key, self._resolve(value))
            self.config._sources[key] = source_name

        rules = data.get("rules") or {}
        if not isinstance(rules, dict):
            raise ConfigurationError(
                message=f"'rules' in {path.name} must be a mapping",
                context={"path": str(path)},
            )
        rule_names = {f.name for f in fields(ReconcileRules)}
        for key, value in rules.items():
            if key not in rule_names:
                logger.warning(f"[config:warn] Unknown rule '{key}' in {path.name}")
                continue
            if key == "link_slots":
                try:
                    value = int(value)
                except (TypeError, ValueError) as e:
                    raise ConfigurationError(
                        message=f"rules.link_slots in {path.name} must be a whole number",
                        suggestion="Set it to the number of link column pairs, e.g. 'link_slots: 8'",
                        context={"path": str(path), "link_slots": value},
                        cause=e,
                    )
            else:
                value = str(value)
            setattr(self.config.rules, key, value)
            self.config._sources[f"rules.{key}"] = source_name

        # Store any extra settings
        known_keys = {"paths", "rules"}
        for key, value in data.items():
            if key not in known_keys:
                self.config.extra[key] = value

    def _load_env_vars(self):
        """Load from environment variables (highest priority)"""
        for env_name, attr in ENV_PATHS.items():
            value = os.environ.get(env_name)
            if value:
                setattr(self.config, attr, self._resolve(value))
                self.config._sources[attr] = f"env:{env_name}"

        label = os.environ.get("COURSEMEND_REVIEW_LABEL")
        if label:
            self.config.rules.review_label = label
            self.config._sources["rules.review_label"] = "env:COURSEMEND_REVIEW_LABEL"


# ============================================================================
# Public API
# ============================================================================

def get_config(course_dir: Optional[Path] = None) -> CoursemendConfig:
    """
    Get complete coursemend configuration.

    Args:
        course_dir: Working directory (defaults to cwd)

    Returns:
        CoursemendConfig with all settings resolved

    Raises:
        ConfigurationError: If a config file or the rules are invalid
    """
    loader = ConfigLoader(course_dir)
    return loader.load()


def create_config_template(include_comments: bool = True) -> str:
    """
    Generate a coursemend.yaml template.

    Args:
        include_comments: Whether to include explanatory comments

    Returns:
        YAML string ready to write to file
    """
    if include_comments:
        return '''# coursemend configuration file

# Input and output files, relative to this file's directory
paths:
  json_input: data/backups/course.json          # course snapshot to repair
  csv_input: data/backups/course.csv            # edited lesson CSV
  output: data/backups/course-reconstructed.json
  csv_export: data/backups/course-export.csv    # written by export-csv
  markdown_dir: data/lessons_md                 # written by export-markdown

# Naming rules applied during reconstruct
rules:
  # Legacy unit ids are rewritten with canonical_unit_template
  legacy_unit_pattern: '^(?P<head>unit_.+?)_(?P<week>week\\d+)_(?P<tail>(?!week\\d+$)[^_]+)$'
  canonical_unit_template: '{head}_{tail}_{week}'
  # Existing lessons matching this are dropped before the CSV is merged
  legacy_lesson_pattern: '^lesson_[a-z]+_day\\d+$'
  bootstrap_lesson_id: lesson_0
  fallback_unit_id: unit_0_2728
  review_label: 經文回顧及測試
  reading_heading: '### 讀經'
  link_slots: 8
'''
    else:
        return '''paths:
  json_input: data/backups/course.json
  csv_input: data/backups/course.csv
  output: data/backups/course-reconstructed.json
rules:
  fallback_unit_id: unit_0_2728
  review_label: 經文回顧及測試
'''
