# cli.py - Command line interface for coursemend
"""
coursemend CLI - Repair and convert course snapshots

COMMANDS:
    Reconstruct:
        coursemend reconstruct [--csv P | --markdown DIR]   Merge edited lessons into a snapshot
        coursemend normalize                                 Canonicalize unit ids only

    Export:
        coursemend export-csv                                Snapshot -> editable lesson CSV
        coursemend export-markdown                           Snapshot -> lesson Markdown files

    Other:
        coursemend info                                      Show snapshot statistics
        coursemend init [--force]                            Write a coursemend.yaml template
        coursemend version                                   Show version information

EXAMPLES:
    # Round trip through a spreadsheet
    coursemend export-csv --output lessons.csv
    coursemend reconstruct --csv lessons.csv --output course-fixed.json

    # Same, through Markdown files
    coursemend export-markdown --output lessons_md/
    coursemend reconstruct --markdown lessons_md/

Paths default to the values in coursemend.yaml (see 'coursemend init').
"""

import functools
import sys
from pathlib import Path
from typing import Optional

import click

from coursemend import __version__
from coursemend.config_utils import CoursemendConfig, create_config_template, get_config
from coursemend.errors import CoursemendError
from coursemend.export_csv import export_csv
from coursemend.log_utils import setup_logging
from coursemend.markdown_files import export_markdown
from coursemend.reconstruct import run_normalize, run_reconstruct
from coursemend.snapshot import load_snapshot
from coursemend.unit_ids import canonical_unit_id


# ============================================================================
# Configuration & Utilities
# ============================================================================

class CoursemendContext:
    """Shared context for CLI commands"""

    def __init__(self, verbose: int = 0):
        self.root = Path.cwd()
        self.verbose = verbose
        self._config: Optional[CoursemendConfig] = None

    @property
    def config(self) -> CoursemendConfig:
        if self._config is None:
            self._config = get_config(self.root)
        return self._config


def reports_errors(func):
    """Print coursemend errors without a traceback and exit 1."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except CoursemendError as e:
            click.echo(str(e), err=True)
            sys.exit(1)
    return wrapper


path_option = functools.partial(click.option, type=click.Path(path_type=Path))


# ============================================================================
# Click Group Setup
# ============================================================================

@click.group()
@click.option('--verbose', '-v', count=True, help='Show debug output')
@click.pass_context
def cli(ctx, verbose: int):
    """
    coursemend - Course snapshot reconciliation tools

    Merge edited lesson CSV or Markdown files back into a course JSON
    snapshot, and export snapshots for editing.
    """
    setup_logging(verbose)
    ctx.obj = CoursemendContext(verbose)


# ============================================================================
# Reconstruct
# ============================================================================

@cli.command()
@path_option('--json', 'json_path', help='Course snapshot to repair')
@path_option('--csv', 'csv_path', help='Edited lesson CSV')
@path_option('--markdown', 'markdown_dir', help='Folder of lesson Markdown files (instead of --csv)')
@path_option('--output', '-o', 'output_path', help='Where to write the rebuilt snapshot')
@click.pass_obj
@reports_errors
def reconstruct(ctx: CoursemendContext, json_path: Optional[Path], csv_path: Optional[Path],
                markdown_dir: Optional[Path], output_path: Optional[Path]):
    """
    Merge edited lessons into a course snapshot

    Canonicalizes unit ids, replaces old daily lessons with the imported
    ones, and rebuilds every unit's lesson list and lesson count.

    Examples:
        coursemend reconstruct
        coursemend reconstruct --csv edits.csv -o course-new.json
        coursemend reconstruct --markdown lessons_md/
    """
    config = ctx.config
    if csv_path and markdown_dir:
        raise click.UsageError("--csv and --markdown cannot be used together")
    if not markdown_dir:
        csv_path = csv_path or config.csv_input

    json_path = json_path or config.json_input
    output_path = output_path or config.output

    click.echo(f"[*] Reconstructing {json_path.name}...")
    snapshot = run_reconstruct(
        json_path,
        output_path,
        config.rules,
        csv_path=csv_path,
        markdown_dir=markdown_dir,
    )
    click.echo(
        f"[v] Wrote {output_path} "
        f"({len(snapshot['units'])} units, {len(snapshot['lessons'])} lessons)"
    )


@cli.command()
@path_option('--json', 'json_path', help='Course snapshot')
@path_option('--output', '-o', 'output_path', help='Where to write the normalized snapshot')
@click.pass_obj
@reports_errors
def normalize(ctx: CoursemendContext, json_path: Optional[Path], output_path: Optional[Path]):
    """
    Canonicalize legacy unit ids only

    Lessons are re-pointed at the renamed units; nothing else changes.
    """
    config = ctx.config
    json_path = json_path or config.json_input
    output_path = output_path or config.output

    mapping = run_normalize(json_path, output_path, config.rules)
    for old, new in mapping.items():
        click.echo(f"  {old} -> {new}")
    click.echo(f"[v] Renamed {len(mapping)} unit id(s); wrote {output_path}")


# ============================================================================
# Export
# ============================================================================

@cli.command('export-csv')
@path_option('--json', 'json_path', help='Course snapshot')
@path_option('--output', '-o', 'output_path', help='CSV file to write')
@click.pass_obj
@reports_errors
def export_csv_command(ctx: CoursemendContext, json_path: Optional[Path], output_path: Optional[Path]):
    """
    Export lessons to the editable CSV layout

    Reading links move out of the lesson body into link_N columns.
    """
    config = ctx.config
    json_path = json_path or config.json_input
    output_path = output_path or config.csv_export

    count = export_csv(json_path, output_path, config.rules)
    click.echo(f"[v] Exported {count} lesson(s) to {output_path}")


@cli.command('export-markdown')
@path_option('--json', 'json_path', help='Course snapshot')
@path_option('--output', '-o', 'output_dir', help='Folder to write lesson files into')
@click.pass_obj
@reports_errors
def export_markdown_command(ctx: CoursemendContext, json_path: Optional[Path], output_dir: Optional[Path]):
    """Export lessons as Markdown files, one folder per unit"""
    config = ctx.config
    json_path = json_path or config.json_input
    output_dir = output_dir or config.markdown_dir

    snapshot = load_snapshot(json_path)
    count = export_markdown(snapshot, output_dir)
    click.echo(f"[v] Exported {count} lesson file(s) to {output_dir}")


# ============================================================================
# Info
# ============================================================================

@cli.command()
@path_option('--json', 'json_path', help='Course snapshot')
@click.pass_obj
@reports_errors
def info(ctx: CoursemendContext, json_path: Optional[Path]):
    """
    Show snapshot statistics

    Displays counts, and anything reconstruct would still change:
    legacy unit ids, legacy daily lessons and lessons with unknown units.
    """
    config = ctx.config
    rules = config.rules
    json_path = json_path or config.json_input
    snapshot = load_snapshot(json_path)

    units = snapshot["units"]
    lessons = snapshot["lessons"]

    click.echo("[list] Snapshot Information\n")
    click.echo("=" * 60)
    click.echo(f"File: {json_path}")
    click.echo(f"Courses: {len(snapshot['courses'])}")
    click.echo(f"Units: {len(units)}")
    click.echo(f"Lessons: {len(lessons)}")

    click.echo("\n[*] Quick Check")
    click.echo("-" * 60)

    legacy_units = [u for u in units if canonical_unit_id(u, rules) != u]
    legacy_lessons = [
        lesson_id for lesson_id in lessons
        if lesson_id != rules.bootstrap_lesson_id and rules.lesson_regex().match(lesson_id)
    ]
    orphans = [lesson_id for lesson_id, lesson in lessons.items() if lesson.get("unitId") not in units]

    checks = []
    if legacy_units:
        checks.append(f"[!]  {len(legacy_units)} legacy unit id(s), e.g. {legacy_units[0]}")
    if legacy_lessons:
        checks.append(f"[!]  {len(legacy_lessons)} legacy daily lesson(s), e.g. {legacy_lessons[0]}")
    if orphans:
        checks.append(f"[!]  {len(orphans)} lesson(s) with unknown unit, e.g. {orphans[0]}")

    if checks:
        for check in checks:
            click.echo(check)
    else:
        click.echo("[v] All checks passed")


# ============================================================================
# Init
# ============================================================================

@cli.command()
@click.option('--force', is_flag=True, help='Overwrite an existing coursemend.yaml')
@click.pass_obj
def init(ctx: CoursemendContext, force: bool):
    """Write a coursemend.yaml template in the current directory"""
    target = ctx.root / "coursemend.yaml"
    if target.exists() and not force:
        click.echo(f"[x] {target.name} already exists (use --force to overwrite)", err=True)
        sys.exit(1)
    target.write_text(create_config_template(), encoding="utf-8")
    click.echo(f"[v] Wrote {target}")


# ============================================================================
# Version
# ============================================================================

@cli.command()
def version():
    """Show coursemend version"""
    click.echo(f"coursemend v{__version__}")
    click.echo("Course snapshot reconciliation tools")


# ============================================================================
# Entry Point
# ============================================================================

if __name__ == '__main__':
    cli()
