"""
log_utils.py - Logging setup with level icons

Message-only output, prefixed with an icon for the record level. The CLI
calls setup_logging() once; library modules only create module loggers.
"""

import logging

# Message-only; no per-line timestamps
LOG_FORMAT = "%(message)s"

LEVEL_ICONS = {
    logging.DEBUG: "🔍",
    logging.INFO: "✔️",
    logging.WARNING: "⚠️",
    logging.ERROR: "❌",
    logging.CRITICAL: "💥",
}


class IconLogFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        icon = LEVEL_ICONS.get(record.levelno, "✔️")
        base = super().format(record)
        return f"{icon} {base}"


def setup_logging(verbosity: int = 0) -> None:
    level = logging.INFO
    if verbosity >= 1:
        level = logging.DEBUG

    handler = logging.StreamHandler()
    formatter = IconLogFormatter(LOG_FORMAT)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    root.addHandler(handler)
