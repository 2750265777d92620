"""
Crash reports for the postindex command line.

An unexpected exception is shown to the user as a single line. The full
report (timestamp, command, traceback) is appended to
``postindex-errors.log`` next to ``postindex.toml``.
"""

import logging
import os
import traceback
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from .config import CONFIG_DIR_ENV

logger = logging.getLogger(__name__)

ERROR_LOG_NAME = "postindex-errors.log"
_REPORT_RULE = "-" * 72


def error_log_path(config_dir: Optional[Path] = None) -> Path:
    """Where crash reports go.

    The given config directory, else ``$POSTINDEX_CONFIG_DIR``, else
    ``~/.postindex``.
    """
    if config_dir is None:
        env = os.environ.get(CONFIG_DIR_ENV)
        config_dir = Path(env) if env else Path.home() / ".postindex"
    return Path(config_dir).expanduser() / ERROR_LOG_NAME


def format_report(exc: BaseException, context: str = "") -> str:
    """Render one crash report: a rule, a header line, the traceback."""
    stamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    header = f"{stamp} {type(exc).__name__}"
    if context:
        header = f"{header} during `{context}`"
    trace = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return f"{_REPORT_RULE}\n{header}\n{trace}"


def log_exception(
    exc: BaseException,
    context: str = "",
    config_dir: Optional[Path] = None,
) -> Path:
    """Append a crash report for ``exc`` and return the log path.

    The file is created owner-only. A log that cannot be written is
    reported through logging; the caller still gets the intended path.
    """
    log_path = error_log_path(config_dir)
    report = format_report(exc, context)
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(log_path, os.O_WRONLY | os.O_CREAT | os.O_APPEND, 0o600)
        with os.fdopen(fd, "a", encoding="utf-8") as f:
            f.write(report)
    except OSError as e:
        logger.warning("Could not write crash report to %s: %s", log_path, e)
    return log_path
