"""
Logging configuration for postindex.

The engine reports malformed posts and unparseable values through the
``postindex`` loggers; by default only warnings and above are shown.
"""

import logging
import sys
import warnings

_LOGGER_NAMES = ("postindex", "yaml")


def configure_quiet_mode(quiet: bool = True):
    """
    Configure logging for normal command line use.

    Args:
        quiet: If True, show only warnings and errors from postindex and
            silence Python warnings. If False, leave levels untouched.
    """
    if not quiet:
        return

    warnings.filterwarnings("ignore")
    for name in _LOGGER_NAMES:
        logging.getLogger(name).setLevel(logging.WARNING)


def enable_debug_mode():
    """Enable debug-level logging to stderr."""
    # Re-enable warnings
    warnings.filterwarnings("default")

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Add stderr handler if not already present
    if not any(isinstance(h, logging.StreamHandler) and h.stream == sys.stderr
               for h in root_logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
            datefmt="%H:%M:%S"
        ))
        root_logger.addHandler(handler)

    for name in _LOGGER_NAMES:
        logging.getLogger(name).setLevel(logging.DEBUG)
