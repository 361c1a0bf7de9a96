"""
Logging configuration for the application.

The ``setup_logging`` function configures the root logger with a file
handler.  The terminal belongs to the UI while the app runs, so no console
handler is attached.  This module ensures that logging is set up exactly
once.
"""

import logging
from pathlib import Path
from typing import Optional

_configured = False


def setup_logging(level: str = "INFO", logfile: Optional[Path] = None) -> None:
    """Configure root logger.

    On the first call, attach a file handler to the root logger (or a
    ``NullHandler`` when ``logfile`` is omitted) and set its level.  Later
    calls do nothing.

    Parameters
    ----------
    level : str
        Logging level name (e.g. ``"DEBUG"``, ``"INFO"``).  Case
        insensitive.
    logfile : Optional[Path]
        File to log messages to.  Parent directories are created.
    """
    global _configured
    if _configured:
        return
    _configured = True

    logger = logging.getLogger()

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(numeric_level)

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if logfile is None:
        logger.addHandler(logging.NullHandler())
        return

    log_path = Path(logfile).expanduser().resolve()
    log_path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)
