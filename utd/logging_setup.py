"""Logging configuration for utd."""

import logging
import sys
from pathlib import Path
from typing import Optional

LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def setup_logging(level: str = "warning", log_file: Optional[Path] = None) -> None:
    """Configure root logging.

    Installs a console handler on stderr at the requested level and, when
    log_file is given, a file handler receiving everything at DEBUG.

    Args:
        level: One of trace, debug, info, warning, error
        log_file: Optional path of the debug log file
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(LEVELS[level])
    ch.setFormatter(fmt)
    root.addHandler(ch)

    if log_file is not None:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            fh = logging.FileHandler(str(log_file), encoding="utf-8")
        except OSError as exc:
            logging.getLogger(__name__).warning("cannot open log file %s: %s", log_file, exc)
        else:
            fh.setLevel(logging.DEBUG)
            fh.setFormatter(fmt)
            root.addHandler(fh)
