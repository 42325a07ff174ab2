"""Logging setup for vidsfm.

Records go to stdout so they interleave with the output ffmpeg, COLMAP and
GLOMAP stream to the same terminal.
"""

from __future__ import annotations

import logging
import sys

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO") -> None:
    name = level.upper()
    if name not in LOG_LEVELS:
        raise ValueError(f"Unknown log level '{level}' (expected one of {', '.join(LOG_LEVELS)})")
    logging.basicConfig(
        level=getattr(logging, name),
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        stream=sys.stdout,
    )
