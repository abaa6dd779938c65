"""
Logging Configuration
=====================
Sets up the ``animvtk`` logger for the two command-line tools.

Why is this file needed?
------------------------
1. Streams: ``anim-to-vtk`` reports progress and failures through the log,
   while ``compare-vtk`` prints its report on stdout. Log records therefore
   go to stderr so a report can be piped without log noise.
2. Batch runs: ``--log-file`` keeps a full record of a long batch next to
   the console output, e.g. to find which frames fell back to part ID 0.
"""
import logging
import sys
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%H:%M:%S'


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> None:
    """
    Configures the logger for the 'animvtk' namespace.

    Decoder section counts are logged at DEBUG, per-file progress at INFO,
    soft data defects (bad part labels, invalid text bytes) at WARNING.

    Args:
        level: Logging level (e.g. logging.DEBUG, logging.INFO)
        log_file: Optional path to save logs to a file (overwritten).
    """
    logger = logging.getLogger("animvtk")
    logger.setLevel(level)

    # Repeated calls (tests, one process running both tools) replace the handlers
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
        logger.debug(f"Logging to file: {log_file}")
