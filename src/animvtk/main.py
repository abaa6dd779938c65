"""
Command-Line Entry Point
========================
Converts one or more Anim frame files to legacy VTK.

Usage:
    $ anim-to-vtk A001 A002 A003 --binary
    $ python -m animvtk A001

Each input ``NAME`` is written to ``NAME.vtk``. Files that fail are reported
at the end and make the command exit with status 1; the other files are
still converted.
"""
import argparse
import logging
import os
import sys
from typing import Optional, Sequence

from animvtk.config import ConversionOptions, OutputEncoding
from animvtk.errors import AnimvtkError
from animvtk.logging_config import setup_logging
from animvtk.model.io import APP_VERSION, IOManager

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="anim-to-vtk",
        description="Convert Anim frame files to legacy VTK unstructured grids.",
    )
    parser.add_argument("files", nargs="+", metavar="FILE", help="Anim files to convert")
    parser.add_argument(
        "-b", "--binary", action="store_true",
        help="write BINARY VTK (default is ASCII)",
    )
    parser.add_argument(
        "--log-level", default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="logging verbosity (default: INFO)",
    )
    parser.add_argument("--log-file", default=None, help="also write the log to this file")
    parser.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")
    return parser


def convert_files(files: Sequence[str], options: ConversionOptions) -> list[str]:
    """
    Convert every file, continuing past failures.

    Returns:
        The input files that could not be converted.
    """
    failed: list[str] = []
    converted = 0

    for filepath in files:
        if not os.path.exists(filepath):
            logger.error(f"Input file {filepath} does not exist")
            failed.append(filepath)
            continue

        try:
            IOManager.convert(filepath, options=options)
        except (AnimvtkError, OSError) as e:
            logger.exception(f"Failed to convert {filepath}: {e}")
            failed.append(filepath)
            continue
        converted += 1

    if failed:
        logger.error(f"Conversion summary: {converted} succeeded, {len(failed)} failed")
        logger.error("Failed files:\n" + "\n".join(f"  - {name}" for name in failed))
    elif converted > 1:
        logger.info(f"Conversion complete: {converted} files converted successfully")

    return failed


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level=getattr(logging, args.log_level), log_file=args.log_file)

    encoding = OutputEncoding.BINARY if args.binary else OutputEncoding.ASCII
    failed = convert_files(args.files, ConversionOptions(encoding=encoding))
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
