"""
Input/Output Manager
Reads Anim frame files and writes the converted VTK files.
"""
from __future__ import annotations

import logging
import os
import tempfile
from importlib.metadata import version, PackageNotFoundError

from animvtk.config import ConversionOptions
from animvtk.errors import AnimReadError
from animvtk.model.decoder import AnimDecoder
from animvtk.model.frame import AnimFrame
from animvtk.model.stream import ByteStreamReader
from animvtk.output.vtk_writer import VtkLegacyWriter

# Get module logger
logger = logging.getLogger(__name__)

try:
    APP_VERSION = version("animvtk")
except PackageNotFoundError:
    APP_VERSION = "0.0.0-dev"


class IOManager:

    @staticmethod
    def output_path(filepath: str, options: ConversionOptions | None = None) -> str:
        """
        Destination of a conversion: the input path plus the output suffix,
        unless the input already carries that suffix.
        """
        suffix = (options or ConversionOptions()).suffix
        if filepath.endswith(suffix):
            return filepath
        return f"{filepath}{suffix}"

    @staticmethod
    def read_frame(filepath: str) -> AnimFrame:
        """Decode one Anim file completely."""
        logger.debug(f"Reading Anim frame from: {filepath}")
        try:
            with open(filepath, "rb") as f:
                frame = AnimDecoder(ByteStreamReader(f, filepath)).decode()
        except OSError as e:
            raise AnimReadError(f"Can't read input file: {e.strerror or e}", filepath) from e

        logger.debug(
            f"Decoded frame t={frame.time}: {frame.nodes.count} nodes, "
            + ", ".join(f"{family.LABEL}={family.count}" for family in frame.families())
        )
        return frame

    @staticmethod
    def write_vtk(frame: AnimFrame, dest_path: str, options: ConversionOptions | None = None) -> None:
        """
        Write ``frame`` to ``dest_path``.

        The file is written next to its destination under a temporary name and
        moved into place only when complete, so a failed write never leaves a
        partial VTK file behind.
        """
        options = options or ConversionOptions()
        dest_dir = os.path.dirname(os.path.abspath(dest_path))
        fd, temp_path = tempfile.mkstemp(prefix=".animvtk_", suffix=options.suffix, dir=dest_dir)
        try:
            with os.fdopen(fd, "wb") as f:
                VtkLegacyWriter(f, options.encoding).write(frame)
            os.replace(temp_path, dest_path)
        except BaseException:
            if os.path.exists(temp_path):
                os.remove(temp_path)
            raise

        logger.debug(f"VTK written to: {dest_path}")

    @staticmethod
    def convert(filepath: str, dest_path: str | None = None, options: ConversionOptions | None = None) -> str:
        """
        Convert one Anim file to VTK.

        The whole frame is decoded before the output file is opened.

        Returns:
            The path of the written VTK file.
        """
        options = options or ConversionOptions()
        dest_path = dest_path or IOManager.output_path(filepath, options)
        logger.info(f"Converting {filepath} to {dest_path}")

        frame = IOManager.read_frame(filepath)
        IOManager.write_vtk(frame, dest_path, options)

        logger.info(f"Converted {filepath} ({options.encoding}, {frame.total_cells} cells).")
        return dest_path
