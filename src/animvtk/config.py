"""
Configuration & Format Constants
================================
This module is the central registry for the constants of both file formats
and for the options of a single conversion.

Why is this file needed?
------------------------
1. Abstraction: magic numbers, field widths and VTK type codes are named once
   instead of being scattered through the decoder and the writer.
2. Options: ``ConversionOptions`` is what the CLI builds from its flags and
   what ``IOManager`` consumes.

Exports:
    ANIM_MAGIC (int): The only supported Anim revision.
    ConversionOptions: Per-conversion settings.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, StrEnum


# --- Anim input format ---
ANIM_MAGIC: int = 0x542C

HEADER_TEXT_WIDTH: int = 81  # run/time/title texts and field names
NAME_TEXT_WIDTH: int = 81
LABEL_TEXT_WIDTH: int = 50  # part, subset, material, property and TH names
HEADER_TEXT_COUNT: int = 3
FLAG_COUNT: int = 10

SKEW_COMPONENTS: int = 6
FACET_TENSOR_COMPONENTS: int = 3
VOLUME_TENSOR_COMPONENTS: int = 6
TORSOR_COMPONENTS: int = 9


class FlagSlot(IntEnum):
    """Positions in the 10-entry flag vector."""
    MASS = 0
    NUMBERING = 1
    VOLUMES = 2
    LINES = 3
    HIERARCHY = 4
    TIME_HISTORY = 5
    SPH = 7


# --- VTK output format ---
class VtkCellType(IntEnum):
    VERTEX = 1
    LINE = 3
    TRIANGLE = 5
    QUAD = 9
    TETRA = 10
    HEXAHEDRON = 12


VTK_HEADER: str = "# vtk DataFile Version 3.0"
VTK_TITLE: str = "vtk output"

NODE_ID_NAME: str = "NODE_ID"
ELEMENT_ID_NAME: str = "ELEMENT_ID"
PART_ID_NAME: str = "PART_ID"
EROSION_NAME: str = "EROSION_STATUS"

TORSOR_SUFFIXES: tuple[str, ...] = ("F1", "F2", "F3", "M1", "M2", "M3", "M4", "M5", "M6")


class OutputEncoding(StrEnum):
    ASCII = "ASCII"
    BINARY = "BINARY"


@dataclass
class ConversionOptions:
    """Settings for one Anim -> VTK conversion."""
    encoding: OutputEncoding = OutputEncoding.ASCII
    suffix: str = ".vtk"
