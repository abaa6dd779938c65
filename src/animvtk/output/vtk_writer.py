"""
Legacy VTK Writer
=================
Streams an ``AnimFrame`` as a legacy VTK unstructured grid
(``# vtk DataFile Version 3.0``), ASCII or BINARY.

Why is this file needed?
------------------------
1. Layout: section order, keyword lines and blank-line separators follow the
   reference converter exactly so existing visualization setups keep working.
2. Encoding: ASCII and BINARY differ only in how numbers are written. Header
   lines are text in both modes; BINARY numbers are big-endian as the legacy
   format requires.
"""
from __future__ import annotations

import logging
from typing import BinaryIO, Iterable, TYPE_CHECKING

import numpy as np

from animvtk.config import VTK_HEADER, VTK_TITLE, OutputEncoding, VtkCellType
from animvtk.controller.fields import FieldKind, build_cell_fields, build_point_fields
from animvtk.controller.geometry import classify_frame
from animvtk.utils import format_float

if TYPE_CHECKING:
    import numpy.typing as npt
    from animvtk.controller.fields import CellField, CellSegment, PointField
    from animvtk.controller.geometry import CellShape
    from animvtk.model.frame import AnimFrame

logger = logging.getLogger(__name__)

BE_INT32 = ">i4"
BE_FLOAT32 = ">f4"
BE_FLOAT64 = ">f8"

ZERO_TENSOR_ROWS = ("0 0 0 ",) * 3


def format_cell(shape: CellShape) -> str:
    """ASCII row of the CELLS section. Hexahedron indices are separated by two spaces."""
    separator = "  " if shape.cell_type == VtkCellType.HEXAHEDRON else " "
    return f"{len(shape.indices)} " + separator.join(str(i) for i in shape.indices)


def format_tensor_rows(tensor: npt.NDArray[np.float32], planar: bool) -> tuple[str, str, str]:
    """
    ASCII rows of one 3x3 tensor.

    Planar (2-D) tensors keep literal zeros for the out-of-plane terms and a
    trailing space on every row.
    """
    if planar:
        return (
            f"{format_float(tensor[0, 0])} {format_float(tensor[0, 1])} 0 ",
            f"{format_float(tensor[1, 0])} {format_float(tensor[1, 1])} 0 ",
            "0 0 0 ",
        )
    return tuple(" ".join(format_float(v) for v in row) for row in tensor)


class VtkLegacyWriter:
    """
    Writes one frame to a binary stream.

    Usage:
        with open(path, "wb") as f:
            VtkLegacyWriter(f, OutputEncoding.BINARY).write(frame)
    """

    def __init__(self, stream: BinaryIO, encoding: OutputEncoding = OutputEncoding.ASCII) -> None:
        self._stream = stream
        self.encoding = OutputEncoding(encoding)

    @property
    def binary(self) -> bool:
        return self.encoding == OutputEncoding.BINARY

    # --- primitives ---

    def _line(self, text: str = "") -> None:
        self._stream.write(text.encode("utf-8") + b"\n")

    def _rows(self, rows: Iterable[str]) -> None:
        self._stream.write("".join(f"{row}\n" for row in rows).encode("utf-8"))

    def _pack(self, values, dtype: str) -> None:
        self._stream.write(np.asarray(values).astype(dtype).tobytes())

    def _ints(self, values: npt.NDArray) -> None:
        if self.binary:
            self._pack(values, BE_INT32)
        else:
            self._rows(str(int(v)) for v in np.ravel(values))

    def _floats(self, values: npt.NDArray) -> None:
        if self.binary:
            self._pack(values, BE_FLOAT32)
        else:
            self._rows(format_float(v) for v in np.ravel(values))

    # --- sections ---

    def write(self, frame: AnimFrame) -> None:
        shapes = classify_frame(frame)
        point_fields = build_point_fields(frame)
        cell_fields = build_cell_fields(frame)
        logger.debug(
            f"Writing {self.encoding} VTK: {frame.nodes.count} points, {len(shapes)} cells, "
            f"{len(point_fields)} point fields, {len(cell_fields)} cell fields"
        )

        self._write_header()
        self._write_field_data(frame.time)
        self._write_points(frame.nodes.coordinates)
        self._write_cells(shapes)
        self._write_cell_types(shapes)
        self._write_point_data(frame.nodes.count, point_fields)
        self._write_cell_data(frame.total_cells, cell_fields)

    def _write_header(self) -> None:
        self._line(VTK_HEADER)
        self._line(VTK_TITLE)
        self._line(str(self.encoding))
        self._line("DATASET UNSTRUCTURED_GRID")

    def _write_field_data(self, time: np.float32) -> None:
        self._line("FIELD FieldData 2")
        self._line("TIME 1 1 double")
        if self.binary:
            self._pack([np.float64(np.float32(time))], BE_FLOAT64)
            self._line()
        else:
            self._line(format_float(time))
        self._line("CYCLE 1 1 int")
        if self.binary:
            self._pack([0], BE_INT32)
            self._line()
        else:
            self._line("0")

    def _write_points(self, coordinates: npt.NDArray[np.float32]) -> None:
        self._line(f"POINTS {coordinates.shape[0]} float")
        if self.binary:
            self._pack(coordinates, BE_FLOAT32)
        else:
            self._rows(" ".join(format_float(c) for c in row) for row in coordinates)
        self._line()

    def _write_cells(self, shapes: list[CellShape]) -> None:
        if shapes:
            size = sum(shape.size for shape in shapes)
            self._line(f"CELLS {len(shapes)} {size}")
            if self.binary:
                flat = []
                for shape in shapes:
                    flat.append(len(shape.indices))
                    flat.extend(shape.indices)
                self._pack(np.array(flat, dtype=np.int64), BE_INT32)
            else:
                self._rows(format_cell(shape) for shape in shapes)
        self._line()

    def _write_cell_types(self, shapes: list[CellShape]) -> None:
        if shapes:
            self._line(f"CELL_TYPES {len(shapes)}")
            self._ints(np.array([int(shape.cell_type) for shape in shapes], dtype=np.int32))
        self._line()

    def _write_point_data(self, count: int, fields: list[PointField]) -> None:
        self._line(f"POINT_DATA {count}")
        for field in fields:
            if field.kind == FieldKind.VECTOR:
                self._line(f"VECTORS {field.name} float")
                if self.binary:
                    self._pack(field.values, BE_FLOAT32)
                else:
                    self._rows(" ".join(format_float(c) for c in row) for row in field.values)
            else:
                self._line(f"SCALARS {field.name} {field.kind.value} 1")
                self._line("LOOKUP_TABLE default")
                if field.kind == FieldKind.INT:
                    self._ints(field.values)
                else:
                    self._floats(field.values)
            self._line()

    def _write_cell_data(self, count: int, fields: list[CellField]) -> None:
        self._line(f"CELL_DATA {count}")
        for field in fields:
            if field.kind == FieldKind.TENSOR:
                self._line(f"TENSORS {field.name} float")
                if self.binary:
                    self._pack(field.values(), BE_FLOAT32)
                else:
                    for segment in field.segments:
                        self._rows(self._tensor_rows(segment))
            else:
                self._line(f"SCALARS {field.name} {field.kind.value} 1")
                self._line("LOOKUP_TABLE default")
                if field.kind == FieldKind.INT:
                    self._ints(field.values())
                else:
                    self._floats(field.values())
            self._line()

    @staticmethod
    def _tensor_rows(segment: CellSegment) -> Iterable[str]:
        if segment.is_padding:
            for _ in range(segment.count):
                yield from ZERO_TENSOR_ROWS
            return
        for tensor in segment.values:
            yield from format_tensor_rows(tensor, segment.planar)
