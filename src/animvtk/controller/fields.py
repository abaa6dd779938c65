"""
Field Assembly
==============
Builds the point-data and cell-data fields of the VTK output from a frame.

Every cell-data field spans all cells of the frame. A family that does not
define a field contributes a zero-padding segment of its own length, so the
writer can emit each family's slice with the right layout.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

import numpy as np

from animvtk.config import (
    NODE_ID_NAME, ELEMENT_ID_NAME, PART_ID_NAME, EROSION_NAME, TORSOR_SUFFIXES,
)
from animvtk.controller.parts import resolve_frame_part_ids
from animvtk.model.frame import FacetElements
from animvtk.utils import sanitize_name

if TYPE_CHECKING:
    import numpy.typing as npt
    from animvtk.model.frame import AnimFrame, ElementFamily


class FieldKind(Enum):
    INT = "int"
    FLOAT = "float"
    VECTOR = "vector"
    TENSOR = "tensor"


def expand_tensor(components) -> npt.NDArray[np.float32]:
    """
    Rebuild one symmetric 3x3 tensor from compressed storage.

    6 components ``[xx, yy, zz, xy, xz, yz]`` (volumes, SPH) or
    3 components ``[xx, yy, xy]`` (facets, in-plane only).
    """
    return expand_tensors(np.asarray(components, dtype=np.float32).reshape(1, -1))[0]


def expand_tensors(compressed: npt.NDArray[np.float32]) -> npt.NDArray[np.float32]:
    """Vectorized ``expand_tensor`` over an (n, 6) or (n, 3) array, returns (n, 3, 3)."""
    compressed = np.asarray(compressed, dtype=np.float32)
    n, width = compressed.shape
    full = np.zeros((n, 3, 3), dtype=np.float32)
    if width == 6:
        xx, yy, zz, xy, xz, yz = (compressed[:, k] for k in range(6))
        full[:, 0, 0], full[:, 0, 1], full[:, 0, 2] = xx, xy, xz
        full[:, 1, 0], full[:, 1, 1], full[:, 1, 2] = xy, yy, yz
        full[:, 2, 0], full[:, 2, 1], full[:, 2, 2] = xz, yz, zz
    elif width == 3:
        xx, yy, xy = (compressed[:, k] for k in range(3))
        full[:, 0, 0], full[:, 0, 1] = xx, xy
        full[:, 1, 0], full[:, 1, 1] = xy, yy
    else:
        raise ValueError(f"Expected 3 or 6 tensor components, got {width}.")
    return full


@dataclass
class CellSegment:
    """
    Values of one family inside a cell-data field.

    ``values`` is None for zero padding. ``planar`` marks 2-D tensors, whose
    third row and column are structurally zero.
    """
    count: int
    values: npt.NDArray | None = None
    planar: bool = False

    @property
    def is_padding(self) -> bool:
        return self.values is None


@dataclass
class PointField:
    name: str
    kind: FieldKind
    values: npt.NDArray


@dataclass
class CellField:
    name: str
    kind: FieldKind
    segments: list[CellSegment] = field(default_factory=list)

    def __len__(self) -> int:
        return sum(segment.count for segment in self.segments)

    @property
    def tuple_shape(self) -> tuple[int, ...]:
        return (3, 3) if self.kind == FieldKind.TENSOR else ()

    @property
    def dtype(self) -> type:
        return np.int32 if self.kind == FieldKind.INT else np.float32

    def values(self) -> npt.NDArray:
        """The field over all cells, zero-padded where a family lacks it."""
        parts = []
        for segment in self.segments:
            if segment.is_padding:
                parts.append(np.zeros((segment.count, *self.tuple_shape), dtype=self.dtype))
            else:
                parts.append(np.asarray(segment.values, dtype=self.dtype).reshape(segment.count, *self.tuple_shape))
        if not parts:
            return np.zeros((0, *self.tuple_shape), dtype=self.dtype)
        return np.concatenate(parts)


def _ids_or_zeros(ids: npt.NDArray[np.int32] | None, count: int) -> npt.NDArray[np.int32]:
    if ids is None:
        return np.zeros(count, dtype=np.int32)
    return ids


def build_point_fields(frame: AnimFrame) -> list[PointField]:
    """NODE_ID, then nodal scalars, then nodal vectors."""
    nodes = frame.nodes
    fields = [PointField(NODE_ID_NAME, FieldKind.INT, _ids_or_zeros(nodes.external_ids, nodes.count))]
    for scalar in nodes.scalars:
        fields.append(PointField(sanitize_name(scalar.name), FieldKind.FLOAT, scalar.values))
    for vector in nodes.vectors:
        fields.append(PointField(sanitize_name(vector.name), FieldKind.VECTOR, vector.values))
    return fields


def _family_field(
    frame: AnimFrame,
    owner: ElementFamily,
    name: str,
    kind: FieldKind,
    values: npt.NDArray,
    planar: bool = False,
) -> CellField:
    """A field defined on ``owner`` only, zero-padded on the other families."""
    segments = []
    for family in frame.families():
        if family is owner:
            segments.append(CellSegment(family.count, values, planar))
        else:
            segments.append(CellSegment(family.count))
    return CellField(name, kind, segments)


def _family_scalars_and_tensors(frame: AnimFrame, family: ElementFamily) -> list[CellField]:
    fields = []
    for scalar in family.scalars:
        name = family.PREFIX + sanitize_name(scalar.name)
        fields.append(_family_field(frame, family, name, FieldKind.FLOAT, scalar.values))
    for tensor in family.tensors:
        name = family.PREFIX + sanitize_name(tensor.name)
        planar = isinstance(family, FacetElements)
        fields.append(
            _family_field(frame, family, name, FieldKind.TENSOR, expand_tensors(tensor.values), planar)
        )
    return fields


def build_cell_fields(frame: AnimFrame) -> list[CellField]:
    """
    Cell-data fields in output order.

    ELEMENT_ID, PART_ID, EROSION_STATUS, then the 1-D scalars and torsor
    components, 2-D, 3-D and SPH scalars and tensors.
    """
    families = list(frame.families())

    element_ids = CellField(ELEMENT_ID_NAME, FieldKind.INT, [
        CellSegment(family.count, _ids_or_zeros(family.external_ids, family.count))
        for family in families
    ])
    part_ids = CellField(PART_ID_NAME, FieldKind.INT, [
        CellSegment(frame.total_cells, resolve_frame_part_ids(frame))
    ])
    erosion = CellField(EROSION_NAME, FieldKind.INT, [
        CellSegment(family.count, (family.erosion != 0).astype(np.int32))
        for family in families
    ])
    fields = [element_ids, part_ids, erosion]

    lines = frame.lines
    for scalar in lines.scalars:
        name = lines.PREFIX + sanitize_name(scalar.name)
        fields.append(_family_field(frame, lines, name, FieldKind.FLOAT, scalar.values))
    for torsor in lines.torsors:
        for j, suffix in enumerate(TORSOR_SUFFIXES):
            name = lines.PREFIX + sanitize_name(torsor.name) + suffix
            fields.append(_family_field(frame, lines, name, FieldKind.FLOAT, torsor.values[:, j]))

    for family in (frame.facets, frame.volumes, frame.sph):
        fields.extend(_family_scalars_and_tensors(frame, family))

    return fields
