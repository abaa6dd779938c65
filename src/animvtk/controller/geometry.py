"""
Geometry Classifier
===================
Decides the VTK cell shape of each Anim element from its raw connectivity.

The solver stores every 3-D element as 8 node indices and every 2-D element
as 4. Tetrahedra and triangles are encoded by repeating indices, so the shape
is recovered by counting distinct nodes.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, TYPE_CHECKING

import numpy as np

from animvtk.config import VtkCellType
from animvtk.model.frame import (
    AnimFrame, ElementFamily, FacetElements, VolumeElements, LineElements, SphElements,
)

if TYPE_CHECKING:
    import numpy.typing as npt


@dataclass(frozen=True)
class CellShape:
    cell_type: VtkCellType
    indices: tuple[int, ...]

    @property
    def size(self) -> int:
        """Number of integers this cell takes in the CELLS section."""
        return len(self.indices) + 1


def classify_volume(indices: Sequence[int]) -> CellShape:
    """
    Classify one 8-node volume element.

    Exactly 4 distinct nodes make a tetrahedron, emitted in ascending node
    order. Anything else is a hexahedron with its indices untouched.
    """
    distinct = sorted(set(int(i) for i in indices))
    if len(distinct) == 4:
        return CellShape(VtkCellType.TETRA, tuple(distinct))
    return CellShape(VtkCellType.HEXAHEDRON, tuple(int(i) for i in indices))


def classify_facet(indices: Sequence[int]) -> CellShape:
    """
    Classify one 4-node facet.

    Exactly 3 distinct nodes make a triangle, emitted in first-occurrence
    order (not sorted). Anything else stays a quad.
    """
    distinct = list(dict.fromkeys(int(i) for i in indices))
    if len(distinct) == 3:
        return CellShape(VtkCellType.TRIANGLE, tuple(distinct))
    return CellShape(VtkCellType.QUAD, tuple(int(i) for i in indices))


def classify_volumes(connectivity: npt.NDArray[np.int32]) -> list[CellShape]:
    return [classify_volume(row) for row in connectivity]


def classify_facets(connectivity: npt.NDArray[np.int32]) -> list[CellShape]:
    return [classify_facet(row) for row in connectivity]


def _fixed_shapes(family: ElementFamily, cell_type: VtkCellType) -> list[CellShape]:
    return [CellShape(cell_type, tuple(int(i) for i in row)) for row in family.connectivity.reshape(family.count, -1)]


def classify_family(family: ElementFamily) -> list[CellShape]:
    """Cell shapes of one family, in element order."""
    if family.count == 0:
        return []
    if isinstance(family, VolumeElements):
        return classify_volumes(family.connectivity)
    if isinstance(family, FacetElements):
        return classify_facets(family.connectivity)
    if isinstance(family, LineElements):
        return _fixed_shapes(family, VtkCellType.LINE)
    if isinstance(family, SphElements):
        return _fixed_shapes(family, VtkCellType.VERTEX)
    raise TypeError(f"Unknown element family: {type(family).__name__}")


def classify_frame(frame: AnimFrame) -> list[CellShape]:
    """All cells of a frame in VTK order: 1-D, 2-D, 3-D, SPH."""
    shapes: list[CellShape] = []
    for family in frame.families():
        shapes.extend(classify_family(family))
    return shapes
