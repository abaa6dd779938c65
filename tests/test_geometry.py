import io

import numpy as np

from animvtk.config import VtkCellType
from animvtk.controller.geometry import (
    classify_facet, classify_facets, classify_frame, classify_volume, classify_volumes,
)
from animvtk.model.decoder import AnimDecoder
from animvtk.model.stream import ByteStreamReader

from conftest import anim_bytes


def test_degenerate_hexahedron_is_sorted_tetrahedron():
    shape = classify_volume([1, 2, 3, 4, 4, 4, 4, 4])
    assert shape.cell_type == VtkCellType.TETRA
    assert shape.indices == (1, 2, 3, 4)
    assert shape.size == 5


def test_tetrahedron_indices_sorted_regardless_of_input_order():
    shape = classify_volume([9, 3, 7, 1, 1, 1, 1, 1])
    assert shape.indices == (1, 3, 7, 9)


def test_hexahedron_unchanged():
    shape = classify_volume([1, 2, 3, 4, 5, 6, 7, 8])
    assert shape.cell_type == VtkCellType.HEXAHEDRON
    assert shape.indices == (1, 2, 3, 4, 5, 6, 7, 8)


def test_other_degenerate_volumes_stay_hexahedra():
    # 6 distinct nodes (wedge) is not recognized
    shape = classify_volume([0, 1, 2, 2, 3, 4, 5, 5])
    assert shape.cell_type == VtkCellType.HEXAHEDRON
    assert shape.indices == (0, 1, 2, 2, 3, 4, 5, 5)


def test_triangle_keeps_first_occurrence_order():
    shape = classify_facet([7, 2, 2, 5])
    assert shape.cell_type == VtkCellType.TRIANGLE
    assert int(shape.cell_type) == 5
    assert shape.indices == (7, 2, 5)


def test_quad_unchanged():
    shape = classify_facet([4, 3, 2, 1])
    assert int(shape.cell_type) == 9
    assert shape.indices == (4, 3, 2, 1)


def test_vectorized_classification():
    volumes = classify_volumes(np.array([[1, 2, 3, 4, 4, 4, 4, 4], [1, 2, 3, 4, 5, 6, 7, 8]], dtype=np.int32))
    facets = classify_facets(np.array([[0, 1, 2, 2], [0, 1, 2, 3]], dtype=np.int32))
    assert [s.cell_type for s in volumes] == [VtkCellType.TETRA, VtkCellType.HEXAHEDRON]
    assert [s.cell_type for s in facets] == [VtkCellType.TRIANGLE, VtkCellType.QUAD]


def test_frame_cells_in_family_order(full_frame_bytes):
    frame = AnimDecoder(ByteStreamReader(io.BytesIO(full_frame_bytes))).decode()

    shapes = classify_frame(frame)

    assert len(shapes) == frame.total_cells == 9
    assert [int(s.cell_type) for s in shapes] == [3, 3, 3, 9, 5, 12, 10, 1, 1]
    assert shapes[0].indices == (0, 1)
    assert shapes[4].indices == (0, 1, 2)
    assert shapes[6].indices == (1, 2, 3, 4)
    assert shapes[8].indices == (6,)


def test_frame_without_elements_has_no_cells():
    frame = AnimDecoder(ByteStreamReader(io.BytesIO(anim_bytes(coords=[(0, 0, 0)])))).decode()
    assert classify_frame(frame) == []
