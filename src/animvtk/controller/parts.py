"""
Part-ID Resolver
================
Expands the sparse part table of each family into one part ID per element.
"""
from __future__ import annotations

import logging
from typing import Sequence, TYPE_CHECKING

import numpy as np

from animvtk.utils import parse_int32

if TYPE_CHECKING:
    import numpy.typing as npt
    from animvtk.model.frame import AnimFrame, ElementFamily

logger = logging.getLogger(__name__)


def parse_part_label(label: str) -> int:
    """
    Part ID carried by a part label. Text that is not an integer gives 0.
    """
    value = parse_int32(label)
    if value is None:
        logger.warning(f"Part label '{label}' is not an integer, using part ID 0.")
        return 0
    return value


def resolve_part_ids(boundaries: Sequence[int] | npt.NDArray[np.int32], labels: Sequence[str], element_count: int) -> npt.NDArray[np.int32]:
    """
    Assign a part ID to each element of a family.

    A single cursor walks the boundary table: at element ``i`` it moves past
    every boundary equal to ``i`` and the element takes the ID of the part
    under the cursor. Once the cursor runs off the table the ID is 0.

    Args:
        boundaries: Non-decreasing element indices, one per part.
        labels: Label text of each part (same length as ``boundaries``).
        element_count: Number of elements in the family.

    Returns:
        (element_count,) int32 array.
    """
    n_parts = min(len(boundaries), len(labels))
    part_ids = [parse_part_label(label) for label in labels[:n_parts]]

    result = np.zeros(element_count, dtype=np.int32)
    cursor = 0
    for i in range(element_count):
        while cursor < n_parts and boundaries[cursor] == i:
            cursor += 1
        if cursor < n_parts:
            result[i] = part_ids[cursor]
    return result


def resolve_family_part_ids(family: ElementFamily) -> npt.NDArray[np.int32]:
    return resolve_part_ids(family.parts.boundaries, family.parts.labels, family.count)


def resolve_frame_part_ids(frame: AnimFrame) -> npt.NDArray[np.int32]:
    """Part IDs of all cells, concatenated in family order 1-D, 2-D, 3-D, SPH."""
    per_family = [resolve_family_part_ids(family) for family in frame.families()]
    return np.concatenate(per_family).astype(np.int32)
