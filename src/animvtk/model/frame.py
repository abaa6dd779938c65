"""
Anim Frame (Data Model)
=======================
In-memory representation of one decoded Anim frame.

Why is this file needed?
------------------------
1. Structure: the raw stream is one flat sequence of arrays; here each element
   family owns its connectivity, parts and fields.
2. Safety: the positional flag vector is exposed through named properties so
   no caller indexes it by hand.
3. Decoupling: the decoder writes these objects once, the controller and
   output layers only read them.

Classes:
    FrameFlags: Named view of the 10-slot flag vector.
    NodeSet: Coordinates and nodal fields.
    ElementFamily: Base of LineElements, FacetElements, VolumeElements, SphElements.
    AnimFrame: The root aggregate.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Iterator, TYPE_CHECKING

import numpy as np

from animvtk.config import (
    FlagSlot, FLAG_COUNT, FACET_TENSOR_COMPONENTS, VOLUME_TENSOR_COMPONENTS,
)

if TYPE_CHECKING:
    import numpy.typing as npt


def _empty_int(width: int = 0) -> npt.NDArray[np.int32]:
    shape = (0, width) if width else (0,)
    return np.empty(shape, dtype=np.int32)


@dataclass(frozen=True)
class FrameFlags:
    """
    The flag vector read right after the frame header.

    The producer compares some slots against 1 and others against 0, so both
    views of the numbering slot are kept.
    """
    values: tuple[int, ...] = (0,) * FLAG_COUNT

    def __post_init__(self) -> None:
        if len(self.values) != FLAG_COUNT:
            raise ValueError(f"Expected {FLAG_COUNT} flags, got {len(self.values)}.")

    def _slot(self, slot: FlagSlot) -> int:
        return self.values[slot]

    @property
    def has_mass(self) -> bool:
        return self._slot(FlagSlot.MASS) == 1

    @property
    def has_numbering(self) -> bool:
        """Node IDs and 2-D element IDs are present."""
        return self._slot(FlagSlot.NUMBERING) != 0

    @property
    def has_element_numbering(self) -> bool:
        """3-D, 1-D and SPH element IDs are present."""
        return self._slot(FlagSlot.NUMBERING) == 1

    @property
    def has_volumes(self) -> bool:
        return self._slot(FlagSlot.VOLUMES) != 0

    @property
    def has_lines(self) -> bool:
        return self._slot(FlagSlot.LINES) != 0

    @property
    def has_hierarchy(self) -> bool:
        return self._slot(FlagSlot.HIERARCHY) != 0

    @property
    def has_time_history(self) -> bool:
        return self._slot(FlagSlot.TIME_HISTORY) != 0

    @property
    def has_sph(self) -> bool:
        return self._slot(FlagSlot.SPH) != 0


@dataclass
class NamedField:
    """A named array. ``values`` has one row per node or element."""
    name: str
    values: npt.NDArray[np.float32]


@dataclass
class PartTable:
    """
    Sparse part assignment of one family.

    ``boundaries[p]`` is the element index at which the cursor moves past
    part ``p``; ``labels[p]`` is the part's label text (normally its ID).
    """
    boundaries: npt.NDArray[np.int32] = field(default_factory=_empty_int)
    labels: list[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.labels)


@dataclass
class NodeSet:
    coordinates: npt.NDArray[np.float32] = field(default_factory=lambda: np.empty((0, 3), dtype=np.float32))
    scalars: list[NamedField] = field(default_factory=list)
    vectors: list[NamedField] = field(default_factory=list)
    external_ids: npt.NDArray[np.int32] | None = None

    @property
    def count(self) -> int:
        return int(self.coordinates.shape[0])


@dataclass
class ElementFamily:
    """
    Common part of the four element families.

    Subclasses fix the number of nodes per element, the compressed tensor
    width and the prefix used for their fields in the VTK output.
    """
    NODES_PER_ELEMENT: ClassVar[int] = 0
    TENSOR_COMPONENTS: ClassVar[int] = 0
    PREFIX: ClassVar[str] = ""
    LABEL: ClassVar[str] = ""

    connectivity: npt.NDArray[np.int32] = field(default_factory=_empty_int)
    erosion: npt.NDArray[np.uint8] = field(default_factory=lambda: np.empty(0, dtype=np.uint8))
    parts: PartTable = field(default_factory=PartTable)
    scalars: list[NamedField] = field(default_factory=list)
    tensors: list[NamedField] = field(default_factory=list)
    external_ids: npt.NDArray[np.int32] | None = None

    @property
    def count(self) -> int:
        return int(self.erosion.shape[0])

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(count={self.count}, parts={len(self.parts)}, "
            f"scalars={len(self.scalars)}, tensors={len(self.tensors)})"
        )


@dataclass(repr=False)
class LineElements(ElementFamily):
    NODES_PER_ELEMENT: ClassVar[int] = 2
    PREFIX: ClassVar[str] = "1DELEM_"
    LABEL: ClassVar[str] = "1D"

    torsors: list[NamedField] = field(default_factory=list)


@dataclass(repr=False)
class FacetElements(ElementFamily):
    NODES_PER_ELEMENT: ClassVar[int] = 4
    TENSOR_COMPONENTS: ClassVar[int] = FACET_TENSOR_COMPONENTS
    PREFIX: ClassVar[str] = "2DELEM_"
    LABEL: ClassVar[str] = "2D"


@dataclass(repr=False)
class VolumeElements(ElementFamily):
    NODES_PER_ELEMENT: ClassVar[int] = 8
    TENSOR_COMPONENTS: ClassVar[int] = VOLUME_TENSOR_COMPONENTS
    PREFIX: ClassVar[str] = "3DELEM_"
    LABEL: ClassVar[str] = "3D"


@dataclass(repr=False)
class SphElements(ElementFamily):
    NODES_PER_ELEMENT: ClassVar[int] = 1
    TENSOR_COMPONENTS: ClassVar[int] = VOLUME_TENSOR_COMPONENTS
    PREFIX: ClassVar[str] = "SPHELEM_"
    LABEL: ClassVar[str] = "SPH"


@dataclass(frozen=True)
class AnimFrame:
    """
    One decoded snapshot. Built by ``AnimDecoder`` and read-only afterwards.
    """
    time: np.float32
    flags: FrameFlags
    nodes: NodeSet
    facets: FacetElements
    volumes: VolumeElements = field(default_factory=VolumeElements)
    lines: LineElements = field(default_factory=LineElements)
    sph: SphElements = field(default_factory=SphElements)

    def families(self) -> Iterator[ElementFamily]:
        """Families in VTK cell order: 1-D, 2-D, 3-D, SPH."""
        yield self.lines
        yield self.facets
        yield self.volumes
        yield self.sph

    @property
    def total_cells(self) -> int:
        return sum(family.count for family in self.families())

