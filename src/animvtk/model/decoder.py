"""
Anim Frame Decoder
==================
Turns a big-endian Anim stream into an ``AnimFrame`` in one forward pass.

Why is this file needed?
------------------------
The Anim layout is not self-describing: which sections follow depends on the
flag vector and on counts read earlier in the stream. Every gate below
mirrors the producer's write order exactly. Sections that are not needed for
the output (masses, normals, hierarchy, time-history lists) are still read
and then dropped, otherwise every later read would be misaligned.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from animvtk.config import (
    ANIM_MAGIC, HEADER_TEXT_COUNT, HEADER_TEXT_WIDTH, NAME_TEXT_WIDTH, LABEL_TEXT_WIDTH,
    FLAG_COUNT, SKEW_COMPONENTS, FACET_TENSOR_COMPONENTS, VOLUME_TENSOR_COMPONENTS,
    TORSOR_COMPONENTS,
)
from animvtk.errors import AnimFormatError, UnsupportedVersionError
from animvtk.model.frame import (
    AnimFrame, FrameFlags, NodeSet, NamedField, PartTable,
    ElementFamily, FacetElements, VolumeElements, LineElements, SphElements,
)

if TYPE_CHECKING:
    import numpy.typing as npt
    from animvtk.model.stream import ByteStreamReader

logger = logging.getLogger(__name__)


def split_fields(names: list[str], payload: npt.NDArray[np.float32], count: int, width: int = 1) -> list[NamedField]:
    """
    Split a field-major payload into one ``NamedField`` per name.

    Args:
        names: Field names, in stream order.
        payload: Flat array of ``len(names) * count * width`` values.
        count: Number of nodes or elements.
        width: Components per node/element (1 for scalars).
    """
    fields: list[NamedField] = []
    block = count * width
    for i, name in enumerate(names):
        values = payload[i * block:(i + 1) * block]
        if width > 1:
            values = values.reshape(count, width)
        fields.append(NamedField(name=name, values=values))
    return fields


class AnimDecoder:
    """
    Stateful decoder for one Anim frame.

    Usage:
        frame = AnimDecoder(reader).decode()
    """

    def __init__(self, reader: ByteStreamReader) -> None:
        self.reader = reader
        self.flags = FrameFlags()

    # --- helpers ---

    def _count(self, what: str) -> int:
        value = self.reader.read_int32()
        if value < 0:
            raise AnimFormatError(f"Negative {what} count ({value}).", self.reader.name)
        return value

    def _read_names(self, count: int) -> list[str]:
        return self.reader.read_texts(count, NAME_TEXT_WIDTH)

    def _read_parts(self, count: int) -> PartTable:
        boundaries = self.reader.read_int32_array(count)
        labels = self.reader.read_texts(count, LABEL_TEXT_WIDTH)
        return PartTable(boundaries=boundaries, labels=labels)

    def _read_connectivity(self, family: ElementFamily, count: int) -> None:
        width = family.NODES_PER_ELEMENT
        family.connectivity = self.reader.read_int32_array(count * width).reshape(count, width)
        family.erosion = self.reader.read_uint8_array(count)

    def _skip_hierarchy_triple(self, part_count: int) -> None:
        """Part -> subset, part -> material and part -> property indices."""
        for _ in range(3):
            self.reader.read_int32_array(part_count)

    # --- sections ---

    def decode(self) -> AnimFrame:
        magic = self.reader.read_int32()
        if magic != ANIM_MAGIC:
            raise UnsupportedVersionError(magic, self.reader.name)

        time = self.reader.read_float32()
        # Run time, model title and solver banner: not used
        self.reader.read_texts(HEADER_TEXT_COUNT, HEADER_TEXT_WIDTH)
        self.flags = FrameFlags(tuple(int(v) for v in self.reader.read_int32_array(FLAG_COUNT)))
        logger.debug(f"Frame time={time}, flags={self.flags.values}")

        nodes, facets = self._read_surfaces()
        volumes = self._read_volumes() if self.flags.has_volumes else VolumeElements()
        lines = self._read_lines() if self.flags.has_lines else LineElements()
        if self.flags.has_hierarchy:
            self._read_hierarchy()
        if self.flags.has_time_history:
            self._read_time_history()
        sph = self._read_sph() if self.flags.has_sph else SphElements()

        logger.debug(f"Decoded {self.reader.position} bytes from '{self.reader.name}'.")
        return AnimFrame(
            time=time,
            flags=self.flags,
            nodes=nodes,
            facets=facets,
            volumes=volumes,
            lines=lines,
            sph=sph,
        )

    def _read_surfaces(self) -> tuple[NodeSet, FacetElements]:
        """Nodes and 2-D facets. This block is always present."""
        reader = self.reader
        n_nodes = self._count("node")
        n_facets = self._count("facet")
        n_parts = self._count("2D part")
        n_node_funcs = self._count("nodal scalar")
        n_facet_funcs = self._count("2D scalar")
        n_vectors = self._count("vector")
        n_tensors = self._count("2D tensor")
        n_skews = self._count("skew")
        logger.debug(
            f"2D block: nodes={n_nodes}, facets={n_facets}, parts={n_parts}, "
            f"node_funcs={n_node_funcs}, facet_funcs={n_facet_funcs}, "
            f"vectors={n_vectors}, tensors={n_tensors}, skews={n_skews}"
        )

        if n_skews > 0:
            reader.read_uint16_array(n_skews * SKEW_COMPONENTS)

        nodes = NodeSet(coordinates=reader.read_float32_array(3 * n_nodes).reshape(n_nodes, 3))
        facets = FacetElements()

        if n_facets > 0:
            self._read_connectivity(facets, n_facets)
        if n_parts > 0:
            facets.parts = self._read_parts(n_parts)

        # Compressed nodal normals
        reader.read_uint16_array(3 * n_nodes)

        if n_node_funcs + n_facet_funcs > 0:
            names = self._read_names(n_node_funcs + n_facet_funcs)
            if n_node_funcs > 0:
                payload = reader.read_float32_array(n_nodes * n_node_funcs)
                nodes.scalars = split_fields(names[:n_node_funcs], payload, n_nodes)
            if n_facet_funcs > 0:
                payload = reader.read_float32_array(n_facets * n_facet_funcs)
                facets.scalars = split_fields(names[n_node_funcs:], payload, n_facets)

        vector_names = self._read_names(n_vectors) if n_vectors > 0 else []
        payload = reader.read_float32_array(3 * n_nodes * n_vectors)
        nodes.vectors = split_fields(vector_names, payload, n_nodes, width=3)

        if n_tensors > 0:
            names = self._read_names(n_tensors)
            payload = reader.read_float32_array(n_facets * FACET_TENSOR_COMPONENTS * n_tensors)
            facets.tensors = split_fields(names, payload, n_facets, width=FACET_TENSOR_COMPONENTS)

        if self.flags.has_mass:
            reader.read_float32_array(n_facets)
            reader.read_float32_array(n_nodes)

        if self.flags.has_numbering:
            nodes.external_ids = reader.read_int32_array(n_nodes)
            facets.external_ids = reader.read_int32_array(n_facets)

        if self.flags.has_hierarchy:
            self._skip_hierarchy_triple(n_parts)

        return nodes, facets

    def _read_volumes(self) -> VolumeElements:
        reader = self.reader
        volumes = VolumeElements()
        n_elements = self._count("3D element")
        n_parts = self._count("3D part")
        n_funcs = self._count("3D scalar")
        n_tensors = self._count("3D tensor")
        logger.debug(f"3D block: elements={n_elements}, parts={n_parts}, funcs={n_funcs}, tensors={n_tensors}")

        self._read_connectivity(volumes, n_elements)
        volumes.parts = self._read_parts(n_parts)

        if n_funcs > 0:
            names = self._read_names(n_funcs)
            volumes.scalars = split_fields(names, reader.read_float32_array(n_funcs * n_elements), n_elements)

        if n_tensors > 0:
            names = self._read_names(n_tensors)
            payload = reader.read_float32_array(n_elements * VOLUME_TENSOR_COMPONENTS * n_tensors)
            volumes.tensors = split_fields(names, payload, n_elements, width=VOLUME_TENSOR_COMPONENTS)

        if self.flags.has_mass:
            reader.read_float32_array(n_elements)
        if self.flags.has_element_numbering:
            volumes.external_ids = reader.read_int32_array(n_elements)
        if self.flags.has_hierarchy:
            self._skip_hierarchy_triple(n_parts)

        return volumes

    def _read_lines(self) -> LineElements:
        reader = self.reader
        lines = LineElements()
        n_elements = self._count("1D element")
        n_parts = self._count("1D part")
        n_funcs = self._count("1D scalar")
        n_torsors = self._count("torsor")
        has_skew = reader.read_int32() != 0
        logger.debug(
            f"1D block: elements={n_elements}, parts={n_parts}, funcs={n_funcs}, "
            f"torsors={n_torsors}, skew={has_skew}"
        )

        self._read_connectivity(lines, n_elements)
        lines.parts = self._read_parts(n_parts)

        if n_funcs > 0:
            names = self._read_names(n_funcs)
            lines.scalars = split_fields(names, reader.read_float32_array(n_funcs * n_elements), n_elements)

        if n_torsors > 0:
            names = self._read_names(n_torsors)
            payload = reader.read_float32_array(n_elements * TORSOR_COMPONENTS * n_torsors)
            lines.torsors = split_fields(names, payload, n_elements, width=TORSOR_COMPONENTS)

        if has_skew:
            reader.read_int32_array(n_elements)
        if self.flags.has_mass:
            reader.read_float32_array(n_elements)
        if self.flags.has_element_numbering:
            lines.external_ids = reader.read_int32_array(n_elements)
        if self.flags.has_hierarchy:
            self._skip_hierarchy_triple(n_parts)

        return lines

    def _read_hierarchy(self) -> None:
        """Subset tree, then material and property tables. Nothing is kept."""
        reader = self.reader
        n_subsets = self._count("subset")
        for _ in range(n_subsets):
            reader.read_text(LABEL_TEXT_WIDTH)
            reader.read_int32()  # parent subset
            # child subsets, then 2D, 3D and 1D parts
            for what in ("child subset", "subset 2D part", "subset 3D part", "subset 1D part"):
                n_children = self._count(what)
                if n_children > 0:
                    reader.read_int32_array(n_children)

        n_materials = self._count("material")
        n_properties = self._count("property")
        reader.read_texts(n_materials, LABEL_TEXT_WIDTH)
        reader.read_int32_array(n_materials)
        reader.read_texts(n_properties, LABEL_TEXT_WIDTH)
        reader.read_int32_array(n_properties)
        logger.debug(f"Hierarchy: subsets={n_subsets}, materials={n_materials}, properties={n_properties}")

    def _read_time_history(self) -> None:
        """Node and element lists selected for time history output. Nothing is kept."""
        reader = self.reader
        counts = [self._count(what) for what in ("TH node", "TH 2D element", "TH 3D element", "TH 1D element")]
        for count in counts:
            reader.read_int32_array(count)
            reader.read_texts(count, LABEL_TEXT_WIDTH)
        logger.debug(f"Time history lists: {counts}")

    def _read_sph(self) -> SphElements:
        reader = self.reader
        sph = SphElements()
        n_elements = self._count("SPH element")
        n_parts = self._count("SPH part")
        n_funcs = self._count("SPH scalar")
        n_tensors = self._count("SPH tensor")
        logger.debug(f"SPH block: elements={n_elements}, parts={n_parts}, funcs={n_funcs}, tensors={n_tensors}")

        if n_elements > 0:
            self._read_connectivity(sph, n_elements)
        if n_parts > 0:
            sph.parts = self._read_parts(n_parts)
        if n_funcs > 0:
            names = self._read_names(n_funcs)
            sph.scalars = split_fields(names, reader.read_float32_array(n_funcs * n_elements), n_elements)
        if n_tensors > 0:
            names = self._read_names(n_tensors)
            payload = reader.read_float32_array(n_elements * n_tensors * VOLUME_TENSOR_COMPONENTS)
            sph.tensors = split_fields(names, payload, n_elements, width=VOLUME_TENSOR_COMPONENTS)

        if self.flags.has_mass:
            reader.read_float32_array(n_elements)
        if self.flags.has_element_numbering:
            sph.external_ids = reader.read_int32_array(n_elements)
        if self.flags.has_hierarchy:
            self._skip_hierarchy_triple(n_parts)

        return sph
