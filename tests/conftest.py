"""
Shared fixtures: a writer for synthetic Anim frames.

``AnimFileBuilder`` emits big-endian primitives; ``anim_bytes`` lays out a
complete frame in producer order so every optional section can be exercised.
"""
from __future__ import annotations

import io
from typing import Any, Optional

import numpy as np
import pytest

from animvtk.config import ANIM_MAGIC


class AnimFileBuilder:
    def __init__(self) -> None:
        self._buf = io.BytesIO()

    def i32(self, *values: int) -> "AnimFileBuilder":
        self._buf.write(np.asarray(values, dtype=">i4").tobytes())
        return self

    def f32(self, *values: float) -> "AnimFileBuilder":
        self._buf.write(np.asarray(values, dtype=">f4").tobytes())
        return self

    def u16(self, *values: int) -> "AnimFileBuilder":
        self._buf.write(np.asarray(values, dtype=">u2").tobytes())
        return self

    def u8(self, *values: int) -> "AnimFileBuilder":
        self._buf.write(bytes(values))
        return self

    def raw(self, data: bytes) -> "AnimFileBuilder":
        self._buf.write(data)
        return self

    def text(self, value: str, width: int) -> "AnimFileBuilder":
        data = value.encode("utf-8")[:width]
        self._buf.write(data + b"\0" * (width - len(data)))
        return self

    def getvalue(self) -> bytes:
        return self._buf.getvalue()


def _flat(rows) -> list:
    return [v for row in rows for v in row]


def _write_parts(b: AnimFileBuilder, parts) -> int:
    boundaries, labels = parts
    b.i32(*boundaries)
    for label in labels:
        b.text(label, 50)
    return len(labels)


def _write_named(b: AnimFileBuilder, fields) -> None:
    for name, _ in fields:
        b.text(name, 81)


def _write_family_tail(b: AnimFileBuilder, n: int, n_parts: int, family: dict, mass: bool, numbering: int, hierarchy: bool) -> None:
    if mass:
        b.f32(*([1.0] * n))
    if numbering == 1:
        b.i32(*family.get("ids", list(range(1, n + 1))))
    if hierarchy:
        for _ in range(3):
            b.i32(*([7] * n_parts))


def anim_bytes(
    time: float = 0.0,
    coords=(),
    facets=(),
    facet_erosion=None,
    facet_parts=((), ()),
    node_scalars=(),
    facet_scalars=(),
    vectors=(),
    facet_tensors=(),
    skews: int = 0,
    mass: bool = False,
    numbering: int = 0,
    node_ids=None,
    facet_ids=None,
    volumes: Optional[dict] = None,
    lines: Optional[dict] = None,
    sph: Optional[dict] = None,
    hierarchy: Optional[dict] = None,
    time_history: Optional[dict] = None,
    magic: int = ANIM_MAGIC,
    flags=None,
) -> bytes:
    """Serialize a frame the way the solver writes it."""
    n_nodes = len(coords)
    n_facets = len(facets)
    if flags is None:
        flags = [
            1 if mass else 0,
            numbering,
            1 if volumes is not None else 0,
            1 if lines is not None else 0,
            1 if hierarchy is not None else 0,
            1 if time_history is not None else 0,
            0,
            1 if sph is not None else 0,
            0,
            0,
        ]
    has_hierarchy = flags[4] != 0

    b = AnimFileBuilder()
    b.i32(magic).f32(time)
    for header in ("time", "model", "run"):
        b.text(header, 81)
    b.i32(*flags)

    # 2D geometry
    b.i32(n_nodes, n_facets, len(facet_parts[1]), len(node_scalars), len(facet_scalars),
          len(vectors), len(facet_tensors), skews)
    if skews:
        b.u16(*([3] * (6 * skews)))
    b.f32(*_flat(coords))
    if n_facets:
        b.i32(*_flat(facets))
        b.u8(*(facet_erosion or [0] * n_facets))
    if facet_parts[1]:
        _write_parts(b, facet_parts)
    b.u16(*([0] * (3 * n_nodes)))
    _write_named(b, list(node_scalars) + list(facet_scalars))
    for _, values in node_scalars:
        b.f32(*values)
    for _, values in facet_scalars:
        b.f32(*values)
    _write_named(b, vectors)
    for _, rows in vectors:
        b.f32(*_flat(rows))
    _write_named(b, facet_tensors)
    for _, rows in facet_tensors:
        b.f32(*_flat(rows))
    if flags[0] == 1:
        b.f32(*([1.0] * n_facets))
        b.f32(*([1.0] * n_nodes))
    if flags[1] != 0:
        b.i32(*(node_ids if node_ids is not None else range(1, n_nodes + 1)))
        b.i32(*(facet_ids if facet_ids is not None else range(1, n_facets + 1)))
    if has_hierarchy:
        for _ in range(3):
            b.i32(*([7] * len(facet_parts[1])))

    if volumes is not None:
        conn = volumes.get("connectivity", [])
        n = len(conn)
        parts = volumes.get("parts", ((), ()))
        scalars = volumes.get("scalars", [])
        tensors = volumes.get("tensors", [])
        b.i32(n, len(parts[1]), len(scalars), len(tensors))
        b.i32(*_flat(conn))
        b.u8(*volumes.get("erosion", [0] * n))
        _write_parts(b, parts)
        _write_named(b, scalars)
        for _, values in scalars:
            b.f32(*values)
        _write_named(b, tensors)
        for _, rows in tensors:
            b.f32(*_flat(rows))
        _write_family_tail(b, n, len(parts[1]), volumes, flags[0] == 1, flags[1], has_hierarchy)

    if lines is not None:
        conn = lines.get("connectivity", [])
        n = len(conn)
        parts = lines.get("parts", ((), ()))
        scalars = lines.get("scalars", [])
        torsors = lines.get("torsors", [])
        skew = lines.get("skew")
        b.i32(n, len(parts[1]), len(scalars), len(torsors), 1 if skew is not None else 0)
        b.i32(*_flat(conn))
        b.u8(*lines.get("erosion", [0] * n))
        _write_parts(b, parts)
        _write_named(b, scalars)
        for _, values in scalars:
            b.f32(*values)
        _write_named(b, torsors)
        for _, rows in torsors:
            b.f32(*_flat(rows))
        if skew is not None:
            b.i32(*skew)
        _write_family_tail(b, n, len(parts[1]), lines, flags[0] == 1, flags[1], has_hierarchy)

    if has_hierarchy:
        hierarchy = hierarchy or {}
        subsets = hierarchy.get("subsets", [])
        b.i32(len(subsets))
        for subset in subsets:
            b.text(subset["name"], 50).i32(subset.get("parent", 0))
            for key in ("children", "parts_2d", "parts_3d", "parts_1d"):
                items = subset.get(key, [])
                b.i32(len(items))
                b.i32(*items)
        materials = hierarchy.get("materials", [])
        properties = hierarchy.get("properties", [])
        b.i32(len(materials), len(properties))
        for name, _ in materials:
            b.text(name, 50)
        b.i32(*[kind for _, kind in materials])
        for name, _ in properties:
            b.text(name, 50)
        b.i32(*[kind for _, kind in properties])

    if flags[5] != 0:
        time_history = time_history or {}
        groups = [time_history.get(key, []) for key in ("nodes", "2d", "3d", "1d")]
        b.i32(*[len(g) for g in groups])
        for group in groups:
            b.i32(*[index for index, _ in group])
            for _, name in group:
                b.text(name, 50)

    if sph is not None:
        nodes = sph.get("nodes", [])
        n = len(nodes)
        parts = sph.get("parts", ((), ()))
        scalars = sph.get("scalars", [])
        tensors = sph.get("tensors", [])
        b.i32(n, len(parts[1]), len(scalars), len(tensors))
        if n:
            b.i32(*nodes)
            b.u8(*sph.get("erosion", [0] * n))
        if parts[1]:
            _write_parts(b, parts)
        _write_named(b, scalars)
        for _, values in scalars:
            b.f32(*values)
        _write_named(b, tensors)
        for _, rows in tensors:
            b.f32(*_flat(rows))
        _write_family_tail(b, n, len(parts[1]), sph, flags[0] == 1, flags[1], has_hierarchy)

    return b.getvalue()


def full_frame_kwargs() -> dict[str, Any]:
    """A frame using every family and every optional section."""
    return dict(
        time=0.25,
        coords=[(0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0), (0, 0, 1), (1, 0, 1), (1, 1, 1), (0, 1, 1)],
        facets=[(0, 1, 2, 3), (0, 1, 2, 2)],
        facet_erosion=[0, 3],
        facet_parts=((2,), ("12",)),
        node_scalars=[("Temperature", [float(i) for i in range(8)])],
        facet_scalars=[("Plastic strain", [0.5, 1.5])],
        vectors=[("Velocity", [(i, 0.5, -1) for i in range(8)])],
        facet_tensors=[("Stress", [(1, 2, 3), (4, 5, 6)])],
        skews=1,
        mass=True,
        numbering=1,
        node_ids=list(range(101, 109)),
        facet_ids=[201, 202],
        volumes=dict(
            connectivity=[(0, 1, 2, 3, 4, 5, 6, 7), (4, 3, 2, 1, 1, 1, 1, 1)],
            erosion=[1, 0],
            parts=((2,), ("31",)),
            scalars=[("Density", [7.8, 2.7])],
            tensors=[("Stress", [(1, 2, 3, 4, 5, 6), (6, 5, 4, 3, 2, 1)])],
            ids=[301, 302],
        ),
        lines=dict(
            connectivity=[(0, 1), (1, 2), (2, 3)],
            parts=((1, 3), ("5", "6")),
            scalars=[("Axial force", [10.0, 20.0, 30.0])],
            torsors=[("Beam", [tuple(float(9 * e + c) for c in range(9)) for e in range(3)])],
            skew=[0, 0, 0],
            ids=[401, 402, 403],
        ),
        sph=dict(
            nodes=[5, 6],
            erosion=[0, 1],
            parts=((2,), ("77",)),
            scalars=[("Pressure", [3.0, 4.0])],
            tensors=[("Stress", [(1, 1, 1, 0, 0, 0), (2, 2, 2, 0.5, 0, 0)])],
            ids=[501, 502],
        ),
        hierarchy=dict(
            subsets=[
                dict(name="Model", parent=0, children=[2], parts_2d=[1], parts_3d=[1], parts_1d=[1, 2]),
                dict(name="Child", parent=1),
            ],
            materials=[("Steel", 2)],
            properties=[("Shell", 1), ("Beam", 3)],
        ),
        time_history=dict(
            nodes=[(1, "N1")],
            **{"2d": [(1, "F1")], "3d": [], "1d": [(2, "B2"), (3, "B3")]},
        ),
    )


@pytest.fixture
def full_frame_bytes() -> bytes:
    return anim_bytes(**full_frame_kwargs())


@pytest.fixture
def write_anim(tmp_path):
    """Write Anim bytes to a temporary file and return its path."""
    def _write(data: bytes, name: str = "A001") -> str:
        path = tmp_path / name
        path.write_bytes(data)
        return str(path)
    return _write
