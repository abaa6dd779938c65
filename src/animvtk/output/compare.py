"""
VTK Comparison Tool
===================
Reads two legacy VTK files (ASCII or BINARY) and reports the maximum absolute
difference of every field they share.

Typical use is checking that the ASCII and BINARY conversions of the same
Anim frame carry the same values, or comparing a conversion against a
reference file.

Usage:
    $ compare-vtk A001.vtk reference/A001.vtk
"""
from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np
import numpy.typing as npt
import pyvista as pv

from animvtk.errors import VtkCompareError
from animvtk.logging_config import setup_logging

logger = logging.getLogger(__name__)

IDENTICAL_TOLERANCE = 1e-6
SIMILAR_TOLERANCE = 1e-3


@dataclass
class FieldDifference:
    location: str
    name: str
    max_abs_diff: float
    index: int = 0

    def __str__(self) -> str:
        return f"{self.location} '{self.name}': max abs diff = {self.max_abs_diff:.6e} (at index {self.index})"


@dataclass
class ComparisonReport:
    n_points: tuple[int, int]
    n_cells: tuple[int, int]
    differences: list[FieldDifference] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)

    @property
    def max_abs_diff(self) -> float:
        return max((d.max_abs_diff for d in self.differences), default=0.0)

    @property
    def verdict(self) -> str:
        diff = self.max_abs_diff
        if diff < IDENTICAL_TOLERANCE:
            return f"Files are essentially identical (difference < {IDENTICAL_TOLERANCE:g})"
        if diff < SIMILAR_TOLERANCE:
            return f"Files are very similar (difference < {SIMILAR_TOLERANCE:g})"
        return "Files have noticeable differences"

    def lines(self) -> list[str]:
        out = [
            f"Number of points: {self.n_points[0]} vs {self.n_points[1]}",
            f"Number of cells: {self.n_cells[0]} vs {self.n_cells[1]}",
        ]
        out.extend(str(d) for d in self.differences)
        out.extend(f"Warning: {name} not found in file 2" for name in self.missing)
        out.append(f"Maximum absolute difference: {self.max_abs_diff:.6e}")
        out.append(self.verdict)
        return out


def max_abs_difference(a: npt.ArrayLike, b: npt.ArrayLike) -> tuple[float, int]:
    """
    Largest ``|a - b|`` over flattened arrays and its index; ``inf`` if sizes differ.

    Positions holding the same value in both arrays (NaN and infinities
    included) count as equal. NaN against a number counts as ``inf``.
    """
    a = np.ravel(np.asarray(a, dtype=np.float64))
    b = np.ravel(np.asarray(b, dtype=np.float64))
    if a.shape != b.shape:
        return float("inf"), 0
    if a.size == 0:
        return 0.0, 0
    same = (a == b) | (np.isnan(a) & np.isnan(b))
    with np.errstate(invalid="ignore"):
        diff = np.where(same, 0.0, np.abs(a - b))
    diff[np.isnan(diff)] = np.inf
    index = int(np.argmax(diff))
    return float(diff[index]), index


def read_vtk(filepath: str) -> pv.DataSet:
    try:
        return pv.read(filepath)
    except (OSError, ValueError) as e:
        raise VtkCompareError(f"Failed to read VTK file: {e}", filepath) from e


def _compare_arrays(location: str, first: pv.DataSetAttributes, second: pv.DataSetAttributes, report: ComparisonReport) -> None:
    for name in first.keys():
        if name not in second.keys():
            report.missing.append(f"{location} '{name}'")
            continue
        diff, index = max_abs_difference(first[name], second[name])
        report.differences.append(FieldDifference(location, name, diff, index))


def compare_vtk_files(file1: str, file2: str) -> ComparisonReport:
    """
    Compare coordinates, point data, cell data and field data of two files.

    Raises:
        VtkCompareError: A file can't be read, or point/cell counts differ.
    """
    logger.info(f"Reading file 1: {file1}")
    first = read_vtk(file1)
    logger.info(f"Reading file 2: {file2}")
    second = read_vtk(file2)

    report = ComparisonReport(
        n_points=(first.n_points, second.n_points),
        n_cells=(first.n_cells, second.n_cells),
    )
    if first.n_points != second.n_points:
        raise VtkCompareError(f"Different number of points ({first.n_points} vs {second.n_points})", file2)
    if first.n_cells != second.n_cells:
        raise VtkCompareError(f"Different number of cells ({first.n_cells} vs {second.n_cells})", file2)

    diff, index = max_abs_difference(first.points, second.points)
    report.differences.append(FieldDifference("Points", "coordinates", diff, index))
    _compare_arrays("Point data", first.point_data, second.point_data, report)
    _compare_arrays("Cell data", first.cell_data, second.cell_data, report)
    _compare_arrays("Field data", first.field_data, second.field_data, report)
    return report


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="compare-vtk",
        description="Compare two VTK files and report the maximum absolute difference.",
    )
    parser.add_argument("file1")
    parser.add_argument("file2")
    args = parser.parse_args(argv)
    setup_logging(level=logging.WARNING)

    try:
        report = compare_vtk_files(args.file1, args.file2)
    except VtkCompareError as e:
        logger.error(f"Error: {e}")
        return 1

    print("\n".join(report.lines()))
    return 0


if __name__ == "__main__":
    sys.exit(main())
