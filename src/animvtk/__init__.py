"""
Anim to VTK converter.

Decodes Anim frame files written by an explicit-dynamics solver and writes
them as legacy VTK unstructured grids.
"""
from animvtk.config import ConversionOptions, OutputEncoding
from animvtk.model.io import IOManager

__all__ = ["ConversionOptions", "OutputEncoding", "IOManager"]
