"""Small text helpers shared by the decoder, resolver and writer."""
from __future__ import annotations

import re

import numpy as np

INT32_MIN = -2**31
INT32_MAX = 2**31 - 1

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


def sanitize_name(name: str) -> str:
    """Make a field name usable as a single VTK token."""
    return name.replace(" ", "_")


def parse_int32(text: str) -> int | None:
    """Parse a signed 32-bit decimal integer, or return None."""
    text = text.strip()
    if not _INTEGER_RE.fullmatch(text):
        return None
    value = int(text)
    if value < INT32_MIN or value > INT32_MAX:
        return None
    return value


def format_float(value: float | np.floating) -> str:
    """
    Format a float32 value as the shortest positional decimal that reads back
    to the same float32 (``1``, ``0.5``, ``-0``, ``100000000000000000000``).
    """
    v = np.float32(value)
    if np.isnan(v):
        return "NaN"
    if np.isinf(v):
        return "inf" if v > 0 else "-inf"
    return np.format_float_positional(v, unique=True, trim="-")
