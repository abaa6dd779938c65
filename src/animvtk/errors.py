"""
Exceptions
==========
Every fatal condition of a conversion is raised as a subclass of
``AnimvtkError`` so the batch shell can report it with the offending file name.
"""
from __future__ import annotations


class AnimvtkError(Exception):
    """Base class for all conversion errors."""

    def __init__(self, message: str, filename: str | None = None) -> None:
        self.filename = filename
        if filename:
            message = f"{filename}: {message}"
        super().__init__(message)


class AnimReadError(AnimvtkError):
    """The input could not be opened or read."""


class TruncatedStreamError(AnimReadError):
    """The stream ended before a requested section was complete."""

    def __init__(self, requested: int, available: int, filename: str | None = None) -> None:
        self.requested = requested
        self.available = available
        super().__init__(
            f"Unexpected end of stream (requested {requested} bytes, got {available}).",
            filename,
        )


class UnsupportedVersionError(AnimvtkError):
    """The magic number does not match the supported Anim revision."""

    def __init__(self, magic: int, filename: str | None = None) -> None:
        self.magic = magic
        super().__init__(f"Unsupported Anim file version (magic 0x{magic & 0xFFFFFFFF:X}).", filename)


class AnimFormatError(AnimvtkError):
    """A decoded value is structurally impossible (e.g. a negative count)."""


class VtkCompareError(AnimvtkError):
    """Two VTK files could not be compared."""
