"""
Byte-Stream Reader
==================
Sequential big-endian primitive decoder over a forward-only binary stream.

The Anim format carries no resynchronization markers, so every read must be
complete: a short read raises ``TruncatedStreamError`` immediately.
"""
from __future__ import annotations

import logging
from typing import BinaryIO, TYPE_CHECKING

import numpy as np

from animvtk.errors import TruncatedStreamError

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

BE_INT32 = np.dtype(">i4")
BE_FLOAT32 = np.dtype(">f4")
BE_UINT16 = np.dtype(">u2")

READ_CHUNK_SIZE = 1 << 20


class ByteStreamReader:
    """
    Reads big-endian primitives from a binary stream, front to back.

    Arrays are returned in native byte order so the rest of the package never
    has to care about the file's endianness.
    """

    def __init__(self, stream: BinaryIO, name: str | None = None) -> None:
        """
        Args:
            stream: Any object with a ``read(n)`` method returning bytes.
            name: File name used in error messages.
        """
        self._stream = stream
        self.name = name
        self.position = 0

    def read_bytes(self, count: int) -> bytes:
        """
        Read exactly ``count`` bytes.

        The stream is read in chunks of at most ``READ_CHUNK_SIZE`` bytes, so
        a corrupt count fails as a truncation once the data runs out instead
        of allocating the whole requested size up front.
        """
        if count <= 0:
            return b""
        chunks: list[bytes] = []
        received = 0
        while received < count:
            chunk = self._stream.read(min(count - received, READ_CHUNK_SIZE))
            if not chunk:
                raise TruncatedStreamError(count, received, self.name)
            chunks.append(chunk)
            received += len(chunk)
        self.position += count
        return b"".join(chunks)

    def _read_array(self, dtype: np.dtype, count: int) -> npt.NDArray:
        if count <= 0:
            return np.empty(0, dtype=dtype.newbyteorder("="))
        raw = self.read_bytes(count * dtype.itemsize)
        return np.frombuffer(raw, dtype=dtype).astype(dtype.newbyteorder("="))

    def read_int32(self) -> int:
        return int(self._read_array(BE_INT32, 1)[0])

    def read_float32(self) -> np.float32:
        return self._read_array(BE_FLOAT32, 1)[0]

    def read_int32_array(self, count: int) -> npt.NDArray[np.int32]:
        return self._read_array(BE_INT32, count)

    def read_float32_array(self, count: int) -> npt.NDArray[np.float32]:
        return self._read_array(BE_FLOAT32, count)

    def read_uint16_array(self, count: int) -> npt.NDArray[np.uint16]:
        return self._read_array(BE_UINT16, count)

    def read_uint8_array(self, count: int) -> npt.NDArray[np.uint8]:
        return np.frombuffer(self.read_bytes(count), dtype=np.uint8).copy()

    def read_text(self, width: int) -> str:
        """
        Read a fixed-width NUL-padded text field.

        Invalid UTF-8 degrades to an empty string instead of failing; only
        trailing NUL characters are stripped (spaces are significant).
        """
        raw = self.read_bytes(width)
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError:
            logger.warning(f"Invalid text bytes at offset {self.position - width} in '{self.name}', using ''.")
            return ""
        return text.rstrip("\0")

    def read_texts(self, count: int, width: int) -> list[str]:
        return [self.read_text(width) for _ in range(count)]
