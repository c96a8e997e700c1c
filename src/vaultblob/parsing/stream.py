"""Forward-only byte cursor over an in-memory buffer."""

from __future__ import annotations

import struct

from vaultblob.exceptions import StreamUnderflow


class ByteStream:
    """Reader for fixed-width and fixed-length fields.

    The cursor only moves forward and only when a read succeeds. A failed
    read raises StreamUnderflow and leaves the position unchanged.
    """

    def __init__(self, data: bytes) -> None:
        """Initialize stream over a byte buffer.

        Args:
            data: Buffer to read from (not copied, never modified)
        """
        self._data = bytes(data)
        self._offset = 0

    @property
    def position(self) -> int:
        """Number of bytes consumed so far."""
        return self._offset

    @property
    def remaining(self) -> int:
        """Number of bytes left to read."""
        return len(self._data) - self._offset

    def at_end(self) -> bool:
        """Return True if no bytes remain."""
        return self._offset >= len(self._data)

    def read_fixed(self, n: int) -> bytes:
        """Read exactly n bytes.

        Args:
            n: Number of bytes to read

        Returns:
            The next n bytes

        Raises:
            StreamUnderflow: If fewer than n bytes remain
        """
        if n < 0:
            raise ValueError(f"Read length must not be negative: {n}")
        if n > self.remaining:
            raise StreamUnderflow(n, self.remaining, self._offset)
        result = self._data[self._offset : self._offset + n]
        self._offset += n
        return result

    def read_uint32(self) -> int:
        """Read a big-endian unsigned 32-bit integer."""
        return struct.unpack(">I", self.read_fixed(4))[0]

    def read_rest(self) -> bytes:
        """Consume and return everything left in the stream."""
        return self.read_fixed(self.remaining)

    def __repr__(self) -> str:
        return f"ByteStream(position={self._offset}, remaining={self.remaining})"
