"""Tests for the byte stream reader."""

import struct

import pytest

from vaultblob.exceptions import StreamUnderflow, VaultBlobError
from vaultblob.parsing import ByteStream

STREAM_PADDING = b"This should be left in the stream!"


class TestReadFixed:
    """Tests for ByteStream.read_fixed."""

    def test_reads_exact_length(self) -> None:
        """Test that read_fixed returns exactly n bytes."""
        stream = ByteStream(b"0123456789")
        assert stream.read_fixed(4) == b"0123"
        assert stream.position == 4
        assert stream.remaining == 6

    def test_zero_length_read(self) -> None:
        """Test that a zero-length read succeeds even at the end."""
        stream = ByteStream(b"")
        assert stream.read_fixed(0) == b""
        assert stream.at_end()

    def test_underflow_raises(self) -> None:
        """Test that reading past the end raises StreamUnderflow."""
        stream = ByteStream(b"012")
        with pytest.raises(StreamUnderflow, match="needed 4 bytes, 3 left"):
            stream.read_fixed(4)

    def test_underflow_leaves_cursor_unchanged(self) -> None:
        """Test that a failed read does not advance the cursor."""
        stream = ByteStream(b"0123")
        stream.read_fixed(1)
        with pytest.raises(StreamUnderflow) as exc_info:
            stream.read_fixed(10)

        assert exc_info.value.requested == 10
        assert exc_info.value.available == 3
        assert exc_info.value.offset == 1
        assert stream.position == 1
        assert stream.read_fixed(3) == b"123"

    def test_underflow_is_library_error(self) -> None:
        """Test that StreamUnderflow is catchable as VaultBlobError."""
        with pytest.raises(VaultBlobError):
            ByteStream(b"").read_fixed(1)

    def test_negative_length_rejected(self) -> None:
        """Test that a negative length is a caller error."""
        with pytest.raises(ValueError, match="must not be negative"):
            ByteStream(b"0123").read_fixed(-1)


class TestReadUint32:
    """Tests for ByteStream.read_uint32."""

    NUMBERS = [0, 1, 10, 1000, 10000, 100000, 1000000, 10000000, 100000000, 0x7FFFFFFF, 0xFFFFFFFF]

    def test_individual_numbers(self) -> None:
        """Test each number packed into its own stream."""
        for number in self.NUMBERS:
            stream = ByteStream(struct.pack(">I", number))
            assert stream.read_uint32() == number
            assert stream.at_end()

    def test_numbers_in_one_stream(self) -> None:
        """Test all numbers packed back to back."""
        stream = ByteStream(struct.pack(f">{len(self.NUMBERS)}I", *self.NUMBERS))
        for number in self.NUMBERS:
            assert stream.read_uint32() == number
        assert stream.at_end()

    def test_big_endian(self) -> None:
        """Test that the most significant byte comes first."""
        assert ByteStream(b"\x00\x00\x01\x02").read_uint32() == 0x0102

    def test_trailing_bytes_untouched(self) -> None:
        """Test that only the bytes of the numbers are consumed."""
        stream = ByteStream(struct.pack(">3I", 0xDEADBEEF, 42, 0) + STREAM_PADDING)
        assert stream.read_uint32() == 0xDEADBEEF
        assert stream.read_uint32() == 42
        assert stream.read_uint32() == 0
        assert stream.read_rest() == STREAM_PADDING
        assert stream.at_end()

    def test_short_number_raises(self) -> None:
        """Test that fewer than 4 bytes raise StreamUnderflow."""
        stream = ByteStream(b"\x00\x01")
        with pytest.raises(StreamUnderflow):
            stream.read_uint32()
        assert stream.position == 0


class TestAtEnd:
    """Tests for ByteStream.at_end."""

    def test_empty_stream(self) -> None:
        """Test that an empty stream is at its end."""
        assert ByteStream(b"").at_end()

    def test_not_at_end_until_consumed(self) -> None:
        """Test at_end flips only after the last byte is read."""
        stream = ByteStream(b"ab")
        assert not stream.at_end()
        stream.read_fixed(1)
        assert not stream.at_end()
        stream.read_fixed(1)
        assert stream.at_end()
