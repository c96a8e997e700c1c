"""Chunk and item codecs for the vault container format.

Container structure (big-endian throughout):
    chunk := id (4 bytes ASCII) || size (uint32) || payload (size bytes)
    item  := size (uint32) || payload (size bytes)

A blob is a sequence of chunks that runs to the very end of the buffer.
Chunk payloads of itemized types are themselves sequences of items.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
import struct
from collections.abc import Iterator
from dataclasses import dataclass

from vaultblob.exceptions import FormatError, StreamUnderflow, TruncatedChunk

from .stream import ByteStream

logger = logging.getLogger(__name__)

CHUNK_ID_SIZE = 4
MAX_UINT32 = 0xFFFFFFFF

_WHITESPACE = re.compile(rb"\s+")


@dataclass(frozen=True, slots=True)
class Chunk:
    """A top-level tagged record.

    Attributes:
        id: 4-character type tag (bytes mapped 1:1 through latin-1)
        size: Payload length
        payload: Raw payload bytes
    """

    id: str
    size: int
    payload: bytes

    def __post_init__(self) -> None:
        """Validate chunk fields."""
        if len(self.id) != CHUNK_ID_SIZE:
            raise ValueError(f"Chunk id must be {CHUNK_ID_SIZE} characters: {self.id!r}")
        if not 0 <= self.size <= MAX_UINT32:
            raise ValueError(f"Chunk size out of range: {self.size}")
        if len(self.payload) != self.size:
            raise ValueError(
                f"Chunk payload length {len(self.payload)} does not match size {self.size}"
            )


@dataclass(frozen=True, slots=True)
class Item:
    """A length-prefixed record inside a chunk payload."""

    size: int
    payload: bytes

    def __post_init__(self) -> None:
        """Validate item fields."""
        if not 0 <= self.size <= MAX_UINT32:
            raise ValueError(f"Item size out of range: {self.size}")
        if len(self.payload) != self.size:
            raise ValueError(
                f"Item payload length {len(self.payload)} does not match size {self.size}"
            )


def read_chunk(stream: ByteStream) -> Chunk:
    """Read one chunk from the stream.

    Raises:
        StreamUnderflow: If the id, size or payload is cut short
    """
    chunk_id = stream.read_fixed(CHUNK_ID_SIZE).decode("latin-1")
    size = stream.read_uint32()
    payload = stream.read_fixed(size)
    return Chunk(id=chunk_id, size=size, payload=payload)


def pack_chunk(chunk: Chunk) -> bytes:
    """Serialize a chunk; the exact inverse of read_chunk."""
    return chunk.id.encode("latin-1") + struct.pack(">I", chunk.size) + chunk.payload


def read_item(stream: ByteStream) -> Item:
    """Read one item from the stream.

    Raises:
        StreamUnderflow: If the size or payload is cut short
    """
    size = stream.read_uint32()
    payload = stream.read_fixed(size)
    return Item(size=size, payload=payload)


def pack_item(item: Item) -> bytes:
    """Serialize an item; the exact inverse of read_item."""
    return struct.pack(">I", item.size) + item.payload


def iter_chunks(stream: ByteStream) -> Iterator[Chunk]:
    """Yield chunks until the stream is exhausted."""
    while not stream.at_end():
        yield read_chunk(stream)


def extract_chunks(blob: bytes) -> dict[str, list[bytes]]:
    """Split a decoded blob into chunk payloads grouped by id.

    Payloads keep their encounter order within each id.

    Args:
        blob: Base64-decoded container bytes

    Returns:
        Mapping of chunk id to payload list

    Raises:
        TruncatedChunk: If the blob ends inside a chunk
    """
    stream = ByteStream(blob)
    chunks: dict[str, list[bytes]] = {}
    try:
        for chunk in iter_chunks(stream):
            chunks.setdefault(chunk.id, []).append(chunk.payload)
    except StreamUnderflow as e:
        raise TruncatedChunk(e.requested, e.available, e.offset) from e

    logger.debug(
        "Extracted %d chunk types from %d bytes: %s",
        len(chunks),
        len(blob),
        {chunk_id: len(payloads) for chunk_id, payloads in chunks.items()},
    )
    return chunks


def decode_blob(blob: str | bytes) -> bytes:
    """Decode the base64 container text.

    Line breaks and other ASCII whitespace are ignored.

    Raises:
        FormatError: If the text is not valid base64
    """
    if isinstance(blob, str):
        try:
            blob = blob.encode("ascii")
        except UnicodeEncodeError as e:
            raise FormatError("Blob is not valid base64 text") from e
    try:
        return base64.b64decode(_WHITESPACE.sub(b"", blob), validate=True)
    except binascii.Error as e:
        raise FormatError("Blob is not valid base64 text") from e
