"""Vault container parsing.

This module handles low-level binary format operations:
- Byte stream reads (fixed length, big-endian uint32)
- Chunk and item codecs
- Chunk extraction from a decoded blob
- Itemized chunk reading and the chunk schema registry

All parsing uses Python's struct module for binary operations.
"""

from .chunks import (
    CHUNK_ID_SIZE,
    Chunk,
    Item,
    decode_blob,
    extract_chunks,
    iter_chunks,
    pack_chunk,
    pack_item,
    read_chunk,
    read_item,
)
from .itemized import ItemSpec, parse_item, parse_itemized_chunk
from .registry import (
    ACCOUNT_ITEMS,
    DEFAULT_REGISTRY,
    DEFAULT_SCHEMAS,
    EQUIVALENT_DOMAIN_ITEMS,
    ChunkRegistry,
    ChunkSchema,
)
from .stream import ByteStream

__all__ = [
    # Stream
    "ByteStream",
    # Chunks
    "CHUNK_ID_SIZE",
    "Chunk",
    "Item",
    "decode_blob",
    "extract_chunks",
    "iter_chunks",
    "pack_chunk",
    "pack_item",
    "read_chunk",
    "read_item",
    # Itemized
    "ItemSpec",
    "parse_item",
    "parse_itemized_chunk",
    # Registry
    "ACCOUNT_ITEMS",
    "DEFAULT_REGISTRY",
    "DEFAULT_SCHEMAS",
    "EQUIVALENT_DOMAIN_ITEMS",
    "ChunkRegistry",
    "ChunkSchema",
]
