"""vaultblob - A decoder for base64 vault export blobs.

A vault export is a base64-encoded container of tagged, length-prefixed
binary chunks. Chunk payloads hold length-prefixed items, and item values
are stored plain, hex, base64 or AES-256 encrypted (ECB or CBC).

This library turns such a blob into a mapping of chunk id to decoded
records. Fetching the blob and deriving the key are left to the caller.

Example:
    from vaultblob import parse

    chunks = parse(blob_text, encryption_key)
    for account in chunks.get("ACCT", []):
        print(account["name"], account["username"])
"""

__version__ = "0.1.0"

from .decoding import Encoding, decode
from .exceptions import (
    CryptoError,
    DecryptionError,
    FormatError,
    StreamUnderflow,
    TruncatedChunk,
    UnsupportedEncoding,
    VaultBlobError,
)
from .parser import Parser, ParserSettings, parse
from .parsing import DEFAULT_REGISTRY, ChunkRegistry, ChunkSchema, ItemSpec

__all__ = [
    # Core API
    "parse",
    "Parser",
    "ParserSettings",
    "decode",
    "Encoding",
    # Schemas
    "ChunkRegistry",
    "ChunkSchema",
    "DEFAULT_REGISTRY",
    "ItemSpec",
    # Exceptions
    "VaultBlobError",
    "StreamUnderflow",
    "TruncatedChunk",
    "FormatError",
    "UnsupportedEncoding",
    "CryptoError",
    "DecryptionError",
]
