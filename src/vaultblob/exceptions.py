"""Custom exception hierarchy for vaultblob.

All exceptions inherit from VaultBlobError, so callers can catch every
library failure with a single except clause.

Exception Hierarchy:
    VaultBlobError (base)
    ├── StreamUnderflow
    │   └── TruncatedChunk
    ├── FormatError
    ├── UnsupportedEncoding
    └── CryptoError
        └── DecryptionError

Every error aborts the enclosing parse or decode call. Nothing is
recovered locally and no partial result is returned.

Security Note:
    Messages carry sizes, offsets and tags only. They never include key
    material, IVs or decrypted text.
"""

from __future__ import annotations


class VaultBlobError(Exception):
    """Base exception for all vaultblob errors."""


# --- Structural Errors ---


class StreamUnderflow(VaultBlobError):
    """Not enough bytes left in the stream for a fixed-length read.

    Attributes:
        requested: Number of bytes the read needed
        available: Number of bytes that were left
        offset: Stream position at which the read was attempted
    """

    def __init__(self, requested: int, available: int, offset: int) -> None:
        self.requested = requested
        self.available = available
        self.offset = offset
        super().__init__(
            f"Unexpected end of stream at offset {offset}: "
            f"needed {requested} bytes, {available} left"
        )


class TruncatedChunk(StreamUnderflow):
    """The blob ends with a partial chunk.

    Raised by the chunk extractor; the whole extraction fails.
    """


class FormatError(VaultBlobError):
    """Malformed encoded input.

    Raised for invalid base64 or hex text and for values that do not
    follow the expected textual framing.
    """


class UnsupportedEncoding(VaultBlobError):
    """Unknown encoding tag.

    Unknown tags are always surfaced, never treated as plain text.
    """

    def __init__(self, encoding: object) -> None:
        self.encoding = encoding
        super().__init__(f"Unsupported encoding: {encoding!r}")


# --- Crypto Errors ---


class CryptoError(VaultBlobError):
    """Error in cryptographic operations."""


class DecryptionError(CryptoError):
    """Failed to decrypt a value.

    Covers wrong key length, missing key, bad IV, misaligned ciphertext
    and bad padding. The message is kept generic so it does not reveal
    which part was wrong.
    """

    def __init__(self, message: str = "Decryption failed") -> None:
        super().__init__(message)
