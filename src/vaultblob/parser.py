"""Vault blob parser.

Ties the pieces together:
1. base64-decode the blob text
2. split the container into chunk payloads grouped by id
3. decode each payload with the schema registered for its id

The caller supplies the blob and the 32-byte key; fetching the one and
deriving the other happen elsewhere.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from .parsing import (
    DEFAULT_REGISTRY,
    ChunkRegistry,
    decode_blob,
    extract_chunks,
)
from .parsing.registry import Record

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ParserSettings:
    """Settings for a parse run.

    Attributes:
        registry: Chunk id to schema lookup
        keep_unregistered: Pass payloads of unregistered ids through raw
            instead of dropping them
    """

    registry: ChunkRegistry = DEFAULT_REGISTRY
    keep_unregistered: bool = False


class Parser:
    """Parser for vault export blobs."""

    def __init__(
        self,
        blob: str | bytes,
        encryption_key: bytes,
        settings: ParserSettings | None = None,
    ) -> None:
        """Initialize parser.

        Args:
            blob: Base64-encoded container text
            encryption_key: 32-byte AES key for encrypted fields
            settings: Parse settings (defaults if not given)
        """
        self._blob = blob
        self._encryption_key = encryption_key
        self._settings = settings or ParserSettings()

    @property
    def blob(self) -> str | bytes:
        """The base64 container text as given."""
        return self._blob

    @property
    def settings(self) -> ParserSettings:
        """Settings used by this parser."""
        return self._settings

    def decode_blob(self) -> bytes:
        """Return the base64-decoded container bytes."""
        return decode_blob(self._blob)

    def extract_chunks(self, decoded_blob: bytes | None = None) -> dict[str, list[bytes]]:
        """Split the decoded blob into payloads grouped by chunk id."""
        if decoded_blob is None:
            decoded_blob = self.decode_blob()
        return extract_chunks(decoded_blob)

    def parse_chunks(
        self, raw_chunks: Mapping[str, list[bytes]]
    ) -> dict[str, list[Record]]:
        """Decode extracted payloads with the configured registry."""
        return self._settings.registry.parse_chunks(
            raw_chunks,
            self._encryption_key,
            keep_unregistered=self._settings.keep_unregistered,
        )

    def parse(self) -> dict[str, list[Record]]:
        """Decode, extract and parse the whole blob.

        Returns:
            Chunk id to list of decoded records

        Raises:
            FormatError: If the blob is not valid base64
            TruncatedChunk: If the container ends inside a chunk
            UnsupportedEncoding: If a schema names an unknown encoding
            DecryptionError: If an encrypted field fails to decrypt
        """
        raw_chunks = self.extract_chunks()
        parsed = self.parse_chunks(raw_chunks)
        logger.debug(
            "Parsed %d of %d chunk types", len(parsed), len(raw_chunks)
        )
        return parsed

    def __repr__(self) -> str:
        """Return string representation (hides key)."""
        return f"Parser(<{len(self._blob)} char blob>, {self._settings!r})"


def parse(
    blob: str | bytes,
    encryption_key: bytes,
    settings: ParserSettings | None = None,
) -> dict[str, list[Record]]:
    """Convenience function to parse a vault blob.

    Args:
        blob: Base64-encoded container text
        encryption_key: 32-byte AES key for encrypted fields
        settings: Parse settings (defaults if not given)

    Returns:
        Chunk id to list of decoded records
    """
    return Parser(blob, encryption_key, settings).parse()
