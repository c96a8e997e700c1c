"""Chunk schemas and the registry that applies them.

A schema says how to turn one chunk payload into a record. There are two
kinds:
- itemized: the payload is a sequence of items, each decoded under its own
  name and encoding
- whole-payload: the entire payload is a single value under one encoding

New chunk types are supported by registering a schema; the extractor and
codecs never change.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from vaultblob.decoding import Encoding, decode

from .chunks import CHUNK_ID_SIZE
from .itemized import ItemSpec, parse_itemized_chunk
from .stream import ByteStream

logger = logging.getLogger(__name__)

Record = dict[str, str | bytes] | str | bytes


@dataclass(frozen=True, slots=True)
class ChunkSchema:
    """How to decode the payload of one chunk type.

    Attributes:
        items: Ordered item specs for itemized chunks, None otherwise
        encoding: Encoding of the whole payload for non-itemized chunks
    """

    items: tuple[ItemSpec, ...] | None = None
    encoding: Encoding | None = None

    def __post_init__(self) -> None:
        """Validate that exactly one schema kind is described."""
        if self.items is not None:
            if self.encoding is not None:
                raise ValueError("A schema is either itemized or whole-payload, not both")
            object.__setattr__(self, "items", tuple(self.items))
        else:
            object.__setattr__(self, "encoding", Encoding.from_tag(self.encoding))

    @property
    def is_itemized(self) -> bool:
        """Whether the payload is a sequence of items."""
        return self.items is not None

    @classmethod
    def itemized(cls, *items: ItemSpec) -> ChunkSchema:
        """Create a schema reading the given items in order."""
        return cls(items=items)

    @classmethod
    def whole(cls, encoding: Encoding | str | None = None) -> ChunkSchema:
        """Create a schema decoding the entire payload as one value."""
        return cls(encoding=Encoding.from_tag(encoding))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ChunkSchema:
        """Build a schema from configuration data.

        Accepts {"items": [{"name": ..., "encoding": ...}, ...]} for
        itemized chunks or {"encoding": ...} for whole-payload chunks.

        Raises:
            UnsupportedEncoding: If any encoding tag is unknown
        """
        if "items" in data:
            return cls.itemized(*(ItemSpec.from_dict(item) for item in data["items"]))
        return cls.whole(data.get("encoding"))

    def parse(self, payload: bytes, key: bytes | None = None) -> Record:
        """Decode one chunk payload."""
        if self.items is not None:
            return parse_itemized_chunk(ByteStream(payload), self.items, key)
        return decode(payload, self.encoding, key)


def _check_chunk_id(chunk_id: str) -> None:
    if len(chunk_id) != CHUNK_ID_SIZE:
        raise ValueError(f"Chunk id must be {CHUNK_ID_SIZE} characters: {chunk_id!r}")


class ChunkRegistry:
    """Lookup table from chunk id to schema."""

    def __init__(
        self,
        schemas: Mapping[str, ChunkSchema] | None = None,
        *,
        read_only: bool = False,
    ) -> None:
        """Initialize registry.

        Args:
            schemas: Initial id to schema mapping
            read_only: Reject further registrations once populated
        """
        self._schemas: dict[str, ChunkSchema] = {}
        self._read_only = False
        for chunk_id, schema in (schemas or {}).items():
            self.register(chunk_id, schema)
        self._read_only = read_only

    @classmethod
    def from_dict(cls, data: Mapping[str, Mapping[str, Any]]) -> ChunkRegistry:
        """Build a registry from configuration data (id -> schema dict)."""
        return cls({chunk_id: ChunkSchema.from_dict(spec) for chunk_id, spec in data.items()})

    @property
    def read_only(self) -> bool:
        """Whether the registry rejects new registrations."""
        return self._read_only

    def register(self, chunk_id: str, schema: ChunkSchema, *, replace: bool = False) -> None:
        """Register the schema for a chunk id.

        Args:
            chunk_id: 4-character chunk id
            schema: Schema to apply to chunks with this id
            replace: Allow replacing an existing schema

        Raises:
            ValueError: If the id is malformed or already registered
            RuntimeError: If the registry is read-only
        """
        if self._read_only:
            raise RuntimeError("Registry is read-only; register on a copy() instead")
        _check_chunk_id(chunk_id)
        if chunk_id in self._schemas and not replace:
            raise ValueError(f"Chunk id already registered: {chunk_id!r}")
        self._schemas[chunk_id] = schema

    def get(self, chunk_id: str) -> ChunkSchema | None:
        """Return the schema for a chunk id, or None if unregistered."""
        return self._schemas.get(chunk_id)

    def ids(self) -> list[str]:
        """Return registered ids in registration order."""
        return list(self._schemas)

    def copy(self) -> ChunkRegistry:
        """Return a writable copy of this registry."""
        return ChunkRegistry(self._schemas)

    def __contains__(self, chunk_id: object) -> bool:
        return chunk_id in self._schemas

    def __iter__(self) -> Iterator[str]:
        return iter(self._schemas)

    def __len__(self) -> int:
        return len(self._schemas)

    def __repr__(self) -> str:
        return f"ChunkRegistry({self.ids()!r}, read_only={self._read_only})"

    def parse_chunk(self, chunk_id: str, payload: bytes, key: bytes | None = None) -> Record:
        """Decode one payload with the schema registered for its id.

        Raises:
            KeyError: If no schema is registered for the id
        """
        schema = self._schemas.get(chunk_id)
        if schema is None:
            raise KeyError(f"No schema registered for chunk id {chunk_id!r}")
        return schema.parse(payload, key)

    def parse_chunks(
        self,
        raw_chunks: Mapping[str, Iterable[bytes]],
        key: bytes | None = None,
        *,
        keep_unregistered: bool = False,
    ) -> dict[str, list[Record]]:
        """Decode every payload of every registered chunk id.

        Each id maps to one record per input payload, in input order.
        Unregistered ids are dropped, or passed through as raw payloads
        when keep_unregistered is set.

        Args:
            raw_chunks: Chunk id to payload list, as from extract_chunks
            key: Encryption key for AES-encoded fields
            keep_unregistered: Keep payloads of unregistered ids unparsed

        Returns:
            Chunk id to list of decoded records
        """
        parsed: dict[str, list[Record]] = {}
        for chunk_id, payloads in raw_chunks.items():
            schema = self._schemas.get(chunk_id)
            if schema is None:
                if keep_unregistered:
                    parsed[chunk_id] = list(payloads)
                else:
                    logger.debug("Skipping unregistered chunk id %r", chunk_id)
                continue
            parsed[chunk_id] = [schema.parse(payload, key) for payload in payloads]
        return parsed


# Account record, one ACCT chunk per vault entry
ACCOUNT_ITEMS = (
    ItemSpec("id"),
    ItemSpec("name", Encoding.AES256),
    ItemSpec("group", Encoding.AES256),
    ItemSpec("url", Encoding.HEX),
    ItemSpec("extra", Encoding.AES256),
    ItemSpec("favorite"),
    ItemSpec("shared_from_id"),
    ItemSpec("username", Encoding.AES256),
    ItemSpec("password", Encoding.AES256),
    ItemSpec("password_protected"),
    ItemSpec("generated_password"),
    ItemSpec("sn"),
    ItemSpec("last_touched"),
    ItemSpec("auto_login"),
    ItemSpec("never_autofill"),
    ItemSpec("realm_data"),
    ItemSpec("fiid"),
    ItemSpec("custom_js"),
    ItemSpec("submit_id"),
    ItemSpec("captcha_id"),
    ItemSpec("urid"),
    ItemSpec("basic_authorization"),
    ItemSpec("method"),
    ItemSpec("action", Encoding.HEX),
    ItemSpec("group_id"),
    ItemSpec("deleted"),
    ItemSpec("attach_key"),
    ItemSpec("attach_present"),
    ItemSpec("individual_share"),
    ItemSpec("unknown1"),
)

# Equivalent domain, groups domains that share credentials
EQUIVALENT_DOMAIN_ITEMS = (
    ItemSpec("id"),
    ItemSpec("domain", Encoding.HEX),
)

DEFAULT_SCHEMAS: dict[str, ChunkSchema] = {
    "LPAV": ChunkSchema.whole(Encoding.PLAIN),
    "ENCU": ChunkSchema.whole(Encoding.AES256),
    "NMAC": ChunkSchema.whole(Encoding.PLAIN),
    "ACCT": ChunkSchema.itemized(*ACCOUNT_ITEMS),
    "EQDN": ChunkSchema.itemized(*EQUIVALENT_DOMAIN_ITEMS),
    "ENDM": ChunkSchema.whole(Encoding.PLAIN),
}

DEFAULT_REGISTRY = ChunkRegistry(DEFAULT_SCHEMAS, read_only=True)
