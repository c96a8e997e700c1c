"""Reading named, encoded items out of a chunk payload."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from vaultblob.decoding import Encoding, decode

from .chunks import read_item
from .stream import ByteStream


@dataclass(frozen=True, slots=True)
class ItemSpec:
    """One named item in a chunk schema.

    Attributes:
        name: Key the decoded value is stored under
        encoding: How the item payload is encoded (plain if not given)
    """

    name: str
    encoding: Encoding = Encoding.PLAIN

    def __post_init__(self) -> None:
        """Validate and normalize fields."""
        if not self.name:
            raise ValueError("Item name is required")
        # Frozen dataclass: normalize tag strings through object.__setattr__
        object.__setattr__(self, "encoding", Encoding.from_tag(self.encoding))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ItemSpec:
        """Build an item spec from configuration data.

        Args:
            data: Mapping with 'name' and an optional 'encoding' tag

        Raises:
            UnsupportedEncoding: If the encoding tag is unknown
        """
        return cls(name=data["name"], encoding=data.get("encoding"))


def _as_item_spec(spec: ItemSpec | Mapping[str, Any]) -> ItemSpec:
    if isinstance(spec, ItemSpec):
        return spec
    return ItemSpec.from_dict(spec)


def parse_item(
    stream: ByteStream,
    encoding: Encoding | str | None = None,
    key: bytes | None = None,
) -> str | bytes:
    """Read one item and decode its payload."""
    return decode(read_item(stream).payload, encoding, key)


def parse_itemized_chunk(
    stream: ByteStream,
    item_specs: Sequence[ItemSpec | Mapping[str, Any]],
    key: bytes | None = None,
) -> dict[str, str | bytes]:
    """Read and decode one item per spec, in order.

    Exactly len(item_specs) items are consumed. Anything after the last
    one stays in the stream.

    Args:
        stream: Stream positioned at the first item
        item_specs: Ordered ItemSpecs, or dicts with 'name' and 'encoding'
        key: Encryption key for AES-encoded items

    Returns:
        Mapping of item name to decoded value
    """
    specs = [_as_item_spec(spec) for spec in item_specs]
    return {spec.name: parse_item(stream, spec.encoding, key) for spec in specs}
