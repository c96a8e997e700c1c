"""Tests for itemized chunk reading."""

import base64

import pytest

from vaultblob.decoding import Encoding
from vaultblob.exceptions import StreamUnderflow, UnsupportedEncoding
from vaultblob.parsing import ByteStream, Item, ItemSpec, pack_item, parse_item, parse_itemized_chunk
from vaultblob.testing import encrypt_cbc_base64, itemized_payload

KEY = base64.b64decode("OfOUvVnQzB4v49sNh4+PdwIFb9Fr5+jVfWRTf+E2Ghg=")

STREAM_PADDING = b"This should be left in the stream!"
DECODED_PAYLOAD = b"0123456789"


class TestItemSpec:
    """Tests for ItemSpec construction."""

    def test_default_encoding_is_plain(self) -> None:
        """Test that an item without an encoding is plain."""
        assert ItemSpec("id").encoding is Encoding.PLAIN

    def test_string_tag_normalized(self) -> None:
        """Test that string tags are resolved to Encoding members."""
        assert ItemSpec("url", "hex").encoding is Encoding.HEX  # type: ignore[arg-type]

    def test_from_dict(self) -> None:
        """Test building a spec from configuration data."""
        spec = ItemSpec.from_dict({"name": "password", "encoding": "aes256"})
        assert spec == ItemSpec("password", Encoding.AES256)
        assert ItemSpec.from_dict({"name": "id"}) == ItemSpec("id")

    def test_from_dict_unknown_encoding(self) -> None:
        """Test that configuration with an unknown tag is rejected."""
        with pytest.raises(UnsupportedEncoding):
            ItemSpec.from_dict({"name": "id", "encoding": "rot13"})

    def test_name_required(self) -> None:
        """Test that an empty name is rejected."""
        with pytest.raises(ValueError, match="name is required"):
            ItemSpec("")


class TestParseItem:
    """Tests for parse_item."""

    def test_encodings(self) -> None:
        """Test one item under several encodings."""
        encoded_items = {
            None: Item(size=10, payload=b"0123456789"),
            "plain": Item(size=10, payload=b"0123456789"),
            "base64": Item(size=16, payload=b"MDEyMzQ1Njc4OQ=="),
            "hex": Item(size=20, payload=b"30313233343536373839"),
        }
        for encoding, item in encoded_items.items():
            stream = ByteStream(pack_item(item))
            assert parse_item(stream, encoding) == DECODED_PAYLOAD
            assert stream.at_end()

    def test_encrypted_item(self) -> None:
        """Test an AES-encrypted item decoded with the key."""
        value = encrypt_cbc_base64(DECODED_PAYLOAD, KEY)
        stream = ByteStream(itemized_payload([value]))
        assert parse_item(stream, Encoding.AES256, KEY) == DECODED_PAYLOAD


class TestParseItemizedChunk:
    """Tests for parse_itemized_chunk."""

    INFO = [
        ItemSpec("text_plain"),
        ItemSpec("text_base64", Encoding.BASE64),
    ]

    ITEMS = [
        Item(size=10, payload=b"0123456789"),
        Item(size=16, payload=b"MDEyMzQ1Njc4OQ=="),
    ]

    def test_decodes_named_items(self) -> None:
        """Test that each item is decoded and stored under its name."""
        stream = ByteStream(b"".join(pack_item(item) for item in self.ITEMS) + STREAM_PADDING)
        decoded = parse_itemized_chunk(stream, self.INFO)

        assert list(decoded) == ["text_plain", "text_base64"]
        for payload in decoded.values():
            assert payload == DECODED_PAYLOAD

    def test_trailing_bytes_left_in_stream(self) -> None:
        """Test that bytes after the last item stay unread."""
        stream = ByteStream(b"".join(pack_item(item) for item in self.ITEMS) + STREAM_PADDING)
        parse_itemized_chunk(stream, self.INFO)

        assert stream.remaining == len(STREAM_PADDING)
        assert stream.read_rest() == STREAM_PADDING

    def test_dict_specs(self) -> None:
        """Test that plain dict specs work like ItemSpecs."""
        stream = ByteStream(b"".join(pack_item(item) for item in self.ITEMS))
        decoded = parse_itemized_chunk(
            stream,
            [{"name": "text_plain"}, {"name": "text_base64", "encoding": "base64"}],
        )
        assert decoded == {"text_plain": DECODED_PAYLOAD, "text_base64": DECODED_PAYLOAD}

    def test_empty_schema_reads_nothing(self) -> None:
        """Test that no specs consume no bytes."""
        stream = ByteStream(STREAM_PADDING)
        assert parse_itemized_chunk(stream, []) == {}
        assert stream.position == 0

    def test_missing_item(self) -> None:
        """Test that a schema longer than the payload fails."""
        stream = ByteStream(pack_item(self.ITEMS[0]))
        with pytest.raises(StreamUnderflow):
            parse_itemized_chunk(stream, self.INFO)
