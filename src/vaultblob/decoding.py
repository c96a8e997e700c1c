"""Field value decoding.

Vault fields are stored under one of several reversible encodings. This
module maps an encoding tag to the matching decoder:

- plain: identity
- hex: hex text to bytes
- base64: standard base64 to bytes
- aes256_ecb_plain / aes256_ecb_base64: AES-256-ECB, raw or base64 ciphertext
- aes256_cbc_plain / aes256_cbc_base64: AES-256-CBC with an explicit IV
- aes256: picks one of the four AES variants from the shape of the value

Values can be str or bytes. Text is mapped to bytes one-to-one (latin-1),
so binary strings survive the trip. Decoded values are always bytes, with
one exception: an empty value given to an AES variant comes back as is.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
from enum import Enum

from vaultblob.exceptions import FormatError, UnsupportedEncoding
from vaultblob.security.crypto import (
    BLOCK_SIZE,
    IV_SIZE,
    decrypt_aes256_cbc,
    decrypt_aes256_ecb,
)

logger = logging.getLogger(__name__)

# Leading byte of IV-framed CBC values, in both raw and text form
CBC_MARKER = b"!"
CBC_SEPARATOR = b"|"

_BASE64_TEXT = re.compile(rb"\A[A-Za-z0-9+/]*={0,2}\Z")
_CBC_BASE64_TEXT = re.compile(rb"\A!([A-Za-z0-9+/]*={0,2})\|([A-Za-z0-9+/]*={0,2})\Z")


class Encoding(Enum):
    """Encodings a vault field can be stored under."""

    PLAIN = "plain"
    HEX = "hex"
    BASE64 = "base64"
    AES256 = "aes256"
    AES256_ECB_PLAIN = "aes256_ecb_plain"
    AES256_ECB_BASE64 = "aes256_ecb_base64"
    AES256_CBC_PLAIN = "aes256_cbc_plain"
    AES256_CBC_BASE64 = "aes256_cbc_base64"

    @property
    def is_encrypted(self) -> bool:
        """Whether decoding needs the encryption key."""
        return self.value.startswith("aes256")

    @classmethod
    def from_tag(cls, tag: Encoding | str | None) -> Encoding:
        """Resolve an encoding tag.

        Args:
            tag: An Encoding, its string value, or None for plain

        Returns:
            The corresponding Encoding

        Raises:
            UnsupportedEncoding: If the tag is not a known encoding
        """
        if tag is None:
            return cls.PLAIN
        if isinstance(tag, cls):
            return tag
        if isinstance(tag, str):
            try:
                return cls(tag)
            except ValueError:
                pass
        raise UnsupportedEncoding(tag)


def _to_bytes(value: str | bytes) -> bytes:
    if isinstance(value, str):
        try:
            return value.encode("latin-1")
        except UnicodeEncodeError as e:
            raise FormatError("Value contains characters outside the byte range") from e
    return bytes(value)


def _b64decode(data: bytes) -> bytes:
    try:
        return base64.b64decode(data, validate=True)
    except binascii.Error as e:
        raise FormatError("Invalid base64 data") from e


def _looks_like_base64(data: bytes) -> bool:
    return len(data) % 4 == 0 and _BASE64_TEXT.match(data) is not None


def decode_plain(value: str | bytes) -> str | bytes:
    """Return the value unchanged."""
    return value


def decode_hex(value: str | bytes) -> bytes:
    """Decode hex text to bytes.

    Raises:
        FormatError: If the value is not an even-length hex string
    """
    try:
        return binascii.unhexlify(_to_bytes(value))
    except binascii.Error as e:
        raise FormatError("Invalid hex data") from e


def decode_base64(value: str | bytes) -> bytes:
    """Decode standard base64 text to bytes.

    Raises:
        FormatError: If the value is not valid base64
    """
    return _b64decode(_to_bytes(value))


def decode_aes256_ecb_plain(value: str | bytes, key: bytes | None) -> str | bytes:
    """Decrypt raw AES-256-ECB ciphertext."""
    if not value:
        return value
    return decrypt_aes256_ecb(_to_bytes(value), key)


def decode_aes256_ecb_base64(value: str | bytes, key: bytes | None) -> str | bytes:
    """Decrypt base64-encoded AES-256-ECB ciphertext."""
    if not value:
        return value
    return decrypt_aes256_ecb(decode_base64(value), key)


def decode_aes256_cbc_plain(value: str | bytes, key: bytes | None) -> str | bytes:
    """Decrypt raw AES-256-CBC ciphertext framed with its IV.

    The value is either '!' + IV + ciphertext or IV + ciphertext. The two
    are told apart by length, since ciphertext is block aligned.
    """
    if not value:
        return value
    data = _to_bytes(value)
    if len(data) % BLOCK_SIZE == 1 and data.startswith(CBC_MARKER):
        data = data[len(CBC_MARKER) :]
    return decrypt_aes256_cbc(data[IV_SIZE:], key, data[:IV_SIZE])


def decode_aes256_cbc_base64(value: str | bytes, key: bytes | None) -> str | bytes:
    """Decrypt AES-256-CBC ciphertext in '!<base64 IV>|<base64 ciphertext>' form.

    Raises:
        FormatError: If the value does not follow the framing
    """
    if not value:
        return value
    match = _CBC_BASE64_TEXT.match(_to_bytes(value))
    if match is None:
        raise FormatError("Expected '!<base64 IV>|<base64 ciphertext>' framing")
    iv = _b64decode(match.group(1))
    ciphertext = _b64decode(match.group(2))
    return decrypt_aes256_cbc(ciphertext, key, iv)


def detect_aes256_variant(value: str | bytes) -> Encoding:
    """Guess which AES-256 variant an encrypted value uses.

    Checked in order:
    1. '!<base64>|<base64>' text is CBC/base64
    2. a leading '!' with length 1 (mod 16) is CBC/plain
    3. base64 text decoding to whole blocks is ECB/base64
    4. anything else is ECB/plain

    This is a heuristic. Random ECB ciphertext could in principle look like
    one of the text forms, but the odds are negligible for real data.
    """
    data = _to_bytes(value)
    if _CBC_BASE64_TEXT.match(data):
        return Encoding.AES256_CBC_BASE64
    if data.startswith(CBC_MARKER) and len(data) % BLOCK_SIZE == 1:
        return Encoding.AES256_CBC_PLAIN
    if data and _looks_like_base64(data):
        decoded_size = len(base64.b64decode(data))
        if decoded_size and decoded_size % BLOCK_SIZE == 0:
            return Encoding.AES256_ECB_BASE64
    return Encoding.AES256_ECB_PLAIN


def decode_aes256(value: str | bytes, key: bytes | None) -> str | bytes:
    """Decrypt an AES-256 value of any supported variant."""
    if not value:
        return value
    variant = detect_aes256_variant(value)
    logger.debug("Detected %s for %d-byte value", variant.value, len(value))
    return decode(value, variant, key)


def decode(
    value: str | bytes,
    encoding: Encoding | str | None = None,
    key: bytes | None = None,
) -> str | bytes:
    """Decode a field value.

    Args:
        value: Encoded value
        encoding: Encoding tag; None means plain
        key: 32-byte encryption key, needed by the AES variants only

    Returns:
        The decoded value

    Raises:
        UnsupportedEncoding: If the tag is unknown
        FormatError: If base64, hex or CBC framing is malformed
        DecryptionError: If AES decryption fails
    """
    encoding = Encoding.from_tag(encoding)

    if encoding is Encoding.PLAIN:
        return decode_plain(value)
    elif encoding is Encoding.HEX:
        return decode_hex(value)
    elif encoding is Encoding.BASE64:
        return decode_base64(value)
    elif encoding is Encoding.AES256:
        return decode_aes256(value, key)
    elif encoding is Encoding.AES256_ECB_PLAIN:
        return decode_aes256_ecb_plain(value, key)
    elif encoding is Encoding.AES256_ECB_BASE64:
        return decode_aes256_ecb_base64(value, key)
    elif encoding is Encoding.AES256_CBC_PLAIN:
        return decode_aes256_cbc_plain(value, key)
    elif encoding is Encoding.AES256_CBC_BASE64:
        return decode_aes256_cbc_base64(value, key)
    raise UnsupportedEncoding(encoding)
