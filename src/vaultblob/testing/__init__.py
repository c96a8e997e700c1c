"""Test utilities for vaultblob.

The decoder only ever reads blobs. These helpers do the opposite: they
encrypt field values and pack chunks into a base64 blob, so tests can
build fixtures without hand-written byte strings.

The helpers are for TESTING ONLY. ECB mode in particular has no place in
new data formats; it is supported here because existing vault exports
use it.

Example:
    >>> from vaultblob.testing import build_blob, itemized_payload
    >>> blob = build_blob([("EQDN", itemized_payload([b"1", b"6578616d706c65"]))])
"""

from __future__ import annotations

import base64
import os
from collections.abc import Iterable

from vaultblob.parsing.chunks import Chunk, Item, pack_chunk, pack_item
from vaultblob.security.crypto import IV_SIZE, encrypt_aes256_cbc, encrypt_aes256_ecb


def itemized_payload(values: Iterable[bytes]) -> bytes:
    """Pack values as consecutive items of a chunk payload."""
    return b"".join(pack_item(Item(size=len(value), payload=value)) for value in values)


def build_container(chunks: Iterable[tuple[str, bytes]]) -> bytes:
    """Pack (id, payload) pairs into raw container bytes, in order."""
    return b"".join(
        pack_chunk(Chunk(id=chunk_id, size=len(payload), payload=payload))
        for chunk_id, payload in chunks
    )


def build_blob(chunks: Iterable[tuple[str, bytes]]) -> str:
    """Pack (id, payload) pairs into base64 blob text."""
    return base64.b64encode(build_container(chunks)).decode("ascii")


def encrypt_ecb_base64(plaintext: bytes, key: bytes) -> bytes:
    """Encrypt with AES-256-ECB and base64-encode the ciphertext."""
    return base64.b64encode(encrypt_aes256_ecb(plaintext, key))


def encrypt_cbc_plain(
    plaintext: bytes, key: bytes, iv: bytes | None = None, *, marker: bool = True
) -> bytes:
    """Encrypt with AES-256-CBC and frame as [!] + IV + ciphertext.

    Args:
        plaintext: Value to encrypt
        key: 32-byte key
        iv: 16-byte IV (random if not given)
        marker: Prefix the '!' marker byte
    """
    if iv is None:
        iv = os.urandom(IV_SIZE)
    prefix = b"!" if marker else b""
    return prefix + iv + encrypt_aes256_cbc(plaintext, key, iv)


def encrypt_cbc_base64(plaintext: bytes, key: bytes, iv: bytes | None = None) -> bytes:
    """Encrypt with AES-256-CBC and frame as !<base64 IV>|<base64 ciphertext>."""
    if iv is None:
        iv = os.urandom(IV_SIZE)
    ciphertext = encrypt_aes256_cbc(plaintext, key, iv)
    return b"!" + base64.b64encode(iv) + b"|" + base64.b64encode(ciphertext)
