"""AES-256 primitives for vault field decryption.

Thin wrappers around PyCryptodome's AES that:
- enforce the 32-byte key size up front
- strip PKCS#7 padding
- turn every library failure into DecryptionError, so no partially
  decrypted or garbage plaintext ever reaches the caller

The encrypt functions are the inverse operations, used to build fixtures.
"""

from __future__ import annotations

from Cryptodome.Cipher import AES
from Cryptodome.Util.Padding import pad, unpad

from vaultblob.exceptions import DecryptionError

KEY_SIZE = 32
BLOCK_SIZE = AES.block_size
IV_SIZE = AES.block_size


def check_key(key: bytes | None) -> bytes:
    """Validate an AES-256 key.

    Args:
        key: Caller-supplied encryption key

    Returns:
        The key as bytes

    Raises:
        DecryptionError: If the key is missing or not 32 bytes
    """
    if key is None:
        raise DecryptionError("Decryption failed - no encryption key provided")
    if len(key) != KEY_SIZE:
        raise DecryptionError(
            f"Decryption failed - key must be {KEY_SIZE} bytes, got {len(key)}"
        )
    return bytes(key)


def _check_ciphertext(ciphertext: bytes) -> None:
    if not ciphertext or len(ciphertext) % BLOCK_SIZE != 0:
        raise DecryptionError(
            f"Decryption failed - ciphertext length {len(ciphertext)} "
            f"is not a multiple of {BLOCK_SIZE}"
        )


def _strip_padding(data: bytes) -> bytes:
    try:
        return unpad(data, BLOCK_SIZE, style="pkcs7")
    except ValueError as e:
        raise DecryptionError("Decryption failed - invalid padding") from e


def decrypt_aes256_ecb(ciphertext: bytes, key: bytes | None) -> bytes:
    """Decrypt AES-256-ECB ciphertext and strip padding.

    Raises:
        DecryptionError: On bad key, misaligned ciphertext or bad padding
    """
    key = check_key(key)
    _check_ciphertext(ciphertext)
    cipher = AES.new(key, AES.MODE_ECB)
    return _strip_padding(cipher.decrypt(ciphertext))


def decrypt_aes256_cbc(ciphertext: bytes, key: bytes | None, iv: bytes) -> bytes:
    """Decrypt AES-256-CBC ciphertext and strip padding.

    Raises:
        DecryptionError: On bad key or IV, misaligned ciphertext or bad padding
    """
    key = check_key(key)
    if len(iv) != IV_SIZE:
        raise DecryptionError(
            f"Decryption failed - IV must be {IV_SIZE} bytes, got {len(iv)}"
        )
    _check_ciphertext(ciphertext)
    cipher = AES.new(key, AES.MODE_CBC, iv=iv)
    return _strip_padding(cipher.decrypt(ciphertext))


def encrypt_aes256_ecb(plaintext: bytes, key: bytes) -> bytes:
    """Pad and encrypt with AES-256-ECB."""
    if len(key) != KEY_SIZE:
        raise ValueError(f"Key must be {KEY_SIZE} bytes, got {len(key)}")
    cipher = AES.new(key, AES.MODE_ECB)
    return cipher.encrypt(pad(plaintext, BLOCK_SIZE, style="pkcs7"))


def encrypt_aes256_cbc(plaintext: bytes, key: bytes, iv: bytes) -> bytes:
    """Pad and encrypt with AES-256-CBC."""
    if len(key) != KEY_SIZE:
        raise ValueError(f"Key must be {KEY_SIZE} bytes, got {len(key)}")
    if len(iv) != IV_SIZE:
        raise ValueError(f"IV must be {IV_SIZE} bytes, got {len(iv)}")
    cipher = AES.new(key, AES.MODE_CBC, iv=iv)
    return cipher.encrypt(pad(plaintext, BLOCK_SIZE, style="pkcs7"))
