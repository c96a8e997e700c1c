"""Security-critical components for vaultblob.

This module contains the AES-256 decryption used for encrypted vault
fields. Key derivation is the caller's job; keys arrive here ready to use.

All code in this module should be audited carefully.
"""

from .crypto import (
    BLOCK_SIZE,
    IV_SIZE,
    KEY_SIZE,
    check_key,
    decrypt_aes256_cbc,
    decrypt_aes256_ecb,
    encrypt_aes256_cbc,
    encrypt_aes256_ecb,
)

__all__ = [
    "BLOCK_SIZE",
    "IV_SIZE",
    "KEY_SIZE",
    "check_key",
    "decrypt_aes256_cbc",
    "decrypt_aes256_ecb",
    "encrypt_aes256_cbc",
    "encrypt_aes256_ecb",
]
