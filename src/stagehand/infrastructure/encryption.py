"""
stagehand.infrastructure.encryption - Sensitive Variable Encryption
=====================================================================

Sensitive variables are rendered into bootstrap scripts as AES-128-CBC
ciphertext. The script decrypts them at run time with a key it receives as a
launch argument, so the plaintext never sits in the wrapper file.

Wire Format (what the bootstrap templates expect):
    ciphertext → base64 (no line breaks) of AES-128-CBC/PKCS7 output
    iv         → 16 random bytes per value, hex-encoded
    key        → 16 random bytes per AesEncryption instance, hex-encoded

That is exactly what ``openssl enc -a -A -d -aes-128-cbc -nosalt -K <key>
-iv <iv>`` decrypts.
"""

from __future__ import annotations

import base64
import os
from typing import Optional

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes


KEY_SIZE_BYTES = 16
IV_SIZE_BYTES = 16


class AesEncryption:
    """Encrypts values under one random in-memory key.

    Example:
        >>> encryption = AesEncryption.random_key()
        >>> ciphertext, iv = encryption.encrypt("p@ssw0rd")
        >>> encryption.decrypt(ciphertext, iv)
        'p@ssw0rd'
    """

    def __init__(self, key: bytes) -> None:
        if len(key) != KEY_SIZE_BYTES:
            raise ValueError(f"AES-128 key must be {KEY_SIZE_BYTES} bytes, got {len(key)}")
        self._key = key

    @classmethod
    def random_key(cls) -> AesEncryption:
        return cls(os.urandom(KEY_SIZE_BYTES))

    @property
    def key_hex(self) -> str:
        return self._key.hex()

    def encrypt(self, value: str, iv: Optional[bytes] = None) -> tuple[str, str]:
        """Encrypt ``value``; returns ``(base64 ciphertext, hex iv)``."""
        iv = iv if iv is not None else os.urandom(IV_SIZE_BYTES)

        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        padded = padder.update(value.encode("utf-8")) + padder.finalize()

        encryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()

        return base64.b64encode(ciphertext).decode("ascii"), iv.hex()

    def decrypt(self, ciphertext: str, iv_hex: str) -> str:
        decryptor = Cipher(
            algorithms.AES(self._key),
            modes.CBC(bytes.fromhex(iv_hex)),
        ).decryptor()
        padded = decryptor.update(base64.b64decode(ciphertext)) + decryptor.finalize()

        unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
        return (unpadder.update(padded) + unpadder.finalize()).decode("utf-8")

    def __repr__(self) -> str:
        return "AesEncryption(key=********)"
